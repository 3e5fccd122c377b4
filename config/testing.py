import os

SECRET_KEY = "test-secret"

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "calendar_admin_test"),
}

DEBUG = False
TESTING = True
ENVIRONMENT = "testing"
LOG_LEVEL = os.getenv("LOG_LEVEL", "WARNING")

AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "0")))
AUTO_SEED_DB = bool(int(os.getenv("AUTO_SEED_DB", "0")))

RATE_LIMIT_ENABLED = True
RATE_LIMIT_STORAGE_URL = "memory://"

WRITE_POLICY = os.getenv("WRITE_POLICY", "admin_only")

SESSION_COOKIE_SECURE = False

TRUSTED_PROXY_COUNT = 1
