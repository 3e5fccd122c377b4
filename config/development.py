import os

SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key")

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "calendar_admin"),
}

DEBUG = True
ENVIRONMENT = "development"
LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG")

# If enabled, app will apply schema.sql on startup (idempotent: CREATE IF NOT EXISTS)
AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "1")))
# Optional: also seed demo users and permissions on startup
AUTO_SEED_DB = bool(int(os.getenv("AUTO_SEED_DB", "0")))

RATE_LIMIT_ENABLED = bool(int(os.getenv("RATE_LIMIT_ENABLED", "1")))
# memory:// keeps counters per process; redis://host:6379/0 shares them.
RATE_LIMIT_STORAGE_URL = os.getenv("RATE_LIMIT_STORAGE_URL", "memory://")

# admin_only | module_level
WRITE_POLICY = os.getenv("WRITE_POLICY", "admin_only")

SESSION_COOKIE_SECURE = False

# Number of reverse proxies in front of the app. Only then is X-Forwarded-For
# trusted (right-most hops); 0 keys rate limits on the socket address.
TRUSTED_PROXY_COUNT = int(os.getenv("TRUSTED_PROXY_COUNT", "0"))
