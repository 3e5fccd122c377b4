import os

# No default: the app refuses to start without a strong key.
SECRET_KEY = os.getenv("SECRET_KEY", "")

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "calendar_admin"),
}

DEBUG = False
ENVIRONMENT = "production"
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "0")))
AUTO_SEED_DB = bool(int(os.getenv("AUTO_SEED_DB", "0")))

RATE_LIMIT_ENABLED = bool(int(os.getenv("RATE_LIMIT_ENABLED", "1")))
RATE_LIMIT_STORAGE_URL = os.getenv("RATE_LIMIT_STORAGE_URL", "memory://")

WRITE_POLICY = os.getenv("WRITE_POLICY", "admin_only")

SESSION_COOKIE_SECURE = True

# Number of reverse proxies in front of the app. Only then is X-Forwarded-For
# trusted (right-most hops); 0 keys rate limits on the socket address.
TRUSTED_PROXY_COUNT = int(os.getenv("TRUSTED_PROXY_COUNT", "0"))
