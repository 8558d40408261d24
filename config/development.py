import os

SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key")

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "dojo_portal"),
}

# Session cookie (signed token)
AUTH_COOKIE_NAME = os.getenv("AUTH_COOKIE_NAME", "token")
AUTH_COOKIE_SECURE = bool(int(os.getenv("AUTH_COOKIE_SECURE", "0")))
SESSION_DAYS = int(os.getenv("SESSION_DAYS", "15"))

# Static secret for the first-run admin provisioning endpoint (X-TOKEN header)
SETUP_TOKEN = os.getenv("SETUP_TOKEN", "")

DEBUG = True
LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG")
LOG_DIR = os.getenv("LOG_DIR", "logs")

# If enabled, app will apply schema.sql on startup (idempotent: CREATE IF NOT EXISTS)
AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "1")))
# Optional: also seed demo users on startup
AUTO_SEED_DB = bool(int(os.getenv("AUTO_SEED_DB", "0")))
