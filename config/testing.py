import os

SECRET_KEY = "test-secret"

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "dojo_portal_test"),
}

AUTH_COOKIE_NAME = "token"
AUTH_COOKIE_SECURE = False
SESSION_DAYS = 15

SETUP_TOKEN = "test-setup-token"

DEBUG = False
TESTING = True
LOG_LEVEL = "WARNING"
LOG_DIR = None

AUTO_INIT_DB = False
AUTO_SEED_DB = False
