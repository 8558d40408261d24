import os

SECRET_KEY = os.getenv("SECRET_KEY", "please-set-SECRET_KEY")

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "dojo_portal"),
}

AUTH_COOKIE_NAME = os.getenv("AUTH_COOKIE_NAME", "token")
AUTH_COOKIE_SECURE = bool(int(os.getenv("AUTH_COOKIE_SECURE", "1")))
SESSION_DAYS = int(os.getenv("SESSION_DAYS", "15"))

SETUP_TOKEN = os.getenv("SETUP_TOKEN", "")

DEBUG = False
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
LOG_DIR = os.getenv("LOG_DIR", "logs")

AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "0")))
AUTO_SEED_DB = bool(int(os.getenv("AUTO_SEED_DB", "0")))
