import os

SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key")

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "attendees_db"),
}

# Calendar used for "today" by the auto sign-out policy and the history view.
TIMEZONE = os.getenv("TIMEZONE", "UTC")

HISTORY_PAGE_SIZE = int(os.getenv("HISTORY_PAGE_SIZE", "200"))
REFRESH_SECONDS = int(os.getenv("REFRESH_SECONDS", "10"))

DEBUG = True
LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG")

# If enabled, app will apply schema.sql on startup (idempotent: CREATE IF NOT EXISTS)
AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "1")))
# Optional: also seed a demo course on startup
AUTO_SEED_DB = bool(int(os.getenv("AUTO_SEED_DB", "0")))
