import os

from config import logging_config

SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key")

# "mysql" or "mongo"
STORAGE_BACKEND = os.getenv("STORAGE_BACKEND", "mysql")

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "school_attendance"),
}

MONGO_CONFIG = {
    "uri": os.getenv("MONGO_URI", "mongodb://localhost:27017"),
    "database": os.getenv("MONGO_DB", "school_attendance"),
}

TIER_GOOD_MIN = int(os.getenv("TIER_GOOD_MIN", "90"))
TIER_AVERAGE_MIN = int(os.getenv("TIER_AVERAGE_MIN", "75"))

DEBUG = True

# If enabled, app applies schema.sql (or Mongo indexes) on startup; idempotent.
AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "1")))

LOGGING = logging_config(os.getenv("LOG_LEVEL", "DEBUG"))
