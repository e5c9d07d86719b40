import os

from config import logging_config

SECRET_KEY = "test-secret"

STORAGE_BACKEND = os.getenv("STORAGE_BACKEND", "mysql")

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "school_attendance_test"),
}

MONGO_CONFIG = {
    "uri": os.getenv("MONGO_URI", "mongodb://localhost:27017"),
    "database": os.getenv("MONGO_DB", "school_attendance_test"),
}

TIER_GOOD_MIN = 90
TIER_AVERAGE_MIN = 75

DEBUG = False
TESTING = True

AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "0")))

LOGGING = logging_config("WARNING")
