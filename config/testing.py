import os

SECRET_KEY = "test-secret"
JWT_SECRET_KEY = "test-jwt-secret-key-with-enough-length"
JWT_ACCESS_TOKEN_HOURS = 1

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "qr_attendance_test"),
}

OFFICE_LATITUDE = 0.0
OFFICE_LONGITUDE = 0.0
MAX_DISTANCE_METERS = 100.0

QR_TOKEN_TTL_MS = 30000

EMAIL_CONFIG = {"host": ""}
APP_BASE_URL = "http://testserver"

LOG_LEVEL = "WARNING"
DEBUG = False
TESTING = True

AUTO_INIT_DB = False
AUTO_SEED_DB = False
