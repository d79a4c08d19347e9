import os

from config import email_config_from_env, env_float

SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key")
JWT_SECRET_KEY = os.getenv("JWT_SECRET_KEY", "dev-jwt-secret-key")
JWT_ACCESS_TOKEN_HOURS = int(os.getenv("JWT_ACCESS_TOKEN_HOURS", "24"))

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "qr_attendance"),
}

# Office geofence; leave coordinates unset to trust every location
OFFICE_LATITUDE = env_float("OFFICE_LATITUDE")
OFFICE_LONGITUDE = env_float("OFFICE_LONGITUDE")
MAX_DISTANCE_METERS = float(os.getenv("MAX_DISTANCE_METERS", "100"))

QR_TOKEN_TTL_MS = int(os.getenv("QR_TOKEN_TTL_MS", "30000"))

# Empty host: emails are only logged
EMAIL_CONFIG = email_config_from_env()
APP_BASE_URL = os.getenv("APP_BASE_URL", "http://localhost:5000")

LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG")
DEBUG = True

# If enabled, app will apply schema.sql on startup (idempotent: CREATE IF NOT EXISTS)
AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "1")))
# Optional: also create the default admin on startup
AUTO_SEED_DB = bool(int(os.getenv("AUTO_SEED_DB", "0")))
