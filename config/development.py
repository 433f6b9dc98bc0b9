import os

SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key")

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "meal_tracker"),
}

# HMAC key for meal QR tokens
QR_SECRET = os.getenv("QR_SECRET", "dev-qr-secret-change-me-in-production")
QR_TOKEN_TTL_MINUTES = int(os.getenv("QR_TOKEN_TTL_MINUTES", "30"))

# Max scans per device inside the sliding window
SCAN_RATE_LIMIT = int(os.getenv("SCAN_RATE_LIMIT", "10"))
SCAN_RATE_WINDOW_MINUTES = int(os.getenv("SCAN_RATE_WINDOW_MINUTES", "5"))

LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG")
DEBUG = True

# If enabled, app will apply schema.sql on startup (idempotent: CREATE IF NOT EXISTS)
AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "1")))
# Optional: also seed demo users on startup
AUTO_SEED_DB = bool(int(os.getenv("AUTO_SEED_DB", "0")))
