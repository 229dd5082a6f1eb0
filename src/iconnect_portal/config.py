"""Application configuration and constants"""
import os
from datetime import timedelta
from dotenv import load_dotenv

load_dotenv()


def get_session_secret():
    """Return the HMAC key used to sign session cookies. A missing or empty
    SESSION_SECRET is a hard error.
    """
    secret = os.getenv("SESSION_SECRET", "").strip()
    if not secret:
        raise RuntimeError(
            "SESSION_SECRET is not set. "
            "Configure a long random value before starting the portal."
        )
    return secret


def _split_origins(raw):
    return [origin.strip() for origin in raw.split(",") if origin.strip()]


# Environment
APP_ENV = os.getenv("APP_ENV", "development")
IS_PRODUCTION = APP_ENV == "production"

# Database (Supabase Postgres connection string in production)
DATABASE_URL = os.getenv("DATABASE_URL")

# Sessions
SESSION_SECRET = get_session_secret()
SESSION_COOKIE_NAME = "iconnect.sid"
SESSION_MAX_AGE = timedelta(days=7)

# Passwords and login lockout
PASSWORD_MIN_LENGTH = 8
BCRYPT_ROUNDS = 12
MAX_FAILED_LOGINS = 5
LOCKOUT_DURATION = timedelta(minutes=15)
RESET_TOKEN_TTL = timedelta(hours=1)

# Zoom server-to-server OAuth
ZOOM_ACCOUNT_ID = os.getenv("ZOOM_ACCOUNT_ID")
ZOOM_CLIENT_ID = os.getenv("ZOOM_CLIENT_ID")
ZOOM_CLIENT_SECRET = os.getenv("ZOOM_CLIENT_SECRET")
ZOOM_TOKEN_REFRESH_MARGIN = 60  # seconds

# Mailgun
MAILGUN_API_KEY = os.getenv("MAILGUN_API_KEY")
MAILGUN_DOMAIN = os.getenv("MAILGUN_DOMAIN")
MAILGUN_FROM_EMAIL = os.getenv("MAILGUN_FROM_EMAIL")
MAILGUN_API_BASE = "https://api.eu.mailgun.net/v3"

# CORS Origins
ALLOWED_ORIGINS = _split_origins(
    os.getenv("ALLOWED_ORIGINS", "http://localhost:5173,http://127.0.0.1:5173")
)
