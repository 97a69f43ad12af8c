import os
from datetime import timedelta


class BaseConfig:
    # --- Secrets
    SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-change-me")

    # --- Backend (Supabase: auth + notes table)
    SUPABASE_URL = os.getenv("SUPABASE_URL", "http://localhost:54321")
    SUPABASE_KEY = os.getenv("SUPABASE_ANON_KEY", "")
    NOTES_TABLE = os.getenv("NOTES_TABLE", "notes")

    # Base URL used to build the email confirmation link
    APP_URL = os.getenv("APP_URL", "http://localhost:5000").rstrip("/")

    # --- Sessions
    # Flask's signed cookie carries the backend session between requests.
    SESSION_COOKIE_NAME = "notes_auth"
    SESSION_COOKIE_HTTPONLY = True
    SESSION_COOKIE_SAMESITE = "Lax"
    # "Remember me" cookie: JSON payload of the backend session
    REMEMBER_COOKIE_NAME = "session"
    REMEMBER_COOKIE_MAX_AGE = int(timedelta(days=30).total_seconds())

    # --- CORS (strings CSV -> split in create_app)
    CORS_ORIGINS = os.getenv("CORS_ORIGINS", "*")
    CORS_ALLOW_HEADERS = os.getenv("CORS_ALLOW_HEADERS", "Content-Type,Authorization")
    CORS_EXPOSE_HEADERS = os.getenv("CORS_EXPOSE_HEADERS", "Content-Type")

    # --- Rate limit
    RATELIMIT_DEFAULT = os.getenv("RATELIMIT_DEFAULT", None)
    RATELIMIT_STORAGE_URI = os.getenv("RATELIMIT_STORAGE_URI", "memory://")  # prod: redis://redis:6379/0
    RATELIMIT_AUTH_LOGIN = os.getenv("RATELIMIT_AUTH_LOGIN", "5/minute")
    RATELIMIT_AUTH_REGISTER = os.getenv("RATELIMIT_AUTH_REGISTER", "10/hour")
    RATELIMIT_NOTES = os.getenv("RATELIMIT_NOTES", "60/minute")

    # --- HTTP security
    MAX_CONTENT_LENGTH = int(os.getenv("MAX_CONTENT_LENGTH", "1000000"))  # ~1 MB
    ENFORCE_HTTPS = os.getenv("ENFORCE_HTTPS", "false").lower() == "true"


class DevConfig(BaseConfig):
    DEBUG = True


class ProdConfig(BaseConfig):
    DEBUG = False
    SESSION_COOKIE_SECURE = True


class TestConfig(BaseConfig):
    TESTING = True
    SECRET_KEY = "test-secret"
    SUPABASE_KEY = "test-anon-key"
    APP_URL = "http://notes.test"
    RATELIMIT_ENABLED = False
