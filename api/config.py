"""
Environment-aware configuration.
Values come from the process environment (and .env via python-dotenv).
The database URL is handled by DBStorage.
"""
import os
from dotenv import load_dotenv
from datetime import timedelta

load_dotenv()  # Read .env if present


def _flag(name: str, default: str = "0") -> bool:
    return os.getenv(name, default).lower() in ("1", "true", "yes")


class BaseConfig:
    SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key")  # Set a strong key in production
    DEBUG = False
    TESTING = False
    # CORS: in dev we usually allow '*', in prod supply a comma-separated list in env
    CORS_ORIGINS = os.getenv("CORS_ORIGINS", "*")
    # Keep a copy of env for visibility
    APP_ENV = os.getenv("APP_ENV", "dev")
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

    # Token signing; no default on purpose, create_app() fails fast without it
    JWT_SECRET = os.getenv("JWT_SECRET")
    JWT_ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")
    JWT_ISSUER = os.getenv("JWT_ISSUER", "blog-api")
    ALLOW_INSECURE_SECRET = _flag("ALLOW_INSECURE_SECRET")
    ACCESS_TOKEN_EXPIRES = timedelta(seconds=int(os.getenv("ACCESS_TOKEN_EXPIRES_SECONDS", "900")))
    REFRESH_TOKEN_EXPIRES = timedelta(seconds=int(os.getenv("REFRESH_TOKEN_EXPIRES_SECONDS", "604800")))
    # Ceiling for revoked tokens whose expiry is unknown
    REVOCATION_DEFAULT_TTL = timedelta(days=30)

    # Fernet key for stored emails; derived from JWT_SECRET when unset
    ENCRYPTION_KEY = os.getenv("ENCRYPTION_KEY")

    # Flask-Limiter: one budget per client shared by the four auth routes
    AUTH_RATE_LIMIT = os.getenv("AUTH_RATE_LIMIT", "10 per 15 minutes")
    RATELIMIT_ENABLED = _flag("RATELIMIT_ENABLED", "1")
    RATELIMIT_STORAGE_URI = os.getenv("RATELIMIT_STORAGE_URI", "memory://")
    RATELIMIT_HEADERS_ENABLED = True


class DevelopmentConfig(BaseConfig):
    DEBUG = True


class TestingConfig(BaseConfig):
    TESTING = True
    DEBUG = False
    APP_ENV = "test"
    JWT_SECRET = "test-secret-key-with-enough-length-for-hs256"
    ENCRYPTION_KEY = None
    LOG_LEVEL = "WARNING"
    # Suites register many users per test; the limit test lowers this itself
    AUTH_RATE_LIMIT = "1000 per 15 minutes"


class ProductionConfig(BaseConfig):
    DEBUG = False
    ALLOW_INSECURE_SECRET = False


def get_config(name: str | None):
    """
    Select config class.
    - If name is provided, choose by name.
    - Else choose based on APP_ENV (dev/test/prod).
    """
    if name:
        name = name.lower()
    env = (name or os.getenv("APP_ENV", "dev")).lower()
    if env in ["prod", "production"]:
        return ProductionConfig
    if env in ["test", "testing"]:
        return TestingConfig
    return DevelopmentConfig
