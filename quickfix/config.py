import warnings

from pydantic import model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

INSECURE_DEV_SECRET = "INSECURE-DEV-KEY-CHANGE-IN-PRODUCTION"  # noqa: S105


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # Runtime
    ENVIRONMENT: str = "development"
    LOG_LEVEL: str = "INFO"
    API_PREFIX: str = ""
    HOST: str = "0.0.0.0"
    PORT: int = 5000
    FRONTEND_URL: str = "http://localhost:3000"

    # Database
    DATABASE_URL: str = "sqlite+aiosqlite:///./quickfix.db"
    DB_ECHO: bool = False
    AUTO_CREATE_TABLES: bool = True

    # Tokens
    JWT_SECRET: str = ""
    JWT_ALGORITHM: str = "HS256"
    TOKEN_TTL_HOURS: int = 24

    # Rate limiting (disabled when REDIS_URL is empty)
    REDIS_URL: str = ""
    RATE_LIMIT_REQUESTS: int = 100
    RATE_LIMIT_WINDOW_SECONDS: int = 15 * 60

    # Domain events (disabled when RABBIT_URL is empty)
    RABBIT_URL: str = ""

    # Email (disabled when SMTP_HOST is empty)
    SMTP_HOST: str = ""
    SMTP_PORT: int = 587
    SMTP_USER: str = ""
    SMTP_PASSWORD: str = ""
    SMTP_FROM: str = "noreply@quickfix.com"
    SUPPORT_PHONE: str = "(555) 123-4567"
    SUPPORT_EMAIL: str = "support@quickfix.com"

    # Booking lifecycle / auth behavior
    ENFORCE_STATUS_TRANSITIONS: bool = False
    GENERIC_AUTH_ERRORS: bool = False

    # Bootstrap admin
    ADMIN_USERNAME: str = "admin"
    ADMIN_EMAIL: str = "admin@quickfix.com"
    ADMIN_PASSWORD: str = "admin123456"

    @model_validator(mode="after")
    def _check_secret(self):
        if not self.JWT_SECRET:
            if self.is_production:
                raise ValueError("JWT_SECRET must be set in production")
            warnings.warn(
                "JWT_SECRET not set! Using insecure default - DO NOT USE IN PRODUCTION",
                RuntimeWarning,
                stacklevel=2,
            )
            self.JWT_SECRET = INSECURE_DEV_SECRET
        return self

    @property
    def is_production(self) -> bool:
        return self.ENVIRONMENT.lower() == "production"

    @property
    def is_development(self) -> bool:
        return self.ENVIRONMENT.lower() == "development"

    @property
    def email_enabled(self) -> bool:
        return bool(self.SMTP_HOST)

    @property
    def events_enabled(self) -> bool:
        return bool(self.RABBIT_URL)

    @property
    def rate_limit_enabled(self) -> bool:
        return bool(self.REDIS_URL)
