"""Application configuration using Pydantic Settings.

Environment variables are loaded from .env files and system environment.
Signing secrets have no defaults: the service refuses to start without them.
"""

from functools import lru_cache
from typing import Annotated, Any

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

MIN_SECRET_LENGTH = 32


class Settings(BaseSettings):
    """Application settings.

    All settings can be overridden via environment variables.
    Environment variables take precedence over .env file values.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    # Application
    PROJECT_NAME: str = "Account Service"
    DEBUG: bool = False
    API_V1_PREFIX: str = "/api/v1"

    # CORS
    ALLOWED_ORIGINS: Annotated[list[str], NoDecode] = ["http://localhost:3000"]

    @field_validator("ALLOWED_ORIGINS", mode="before")
    @classmethod
    def parse_allowed_origins(cls, v: Any) -> list[str]:
        """Parse ALLOWED_ORIGINS from comma-separated string or list."""
        if isinstance(v, str):
            return [origin.strip() for origin in v.split(",") if origin.strip()]
        if isinstance(v, list):
            return v
        return ["http://localhost:3000"]

    # Database
    DATABASE_URL: str = "sqlite+aiosqlite:///./accounts.db"
    DATABASE_POOL_SIZE: int = 20
    DATABASE_MAX_OVERFLOW: int = 30
    DATABASE_AUTO_CREATE: bool = False

    # Token signing (required)
    JWT_SECRET: str
    REFRESH_TOKEN_SECRET: str
    JWT_ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 30
    REFRESH_TOKEN_EXPIRE_DAYS: int = 90

    # One-time action tokens
    EMAIL_VERIFICATION_EXPIRE_HOURS: int = 24
    PASSWORD_RESET_EXPIRE_MINUTES: int = 10

    # Password hashing work factor
    BCRYPT_ROUNDS: int = 12

    # Refresh token cookie
    REFRESH_COOKIE_NAME: str = "refreshToken"
    REFRESH_COOKIE_SECURE: bool = True

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_FILE: str | None = None
    LOG_JSON_FORMAT: bool = True

    @field_validator("BCRYPT_ROUNDS")
    @classmethod
    def validate_bcrypt_rounds(cls, v: int) -> int:
        """bcrypt accepts cost factors 4 through 31."""
        if not 4 <= v <= 31:
            raise ValueError("BCRYPT_ROUNDS must be between 4 and 31")
        return v

    @model_validator(mode="after")
    def validate_signing_secrets(self) -> "Settings":
        """Reject secrets that would make token kinds interchangeable or weak."""
        if self.JWT_SECRET == self.REFRESH_TOKEN_SECRET:
            raise ValueError("JWT_SECRET and REFRESH_TOKEN_SECRET must differ")
        if not self.DEBUG:
            for name in ("JWT_SECRET", "REFRESH_TOKEN_SECRET"):
                if len(getattr(self, name)) < MIN_SECRET_LENGTH:
                    raise ValueError(
                        f"{name} must be at least {MIN_SECRET_LENGTH} characters"
                    )
        return self


@lru_cache
def get_settings() -> Settings:
    """Get cached application settings.

    Raises pydantic's ValidationError when a required secret is missing,
    which aborts startup.
    """
    return Settings()


# Global settings instance
settings = get_settings()
