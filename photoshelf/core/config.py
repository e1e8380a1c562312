"""
Runtime configuration.

Values come from environment variables or a ``.env`` file (names are
case-sensitive). ``settings`` is resolved once at import; tests set the
environment before importing the application.
"""

import logging
import secrets
from functools import lru_cache
from pathlib import Path
from typing import List, Optional

from pydantic import computed_field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)


def _split_csv(value: str) -> List[str]:
    return [item.strip() for item in value.split(",") if item.strip()]


class Settings(BaseSettings):
    """PhotoShelf settings.

    Database: ``DATABASE_URL`` wins; clear it to build an asyncpg URI from
    the ``POSTGRES_*`` values.

    Uploads: originals go to ``UPLOAD_DIR``, thumbnails (fitted inside
    ``THUMBNAIL_SIZE`` pixels) to ``UPLOAD_DIR/thumbnails``. Files larger
    than ``MAX_FILE_SIZE`` bytes or outside ``ALLOWED_MIME_TYPES`` are
    refused.

    Auth: tokens are signed with ``JWT_SECRET_KEY`` and last
    ``JWT_EXPIRATION_HOURS``. ``AUTH_RATE_LIMIT`` is a slowapi limit string
    applied to login and registration.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
    )

    # Application
    APP_ENV: str = "development"
    DEBUG: bool = False
    API_PREFIX: str = "/api"

    # Database
    DATABASE_URL: Optional[str] = "sqlite+aiosqlite:///./photoshelf.db"
    POSTGRES_USER: str = "postgres"
    POSTGRES_PASSWORD: str = "postgres"
    POSTGRES_DB: str = "photoshelf"
    POSTGRES_HOST: str = "localhost"
    POSTGRES_PORT: int = 5432

    # CORS
    CORS_ORIGINS: str = "http://localhost:5173,http://localhost:3000"

    # Auth
    JWT_SECRET_KEY: str = ""
    JWT_ALGORITHM: str = "HS256"
    JWT_EXPIRATION_HOURS: int = 24 * 7

    # Uploads
    UPLOAD_DIR: str = "./uploads"
    MAX_FILE_SIZE: int = 10 * 1024 * 1024
    THUMBNAIL_SIZE: int = 300
    ALLOWED_MIME_TYPES: str = "image/jpeg,image/jpg,image/png,image/gif,image/webp"

    # Rate limiting
    RATE_LIMIT_ENABLED: bool = True
    AUTH_RATE_LIMIT: str = "20/minute"

    @model_validator(mode="after")
    def ensure_jwt_secret(self) -> "Settings":
        if not self.JWT_SECRET_KEY:
            self.JWT_SECRET_KEY = secrets.token_urlsafe(32)
            logger.warning("JWT_SECRET_KEY not set! Generated a temporary key.")
            logger.warning("Tokens will not survive a restart; set JWT_SECRET_KEY.")
        return self

    @computed_field  # type: ignore[misc]
    @property
    def SQLALCHEMY_DATABASE_URI(self) -> str:
        if self.DATABASE_URL:
            return self.DATABASE_URL
        return (
            f"postgresql+asyncpg://{self.POSTGRES_USER}:{self.POSTGRES_PASSWORD}"
            f"@{self.POSTGRES_HOST}:{self.POSTGRES_PORT}/{self.POSTGRES_DB}"
        )

    @property
    def cors_origins_list(self) -> List[str]:
        return _split_csv(self.CORS_ORIGINS)

    @property
    def allowed_mime_types(self) -> List[str]:
        return _split_csv(self.ALLOWED_MIME_TYPES)

    @property
    def upload_path(self) -> Path:
        """``UPLOAD_DIR`` resolved against the working directory."""
        return Path(self.UPLOAD_DIR).resolve()


@lru_cache
def get_settings() -> Settings:
    return Settings()


settings = get_settings()
