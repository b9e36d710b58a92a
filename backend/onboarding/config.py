"""Application settings and configuration helpers."""
from functools import lru_cache
import os
from pathlib import Path

from pydantic import BaseModel, Field, field_validator
from dotenv import load_dotenv
from sqlalchemy import URL

load_dotenv()

DEFAULT_UPLOAD_DIR = Path(__file__).resolve().parents[1] / "uploads"


class Settings(BaseModel):
    """Runtime configuration loaded from environment variables."""

    host: str = Field(default="0.0.0.0", alias="HOST")
    port: int = Field(default=3000, alias="PORT")
    frontend_url: str | None = Field(default=None, alias="FRONTEND_URL")
    cors_origins: list[str] = Field(default_factory=list, alias="CORS_ORIGINS")

    database_url: str | None = Field(default=None, alias="DATABASE_URL")
    db_host: str = Field(default="postgres", alias="DB_HOST")
    db_port: int = Field(default=5432, alias="DB_PORT")
    db_user: str = Field(default="postgres", alias="DB_USER")
    db_password: str = Field(default="admin123", alias="DB_PASSWORD")
    db_name: str = Field(default="onboarding", alias="DB_NAME")
    db_reconnect_delay: float = Field(default=5.0, alias="DB_RECONNECT_DELAY")

    upload_dir: Path = Field(default=DEFAULT_UPLOAD_DIR, alias="UPLOAD_DIR")
    max_upload_bytes: int = Field(default=5 * 1024 * 1024, alias="MAX_UPLOAD_BYTES")

    app_env: str = Field(default="production", alias="APP_ENV")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    model_config = {
        "populate_by_name": True,
        "extra": "ignore",
    }

    @field_validator("cors_origins", mode="before")
    @classmethod
    def split_origins(cls, value):
        if isinstance(value, str):
            return [origin.strip() for origin in value.split(",") if origin.strip()]
        return value

    @property
    def is_development(self) -> bool:
        return self.app_env.lower() == "development"

    @property
    def allowed_origins(self) -> list[str]:
        """Origins accepted by the CORS middleware."""

        origins = [self.frontend_url] if self.frontend_url else []
        return origins + [origin for origin in self.cors_origins if origin not in origins]

    def sqlalchemy_url(self) -> str | URL:
        """Return DATABASE_URL when set, else a PostgreSQL URL built from the DB_* parts."""

        if self.database_url:
            return self.database_url
        return URL.create(
            "postgresql+asyncpg",
            username=self.db_user,
            password=self.db_password,
            host=self.db_host,
            port=self.db_port,
            database=self.db_name,
        )


@lru_cache
def get_settings() -> Settings:
    """Return a cached Settings instance."""

    return Settings.model_validate(dict(os.environ))
