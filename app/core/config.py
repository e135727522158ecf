# Fichier: app/core/config.py
import logging
from typing import List, Optional

from pydantic import AnyHttpUrl, ValidationError, field_validator
from pydantic_settings import BaseSettings

logger = logging.getLogger(__name__)

# Schemes handed out by hosting providers, all served by the asyncpg engine.
_ASYNC_POSTGRES_SCHEME = "postgresql+asyncpg"
_POSTGRES_SCHEMES = ("postgres", "postgresql", "postgresql+psycopg2", "postgresql+psycopg")


class Settings(BaseSettings):
    DATABASE_URL: str
    ENVIRONMENT: str = "development"

    BACKEND_CORS_ORIGINS: List[str] = [
        "http://localhost:5173",
        "http://127.0.0.1:5173",
        "http://localhost:8000",
    ]

    # Language model
    OPENAI_API_KEY: Optional[str] = None
    OPENAI_MODEL: str = "gpt-4o-mini"
    METADATA_TRANSCRIPT_EXCERPT_CHARS: int = 2000

    # Media storage (Supabase bucket)
    SUPABASE_URL: AnyHttpUrl | None = None
    SUPABASE_SERVICE_ROLE_KEY: str | None = None
    SUPABASE_BUCKET_NAME: str = "media"
    SUPABASE_TIMEOUT_SECONDS: int = 30

    # Course Builder
    COURSE_BUILDER_URL: AnyHttpUrl | None = None
    COURSE_BUILDER_TIMEOUT_SECONDS: int = 60

    # Generation
    GENERATION_TIMEOUT_SECONDS: float = 300.0
    SYSTEM_TRAINER_ID: str = "system-video-to-lesson"

    SQLALCHEMY_SLOW_QUERY_THRESHOLD_MS: int = 300

    class Config:
        env_file = ".env"

    @field_validator("DATABASE_URL", mode="before")
    @classmethod
    def _use_asyncpg_driver(cls, value):
        """Rewrite any PostgreSQL URL to the asyncpg driver; other backends pass through."""
        if not isinstance(value, str) or "://" not in value:
            return value
        scheme, rest = value.split("://", 1)
        if scheme in _POSTGRES_SCHEMES:
            return f"{_ASYNC_POSTGRES_SCHEME}://{rest}"
        return value

    @field_validator("GENERATION_TIMEOUT_SECONDS")
    @classmethod
    def _positive_timeout(cls, value: float) -> float:
        if value <= 0:
            raise ValueError("GENERATION_TIMEOUT_SECONDS must be greater than zero")
        return value


def _report_invalid_settings(exc: ValidationError) -> None:
    """List every missing or malformed variable before the import error surfaces."""
    logger.error("Invalid environment configuration (%s error(s))", exc.error_count())
    for error in exc.errors():
        field = ".".join(str(part) for part in error.get("loc", ())) or "<root>"
        logger.error("  %s: %s [%s]", field, error.get("msg"), error.get("type"))


try:
    settings = Settings()
except ValidationError as exc:  # pragma: no cover
    _report_invalid_settings(exc)
    raise
