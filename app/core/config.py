from __future__ import annotations

from pathlib import Path

from pydantic import Field, PostgresDsn, ValidationError, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from app.core.errors import InvalidSettingsError, MissingRequiredSettingsError

ALLOWED_LOG_LEVELS = frozenset({"CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"})


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Required environment variables
    postgres_user: str = Field(..., description="Postgres user (required)")
    postgres_password: str = Field(..., description="Postgres password (required)")
    postgres_host: str = Field(..., description="Postgres host (required)")
    postgres_port: int = Field(..., description="Postgres port (required)")
    postgres_db: str = Field(..., description="Postgres database name (required)")

    # Database url built from components. Any SQLAlchemy async URL is accepted
    # so tests can point at sqlite+aiosqlite.
    database_url: str | None = Field(
        default=None,
        description="Database connection URL",
    )

    @model_validator(mode="after")
    def build_database_url(self) -> Settings:
        """Build the database URL from components when missing."""
        if self.database_url is None:
            self.database_url = str(
                PostgresDsn.build(
                    scheme="postgresql+asyncpg",
                    username=self.postgres_user,
                    password=self.postgres_password,
                    host=self.postgres_host,
                    port=self.postgres_port,
                    path=self.postgres_db,
                )
            )
        return self

    # Optional environment variables (defaults provided)
    app_name: str = "meetyou-api"
    environment: str = "local"
    log_level: str = "INFO"
    photo_storage_dir: Path = Field(
        default=Path("uploads/photos"),
        description="Directory uploaded photo files are written to",
    )
    max_photo_bytes: int = Field(
        default=10 * 1024 * 1024,
        gt=0,
        description="Largest accepted photo upload in bytes",
    )

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, value: str) -> str:
        level = value.upper()
        if level not in ALLOWED_LOG_LEVELS:
            raise ValueError(f"Log level must be one of {', '.join(sorted(ALLOWED_LOG_LEVELS))}")
        return level


def validate_settings() -> Settings:
    """Validate settings and raise exception for missing required fields.

    Raises:
        MissingRequiredSettingsError: If required environment variables are missing
        InvalidSettingsError: If any environment variable has an invalid value
    """
    try:
        return Settings()  # type: ignore[call-arg]
    except ValidationError as e:
        missing_fields: list[str] = []
        for error in e.errors():
            if error["type"] == "missing":
                field_name = error["loc"][0] if error["loc"] else "unknown"
                missing_fields.append(str(field_name).upper())

        if missing_fields:
            raise MissingRequiredSettingsError(missing_fields) from e

        invalid_fields: list[tuple[str, str]] = []
        for error in e.errors():
            field_path = ".".join(str(part) for part in error.get("loc", []))
            message = error.get("msg", "Invalid value")
            invalid_fields.append((field_path or "unknown", message))

        if invalid_fields:
            raise InvalidSettingsError(invalid_fields) from e

        raise


# Validate settings at import time.
# Exceptions will propagate to the importing module (e.g., app/main.py)
settings = validate_settings()
