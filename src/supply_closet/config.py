"""Application configuration objects."""
from __future__ import annotations

from functools import lru_cache
from pathlib import Path
import logging
from typing import Literal, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Pydantic settings used to configure the inventory core."""

    model_config = SettingsConfigDict(
        env_prefix="SUPPLY_CLOSET_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    app_name: str = Field(
        default="Supply Closet",
        description="Human friendly name used in log output.",
    )
    environment: Literal["development", "test", "staging", "production"] = Field(
        default="development",
        description="Deployment environment flag.",
    )
    log_level: str = Field(
        default="INFO",
        description="Root log level applied by configure_logging.",
    )
    storage_backend: Literal["json", "sql"] = Field(
        default="json",
        description="Which persistence gateway holds the locations and items records.",
    )
    storage_path: Path = Field(
        default=Path("./supply_closet.json"),
        description="JSON document used by the json backend.",
    )
    database_url: str = Field(
        default="sqlite:///./supply_closet.db",
        description="SQLAlchemy compatible database URL for the sql backend.",
    )
    echo_sql: bool = Field(
        default=False,
        description="Enable SQL echo logging for debugging.",
    )
    assist_api_key: Optional[str] = Field(
        default=None,
        description="API key for the generative assist service.",
    )
    assist_model: str = Field(
        default="gemini-2.5-flash",
        description="Model used for item analysis and utilization plans.",
    )
    assist_base_url: str = Field(
        default="https://generativelanguage.googleapis.com/v1beta",
        description="Base URL of the generative language REST API.",
    )
    assist_timeout_seconds: float = Field(
        default=30.0,
        gt=0,
        description="Default timeout applied to every assist request.",
    )

    @field_validator("database_url")
    @classmethod
    def _validate_sqlite_path(cls, value: str) -> str:
        if value.startswith("sqlite") and ":memory:" not in value and "///" not in value:
            raise ValueError("SQLite database URLs should be in the form sqlite:///path/to/db")
        return value

    @field_validator("log_level")
    @classmethod
    def _validate_log_level(cls, value: str) -> str:
        level = value.upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"Unknown log level {value!r}")
        return level


@lru_cache
def get_settings() -> Settings:
    """Return a cached instance of :class:`Settings`."""

    return Settings()


def configure_logging(settings: Optional[Settings] = None) -> None:
    settings = settings or get_settings()
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


__all__ = ["Settings", "configure_logging", "get_settings"]
