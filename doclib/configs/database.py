"""
Database configuration settings.

Manages SQLite connection parameters for SQLAlchemy.

Dependencies: pydantic, pydantic_settings
System role: Database connection configuration for ORM
"""

from pydantic import Field
from pydantic_settings import SettingsConfigDict

from doclib.configs.base import BaseSettings


class DatabaseSettings(BaseSettings):
    """SQLite database configuration."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="DOCLIB_DB_",
        case_sensitive=False,
        extra="ignore",
    )

    busy_timeout_ms: int = Field(
        default=30000,
        description="How long a writer waits for a lock before failing",
    )
    echo_sql: bool = Field(default=False, description="Echo SQL statements to logs")
