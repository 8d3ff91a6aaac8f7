"""
Library location settings.

Resolves where the knowledge base keeps its SQLite file.

Dependencies: pydantic, pydantic_settings
System role: Filesystem layout configuration
"""

from pathlib import Path

from pydantic import Field
from pydantic_settings import SettingsConfigDict

from doclib.configs.base import BaseSettings


class LibrarySettings(BaseSettings):
    """Library root and database file location."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="DOCLIB_",
        case_sensitive=False,
        extra="ignore",
    )

    library_path: Path = Field(
        default=Path("~/Documents/.pdf-library"),
        description="Directory holding the library database",
    )
    db_path: Path | None = Field(
        default=None,
        description="SQLite database file (defaults to <library_path>/library.db)",
    )

    @property
    def resolved_db_path(self) -> Path:
        """
        Database path with ~ expanded.

        Returns:
            Path: Absolute path of the SQLite file
        """
        if self.db_path is not None:
            return self.db_path.expanduser()
        return self.library_path.expanduser() / "library.db"
