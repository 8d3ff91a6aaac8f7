"""
Text extractor interface.

Extractors turn a source file into numbered text units (PDF pages or
Markdown sections). Chunking happens downstream.

Dependencies: pydantic, doclib.models
System role: Seam between file formats and the ingestion pipeline
"""

from abc import ABC, abstractmethod
from pathlib import Path

from pydantic import BaseModel, Field

from doclib.core.exceptions import NotFoundError
from doclib.models import FileType


class ExtractedUnit(BaseModel):
    """One page or section of extracted text."""

    number: int = Field(ge=1, description="1-based page or section number")
    text: str = Field(default="", description="Raw text of the unit")


class ExtractedDocument(BaseModel):
    """Extraction output for one file."""

    units: list[ExtractedUnit] = Field(default_factory=list)
    page_count: int = Field(default=0, ge=0, description="Pages or sections in the file")
    file_type: FileType

    @property
    def has_text(self) -> bool:
        return any(unit.text.strip() for unit in self.units)


class TextExtractor(ABC):
    """Base class for format adapters."""

    file_type: FileType
    suffixes: tuple[str, ...] = ()

    def supports(self, path: Path) -> bool:
        return path.suffix.lower() in self.suffixes

    @staticmethod
    def _require_file(path: Path) -> None:
        if not path.is_file():
            raise NotFoundError(f"File not found: {path}", resource="file", details={"path": str(path)})

    @abstractmethod
    def extract(self, path: Path) -> ExtractedDocument:
        """
        Extract numbered text units from a file.

        Raises:
            NotFoundError: File does not exist
            ExtractionError: File could not be read or parsed
        """
        ...
