"""
PDF text extraction using LangChain PyPDFLoader.

Loads one LangChain Document per page; page numbers are 1-based.

Dependencies: langchain_community.document_loaders (pypdf)
System role: PDF adapter for the ingestion pipeline
"""

import logging
from pathlib import Path

from langchain_community.document_loaders import PyPDFLoader

from doclib.boundary.extraction.base import ExtractedDocument, ExtractedUnit, TextExtractor
from doclib.core.exceptions import ExtractionError
from doclib.models import FileType

logger = logging.getLogger(__name__)


class PDFExtractor(TextExtractor):
    """Extract per-page text from PDF documents."""

    file_type = FileType.PDF
    suffixes = (".pdf",)

    def extract(self, path: Path) -> ExtractedDocument:
        """
        Extract text from each page.

        Args:
            path: PDF file

        Returns:
            ExtractedDocument: One unit per page, including empty pages

        Raises:
            NotFoundError: When the file does not exist
            ExtractionError: When pypdf cannot read the file
        """
        self._require_file(path)

        try:
            pages = PyPDFLoader(str(path)).load()
        except Exception as e:
            raise ExtractionError(
                f"Failed to parse PDF: {e}",
                path=str(path),
                file_type=self.file_type.value,
            ) from e

        units = [
            ExtractedUnit(number=number, text=page.page_content or "")
            for number, page in enumerate(pages, start=1)
        ]
        logger.info(f"{__name__}:extract - {path.name}: {len(units)} pages")
        return ExtractedDocument(units=units, page_count=len(units), file_type=self.file_type)
