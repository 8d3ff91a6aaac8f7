"""
Extractor selection by file suffix.

Dependencies: doclib.boundary.extraction
System role: Maps source files to their format adapter
"""

from pathlib import Path

from doclib.boundary.extraction.base import TextExtractor
from doclib.boundary.extraction.markdown_extractor import MarkdownExtractor
from doclib.boundary.extraction.pdf_extractor import PDFExtractor
from doclib.core.exceptions import ExtractionError

EXTRACTORS: tuple[TextExtractor, ...] = (PDFExtractor(), MarkdownExtractor())


def get_extractor_for(path: str | Path) -> TextExtractor:
    """
    Pick the extractor for a file.

    Raises:
        ExtractionError: No extractor handles the suffix
    """
    path = Path(path)
    for extractor in EXTRACTORS:
        if extractor.supports(path):
            return extractor
    raise ExtractionError(
        f"Unsupported file type: {path.suffix or '<none>'}",
        path=str(path),
        details={"supported": [s for e in EXTRACTORS for s in e.suffixes]},
    )
