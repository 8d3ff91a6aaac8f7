"""
Text extraction boundary layer.

Exports:
  - TextExtractor, ExtractedDocument, ExtractedUnit: Extractor interface
  - PDFExtractor: PyPDFLoader adapter (one unit per page)
  - MarkdownExtractor: Heading-delimited sections
  - get_extractor_for(): Suffix-based selection
"""

from doclib.boundary.extraction.base import ExtractedDocument, ExtractedUnit, TextExtractor
from doclib.boundary.extraction.factory import get_extractor_for
from doclib.boundary.extraction.markdown_extractor import MarkdownExtractor, split_sections
from doclib.boundary.extraction.pdf_extractor import PDFExtractor

__all__ = [
    "ExtractedDocument",
    "ExtractedUnit",
    "MarkdownExtractor",
    "PDFExtractor",
    "TextExtractor",
    "get_extractor_for",
    "split_sections",
]
