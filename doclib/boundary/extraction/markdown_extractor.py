"""
Markdown section extraction.

Splits a Markdown file into sections at ATX headings (# .. ######).
Text before the first heading forms its own section. Section numbers
stand in for page numbers downstream.

Dependencies: re (stdlib)
System role: Markdown adapter for the ingestion pipeline
"""

import logging
import re
from pathlib import Path

from doclib.boundary.extraction.base import ExtractedDocument, ExtractedUnit, TextExtractor
from doclib.core.exceptions import ExtractionError
from doclib.models import FileType

logger = logging.getLogger(__name__)

_HEADING = re.compile(r"^(#{1,6})\s+(.+)$")
_FENCE = re.compile(r"^\s*```")


def split_sections(content: str) -> list[ExtractedUnit]:
    """
    Split Markdown into heading-delimited sections.

    Heading lines inside fenced code blocks are treated as text. A
    heading with no body still opens a section, so section numbers
    follow the headings of the file.

    Args:
        content: Markdown source

    Returns:
        list[ExtractedUnit]: Sections numbered from 1
    """
    sections: list[ExtractedUnit] = []
    heading = ""
    lines: list[str] = []
    in_fence = False

    def flush() -> None:
        text = "\n".join(lines).strip()
        if text or heading:
            sections.append(ExtractedUnit(number=len(sections) + 1, text=text))

    for line in content.splitlines():
        if _FENCE.match(line):
            in_fence = not in_fence
        match = None if in_fence else _HEADING.match(line)
        if match:
            flush()
            heading = match.group(2).strip()
            lines = []
        else:
            lines.append(line)
    flush()

    return sections


class MarkdownExtractor(TextExtractor):
    """Extract heading-delimited sections from Markdown files."""

    file_type = FileType.MARKDOWN
    suffixes = (".md", ".markdown")

    def extract(self, path: Path) -> ExtractedDocument:
        self._require_file(path)

        try:
            content = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise ExtractionError(
                f"Failed to read Markdown: {e}",
                path=str(path),
                file_type=self.file_type.value,
            ) from e

        units = split_sections(content)
        logger.info(f"{__name__}:extract - {path.name}: {len(units)} sections")
        return ExtractedDocument(units=units, page_count=len(units), file_type=self.file_type)
