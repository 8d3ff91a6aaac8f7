"""
Text chunker.

Splits normalized document text into bounded-size retrieval units:
paragraphs are packed greedily, oversized paragraphs fall back to
sentences, and oversized sentences are hard-split into overlapping
windows. Markdown code is shielded behind placeholders so it is never
normalized or cut.

Dependencies: re (stdlib), doclib.core.exceptions
System role: First stage of the ingestion write path
"""

import re
from collections.abc import Iterator

from doclib.core.exceptions import ValidationError

MIN_CHUNK_LENGTH = 20

_CODE = re.compile(r"```[\s\S]*?```|`[^`]+`")
_PLACEHOLDER = re.compile(r"__CODE_BLOCK_(\d+)__")
_HORIZONTAL_SPACE = re.compile(r"[^\S\n]+")
_SPACE_AROUND_NEWLINE = re.compile(r" *\n *")
_EXCESS_NEWLINES = re.compile(r"\n{3,}")
_PARAGRAPH_BREAK = re.compile(r"\n{2,}")
_SENTENCE = re.compile(r"[^.!?]*[.!?]+|[^.!?]+$")


def normalize_whitespace(text: str) -> str:
    """
    Collapse horizontal whitespace and excess blank lines.

    Runs of spaces/tabs become one space, spaces hugging a newline are
    dropped, and three or more newlines become a paragraph break.
    """
    text = _HORIZONTAL_SPACE.sub(" ", text)
    text = _SPACE_AROUND_NEWLINE.sub("\n", text)
    text = _EXCESS_NEWLINES.sub("\n\n", text)
    return text.strip()


def split_sentences(paragraph: str) -> list[str]:
    """Split on terminal punctuation, keeping any unterminated tail."""
    return _SENTENCE.findall(paragraph) or [paragraph]


class Chunker:
    """Deterministic paragraph/sentence/window chunker."""

    def __init__(self, chunk_size: int = 512, chunk_overlap: int = 50) -> None:
        """
        Initialize chunker with size limits.

        Args:
            chunk_size: Maximum chunk size in characters
            chunk_overlap: Overlap between consecutive hard-split windows

        Raises:
            ValidationError: When sizes are not 0 <= overlap < size
        """
        if chunk_size <= 0:
            raise ValidationError("chunk_size must be positive", field="chunk_size")
        if not 0 <= chunk_overlap < chunk_size:
            raise ValidationError(
                "chunk_overlap must be >= 0 and smaller than chunk_size",
                field="chunk_overlap",
                details={"chunk_size": chunk_size, "chunk_overlap": chunk_overlap},
            )
        self.chunk_size = chunk_size
        self.chunk_overlap = chunk_overlap

    def chunk(self, text: str, markdown: bool = False) -> list[str]:
        """
        Split text into ordered chunks.

        Args:
            text: Raw text of one page or section
            markdown: Protect fenced and inline code from splitting

        Returns:
            list[str]: Chunks longer than MIN_CHUNK_LENGTH, in reading order
        """
        code_blocks: list[str] = []
        if markdown:
            text = _CODE.sub(lambda m: self._stash(m.group(0), code_blocks), text)

        cleaned = normalize_whitespace(text)
        if not cleaned:
            return []

        if len(cleaned) <= self.chunk_size:
            pieces = [cleaned]
        else:
            pieces = self._pack_paragraphs(cleaned)

        if code_blocks:
            pieces = [self._restore(piece, code_blocks) for piece in pieces]

        return [piece for piece in pieces if len(piece) > MIN_CHUNK_LENGTH]

    @staticmethod
    def _stash(code: str, code_blocks: list[str]) -> str:
        code_blocks.append(code)
        return f"__CODE_BLOCK_{len(code_blocks) - 1}__"

    @staticmethod
    def _restore(piece: str, code_blocks: list[str]) -> str:
        def _lookup(match: re.Match) -> str:
            index = int(match.group(1))
            return code_blocks[index] if index < len(code_blocks) else match.group(0)

        return _PLACEHOLDER.sub(_lookup, piece)

    def _pack_paragraphs(self, text: str) -> list[str]:
        limit = self.chunk_size
        chunks: list[str] = []
        current = ""

        for para in _PARAGRAPH_BREAK.split(text):
            para = para.strip()
            if not para:
                continue

            joined_length = len(current) + len(para) + (2 if current else 0)
            if joined_length <= limit:
                current = f"{current}\n\n{para}" if current else para
                continue

            if current.strip():
                chunks.append(current.strip())
            current = ""

            if len(para) <= limit:
                current = para
                continue

            # Paragraph too long: pack sentences instead
            for sentence in split_sentences(para):
                if len(current) + len(sentence) <= limit:
                    current = current + sentence if current else sentence.lstrip()
                    continue

                if current.strip():
                    chunks.append(current.strip())
                current = ""

                sentence = sentence.strip()
                if len(sentence) > limit:
                    chunks.extend(self._hard_split(sentence))
                else:
                    current = sentence

        if current.strip():
            chunks.append(current.strip())
        return chunks

    def _hard_split(self, sentence: str) -> Iterator[str]:
        """Fixed windows of chunk_size advancing by chunk_size - chunk_overlap."""
        size = self.chunk_size
        step = size - self.chunk_overlap
        protected = [m.span() for m in _PLACEHOLDER.finditer(sentence)]

        start = 0
        while start < len(sentence):
            end = min(start + size, len(sentence))
            end = self._outside_placeholder(end, start, protected)

            piece = sentence[start:end].strip()
            if piece:
                yield piece
            if end >= len(sentence):
                break

            next_start = self._outside_placeholder(start + step, start, protected)
            start = next_start if next_start > start else end

    @staticmethod
    def _outside_placeholder(offset: int, floor: int, protected: list[tuple[int, int]]) -> int:
        # Move a cut point off any placeholder it would bisect
        for begin, finish in protected:
            if begin < offset < finish:
                return begin if begin > floor else finish
        return offset


def chunk_text(text: str, max_size: int, overlap: int, markdown: bool = False) -> list[str]:
    """Functional shortcut for Chunker(max_size, overlap).chunk(text)."""
    return Chunker(max_size, overlap).chunk(text, markdown=markdown)
