# src/ubumuntu/splitter.py
"""Text sanitization and overlapping window splitting."""

import re

import pysbd

_CONTROL_CHARS = re.compile(r"[\x00-\x08\x0B\x0C\x0E-\x1F\x7F-\x9F]")
_INLINE_WHITESPACE = re.compile(r"[ \t\f\v]+")
_EXTRA_BLANK_LINES = re.compile(r"\n{3,}")


def sanitize_text(text: str) -> str:
    """Strip control characters and normalize whitespace.

    Runs of spaces and tabs collapse to one space, line endings become ``\\n``
    and more than one blank line collapses to a single paragraph break, so
    the splitter can still see paragraph and line structure.
    """
    text = text.replace("\r\n", "\n").replace("\r", "\n")
    text = _CONTROL_CHARS.sub("", text)
    lines = [_INLINE_WHITESPACE.sub(" ", line).strip() for line in text.split("\n")]
    return _EXTRA_BLANK_LINES.sub("\n\n", "\n".join(lines)).strip()


class TextSplitter:
    """Split text into overlapping windows of at most ``chunk_size`` characters.

    Each window ends at the best available breakpoint, preferring in order:
    a paragraph break, a line break, a sentence boundary (pySBD), a space,
    and finally a hard cut at ``chunk_size``. Consecutive windows overlap by
    at most ``chunk_overlap`` characters, and every character of the input
    falls inside some window.
    """

    def __init__(
        self,
        chunk_size: int = 1000,
        chunk_overlap: int = 200,
        language: str = "en",
    ) -> None:
        """Initialize the splitter.

        Args:
            chunk_size: Maximum characters per window
            chunk_overlap: Maximum overlap between adjacent windows
            language: Language code for sentence segmentation (default: "en").

        Raises:
            ValueError: If chunk_overlap >= chunk_size or either is out of range
        """
        if chunk_size <= 0:
            raise ValueError(f"chunk_size must be positive, got {chunk_size}")
        if chunk_overlap < 0:
            raise ValueError(f"chunk_overlap must not be negative, got {chunk_overlap}")
        if chunk_overlap >= chunk_size:
            raise ValueError(
                f"chunk_overlap ({chunk_overlap}) must be less than chunk_size ({chunk_size})"
            )
        self.chunk_size = chunk_size
        self.chunk_overlap = chunk_overlap
        self.segmenter = pysbd.Segmenter(language=language, clean=False, char_span=True)

    def split(self, text: str) -> list[str]:
        """Split text into windows. Whitespace-only input yields no windows."""
        windows = []
        for start, end in self.spans(text):
            piece = text[start:end].strip()
            if piece:
                windows.append(piece)
        return windows

    def spans(self, text: str) -> list[tuple[int, int]]:
        """Return the ``(start, end)`` offsets of every window."""
        if not text.strip():
            return []

        spans: list[tuple[int, int]] = []
        length = len(text)
        start = 0
        while start < length:
            end = min(start + self.chunk_size, length)
            if end < length:
                end = self._find_break(text, start, end)
            spans.append((start, end))
            if end >= length:
                break
            start = self._next_start(text, start, end)
        return spans

    def _find_break(self, text: str, start: int, end: int) -> int:
        # A break must leave room to advance past the overlap.
        floor = start + self.chunk_overlap + 1

        para = text.rfind("\n\n", floor, end)
        if para != -1:
            return para + 2

        line = text.rfind("\n", floor, end)
        if line != -1:
            return line + 1

        sentence = self._sentence_break(text, start, end, floor)
        if sentence is not None:
            return sentence

        space = text.rfind(" ", floor, end)
        if space != -1:
            return space + 1

        return end

    def _sentence_break(self, text: str, start: int, end: int, floor: int) -> int | None:
        spans = self.segmenter.segment(text[start:end])
        # The last segment may be a sentence cut by the window edge.
        for span in reversed(spans[:-1]):
            boundary = start + span.end
            if floor <= boundary < end:
                return boundary
        return None

    def _next_start(self, text: str, start: int, end: int) -> int:
        next_start = max(end - self.chunk_overlap, start + 1)
        if next_start >= end or text[next_start - 1].isspace():
            return next_start
        # Avoid starting the overlap mid-word.
        for pos in range(next_start, end):
            if text[pos].isspace():
                return pos + 1
        return next_start
