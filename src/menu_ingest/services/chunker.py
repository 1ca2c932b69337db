"""Token-budgeted splitting of extracted menu text."""

import math
import re
from dataclasses import dataclass

_SECTION_BREAK_RE = re.compile(r"\n[ \t]*\n\s*")
_WHITESPACE_RE = re.compile(r"\s+")


@dataclass(frozen=True)
class TextChunker:
    """Split text into ordered chunks that fit the generation budget.

    Chunks are exact slices of the input, so ``"".join(chunks) == text``.
    Cuts prefer a blank line, then a line break, then any whitespace, and
    fall back to a hard cut at the budget.
    """

    max_tokens: int = 625
    chars_per_token: int = 4
    min_fill_ratio: float = 0.5

    def __post_init__(self) -> None:
        if self.max_tokens < 1 or self.chars_per_token < 1:
            raise ValueError("chunk budget must be positive")
        if not 0.0 <= self.min_fill_ratio < 1.0:
            raise ValueError("min_fill_ratio must be in [0, 1)")

    @property
    def max_chars(self) -> int:
        return self.max_tokens * self.chars_per_token

    def estimate_tokens(self, text: str) -> int:
        return math.ceil(len(text) / self.chars_per_token)

    def split(self, text: str) -> list[str]:
        chunks: list[str] = []
        start = 0
        while len(text) - start > self.max_chars:
            end = self._cut_point(text, start)
            chunks.append(text[start:end])
            start = end
        if start < len(text):
            chunks.append(text[start:])
        return chunks

    def _cut_point(self, text: str, start: int) -> int:
        limit = start + self.max_chars
        window = text[start:limit]
        min_length = int(self.max_chars * self.min_fill_ratio)

        # Separators stay with the chunk they close.
        section_ends = [m.end() for m in _SECTION_BREAK_RE.finditer(window)]
        section_ends = [end for end in section_ends if min_length <= end <= len(window)]
        if section_ends:
            return start + section_ends[-1]

        line_end = window.rfind("\n")
        if line_end + 1 >= max(min_length, 1):
            return start + line_end + 1

        space_ends = [m.end() for m in _WHITESPACE_RE.finditer(window)]
        space_ends = [end for end in space_ends if end >= max(min_length, 1)]
        if space_ends:
            return start + space_ends[-1]

        return limit
