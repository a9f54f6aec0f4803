from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Optional

DEFAULT_CHUNK_WORDS = 2500

_WORD_PATTERN = re.compile(r"\b\w+\b")


@dataclass(frozen=True, slots=True)
class Chunk:
    index: int
    total: int
    content: str

    @property
    def number(self) -> int:
        """1-based position used when talking to the model."""

        return self.index + 1


def count_words(text: Optional[str]) -> int:
    """Count ``\\w+`` runs in ``text``; empty or missing input counts as zero."""

    if not text:
        return 0
    return len(_WORD_PATTERN.findall(text.strip()))


def split_into_chunks(text: str, chunk_words: int = DEFAULT_CHUNK_WORDS) -> list[str]:
    """Split ``text`` on whitespace into consecutive groups of at most ``chunk_words`` words.

    Word order is preserved and nothing is dropped or overlapped; each chunk is
    re-joined with single spaces. Sentence boundaries are not respected.
    """

    if chunk_words < 1:
        raise ValueError("chunk_words must be at least 1")
    words = text.split()
    return [
        " ".join(words[start : start + chunk_words])
        for start in range(0, len(words), chunk_words)
    ]


def build_chunks(text: str, chunk_words: int = DEFAULT_CHUNK_WORDS) -> list[Chunk]:
    pieces = split_into_chunks(text, chunk_words)
    total = len(pieces)
    return [Chunk(index=index, total=total, content=content) for index, content in enumerate(pieces)]
