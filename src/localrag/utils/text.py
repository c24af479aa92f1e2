"""Text helpers: normalization and boundary-aware overlapping chunking."""

from __future__ import annotations

import re
from typing import List, Tuple

SENTENCE_ENDERS = ".!?"
SENTENCE_LOOKBACK = 200
SENTENCE_SLACK = 100

_WHITESPACE_RE = re.compile(r"\s+")
_EXCESS_NEWLINES_RE = re.compile(r"\n{3,}")


def normalize_text(text: str) -> str:
    """Collapse whitespace runs to single spaces and trim the result."""
    text = _WHITESPACE_RE.sub(" ", text)
    text = _EXCESS_NEWLINES_RE.sub("\n\n", text)
    return text.strip()


def word_count(text: str) -> int:
    return len(text.split())


def find_sentence_end(text: str, position: int) -> int:
    """Return the offset just past the nearest sentence terminator before `position`.

    Scans backward from `position` (inclusive) over at most SENTENCE_LOOKBACK
    characters. A double newline counts as a terminator. When nothing is found
    `position` itself is returned.
    """
    lower = max(position - SENTENCE_LOOKBACK, -1)
    for index in range(min(position, len(text) - 1), lower, -1):
        if text[index] in SENTENCE_ENDERS:
            return index + 1
        if text.startswith("\n\n", index):
            return index + 2
    return position


def chunk_spans(text: str, *, chunk_size: int = 5000, overlap: int = 500) -> List[Tuple[int, int]]:
    """Split normalized text into overlapping ``(start, end)`` spans.

    Window ends are snapped back to a sentence boundary when one lies close
    enough. Spans whose content is only whitespace are dropped.
    """
    if chunk_size <= 0:
        raise ValueError("chunk_size must be positive")
    if overlap < 0:
        raise ValueError("overlap must not be negative")

    length = len(text)
    if not text:
        return []
    if length <= chunk_size:
        return [(0, length)]

    spans: List[Tuple[int, int]] = []
    start = 0
    while start < length:
        end = min(start + chunk_size, length)

        if end < length:
            sentence_end = find_sentence_end(text, end)
            if start < sentence_end and sentence_end - start <= chunk_size + SENTENCE_SLACK:
                end = sentence_end

        if text[start:end].strip():
            spans.append((start, end))

        if end >= length:
            break
        start = max(end - overlap, start + 1)

    return spans
