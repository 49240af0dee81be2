"""Text normalization helpers used by extractors and block merging."""

from __future__ import annotations

import re

_WHITESPACE_RE = re.compile(r"\s+")
_INLINE_SPACE_RE = re.compile(r"[ \t]+")
_NEWLINE_PADDING_RE = re.compile(r"[ \t\r\f\v]*\n\s*")


def normalize_whitespace(text: str) -> str:
    """Collapse repeated whitespace and trim boundaries."""

    return _WHITESPACE_RE.sub(" ", text).strip()


def normalize_text(text: str) -> str:
    """Collapse inline whitespace but keep single line breaks.

    Blank lines collapse to one newline, so paragraph splitting must happen
    before this is applied.
    """

    cleaned = text.replace("\u00a0", " ").replace("\r\n", "\n").replace("\r", "\n")
    cleaned = _INLINE_SPACE_RE.sub(" ", cleaned)
    cleaned = _NEWLINE_PADDING_RE.sub("\n", cleaned)
    return cleaned.strip()
