"""Chapter segmentation over the direct children of <body>."""

from __future__ import annotations

from dataclasses import dataclass, field
import re

from bs4 import BeautifulSoup, Tag

from novira.ingestion.normalization import normalize_text

MAX_CAPS_HEADING_LENGTH = 120

_HEADING_TAG_RE = re.compile(r"^h[1-6]$", re.IGNORECASE)
_NUMERIC_HEADING_RE = re.compile(r"^[0-9]+\.?\s")
# Matches "II. ..." style prefixes, and also words like "III" or "Ill". Kept as is.
_ROMAN_HEADING_RE = re.compile(r"^I+\.?\s")

_NOISE_EXACT = frozenset({"tartalom"})
_NOISE_PREFIXES = ("ugrás", "vissza")


@dataclass(slots=True)
class ChapterDraft:
    """Chapter accumulator before block merging."""

    order: int
    title: str | None = None
    blocks: list[str] = field(default_factory=list)


def is_chapter_heading(tag: Tag, text: str) -> bool:
    if _HEADING_TAG_RE.match(tag.name or ""):
        return True
    if text and len(text) < MAX_CAPS_HEADING_LENGTH and text == text.upper():
        return True
    if _NUMERIC_HEADING_RE.match(text):
        return True
    if _ROMAN_HEADING_RE.match(text):
        return True
    return False


def looks_like_noise(text: str) -> bool:
    """Navigation leftovers such as "Tartalom" or "Vissza a tetejére"."""

    lowered = text.lower()
    return lowered in _NOISE_EXACT or lowered.startswith(_NOISE_PREFIXES)


def extract_chapters(soup: BeautifulSoup) -> list[ChapterDraft]:
    """Group body children into chapters; never returns an empty list."""

    chapters: list[ChapterDraft] = []
    current: ChapterDraft | None = None
    next_order = 1

    body = soup.body
    children = body.find_all(True, recursive=False) if body is not None else []

    for child in children:
        text = normalize_text(child.get_text())
        if text and looks_like_noise(text):
            continue

        if is_chapter_heading(child, text):
            if current is not None:
                chapters.append(current)
            current = ChapterDraft(order=next_order, title=text or None)
            next_order += 1
            continue

        if child.name != "p" or not text:
            continue

        if current is None:
            current = ChapterDraft(order=next_order)
            next_order += 1
        current.blocks.append(text)

    if current is not None:
        chapters.append(current)

    if not chapters:
        return [ChapterDraft(order=1)]
    return chapters
