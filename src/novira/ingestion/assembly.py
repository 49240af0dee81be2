"""Token grouping and final canonical book assembly."""

from __future__ import annotations

import re
from typing import Iterable

from novira.ingestion.models import CanonicalBlock, CanonicalBook, CanonicalChapter, Token
from novira.ingestion.normalization import normalize_text

DEFAULT_INTRO_TITLE = "Bevezető"
DEFAULT_FLAT_TITLE = "1. fejezet"

_PARAGRAPH_BREAK_RE = re.compile(r"\n\s*\n")


def build_book(chapters: Iterable[CanonicalChapter], *, title: str | None = None) -> CanonicalBook:
    """Drop empty blocks and chapters, then re-index both levels densely from 1."""

    assembled: list[CanonicalChapter] = []
    for chapter in chapters:
        blocks = [block for block in chapter.blocks if block.raw_text and block.raw_text.strip()]
        if not blocks:
            continue

        assembled.append(
            CanonicalChapter(
                order_index=len(assembled) + 1,
                title=(chapter.title or "").strip(),
                blocks=[
                    CanonicalBlock(order_index=index, raw_text=block.raw_text.strip(), type=block.type)
                    for index, block in enumerate(blocks, start=1)
                ],
            )
        )

    return CanonicalBook(chapters=assembled, title=title)


def split_paragraphs(text: str) -> list[str]:
    """Split on blank-line boundaries and normalize each paragraph."""

    paragraphs = (normalize_text(part) for part in _PARAGRAPH_BREAK_RE.split(text))
    return [paragraph for paragraph in paragraphs if paragraph]


def chapters_from_paragraph_text(text: str, *, chapter_title: str = DEFAULT_FLAT_TITLE) -> list[CanonicalChapter]:
    """Single flat chapter holding every blank-line separated paragraph."""

    paragraphs = split_paragraphs(text)
    if not paragraphs:
        return []

    return [
        CanonicalChapter(
            order_index=1,
            title=chapter_title,
            blocks=[
                CanonicalBlock(order_index=index, raw_text=paragraph)
                for index, paragraph in enumerate(paragraphs, start=1)
            ],
        )
    ]


def chapters_from_tokens(tokens: list[Token]) -> list[CanonicalChapter]:
    """Group a heading/paragraph token stream into chapters.

    A heading token closes the current chapter and opens a new one titled with
    the heading text. Chapters that never received a paragraph are dropped.
    When no chapter survives, the token texts fall back to one flat chapter.
    """

    chapters: list[CanonicalChapter] = []
    current = CanonicalChapter(order_index=1, title=DEFAULT_INTRO_TITLE)

    for token in tokens:
        if token.kind == "heading":
            if current.blocks:
                chapters.append(current)
            current = CanonicalChapter(order_index=len(chapters) + 1, title=token.text)
            continue

        current.blocks.append(CanonicalBlock(order_index=len(current.blocks) + 1, raw_text=token.text))

    if current.blocks:
        chapters.append(current)

    if not chapters:
        return chapters_from_paragraph_text("\n\n".join(token.text for token in tokens))
    return chapters
