"""Re-segmentation for classical Chinese novels numbered with 第…回 headings."""

from __future__ import annotations

import regex

from novira.ingestion.assembly import DEFAULT_FLAT_TITLE
from novira.ingestion.models import CanonicalBlock, CanonicalBook, CanonicalChapter

HUI_HEADING_RE = regex.compile(
    r"^第[\p{Han}0-9〇一二三四五六七八九十百千兩两零]+回(?:[\s\u3000:：、，。．·-].*)?$"
)


def is_hui_heading(text: str) -> bool:
    return HUI_HEADING_RE.match(text) is not None


def resegment_by_hui_headings(book: CanonicalBook) -> CanonicalBook:
    """Rebuild chapters around 第…回 headings found in the flattened block stream.

    The generic chapter boundaries are discarded only when at least one such
    heading exists; otherwise the book is returned unchanged. Heading blocks
    become chapter titles and are not kept as blocks.
    """

    texts = [block.raw_text.strip() for chapter in book.chapters for block in chapter.blocks]
    if not texts:
        return book

    chapters: list[CanonicalChapter] = []
    current_title = (book.chapters[0].title or "").strip() or DEFAULT_FLAT_TITLE
    current_blocks: list[CanonicalBlock] = []
    found_heading = False

    def flush() -> None:
        if current_blocks:
            chapters.append(
                CanonicalChapter(order_index=len(chapters) + 1, title=current_title, blocks=list(current_blocks))
            )

    for text in texts:
        if not text:
            continue
        if is_hui_heading(text):
            flush()
            current_title = text
            current_blocks = []
            found_heading = True
            continue
        current_blocks.append(CanonicalBlock(order_index=len(current_blocks) + 1, raw_text=text))
    flush()

    if not found_heading or not chapters:
        return book
    return CanonicalBook(chapters=chapters, title=book.title)
