"""Fragment absorption and block re-indexing."""

from __future__ import annotations

from novira.ingestion.html.chapters import ChapterDraft
from novira.ingestion.models import CanonicalBlock, CanonicalChapter
from novira.ingestion.normalization import normalize_whitespace

MIN_STANDALONE_BLOCK_LENGTH = 30


def merge_short_fragments(texts: list[str], *, min_length: int = MIN_STANDALONE_BLOCK_LENGTH) -> list[str]:
    """Fold each short text into the previous entry; a leading short text stays alone."""

    merged: list[str] = []
    for text in texts:
        if len(text) < min_length and merged:
            merged[-1] = f"{merged[-1]} {text}"
        else:
            merged.append(text)
    return merged


def normalize_blocks(chapters: list[ChapterDraft]) -> list[CanonicalChapter]:
    normalized: list[CanonicalChapter] = []
    for chapter in chapters:
        texts = [normalize_whitespace(text) for text in merge_short_fragments(chapter.blocks)]
        normalized.append(
            CanonicalChapter(
                order_index=chapter.order,
                title=chapter.title or "",
                blocks=[
                    CanonicalBlock(order_index=index, raw_text=text)
                    for index, text in enumerate((text for text in texts if text), start=1)
                ],
            )
        )
    return normalized
