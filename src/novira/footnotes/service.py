"""Footnote pass over a book's persisted blocks."""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass
import logging
from typing import Callable, Protocol, Sequence, TypeVar

from novira.footnotes.extractor import collect_footnotes, detect_notes_chapter, replace_footnote_markers
from novira.ingestion.hashing import sha256_hex
from novira.storage.models import BlockRow, ChapterRow, FootnoteAnchorUpsert, FootnoteUpsert

logger = logging.getLogger(__name__)

_T = TypeVar("_T")


class FootnoteStore(Protocol):
    """Persistence operations the footnote pass depends on."""

    def read_chapters_for_book(self, book_id: int) -> list[ChapterRow]: ...

    def read_blocks_for_book(self, book_id: int) -> list[BlockRow]: ...

    def update_block_text(self, block_id: int, text: str, content_hash: str) -> None: ...

    def upsert_footnotes(self, rows: Sequence[FootnoteUpsert]) -> None: ...

    def upsert_footnote_anchors(self, rows: Sequence[FootnoteAnchorUpsert]) -> None: ...


@dataclass(slots=True)
class FootnotePassError(RuntimeError):
    """Terminal persistence failure during the footnote pass."""

    book_id: int
    stage: str
    message: str

    def __str__(self) -> str:
        return f"{self.message} (book_id={self.book_id}, stage={self.stage})"


@dataclass(slots=True)
class FootnotePassResult:
    notes_chapter_id: int | None = None
    footnote_count: int = 0
    anchored_block_count: int = 0
    anchor_count: int = 0


def _run_stage(book_id: int, stage: str, operation: Callable[[], _T]) -> _T:
    try:
        return operation()
    except Exception as exc:
        raise FootnotePassError(book_id=book_id, stage=stage, message=f"Footnote pass failed: {exc}") from exc


def extract_and_anchor_footnotes(
    store: FootnoteStore,
    book_id: int,
    *,
    notes_chapter_override: int | None = None,
) -> FootnotePassResult:
    """Harvest definitions from the notes chapter, then anchor markers elsewhere.

    Returns an empty result when the book has no notes chapter.
    """

    chapters = _run_stage(book_id, "read_chapters", lambda: store.read_chapters_for_book(book_id))
    if not chapters:
        return FootnotePassResult()

    blocks = _run_stage(book_id, "read_blocks", lambda: store.read_blocks_for_book(book_id))
    if not blocks:
        return FootnotePassResult()

    blocks_by_chapter: dict[int, list[BlockRow]] = defaultdict(list)
    for block in blocks:
        blocks_by_chapter[block.chapter_id].append(block)

    notes_chapter = detect_notes_chapter(
        chapters,
        blocks_by_chapter,
        override_chapter_index=notes_chapter_override,
    )
    if notes_chapter is None:
        logger.info("No notes chapter detected for book %s; footnote pass skipped", book_id)
        return FootnotePassResult()

    footnotes = collect_footnotes(blocks_by_chapter.get(notes_chapter.id, []))
    _run_stage(book_id, "upsert_footnotes", lambda: store.upsert_footnotes(footnotes))
    available_numbers = frozenset(row.number for row in footnotes)
    result = FootnotePassResult(notes_chapter_id=notes_chapter.id, footnote_count=len(footnotes))

    for block in blocks:
        if block.chapter_id == notes_chapter.id:
            continue

        rewrite = replace_footnote_markers(block.original_text, available_numbers)
        if not rewrite.changed:
            continue

        _run_stage(
            book_id,
            "update_block",
            lambda: store.update_block_text(block.id, rewrite.text, sha256_hex(rewrite.text)),
        )
        anchors = [
            FootnoteAnchorUpsert(
                book_id=block.book_id,
                chapter_id=block.chapter_id,
                block_id=block.id,
                footnote_number=anchor.number,
                start_offset=anchor.start_offset,
                end_offset=anchor.end_offset,
            )
            for anchor in rewrite.anchors
        ]
        _run_stage(book_id, "upsert_anchors", lambda: store.upsert_footnote_anchors(anchors))
        result.anchored_block_count += 1
        result.anchor_count += len(anchors)

    logger.info(
        "Footnote pass for book %s: notes chapter %s, %d footnote(s), %d anchor(s) in %d block(s)",
        book_id,
        notes_chapter.chapter_index,
        result.footnote_count,
        result.anchor_count,
        result.anchored_block_count,
    )
    return result
