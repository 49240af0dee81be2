"""Typed rows and write requests for book persistence."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class BookStatus(str, Enum):
    PROCESSING = "processing"
    READY = "ready"
    FAILED = "failed"


@dataclass(slots=True)
class NewBook:
    """Insert request for a book row created at the start of an import."""

    title: str
    author: str | None = None
    description: str | None = None
    source_format: str | None = None
    source_filename: str | None = None
    source_mime: str | None = None
    source_size_bytes: int | None = None
    source_name: str | None = None
    source_url: str | None = None
    source_work_id: str | None = None
    source_license_url: str | None = None
    source_retrieved_at: str | None = None
    source_sha256: str | None = None
    zip_sha256: str | None = None


@dataclass(slots=True)
class BookRecord:
    id: int
    title: str
    author: str | None
    source_format: str | None
    source_filename: str | None
    source_name: str | None
    source_url: str | None
    source_work_id: str | None
    source_sha256: str | None
    status: BookStatus
    error_message: str | None


@dataclass(slots=True)
class ChapterRow:
    id: int
    book_id: int
    chapter_index: int
    title: str | None


@dataclass(slots=True)
class BlockRow:
    id: int
    book_id: int
    chapter_id: int
    block_index: int
    original_text: str
    original_hash: str
    block_type: str = "paragraph"


@dataclass(slots=True)
class FootnoteUpsert:
    """Footnote definition keyed by (book_id, number)."""

    book_id: int
    number: int
    text: str
    source_chapter_id: int
    source_block_id: int


@dataclass(slots=True)
class FootnoteAnchorUpsert:
    """Anchor keyed by (block_id, footnote_number, start_offset, end_offset)."""

    book_id: int
    chapter_id: int
    block_id: int
    footnote_number: int
    start_offset: int
    end_offset: int


@dataclass(slots=True)
class FootnoteRow:
    book_id: int
    number: int
    text: str
    source_chapter_id: int | None
    source_block_id: int | None


@dataclass(slots=True)
class FootnoteAnchorRow:
    id: int
    book_id: int
    chapter_id: int
    block_id: int
    footnote_number: int
    start_offset: int
    end_offset: int
