"""Book persistence: schema, typed rows and the SQLite repository."""

from .models import (
    BlockRow,
    BookRecord,
    BookStatus,
    ChapterRow,
    FootnoteAnchorRow,
    FootnoteAnchorUpsert,
    FootnoteRow,
    FootnoteUpsert,
    NewBook,
)
from .repository import BookRepository

__all__ = [
    "BlockRow",
    "BookRecord",
    "BookRepository",
    "BookStatus",
    "ChapterRow",
    "FootnoteAnchorRow",
    "FootnoteAnchorUpsert",
    "FootnoteRow",
    "FootnoteUpsert",
    "NewBook",
]
