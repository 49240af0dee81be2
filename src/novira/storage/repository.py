"""Repository primitives for book, chapter, block and footnote persistence."""

from __future__ import annotations

from pathlib import Path
import sqlite3
from typing import Sequence

from novira.ingestion.hashing import sha256_hex
from novira.ingestion.models import CanonicalBook
from novira.storage.models import (
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
from novira.storage.schema import apply_runtime_pragmas, ensure_schema


def _book_from_row(row: sqlite3.Row) -> BookRecord:
    return BookRecord(
        id=int(row["id"]),
        title=row["title"],
        author=row["author"],
        source_format=row["source_format"],
        source_filename=row["source_filename"],
        source_name=row["source_name"],
        source_url=row["source_url"],
        source_work_id=row["source_work_id"],
        source_sha256=row["source_sha256"],
        status=BookStatus(row["status"]),
        error_message=row["error_message"],
    )


class BookRepository:
    """Thin transactional layer over the SQLite book schema."""

    def __init__(self, db_path: str | Path) -> None:
        self._db_path = Path(db_path)
        self._connection = sqlite3.connect(str(self._db_path))
        self._connection.row_factory = sqlite3.Row
        apply_runtime_pragmas(self._connection)
        ensure_schema(self._connection)

    @property
    def connection(self) -> sqlite3.Connection:
        return self._connection

    def close(self) -> None:
        self._connection.close()

    def __enter__(self) -> "BookRepository":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def create_book(self, book: NewBook) -> int:
        with self._connection:
            cursor = self._connection.execute(
                """
                INSERT INTO books(
                    title,
                    author,
                    description,
                    source_format,
                    source_filename,
                    source_mime,
                    source_size_bytes,
                    source_name,
                    source_url,
                    source_work_id,
                    source_license_url,
                    source_retrieved_at,
                    source_sha256,
                    zip_sha256,
                    status
                )
                VALUES(?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    book.title,
                    book.author,
                    book.description,
                    book.source_format,
                    book.source_filename,
                    book.source_mime,
                    book.source_size_bytes,
                    book.source_name,
                    book.source_url,
                    book.source_work_id,
                    book.source_license_url,
                    book.source_retrieved_at,
                    book.source_sha256,
                    book.zip_sha256,
                    BookStatus.PROCESSING.value,
                ),
            )
        if cursor.lastrowid is None:
            raise RuntimeError(f"Book row missing after insert: {book.title}")
        return int(cursor.lastrowid)

    def get_book(self, book_id: int) -> BookRecord | None:
        row = self._connection.execute("SELECT * FROM books WHERE id = ?", (book_id,)).fetchone()
        if row is None:
            return None
        return _book_from_row(row)

    def find_ready_book_by_work_id(self, source_name: str, work_id: str) -> BookRecord | None:
        row = self._connection.execute(
            """
            SELECT *
            FROM books
            WHERE source_name = ? AND source_work_id = ? AND status = ?
            ORDER BY updated_at DESC, id DESC
            LIMIT 1
            """,
            (source_name, work_id, BookStatus.READY.value),
        ).fetchone()
        if row is None:
            return None
        return _book_from_row(row)

    def set_book_status(self, book_id: int, status: BookStatus, error_message: str | None = None) -> None:
        with self._connection:
            cursor = self._connection.execute(
                """
                UPDATE books
                SET status = ?, error_message = ?, updated_at = CURRENT_TIMESTAMP
                WHERE id = ?
                """,
                (BookStatus(status).value, error_message if status == BookStatus.FAILED else None, book_id),
            )
        if cursor.rowcount == 0:
            raise LookupError(f"Book not found: {book_id}")

    def replace_book_content(self, book_id: int, book: CanonicalBook) -> None:
        """Delete and recreate one book's chapters and blocks in one transaction.

        Footnotes are dropped too; anchors go with their blocks.
        """

        with self._connection:
            self._connection.execute("DELETE FROM footnotes WHERE book_id = ?", (book_id,))
            self._connection.execute("DELETE FROM blocks WHERE book_id = ?", (book_id,))
            self._connection.execute("DELETE FROM chapters WHERE book_id = ?", (book_id,))

            for chapter in book.chapters:
                cursor = self._connection.execute(
                    "INSERT INTO chapters(book_id, chapter_index, title) VALUES(?, ?, ?)",
                    (book_id, chapter.order_index, chapter.title or None),
                )
                chapter_id = int(cursor.lastrowid)
                self._connection.executemany(
                    """
                    INSERT INTO blocks(book_id, chapter_id, block_index, original_text, original_hash, block_type)
                    VALUES(?, ?, ?, ?, ?, ?)
                    """,
                    [
                        (
                            book_id,
                            chapter_id,
                            block.order_index,
                            block.raw_text,
                            sha256_hex(block.raw_text),
                            block.type,
                        )
                        for block in chapter.blocks
                    ],
                )

            self._connection.execute(
                "UPDATE books SET updated_at = CURRENT_TIMESTAMP WHERE id = ?",
                (book_id,),
            )

    def read_chapters_for_book(self, book_id: int) -> list[ChapterRow]:
        rows = self._connection.execute(
            """
            SELECT id, book_id, chapter_index, title
            FROM chapters
            WHERE book_id = ?
            ORDER BY chapter_index ASC
            """,
            (book_id,),
        ).fetchall()
        return [
            ChapterRow(
                id=int(row["id"]),
                book_id=int(row["book_id"]),
                chapter_index=int(row["chapter_index"]),
                title=row["title"],
            )
            for row in rows
        ]

    def read_blocks_for_book(self, book_id: int) -> list[BlockRow]:
        rows = self._connection.execute(
            """
            SELECT b.id, b.book_id, b.chapter_id, b.block_index, b.original_text, b.original_hash, b.block_type
            FROM blocks b
            JOIN chapters c ON c.id = b.chapter_id
            WHERE b.book_id = ?
            ORDER BY c.chapter_index ASC, b.block_index ASC
            """,
            (book_id,),
        ).fetchall()
        return [
            BlockRow(
                id=int(row["id"]),
                book_id=int(row["book_id"]),
                chapter_id=int(row["chapter_id"]),
                block_index=int(row["block_index"]),
                original_text=row["original_text"],
                original_hash=row["original_hash"],
                block_type=row["block_type"],
            )
            for row in rows
        ]

    def update_block_text(self, block_id: int, text: str, content_hash: str) -> None:
        with self._connection:
            cursor = self._connection.execute(
                "UPDATE blocks SET original_text = ?, original_hash = ? WHERE id = ?",
                (text, content_hash, block_id),
            )
        if cursor.rowcount == 0:
            raise LookupError(f"Block not found: {block_id}")

    def upsert_footnotes(self, rows: Sequence[FootnoteUpsert]) -> None:
        if not rows:
            return
        with self._connection:
            self._connection.executemany(
                """
                INSERT INTO footnotes(book_id, number, text, source_chapter_id, source_block_id)
                VALUES(?, ?, ?, ?, ?)
                ON CONFLICT(book_id, number) DO UPDATE SET
                    text=excluded.text,
                    source_chapter_id=excluded.source_chapter_id,
                    source_block_id=excluded.source_block_id
                """,
                [
                    (row.book_id, row.number, row.text, row.source_chapter_id, row.source_block_id)
                    for row in rows
                ],
            )

    def upsert_footnote_anchors(self, rows: Sequence[FootnoteAnchorUpsert]) -> None:
        if not rows:
            return
        with self._connection:
            self._connection.executemany(
                """
                INSERT INTO footnote_anchors(
                    book_id,
                    chapter_id,
                    block_id,
                    footnote_number,
                    start_offset,
                    end_offset
                )
                VALUES(?, ?, ?, ?, ?, ?)
                ON CONFLICT(block_id, footnote_number, start_offset, end_offset) DO UPDATE SET
                    book_id=excluded.book_id,
                    chapter_id=excluded.chapter_id
                """,
                [
                    (
                        row.book_id,
                        row.chapter_id,
                        row.block_id,
                        row.footnote_number,
                        row.start_offset,
                        row.end_offset,
                    )
                    for row in rows
                ],
            )

    def read_footnotes_for_book(self, book_id: int) -> list[FootnoteRow]:
        rows = self._connection.execute(
            """
            SELECT book_id, number, text, source_chapter_id, source_block_id
            FROM footnotes
            WHERE book_id = ?
            ORDER BY number ASC
            """,
            (book_id,),
        ).fetchall()
        return [
            FootnoteRow(
                book_id=int(row["book_id"]),
                number=int(row["number"]),
                text=row["text"],
                source_chapter_id=row["source_chapter_id"],
                source_block_id=row["source_block_id"],
            )
            for row in rows
        ]

    def read_anchors_for_book(self, book_id: int) -> list[FootnoteAnchorRow]:
        rows = self._connection.execute(
            """
            SELECT id, book_id, chapter_id, block_id, footnote_number, start_offset, end_offset
            FROM footnote_anchors
            WHERE book_id = ?
            ORDER BY block_id ASC, start_offset ASC
            """,
            (book_id,),
        ).fetchall()
        return [
            FootnoteAnchorRow(
                id=int(row["id"]),
                book_id=int(row["book_id"]),
                chapter_id=int(row["chapter_id"]),
                block_id=int(row["block_id"]),
                footnote_number=int(row["footnote_number"]),
                start_offset=int(row["start_offset"]),
                end_offset=int(row["end_offset"]),
            )
            for row in rows
        ]
