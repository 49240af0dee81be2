"""SQLite schema and pragmas for book storage."""

from __future__ import annotations

import sqlite3


PRAGMA_BUSY_TIMEOUT_MS = 5000


def apply_runtime_pragmas(connection: sqlite3.Connection) -> None:
    """Apply runtime pragmas recommended for local import throughput."""

    connection.execute("PRAGMA journal_mode=WAL;")
    connection.execute(f"PRAGMA busy_timeout={PRAGMA_BUSY_TIMEOUT_MS};")
    connection.execute("PRAGMA synchronous=NORMAL;")
    connection.execute("PRAGMA foreign_keys=ON;")


def _add_column_if_missing(connection: sqlite3.Connection, table: str, column: str, column_def: str) -> None:
    try:
        connection.execute(f"ALTER TABLE {table} ADD COLUMN {column} {column_def}")
    except sqlite3.OperationalError as exc:
        if "duplicate column name" not in str(exc).lower():
            raise


def ensure_schema(connection: sqlite3.Connection) -> None:
    """Create book, chapter, block and footnote tables if missing."""

    connection.executescript(
        """
        CREATE TABLE IF NOT EXISTS books (
            id INTEGER PRIMARY KEY,
            title TEXT NOT NULL,
            author TEXT,
            description TEXT,
            source_format TEXT,
            source_filename TEXT,
            source_mime TEXT,
            source_size_bytes INTEGER,
            source_name TEXT,
            source_url TEXT,
            source_work_id TEXT,
            source_license_url TEXT,
            source_retrieved_at TEXT,
            source_sha256 TEXT,
            zip_sha256 TEXT,
            status TEXT NOT NULL DEFAULT 'processing'
                CHECK(status IN ('processing', 'ready', 'failed')),
            error_message TEXT,
            created_at TEXT NOT NULL DEFAULT CURRENT_TIMESTAMP,
            updated_at TEXT NOT NULL DEFAULT CURRENT_TIMESTAMP
        );

        CREATE TABLE IF NOT EXISTS chapters (
            id INTEGER PRIMARY KEY,
            book_id INTEGER NOT NULL REFERENCES books(id) ON DELETE CASCADE,
            chapter_index INTEGER NOT NULL CHECK(chapter_index >= 1),
            title TEXT,
            UNIQUE(book_id, chapter_index)
        );

        CREATE TABLE IF NOT EXISTS blocks (
            id INTEGER PRIMARY KEY,
            book_id INTEGER NOT NULL REFERENCES books(id) ON DELETE CASCADE,
            chapter_id INTEGER NOT NULL REFERENCES chapters(id) ON DELETE CASCADE,
            block_index INTEGER NOT NULL CHECK(block_index >= 1),
            original_text TEXT NOT NULL,
            original_hash TEXT NOT NULL,
            block_type TEXT NOT NULL DEFAULT 'paragraph'
                CHECK(block_type IN ('heading', 'paragraph')),
            UNIQUE(chapter_id, block_index)
        );

        CREATE TABLE IF NOT EXISTS footnotes (
            id INTEGER PRIMARY KEY,
            book_id INTEGER NOT NULL REFERENCES books(id) ON DELETE CASCADE,
            number INTEGER NOT NULL CHECK(number >= 1),
            text TEXT NOT NULL,
            source_chapter_id INTEGER REFERENCES chapters(id) ON DELETE SET NULL,
            source_block_id INTEGER REFERENCES blocks(id) ON DELETE SET NULL,
            UNIQUE(book_id, number)
        );

        CREATE TABLE IF NOT EXISTS footnote_anchors (
            id INTEGER PRIMARY KEY,
            book_id INTEGER NOT NULL REFERENCES books(id) ON DELETE CASCADE,
            chapter_id INTEGER NOT NULL REFERENCES chapters(id) ON DELETE CASCADE,
            block_id INTEGER NOT NULL REFERENCES blocks(id) ON DELETE CASCADE,
            footnote_number INTEGER NOT NULL,
            start_offset INTEGER NOT NULL CHECK(start_offset >= 0),
            end_offset INTEGER NOT NULL CHECK(end_offset > start_offset),
            UNIQUE(block_id, footnote_number, start_offset, end_offset)
        );

        CREATE INDEX IF NOT EXISTS idx_chapters_book_id ON chapters(book_id);
        CREATE INDEX IF NOT EXISTS idx_blocks_book_id ON blocks(book_id);
        CREATE INDEX IF NOT EXISTS idx_blocks_chapter_id ON blocks(chapter_id);
        CREATE INDEX IF NOT EXISTS idx_footnote_anchors_book_id ON footnote_anchors(book_id);
        CREATE INDEX IF NOT EXISTS idx_books_source_work ON books(source_name, source_work_id);
        """
    )

    # Databases created before block types were stored.
    _add_column_if_missing(connection, "blocks", "block_type", "TEXT NOT NULL DEFAULT 'paragraph'")
