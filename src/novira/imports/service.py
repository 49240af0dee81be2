"""Import orchestration: parse or fetch, persist, run the footnote pass."""

from __future__ import annotations

from dataclasses import dataclass
import logging

from novira.external.gutenberg import PROJECT_GUTENBERG_SOURCE, GutenbergImporter, GutenbergImportResult
from novira.footnotes.config import FootnoteSettings
from novira.footnotes.service import FootnotePassResult, extract_and_anchor_footnotes
from novira.ingestion.detect import detect_upload_format
from novira.ingestion.hashing import sha256_hex
from novira.ingestion.ingestor import DocumentIngestor, IngestionError, UnrecognizedFormatError, build_default_ingestor
from novira.ingestion.models import CanonicalBook
from novira.storage.models import BookStatus, NewBook
from novira.storage.repository import BookRepository

logger = logging.getLogger(__name__)

MAX_UPLOAD_BYTES = 12 * 1024 * 1024


class UploadTooLargeError(IngestionError):
    """Upload exceeds MAX_UPLOAD_BYTES."""


@dataclass(frozen=True, slots=True)
class ImportOutcome:
    book_id: int
    title: str
    status: BookStatus
    chapter_count: int
    block_count: int
    footnote_count: int = 0
    anchor_count: int = 0
    cached: bool = False

    def to_dict(self) -> dict[str, object]:
        return {
            "book_id": self.book_id,
            "title": self.title,
            "status": self.status.value,
            "chapter_count": self.chapter_count,
            "block_count": self.block_count,
            "footnote_count": self.footnote_count,
            "anchor_count": self.anchor_count,
            "cached": self.cached,
        }


class BookImportService:
    """Drive one import through the processing → ready/failed lifecycle."""

    def __init__(
        self,
        repository: BookRepository,
        *,
        ingestor: DocumentIngestor | None = None,
        gutenberg_importer: GutenbergImporter | None = None,
        footnote_settings: FootnoteSettings | None = None,
    ) -> None:
        self._repository = repository
        self._ingestor = ingestor or build_default_ingestor()
        self._gutenberg_importer = gutenberg_importer
        self._footnote_settings = footnote_settings or FootnoteSettings()

    def import_upload(
        self,
        data: bytes,
        file_name: str,
        content_type: str | None = None,
        *,
        title: str | None = None,
        author: str | None = None,
    ) -> ImportOutcome:
        if len(data) > MAX_UPLOAD_BYTES:
            raise UploadTooLargeError(file_name, f"Upload exceeds {MAX_UPLOAD_BYTES} bytes")

        upload_format = detect_upload_format(file_name, content_type)
        if upload_format is None:
            raise UnrecognizedFormatError(file_name, "Only HTML, RTF and DOCX uploads are supported")

        source_sha256 = sha256_hex(data)
        book_id = self._repository.create_book(
            NewBook(
                title=(title or "").strip() or file_name,
                author=author,
                source_format=upload_format.value,
                source_filename=file_name,
                source_mime=content_type,
                source_size_bytes=len(data),
                source_sha256=source_sha256,
            )
        )
        logger.info("Book %s created for upload %s", book_id, file_name)

        try:
            parsed = self._ingestor.parse(data, file_name, content_type)
            book = parsed.require_content()
            footnotes = self._persist(book_id, book, source_sha256)
        except Exception as exc:
            self._mark_failed(book_id, exc)
            raise

        record = self._repository.get_book(book_id)
        return self._outcome(book_id, record.title if record else file_name, book, footnotes)

    def import_gutenberg(
        self,
        work_id: int,
        *,
        title: str | None = None,
        author: str | None = None,
    ) -> ImportOutcome:
        """Import one Project Gutenberg work, reusing a ready import of the same work."""

        cached = self._repository.find_ready_book_by_work_id(PROJECT_GUTENBERG_SOURCE, str(work_id))
        if cached is not None:
            logger.info("Work %s already imported as book %s", work_id, cached.id)
            chapters = self._repository.read_chapters_for_book(cached.id)
            blocks = self._repository.read_blocks_for_book(cached.id)
            return ImportOutcome(
                book_id=cached.id,
                title=cached.title,
                status=cached.status,
                chapter_count=len(chapters),
                block_count=len(blocks),
                cached=True,
            )

        imported = self._importer().import_work(work_id)
        book_id = self._repository.create_book(self._new_gutenberg_book(imported, title=title, author=author))
        logger.info("Book %s created for Project Gutenberg work %s", book_id, work_id)

        try:
            footnotes = self._persist(book_id, imported.canonical, imported.source_original_sha256)
        except Exception as exc:
            self._mark_failed(book_id, exc)
            raise

        record = self._repository.get_book(book_id)
        return self._outcome(book_id, record.title if record else imported.title_hint, imported.canonical, footnotes)

    def _importer(self) -> GutenbergImporter:
        if self._gutenberg_importer is None:
            self._gutenberg_importer = GutenbergImporter()
        return self._gutenberg_importer

    @staticmethod
    def _new_gutenberg_book(imported: GutenbergImportResult, *, title: str | None, author: str | None) -> NewBook:
        return NewBook(
            title=(title or "").strip() or imported.title_hint,
            author=author,
            source_format="html",
            source_filename=imported.source_filename,
            source_mime="application/zip",
            source_size_bytes=len(imported.zip_bytes),
            source_name=imported.source_name,
            source_url=imported.source_url,
            source_work_id=imported.source_work_id,
            source_license_url=imported.source_license_url,
            source_retrieved_at=imported.source_retrieved_at,
            source_sha256=imported.source_original_sha256,
            zip_sha256=sha256_hex(imported.zip_bytes),
        )

    def _persist(self, book_id: int, book: CanonicalBook, source_sha256: str | None) -> FootnotePassResult:
        self._repository.replace_book_content(book_id, book)
        footnotes = extract_and_anchor_footnotes(
            self._repository,
            book_id,
            notes_chapter_override=self._footnote_settings.override_for(source_sha256),
        )
        self._repository.set_book_status(book_id, BookStatus.READY)
        logger.info(
            "Book %s ready: %d chapter(s), %d block(s), %d footnote(s)",
            book_id,
            len(book.chapters),
            book.block_count,
            footnotes.footnote_count,
        )
        return footnotes

    def _mark_failed(self, book_id: int, exc: Exception) -> None:
        logger.warning("Import of book %s failed: %s", book_id, exc)
        self._repository.set_book_status(book_id, BookStatus.FAILED, str(exc))

    @staticmethod
    def _outcome(book_id: int, title: str, book: CanonicalBook, footnotes: FootnotePassResult) -> ImportOutcome:
        return ImportOutcome(
            book_id=book_id,
            title=title,
            status=BookStatus.READY,
            chapter_count=len(book.chapters),
            block_count=book.block_count,
            footnote_count=footnotes.footnote_count,
            anchor_count=footnotes.anchor_count,
        )
