"""Routing entrypoint from uploaded bytes to a canonical book."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
import logging

from novira.ingestion.adapters.base import FormatAdapter
from novira.ingestion.detect import UploadFormat, detect_upload_format
from novira.ingestion.hashing import SourceFingerprint, fingerprint_book
from novira.ingestion.models import CanonicalBook

logger = logging.getLogger(__name__)

NO_CONTENT_MESSAGE = "No processable content found"


@dataclass(slots=True)
class IngestionError(Exception):
    """Domain error for format routing and extraction failures."""

    file_name: str
    message: str

    def __str__(self) -> str:
        return f"{self.message} (file={self.file_name})"


class UnrecognizedFormatError(IngestionError):
    """Upload is neither HTML, RTF nor DOCX."""


class EmptyContentError(IngestionError):
    """Parsing succeeded but produced no chapters or blocks."""


class ParseStatus(str, Enum):
    OK = "ok"
    NO_CONTENT = "no_content"


@dataclass(slots=True)
class IngestionResult:
    """Canonical parse output plus provenance hashes."""

    file_name: str
    format: UploadFormat
    book: CanonicalBook
    fingerprint: SourceFingerprint

    @property
    def status(self) -> ParseStatus:
        return ParseStatus.NO_CONTENT if self.book.is_empty else ParseStatus.OK

    def require_content(self) -> CanonicalBook:
        """Return the book, or raise EmptyContentError when nothing was extracted."""

        if self.status is ParseStatus.NO_CONTENT:
            raise EmptyContentError(self.file_name, NO_CONTENT_MESSAGE)
        return self.book


class DocumentIngestor:
    """Resolve the right adapter and return canonical extraction output."""

    def __init__(self) -> None:
        self._adapter_map: dict[UploadFormat, FormatAdapter] = {}

    @property
    def adapter_map(self) -> dict[UploadFormat, FormatAdapter]:
        """Registered adapters keyed by upload format."""

        return dict(self._adapter_map)

    def register_adapter(self, upload_format: UploadFormat, adapter: FormatAdapter) -> None:
        """Register an adapter implementation for one format."""

        self._adapter_map[UploadFormat(upload_format)] = adapter

    def parse(self, data: bytes, file_name: str, content_type: str | None = None) -> IngestionResult:
        """Detect the format and parse; an empty book is reported via `status`."""

        upload_format = detect_upload_format(file_name, content_type)
        if upload_format is None:
            raise UnrecognizedFormatError(file_name, "Only HTML, RTF and DOCX uploads are supported")

        adapter = self._adapter_map.get(upload_format)
        if adapter is None:
            raise UnrecognizedFormatError(file_name, f"No adapter registered for format {upload_format.value}")

        try:
            book = adapter.extract(data)
        except Exception as exc:
            raise IngestionError(file_name, f"Adapter extraction failed: {exc}") from exc

        if not isinstance(book, CanonicalBook):
            raise IngestionError(file_name, "Adapter returned non-canonical output")

        logger.info(
            "Parsed %s as %s: %d chapter(s), %d block(s)",
            file_name,
            upload_format.value,
            len(book.chapters),
            book.block_count,
        )
        return IngestionResult(
            file_name=file_name,
            format=upload_format,
            book=book,
            fingerprint=fingerprint_book(data, book),
        )


def build_default_ingestor() -> DocumentIngestor:
    from novira.ingestion.adapters import build_default_adapters

    ingestor = DocumentIngestor()
    for upload_format, adapter in build_default_adapters().items():
        ingestor.register_adapter(upload_format, adapter)
    return ingestor
