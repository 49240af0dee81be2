"""Import orchestration over ingestion, archive fetch, storage and footnotes."""

from .service import MAX_UPLOAD_BYTES, BookImportService, ImportOutcome, UploadTooLargeError

__all__ = ["BookImportService", "ImportOutcome", "MAX_UPLOAD_BYTES", "UploadTooLargeError"]
