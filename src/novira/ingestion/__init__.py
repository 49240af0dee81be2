"""Ingestion package interfaces."""

from .detect import UploadFormat, detect_upload_format
from .ingestor import (
    DocumentIngestor,
    EmptyContentError,
    IngestionError,
    IngestionResult,
    ParseStatus,
    UnrecognizedFormatError,
    build_default_ingestor,
)
from .models import CanonicalBlock, CanonicalBook, CanonicalChapter, Token

__all__ = [
    "CanonicalBlock",
    "CanonicalBook",
    "CanonicalChapter",
    "DocumentIngestor",
    "EmptyContentError",
    "IngestionError",
    "IngestionResult",
    "ParseStatus",
    "Token",
    "UnrecognizedFormatError",
    "UploadFormat",
    "build_default_ingestor",
    "detect_upload_format",
]
