"""External archive import (Project Gutenberg)."""

from .cjk import resegment_by_hui_headings
from .config import GutenbergSettings
from .fetcher import ArchiveFetchError, ArchiveFetcher, FetchedArchive, is_retriable_status
from .gutenberg import (
    GutenbergImportError,
    GutenbergImporter,
    GutenbergImportResult,
    build_zip_urls,
    clean_gutenberg_html,
    discover_main_html_entry,
)
from .throttle import RequestThrottle

__all__ = [
    "ArchiveFetchError",
    "ArchiveFetcher",
    "FetchedArchive",
    "GutenbergImportError",
    "GutenbergImportResult",
    "GutenbergImporter",
    "GutenbergSettings",
    "RequestThrottle",
    "build_zip_urls",
    "clean_gutenberg_html",
    "discover_main_html_entry",
    "is_retriable_status",
    "resegment_by_hui_headings",
]
