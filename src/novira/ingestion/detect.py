"""Upload format classification from file name and declared MIME type."""

from __future__ import annotations

from enum import Enum
from pathlib import PurePath


class UploadFormat(str, Enum):
    HTML = "html"
    RTF = "rtf"
    DOCX = "docx"


_EXTENSION_FORMATS: dict[str, UploadFormat] = {
    ".html": UploadFormat.HTML,
    ".htm": UploadFormat.HTML,
    ".rtf": UploadFormat.RTF,
    ".docx": UploadFormat.DOCX,
}

# Order matters: "application/vnd.openxmlformats-officedocument.wordprocessingml" must win first.
_CONTENT_TYPE_FORMATS: tuple[tuple[str, UploadFormat], ...] = (
    ("wordprocessingml", UploadFormat.DOCX),
    ("rtf", UploadFormat.RTF),
    ("html", UploadFormat.HTML),
)


def detect_upload_format(file_name: str, content_type: str | None = None) -> UploadFormat | None:
    """Classify an upload, or return None when the format is not supported."""

    suffix = PurePath(file_name.strip()).suffix.lower()
    by_extension = _EXTENSION_FORMATS.get(suffix)
    if by_extension is not None:
        return by_extension

    lowered = (content_type or "").lower()
    for needle, upload_format in _CONTENT_TYPE_FORMATS:
        if needle in lowered:
            return upload_format
    return None
