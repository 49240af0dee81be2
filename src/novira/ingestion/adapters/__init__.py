"""Format adapter implementations and contracts."""

from novira.ingestion.detect import UploadFormat

from .base import FormatAdapter
from .docx_adapter import DOCXAdapter
from .html_adapter import HTMLAdapter
from .rtf_adapter import RTFAdapter


def build_default_adapters() -> dict[UploadFormat, FormatAdapter]:
    """Return the default format adapter map."""
    return {
        UploadFormat.HTML: HTMLAdapter(),
        UploadFormat.RTF: RTFAdapter(),
        UploadFormat.DOCX: DOCXAdapter(),
    }


__all__ = [
    "FormatAdapter",
    "HTMLAdapter",
    "RTFAdapter",
    "DOCXAdapter",
    "build_default_adapters",
]
