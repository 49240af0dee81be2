"""Footnote harvesting and in-text anchoring."""

from .config import FootnoteSettings
from .extractor import collect_footnotes, detect_notes_chapter, replace_footnote_markers
from .service import FootnotePassError, FootnotePassResult, FootnoteStore, extract_and_anchor_footnotes

__all__ = [
    "FootnotePassError",
    "FootnotePassResult",
    "FootnoteSettings",
    "FootnoteStore",
    "collect_footnotes",
    "detect_notes_chapter",
    "extract_and_anchor_footnotes",
    "replace_footnote_markers",
]
