"""Content hashing helpers for provenance and block change tracking."""

from __future__ import annotations

from dataclasses import dataclass
import hashlib

from novira.ingestion.models import CanonicalBook
from novira.ingestion.normalization import normalize_whitespace


@dataclass(slots=True)
class SourceFingerprint:
    """Hashes of the uploaded bytes and of the canonical text they produced."""

    binary_hash: str
    canonical_text_hash: str


def sha256_hex(payload: str | bytes) -> str:
    """Hex SHA-256 digest; text is hashed as UTF-8."""

    if isinstance(payload, str):
        payload = payload.encode("utf-8")
    return hashlib.sha256(payload).hexdigest()


def fingerprint_book(raw_bytes: bytes, book: CanonicalBook) -> SourceFingerprint:
    """Build binary and canonical-text fingerprints for one parse."""

    text_payload = "\n".join(
        normalize_whitespace(block.raw_text).casefold()
        for chapter in book.chapters
        for block in chapter.blocks
    )
    return SourceFingerprint(binary_hash=sha256_hex(raw_bytes), canonical_text_hash=sha256_hex(text_payload))
