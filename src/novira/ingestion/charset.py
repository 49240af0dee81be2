"""Declared-charset sniffing for HTML payloads."""

from __future__ import annotations

import logging
import re

from charset_normalizer import from_bytes

logger = logging.getLogger(__name__)

SNIFF_BYTES = 4096

_CHARSET_RE = re.compile(r"charset\s*=\s*[\"']?([a-z0-9._-]+)", re.IGNORECASE)

# Checked in order with substring matching, so "x-gbk" or "iso-8859-2:1987" still resolve.
_CHARSET_CODECS: tuple[tuple[str, str], ...] = (
    ("iso-8859-2", "iso-8859-2"),
    ("windows-1250", "cp1250"),
    ("cp1250", "cp1250"),
    ("big5", "big5"),
    ("gb2312", "gb18030"),
    ("gbk", "gb18030"),
    ("gb18030", "gb18030"),
)


def sniff_declared_charset(raw: bytes) -> str | None:
    """Return the lower-cased `charset=` token found in the document head."""

    head = raw[:SNIFF_BYTES].decode("latin-1").lower()
    match = _CHARSET_RE.search(head)
    if match is None:
        return None
    return match.group(1)


def resolve_codec(declared: str | None) -> str:
    """Map a declared charset token to a Python codec, defaulting to UTF-8."""

    if declared:
        for token, codec in _CHARSET_CODECS:
            if token in declared:
                return codec
    return "utf-8"


def decode_html_bytes(raw: bytes) -> str:
    """Decode HTML bytes using the declared charset, UTF-8 otherwise."""

    declared = sniff_declared_charset(raw)
    codec = resolve_codec(declared)
    if codec != "utf-8":
        return raw.decode(codec, errors="replace")

    try:
        return raw.decode("utf-8-sig")
    except UnicodeDecodeError:
        if declared is not None:
            return raw.decode("utf-8-sig", errors="replace")

    best = from_bytes(raw).best()
    if best is not None and best.encoding:
        logger.info("Undeclared non-UTF-8 HTML decoded as %s", best.encoding)
        return raw.decode(best.encoding, errors="replace")
    return raw.decode("utf-8", errors="replace")
