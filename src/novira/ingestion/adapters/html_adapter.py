"""HTML adapter: charset-aware decode followed by the HTML pipeline."""

from __future__ import annotations

from novira.ingestion.charset import decode_html_bytes
from novira.ingestion.html import canonicalize_html
from novira.ingestion.models import CanonicalBook


class HTMLAdapter:
    """Canonicalize HTML exports such as MEK or Gutenberg pages."""

    def extract(self, data: bytes) -> CanonicalBook:
        return canonicalize_html(decode_html_bytes(data))
