"""Shared adapter contract for per-format extractors."""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from novira.ingestion.models import CanonicalBook


@runtime_checkable
class FormatAdapter(Protocol):
    """Protocol that every format adapter must implement."""

    def extract(self, data: bytes) -> CanonicalBook:
        """Decode raw upload bytes into a canonical book (possibly empty)."""
