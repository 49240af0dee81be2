"""Runtime configuration for the footnote pass."""

from __future__ import annotations

from dataclasses import dataclass, field
import os
from typing import Mapping


def _parse_overrides(raw_value: str) -> dict[str, int]:
    overrides: dict[str, int] = {}
    for entry in raw_value.split(","):
        entry = entry.strip()
        if not entry:
            continue
        source_hash, separator, chapter_raw = entry.rpartition(":")
        if not separator or not source_hash.strip():
            raise ValueError(f"NOVIRA_NOTES_CHAPTER_OVERRIDES entry must be '<sha256>:<chapter>': {entry}")
        try:
            chapter_index = int(chapter_raw)
        except ValueError as exc:
            raise ValueError(
                f"NOVIRA_NOTES_CHAPTER_OVERRIDES chapter index must be an integer: {entry}"
            ) from exc
        if chapter_index < 1:
            raise ValueError("NOVIRA_NOTES_CHAPTER_OVERRIDES chapter index must be >= 1")
        overrides[source_hash.strip().lower()] = chapter_index
    return overrides


@dataclass(frozen=True, slots=True)
class FootnoteSettings:
    """Per-source notes-chapter overrides for books the heuristics misplace.

    Keys are source SHA-256 digests; values are chapter indices that replace
    the scored notes chapter for that source.
    """

    notes_chapter_overrides: Mapping[str, int] = field(default_factory=dict)

    def override_for(self, source_sha256: str | None) -> int | None:
        if not source_sha256:
            return None
        return self.notes_chapter_overrides.get(source_sha256.lower())

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "FootnoteSettings":
        source: Mapping[str, str] = os.environ if environ is None else environ
        raw_value = source.get("NOVIRA_NOTES_CHAPTER_OVERRIDES", "").strip()
        return cls(notes_chapter_overrides=_parse_overrides(raw_value))
