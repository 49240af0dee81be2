"""Canonical data structures shared by all format adapters."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal


BlockType = Literal["heading", "paragraph"]


@dataclass(slots=True)
class Token:
    """Flat extractor output before chapter grouping."""

    kind: BlockType
    text: str


@dataclass(slots=True)
class CanonicalBlock:
    """A normalized, addressable text unit inside a chapter."""

    order_index: int
    raw_text: str
    type: BlockType = "paragraph"


@dataclass(slots=True)
class CanonicalChapter:
    """An ordered group of blocks; `title` may be empty."""

    order_index: int
    title: str = ""
    blocks: list[CanonicalBlock] = field(default_factory=list)


@dataclass(slots=True)
class CanonicalBook:
    """Root parse artifact handed to persistence."""

    chapters: list[CanonicalChapter] = field(default_factory=list)
    title: str | None = None

    @property
    def block_count(self) -> int:
        return sum(len(chapter.blocks) for chapter in self.chapters)

    @property
    def is_empty(self) -> bool:
        return self.block_count == 0
