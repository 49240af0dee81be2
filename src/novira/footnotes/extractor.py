"""Notes-chapter detection, footnote harvesting and in-text marker rewriting."""

from __future__ import annotations

from dataclasses import dataclass, field
import math
import re
from typing import Iterable, Mapping, Sequence

from novira.storage.models import BlockRow, ChapterRow, FootnoteUpsert

NOTES_TITLE_KEYWORD = "jegyzet"
MIN_STARTS_RATIO = 0.6
MIN_MARKER_COUNT = 5

FOOTNOTE_MARKER_RE = re.compile(r"\[([0-9]+)\]")
_LEADING_MARKER_RE = re.compile(r"^\s*\[[0-9]+\]")


def anchor_token(number: int) -> str:
    return f"[[fn:{number}]]"


@dataclass(slots=True)
class NotesChapterScore:
    chapter: ChapterRow
    starts: int
    marker_count: int
    block_count: int

    @property
    def accepted(self) -> bool:
        starts_threshold = math.ceil(self.block_count * MIN_STARTS_RATIO)
        return self.starts >= starts_threshold and self.marker_count >= MIN_MARKER_COUNT


def score_chapter(chapter: ChapterRow, blocks: Sequence[BlockRow]) -> NotesChapterScore:
    starts = 0
    marker_count = 0
    for block in blocks:
        if _LEADING_MARKER_RE.match(block.original_text):
            starts += 1
        marker_count += len(FOOTNOTE_MARKER_RE.findall(block.original_text))
    return NotesChapterScore(chapter=chapter, starts=starts, marker_count=marker_count, block_count=len(blocks))


def detect_notes_chapter(
    chapters: Sequence[ChapterRow],
    blocks_by_chapter: Mapping[int, Sequence[BlockRow]],
    *,
    override_chapter_index: int | None = None,
) -> ChapterRow | None:
    """Pick the chapter holding footnote definitions, or None.

    A title containing "jegyzet" wins outright. Otherwise the chapter with
    the most marker-led blocks (then the most markers) is used if it clears
    both thresholds. `override_chapter_index` replaces an accepted scored
    candidate when a chapter with that index exists.
    """

    for chapter in chapters:
        if NOTES_TITLE_KEYWORD in (chapter.title or "").casefold():
            return chapter

    best: NotesChapterScore | None = None
    for chapter in chapters:
        blocks = blocks_by_chapter.get(chapter.id, ())
        if not blocks:
            continue
        score = score_chapter(chapter, blocks)
        if best is None or (score.starts, score.marker_count) > (best.starts, best.marker_count):
            best = score

    if best is None or not best.accepted:
        return None

    if override_chapter_index is not None:
        for chapter in chapters:
            if chapter.chapter_index == override_chapter_index:
                return chapter
    return best.chapter


def collect_footnotes(blocks: Iterable[BlockRow]) -> list[FootnoteUpsert]:
    """Harvest `[N] text` definitions; the longest text wins for a repeated N."""

    merged: dict[int, FootnoteUpsert] = {}

    for block in blocks:
        text = block.original_text
        matches = list(FOOTNOTE_MARKER_RE.finditer(text))
        for index, match in enumerate(matches):
            number = int(match.group(1))
            if number < 1:
                continue

            definition_end = matches[index + 1].start() if index + 1 < len(matches) else len(text)
            definition = text[match.end() : definition_end].strip()
            if not definition:
                continue

            existing = merged.get(number)
            if existing is None or len(definition) > len(existing.text):
                merged[number] = FootnoteUpsert(
                    book_id=block.book_id,
                    number=number,
                    text=definition,
                    source_chapter_id=block.chapter_id,
                    source_block_id=block.id,
                )

    return list(merged.values())


@dataclass(slots=True)
class AnchorSpan:
    number: int
    start_offset: int
    end_offset: int


@dataclass(slots=True)
class MarkerRewrite:
    text: str
    anchors: list[AnchorSpan] = field(default_factory=list)

    @property
    def changed(self) -> bool:
        return bool(self.anchors)


def replace_footnote_markers(text: str, available_numbers: set[int] | frozenset[int]) -> MarkerRewrite:
    """Swap known `[N]` markers for `[[fn:N]]` tokens.

    Offsets are half-open ranges into the rewritten text. Markers for unknown
    numbers stay verbatim, and existing tokens are never matched again.
    """

    parts: list[str] = []
    anchors: list[AnchorSpan] = []
    cursor = 0
    length = 0

    for match in FOOTNOTE_MARKER_RE.finditer(text):
        number = int(match.group(1))
        if number not in available_numbers:
            continue

        prefix = text[cursor : match.start()]
        parts.append(prefix)
        length += len(prefix)

        token = anchor_token(number)
        anchors.append(AnchorSpan(number=number, start_offset=length, end_offset=length + len(token)))
        parts.append(token)
        length += len(token)
        cursor = match.end()

    if not anchors:
        return MarkerRewrite(text=text)

    parts.append(text[cursor:])
    return MarkerRewrite(text="".join(parts), anchors=anchors)
