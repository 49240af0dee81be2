"""HTML → CanonicalBook entrypoint."""

from __future__ import annotations

from bs4 import BeautifulSoup

from novira.ingestion.assembly import build_book
from novira.ingestion.html.blocks import normalize_blocks
from novira.ingestion.html.chapters import MAX_CAPS_HEADING_LENGTH, extract_chapters
from novira.ingestion.html.dom import normalize_dom
from novira.ingestion.html.title import extract_title
from novira.ingestion.models import CanonicalBook, CanonicalChapter

HTML_PARSER = "lxml"


def promote_leading_title(chapters: list[CanonicalChapter]) -> None:
    """Use an all-caps first block as the title of an untitled first chapter."""

    if not chapters:
        return
    first = chapters[0]
    if first.title or not first.blocks:
        return

    candidate = first.blocks[0].raw_text.strip()
    if len(candidate) < MAX_CAPS_HEADING_LENGTH and candidate == candidate.upper():
        first.title = candidate
        first.blocks.pop(0)


def canonicalize_html(html: str) -> CanonicalBook:
    soup = BeautifulSoup(html, HTML_PARSER)
    normalize_dom(soup)

    title = extract_title(soup)
    chapters = normalize_blocks(extract_chapters(soup))
    promote_leading_title(chapters)
    return build_book(chapters, title=title)
