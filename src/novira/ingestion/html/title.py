"""Document title extraction."""

from __future__ import annotations

from bs4 import BeautifulSoup

UNTITLED = "Untitled"

MIN_PARAGRAPH_TITLE_LENGTH = 5
MAX_PARAGRAPH_TITLE_LENGTH = 120


def clean_title(raw: str) -> str:
    """Drop an "Author: " prefix by keeping the text after the first colon."""

    head, separator, tail = raw.partition(":")
    if separator:
        return tail.strip()
    return head.strip()


def extract_title(soup: BeautifulSoup) -> str:
    title_tag = soup.find("title")
    if title_tag is not None:
        cleaned = clean_title(title_tag.get_text())
        if cleaned:
            return cleaned

    heading = soup.find("h1")
    if heading is not None:
        text = heading.get_text().strip()
        if text:
            return text

    root = soup.body or soup
    for paragraph in root.find_all("p"):
        text = paragraph.get_text().strip()
        if MIN_PARAGRAPH_TITLE_LENGTH < len(text) < MAX_PARAGRAPH_TITLE_LENGTH:
            return text

    return UNTITLED
