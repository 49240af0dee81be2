"""In-place cleanup of an HTML tree before text extraction.

Every removal step first collects its targets in a read-only scan and then
detaches them in one batch, so no step depends on traversal order while the
tree is being mutated.
"""

from __future__ import annotations

from bs4 import BeautifulSoup, Tag

NON_CONTENT_TAGS = ("script", "style", "meta", "link", "noscript")
UNWRAP_TAGS = ("font", "center")
STRIPPED_ATTRIBUTES = ("style", "align")

LINK_TEXT_RATIO = 0.6
MIN_LINK_COUNT = 3


def _content_root(soup: BeautifulSoup) -> Tag:
    return soup.body or soup


def _has_marked_ancestor(tag: Tag, marked: set[int]) -> bool:
    return any(id(parent) in marked for parent in tag.parents)


def _detach_all(tags: list[Tag]) -> None:
    for tag in tags:
        tag.extract()


def _is_link_dense(tag: Tag) -> bool:
    links = tag.find_all("a")
    if len(links) <= MIN_LINK_COUNT:
        return False

    text_length = len(tag.get_text().strip())
    if text_length == 0:
        return False

    link_text_length = len("".join(link.get_text() for link in links).strip())
    return link_text_length / text_length > LINK_TEXT_RATIO


def remove_non_content(soup: BeautifulSoup) -> None:
    _detach_all(soup.find_all(list(NON_CONTENT_TAGS)))


def remove_link_dense_blocks(soup: BeautifulSoup) -> None:
    """Drop tables of contents and navigation menus."""

    marked: list[Tag] = []
    marked_ids: set[int] = set()
    for tag in _content_root(soup).find_all(True):
        if _has_marked_ancestor(tag, marked_ids):
            continue
        if _is_link_dense(tag):
            marked.append(tag)
            marked_ids.add(id(tag))
    _detach_all(marked)


def remove_empty_leaves(soup: BeautifulSoup) -> None:
    marked = [
        tag
        for tag in _content_root(soup).find_all(True)
        if not tag.get_text().strip() and tag.find(True) is None
    ]
    _detach_all(marked)


def unwrap_layout_tags(soup: BeautifulSoup) -> None:
    for tag in soup.find_all(list(UNWRAP_TAGS)):
        tag.unwrap()


def collapse_single_cell_tables(soup: BeautifulSoup) -> None:
    """Replace layout tables holding exactly one cell with the cell content."""

    for table in soup.find_all("table"):
        if table.parent is None:
            continue
        cells = table.find_all("td")
        if len(cells) != 1:
            continue
        for child in list(cells[0].contents):
            table.insert_before(child.extract())
        table.extract()


def strip_presentational_attributes(soup: BeautifulSoup) -> None:
    for tag in soup.find_all(True):
        for attribute in STRIPPED_ATTRIBUTES:
            tag.attrs.pop(attribute, None)


def normalize_dom(soup: BeautifulSoup) -> None:
    """Apply all cleanup steps in order; link-dense removal precedes empty-leaf removal."""

    remove_non_content(soup)
    remove_link_dense_blocks(soup)
    remove_empty_leaves(soup)
    unwrap_layout_tags(soup)
    collapse_single_cell_tables(soup)
    strip_presentational_attributes(soup)
