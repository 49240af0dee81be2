"""DOCX adapter reading paragraphs and heading styles from word/document.xml."""

from __future__ import annotations

from io import BytesIO
import logging
import re
from zipfile import BadZipFile, ZipFile

from lxml import etree

from novira.ingestion.assembly import build_book, chapters_from_paragraph_text, chapters_from_tokens
from novira.ingestion.models import CanonicalBook, Token
from novira.ingestion.normalization import normalize_text

logger = logging.getLogger(__name__)

DOCX_CHAPTER_TITLE = "DOCX import"
DOCUMENT_PART = "word/document.xml"

_W = "{http://schemas.openxmlformats.org/wordprocessingml/2006/main}"
_MC = "{http://schemas.openxmlformats.org/markup-compatibility/2006}"
_HEADING_STYLE_RE = re.compile(r"^(?:Heading|Cim)\d$")


def _run_text(element: etree._Element) -> str:
    parts: list[str] = []
    for node in element.iter(f"{_W}t", f"{_W}tab", f"{_W}br"):
        # Legacy VML copy of a text box already present under mc:Choice.
        if next(node.iterancestors(f"{_MC}Fallback"), None) is not None:
            continue
        if node.tag == f"{_W}t":
            parts.append(node.text or "")
        elif node.tag == f"{_W}tab":
            parts.append(" ")
        else:
            parts.append("\n")
    return "".join(parts)


def _is_heading(paragraph: etree._Element) -> bool:
    style = paragraph.find(f"{_W}pPr/{_W}pStyle")
    if style is None:
        return False
    return bool(_HEADING_STYLE_RE.match(style.get(f"{_W}val", "")))


def docx_tokens(root: etree._Element) -> list[Token]:
    tokens: list[Token] = []
    for paragraph in root.iter(f"{_W}p"):
        # Text-box paragraphs are read as part of their enclosing paragraph.
        if next(paragraph.iterancestors(f"{_W}p"), None) is not None:
            continue
        text = normalize_text(_run_text(paragraph))
        if not text:
            continue
        tokens.append(Token(kind="heading" if _is_heading(paragraph) else "paragraph", text=text))
    return tokens


class DOCXAdapter:
    """Extract heading-delimited chapters from Word documents."""

    def extract(self, data: bytes) -> CanonicalBook:
        xml_bytes = self._read_document_part(data)
        if xml_bytes is None:
            return CanonicalBook()

        parser = etree.XMLParser(resolve_entities=False, no_network=True, load_dtd=False, huge_tree=False)
        try:
            root = etree.fromstring(xml_bytes, parser=parser)
        except etree.XMLSyntaxError as exc:
            logger.warning("DOCX document part is not well-formed XML: %s", exc)
            return CanonicalBook()

        tokens = docx_tokens(root)
        if not tokens:
            chapters = chapters_from_paragraph_text(_run_text(root), chapter_title=DOCX_CHAPTER_TITLE)
        else:
            chapters = chapters_from_tokens(tokens)
        return build_book(chapters)

    def _read_document_part(self, data: bytes) -> bytes | None:
        try:
            with ZipFile(BytesIO(data), "r") as archive:
                if DOCUMENT_PART not in archive.namelist():
                    logger.warning("DOCX package has no %s", DOCUMENT_PART)
                    return None
                return archive.read(DOCUMENT_PART)
        except BadZipFile as exc:
            logger.warning("DOCX payload is not a ZIP package: %s", exc)
            return None
