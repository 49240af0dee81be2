"""Project Gutenberg HTML-ZIP importer."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
import io
import logging
import re
from typing import Sequence
import zipfile

from bs4 import BeautifulSoup

from novira.external.cjk import resegment_by_hui_headings
from novira.external.config import GutenbergSettings
from novira.external.fetcher import ArchiveFetcher
from novira.ingestion.charset import decode_html_bytes
from novira.ingestion.hashing import sha256_hex
from novira.ingestion.html import canonicalize_html
from novira.ingestion.html.pipeline import HTML_PARSER
from novira.ingestion.models import CanonicalBook

logger = logging.getLogger(__name__)

PROJECT_GUTENBERG_SOURCE = "project_gutenberg"
PROJECT_GUTENBERG_LICENSE_URL = "https://www.gutenberg.org/policy/license.html"

IMAGE_TAGS = ("img", "picture", "figure", "svg")
BOILERPLATE_CANDIDATE_TAGS = ("p", "pre", "div", "h1", "h2", "h3", "h4", "h5", "h6", "section", "article")
RESIDUAL_ATTRIBUTION_TAGS = ("p", "div", "pre")
MAX_RESIDUAL_ATTRIBUTIONS = 2

_HTML_ENTRY_RE = re.compile(r"\.(htm|html)$", re.IGNORECASE)
_START_MARKER_RE = re.compile(r"start of (the|this) project gutenberg ebook", re.IGNORECASE)
_END_MARKER_RE = re.compile(r"end of (the|this) project gutenberg ebook", re.IGNORECASE)
_START_PREFIX_RE = re.compile(r"^\*\*\*\s*start of", re.IGNORECASE)
_END_PREFIX_RE = re.compile(r"^\*\*\*\s*end of", re.IGNORECASE)
_ATTRIBUTION_RE = re.compile(r"project gutenberg", re.IGNORECASE)
_WHITESPACE_RE = re.compile(r"\s+")


@dataclass(slots=True)
class GutenbergImportError(RuntimeError):
    work_id: str
    message: str

    def __str__(self) -> str:
        return f"{self.message} (work_id={self.work_id})"


@dataclass(slots=True)
class GutenbergImportResult:
    canonical: CanonicalBook
    source_url: str
    source_work_id: str
    source_retrieved_at: str
    source_original_sha256: str
    source_filename: str
    zip_bytes: bytes
    title_hint: str
    source_name: str = PROJECT_GUTENBERG_SOURCE
    source_license_url: str = PROJECT_GUTENBERG_LICENSE_URL


def apply_work_id_template(template: str, work_id: str) -> str:
    return template.replace("{work_id}", work_id).replace("{id}", work_id).replace("{workId}", work_id)


def build_zip_urls(work_id: str, *, mirrors: Sequence[str] = (), url_template: str) -> list[str]:
    """Mirror URLs first, then the templated default; duplicates dropped, order kept."""

    urls = [f"{mirror.rstrip('/')}/cache/epub/{work_id}/pg{work_id}-h.zip" for mirror in mirrors if mirror]
    urls.append(apply_work_id_template(url_template, work_id))
    return [url for url in dict.fromkeys(urls) if url]


def score_html_entry(name: str) -> int:
    lower = name.lower()
    score = 0
    if lower.endswith("-h.htm") or lower.endswith("-h.html"):
        score += 60
    if "/pg" in lower:
        score += 25
    if "index" in lower:
        score -= 20
    return score


def discover_main_html_entry(names: Sequence[str]) -> str | None:
    """Highest-scoring HTML entry name; ties keep archive order."""

    candidates = [name for name in names if not name.endswith("/") and _HTML_ENTRY_RE.search(name)]
    if not candidates:
        return None
    return sorted(candidates, key=score_html_entry, reverse=True)[0]


def _element_text(tag) -> str:
    return _WHITESPACE_RE.sub(" ", tag.get_text()).strip()


def _leaf_blocks(root, names: Sequence[str]) -> list:
    # Innermost blocks only; a wrapper matches every marker it contains.
    return [tag for tag in root.find_all(list(names)) if tag.find(list(names)) is None]


def _is_start_marker(text: str) -> bool:
    return bool(_START_MARKER_RE.search(text) or _START_PREFIX_RE.search(text))


def _is_end_marker(text: str) -> bool:
    return bool(_END_MARKER_RE.search(text) or _END_PREFIX_RE.search(text))


def remove_image_nodes(soup: BeautifulSoup) -> None:
    for tag in soup.find_all(list(IMAGE_TAGS)):
        tag.extract()


def strip_gutenberg_boilerplate(soup: BeautifulSoup) -> None:
    """Drop everything up to the start marker and from the end marker onward.

    Up to two residual paragraphs still mentioning Project Gutenberg are
    removed afterwards.
    """

    root = soup.body or soup
    candidates = _leaf_blocks(root, BOILERPLATE_CANDIDATE_TAGS)
    texts = [_element_text(tag) for tag in candidates]

    start_index = next((index for index, text in enumerate(texts) if _is_start_marker(text)), -1)
    end_index = next((index for index, text in enumerate(texts) if _is_end_marker(text)), -1)

    doomed: list = []
    if start_index >= 0:
        doomed.extend(candidates[: start_index + 1])
    if end_index >= 0:
        doomed.extend(candidates[end_index:])
    if doomed:
        logger.info("Stripping boilerplate: start marker=%d end marker=%d", start_index, end_index)
    for tag in doomed:
        tag.extract()

    root = soup.body or soup
    residual = [
        tag for tag in _leaf_blocks(root, RESIDUAL_ATTRIBUTION_TAGS) if _ATTRIBUTION_RE.search(tag.get_text())
    ]
    for tag in residual[:MAX_RESIDUAL_ATTRIBUTIONS]:
        tag.extract()


def clean_gutenberg_html(html: str) -> str:
    soup = BeautifulSoup(html, HTML_PARSER)
    remove_image_nodes(soup)
    strip_gutenberg_boilerplate(soup)
    return str(soup)


class GutenbergImporter:
    """Fetch a work's HTML ZIP and canonicalize its main HTML entry."""

    def __init__(self, settings: GutenbergSettings | None = None, *, fetcher: ArchiveFetcher | None = None) -> None:
        self._settings = settings or GutenbergSettings()
        self._fetcher = fetcher or ArchiveFetcher(
            user_agent=self._settings.user_agent,
            retries_per_url=self._settings.retry_count,
            min_interval_seconds=self._settings.request_interval_seconds,
            timeout_seconds=self._settings.request_timeout_seconds,
        )

    def candidate_urls(self, work_id: str) -> list[str]:
        return build_zip_urls(work_id, mirrors=self._settings.mirrors, url_template=self._settings.url_template)

    def import_work(self, work_id: int) -> GutenbergImportResult:
        if work_id < 1:
            raise ValueError("work_id must be a positive integer")

        source_work_id = str(work_id)
        fetched = self._fetcher.fetch_first(self.candidate_urls(source_work_id), work_id=source_work_id)
        logger.info("Downloaded %d bytes for work %s from %s", len(fetched.content), source_work_id, fetched.url)

        try:
            with zipfile.ZipFile(io.BytesIO(fetched.content)) as archive:
                entry_name = discover_main_html_entry(archive.namelist())
                if entry_name is None:
                    raise GutenbergImportError(source_work_id, "Archive contains no HTML entry")
                raw_html = archive.read(entry_name)
        except zipfile.BadZipFile as exc:
            raise GutenbergImportError(source_work_id, f"Downloaded file is not a ZIP archive: {exc}") from exc

        cleaned_html = clean_gutenberg_html(decode_html_bytes(raw_html))
        canonical = resegment_by_hui_headings(canonicalize_html(cleaned_html))
        if not canonical.chapters:
            raise GutenbergImportError(source_work_id, "No chapter or block content could be extracted")

        first_title = (canonical.chapters[0].title or "").strip()
        return GutenbergImportResult(
            canonical=canonical,
            source_url=fetched.url,
            source_work_id=source_work_id,
            source_retrieved_at=datetime.now(timezone.utc).isoformat(),
            source_original_sha256=sha256_hex(cleaned_html),
            source_filename=entry_name.rsplit("/", 1)[-1] or f"pg{source_work_id}-h.htm",
            zip_bytes=fetched.content,
            title_hint=first_title or f"Project Gutenberg #{source_work_id}",
        )
