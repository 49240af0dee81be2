from __future__ import annotations

import io
import zipfile

import pytest

from novira.external.config import GutenbergSettings
from novira.external.fetcher import FetchedArchive
from novira.external.gutenberg import (
    PROJECT_GUTENBERG_LICENSE_URL,
    GutenbergImporter,
    GutenbergImportError,
    apply_work_id_template,
    build_zip_urls,
    clean_gutenberg_html,
    discover_main_html_entry,
    score_html_entry,
)
from novira.ingestion.hashing import sha256_hex

_BOOK_HTML = """<html><head><meta charset="utf-8"><title>The Project Gutenberg eBook of Próba</title></head><body>
<p>The Project Gutenberg eBook of Próba</p>
<p>*** START OF THE PROJECT GUTENBERG EBOOK PRÓBA ***</p>
<img src="cover.jpg" alt="cover">
<h2>I. FEJEZET</h2>
<p>Ez az első fejezet első, kellően hosszú bekezdése.</p>
<figure><svg></svg><figcaption>Ábra felirata</figcaption></figure>
<h2>II. FEJEZET</h2>
<p>Ez a második fejezet szintén kellően hosszú bekezdése.</p>
<p>*** END OF THE PROJECT GUTENBERG EBOOK PRÓBA ***</p>
<p>Updated editions will replace the previous one.</p>
</body></html>"""


class _FakeFetcher:
    def __init__(self, content: bytes) -> None:
        self._content = content
        self.calls: list[tuple[list[str], str]] = []

    def fetch_first(self, urls: list[str], *, work_id: str) -> FetchedArchive:
        self.calls.append((list(urls), work_id))
        return FetchedArchive(url=urls[-1], content=self._content)


def _zip(entries: dict[str, str]) -> bytes:
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w") as archive:
        for name, content in entries.items():
            archive.writestr(name, content)
    return buffer.getvalue()


def test_candidate_urls_put_mirrors_first_and_deduplicate() -> None:
    urls = build_zip_urls(
        "2701",
        mirrors=("https://mirror.example/", "https://www.gutenberg.org"),
        url_template="https://www.gutenberg.org/cache/epub/{work_id}/pg{work_id}-h.zip",
    )

    assert urls == [
        "https://mirror.example/cache/epub/2701/pg2701-h.zip",
        "https://www.gutenberg.org/cache/epub/2701/pg2701-h.zip",
    ]


def test_work_id_template_placeholders() -> None:
    assert apply_work_id_template("https://x/{id}/{workId}/{work_id}.zip", "12") == "https://x/12/12/12.zip"


def test_main_html_entry_is_chosen_by_score() -> None:
    names = ["2701/index.html", "2701/images/cover.jpg", "2701/pg2701-images.html", "2701/pg2701-h.htm"]

    assert score_html_entry("2701/pg2701-h.htm") == 85
    assert score_html_entry("2701/index.html") == -20
    assert discover_main_html_entry(names) == "2701/pg2701-h.htm"
    assert discover_main_html_entry(["a.html", "b.HTML"]) == "a.html"
    assert discover_main_html_entry(["readme.txt", "folder.html/"]) is None


def test_boilerplate_and_images_are_stripped() -> None:
    cleaned = clean_gutenberg_html(_BOOK_HTML)

    assert "START OF THE PROJECT" not in cleaned
    assert "END OF THE PROJECT" not in cleaned
    assert "Updated editions" not in cleaned
    assert "<img" not in cleaned
    assert "<svg" not in cleaned
    assert "<figure" not in cleaned
    assert "Ez az első fejezet első, kellően hosszú bekezdése." in cleaned


def test_wrapper_div_does_not_swallow_the_book() -> None:
    html = (
        "<html><body><div id='book'>"
        "<p>*** START OF THE PROJECT GUTENBERG EBOOK X ***</p>"
        "<p>A könyv szövege marad.</p>"
        "<p>Distributed by Project Gutenberg volunteers.</p>"
        "</div></body></html>"
    )

    cleaned = clean_gutenberg_html(html)

    assert "A könyv szövege marad." in cleaned
    assert "START OF" not in cleaned
    assert "Distributed by" not in cleaned


def test_at_most_two_residual_attributions_are_removed() -> None:
    html = (
        "<html><body>"
        "<p>*** START OF THE PROJECT GUTENBERG EBOOK X ***</p>"
        "<p>Első Project Gutenberg megjegyzés.</p>"
        "<p>Második project gutenberg megjegyzés.</p>"
        "<p>Harmadik Project Gutenberg megjegyzés.</p>"
        "<p>A könyv szövege marad.</p>"
        "</body></html>"
    )

    cleaned = clean_gutenberg_html(html)

    assert "Első" not in cleaned
    assert "Második" not in cleaned
    assert "Harmadik Project Gutenberg megjegyzés." in cleaned
    assert "A könyv szövege marad." in cleaned


def test_import_work_produces_canonical_book_and_provenance() -> None:
    archive = _zip({"2701/index.html": "<p>index</p>", "2701/pg2701-h.htm": _BOOK_HTML})
    fetcher = _FakeFetcher(archive)
    settings = GutenbergSettings(mirrors=("https://mirror.example",))

    result = GutenbergImporter(settings, fetcher=fetcher).import_work(2701)

    assert fetcher.calls[0][1] == "2701"
    assert fetcher.calls[0][0][0] == "https://mirror.example/cache/epub/2701/pg2701-h.zip"
    assert [chapter.title for chapter in result.canonical.chapters] == ["I. FEJEZET", "II. FEJEZET"]
    assert result.canonical.chapters[0].blocks[0].raw_text == "Ez az első fejezet első, kellően hosszú bekezdése."
    assert result.source_name == "project_gutenberg"
    assert result.source_work_id == "2701"
    assert result.source_license_url == PROJECT_GUTENBERG_LICENSE_URL
    assert result.source_filename == "pg2701-h.htm"
    assert result.source_original_sha256 == sha256_hex(clean_gutenberg_html(_BOOK_HTML))
    assert result.zip_bytes == archive
    assert result.title_hint == "I. FEJEZET"
    assert result.source_retrieved_at.endswith("+00:00")


def test_archive_without_html_is_rejected() -> None:
    importer = GutenbergImporter(fetcher=_FakeFetcher(_zip({"2701/readme.txt": "x"})))

    with pytest.raises(GutenbergImportError, match="no HTML entry"):
        importer.import_work(2701)


def test_non_zip_payload_is_rejected() -> None:
    importer = GutenbergImporter(fetcher=_FakeFetcher(b"<html>not a zip</html>"))

    with pytest.raises(GutenbergImportError, match="not a ZIP"):
        importer.import_work(2701)


def test_contentless_html_is_rejected() -> None:
    importer = GutenbergImporter(fetcher=_FakeFetcher(_zip({"pg1-h.htm": "<html><body><script></script></body></html>"})))

    with pytest.raises(GutenbergImportError, match="No chapter or block content"):
        importer.import_work(1)


def test_work_id_must_be_positive() -> None:
    with pytest.raises(ValueError, match="work_id"):
        GutenbergImporter(fetcher=_FakeFetcher(b"")).import_work(0)
