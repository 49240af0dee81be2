from __future__ import annotations

from bs4 import BeautifulSoup

from novira.ingestion.html import canonicalize_html
from novira.ingestion.html.blocks import merge_short_fragments, normalize_blocks
from novira.ingestion.html.chapters import ChapterDraft, extract_chapters, is_chapter_heading, looks_like_noise
from novira.ingestion.html.pipeline import promote_leading_title
from novira.ingestion.html.title import UNTITLED, extract_title
from novira.ingestion.models import CanonicalBlock, CanonicalChapter


def _soup(html: str) -> BeautifulSoup:
    return BeautifulSoup(html, "lxml")


def test_canonical_book_has_dense_chapter_and_block_indices() -> None:
    html = """
    <html><head><title>Szerző: Regény</title></head><body>
    <h2>ELSŐ FEJEZET</h2>
    <p>Ez az első bekezdés, amely elég hosszú ahhoz.</p>
    <p>rövid</p>
    <h2>Üres fejezet</h2>
    <h2>Második fejezet</h2>
    <p>  A második fejezet   egyetlen hosszú bekezdése itt. </p>
    </body></html>
    """

    book = canonicalize_html(html)

    assert book.title == "Regény"
    assert [chapter.order_index for chapter in book.chapters] == [1, 2]
    assert [chapter.title for chapter in book.chapters] == ["ELSŐ FEJEZET", "Második fejezet"]
    for chapter in book.chapters:
        assert chapter.blocks
        assert [block.order_index for block in chapter.blocks] == list(range(1, len(chapter.blocks) + 1))
        for block in chapter.blocks:
            assert block.raw_text
            assert block.raw_text == block.raw_text.strip()

    assert book.chapters[0].blocks[0].raw_text == "Ez az első bekezdés, amely elég hosszú ahhoz. rövid"
    assert book.chapters[1].blocks[0].raw_text == "A második fejezet egyetlen hosszú bekezdése itt."


def test_short_fragment_is_absorbed_into_previous_block() -> None:
    chapters = normalize_blocks(
        [
            ChapterDraft(
                order=1,
                blocks=[
                    "Hello world this is long enough.",
                    "ok",
                    "Another long enough sentence here.",
                ],
            )
        ]
    )

    texts = [block.raw_text for block in chapters[0].blocks]
    assert len(texts) == 2
    assert texts[0].endswith("enough. ok")
    assert [block.order_index for block in chapters[0].blocks] == [1, 2]


def test_leading_short_fragment_stays_standalone() -> None:
    assert merge_short_fragments(["rövid", "ez pedig egy kellően hosszú bekezdés"]) == [
        "rövid",
        "ez pedig egy kellően hosszú bekezdés",
    ]


def test_heading_classification() -> None:
    soup = _soup("<body><p>x</p><h2>Valami cím</h2></body>")
    paragraph = soup.find("p")
    heading = soup.find("h2")

    assert is_chapter_heading(paragraph, "CHAPTER TITLE HERE")
    assert is_chapter_heading(paragraph, "3. The Beginning")
    assert is_chapter_heading(paragraph, "II. Az utazás")
    assert is_chapter_heading(heading, "Valami cím")
    assert not is_chapter_heading(paragraph, "A" * 200)
    assert not is_chapter_heading(paragraph, "Ez egy átlagos mondat.")
    assert not is_chapter_heading(paragraph, "\uff13 fejezet kezdete")


def test_title_after_first_colon_is_extracted() -> None:
    soup = _soup("<html><head><title>Mikszáth: A jó palócok</title></head><body><p>Szöveg</p></body></html>")

    assert extract_title(soup) == "A jó palócok"


def test_title_falls_back_through_candidates() -> None:
    assert extract_title(_soup("<html><head><title>Szerző:</title></head><body><h1> Cím </h1></body></html>")) == "Cím"
    assert extract_title(_soup("<body><p>abc</p><p>Megfelelő hosszú cím</p></body>")) == "Megfelelő hosszú cím"
    assert extract_title(_soup("<body><p>abc</p></body>")) == UNTITLED


def test_script_only_body_yields_empty_book() -> None:
    book = canonicalize_html("<html><body><script>var a = 1;</script><style>p { color: red; }</style></body></html>")

    assert book.chapters == []
    assert book.is_empty


def test_segmenter_reads_direct_body_paragraphs_only() -> None:
    soup = _soup(
        "<body><div><p>Beágyazott bekezdés ami nem számít.</p></div>"
        "<p>Közvetlen bekezdés a törzsben.</p></body>"
    )

    chapters = extract_chapters(soup)

    assert len(chapters) == 1
    assert chapters[0].title is None
    assert chapters[0].blocks == ["Közvetlen bekezdés a törzsben."]


def test_segmenter_skips_navigation_noise_and_never_returns_nothing() -> None:
    soup = _soup("<body><p>Tartalom</p><p>1. fejezet</p><p>Vissza a tetejére</p><p>Igazi szöveg.</p></body>")

    chapters = extract_chapters(soup)

    assert [chapter.title for chapter in chapters] == ["1. fejezet"]
    assert chapters[0].blocks == ["Igazi szöveg."]
    assert looks_like_noise("Ugrás a tartalomhoz")

    empty = extract_chapters(_soup("<body></body>"))
    assert len(empty) == 1
    assert empty[0].order == 1
    assert empty[0].title is None
    assert empty[0].blocks == []


def test_noise_never_opens_a_chapter() -> None:
    soup = _soup(
        "<body><h2>Első fejezet</h2>"
        "<p>Az első fejezet eleje, elég hosszú bekezdés.</p>"
        "<p>VISSZA A TETEJÉRE</p>"
        "<p>Az első fejezet folytatása ugyanitt marad.</p>"
        "<h3>Tartalom</h3></body>"
    )

    chapters = extract_chapters(soup)

    assert [chapter.title for chapter in chapters] == ["Első fejezet"]
    assert chapters[0].blocks == [
        "Az első fejezet eleje, elég hosszú bekezdés.",
        "Az első fejezet folytatása ugyanitt marad.",
    ]


def test_untitled_first_chapter_takes_caps_first_block_as_title() -> None:
    chapters = [
        CanonicalChapter(
            order_index=1,
            blocks=[
                CanonicalBlock(order_index=1, raw_text="1848"),
                CanonicalBlock(order_index=2, raw_text="A történet innen indul."),
            ],
        )
    ]

    promote_leading_title(chapters)

    assert chapters[0].title == "1848"
    assert [block.raw_text for block in chapters[0].blocks] == ["A történet innen indul."]


def test_single_cell_layout_table_becomes_chapter_content() -> None:
    book = canonicalize_html(
        "<html><body><table><tr><td><p>Ez egy táblázatba csomagolt hosszú bekezdés.</p></td></tr></table>"
        "</body></html>"
    )

    assert len(book.chapters) == 1
    assert book.chapters[0].title == ""
    assert [block.raw_text for block in book.chapters[0].blocks] == [
        "Ez egy táblázatba csomagolt hosszú bekezdés."
    ]
