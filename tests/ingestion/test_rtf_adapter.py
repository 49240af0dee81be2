from __future__ import annotations

from novira.ingestion.adapters.rtf_adapter import RTF_CHAPTER_TITLE, RTFAdapter, rtf_to_text


def _extract(source: str):
    return RTFAdapter().extract(source.encode("latin-1"))


def test_rtf_paragraphs_become_one_flat_chapter() -> None:
    source = (
        r"{\rtf1\ansi\ansicpg1250\deff0{\fonttbl{\f0 Times New Roman;}}{\colortbl;\red0\green0\blue0;}"
        r"\pard Els\'f5 bekezd\'e9s.\par M\'e1sodik\line sor\tab v\'e9ge\par}"
    )

    book = _extract(source)

    assert len(book.chapters) == 1
    assert book.chapters[0].title == RTF_CHAPTER_TITLE
    assert [block.raw_text for block in book.chapters[0].blocks] == ["Első bekezdés.", "Második\nsor vége"]


def test_destination_groups_do_not_leak_into_text() -> None:
    text = rtf_to_text(r"{\rtf1{\*\generator Riched20 10.0;}{\info{\author Valaki}}Szoveg marad\par}")

    assert "Riched20" not in text
    assert "Valaki" not in text
    assert "Szoveg marad" in text


def test_control_symbols_are_unescaped() -> None:
    assert rtf_to_text(r"{\rtf1 a\{b\}c\\d\par}").strip() == "a{b}c\\d"


def test_default_codepage_is_latin1() -> None:
    assert rtf_to_text(r"{\rtf1 caf\'e9\par}").strip() == "café"


def test_unicode_escape_skips_fallback_character() -> None:
    assert rtf_to_text(r"{\rtf1\ansi \u337?rizni\par}").strip() == "őrizni"


def test_malformed_but_nonempty_input_keeps_text() -> None:
    book = RTFAdapter().extract(b"not really rtf")

    assert [block.raw_text for block in book.chapters[0].blocks] == ["not really rtf"]


def test_markup_only_document_yields_empty_book() -> None:
    assert RTFAdapter().extract(rb"{\rtf1\ansi{\fonttbl{\f0 Arial;}}\par\par}").is_empty
