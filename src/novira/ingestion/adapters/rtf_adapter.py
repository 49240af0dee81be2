"""RTF adapter built on a small control-word tokenizer."""

from __future__ import annotations

import codecs
from dataclasses import dataclass, field
import logging
import re

from novira.ingestion.assembly import build_book, chapters_from_paragraph_text
from novira.ingestion.models import CanonicalBook

logger = logging.getLogger(__name__)

RTF_CHAPTER_TITLE = "RTF import"
DEFAULT_CODEPAGE = "latin-1"

_TOKEN_RE = re.compile(
    r"\\'(?P<hex>[0-9a-fA-F]{2})"
    r"|\\(?P<word>[a-zA-Z]+)(?P<param>-?\d+)? ?"
    r"|\\(?P<symbol>[^a-zA-Z])"
    r"|(?P<group>[{}])"
    r"|(?P<newline>\r\n|\r|\n)"
    r"|(?P<text>[^\\{}\r\n]+)",
    re.DOTALL,
)

# Groups whose content is metadata, never body text.
_SKIPPED_DESTINATIONS = frozenset(
    {
        "fonttbl",
        "colortbl",
        "stylesheet",
        "info",
        "pict",
        "listtable",
        "listoverridetable",
        "rsidtbl",
        "generator",
        "xmlnstbl",
        "themedata",
        "colorschememapping",
        "latentstyles",
        "datastore",
    }
)

_WORD_REPLACEMENTS = {
    "par": "\n\n",
    "pard": "\n\n",
    "line": "\n",
    "tab": " ",
}

_SYMBOL_REPLACEMENTS = {
    "\\": "\\",
    "{": "{",
    "}": "}",
    "~": "\u00a0",
    "_": "-",
    "\n": "\n\n",
    "\r": "\n\n",
}


def _resolve_codepage(param: str | None) -> str | None:
    if not param:
        return None
    name = f"cp{param}"
    try:
        codecs.lookup(name)
    except LookupError:
        logger.warning("Unsupported RTF code page %s, keeping %s", name, DEFAULT_CODEPAGE)
        return None
    return name


def _unicode_char(value: int) -> str:
    # \uN takes a signed 16-bit parameter.
    if value < 0:
        value += 0x10000
    return chr(value)


@dataclass(slots=True)
class _RtfState:
    codepage: str = DEFAULT_CODEPAGE
    parts: list[str] = field(default_factory=list)
    pending: bytearray = field(default_factory=bytearray)
    skip_stack: list[bool] = field(default_factory=lambda: [False])
    group_start: bool = False
    unicode_skip: int = 0
    unicode_fallback_length: int = 1

    @property
    def skipping(self) -> bool:
        return self.skip_stack[-1]

    def flush_bytes(self) -> None:
        if self.pending:
            if not self.skipping:
                self.parts.append(bytes(self.pending).decode(self.codepage, errors="replace"))
            self.pending.clear()

    def emit(self, text: str) -> None:
        if text and not self.skipping:
            self.parts.append(text)


def rtf_to_text(source: str) -> str:
    """Reduce RTF markup to plain text with blank lines between paragraphs."""

    state = _RtfState()

    for match in _TOKEN_RE.finditer(source):
        kind = match.lastgroup
        if kind == "newline":
            continue
        if kind == "hex":
            if state.unicode_skip:
                state.unicode_skip -= 1
                continue
            state.pending.append(int(match.group("hex"), 16))
            state.group_start = False
            continue

        state.flush_bytes()
        if kind != "text":
            state.unicode_skip = 0

        if kind == "group":
            if match.group("group") == "{":
                state.skip_stack.append(state.skipping)
                state.group_start = True
            else:
                if len(state.skip_stack) > 1:
                    state.skip_stack.pop()
                state.group_start = False
            continue

        if kind == "word":
            word = match.group("word")
            if state.group_start and word in _SKIPPED_DESTINATIONS:
                state.skip_stack[-1] = True
            elif word == "ansicpg":
                state.codepage = _resolve_codepage(match.group("param")) or state.codepage
            elif word == "uc" and match.group("param"):
                state.unicode_fallback_length = max(int(match.group("param")), 0)
            elif word == "u" and match.group("param"):
                state.emit(_unicode_char(int(match.group("param"))))
                state.unicode_skip = state.unicode_fallback_length
                state.group_start = False
                continue
            else:
                state.emit(_WORD_REPLACEMENTS.get(word, ""))
        elif kind == "symbol":
            symbol = match.group("symbol")
            if state.group_start and symbol == "*":
                state.skip_stack[-1] = True
            else:
                state.emit(_SYMBOL_REPLACEMENTS.get(symbol, ""))
        elif kind == "text":
            text = match.group("text")
            if state.unicode_skip:
                skipped = min(state.unicode_skip, len(text))
                text = text[skipped:]
                state.unicode_skip -= skipped
            state.emit(text)

        state.group_start = False

    state.flush_bytes()
    return "".join(state.parts)


class RTFAdapter:
    """Extract paragraphs from RTF into one flat chapter."""

    def extract(self, data: bytes) -> CanonicalBook:
        text = rtf_to_text(data.decode("latin-1"))
        return build_book(chapters_from_paragraph_text(text, chapter_title=RTF_CHAPTER_TITLE))
