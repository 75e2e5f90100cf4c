"""
Free-text normalization for imported records.

Source documents routinely ship HTML fragments, double-encoded entities and
ragged whitespace inside plain fields. ``sanitize_value`` reduces any of that to
a single line of plain text; ``sanitize_entry`` applies it to every string in a
record.
"""

from __future__ import annotations

import html
import re
import warnings
from typing import MutableMapping

from bs4 import BeautifulSoup, MarkupResemblesLocatorWarning

_WHITESPACE_RE = re.compile(r"\s+")

# Elements whose contents are never text.
_REMOVED_ELEMENTS = ("script", "style", "head", "template")

# Elements that separate words when rendered.
_BLOCK_ELEMENTS = (
    "address",
    "article",
    "aside",
    "blockquote",
    "br",
    "dd",
    "div",
    "dl",
    "dt",
    "footer",
    "h1",
    "h2",
    "h3",
    "h4",
    "h5",
    "h6",
    "header",
    "hr",
    "li",
    "ol",
    "p",
    "pre",
    "section",
    "table",
    "td",
    "th",
    "tr",
    "ul",
)

_MAX_PASSES = 10

warnings.filterwarnings("ignore", category=MarkupResemblesLocatorWarning)


def squish(value: str) -> str:
    """Collapse whitespace runs to single spaces and trim both ends."""
    return _WHITESPACE_RE.sub(" ", value).strip()


def strip_markup(value: str) -> str:
    """Remove every tag, keeping text content only."""
    soup = BeautifulSoup(value, "html.parser")
    for element in soup.find_all(_REMOVED_ELEMENTS):
        element.decompose()
    for element in soup.find_all(_BLOCK_ELEMENTS):
        element.insert_before(" ")
        element.insert_after(" ")
    return soup.get_text()


def _clean_once(value: str) -> str:
    return squish(strip_markup(html.unescape(value)))


def sanitize_value(value: str) -> str:
    """
    Decode entities, strip markup and squish whitespace.

    Decoding can reveal new markup (``&lt;b&gt;``) and stripping can reveal new
    entities, so the cleanup repeats until the text stops changing.
    """
    cleaned = _clean_once(value)
    for _ in range(_MAX_PASSES):
        again = _clean_once(cleaned)
        if again == cleaned:
            break
        cleaned = again
    return cleaned


def sanitize_entry(entry: MutableMapping[str, object | None]) -> MutableMapping[str, object | None]:
    """Sanitize string fields in place; strings left blank become ``None``."""
    for key, value in entry.items():
        if not isinstance(value, str):
            continue
        entry[key] = (sanitize_value(value) if value.strip() else "") or None
    return entry
