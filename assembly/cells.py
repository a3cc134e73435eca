"""Auswertung einzelner Zelleninhalte (Text oder HTML-Fragment).

Durchgestrichene Werte (<s>, <strike>, <del>) sind der alte Wert, der übrige
Text der neue: "<s>248</s>?236" → alt 248, neu 236.
"""

import html
import re
from typing import Optional

from bs4 import BeautifulSoup

STRIKE_TAGS = ("s", "strike", "del")

_NEW_VALUE_PREFIX_RE = re.compile(r"^\s*[?→]\s*")
_WHITESPACE_RE = re.compile(r"\s+")
_BR_RE = re.compile(r"<br\s*/?>", re.IGNORECASE)


def _has_markup(text: str) -> bool:
    return "<" in text and ">" in text


def _clean(text: str) -> str:
    return _WHITESPACE_RE.sub(" ", text).strip()


def _soup(text: str) -> BeautifulSoup:
    return BeautifulSoup(_BR_RE.sub(" ", text), "html.parser")


def plain_text(text: Optional[str]) -> str:
    """Zelleninhalt ohne Markup, Leerraum zusammengefasst."""
    if not text:
        return ""
    if _has_markup(text):
        return _clean(_soup(text).get_text())
    return _clean(html.unescape(text))


def is_empty(text: Optional[str]) -> bool:
    """Leere Zelle: nur Leerraum (auch &nbsp;) oder "---"."""
    return plain_text(text) in ("", "---")


def has_strike(text: Optional[str]) -> bool:
    if not text or not _has_markup(text):
        return False
    return _soup(text).find(STRIKE_TAGS) is not None


def split_struck(text: Optional[str]) -> tuple[Optional[str], Optional[str]]:
    """Trennt neuen und durchgestrichenen alten Wert: (neu, alt)."""
    if not text:
        return None, None
    if not _has_markup(text):
        value = _clean(html.unescape(text))
        return (value or None), None
    soup = _soup(text)
    struck = soup.find_all(STRIKE_TAGS)
    if not struck:
        value = _clean(soup.get_text())
        return (value or None), None
    previous = _clean(" ".join(tag.get_text() for tag in struck))
    for tag in struck:
        tag.extract()
    current = _NEW_VALUE_PREFIX_RE.sub("", _clean(soup.get_text()))
    return (current or None), (previous or None)
