"""Farbzuordnung für Vertretungsarten.

Reihenfolge der Suche: schulspezifische Zuordnung, Standardtabelle, Lila.
"""

import re
from typing import Mapping, Optional

from config.defaults import COLOR_NAMES, DEFAULT_TYPE_COLORS, FALLBACK_COLOR

_HEX_RE = re.compile(r"^#[0-9A-Fa-f]{6}$")


def resolve_color(value: str) -> str:
    """Farbname ("red") oder Hex-Wert ("#123456") → Hex-Wert."""
    if _HEX_RE.match(value):
        return value
    try:
        return COLOR_NAMES[value.lower()]
    except KeyError:
        raise ValueError(
            f"Unbekannte Farbe '{value}'. Erlaubt: {', '.join(COLOR_NAMES)} oder #RRGGBB"
        ) from None


class ColorProvider:
    """Liefert die Anzeigefarbe zu einer Vertretungsart."""

    def __init__(self, overrides: Optional[Mapping[str, str]] = None,
                 defaults: Mapping[str, tuple[str, ...]] = DEFAULT_TYPE_COLORS):
        self._overrides = {
            type_.lower(): resolve_color(color)
            for type_, color in (overrides or {}).items()
        }
        self._defaults = {
            type_.lower(): COLOR_NAMES[color]
            for color, types in defaults.items()
            for type_ in types
        }

    def get_color(self, type_: Optional[str]) -> Optional[str]:
        if type_ is None:
            return None
        key = type_.lower()
        if key in self._overrides:
            return self._overrides[key]
        return self._defaults.get(key, COLOR_NAMES[FALLBACK_COLOR])
