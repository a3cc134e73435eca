"""Gemeinsame Hilfsfunktionen für den Excel-Export."""

from datetime import date
from typing import Optional

# ─── Farbpalette (RRGGBB, ohne #) ─────────────────────────────────────────────

COLORS: dict[str, str] = {
    "header":  "4472C4",
    "day":     "D9E1F2",
    "message": "FFF2CC",
    "free":    "F5F5F5",
}


def hex_to_rgb(hex_color: str) -> tuple[int, int, int]:
    """Wandelt RRGGBB-String in (r, g, b)-Tupel um."""
    h = hex_color.lstrip("#")
    return int(h[0:2], 16), int(h[2:4], 16), int(h[4:6], 16)


def lighten(hex_color: str, factor: float = 0.6) -> str:
    """Hellt eine Farbe auf (0 = unverändert, 1 = weiß). Ergebnis ohne #."""
    r, g, b = hex_to_rgb(hex_color)
    r, g, b = (round(c + (255 - c) * factor) for c in (r, g, b))
    return f"{r:02X}{g:02X}{b:02X}"


def type_fill_color(color: Optional[str]) -> str:
    """Zellfarbe zur Farbe einer Vertretungsart."""
    if not color:
        return COLORS["free"]
    return lighten(color)


def today_str() -> str:
    """Gibt das heutige Datum als DD.MM.YYYY zurück."""
    return date.today().strftime("%d.%m.%Y")


def sheet_title(text: str, used: set[str]) -> str:
    """Gültiger, eindeutiger Blattname (max. 31 Zeichen, ohne []:*?/\\)."""
    cleaned = "".join(c for c in text if c not in "[]:*?/\\").strip() or "Tag"
    title = cleaned[:31]
    n = 2
    while title in used:
        suffix = f" ({n})"
        title = cleaned[: 31 - len(suffix)] + suffix
        n += 1
    used.add(title)
    return title
