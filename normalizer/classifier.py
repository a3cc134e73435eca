"""Erkennung der Vertretungsart aus Freitext.

Die Regeln werden der Reihe nach geprüft, die erste passende gewinnt.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Sequence

from config.defaults import (
    CANCELLATION_KEYWORDS,
    LITERAL_TYPES,
    TYPE_PREFIXES,
    TYPE_SUBSTRINGS,
)
from models.substitution import CANCELLATION_TYPE


@dataclass(frozen=True)
class KeywordRule:
    """Enthält der Text (ohne Groß-/Kleinschreibung) eines der Stichwörter → label."""

    keywords: tuple[str, ...]
    label: str

    def apply(self, text: str) -> Optional[str]:
        lowered = text.lower()
        return self.label if any(k in lowered for k in self.keywords) else None


@dataclass(frozen=True)
class LiteralRule:
    """Bekannte Typen werden unverändert übernommen."""

    values: frozenset[str]

    def apply(self, text: str) -> Optional[str]:
        return text if text in self.values else None


@dataclass(frozen=True)
class PrefixRule:
    prefix: str
    label: str

    def apply(self, text: str) -> Optional[str]:
        return self.label if text.startswith(self.prefix) else None


@dataclass(frozen=True)
class SubstringRule:
    substring: str
    label: str

    def apply(self, text: str) -> Optional[str]:
        return self.label if self.substring in text else None


def default_rules() -> tuple:
    return (
        KeywordRule(CANCELLATION_KEYWORDS, CANCELLATION_TYPE),
        LiteralRule(frozenset(LITERAL_TYPES)),
        *(PrefixRule(prefix, label) for prefix, label in TYPE_PREFIXES),
        *(SubstringRule(sub, label) for sub, label in TYPE_SUBSTRINGS),
    )


class TypeClassifier:
    """Ordnet einem Freitext eine Vertretungsart zu ("Entfall", "Verlegung", ...)."""

    def __init__(self, rules: Optional[Sequence] = None):
        self.rules = tuple(rules) if rules is not None else default_rules()

    def classify(self, text: Optional[str]) -> Optional[str]:
        """Liefert die Art oder None, wenn keine Regel greift."""
        if not text:
            return None
        for rule in self.rules:
            label = rule.apply(text)
            if label is not None:
                return label
        return None
