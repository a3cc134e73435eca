"""Auflösen von Klassenangaben zu einzelnen Klassen.

Unterstützt werden Listen ("5a, 5b"), Jahrgänge ("7"), Jahrgangsbereiche
("5-12"), Klammerschreibweise ("07 [A,B,C]"), zusammengeschriebene Angaben
("8ab9abc") sowie schulspezifische Bereichsvorlagen ("7A-C" mit
range_format "gc-c").
"""

from __future__ import annotations

import itertools
import logging
import re
from typing import TYPE_CHECKING, Iterable, Optional, Sequence, Union

import exrex

from config.defaults import EXCLUDED_CLASS_NAMES, MAX_ENUMERATED_CLASSES
from normalizer.text import natural_sorted

if TYPE_CHECKING:
    from config.schema import ClassRangeConfig, SchoolScheduleConfig

logger = logging.getLogger(__name__)

_GRADE_RANGE_RE = re.compile(r"(\d+) ?- ?(\d+)")
_GRADE_RE = re.compile(r"(\d+)")
_LEADING_GRADE_RE = re.compile(r"\d+")
_BRACKET_RE = re.compile(r"(\d+)\s*\[([^\]]+)\]")
_UNSEPARATED_TOKEN_RE = re.compile(r"(\d+)(\D*)")
_UNSEPARATED_NOISE_RE = re.compile(r"[\s,()\[\]]")


def enumerate_regex(pattern: str, limit: int = MAX_ENUMERATED_CLASSES) -> list[str]:
    """Alle Zeichenketten, auf die der Ausdruck passt (höchstens ``limit``)."""
    return list(itertools.islice(exrex.generate(pattern), limit))


def classes_from_roster(roster: Union[Sequence[str], str, None]) -> list[str]:
    """Klassenliste aus der Konfiguration: Liste oder regulärer Ausdruck."""
    if not roster:
        return []
    if isinstance(roster, str):
        return natural_sorted(set(enumerate_regex(roster)))
    return list(roster)


def get_class_name(text: str, class_regex: Optional[str]) -> str:
    """Schneidet die Klasse per Regex aus ("Klasse 5a" → "5a").

    Enthält der Ausdruck eine Gruppe, zählt deren Inhalt; passt er nicht,
    ist das Ergebnis leer.
    """
    if not class_regex:
        return text
    match = re.search(class_regex, text)
    if match is None:
        return ""
    return match.group(1) if match.re.groups >= 1 else match.group(0)


# ─── Bereichsvorlagen ─────────────────────────────────────────────────────────

def build_range_regex(range_format: str, grade_regex: str, class_regex: str) -> re.Pattern:
    """Übersetzt eine Vorlage wie "gc-c" in einen regulären Ausdruck.

    ``g`` steht für den Jahrgang (bei Wiederholung als Rückverweis), ``c`` für
    die erste und letzte Klasse des Bereichs. Alle anderen Zeichen sind Text.
    """
    parts = []
    grade_seen = False
    class_count = 0
    for char in range_format:
        if char == "g":
            parts.append("(?P=grade)" if grade_seen else f"(?P<grade>{grade_regex})")
            grade_seen = True
        elif char == "c":
            class_count += 1
            if class_count > 2:
                raise ValueError(
                    f"range_format '{range_format}' darf höchstens zweimal 'c' enthalten"
                )
            parts.append(f"(?P<class{class_count}>{class_regex})")
        else:
            parts.append(re.escape(char))
    return re.compile("".join(parts))


def _single_pattern(single_format: str, grade: Optional[str],
                    first: str, last: str) -> str:
    parts = []
    for char in single_format:
        if char == "g":
            parts.append(re.escape(grade or ""))
        elif char == "c":
            parts.append(f"[{re.escape(first)}-{re.escape(last)}]")
        else:
            parts.append(re.escape(char))
    return "".join(parts)


def expand_class_ranges(classes: Union[str, Iterable[str]],
                        ranges: Optional["ClassRangeConfig"]) -> set[str]:
    """Löst Klassenbereiche nach der Vorlage auf; alles andere bleibt unverändert."""
    values = {classes} if isinstance(classes, str) else set(classes)
    if ranges is None:
        return values
    regex = build_range_regex(ranges.range_format, ranges.grade_regex, ranges.class_regex)
    result: set[str] = set()
    for value in values:
        match = regex.fullmatch(value)
        if match is None:
            result.add(value)
            continue
        groups = match.groupdict()
        pattern = _single_pattern(ranges.single_format, groups.get("grade"),
                                  groups["class1"], groups["class2"])
        try:
            expanded = enumerate_regex(pattern)
        except re.error as e:
            logger.warning(f"Klassenbereich '{value}' nicht auflösbar: {e}")
            result.add(value)
            continue
        result.update(expanded)
    return result


# ─── Auflösung gegen die Klassenliste ─────────────────────────────────────────

def _leading_grade(name: str) -> Optional[int]:
    match = _LEADING_GRADE_RE.match(name)
    return int(match.group(0)) if match else None


class ClassSetResolver:
    """Macht aus dem Text einer Klassenspalte eine Menge einzelner Klassen."""

    def __init__(
        self,
        roster: Union[Sequence[str], str, None] = (),
        ranges: Optional["ClassRangeConfig"] = None,
        exclude: Iterable[str] = (),
        classes_separated: bool = True,
        class_regex: Optional[str] = None,
    ):
        self.roster = classes_from_roster(roster)
        self.ranges = ranges
        self.exclude = frozenset(EXCLUDED_CLASS_NAMES) | frozenset(exclude)
        self.classes_separated = classes_separated
        self.class_regex = class_regex

    @classmethod
    def from_config(cls, config: "SchoolScheduleConfig") -> "ClassSetResolver":
        return cls(
            roster=config.classes,
            ranges=config.class_ranges,
            exclude=config.exclude_classes,
            classes_separated=config.classes_separated,
            class_regex=config.class_regex,
        )

    def resolve(self, text: Optional[str]) -> set[str]:
        if text is None:
            return set()
        raw = get_class_name(text.strip(), self.class_regex).strip()
        if not raw:
            return set()
        classes = self._split(raw)
        classes = expand_class_ranges(classes, self.ranges)
        return {c for c in classes if c and c not in self.exclude}

    def _split(self, raw: str) -> set[str]:
        grade_range = _GRADE_RANGE_RE.fullmatch(raw)
        if grade_range and self.roster:
            low, high = int(grade_range.group(1)), int(grade_range.group(2))
            grades = {c: _leading_grade(c) for c in self.roster}
            return {c for c, g in grades.items() if g is not None and low <= g <= high}

        if _GRADE_RE.fullmatch(raw) and self.roster:
            grade = int(raw)
            matching = {c for c in self.roster if _leading_grade(c) == grade}
            if matching:
                return matching

        bracket = _BRACKET_RE.fullmatch(raw)
        if bracket:
            grade = bracket.group(1)
            return {grade + letter.strip()
                    for letter in bracket.group(2).split(",") if letter.strip()}

        if self.classes_separated:
            return {part.strip() for part in raw.split(",") if part.strip()}
        return self._split_unseparated(raw)

    def _split_unseparated(self, raw: str) -> set[str]:
        """Zusammengeschriebene Angaben: "11abc12b" → 11a, 11b, 11c, 12b."""
        compact = _UNSEPARATED_NOISE_RE.sub("", raw)
        result: set[str] = set()
        for grade, letters in _UNSEPARATED_TOKEN_RE.findall(compact):
            if letters:
                result.update(grade + letter for letter in letters)
            else:
                result.add(grade)
        if self.roster and not result <= set(self.roster):
            from_roster = self._match_roster_prefixes(compact)
            if from_roster:
                return from_roster
        return result

    def _match_roster_prefixes(self, compact: str) -> set[str]:
        # längste passende Klasse zuerst
        candidates = sorted(self.roster, key=len, reverse=True)
        result: set[str] = set()
        i = 0
        while i < len(compact):
            for name in candidates:
                if compact.startswith(name, i):
                    result.add(name)
                    i += len(name)
                    break
            else:
                i += 1
        return result
