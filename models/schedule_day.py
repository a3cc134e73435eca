"""Datenmodell für einen Tag des Vertretungsplans (Pydantic v2)."""

from __future__ import annotations

import datetime as dt
from typing import TYPE_CHECKING, Iterable, Optional

from pydantic import BaseModel, Field

from models.substitution import DEFAULT_TYPE, Substitution
from normalizer.dates import format_date

if TYPE_CHECKING:
    from normalizer.colors import ColorProvider

DAY_DATE_FORMAT = "EEEE, dd.MM.yyyy"
LAST_CHANGE_FORMAT = "dd.MM.yyyy HH:mm"

# Felder, über die gleichartige Vertretungen zusammengeführt werden
_MERGE_FIELDS = ("classes", "teachers", "previous_teachers")


def substitution_sort_key(substitution: Substitution) -> tuple:
    """Feste Reihenfolge über alle Felder; Mengen werden sortiert verglichen."""
    key = []
    for name in Substitution.model_fields:
        value = getattr(substitution, name)
        if value is None:
            key.append((0, ()))
        elif isinstance(value, frozenset):
            key.append((1, tuple(sorted(value))))
        else:
            key.append((1, (value,)))
    return tuple(key)


def _fold(substitutions: list[Substitution], substitution: Substitution,
          merge_with_different_type: bool, colors: Optional["ColorProvider"]) -> None:
    if merge_with_different_type:
        for i, existing in enumerate(substitutions):
            if existing.is_equal_excluding(substitution, "type"):
                # "Vertretung" setzt sich gegen andere Arten durch
                if substitution.type == DEFAULT_TYPE and existing.type != DEFAULT_TYPE:
                    if colors is None:
                        from normalizer.colors import ColorProvider
                        colors = ColorProvider()
                    substitutions[i] = existing.with_type(DEFAULT_TYPE, colors)
                return
    for i, existing in enumerate(substitutions):
        for field in _MERGE_FIELDS:
            if existing.is_equal_excluding(substitution, field):
                merged = getattr(existing, field) | getattr(substitution, field)
                substitutions[i] = existing.model_copy(update={field: merged})
                return
    substitutions.append(substitution)


def merge_substitutions(substitutions: Iterable[Substitution],
                        merge_with_different_type: bool = False,
                        colors: Optional["ColorProvider"] = None) -> list[Substitution]:
    """Führt Vertretungen unabhängig von ihrer Reihenfolge zusammen.

    Doppelte Einträge fallen weg, die übrigen werden nach allen Feldern sortiert
    und dann nacheinander übernommen. Dieselbe Menge an Vertretungen ergibt so
    immer dieselbe Liste.
    """
    merged: list[Substitution] = []
    for substitution in sorted(set(substitutions), key=substitution_sort_key):
        _fold(merged, substitution, merge_with_different_type, colors)
    return merged


class SubstitutionScheduleDay(BaseModel):
    """Vertretungen und Nachrichten eines Kalendertags."""

    date: Optional[dt.date] = None
    date_string: Optional[str] = None        # Originaltext, falls nicht parsebar
    last_change: Optional[dt.datetime] = None
    last_change_string: Optional[str] = None
    substitutions: list[Substitution] = Field(default_factory=list)
    messages: list[str] = Field(default_factory=list)

    def model_post_init(self, __context) -> None:
        if self.date is not None and self.date_string is None:
            self.date_string = format_date(self.date, DAY_DATE_FORMAT)
        if self.last_change is not None and self.last_change_string is None:
            self.last_change_string = format_date(self.last_change, LAST_CHANGE_FORMAT)

    # ─── Vertretungen ───

    def add_substitution(self, substitution: Substitution,
                         merge_with_different_type: bool = False,
                         colors: Optional["ColorProvider"] = None) -> None:
        """Fügt eine Vertretung hinzu oder führt sie mit einer gleichartigen zusammen.

        Gleichen sich zwei Einträge bis auf die Klassen (bzw. die Lehrkräfte
        oder die ursprünglichen Lehrkräfte), werden die Mengen vereinigt. Mit
        ``merge_with_different_type`` werden auch Einträge zusammengelegt, die
        sich nur in der Art unterscheiden.
        """
        _fold(self.substitutions, substitution, merge_with_different_type, colors)

    def add_substitutions(self, substitutions: Iterable[Substitution],
                          merge_with_different_type: bool = False,
                          colors: Optional["ColorProvider"] = None) -> None:
        for substitution in substitutions:
            self.add_substitution(substitution, merge_with_different_type, colors)

    def add_message(self, message: str) -> None:
        if message not in self.messages:
            self.messages.append(message)

    # ─── Zusammenführen ───

    def equals_by_date(self, other: "SubstitutionScheduleDay") -> bool:
        """Vergleicht über das Datum, ersatzweise über den Datumstext."""
        if self.date is not None or other.date is not None:
            return self.date == other.date
        return self.date_string == other.date_string

    def merge(self, other: "SubstitutionScheduleDay",
              merge_with_different_type: bool = False,
              colors: Optional["ColorProvider"] = None) -> None:
        """Übernimmt Vertretungen und Nachrichten eines Tags mit gleichem Datum.

        Die Vertretungen beider Tage werden gemeinsam neu zusammengeführt, das
        Ergebnis hängt also nicht davon ab, welcher Tag zuerst da war.
        """
        if not self.equals_by_date(other):
            raise ValueError(
                f"Tage mit unterschiedlichem Datum können nicht zusammengeführt "
                f"werden: {self.date_string} / {other.date_string}"
            )
        self.substitutions = merge_substitutions(
            [*self.substitutions, *other.substitutions], merge_with_different_type, colors
        )
        for message in other.messages:
            self.add_message(message)
        self.update_last_change(other.last_change, other.last_change_string)

    def update_last_change(self, last_change: Optional[dt.datetime],
                           last_change_string: Optional[str] = None) -> None:
        """Übernimmt den Zeitstempel, wenn er neuer ist. Ohne Zeitstempel nur den Text."""
        if last_change is None:
            if self.last_change is None and last_change_string and not self.last_change_string:
                self.last_change_string = last_change_string
            return
        if self.last_change is None or last_change > self.last_change:
            self.last_change = last_change
            self.last_change_string = format_date(last_change, LAST_CHANGE_FORMAT)

    # ─── Filter ───

    def filtered_by_class(self, class_name: str,
                          excluded_subjects: Iterable[str] = ()) -> "SubstitutionScheduleDay":
        """Kopie, die nur die Vertretungen einer Klasse enthält."""
        return self._filtered(lambda s: class_name in s.classes, excluded_subjects)

    def filtered_by_teacher(self, teacher: str,
                            excluded_subjects: Iterable[str] = ()) -> "SubstitutionScheduleDay":
        """Kopie mit den Vertretungen, bei denen die Lehrkraft vertritt oder vertreten wird."""
        return self._filtered(
            lambda s: teacher in s.teachers or teacher in s.previous_teachers,
            excluded_subjects,
        )

    def _filtered(self, predicate, excluded_subjects: Iterable[str]) -> "SubstitutionScheduleDay":
        excluded = set(excluded_subjects)
        kept = [
            s for s in self.substitutions
            if predicate(s) and not _is_excluded(s, excluded)
        ]
        return self.model_copy(update={"substitutions": kept,
                                       "messages": list(self.messages)})


def _is_excluded(substitution: Substitution, excluded_subjects: set[str]) -> bool:
    # Das ursprüngliche Fach entscheidet, ob ein Kurs ausgeblendet wird
    if substitution.previous_subject is not None:
        return substitution.previous_subject in excluded_subjects
    return substitution.subject is not None and substitution.subject in excluded_subjects
