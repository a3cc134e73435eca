"""Vergleich zweier Vertretungspläne (Diff / Änderungsmeldung).

Gibt strukturierte Unterschiede zurück, die als Rich-Tabelle oder JSON
ausgegeben werden können, z. B. um nur neue Vertretungen zu melden.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Optional

from normalizer.text import text_diff

if TYPE_CHECKING:
    from models.schedule import SubstitutionSchedule
    from models.schedule_day import SubstitutionScheduleDay
    from models.substitution import Substitution

# Felder, deren Übereinstimmung die Ähnlichkeit zweier Vertretungen ausmacht
_COMPARED_FIELDS = (
    "type", "subject", "previous_subject", "teachers", "previous_teachers",
    "room", "previous_room", "desc",
)


def _substitution_dict(s: "Substitution") -> dict:
    return {
        "classes": sorted(s.classes),
        "lesson": s.lesson,
        "type": s.type,
        "text": s.text,
    }


@dataclass
class SubstitutionChange:
    """Eine Vertretung, die sich zwischen den Ständen verändert hat."""

    old: "Substitution"
    new: "Substitution"

    @property
    def changed_fields(self) -> list[str]:
        return [f for f in ("classes", "lesson") + _COMPARED_FIELDS
                if getattr(self.old, f) != getattr(self.new, f)]

    @property
    def text(self) -> str:
        """Kurztext mit <ins>/<del>-Markierungen."""
        return text_diff(self.old.text, self.new.text)


@dataclass
class DayDiff:
    """Unterschiede innerhalb eines Tages."""

    date_string: Optional[str]
    new_substitutions: list["Substitution"] = field(default_factory=list)
    removed_substitutions: list["Substitution"] = field(default_factory=list)
    edited_substitutions: list[SubstitutionChange] = field(default_factory=list)
    new_messages: list[str] = field(default_factory=list)
    removed_messages: list[str] = field(default_factory=list)

    def is_empty(self) -> bool:
        return (
            not self.new_substitutions
            and not self.removed_substitutions
            and not self.edited_substitutions
            and not self.new_messages
            and not self.removed_messages
        )

    def to_dict(self) -> dict:
        return {
            "date": self.date_string,
            "new_substitutions": [_substitution_dict(s) for s in self.new_substitutions],
            "removed_substitutions": [_substitution_dict(s) for s in self.removed_substitutions],
            "edited_substitutions": [
                {
                    "old": _substitution_dict(c.old),
                    "new": _substitution_dict(c.new),
                    "changed_fields": c.changed_fields,
                    "text": c.text,
                }
                for c in self.edited_substitutions
            ],
            "new_messages": self.new_messages,
            "removed_messages": self.removed_messages,
        }


@dataclass
class ScheduleDiff:
    """Vollständiger Diff zwischen zwei Ständen eines Vertretungsplans."""

    new_days: list[str] = field(default_factory=list)
    removed_days: list[str] = field(default_factory=list)
    day_diffs: list[DayDiff] = field(default_factory=list)
    new_infos: list[str] = field(default_factory=list)
    removed_infos: list[str] = field(default_factory=list)

    def is_empty(self) -> bool:
        """Gibt True zurück wenn kein Unterschied gefunden wurde."""
        return (
            not self.new_days
            and not self.removed_days
            and not self.day_diffs
            and not self.new_infos
            and not self.removed_infos
        )

    def to_dict(self) -> dict:
        """Serialisiert den Diff als Dictionary (für JSON-Ausgabe)."""
        return {
            "new_days": self.new_days,
            "removed_days": self.removed_days,
            "days": [d.to_dict() for d in self.day_diffs],
            "new_infos": self.new_infos,
            "removed_infos": self.removed_infos,
        }

    def to_json(self, indent: int = 2) -> str:
        """Gibt den Diff als JSON-String zurück."""
        return json.dumps(self.to_dict(), indent=indent, ensure_ascii=False)

    def print_rich(self) -> None:
        from rich.console import Console
        from rich.table import Table
        from rich import box

        console = Console()
        if self.is_empty():
            console.print("[dim]Keine Änderungen.[/dim]")
            return
        for d in self.new_days:
            console.print(f"[green]+ Neuer Tag:[/green] {d}")
        for d in self.removed_days:
            console.print(f"[red]- Tag entfernt:[/red] {d}")
        for info in self.new_infos:
            console.print(f"[green]+ Info:[/green] {info}")

        for day in self.day_diffs:
            table = Table(title=day.date_string or "ohne Datum", box=box.SIMPLE)
            table.add_column("", width=2)
            table.add_column("Klassen", style="bold")
            table.add_column("Stunde", justify="center")
            table.add_column("Vertretung")
            for s in day.new_substitutions:
                table.add_row("[green]+[/green]", s.classes_text, s.lesson, s.text)
            for s in day.removed_substitutions:
                table.add_row("[red]-[/red]", s.classes_text, s.lesson, s.text)
            for c in day.edited_substitutions:
                table.add_row("[yellow]~[/yellow]", c.new.classes_text, c.new.lesson,
                              f"{c.old.text} → {c.new.text}")
            console.print(table)
            for m in day.new_messages:
                console.print(f"  [green]+[/green] {m}")
            for m in day.removed_messages:
                console.print(f"  [red]-[/red] {m}")


def _similarity(a: "Substitution", b: "Substitution") -> int:
    return sum(1 for f in _COMPARED_FIELDS if getattr(a, f) == getattr(b, f))


def diff_days(old: "SubstitutionScheduleDay", new: "SubstitutionScheduleDay") -> DayDiff:
    """Vergleicht zwei Stände desselben Tages.

    Eine Vertretung gilt als geändert, wenn sie sich nur in den Klassen
    unterscheidet, oder wenn sie dieselben Klassen und dieselbe Stunde hat
    und mindestens ein weiteres Feld übereinstimmt. Unter mehreren Kandidaten
    gewinnt der ähnlichste.
    """
    diff = DayDiff(date_string=new.date_string or old.date_string)
    diff.new_messages = [m for m in new.messages if m not in old.messages]
    diff.removed_messages = [m for m in old.messages if m not in new.messages]

    added = [s for s in new.substitutions if s not in old.substitutions]
    removed = [s for s in old.substitutions if s not in new.substitutions]

    # ── Nur Klassen geändert ─────────────────────────────────────────────────
    for r in list(removed):
        for a in added:
            if a.is_equal_excluding(r, "classes"):
                diff.edited_substitutions.append(SubstitutionChange(old=r, new=a))
                removed.remove(r)
                added.remove(a)
                break

    # ── Ähnliche Vertretungen ────────────────────────────────────────────────
    for r in list(removed):
        candidates = [
            (a, _similarity(r, a)) for a in added
            if a.classes == r.classes and a.lesson == r.lesson
        ]
        candidates = [(a, score) for a, score in candidates if score > 0]
        if not candidates:
            continue
        best = max(candidates, key=lambda c: c[1])[0]
        diff.edited_substitutions.append(SubstitutionChange(old=r, new=best))
        removed.remove(r)
        added.remove(best)

    diff.new_substitutions = added
    diff.removed_substitutions = removed
    return diff


def diff_schedules(old: "SubstitutionSchedule", new: "SubstitutionSchedule") -> ScheduleDiff:
    """Vergleicht zwei Stände eines Vertretungsplans.

    Args:
        old: Bisheriger Stand.
        new: Neuer Stand.

    Returns:
        ScheduleDiff mit neuen/entfernten Tagen, Tagesänderungen und Zusatzinfos.
    """
    diff = ScheduleDiff()

    # ── Tage ─────────────────────────────────────────────────────────────────
    for new_day in new.days:
        old_day = next((d for d in old.days if d.equals_by_date(new_day)), None)
        if old_day is None:
            diff.new_days.append(new_day.date_string or "")
            continue
        day_diff = diff_days(old_day, new_day)
        if not day_diff.is_empty():
            diff.day_diffs.append(day_diff)
    for old_day in old.days:
        if not any(d.equals_by_date(old_day) for d in new.days):
            diff.removed_days.append(old_day.date_string or "")

    # ── Zusatzinfos ──────────────────────────────────────────────────────────
    diff.new_infos = [i.text for i in new.additional_infos if i not in old.additional_infos]
    diff.removed_infos = [i.text for i in old.additional_infos if i not in new.additional_infos]

    return diff
