"""SubstitutionSchedule: der vollständige Vertretungsplan einer Schule (Pydantic v2)."""

from __future__ import annotations

import datetime as dt
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING, Iterable, Optional

from pydantic import BaseModel, Field

from models.additional_info import AdditionalInfo
from models.schedule_day import LAST_CHANGE_FORMAT, SubstitutionScheduleDay
from normalizer.dates import format_date
from normalizer.text import natural_sort_key

if TYPE_CHECKING:
    from config.schema import SchoolScheduleConfig
    from normalizer.colors import ColorProvider


class ScheduleType(str, Enum):
    """Schülerplan (Klassen stehen im Vordergrund) oder Lehrerplan."""

    STUDENT = "student"
    TEACHER = "teacher"


def _day_sort_key(day: SubstitutionScheduleDay) -> tuple:
    # Tage mit Datum zuerst, danach reine Datumstexte in natürlicher Reihenfolge
    if day.date is not None:
        return (0, day.date.toordinal(), [])
    return (1, 0, natural_sort_key(day.date_string or ""))


class SubstitutionSchedule(BaseModel):
    """Wurzelobjekt: Tage, bekannte Klassen und Lehrkräfte, Zusatzinfos."""

    type: ScheduleType = ScheduleType.STUDENT
    website: Optional[str] = None
    last_change: Optional[dt.datetime] = None
    last_change_string: Optional[str] = None
    days: list[SubstitutionScheduleDay] = Field(default_factory=list)
    additional_infos: list[AdditionalInfo] = Field(default_factory=list)
    classes: list[str] = Field(default_factory=list)
    teachers: list[str] = Field(default_factory=list)

    @classmethod
    def from_config(cls, config: "SchoolScheduleConfig",
                    classes: Iterable[str] = ()) -> "SubstitutionSchedule":
        """Leerer Plan mit Typ, Website, Klassen- und Lehrerliste der Schule."""
        return cls(
            type=config.schedule_type,
            website=config.website,
            classes=list(classes),
            teachers=list(config.teachers),
        )

    # ─── Tage ───

    def get_day(self, date: dt.date) -> Optional[SubstitutionScheduleDay]:
        for day in self.days:
            if day.date == date:
                return day
        return None

    def add_day(self, new_day: SubstitutionScheduleDay,
                merge_with_different_type: bool = False,
                colors: Optional["ColorProvider"] = None) -> None:
        """Fügt einen Tag hinzu; ein vorhandener Tag gleichen Datums wird ergänzt."""
        self.update_last_change(new_day.last_change, new_day.last_change_string)
        for day in self.days:
            if day.equals_by_date(new_day):
                day.merge(new_day, merge_with_different_type, colors)
                break
        else:
            self.days.append(new_day)
        self.days.sort(key=_day_sort_key)

    def update_last_change(self, last_change: Optional[dt.datetime],
                           last_change_string: Optional[str] = None) -> None:
        """Übernimmt einen Zeitstempel, wenn er neuer ist als der bisherige."""
        if last_change is None:
            if self.last_change is None and last_change_string and not self.last_change_string:
                self.last_change_string = last_change_string
            return
        if self.last_change is None or last_change > self.last_change:
            self.last_change = last_change
            self.last_change_string = format_date(last_change, LAST_CHANGE_FORMAT)

    # ─── Zusatzinfos ───

    def add_additional_info(self, info: AdditionalInfo) -> None:
        if info not in self.additional_infos:
            self.additional_infos.append(info)

    # ─── Filter ───

    def filtered_by_class(self, class_name: str,
                          excluded_subjects: Iterable[str] = ()) -> "SubstitutionSchedule":
        """Kopie mit den Vertretungen einer Klasse."""
        excluded = list(excluded_subjects)
        return self.model_copy(update={
            "days": [d.filtered_by_class(class_name, excluded) for d in self.days],
        })

    def filtered_by_teacher(self, teacher: str,
                            excluded_subjects: Iterable[str] = ()) -> "SubstitutionSchedule":
        """Kopie mit den Vertretungen einer Lehrkraft."""
        excluded = list(excluded_subjects)
        return self.model_copy(update={
            "days": [d.filtered_by_teacher(teacher, excluded) for d in self.days],
        })

    # ─── Persistenz ───

    def save_json(self, path: Path) -> None:
        """Speichert den Plan als JSON-Datei."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w", encoding="utf-8") as f:
            f.write(self.model_dump_json(indent=2))

    @classmethod
    def load_json(cls, path: Path) -> "SubstitutionSchedule":
        """Lädt einen Plan aus einer JSON-Datei."""
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"JSON-Datei nicht gefunden: {path}")
        with open(path, "r", encoding="utf-8") as f:
            return cls.model_validate_json(f.read())

    # ─── Ausgabe ───

    def summary(self) -> str:
        n_subs = sum(len(d.substitutions) for d in self.days)
        return (
            f"Vertretungsplan ({self.type.value}): {len(self.days)} Tage, "
            f"{n_subs} Vertretungen, {len(self.additional_infos)} Zusatzinfos"
        )

    def print_rich(self) -> None:
        """Gibt den Plan tageweise als Rich-Tabellen aus."""
        from rich.console import Console
        from rich.panel import Panel
        from rich.table import Table
        from rich import box

        console = Console()
        stand = self.last_change_string or "unbekannt"
        console.print(Panel(f"{self.summary()}\nStand: {stand}",
                            title="Vertretungsplan", border_style="cyan"))

        for day in self.days:
            table = Table(title=day.date_string or "ohne Datum", box=box.SIMPLE_HEAVY)
            first = "Lehrkraft" if self.type == ScheduleType.TEACHER else "Klassen"
            table.add_column(first, style="bold")
            table.add_column("Stunde", justify="center")
            table.add_column("Art")
            table.add_column("Vertretung")
            for s in day.substitutions:
                owner = (s.teacher or "") if self.type == ScheduleType.TEACHER else s.classes_text
                text = s.teacher_text if self.type == ScheduleType.TEACHER else s.text
                color = s.color or "white"
                table.add_row(owner, s.lesson, f"[{color}]{s.type}[/{color}]", text)
            console.print(table)
            for message in day.messages:
                console.print(f"  [yellow]•[/yellow] {message}")

        for info in self.additional_infos:
            console.print(Panel(info.text, title=info.title or "Information",
                                border_style="yellow"))
