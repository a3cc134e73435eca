"""Zwischenformat zwischen Format-Adaptern und der Plan-Erstellung.

Ein Adapter (CSV, Untis-Monitor, ...) liefert pro Quelle eine RawPage. Jede
Zeile ist eine Liste von (Spaltentyp, Text)-Paaren. Der Text darf HTML-Markup
enthalten, damit durchgestrichene Werte erkannt werden können.
"""

from __future__ import annotations

import datetime as dt
from enum import Enum
from typing import Iterable, Optional, Protocol, runtime_checkable

from pydantic import BaseModel, Field

from assembly.errors import UnparseableStructureError
from models.additional_info import AdditionalInfo


class ColumnType(str, Enum):
    """Bedeutung einer Tabellenspalte."""

    LESSON = "lesson"
    SUBJECT = "subject"
    PREVIOUS_SUBJECT = "previousSubject"
    COURSE = "course"
    TYPE = "type"
    TYPE_ENTFALL = "type-entfall"
    ROOM = "room"
    PREVIOUS_ROOM = "previousRoom"
    DESC = "desc"
    DESC_TYPE = "desc-type"
    INFO = "info"
    TEACHER = "teacher"
    PREVIOUS_TEACHER = "previousTeacher"
    SUBSTITUTION_FROM = "substitutionFrom"
    TEACHER_TO = "teacherTo"
    CLASS = "class"
    DATE = "date"
    LAST_CHANGE = "stand"
    IGNORE = "ignore"

    @classmethod
    def parse(cls, name: str) -> "ColumnType":
        try:
            return cls(name)
        except ValueError:
            raise UnparseableStructureError(f"Unbekannter Spaltentyp: {name}") from None


class RawCell(BaseModel):
    """Eine Zelle: Spaltentyp und Inhalt (Text oder HTML-Fragment)."""

    column: ColumnType
    text: str = ""


class RawRow(BaseModel):
    """Eine Tabellenzeile."""

    cells: list[RawCell] = Field(default_factory=list)
    struck: bool = False    # Adapter hat Durchstreichung in der Zeile erkannt

    @classmethod
    def of(cls, pairs: Iterable[tuple[str, str]], struck: bool = False) -> "RawRow":
        """Baut eine Zeile aus (Spaltentyp, Text)-Paaren; Spaltentyp als Text."""
        return cls(
            cells=[RawCell(column=ColumnType.parse(column), text=text) for column, text in pairs],
            struck=struck,
        )

    def value(self, column: ColumnType) -> Optional[str]:
        for cell in self.cells:
            if cell.column == column:
                return cell.text
        return None

    def has_column(self, column: ColumnType) -> bool:
        return any(cell.column == column for cell in self.cells)


class RawDay(BaseModel):
    """Zeilen und Nachrichten, die der Adapter einem Datum zugeordnet hat."""

    date_text: Optional[str] = None          # "Montag, 11.03.2024"
    date: Optional[dt.date] = None           # bereits vom Adapter bestimmt
    last_change_text: Optional[str] = None   # "Stand: 11.03.2024 07:45"
    rows: list[RawRow] = Field(default_factory=list)
    messages: list[str] = Field(default_factory=list)


class RawPage(BaseModel):
    """Inhalt einer abgerufenen Seite / Datei."""

    days: list[RawDay] = Field(default_factory=list)
    last_change_text: Optional[str] = None
    infos: list[AdditionalInfo] = Field(default_factory=list)
    general_messages: list[str] = Field(default_factory=list)  # ohne Datum


@runtime_checkable
class ScheduleAdapter(Protocol):
    """Ein Format-Adapter: bereits geladener Quelltext → RawPage."""

    def read(self, source: str) -> RawPage:
        ...
