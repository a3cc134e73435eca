"""Datenmodell für eine einzelne Vertretung (Pydantic v2).

Eine Vertretung ist ein unveränderlicher Wert. Beim Einlesen einer Tabellenzeile
werden die Felder im SubstitutionBuilder gesammelt und erst am Ende der Zeile
zu einer Substitution festgeschrieben.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional

from pydantic import BaseModel, ConfigDict

from normalizer.text import (
    join_classes,
    join_teachers,
    substitution_teacher_text,
    substitution_text,
)

if TYPE_CHECKING:
    from normalizer.colors import ColorProvider

DEFAULT_TYPE = "Vertretung"
CANCELLATION_TYPE = "Entfall"


class Substitution(BaseModel):
    """Eine betroffene Unterrichtsstunde (Entfall, Vertretung, Raumänderung ...)."""

    model_config = ConfigDict(frozen=True)

    lesson: str                                    # "5", "3-4"
    type: str = DEFAULT_TYPE                       # "Entfall", "Vertretung", ...
    color: Optional[str] = None                    # "#F44336", aus type abgeleitet
    classes: frozenset[str] = frozenset()          # {"5a", "5b"}
    subject: Optional[str] = None
    previous_subject: Optional[str] = None
    teachers: frozenset[str] = frozenset()         # vertretende Lehrkräfte
    previous_teachers: frozenset[str] = frozenset()  # ursprünglich eingeteilt
    room: Optional[str] = None
    previous_room: Optional[str] = None
    desc: Optional[str] = None                     # Freitext-Rest
    substitution_from: Optional[str] = None        # "Vertr. von"
    teacher_to: Optional[str] = None               # "(Le.) nach"

    @property
    def teacher(self) -> Optional[str]:
        """Vertretende Lehrkräfte als sortierter Text ("MEI, MÜL")."""
        return join_teachers(self.teachers) if self.teachers else None

    @property
    def previous_teacher(self) -> Optional[str]:
        return join_teachers(self.previous_teachers) if self.previous_teachers else None

    @property
    def classes_text(self) -> str:
        return join_classes(self.classes)

    @property
    def text(self) -> str:
        return substitution_text(self)

    @property
    def teacher_text(self) -> str:
        return substitution_teacher_text(self)

    def is_equal_excluding(self, other: "Substitution", *fields: str) -> bool:
        """Vergleicht alle Felder außer den genannten (z. B. "classes")."""
        excluded = set(fields)
        if "type" in excluded:
            excluded.add("color")
        return (self.model_dump(exclude=excluded)
                == other.model_dump(exclude=excluded))

    def with_type(self, type_: str, colors: "ColorProvider") -> "Substitution":
        """Kopie mit neuem Typ; die Farbe wird neu bestimmt."""
        return self.model_copy(update={"type": type_, "color": colors.get_color(type_)})


class SubstitutionBuilder:
    """Sammelt die Felder einer Rohzeile, bevor daraus eine Substitution wird."""

    def __init__(self, lesson: Optional[str] = None):
        self.lesson = lesson
        self.type: Optional[str] = None
        self.classes: set[str] = set()
        self.subject: Optional[str] = None
        self.previous_subject: Optional[str] = None
        self.course: Optional[str] = None
        self.teachers: set[str] = set()
        self.previous_teachers: set[str] = set()
        self.room: Optional[str] = None
        self.previous_room: Optional[str] = None
        self.desc: Optional[str] = None
        self.substitution_from: Optional[str] = None
        self.teacher_to: Optional[str] = None

    def set_teacher(self, teacher: Optional[str]) -> None:
        self.teachers = {teacher.strip()} if teacher and teacher.strip() else set()

    def set_previous_teacher(self, teacher: Optional[str]) -> None:
        self.previous_teachers = {teacher.strip()} if teacher and teacher.strip() else set()

    def build(self, colors: "ColorProvider") -> Substitution:
        """Schreibt die Vertretung fest. Ohne Typ gilt "Vertretung"."""
        if not self.lesson:
            raise ValueError("Vertretung ohne Stunde kann nicht erzeugt werden.")
        type_ = self.type or DEFAULT_TYPE
        subject = self.subject
        if subject is None and self.course:
            subject = self.course
        return Substitution(
            lesson=self.lesson,
            type=type_,
            color=colors.get_color(type_),
            classes=frozenset(self.classes),
            subject=subject,
            previous_subject=self.previous_subject,
            teachers=frozenset(self.teachers),
            previous_teachers=frozenset(self.previous_teachers),
            room=self.room,
            previous_room=self.previous_room,
            desc=self.desc,
            substitution_from=self.substitution_from,
            teacher_to=self.teacher_to,
        )
