"""Auswertung der Info-/Bemerkungsspalte.

Aus Texten wie "für Mathe Müller, Vertretung" oder "Deutsch Schmidt fällt aus"
werden Vorgänger-Fach, Vorgänger-Lehrkraft, Art und Resttext gewonnen. Die
Muster werden in fester Reihenfolge geprüft, das erste passende gewinnt.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Optional

from models.substitution import CANCELLATION_TYPE

if TYPE_CHECKING:
    from models.substitution import SubstitutionBuilder

EXAM_TYPE = "Prüfung"
RELOCATION_TYPE = "Verlegung"
SELF_STUDY_TYPE = "selbst."

_TEACHER = r"((?:(?! ,|Frau|Herr)[^,])+|(?:Herr|Frau) [^\s,]+)"


@dataclass(frozen=True)
class DescriptionPatterns:
    """Die regulären Ausdrücke der Info-Auswertung."""

    new_marker: re.Pattern = re.compile(r"^neu(?:, |$)(.*)$")
    exam: re.Pattern = re.compile(r"^Prüfung(?:; )?(.*)$")
    substitution: re.Pattern = re.compile(r"für ([^\s]+) " + _TEACHER + r" ?,? ?(.*)")
    class_teacher_lesson: re.Pattern = re.compile(
        r"(Klassenleiterstunden?); ([^\s]+) (?:(.+) )?fällt (?:leider )?aus"
    )
    cancel: re.Pattern = re.compile(
        r"((?!verlegt|statt|Klassenleiter)[^\s]+) (?:(.+) )?fällt (?:leider )?aus"
    )
    delay: re.Pattern = re.compile(r"([^\s]+) ([^\s]+) (verlegt nach .*)")
    self_study: re.Pattern = re.compile(r"selbst\. ?,? ?(.*)")
    take_over: re.Pattern = re.compile(_TEACHER + r" übernimmt mit")
    literal_types: frozenset[str] = field(
        default_factory=lambda: frozenset({"fällt aus", "Klausur", "Aufg."})
    )
    course: re.Pattern = re.compile(r"(.*)/ (.*)")


DEFAULT_PATTERNS = DescriptionPatterns()


class DescriptionParser:
    """Setzt die aus dem Info-Text gewonnenen Felder im SubstitutionBuilder."""

    def __init__(self, patterns: DescriptionPatterns = DEFAULT_PATTERNS,
                 split_teachers: bool = True):
        self.patterns = patterns
        self.split_teachers_enabled = split_teachers

    def parse_description(self, builder: "SubstitutionBuilder", text: Optional[str],
                          is_teacher_schedule: bool = False) -> None:
        if not text:
            return
        p = self.patterns
        value = text.strip()
        marker = p.new_marker.fullmatch(value)
        if marker:
            value = marker.group(1)

        desc: Optional[str] = None
        exam = p.exam.fullmatch(value)
        substitution = p.substitution.fullmatch(value)
        class_teacher = p.class_teacher_lesson.fullmatch(value)
        cancel = p.cancel.fullmatch(value)
        delay = p.delay.fullmatch(value)
        self_study = p.self_study.fullmatch(value)

        if exam:
            builder.type = EXAM_TYPE
            desc = exam.group(1) or None
        elif substitution:
            builder.previous_subject = substitution.group(1)
            builder.set_previous_teacher(substitution.group(2))
            desc = substitution.group(3) or None
        elif class_teacher:
            builder.type = class_teacher.group(1)
            builder.previous_subject = class_teacher.group(2)
            if class_teacher.group(3):
                if is_teacher_schedule:
                    builder.classes = {class_teacher.group(3)}
                else:
                    builder.set_previous_teacher(class_teacher.group(3))
        elif cancel:
            builder.type = CANCELLATION_TYPE
            builder.previous_subject = cancel.group(1)
            if is_teacher_schedule:
                if cancel.group(2):
                    builder.classes = {cancel.group(2)}
            else:
                builder.set_previous_teacher(cancel.group(2))
        elif delay:
            builder.type = RELOCATION_TYPE
            builder.previous_subject = delay.group(1)
            builder.set_previous_teacher(delay.group(2))
            desc = delay.group(3)
        elif self_study:
            builder.type = SELF_STUDY_TYPE
            desc = self_study.group(1) or None
        elif value in p.literal_types:
            builder.type = value
        else:
            desc = value

        if desc:
            builder.desc = desc
            take_over = p.take_over.search(desc)
            if take_over:
                builder.set_teacher(take_over.group(1))

    # ─── Hilfsfunktionen ───

    def split_teachers(self, text: Optional[str]) -> set[str]:
        """"Müller, Meier" → {"Müller", "Meier"} (falls aktiviert)."""
        if not text or not text.strip():
            return set()
        if not self.split_teachers_enabled:
            return {text.strip()}
        return {t.strip() for t in text.split(",") if t.strip()}

    def split_course(self, text: str) -> tuple[Optional[str], str]:
        """"07/2/ RE/k-st6" → ("07/2", "RE/k-st6"); ohne Kurs (None, text)."""
        match = self.patterns.course.fullmatch(text)
        if match is None:
            return None, text
        return match.group(1), match.group(2)
