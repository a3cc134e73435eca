"""Text-Hilfsfunktionen für Vertretungen.

Erzeugt die Kurztexte ("Mathe (MÜL statt SCH) in 204 - Aufgaben"), fasst
Klassenlisten zusammen ("5a, 5b, 6c" → "5ab, 6c") und markiert
Textänderungen für den Diff mit <ins>/<del>.
"""

from __future__ import annotations

import difflib
import html
import re
from typing import TYPE_CHECKING, Iterable, Optional

if TYPE_CHECKING:
    from models.substitution import Substitution

_NUMBER_RE = re.compile(r"(\d+)")
_CLASS_BEGINNING_RE = re.compile(r"^(.*\d)(\D+)$")
_WHITESPACE_RE = re.compile(r"\s")


def natural_sort_key(value: str) -> list:
    """Sortierschlüssel, der Zahlen numerisch vergleicht ("5a" < "10a")."""
    return [
        (0, int(part), "") if part.isdigit() else (1, 0, part.lower())
        for part in _NUMBER_RE.split(value)
        if part
    ]


def natural_sorted(values: Iterable[str]) -> list[str]:
    return sorted(values, key=natural_sort_key)


def has_data(value: Optional[str]) -> bool:
    """False für None, reine Leerzeichen und den Platzhalter "---"."""
    if value is None:
        return False
    stripped = _WHITESPACE_RE.sub("", value)
    return stripped not in ("", "---")


def join_teachers(teachers: Iterable[str]) -> str:
    return ", ".join(sorted(teachers))


def join_classes(classes: Iterable[str]) -> str:
    """Fasst Klassen mit gleichem Jahrgang zusammen: {5a, 5b, 6c} → "5ab, 6c"."""
    parts: list[str] = []
    beginning: Optional[str] = None
    for name in natural_sorted(classes):
        match = _CLASS_BEGINNING_RE.match(name)
        if not parts:
            parts.append(name)
            beginning = match.group(1) if match else None
        elif match and match.group(1) == beginning:
            parts[-1] += match.group(2)
        else:
            parts.append(name)
            beginning = match.group(1) if match else None
    return ", ".join(parts)


# ─── Kurztext ─────────────────────────────────────────────────────────────────

def _room(room: Optional[str], previous_room: Optional[str]) -> str:
    if has_data(room) and has_data(previous_room) and room != previous_room:
        return f"{room} statt {previous_room}"
    if has_data(room):
        return room
    if has_data(previous_room):
        return previous_room
    return ""


def _person(current: Optional[str], previous: Optional[str]) -> Optional[str]:
    """Liefert den anzuzeigenden Wert, falls kein Wechsel vorliegt."""
    if has_data(current):
        return current
    if has_data(previous):
        return previous
    return None


def _subject_and_person(subject: Optional[str], previous_subject: Optional[str],
                        person: Optional[str], previous_person: Optional[str]) -> str:
    person_changed = (has_data(person) and has_data(previous_person)
                      and person != previous_person)
    shown_person = _person(person, previous_person)

    if has_data(subject) and has_data(previous_subject) and subject != previous_subject:
        if person_changed:
            return f"{subject} ({person}) statt {previous_subject} ({previous_person})"
        if shown_person:
            return f"{subject} statt {previous_subject} ({shown_person})"
        return f"{subject} statt {previous_subject}"

    shown_subject = subject if has_data(subject) else (
        previous_subject if has_data(previous_subject) else None
    )
    if shown_subject:
        if person_changed:
            return f"{shown_subject} ({person} statt {previous_person})"
        if shown_person:
            return f"{shown_subject} ({shown_person})"
        return shown_subject

    if person_changed:
        return f"{person} statt {previous_person}"
    return shown_person or ""


def _format_output(subject_and_teacher: str, room: str, desc: str) -> str:
    head = subject_and_teacher
    if head and room:
        head = f"{head} in {room}"
    elif room:
        head = room
    if head and desc:
        return f"{head} - {desc}"
    return head or desc


def substitution_text(substitution: "Substitution") -> str:
    """Kurztext für Schülerpläne: Fach, Lehrkraft, Raum und Bemerkung."""
    desc = substitution.desc if has_data(substitution.desc) else ""
    return _format_output(
        _subject_and_person(substitution.subject, substitution.previous_subject,
                            substitution.teacher, substitution.previous_teacher),
        _room(substitution.room, substitution.previous_room),
        desc,
    )


def substitution_teacher_text(substitution: "Substitution") -> str:
    """Kurztext für Lehrerpläne: statt der Lehrkraft werden die Klassen genannt."""
    classes = join_classes(substitution.classes)
    desc = substitution.desc if has_data(substitution.desc) else ""
    return _format_output(
        _subject_and_person(substitution.subject, substitution.previous_subject,
                            classes, classes),
        _room(substitution.room, substitution.previous_room),
        desc,
    )


def teachers_text(substitution: "Substitution") -> str:
    teacher, previous = substitution.teacher, substitution.previous_teacher
    if has_data(teacher) and has_data(previous) and teacher != previous:
        return f"{teacher} statt {previous}"
    return _person(teacher, previous) or ""


# ─── Textdiff ─────────────────────────────────────────────────────────────────

def text_diff(old: Optional[str], new: Optional[str]) -> str:
    """Markiert Änderungen zwischen zwei Texten mit <ins>/<del> (HTML-escaped)."""
    if has_data(old) and has_data(new):
        parts = []
        matcher = difflib.SequenceMatcher(None, old, new, autojunk=False)
        for op, i1, i2, j1, j2 in matcher.get_opcodes():
            if op == "equal":
                parts.append(html.escape(old[i1:i2]))
                continue
            if op in ("delete", "replace"):
                parts.append(f"<del>{html.escape(old[i1:i2])}</del>")
            if op in ("insert", "replace"):
                parts.append(f"<ins>{html.escape(new[j1:j2])}</ins>")
        return "".join(parts)
    if has_data(old):
        return f"<del>{html.escape(old)}</del>"
    if has_data(new):
        return f"<ins>{html.escape(new)}</ins>"
    return ""
