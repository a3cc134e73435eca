"""Erkennung der Spaltentypen anhand deutscher Spaltenüberschriften."""

from types import MappingProxyType
from typing import Mapping, Optional, Sequence

from assembly.errors import UnparseableStructureError
from models.raw import ColumnType

# Spaltentyp → Überschriften, wie sie in Untis-, DaVinci- und Indiware-Plänen vorkommen
COLUMN_HEADERS = MappingProxyType({
    ColumnType.LESSON: ("Stunde", "Std.", "Std", "Pos", "Stunden"),
    ColumnType.CLASS: ("Klasse", "Klasse(n)", "Klassen", "(Klasse(n))", "Kl."),
    ColumnType.SUBJECT: ("Fach", "Vertretungsfach", "Fach neu"),
    ColumnType.PREVIOUS_SUBJECT: ("(Fach)", "statt Fach", "Fach alt", "für Fach"),
    ColumnType.COURSE: ("Kurs",),
    ColumnType.TEACHER: ("Vertreter", "Vertretung", "Lehrer", "Lehrer neu", "Vertr."),
    ColumnType.PREVIOUS_TEACHER: ("(Lehrer)", "statt Lehrer", "für Lehrer", "Lehrer alt",
                                  "Abwesend"),
    ColumnType.ROOM: ("Raum", "Raum neu", "Vertretungsraum"),
    ColumnType.PREVIOUS_ROOM: ("(Raum)", "statt Raum", "Raum alt"),
    ColumnType.TYPE: ("Art", "Vertretungsart", "Typ"),
    ColumnType.TYPE_ENTFALL: ("Entfall",),
    ColumnType.DESC: ("Vertretungs-Text", "Text", "Bemerkung", "Bemerkungen", "Hinweis",
                      "Mitteilung"),
    ColumnType.INFO: ("Info", "Information"),
    ColumnType.SUBSTITUTION_FROM: ("Vertr. von", "Vertretung von"),
    ColumnType.TEACHER_TO: ("(Le.) nach", "Lehrer nach"),
    ColumnType.DATE: ("Datum", "Tag"),
    ColumnType.LAST_CHANGE: ("Stand", "Letzte Änderung"),
    ColumnType.IGNORE: ("Wochentag", "Vertretungs-Nr.", "Nr.", "Lerngruppe"),
})


class ColumnTypeDetector:
    """Ordnet Überschriften den Spaltentypen zu."""

    def __init__(self, headers: Mapping[ColumnType, Sequence[str]] = COLUMN_HEADERS):
        self._types = {
            title.lower(): column
            for column, titles in headers.items()
            for title in titles
        }

    def get_column_type(self, title: str, all_titles: Sequence[str] = ()) -> Optional[ColumnType]:
        """Spaltentyp einer Überschrift oder None, wenn sie unbekannt ist.

        "Kurs" gilt als Klassenspalte, wenn es keine andere Klassenspalte gibt.
        """
        title = title.strip()
        if title == "Kurs":
            others = [self._types.get(t.strip().lower()) for t in all_titles if t.strip() != title]
            if ColumnType.CLASS not in others:
                return ColumnType.CLASS
        return self._types.get(title.lower())

    def detect(self, titles: Sequence[str]) -> list[ColumnType]:
        """Spaltentypen für eine ganze Kopfzeile."""
        columns = []
        for title in titles:
            column = self.get_column_type(title, titles)
            if column is None:
                raise UnparseableStructureError(f"Unbekannte Spaltenüberschrift: '{title}'")
            columns.append(column)
        return columns
