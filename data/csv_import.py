"""Vertretungspläne im CSV-Format.

Die Spaltenreihenfolge steht in der Schulkonfiguration (``columns``), etwa
``[class, lesson, subject, teacher, room, desc, date]``. Eine optionale zweite
Datei enthält Zusatzinformationen (Spalten ``title``/``text``); ist der Titel
ein Datum, wird der Text zur Nachricht dieses Tages.
"""

import csv
import io
import logging
from pathlib import Path
from typing import Optional

from assembly.errors import UnparseableStructureError
from config.schema import SchoolScheduleConfig
from models.additional_info import AdditionalInfo
from models.raw import ColumnType, RawCell, RawDay, RawPage, RawRow
from normalizer.dates import DateTimeNormalizer

logger = logging.getLogger(__name__)


class CsvScheduleAdapter:
    """Liest einen CSV-Plan in eine RawPage."""

    def __init__(self, config: SchoolScheduleConfig,
                 dates: Optional[DateTimeNormalizer] = None) -> None:
        if not config.columns:
            raise UnparseableStructureError(
                f"Für CSV-Pläne muss 'columns' konfiguriert sein ({config.school_name})."
            )
        self.config = config
        self.columns = list(config.columns)
        self.dates = dates or DateTimeNormalizer()

    def _lines(self, source: str) -> list[list[str]]:
        reader = csv.reader(
            io.StringIO(source),
            delimiter=self.config.csv.separator,
            quotechar=self.config.csv.quote,
        )
        return [line for line in reader][self.config.csv.skip_lines:]

    def _fit(self, values: list[str], width: int, line_number: int) -> list[str]:
        """Leere Spalten hinter der letzten konfigurierten Spalte werden ignoriert."""
        extra = values[width:]
        if any(v.strip() for v in extra):
            raise UnparseableStructureError(
                f"Zeile {line_number}: {len(values)} Spalten, konfiguriert sind {width}"
            )
        return values[:width]

    def read(self, source: str) -> RawPage:
        """Jede Zeile wird einem Tag zugeordnet (Spalte ``date``, sonst ohne Datum)."""
        days: dict[Optional[str], RawDay] = {}
        for number, values in enumerate(self._lines(source), start=1):
            if not any(v.strip() for v in values):
                continue
            values = self._fit(values, len(self.columns), number)
            cells = [
                RawCell(column=column, text=value)
                for column, value in zip(self.columns, values)
            ]
            row = RawRow(cells=cells)
            date_text = row.value(ColumnType.DATE)
            key = date_text.strip() if date_text and date_text.strip() else None
            if key not in days:
                days[key] = RawDay(date_text=key)
            days[key].rows.append(row)
        logger.debug(f"CSV: {sum(len(d.rows) for d in days.values())} Zeilen, {len(days)} Tage")
        return RawPage(days=list(days.values()))

    def read_additional_infos(self, source: str) -> RawPage:
        """Zusatzinfos: Titel mit Datum → Tagesnachricht, sonst AdditionalInfo."""
        columns = self.config.csv.additional_columns
        if not columns:
            raise UnparseableStructureError(
                "Für Zusatzinfos muss 'csv.additional_columns' konfiguriert sein."
            )
        page = RawPage()
        for number, values in enumerate(self._lines(source), start=1):
            values = self._fit(values, len(columns), number)
            fields = {c: v.strip() for c, v in zip(columns, values) if c != "ignore"}
            title, text = fields.get("title") or None, fields.get("text", "")
            if not text:
                continue
            if title and self.dates.parse_date(title) is not None:
                page.days.append(RawDay(date_text=title, messages=[text]))
            else:
                page.infos.append(AdditionalInfo(title=title, text=text, from_schedule=True))
        return page

    def read_file(self, path: Path) -> RawPage:
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Datei nicht gefunden: {path}")
        return self.read(path.read_text(encoding="utf-8"))
