"""Excel-Export für den Vertretungsplan (openpyxl)."""

import logging
from pathlib import Path

from models.schedule import ScheduleType, SubstitutionSchedule
from models.schedule_day import SubstitutionScheduleDay
from normalizer.text import teachers_text

from export.helpers import COLORS, sheet_title, today_str, type_fill_color

logger = logging.getLogger(__name__)

STUDENT_HEADERS = ["Klassen", "Stunde", "Art", "Fach", "Lehrkraft", "Raum", "Text"]
TEACHER_HEADERS = ["Lehrkraft", "Stunde", "Art", "Klassen", "Fach", "Raum", "Text"]


class ScheduleExcelExporter:
    """Exportiert einen SubstitutionSchedule: ein Blatt je Tag plus Informationen."""

    # Spaltenbreiten (Excel-Einheiten)
    COL_WIDTHS = [14, 8, 14, 16, 16, 10, 60]

    # Zeilenhöhen (Punkte)
    ROW_HEADER_H = 22

    def __init__(self, schedule: SubstitutionSchedule):
        self.schedule = schedule
        self.is_teacher = schedule.type == ScheduleType.TEACHER
        self.headers = TEACHER_HEADERS if self.is_teacher else STUDENT_HEADERS

    # ─── Öffentliche API ──────────────────────────────────────────────────────

    def export(self, output_path: Path) -> None:
        """Erstellt die Excel-Datei mit allen Blättern."""
        from openpyxl import Workbook
        wb = Workbook()
        wb.remove(wb.active)   # Leeres Standard-Sheet entfernen

        used: set[str] = set()
        for day in self.schedule.days:
            self._sheet_day(wb, day, sheet_title(day.date_string or "ohne Datum", used))

        if self.schedule.additional_infos or not self.schedule.days:
            self._sheet_infos(wb, sheet_title("Informationen", used))

        output_path = Path(output_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        wb.save(output_path)
        logger.info(f"Excel-Export: {len(self.schedule.days)} Tage → {output_path}")

    # ─── Style-Helpers ────────────────────────────────────────────────────────

    def _fill(self, hex_color: str):
        from openpyxl.styles import PatternFill
        return PatternFill(start_color=hex_color, end_color=hex_color, fill_type="solid")

    def _thin_border(self):
        from openpyxl.styles import Border, Side
        s = Side(border_style="thin", color="BBBBBB")
        return Border(left=s, right=s, top=s, bottom=s)

    def _setup_sheet(self, ws) -> None:
        from openpyxl.utils import get_column_letter
        for col, width in enumerate(self.COL_WIDTHS, 1):
            ws.column_dimensions[get_column_letter(col)].width = width

    def _write_header_row(self, ws, row: int, headers: list[str]) -> None:
        from openpyxl.styles import Alignment, Font
        fill = self._fill(COLORS["header"])
        border = self._thin_border()
        for col, text in enumerate(headers, 1):
            cell = ws.cell(row=row, column=col, value=text)
            cell.fill = fill
            cell.font = Font(bold=True, color="FFFFFF", size=10)
            cell.alignment = Alignment(horizontal="center", vertical="center")
            cell.border = border
        ws.row_dimensions[row].height = self.ROW_HEADER_H

    # ─── Blätter ──────────────────────────────────────────────────────────────

    def _row_values(self, s) -> list:
        if self.is_teacher:
            return [s.teacher or "", s.lesson, s.type, s.classes_text,
                    s.subject or "", s.room or "", s.teacher_text]
        return [s.classes_text, s.lesson, s.type, s.subject or "",
                teachers_text(s), s.room or "", s.text]

    def _sheet_day(self, wb, day: SubstitutionScheduleDay, title: str) -> None:
        from openpyxl.styles import Alignment, Font
        ws = wb.create_sheet(title)
        self._setup_sheet(ws)

        title_cell = ws.cell(row=1, column=1, value=day.date_string or "ohne Datum")
        title_cell.font = Font(bold=True, size=12)
        title_cell.fill = self._fill(COLORS["day"])
        stand = day.last_change_string or self.schedule.last_change_string
        if stand:
            ws.cell(row=1, column=len(self.headers), value=f"Stand: {stand}")

        row = 2
        for message in day.messages:
            cell = ws.cell(row=row, column=1, value=message)
            cell.fill = self._fill(COLORS["message"])
            ws.merge_cells(start_row=row, start_column=1, end_row=row, end_column=len(self.headers))
            row += 1

        row += 1
        header_row = row
        self._write_header_row(ws, header_row, self.headers)
        border = self._thin_border()
        for s in day.substitutions:
            row += 1
            fill = self._fill(type_fill_color(s.color))
            for col, value in enumerate(self._row_values(s), 1):
                cell = ws.cell(row=row, column=col, value=value)
                cell.border = border
                cell.alignment = Alignment(vertical="center", wrap_text=True)
                if col == 3:
                    cell.fill = fill

        ws.freeze_panes = ws.cell(row=header_row + 1, column=1)

    def _sheet_infos(self, wb, title: str) -> None:
        from openpyxl.styles import Alignment, Font
        ws = wb.create_sheet(title)
        ws.column_dimensions["A"].width = 30
        ws.column_dimensions["B"].width = 90
        ws.cell(row=1, column=1, value="Informationen").font = Font(bold=True, size=12)
        ws.cell(row=1, column=2, value=f"Export vom {today_str()}")
        self._write_header_row(ws, 3, ["Titel", "Text"])
        for row, info in enumerate(self.schedule.additional_infos, 4):
            ws.cell(row=row, column=1, value=info.title or "")
            cell = ws.cell(row=row, column=2, value=info.text)
            cell.alignment = Alignment(wrap_text=True, vertical="top")
