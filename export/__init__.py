"""Export-Modul: Excel (openpyxl) für den Vertretungsplan."""

from export.excel_export import ScheduleExcelExporter

__all__ = ["ScheduleExcelExporter"]
