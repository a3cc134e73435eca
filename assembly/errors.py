"""Fehlerklassen der Plan-Erstellung."""


class ScheduleError(Exception):
    """Basisklasse für Fehler beim Erstellen eines Vertretungsplans."""


class UnparseableStructureError(ScheduleError, ValueError):
    """Die Quelle hat eine unerwartete Struktur (z. B. unbekannter Spaltentyp)."""


class CredentialInvalidError(ScheduleError):
    """Zugangsdaten wurden abgelehnt. Kein leerer Plan, sondern ein Fehler."""
