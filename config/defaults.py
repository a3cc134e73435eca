"""Standardwerte: Datumsformate, Farbtabellen und Typ-Regeln.

Alle Tabellen sind unveränderlich (Tupel / MappingProxy) und werden den
Komponenten beim Erzeugen übergeben.
"""

from types import MappingProxyType

# ─── Datum & Uhrzeit ───

# Reihenfolge ist relevant: das erste passende Format gewinnt.
DATE_FORMATS: tuple[str, ...] = (
    "dd.M.yy EEEE",
    "d.M.yyyy EEEE",
    "d.M. EEEE",
    "EEEE d.M.yyyy",
    "EEEE, d.M.yyyy",
    "EEEE', den 'd.M.yyyy",
    "EEEE', den 'd.M.",
    "EEEE, d.M.",
    "EEEE d.M.",
    "EEEE, d. MMMM yyyy",
    "EEEE, 'den' d. MMMM yyyy",
    "EEEE, d. MMMM",
    "EEEE d. MMMM yyyy",
    "d. MMMM yyyy",
    "d. MMMM",
    "d.M.yyyy",
    "d.M.",
    "EEE d.M.yyyy",
    "EEE, d.M.",
    "yyyy-MM-dd",
    "d-M-yyyy",
)

TIME_FORMATS: tuple[str, ...] = (
    "HH:mm",
    "HH:mm 'Uhr'",
    "(HH:mm 'Uhr')",
    "HH:mm:ss",
)

DATETIME_SEPARATORS: tuple[str, ...] = (" ", ", ", " um ", " - ")

# Vor dem Parsen entfernte Präfixe ("Stand: 12.03.2024 07:45")
STRIPPED_PREFIXES: tuple[str, ...] = ("Stand:", "Import:")

# Nur bei reinen Datumsangaben entfernte Zusätze ("Montag, 11.03.2024, Woche A")
STRIPPED_DATE_SUFFIXES: tuple[str, ...] = (
    r", Woche [A-Z]",
    r", [^,]*unterricht Gruppe .*",
    r", Unterrichts[^,]* Gruppe .*",
)

WEEKDAY_NAMES: tuple[str, ...] = (
    "Montag", "Dienstag", "Mittwoch", "Donnerstag", "Freitag", "Samstag", "Sonntag",
)

MONTH_NAMES: tuple[str, ...] = (
    "Januar", "Februar", "März", "April", "Mai", "Juni",
    "Juli", "August", "September", "Oktober", "November", "Dezember",
)

# ─── Klassen ───

EXCLUDED_CLASS_NAMES: tuple[str, ...] = ("-----",)

# Obergrenze für das Aufzählen regulärer Ausdrücke (Klassenliste, Bereiche)
MAX_ENUMERATED_CLASSES = 1000

# ─── Farben ───

COLOR_NAMES = MappingProxyType({
    "red": "#F44336",
    "pink": "#E91E63",
    "purple": "#9C27B0",
    "deep_purple": "#673AB7",
    "indigo": "#3F51B5",
    "blue": "#2196F3",
    "light_blue": "#03A9F4",
    "cyan": "#00BCD4",
    "teal": "#009688",
    "green": "#4CAF50",
    "light_green": "#8BC34A",
    "lime": "#CDDC39",
    "yellow": "#FFA000",
    "amber": "#FFC107",
    "orange": "#FF9800",
    "deep_orange": "#FF5722",
    "brown": "#795548",
    "gray": "#9E9E9E",
    "blue_gray": "#607D8B",
    "black": "#000000",
    "white": "#FFFFFF",
})

FALLBACK_COLOR = "purple"

# Farbe → Typen, so wie sie in den Plänen der Schulen vorkommen
DEFAULT_TYPE_COLORS = MappingProxyType({
    "red": (
        "Entfall", "EVA", "Entf.", "Entf", "Fällt aus!", "Fällt aus", "entfällt",
        "Freistunde", "Klasse frei", "Selbstlernen", "HA", "selb.Arb.", "Aufgaben",
        "selbst.", "Frei", "Ausfall", "Stillarbeit", "Absenz", "-> Entfall",
        "Freisetzung",
    ),
    "blue": (
        "Vertretung", "Sondereins.", "Statt-Vertretung", "Betreuung", "V", "VTR",
        "Vertr.",
    ),
    "yellow": (
        "Tausch", "Verlegung", "Zusammenlegung", "Unterricht geändert",
        "Unterrichtstausch", "geändert", "statt", "Stundentausch",
    ),
    "green": (
        "Raum", "KLA", "Raum-Vtr.", "Raumtausch", "Raumverlegung", "Raumänderung",
        "R. Änd.", "Raum beachten", "Raum-Vertr.",
    ),
    "brown": ("Veranst.", "Veranstaltung", "Frei/Veranstaltung", "Hochschultag"),
    "orange": ("Klausur",),
    "gray": ("Pausenaufsicht",),
})

# ─── Typ-Erkennung ───

CANCELLATION_KEYWORDS: tuple[str, ...] = (
    "f.a.", "fällt aus", "faellt aus", "entfällt", "entfall",
)

# Typen, die unverändert übernommen werden
LITERAL_TYPES: tuple[str, ...] = (
    "Raumänderung", "Klasse frei", "Unterrichtstausch", "Freistunde",
    "Raumverlegung", "Selbstlernen", "Zusammenlegung", "HA", "Raum beachten",
    "Stundentausch", "Klausur", "Raum-Vertr.", "Betreuung", "Frei/Veranstaltung",
    "Raumwechsel", "selbstständiges Arbeiten",
)

TYPE_PREFIXES: tuple[tuple[str, str], ...] = (
    ("Ausfallstunde:", "Ausfallstunde"),
    ("Raumwechsel/ Stillarbeit:", "Raumwechsel/ Stillarbeit"),
    ("Stillarbeit:", "Stillarbeit"),
)

TYPE_SUBSTRINGS: tuple[tuple[str, str], ...] = (
    ("verschoben", "Verlegung"),
    ("geänderter Raum", "Raumänderung"),
    ("frei", "Entfall"),
    ("Aufgaben", "Aufgaben"),
)

# ─── Allgemeine Mitteilungen ───

DEFAULT_INFO_TITLE = "Allgemeine Informationen"


def default_school_config(school_name: str = "Beispielschule"):
    """Beispielkonfiguration eines Gymnasiums mit Klassen 5a-10d und Oberstufe.

    Klassen:  05a … 10d, 11, 12
    Bereiche: "05a-d" → 05a, 05b, 05c, 05d
    """
    from config.schema import ClassRangeConfig, SchoolScheduleConfig

    return SchoolScheduleConfig(
        school_name=school_name,
        classes=r"(0[5-9]|10)[a-d]|11|12",
        class_ranges=ClassRangeConfig(
            range_format="gc-c",
            single_format="gc",
            grade_regex=r"\d+",
            class_regex=r"[a-d]",
        ),
        colors={"Klausur": "orange"},
    )
