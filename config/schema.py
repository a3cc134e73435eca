import re
from typing import Optional, Union

from pydantic import BaseModel, Field, field_validator, model_validator

from config.defaults import DEFAULT_INFO_TITLE
from models.raw import ColumnType
from models.schedule import ScheduleType
from normalizer.colors import resolve_color


# ─── KLASSENBEREICHE ───

class ClassRangeConfig(BaseModel):
    """Schulspezifische Schreibweise für Klassenbereiche.

    Beispiel: range_format "gc-c" und single_format "gc" machen aus "7A-C"
    die Klassen 7A, 7B und 7C. ``g`` steht für den Jahrgang, ``c`` für die
    Klasse; alle anderen Zeichen werden wörtlich genommen.
    """
    # Vorlage für einen Bereich, "c" genau zweimal (erste und letzte Klasse)
    range_format: str = Field(description="Vorlage für Bereiche, z.B. 'gc-c'")
    # Vorlage für eine einzelne Klasse
    single_format: str = Field(description="Vorlage für einzelne Klassen, z.B. 'gc'")
    # Wie ein Jahrgang aussieht
    grade_regex: str = Field(r"\d+", description="Regex für den Jahrgang")
    # Wie eine Klasse (Buchstabe / Nummer) aussieht
    class_regex: str = Field(r"[a-zA-Z]", description="Regex für die Klasse")

    @model_validator(mode='after')
    def validate_formats(self):
        """Prüfe Platzhalter und reguläre Ausdrücke."""
        if self.range_format.count("c") != 2:
            raise ValueError(
                f"range_format '{self.range_format}' muss genau zweimal 'c' enthalten")
        if "c" not in self.single_format:
            raise ValueError(
                f"single_format '{self.single_format}' muss 'c' enthalten")
        for regex in (self.grade_regex, self.class_regex):
            try:
                re.compile(regex)
            except re.error as e:
                raise ValueError(f"Ungültiger regulärer Ausdruck '{regex}': {e}") from e
        return self


# ─── CSV-QUELLEN ───

class CsvConfig(BaseModel):
    """Einstellungen für Pläne im CSV-Format."""
    # Trennzeichen (",", ";" oder "\t")
    separator: str = ";"
    # Anführungszeichen für Felder mit Trennzeichen
    quote: str = '"'
    # Zeilen am Dateianfang, die übersprungen werden (Kopfzeilen)
    skip_lines: int = Field(0, ge=0)
    # Spalten der Zusatzinfo-Datei ("title", "text", "ignore")
    additional_columns: list[str] = Field(default_factory=list)

    @field_validator("additional_columns")
    @classmethod
    def check_additional_columns(cls, v: list[str]) -> list[str]:
        unknown = [c for c in v if c not in ("title", "text", "ignore")]
        if unknown:
            raise ValueError(f"Unbekannte Zusatzinfo-Spalten: {unknown}")
        return v


# ─── GESAMTKONFIGURATION ───

class SchoolScheduleConfig(BaseModel):
    """Konfiguration für den Vertretungsplan einer Schule."""
    school_name: str = Field(description="Name der Schule")
    # Website, auf der der Plan online steht
    website: Optional[str] = None
    # Schüler- oder Lehrerplan
    schedule_type: ScheduleType = ScheduleType.STUDENT
    # Alle Klassen: Liste oder regulärer Ausdruck ("(0[5-9]|1[0-2])[a-d]")
    classes: Union[list[str], str] = Field(default_factory=list)
    # Alle Lehrkräfte (nur für Lehrerpläne relevant)
    teachers: list[str] = Field(default_factory=list)
    # Schreibweise für Klassenbereiche
    class_ranges: Optional[ClassRangeConfig] = None
    # Regex, mit dem die Klasse aus dem Zelleninhalt geschnitten wird
    class_regex: Optional[str] = None
    # Klassen, die nie in den Plan übernommen werden
    exclude_classes: list[str] = Field(default_factory=list)
    # Klassen durch Komma getrennt ("5a, 5b") oder zusammengeschrieben ("5ab")
    classes_separated: bool = True
    # Farbzuordnung: Vertretungsart → Farbname oder Hex-Wert
    colors: dict[str, str] = Field(default_factory=dict)
    # Art aus Durchstreichungen ableiten, wenn keine Art-Spalte existiert
    type_auto_detection: bool = True
    # "MÜL, MEI" als zwei Lehrkräfte behandeln
    split_teachers: bool = True
    # Gleiche Vertretungen mit unterschiedlicher Art zusammenfassen
    merge_with_different_type: bool = False
    # Info-Spalte auswerten ("für Mathe Müller, Vertretung")
    parse_descriptions: bool = True
    # Spaltenaufbau der Quelle (falls der Adapter ihn nicht selbst erkennt)
    columns: list[ColumnType] = Field(default_factory=list)
    # CSV-Einstellungen
    csv: CsvConfig = Field(default_factory=CsvConfig)
    # Titel für allgemeine Mitteilungen ohne Datum
    info_title: str = DEFAULT_INFO_TITLE

    @field_validator("colors")
    @classmethod
    def check_colors(cls, v: dict[str, str]) -> dict[str, str]:
        for color in v.values():
            resolve_color(color)
        return v

    @field_validator("class_regex")
    @classmethod
    def check_class_regex(cls, v: Optional[str]) -> Optional[str]:
        if v is not None:
            try:
                re.compile(v)
            except re.error as e:
                raise ValueError(f"Ungültiger class_regex '{v}': {e}") from e
        return v

    @field_validator("classes")
    @classmethod
    def check_classes_regex(cls, v: Union[list[str], str]) -> Union[list[str], str]:
        if isinstance(v, str):
            try:
                re.compile(v)
            except re.error as e:
                raise ValueError(f"Klassenliste ist kein gültiger Regex '{v}': {e}") from e
        return v
