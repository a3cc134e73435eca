"""Konfigurationsmanager: Laden, Speichern und Verwalten der Schulkonfigurationen.

Nutzt ruamel.yaml für YAML-Serialisierung mit Kommentaren.
"""

import json
import logging
from datetime import date
from pathlib import Path
from typing import Optional

from rich.console import Console
from ruamel.yaml import YAML
from ruamel.yaml.comments import CommentedMap

from config.schema import SchoolScheduleConfig

logger = logging.getLogger(__name__)

console = Console()
yaml = YAML()
yaml.default_flow_style = False
yaml.width = 120


# ─── YAML-KOMMENTAR-AUFBAU ───

def _yaml_header(config: SchoolScheduleConfig) -> str:
    return f"""\
# ============================================
# Vertretungsplan - Schulkonfiguration
# Schule: {config.school_name}
# Erstellt: {date.today().isoformat()}
# ============================================
"""


_SECTION_COMMENTS = {
    "schedule_type": (
        "Plan",
        "student = Schülerplan, teacher = Lehrerplan.",
    ),
    "classes": (
        "Klassen",
        "Liste aller Klassen oder ein regulärer Ausdruck, z.B. '(0[5-9]|1[0-2])[a-d]'.",
    ),
    "class_ranges": (
        "Klassenbereiche",
        "g = Jahrgang, c = Klasse. Beispiel: range_format 'gc-c', single_format 'gc'.",
    ),
    "colors": (
        "Farben",
        "Vertretungsart → Farbname (red, blue, ...) oder Hex-Wert (#RRGGBB).",
    ),
    "type_auto_detection": (
        "Auswertung",
        None,
    ),
    "columns": (
        "Quelle",
        "Spaltenaufbau, falls die Quelle keine erkennbaren Überschriften hat.",
    ),
}


class ConfigManager:
    CONFIG_DIR = Path("config")
    DEFAULT_CONFIG = CONFIG_DIR / "school_config.yaml"
    SCHOOLS_DIR = Path("schools")

    def __init__(self, schools_dir: Optional[Path] = None):
        if schools_dir is not None:
            self.SCHOOLS_DIR = Path(schools_dir)

    def first_run_check(self) -> bool:
        """Gibt True zurück wenn noch keine Config existiert (Erstaufruf)."""
        return not self.DEFAULT_CONFIG.exists()

    # ─── Laden ───

    def load(self, path: Optional[Path] = None) -> SchoolScheduleConfig:
        """Lade Config aus YAML. Validiert automatisch via Pydantic."""
        target = Path(path) if path else self.DEFAULT_CONFIG
        if not target.exists():
            raise FileNotFoundError(
                f"Konfigurationsdatei nicht gefunden: {target}\n"
                f"Führen Sie 'python main.py config init {target}' aus."
            )
        with open(target, "r", encoding="utf-8") as f:
            raw = yaml.load(f)
        try:
            config = SchoolScheduleConfig.model_validate(dict(raw or {}))
        except Exception as e:
            raise ValueError(
                f"Konfigurationsdatei ungültig: {target}\n"
                f"Pydantic-Fehler: {e}"
            ) from e
        logger.debug(f"Konfiguration geladen: {target} ({config.school_name})")
        return config

    # ─── Speichern ───

    def save(self, config: SchoolScheduleConfig, path: Optional[Path] = None) -> None:
        """Speichere Config als YAML mit deutschen Kommentaren."""
        target = Path(path) if path else self.DEFAULT_CONFIG
        target.parent.mkdir(parents=True, exist_ok=True)

        data = self._build_commented_yaml(config)

        with open(target, "w", encoding="utf-8") as f:
            f.write(_yaml_header(config) + "\n")
            yaml.dump(data, f)

        console.print(f"[green]✓[/green] Konfiguration gespeichert: {target}")

    def _build_commented_yaml(self, config: SchoolScheduleConfig) -> CommentedMap:
        """Baut die YAML-Struktur mit Kommentaren auf."""
        raw = json.loads(config.model_dump_json(exclude_none=True))
        cm = CommentedMap(raw)

        for field, (label, comment) in _SECTION_COMMENTS.items():
            if field not in cm:
                continue
            cm.yaml_set_comment_before_after_key(
                field,
                before=f"\n─── {label} ───" + (f"\n{comment}" if comment else ""),
            )

        if "merge_with_different_type" in cm:
            cm.yaml_add_eol_comment("bevorzugt 'Vertretung'", "merge_with_different_type")

        return cm

    # ─── Schulen ───

    def save_school(self, config: SchoolScheduleConfig, name: str,
                    overwrite: bool = False) -> Path:
        """Speichert eine Schulkonfiguration unter ``schools/<name>.yaml``."""
        self.SCHOOLS_DIR.mkdir(parents=True, exist_ok=True)
        path = self.SCHOOLS_DIR / f"{name}.yaml"
        if path.exists() and not overwrite:
            raise FileExistsError(f"Schule '{name}' existiert bereits: {path}")
        self.save(config, path)
        return path

    def list_schools(self) -> list[dict]:
        """Listet alle gespeicherten Schulkonfigurationen auf."""
        if not self.SCHOOLS_DIR.exists():
            return []
        schools = []
        for p in sorted(self.SCHOOLS_DIR.glob("*.yaml")):
            try:
                config = self.load(p)
            except ValueError as e:
                logger.warning(f"Überspringe ungültige Konfiguration {p}: {e}")
                continue
            schools.append({
                "name": p.stem,
                "path": str(p),
                "school_name": config.school_name,
                "schedule_type": config.schedule_type.value,
            })
        return schools

    def load_school(self, name: str) -> SchoolScheduleConfig:
        """Lädt eine gespeicherte Schulkonfiguration."""
        path = self.SCHOOLS_DIR / f"{name}.yaml"
        if not path.exists():
            raise FileNotFoundError(
                f"Schule '{name}' nicht gefunden. "
                f"Verfügbar: {[s['name'] for s in self.list_schools()]}"
            )
        return self.load(path)
