"""Tests für das Konfigurationssystem."""

from pathlib import Path

import pytest
from pydantic import ValidationError

from config.defaults import DEFAULT_INFO_TITLE, default_school_config
from config.manager import ConfigManager
from config.schema import ClassRangeConfig, CsvConfig, SchoolScheduleConfig
from models.raw import ColumnType
from models.schedule import ScheduleType


# ─── DEFAULT-KONFIGURATION ────────────────────────────────────────────────────

class TestDefaultConfig:
    def test_default_school_config_valid(self):
        """Beispielkonfiguration lässt sich ohne Fehler erstellen."""
        config = default_school_config()
        assert config.school_name == "Beispielschule"
        assert config.schedule_type == ScheduleType.STUDENT
        assert config.class_ranges.range_format == "gc-c"
        assert config.colors == {"Klausur": "orange"}

    def test_defaults(self):
        config = SchoolScheduleConfig(school_name="Testschule")
        assert config.classes == []
        assert config.type_auto_detection is True
        assert config.split_teachers is True
        assert config.merge_with_different_type is False
        assert config.info_title == DEFAULT_INFO_TITLE
        assert config.csv.separator == ";"


# ─── VALIDIERUNG ──────────────────────────────────────────────────────────────

class TestPydanticValidation:
    def test_unknown_color_raises(self):
        with pytest.raises(ValidationError):
            SchoolScheduleConfig(school_name="X", colors={"Entfall": "rosa"})

    def test_hex_color_accepted(self):
        config = SchoolScheduleConfig(school_name="X", colors={"Entfall": "#FF0000"})
        assert config.colors["Entfall"] == "#FF0000"

    def test_invalid_class_regex(self):
        with pytest.raises(ValidationError):
            SchoolScheduleConfig(school_name="X", class_regex="(5")

    def test_invalid_roster_regex(self):
        with pytest.raises(ValidationError):
            SchoolScheduleConfig(school_name="X", classes="[a-")

    def test_columns_from_strings(self):
        config = SchoolScheduleConfig(school_name="X", columns=["lesson", "previousSubject"])
        assert config.columns == [ColumnType.LESSON, ColumnType.PREVIOUS_SUBJECT]

    def test_unknown_column_raises(self):
        with pytest.raises(ValidationError):
            SchoolScheduleConfig(school_name="X", columns=["lehrer"])

    def test_range_format_needs_two_classes(self):
        with pytest.raises(ValidationError):
            ClassRangeConfig(range_format="g-c", single_format="gc")

    def test_additional_columns(self):
        assert CsvConfig(additional_columns=["title", "text"]).additional_columns == [
            "title", "text"]
        with pytest.raises(ValidationError):
            CsvConfig(additional_columns=["datum"])

    def test_negative_skip_lines(self):
        with pytest.raises(ValidationError):
            CsvConfig(skip_lines=-1)


# ─── YAML SPEICHERN / LADEN ───────────────────────────────────────────────────

class TestConfigManager:
    def test_save_and_load_roundtrip(self, tmp_path: Path):
        """Config speichern, laden und validieren: vollständiger Roundtrip."""
        config = default_school_config().model_copy(update={
            "columns": [ColumnType.CLASS, ColumnType.LESSON],
            "schedule_type": ScheduleType.TEACHER,
            "teachers": ["MÜL", "SCH"],
        })
        mgr = ConfigManager()
        mgr.CONFIG_DIR = tmp_path
        mgr.DEFAULT_CONFIG = tmp_path / "school_config.yaml"

        mgr.save(config)
        assert mgr.DEFAULT_CONFIG.exists()

        loaded = mgr.load(mgr.DEFAULT_CONFIG)
        assert loaded == config

    def test_saved_file_has_comments(self, tmp_path: Path):
        path = tmp_path / "schule.yaml"
        ConfigManager().save(default_school_config(), path)
        text = path.read_text(encoding="utf-8")
        assert text.startswith("# ====")
        assert "Schule: Beispielschule" in text
        assert "─── Klassenbereiche ───" in text

    def test_first_run_check(self, tmp_path: Path):
        """first_run_check gibt True zurück, solange keine Config existiert."""
        mgr = ConfigManager()
        mgr.DEFAULT_CONFIG = tmp_path / "school_config.yaml"
        assert mgr.first_run_check() is True
        mgr.save(default_school_config())
        assert mgr.first_run_check() is False

    def test_load_nonexistent_raises(self, tmp_path: Path):
        """Laden einer nicht-existenten Datei → FileNotFoundError."""
        with pytest.raises(FileNotFoundError):
            ConfigManager().load(tmp_path / "not_there.yaml")

    def test_load_invalid_raises(self, tmp_path: Path):
        path = tmp_path / "kaputt.yaml"
        path.write_text("school_name: X\ncolors:\n  Entfall: rosa\n", encoding="utf-8")
        with pytest.raises(ValueError, match="Konfigurationsdatei ungültig"):
            ConfigManager().load(path)

    def test_school_save_and_load(self, tmp_path: Path):
        """Schule speichern und laden: Roundtrip."""
        config = default_school_config("Test-Schule")
        mgr = ConfigManager(tmp_path / "schools")

        path = mgr.save_school(config, "test_schule")
        assert path == tmp_path / "schools" / "test_schule.yaml"
        assert mgr.load_school("test_schule").school_name == "Test-Schule"

    def test_school_not_overwritten(self, tmp_path: Path):
        mgr = ConfigManager(tmp_path)
        mgr.save_school(default_school_config(), "schule")
        with pytest.raises(FileExistsError):
            mgr.save_school(default_school_config(), "schule")
        mgr.save_school(default_school_config("Neu"), "schule", overwrite=True)
        assert mgr.load_school("schule").school_name == "Neu"

    def test_list_schools(self, tmp_path: Path):
        mgr = ConfigManager(tmp_path)
        mgr.save_school(default_school_config("B-Schule"), "b")
        mgr.save_school(default_school_config("A-Schule"), "a")
        (tmp_path / "kaputt.yaml").write_text("colors: 5\n", encoding="utf-8")

        schools = mgr.list_schools()
        assert [s["name"] for s in schools] == ["a", "b"]
        assert schools[0]["school_name"] == "A-Schule"
        assert schools[0]["schedule_type"] == "student"

    def test_list_schools_empty(self, tmp_path: Path):
        """Leeres Schulverzeichnis → leere Liste."""
        assert ConfigManager(tmp_path / "schools").list_schools() == []

    def test_load_school_missing(self, tmp_path: Path):
        with pytest.raises(FileNotFoundError):
            ConfigManager(tmp_path).load_school("fehlt")
