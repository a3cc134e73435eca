"""Tests für das Auflösen von Klassenangaben."""

import pytest

from config.schema import ClassRangeConfig
from normalizer.classes import (
    ClassSetResolver,
    build_range_regex,
    classes_from_roster,
    expand_class_ranges,
    get_class_name,
)
from normalizer.text import join_classes, natural_sorted


def _ranges(**kwargs) -> ClassRangeConfig:
    params = dict(range_format="gc-c", single_format="gc",
                  grade_regex=r"\d+", class_regex=r"[a-zA-Z]")
    params.update(kwargs)
    return ClassRangeConfig(**params)


# ─── BEREICHSVORLAGEN ─────────────────────────────────────────────────────────

class TestExpandClassRanges:
    def test_letter_range(self):
        """"7A-C" mit gc-c / gc → 7A, 7B, 7C."""
        cfg = _ranges(grade_regex=r"\d", class_regex=r"[A-Z]")
        assert expand_class_ranges("7A-C", cfg) == {"7A", "7B", "7C"}

    def test_two_digit_grade(self):
        assert expand_class_ranges("10a-d", _ranges()) == {"10a", "10b", "10c", "10d"}

    def test_number_range_with_repeated_grade(self):
        """"10/1-10/4": der Jahrgang wiederholt sich (Rückverweis)."""
        cfg = _ranges(range_format="g/c-g/c", single_format="g/c", class_regex=r"\d")
        assert expand_class_ranges("10/1-10/4", cfg) == {"10/1", "10/2", "10/3", "10/4"}

    def test_repeated_grade_must_match(self):
        cfg = _ranges(range_format="g/c-g/c", single_format="g/c", class_regex=r"\d")
        assert expand_class_ranges("10/1-11/4", cfg) == {"10/1-11/4"}

    def test_non_matching_passes_through(self):
        assert expand_class_ranges({"5a", "Q1"}, _ranges()) == {"5a", "Q1"}

    def test_without_config_unchanged(self):
        assert expand_class_ranges({"7A-C"}, None) == {"7A-C"}

    def test_wrong_order_passes_through(self):
        """Bereich mit vertauschten Grenzen bleibt unverändert."""
        assert expand_class_ranges("7C-A", _ranges()) == {"7C-A"}

    def test_idempotent(self):
        """Zweimal auflösen ändert nichts mehr."""
        cfg = _ranges()
        once = expand_class_ranges({"7a-c", "8b", "EF"}, cfg)
        assert expand_class_ranges(once, cfg) == once

    def test_build_range_regex_groups(self):
        regex = build_range_regex("gc-c", r"\d+", r"[a-z]")
        match = regex.fullmatch("12a-f")
        assert match.group("grade") == "12"
        assert match.group("class1") == "a"
        assert match.group("class2") == "f"

    def test_build_range_regex_escapes_literals(self):
        regex = build_range_regex("g.c+c", r"\d+", r"[a-z]")
        assert regex.fullmatch("5.a+c") is not None
        assert regex.fullmatch("5xa+c") is None

    def test_build_range_regex_too_many_classes(self):
        with pytest.raises(ValueError):
            build_range_regex("gc-c-c", r"\d+", r"[a-z]")

    def test_config_validation(self):
        """range_format braucht genau zwei 'c'."""
        with pytest.raises(ValueError):
            _ranges(range_format="gc")
        with pytest.raises(ValueError):
            _ranges(single_format="g")
        with pytest.raises(ValueError):
            _ranges(class_regex="[a-")


# ─── KLASSENLISTE ─────────────────────────────────────────────────────────────

class TestRoster:
    def test_roster_regex_enumerated_and_sorted(self):
        roster = classes_from_roster(r"(0[5-9]|10)[a-d]|11|12")
        assert len(roster) == 26
        assert roster[:3] == ["05a", "05b", "05c"]
        assert roster[-3:] == ["10d", "11", "12"]

    def test_roster_list_unchanged(self):
        assert classes_from_roster(["5b", "5a"]) == ["5b", "5a"]
        assert classes_from_roster(None) == []

    def test_natural_sort(self):
        assert natural_sorted(["10a", "5b", "5a", "EF"]) == ["5a", "5b", "10a", "EF"]

    def test_get_class_name(self):
        assert get_class_name("Klasse 5a", r"Klasse (\w+)") == "5a"
        assert get_class_name("5a (Kurs)", r"\d+\w") == "5a"
        assert get_class_name("Kurs", r"\d+\w") == ""
        assert get_class_name("5a", None) == "5a"


# ─── AUFLÖSUNG ────────────────────────────────────────────────────────────────

class TestClassSetResolver:
    @pytest.fixture
    def roster(self) -> list[str]:
        return ["5a", "5b", "6a", "6b", "7a", "11", "12"]

    def test_comma_separated(self):
        resolver = ClassSetResolver()
        assert resolver.resolve("5a, 5b,6c") == {"5a", "5b", "6c"}

    def test_single_grade(self, roster):
        """"5" meint alle Klassen des Jahrgangs 5."""
        assert ClassSetResolver(roster).resolve("5") == {"5a", "5b"}

    def test_single_grade_unknown_passes(self, roster):
        assert ClassSetResolver(roster).resolve("9") == {"9"}

    def test_grade_range(self, roster):
        assert ClassSetResolver(roster).resolve("6-11") == {"6a", "6b", "7a", "11"}

    def test_bracket_notation(self):
        assert ClassSetResolver().resolve("07 [A,B,C]") == {"07A", "07B", "07C"}

    def test_range_template_applied(self):
        resolver = ClassSetResolver(ranges=_ranges())
        assert resolver.resolve("7a-c, 8b") == {"7a", "7b", "7c", "8b"}

    def test_exclusions(self):
        resolver = ClassSetResolver(exclude=["Lehrer"])
        assert resolver.resolve("-----") == set()
        assert resolver.resolve("5a, Lehrer") == {"5a"}

    def test_empty_text(self):
        resolver = ClassSetResolver()
        assert resolver.resolve(None) == set()
        assert resolver.resolve("   ") == set()

    def test_class_regex(self):
        resolver = ClassSetResolver(class_regex=r"\((.*)\)")
        assert resolver.resolve("Kurs (5a, 5b)") == {"5a", "5b"}

    @pytest.mark.parametrize("text, expected", [
        ("11abc12b", {"11a", "11b", "11c", "12b"}),
        ("8ab9abc", {"8a", "8b", "9a", "9b", "9c"}),
        ("5a", {"5a"}),
    ])
    def test_unseparated(self, text, expected):
        resolver = ClassSetResolver(classes_separated=False)
        assert resolver.resolve(text) == expected

    def test_unseparated_roster_fallback(self, roster):
        """"1112" ist mit Klassenliste [11, 12] zwei Klassen."""
        resolver = ClassSetResolver(roster, classes_separated=False)
        assert resolver.resolve("1112") == {"11", "12"}

    def test_from_config(self):
        from config.defaults import default_school_config
        resolver = ClassSetResolver.from_config(default_school_config())
        assert "05a" in resolver.roster
        assert resolver.resolve("05a-c") == {"05a", "05b", "05c"}

    def test_resolve_idempotent(self):
        resolver = ClassSetResolver(ranges=_ranges())
        first = resolver.resolve("7a-c")
        again = set()
        for name in first:
            again |= resolver.resolve(name)
        assert again == first


class TestJoinClasses:
    def test_compress_same_grade(self):
        assert join_classes({"5a", "5b", "6c"}) == "5ab, 6c"

    def test_numeric_classes_not_merged(self):
        assert join_classes({"11", "12"}) == "11, 12"

    def test_natural_order(self):
        assert join_classes({"10a", "9a", "9b"}) == "9ab, 10a"
