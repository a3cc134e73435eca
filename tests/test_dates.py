"""Tests für das Einlesen von Datums- und Zeitangaben."""

from datetime import date, datetime

import pytest

from config.defaults import DATE_FORMATS
from normalizer.dates import DateTimeNormalizer, compile_format, format_date


def _fixed_now(value: datetime):
    return lambda: value


@pytest.fixture
def dates() -> DateTimeNormalizer:
    return DateTimeNormalizer(now=_fixed_now(datetime(2024, 3, 10, 12, 0)))


# ─── DATUM ────────────────────────────────────────────────────────────────────

class TestParseDate:
    @pytest.mark.parametrize("text, expected", [
        ("Montag, 11.03.2024", date(2024, 3, 11)),
        ("11.3.2024 Montag", date(2024, 3, 11)),
        ("11.3.24 Montag", date(2024, 3, 11)),
        ("Montag, den 11.3.2024", date(2024, 3, 11)),
        ("Montag, 11. März 2024", date(2024, 3, 11)),
        ("11. März 2024", date(2024, 3, 11)),
        ("2024-03-11", date(2024, 3, 11)),
        ("11.3.2024", date(2024, 3, 11)),
        ("Mo 11.3.2024", date(2024, 3, 11)),
    ])
    def test_known_formats(self, dates, text, expected):
        """Gängige Schreibweisen werden erkannt."""
        assert dates.parse_date(text) == expected

    def test_week_suffix_stripped(self, dates):
        """", Woche A" wird vor dem Vergleich entfernt."""
        assert dates.parse_date("11.3.2024 Montag, Woche A") == date(2024, 3, 11)

    def test_group_suffix_stripped(self, dates):
        assert dates.parse_date(
            "Montag, 11.03.2024, Blockunterricht Gruppe 2"
        ) == date(2024, 3, 11)

    def test_case_and_whitespace_insensitive(self, dates):
        assert dates.parse_date("  montag,   11.03.2024 ") == date(2024, 3, 11)

    def test_non_breaking_space(self, dates):
        assert dates.parse_date("Montag,\u00a011.03.2024") == date(2024, 3, 11)

    def test_unknown_text_returns_none(self, dates):
        """Unbekannter Text ist kein Fehler, sondern None."""
        assert dates.parse_date("irgendwann nächste Woche") is None
        assert dates.parse_date("") is None
        assert dates.parse_date(None) is None

    def test_invalid_date_returns_none(self, dates):
        assert dates.parse_date("31.02.2024") is None


# ─── JAHRESWECHSEL ────────────────────────────────────────────────────────────

class TestYearDisambiguation:
    def test_january_seen_in_december(self):
        """"3. Januar" am 30.12.2024 ist der 3.1.2025."""
        dates = DateTimeNormalizer(now=_fixed_now(datetime(2024, 12, 30, 8, 0)))
        assert dates.parse_date("3. Januar") == date(2025, 1, 3)

    def test_december_seen_in_january(self):
        dates = DateTimeNormalizer(now=_fixed_now(datetime(2025, 1, 2, 8, 0)))
        assert dates.parse_date("Montag, 30.12.") == date(2024, 12, 30)

    def test_same_year_when_close(self):
        dates = DateTimeNormalizer(now=_fixed_now(datetime(2024, 6, 1, 8, 0)))
        assert dates.parse_date("4.6.") == date(2024, 6, 4)

    def test_leap_day_skips_invalid_years(self):
        """29.2. existiert nur im Schaltjahr."""
        dates = DateTimeNormalizer(now=_fixed_now(datetime(2025, 2, 20, 8, 0)))
        assert dates.parse_date("29.2.") == date(2024, 2, 29)

    def test_two_digit_year_pivot(self):
        dates = DateTimeNormalizer(now=_fixed_now(datetime(2024, 3, 10)))
        assert dates.parse_date("11.3.99 Donnerstag") == date(1999, 3, 11)
        assert dates.parse_date("11.3.30 Montag") == date(2030, 3, 11)


# ─── UHRZEIT ──────────────────────────────────────────────────────────────────

class TestParseDateTime:
    @pytest.mark.parametrize("text", [
        "Stand: 11.03.2024 07:45",
        "11.03.2024, 07:45",
        "11.03.2024 um 07:45 Uhr",
        "Montag, 11.03.2024 07:45",
        "11.03.2024 - 07:45",
        "11.03.2024 (07:45 Uhr)",
    ])
    def test_known_formats(self, dates, text):
        assert dates.parse_datetime(text) == datetime(2024, 3, 11, 7, 45)

    def test_seconds(self, dates):
        assert dates.parse_datetime("11.03.2024 07:45:30") == datetime(2024, 3, 11, 7, 45, 30)

    def test_import_prefix(self, dates):
        assert dates.parse_datetime("Import: 11.03.2024 07:45") == datetime(2024, 3, 11, 7, 45)

    def test_without_year_uses_closest(self):
        dates = DateTimeNormalizer(now=_fixed_now(datetime(2024, 12, 31, 23, 0)))
        assert dates.parse_datetime("1.1. 07:30") == datetime(2025, 1, 1, 7, 30)

    def test_date_only_is_not_a_datetime(self, dates):
        assert dates.parse_datetime("11.03.2024") is None


# ─── FORMATIERUNG ─────────────────────────────────────────────────────────────

class TestFormatRoundTrip:
    @pytest.mark.parametrize("pattern", DATE_FORMATS)
    @pytest.mark.parametrize("value", [
        date(2024, 12, 30), date(2025, 1, 2), date(2024, 2, 29),
    ])
    def test_round_trip(self, pattern, value):
        """parse_date(format_date(d, p)) == d für jedes unterstützte Format."""
        dates = DateTimeNormalizer(
            date_formats=(pattern,),
            now=_fixed_now(datetime(2024, 12, 31, 12, 0)),
        )
        assert dates.parse_date(format_date(value, pattern)) == value

    def test_format_german_names(self):
        assert format_date(date(2024, 3, 11), "EEEE, d. MMMM yyyy") == "Montag, 11. März 2024"
        assert format_date(date(2024, 3, 11), "EEE, dd.MM.") == "Mo, 11.03."

    def test_format_time_needs_datetime(self):
        with pytest.raises(ValueError):
            format_date(date(2024, 3, 11), "dd.MM.yyyy HH:mm")

    def test_unknown_pattern_letter(self):
        with pytest.raises(ValueError):
            compile_format("dd.MM.QQ")

    def test_compiled_format_fields(self):
        fmt = compile_format("EEEE, d.M.yyyy HH:mm")
        assert fmt.has_year
        assert fmt.has_time
        assert not compile_format("d.M.").has_year
