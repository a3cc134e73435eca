"""Einlesen deutscher Datums- und Zeitangaben aus Vertretungsplänen.

Die Formate folgen der Joda-Schreibweise ("EEEE, d. MMMM yyyy", "HH:mm 'Uhr'").
Fehlt im Text die Jahreszahl, wird das Jahr gewählt, das am nächsten an
"jetzt" liegt, damit ein im Dezember erstellter Plan für den 2. Januar im
nächsten Jahr landet.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from datetime import date, datetime
from typing import Callable, Optional, Sequence, Union

from config.defaults import (
    DATE_FORMATS,
    DATETIME_SEPARATORS,
    MONTH_NAMES,
    STRIPPED_DATE_SUFFIXES,
    STRIPPED_PREFIXES,
    TIME_FORMATS,
    WEEKDAY_NAMES,
)

logger = logging.getLogger(__name__)

_TOKEN_RE = re.compile(r"'([^']*)'|([A-Za-z])\2*|(.)", re.DOTALL)
_WHITESPACE_RE = re.compile(r"\s+")

_MONTH_ALIASES = {"maerz": 3, "märz": 3, "mrz": 3}


def _alternation(names: Sequence[str]) -> str:
    return "|".join(re.escape(n) for n in sorted(names, key=len, reverse=True))


# Feldtyp → (Gruppenname, regulärer Ausdruck)
_FIELDS = {
    "d": ("day", r"\d{1,2}"),
    "dd": ("day", r"\d{1,2}"),
    "M": ("month", r"\d{1,2}"),
    "MM": ("month", r"\d{1,2}"),
    "MMM": ("month_name", _alternation([m[:3] for m in MONTH_NAMES] + ["Mrz"])),
    "MMMM": ("month_name", _alternation(list(MONTH_NAMES) + ["Maerz"])),
    "yy": ("year2", r"\d{2}(?:\d{2})?"),
    "yyyy": ("year", r"\d{4}"),
    "E": ("weekday", _alternation([w[:2] for w in WEEKDAY_NAMES])),
    "EEE": ("weekday", _alternation([w[:2] for w in WEEKDAY_NAMES])),
    "EEEE": ("weekday", _alternation(WEEKDAY_NAMES)),
    "H": ("hour", r"\d{1,2}"),
    "HH": ("hour", r"\d{1,2}"),
    "m": ("minute", r"\d{1,2}"),
    "mm": ("minute", r"\d{1,2}"),
    "ss": ("second", r"\d{1,2}"),
}


@dataclass(frozen=True)
class DateFormat:
    """Ein vorkompiliertes Format."""

    pattern: str
    regex: re.Pattern
    tokens: tuple[tuple[bool, str], ...]   # (ist_feld, text)

    @property
    def fields(self) -> set[str]:
        return {_FIELDS[text][0] for is_field, text in self.tokens if is_field}

    @property
    def has_year(self) -> bool:
        return bool(self.fields & {"year", "year2"})

    @property
    def has_time(self) -> bool:
        return "hour" in self.fields


def _tokenize(pattern: str) -> tuple[tuple[bool, str], ...]:
    tokens = []
    for match in _TOKEN_RE.finditer(pattern):
        quoted, letter, other = match.group(1), match.group(2), match.group(3)
        if quoted is not None:
            tokens.append((False, quoted if quoted else "'"))
        elif letter is not None:
            text = match.group(0)
            if text not in _FIELDS:
                raise ValueError(f"Unbekanntes Formatfeld '{text}' in '{pattern}'")
            tokens.append((True, text))
        else:
            tokens.append((False, other))
    return tuple(tokens)


def compile_format(pattern: str) -> DateFormat:
    """Übersetzt ein Joda-Format in einen regulären Ausdruck."""
    tokens = _tokenize(pattern)
    parts = []
    seen: set[str] = set()
    for is_field, text in tokens:
        if not is_field:
            parts.append(re.escape(text))
            continue
        name, regex = _FIELDS[text]
        if name in seen:
            parts.append(f"(?:{regex})")
        else:
            seen.add(name)
            parts.append(f"(?P<{name}>{regex})")
    return DateFormat(pattern, re.compile("".join(parts), re.IGNORECASE), tokens)


def format_date(value: Union[date, datetime], pattern: str) -> str:
    """Gibt ein Datum im angegebenen Joda-Format mit deutschen Namen aus."""
    out = []
    for is_field, text in _tokenize(pattern):
        if not is_field:
            out.append(text)
        elif text in ("d", "dd"):
            out.append(f"{value.day:0{len(text)}d}")
        elif text in ("M", "MM"):
            out.append(f"{value.month:0{len(text)}d}")
        elif text == "MMM":
            out.append(MONTH_NAMES[value.month - 1][:3])
        elif text == "MMMM":
            out.append(MONTH_NAMES[value.month - 1])
        elif text == "yy":
            out.append(f"{value.year % 100:02d}")
        elif text == "yyyy":
            out.append(f"{value.year:04d}")
        elif text in ("E", "EEE"):
            out.append(WEEKDAY_NAMES[value.weekday()][:2])
        elif text == "EEEE":
            out.append(WEEKDAY_NAMES[value.weekday()])
        elif not isinstance(value, datetime):
            raise ValueError(f"Format '{pattern}' enthält eine Uhrzeit, Wert ist ein Datum")
        elif text in ("H", "HH"):
            out.append(f"{value.hour:0{len(text)}d}")
        elif text in ("m", "mm"):
            out.append(f"{value.minute:0{len(text)}d}")
        elif text == "ss":
            out.append(f"{value.second:02d}")
    return "".join(out)


def _month_from_name(name: str) -> int:
    lowered = name.lower()
    if lowered in _MONTH_ALIASES:
        return _MONTH_ALIASES[lowered]
    for i, month in enumerate(MONTH_NAMES):
        if month.lower().startswith(lowered[:3]):
            return i + 1
    raise ValueError(f"Unbekannter Monat: {name}")


class DateTimeNormalizer:
    """Liest Datums- und Zeitangaben in den gängigen deutschen Schreibweisen.

    Die Formatlisten werden einmalig kompiliert. ``now`` liefert die aktuelle
    Zeit und kann für Tests ersetzt werden.
    """

    def __init__(
        self,
        date_formats: Sequence[str] = DATE_FORMATS,
        time_formats: Sequence[str] = TIME_FORMATS,
        separators: Sequence[str] = DATETIME_SEPARATORS,
        now: Callable[[], datetime] = datetime.now,
    ):
        self._now = now
        self.date_formats = tuple(compile_format(p) for p in dict.fromkeys(date_formats))
        combined = [
            f"{d}{_quote(sep)}{t}"
            for d in dict.fromkeys(date_formats)
            for sep in separators
            for t in time_formats
        ]
        self.datetime_formats = tuple(compile_format(p) for p in dict.fromkeys(combined))
        self._suffix_res = tuple(re.compile(s) for s in STRIPPED_DATE_SUFFIXES)

    # ─── Öffentliche Schnittstelle ───

    def parse_date(self, text: Optional[str]) -> Optional[date]:
        """Datum aus Text, oder None wenn kein Format passt."""
        if text is None:
            return None
        cleaned = self._clean(text)
        for suffix in self._suffix_res:
            cleaned = suffix.sub("", cleaned)
        cleaned = cleaned.strip()
        for fmt in self.date_formats:
            result = self._match(fmt, cleaned)
            if result is not None:
                return result.date()
        logger.debug(f"Kein Datumsformat passt auf '{text}'")
        return None

    def parse_datetime(self, text: Optional[str]) -> Optional[datetime]:
        """Zeitpunkt aus Text, oder None wenn kein Format passt."""
        if text is None:
            return None
        cleaned = self._clean(text)
        for fmt in self.datetime_formats:
            result = self._match(fmt, cleaned)
            if result is not None:
                return result
        logger.debug(f"Kein Zeitformat passt auf '{text}'")
        return None

    # ─── Intern ───

    @staticmethod
    def _clean(text: str) -> str:
        for prefix in STRIPPED_PREFIXES:
            text = text.replace(prefix, "")
        return _WHITESPACE_RE.sub(" ", text).strip()

    def _match(self, fmt: DateFormat, text: str) -> Optional[datetime]:
        match = fmt.regex.fullmatch(text)
        if match is None:
            return None
        groups = match.groupdict()
        try:
            month = (int(groups["month"]) if groups.get("month")
                     else _month_from_name(groups["month_name"]))
            day = int(groups["day"])
            hour = int(groups.get("hour") or 0)
            minute = int(groups.get("minute") or 0)
            second = int(groups.get("second") or 0)
            if fmt.has_year:
                year = (int(groups["year"]) if groups.get("year")
                        else self._expand_two_digit_year(groups["year2"]))
                return datetime(year, month, day, hour, minute, second)
            return self._closest_year(month, day, hour, minute, second, fmt.has_time)
        except (KeyError, ValueError):
            return None

    def _expand_two_digit_year(self, text: str) -> int:
        if len(text) == 4:
            return int(text)
        current = self._now().year
        year = current // 100 * 100 + int(text)
        if year > current + 49:
            year -= 100
        elif year < current - 50:
            year += 100
        return year

    def _closest_year(self, month: int, day: int, hour: int, minute: int,
                      second: int, has_time: bool) -> datetime:
        """Wählt aus Vorjahr, laufendem und nächstem Jahr das zu "jetzt" nächste."""
        now = self._now()
        best: Optional[datetime] = None
        best_distance = None
        for year in (now.year, now.year - 1, now.year + 1):
            try:
                if has_time:
                    candidate = datetime(year, month, day, hour, minute, second)
                else:
                    candidate = datetime(year, month, day, now.hour, now.minute, now.second)
            except ValueError:
                continue
            distance = abs(candidate - now)
            if best_distance is None or distance < best_distance:
                best, best_distance = candidate, distance
        if best is None:
            raise ValueError(f"Ungültiges Datum: {day}.{month}.")
        if best.year != now.year:
            logger.debug(f"Jahr für {day}.{month}. auf {best.year} gesetzt")
        if not has_time:
            best = best.replace(hour=0, minute=0, second=0)
        return best


def _quote(literal: str) -> str:
    """Setzt Buchstaben eines Trenners in Anführungszeichen (" um ")."""
    return re.sub(r"([A-Za-z]+)", r"'\1'", literal)
