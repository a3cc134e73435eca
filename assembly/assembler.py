"""Erstellung des Vertretungsplans aus den Rohdaten der Format-Adapter.

Jede Seite (Datei, Abruf, Klassenseite ...) wird unabhängig zu Tagen verarbeitet.
Erst danach werden die Ergebnisse in einem Durchgang zu einem gemeinsamen Plan
übernommen; Tage gleichen Datums werden dabei zusammengeführt. Reihenfolge und
doppelte Seiten ändern das Ergebnis nicht.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, Iterable, Optional, Union

from assembly.cells import has_strike, is_empty, plain_text, split_struck
from assembly.errors import CredentialInvalidError
from config.schema import SchoolScheduleConfig
from models.additional_info import AdditionalInfo
from models.raw import ColumnType, RawDay, RawPage, RawRow
from models.schedule import ScheduleType, SubstitutionSchedule
from models.schedule_day import SubstitutionScheduleDay, merge_substitutions
from models.substitution import (
    CANCELLATION_TYPE,
    DEFAULT_TYPE,
    Substitution,
    SubstitutionBuilder,
)
from normalizer.classes import ClassSetResolver
from normalizer.classifier import TypeClassifier
from normalizer.colors import ColorProvider
from normalizer.dates import DateTimeNormalizer
from normalizer.description import DescriptionParser

logger = logging.getLogger(__name__)

PageSource = Union[RawPage, Callable[[], RawPage]]

_DATE_RANGE_SEPARATOR = " - "


@dataclass
class PageResult:
    """Ergebnis einer einzelnen Seite, noch nicht in den Plan übernommen."""

    days: list[SubstitutionScheduleDay] = field(default_factory=list)
    infos: list[AdditionalInfo] = field(default_factory=list)
    last_change: Optional[datetime] = None
    last_change_string: Optional[str] = None


@dataclass
class _DayBucket:
    """Sammelt die Beiträge aller Seiten zu einem Datum."""

    day: SubstitutionScheduleDay
    substitutions: list[Substitution] = field(default_factory=list)
    messages: set[tuple[str, ...]] = field(default_factory=set)


def _info_sort_key(info: AdditionalInfo) -> tuple:
    return (info.title or "", info.text, info.has_information, info.from_schedule)


def _equals_or_null(a, b) -> bool:
    return not a or not b or a == b


def auto_detect_type(builder: SubstitutionBuilder, struck: bool) -> str:
    """Leitet Entfall oder Vertretung aus der Zeile ab.

    Entfall, wenn die Zeile Durchstreichungen enthält und kein abweichendes
    neues Fach bzw. keine abweichende neue Lehrkraft genannt ist, oder wenn
    nur das ursprüngliche Fach übrig bleibt.
    """
    if (struck
            and _equals_or_null(builder.subject, builder.previous_subject)
            and _equals_or_null(builder.teachers, builder.previous_teachers)):
        return CANCELLATION_TYPE
    if (builder.subject is None and builder.room is None and not builder.teachers
            and builder.previous_subject is not None):
        return CANCELLATION_TYPE
    return DEFAULT_TYPE


class ScheduleAssembler:
    """Baut aus RawPages einen SubstitutionSchedule.

    Die Komponenten (Datumsparser, Klassenauflösung, Typerkennung, Farben,
    Info-Auswertung) können für Tests oder andere Schulen ersetzt werden.
    """

    def __init__(
        self,
        config: SchoolScheduleConfig,
        dates: Optional[DateTimeNormalizer] = None,
        resolver: Optional[ClassSetResolver] = None,
        classifier: Optional[TypeClassifier] = None,
        colors: Optional[ColorProvider] = None,
        descriptions: Optional[DescriptionParser] = None,
    ):
        self.config = config
        self.dates = dates or DateTimeNormalizer()
        self.resolver = resolver or ClassSetResolver.from_config(config)
        self.classifier = classifier or TypeClassifier()
        self.colors = colors or ColorProvider(config.colors)
        self.descriptions = descriptions or DescriptionParser(
            split_teachers=config.split_teachers
        )
        self.last_errors: list[Exception] = []
        self._handlers: dict[ColumnType, Callable[[SubstitutionBuilder, str, RawRow], None]] = {
            ColumnType.LESSON: self._handle_lesson,
            ColumnType.SUBJECT: self._handle_subject,
            ColumnType.PREVIOUS_SUBJECT: self._handle_previous_subject,
            ColumnType.COURSE: self._handle_course,
            ColumnType.TYPE: self._handle_type,
            ColumnType.TYPE_ENTFALL: self._handle_type_entfall,
            ColumnType.ROOM: self._handle_room,
            ColumnType.PREVIOUS_ROOM: self._handle_previous_room,
            ColumnType.DESC: self._handle_desc,
            ColumnType.DESC_TYPE: self._handle_desc_type,
            ColumnType.INFO: self._handle_info,
            ColumnType.TEACHER: self._handle_teacher,
            ColumnType.PREVIOUS_TEACHER: self._handle_previous_teacher,
            ColumnType.SUBSTITUTION_FROM: self._handle_substitution_from,
            ColumnType.TEACHER_TO: self._handle_teacher_to,
            ColumnType.CLASS: self._handle_class,
            # werden beim Zuordnen der Zeile zu einem Tag ausgewertet
            ColumnType.DATE: self._skip,
            ColumnType.LAST_CHANGE: self._skip,
            ColumnType.IGNORE: self._skip,
        }
        missing = set(ColumnType) - set(self._handlers)
        if missing:
            raise RuntimeError(f"Spaltentypen ohne Verarbeitung: {sorted(missing)}")

    @property
    def is_teacher_schedule(self) -> bool:
        return self.config.schedule_type == ScheduleType.TEACHER

    # ─── Plan ───

    def new_schedule(self) -> SubstitutionSchedule:
        return SubstitutionSchedule.from_config(self.config, classes=self.resolver.roster)

    def assemble(self, pages: Iterable[PageSource]) -> SubstitutionSchedule:
        """Verarbeitet alle Seiten und führt sie zu einem Plan zusammen.

        Scheitert eine Seite, wird der Fehler protokolliert und in
        ``last_errors`` festgehalten. Nur wenn alle Seiten scheitern, wird der
        erste Fehler weitergereicht. Abgelehnte Zugangsdaten brechen sofort ab.
        """
        results: list[PageResult] = []
        errors: list[Exception] = []
        for number, page in enumerate(pages, start=1):
            try:
                raw = page() if callable(page) else page
                results.append(self.build_page(raw))
            except CredentialInvalidError:
                raise
            except Exception as e:
                logger.warning(f"Seite {number} konnte nicht verarbeitet werden: {e}")
                errors.append(e)
        self.last_errors = errors
        if errors and not results:
            raise errors[0]

        schedule = self.merge_pages(results)
        logger.info(schedule.summary())
        return schedule

    def merge_pages(self, results: Iterable[PageResult]) -> SubstitutionSchedule:
        """Reduziert die Seitenergebnisse in einem Durchgang zu einem Plan.

        Die Vertretungen eines Datums werden über alle Seiten gesammelt und erst
        dann zusammengeführt. Nachrichten und Zusatzinfos werden seitenweise in
        fester Reihenfolge übernommen. Reihenfolge und Wiederholung der Seiten
        ändern das Ergebnis so nicht.
        """
        schedule = self.new_schedule()
        buckets: list[_DayBucket] = []
        infos: set[tuple[AdditionalInfo, ...]] = set()
        for result in results:
            schedule.update_last_change(result.last_change, result.last_change_string)
            infos.add(tuple(result.infos))
            for day in result.days:
                bucket = next((b for b in buckets if b.day.equals_by_date(day)), None)
                if bucket is None:
                    bucket = _DayBucket(SubstitutionScheduleDay(
                        date=day.date, date_string=day.date_string,
                    ))
                    buckets.append(bucket)
                bucket.day.update_last_change(day.last_change, day.last_change_string)
                bucket.substitutions.extend(day.substitutions)
                bucket.messages.add(tuple(day.messages))

        for bucket in buckets:
            day = bucket.day
            day.substitutions = merge_substitutions(
                bucket.substitutions, self.config.merge_with_different_type, self.colors
            )
            for messages in sorted(bucket.messages):
                for message in messages:
                    day.add_message(message)
            schedule.add_day(day)
        for page_infos in sorted(infos, key=lambda i: [_info_sort_key(x) for x in i]):
            for info in page_infos:
                schedule.add_additional_info(info)
        return schedule

    # ─── Seite ───

    def build_page(self, page: RawPage) -> PageResult:
        """Verarbeitet eine Seite zu Tagen, ohne einen Plan zu verändern.

        Die Vertretungen der Tage bleiben Zeile für Zeile stehen; zusammengeführt
        wird erst in ``merge_pages``.
        """
        result = PageResult()
        if page.last_change_text:
            result.last_change = self.dates.parse_datetime(page.last_change_text)
            result.last_change_string = plain_text(page.last_change_text)

        current: Optional[SubstitutionScheduleDay] = None
        for raw_day in page.days:
            day = self._new_day(raw_day)
            if current is None or not current.equals_by_date(day):
                # Datumswechsel: neuer Tag, bzw. ein früherer Tag gleichen Datums
                current = self._find_or_add(result.days, day)
            else:
                current.update_last_change(day.last_change, day.last_change_string)
            self._fill_day(current, raw_day, result.days)

        # Tage ohne Datum und ohne Inhalt entstehen, wenn alle Zeilen eine eigene
        # Datumsspalte haben
        result.days = [
            d for d in result.days
            if d.date is not None or d.date_string or d.substitutions or d.messages
        ]

        for message in page.general_messages:
            if not is_empty(message):
                result.infos.append(AdditionalInfo(
                    title=self.config.info_title,
                    text=plain_text(message),
                    from_schedule=True,
                ))
        for info in page.infos:
            result.infos.append(info.model_copy(update={"from_schedule": True}))
        return result

    def _new_day(self, raw_day: RawDay,
                 date_text: Optional[str] = None) -> SubstitutionScheduleDay:
        text = date_text if date_text is not None else raw_day.date_text
        date = raw_day.date if date_text is None else None
        if date is None and text:
            date = self.dates.parse_date(text)
        day = SubstitutionScheduleDay(
            date=date,
            date_string=None if date is not None else (plain_text(text) or None),
        )
        if date_text is None and raw_day.last_change_text:
            self._update_day_last_change(day, raw_day.last_change_text)
        return day

    def _update_day_last_change(self, day: SubstitutionScheduleDay, text: str) -> None:
        day.update_last_change(self.dates.parse_datetime(text), plain_text(text))

    @staticmethod
    def _find_or_add(days: list[SubstitutionScheduleDay],
                     day: SubstitutionScheduleDay) -> SubstitutionScheduleDay:
        for existing in days:
            if existing.equals_by_date(day):
                existing.update_last_change(day.last_change, day.last_change_string)
                return existing
        days.append(day)
        return day

    def _fill_day(self, day: SubstitutionScheduleDay, raw_day: RawDay,
                  page_days: list[SubstitutionScheduleDay]) -> None:
        for message in raw_day.messages:
            if not is_empty(message):
                day.add_message(plain_text(message))

        for row in raw_day.rows:
            target = day
            row_date = row.value(ColumnType.DATE)
            if row_date is not None and not is_empty(row_date):
                date_text = plain_text(row_date).split(_DATE_RANGE_SEPARATOR)[0]
                target = self._find_or_add(page_days, self._new_day(raw_day, date_text))
            row_stand = row.value(ColumnType.LAST_CHANGE)
            if row_stand is not None and not is_empty(row_stand):
                self._update_day_last_change(target, row_stand)

            substitution = self.build_substitution(row)
            if substitution is not None:
                target.substitutions.append(substitution)

    # ─── Zeile ───

    def build_substitution(self, row: RawRow) -> Optional[Substitution]:
        """Eine Zeile → Vertretung. Zeilen ohne Stunde ergeben None."""
        builder = SubstitutionBuilder()
        for cell in row.cells:
            if cell.column != ColumnType.TYPE_ENTFALL and is_empty(cell.text):
                continue
            self._handlers[cell.column](builder, cell.text, row)

        if not builder.lesson:
            logger.debug(f"Zeile ohne Stunde übersprungen: {[c.text for c in row.cells]}")
            return None
        if builder.type is None:
            builder.type = self.detect_type(builder, row)
        return builder.build(self.colors)

    def detect_type(self, builder: SubstitutionBuilder, row: RawRow) -> str:
        if not self.config.type_auto_detection:
            return DEFAULT_TYPE
        struck = row.struck or any(has_strike(cell.text) for cell in row.cells)
        return auto_detect_type(builder, struck)

    # ─── Spalten ───

    def _skip(self, builder: SubstitutionBuilder, text: str, row: RawRow) -> None:
        pass

    def _handle_lesson(self, builder, text, row):
        builder.lesson = plain_text(text)

    def _handle_subject(self, builder, text, row):
        current, previous = split_struck(text)
        builder.subject = current
        if previous:
            builder.previous_subject = previous

    def _handle_previous_subject(self, builder, text, row):
        builder.previous_subject = plain_text(text)

    def _handle_course(self, builder, text, row):
        # "07/2/ RE" → "RE"
        _, builder.course = self.descriptions.split_course(plain_text(text))

    def _handle_type(self, builder, text, row):
        builder.type = plain_text(text)

    def _handle_type_entfall(self, builder, text, row):
        if plain_text(text).lower() == "x":
            builder.type = CANCELLATION_TYPE
        elif not row.has_column(ColumnType.TYPE):
            builder.type = DEFAULT_TYPE

    def _handle_room(self, builder, text, row):
        current, previous = split_struck(text)
        builder.room = current
        if previous:
            builder.previous_room = previous

    def _handle_previous_room(self, builder, text, row):
        builder.previous_room = plain_text(text)

    def _handle_desc(self, builder, text, row):
        builder.desc = plain_text(text)

    def _handle_desc_type(self, builder, text, row):
        builder.desc = plain_text(text)
        type_ = self.classifier.classify(builder.desc)
        if type_ is not None:
            builder.type = type_

    def _handle_info(self, builder, text, row):
        value = plain_text(text)
        if self.config.parse_descriptions:
            self.descriptions.parse_description(builder, value, self.is_teacher_schedule)
        else:
            builder.desc = value

    def _handle_teacher(self, builder, text, row):
        current, previous = split_struck(text)
        builder.teachers = self.descriptions.split_teachers(current)
        if previous:
            builder.previous_teachers = self.descriptions.split_teachers(previous)

    def _handle_previous_teacher(self, builder, text, row):
        builder.previous_teachers = self.descriptions.split_teachers(plain_text(text))

    def _handle_substitution_from(self, builder, text, row):
        builder.substitution_from = plain_text(text)

    def _handle_teacher_to(self, builder, text, row):
        builder.teacher_to = plain_text(text)

    def _handle_class(self, builder, text, row):
        builder.classes = self.resolver.resolve(plain_text(text))
