"""Tests für die Datenmodelle (Vertretung, Tag, Plan)."""

from datetime import date, datetime

import pytest
from pydantic import ValidationError

from models.additional_info import AdditionalInfo
from models.raw import ColumnType, RawRow, ScheduleAdapter
from models.schedule import ScheduleType, SubstitutionSchedule
from models.schedule_day import SubstitutionScheduleDay, merge_substitutions
from models.substitution import Substitution, SubstitutionBuilder
from assembly.errors import UnparseableStructureError
from normalizer.colors import ColorProvider


def _sub(**kwargs) -> Substitution:
    params = dict(lesson="3", type="Vertretung", classes={"5a"}, subject="Mathe")
    params.update(kwargs)
    return Substitution(**params)


def _day(d: date, *subs: Substitution, messages=()) -> SubstitutionScheduleDay:
    day = SubstitutionScheduleDay(date=d)
    day.add_substitutions(subs)
    for m in messages:
        day.add_message(m)
    return day


# ─── VERTRETUNG ───────────────────────────────────────────────────────────────

class TestSubstitution:
    def test_immutable(self):
        s = _sub()
        with pytest.raises(ValidationError):
            s.lesson = "4"

    def test_hashable_and_equal(self):
        assert _sub() == _sub()
        assert len({_sub(), _sub()}) == 1

    def test_is_equal_excluding(self):
        a = _sub(classes={"5a"})
        b = _sub(classes={"5b"})
        assert a != b
        assert a.is_equal_excluding(b, "classes")
        assert not a.is_equal_excluding(_sub(lesson="4"), "classes")

    def test_is_equal_excluding_type_ignores_color(self):
        colors = ColorProvider()
        a = _sub().with_type("Entfall", colors)
        b = _sub().with_type("Vertretung", colors)
        assert a.is_equal_excluding(b, "type")

    def test_with_type_updates_color(self):
        s = _sub().with_type("Entfall", ColorProvider())
        assert s.type == "Entfall"
        assert s.color == "#F44336"

    def test_teacher_strings(self):
        s = _sub(teachers={"MÜL", "MEI"}, previous_teachers={"SCH"})
        assert s.teacher == "MEI, MÜL"
        assert s.previous_teacher == "SCH"
        assert _sub().teacher is None


class TestSubstitutionText:
    def test_subject_and_teacher_change(self):
        s = _sub(subject="Mathe", previous_subject="Deutsch", teachers={"MÜL"},
                 previous_teachers={"SCH"}, room="204")
        assert s.text == "Mathe (MÜL) statt Deutsch (SCH) in 204"

    def test_teacher_change_only(self):
        s = _sub(teachers={"MEI"}, previous_teachers={"MÜL"})
        assert s.text == "Mathe (MEI statt MÜL)"

    def test_room_change_with_desc(self):
        s = _sub(room="204", previous_room="105", desc="Aufgaben")
        assert s.text == "Mathe in 204 statt 105 - Aufgaben"

    def test_desc_only(self):
        s = _sub(subject=None, desc="Wandertag")
        assert s.text == "Wandertag"

    def test_placeholder_ignored(self):
        s = _sub(room="---", desc="   ")
        assert s.text == "Mathe"

    def test_teacher_text_shows_classes(self):
        s = _sub(classes={"5a", "5b"}, teachers={"MÜL"}, room="204")
        assert s.teacher_text == "Mathe (5ab) in 204"


class TestSubstitutionBuilder:
    def test_defaults(self):
        s = SubstitutionBuilder("2").build(ColorProvider())
        assert s.type == "Vertretung"
        assert s.color == "#2196F3"
        assert s.classes == frozenset()

    def test_course_as_subject(self):
        b = SubstitutionBuilder("2")
        b.course = "M-LK1"
        assert b.build(ColorProvider()).subject == "M-LK1"
        b.subject = "Mathe"
        assert b.build(ColorProvider()).subject == "Mathe"

    def test_color_follows_override(self):
        b = SubstitutionBuilder("2")
        b.type = "Entfall"
        assert b.build(ColorProvider({"Entfall": "gray"})).color == "#9E9E9E"

    def test_without_lesson(self):
        with pytest.raises(ValueError):
            SubstitutionBuilder().build(ColorProvider())

    def test_set_teacher_strips(self):
        b = SubstitutionBuilder("1")
        b.set_teacher("  MÜL ")
        b.set_previous_teacher("   ")
        assert b.teachers == {"MÜL"}
        assert b.previous_teachers == set()


# ─── TAG ──────────────────────────────────────────────────────────────────────

class TestScheduleDay:
    def test_date_string(self):
        day = SubstitutionScheduleDay(date=date(2024, 3, 11))
        assert day.date_string == "Montag, 11.03.2024"

    def test_merge_classes(self):
        """Gleiche Vertretung für zwei Klassen → ein Eintrag mit beiden Klassen."""
        day = _day(date(2024, 3, 11), _sub(classes={"5a"}), _sub(classes={"5b"}))
        assert len(day.substitutions) == 1
        assert day.substitutions[0].classes == {"5a", "5b"}

    def test_merge_teachers(self):
        day = _day(date(2024, 3, 11), _sub(teachers={"MÜL"}), _sub(teachers={"MEI"}))
        assert len(day.substitutions) == 1
        assert day.substitutions[0].teachers == {"MÜL", "MEI"}

    def test_merge_previous_teachers(self):
        day = _day(date(2024, 3, 11),
                   _sub(previous_teachers={"A"}), _sub(previous_teachers={"B"}))
        assert day.substitutions[0].previous_teachers == {"A", "B"}

    def test_different_lessons_kept(self):
        day = _day(date(2024, 3, 11), _sub(lesson="1"), _sub(lesson="2"))
        assert len(day.substitutions) == 2

    def test_merge_substitutions_independent_of_order(self):
        a = _sub(classes={"5a"}, teachers={"MÜL"})
        b = _sub(classes={"5b"}, teachers={"MÜL"})
        c = _sub(classes={"5a"}, teachers={"SCH"})
        merged = merge_substitutions([a, b, c])
        assert merge_substitutions([c, b, a]) == merged
        assert merge_substitutions([b, a, c, a]) == merged
        assert [(s.classes, s.teachers) for s in merged] == [
            ({"5a"}, {"MÜL", "SCH"}),
            ({"5b"}, {"MÜL"}),
        ]

    def test_merge_with_different_type(self):
        """Entfall und Vertretung derselben Stunde → ein Eintrag "Vertretung"."""
        day = _day(date(2024, 3, 11), _sub(type="Entfall", color="#F44336"))
        day.merge(_day(date(2024, 3, 11), _sub()),
                  merge_with_different_type=True, colors=ColorProvider())
        assert [s.type for s in day.substitutions] == ["Vertretung"]
        assert day.substitutions[0].color == "#2196F3"

        day = _day(date(2024, 3, 11), _sub(type="Entfall"))
        day.merge(_day(date(2024, 3, 11), _sub()))
        assert len(day.substitutions) == 2

    def test_messages_unique(self):
        day = _day(date(2024, 3, 11), messages=["Wandertag", "Wandertag"])
        assert day.messages == ["Wandertag"]

    def test_equals_by_date_string(self):
        a = SubstitutionScheduleDay(date_string="heute")
        b = SubstitutionScheduleDay(date_string="heute")
        assert a.equals_by_date(b)
        assert not a.equals_by_date(SubstitutionScheduleDay(date=date(2024, 3, 11)))

    def test_merge_different_date_raises(self):
        with pytest.raises(ValueError):
            _day(date(2024, 3, 11)).merge(_day(date(2024, 3, 12)))

    def test_merge_keeps_latest_change(self):
        a = SubstitutionScheduleDay(date=date(2024, 3, 11),
                                    last_change=datetime(2024, 3, 11, 7, 0))
        b = SubstitutionScheduleDay(date=date(2024, 3, 11),
                                    last_change=datetime(2024, 3, 11, 8, 30))
        a.merge(b)
        assert a.last_change == datetime(2024, 3, 11, 8, 30)
        assert a.last_change_string == "11.03.2024 08:30"
        b.merge(SubstitutionScheduleDay(date=date(2024, 3, 11),
                                        last_change=datetime(2024, 3, 11, 6, 0)))
        assert b.last_change == datetime(2024, 3, 11, 8, 30)

    def test_last_change_string_without_timestamp(self):
        day = SubstitutionScheduleDay(date=date(2024, 3, 11))
        day.update_last_change(None, "gestern")
        assert day.last_change_string == "gestern"
        day.update_last_change(datetime(2024, 3, 11, 7, 0))
        assert day.last_change_string == "11.03.2024 07:00"

    def test_filtered_by_class(self):
        day = _day(date(2024, 3, 11), _sub(classes={"5a"}, lesson="1"),
                   _sub(classes={"6b"}, lesson="2"), messages=["Info"])
        filtered = day.filtered_by_class("5a")
        assert [s.lesson for s in filtered.substitutions] == ["1"]
        assert filtered.messages == ["Info"]
        assert len(day.substitutions) == 2

    def test_filtered_excluded_subject_uses_previous_subject(self):
        day = _day(date(2024, 3, 11),
                   _sub(lesson="1", subject="Mathe", previous_subject="Religion"),
                   _sub(lesson="2", subject="Religion"),
                   _sub(lesson="3", subject="Sport"))
        filtered = day.filtered_by_class("5a", excluded_subjects=["Religion"])
        assert [s.lesson for s in filtered.substitutions] == ["3"]

    def test_filtered_by_teacher(self):
        day = _day(date(2024, 3, 11),
                   _sub(lesson="1", teachers={"MÜL"}),
                   _sub(lesson="2", previous_teachers={"MÜL"}),
                   _sub(lesson="3", teachers={"MEI"}))
        filtered = day.filtered_by_teacher("MÜL")
        assert sorted(s.lesson for s in filtered.substitutions) == ["1", "2"]


# ─── PLAN ─────────────────────────────────────────────────────────────────────

class TestSchedule:
    def test_days_sorted_by_date(self):
        schedule = SubstitutionSchedule()
        schedule.add_day(SubstitutionScheduleDay(date_string="nächste Woche"))
        schedule.add_day(_day(date(2024, 3, 12)))
        schedule.add_day(_day(date(2024, 3, 11)))
        assert [d.date for d in schedule.days] == [date(2024, 3, 11), date(2024, 3, 12), None]

    def test_add_day_merges_same_date(self):
        schedule = SubstitutionSchedule()
        schedule.add_day(_day(date(2024, 3, 11), _sub(lesson="1")))
        schedule.add_day(_day(date(2024, 3, 11), _sub(lesson="2")))
        assert len(schedule.days) == 1
        assert len(schedule.get_day(date(2024, 3, 11)).substitutions) == 2
        assert schedule.get_day(date(2024, 3, 12)) is None

    def test_last_change_is_maximum(self):
        schedule = SubstitutionSchedule()
        schedule.update_last_change(datetime(2024, 3, 11, 8, 0))
        schedule.update_last_change(datetime(2024, 3, 11, 7, 0))
        assert schedule.last_change == datetime(2024, 3, 11, 8, 0)

    def test_additional_info_dedup(self):
        schedule = SubstitutionSchedule()
        info = AdditionalInfo(title="Hinweis", text="Wandertag", from_schedule=True)
        schedule.add_additional_info(info)
        schedule.add_additional_info(info.model_copy())
        assert schedule.additional_infos == [info]
        assert info.has_information

    def test_filtered_by_class(self):
        schedule = SubstitutionSchedule()
        schedule.add_day(_day(date(2024, 3, 11), _sub(classes={"5a"}, lesson="1"),
                              _sub(classes={"6a"}, lesson="2")))
        filtered = schedule.filtered_by_class("6a")
        assert [s.lesson for s in filtered.days[0].substitutions] == ["2"]
        assert len(schedule.days[0].substitutions) == 2

    def test_from_config(self):
        from config.defaults import default_school_config
        config = default_school_config()
        config.teachers = ["MÜL"]
        schedule = SubstitutionSchedule.from_config(config, classes=["5a"])
        assert schedule.type == ScheduleType.STUDENT
        assert schedule.classes == ["5a"]
        assert schedule.teachers == ["MÜL"]

    def test_json_round_trip(self, tmp_path):
        schedule = SubstitutionSchedule(type=ScheduleType.TEACHER, website="https://example.org")
        schedule.update_last_change(datetime(2024, 3, 11, 7, 45))
        schedule.add_day(_day(date(2024, 3, 11), _sub(teachers={"MÜL"}), messages=["Info"]))
        schedule.add_additional_info(AdditionalInfo(text="Wandertag"))
        path = tmp_path / "plan.json"
        schedule.save_json(path)
        loaded = SubstitutionSchedule.load_json(path)
        assert loaded == schedule
        assert loaded.days[0].substitutions[0].classes == frozenset({"5a"})

    def test_load_missing(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            SubstitutionSchedule.load_json(tmp_path / "fehlt.json")

    def test_summary_and_print(self):
        schedule = SubstitutionSchedule()
        schedule.add_day(_day(date(2024, 3, 11), _sub()))
        assert "1 Tage" in schedule.summary()
        schedule.print_rich()


# ─── ROHDATEN ─────────────────────────────────────────────────────────────────

class TestRawModels:
    def test_column_type_parse(self):
        assert ColumnType.parse("previousSubject") == ColumnType.PREVIOUS_SUBJECT
        assert ColumnType.parse("type-entfall") == ColumnType.TYPE_ENTFALL
        with pytest.raises(UnparseableStructureError):
            ColumnType.parse("lehrer")

    def test_raw_row_of(self):
        row = RawRow.of([("lesson", "3"), ("class", "5a")])
        assert row.value(ColumnType.CLASS) == "5a"
        assert row.value(ColumnType.ROOM) is None
        assert row.has_column(ColumnType.LESSON)

    def test_adapters_satisfy_protocol(self):
        from config.defaults import default_school_config
        from data.untis_monitor import UntisMonitorAdapter
        assert isinstance(UntisMonitorAdapter(default_school_config()), ScheduleAdapter)
