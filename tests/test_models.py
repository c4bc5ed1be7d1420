"""Tests for timetable data models."""

from __future__ import annotations

import copy

import pytest

from classtable.data.models import (
    BreakType,
    DaySchedule,
    Period,
    SchoolClass,
    Teacher,
    Timetable,
    TimetableSettings,
    Weekday,
    format_time_12h,
    minutes_to_time,
    time_to_minutes,
)
from classtable.errors import ValidationError


DAY_LABELS = ["monday", "tuesday", "wednesday", "thursday", "friday", "saturday"]

PERIODS = [
    {"startTime": "08:00", "endTime": "08:45", "isBreak": False, "subject": None, "teacher": None, "room": ""},
    {"startTime": "08:45", "endTime": "09:30", "isBreak": False},
    {"startTime": "09:30", "endTime": "09:45", "isBreak": True, "breakType": "tea"},
    {"startTime": "09:45", "endTime": "10:30", "isBreak": False},
]


@pytest.fixture
def wire_doc() -> dict:
    """A valid timetable document as the API returns it."""
    return {
        "_id": "tt1",
        "class": "c1",
        "section": "s1",
        "academicYear": "2025-2026",
        "periodsPerDay": 4,
        "periodDuration": 45,
        "dayStartTime": "08:00",
        "schedule": [{"day": day, "periods": copy.deepcopy(PERIODS)} for day in DAY_LABELS],
    }


class TestTimeHelpers:
    """Tests for time conversion helpers."""

    def test_minutes_to_time(self):
        assert minutes_to_time(0) == "00:00"
        assert minutes_to_time(480) == "08:00"
        assert minutes_to_time(765) == "12:45"

    def test_time_to_minutes(self):
        assert time_to_minutes("00:00") == 0
        assert time_to_minutes("08:00") == 480
        assert time_to_minutes("12:45") == 765

    def test_format_time_12h(self):
        assert format_time_12h("08:05") == "8:05 AM"
        assert format_time_12h("00:15") == "12:15 AM"
        assert format_time_12h("12:00") == "12:00 PM"
        assert format_time_12h("13:30") == "1:30 PM"
        assert format_time_12h("") == ""
        assert format_time_12h(None) == ""


class TestWeekday:
    """Tests for Weekday parsing."""

    def test_six_days(self):
        assert [d.label for d in Weekday] == DAY_LABELS

    @pytest.mark.parametrize("value,expected", [
        ("monday", Weekday.MONDAY),
        ("Monday", Weekday.MONDAY),
        ("sat", Weekday.SATURDAY),
        (2, Weekday.WEDNESDAY),
        ("4", Weekday.FRIDAY),
        (Weekday.THURSDAY, Weekday.THURSDAY),
    ])
    def test_parse(self, value, expected):
        assert Weekday.parse(value) is expected

    @pytest.mark.parametrize("value", ["sunday", 6, -1, None, True])
    def test_parse_rejects(self, value):
        with pytest.raises(ValidationError):
            Weekday.parse(value)

    def test_short_name(self):
        assert Weekday.TUESDAY.short_name == "Tue"


class TestPeriod:
    """Tests for Period model."""

    def test_teaching_period_defaults(self):
        period = Period.slot("08:00", "08:45")
        assert period.is_break is False
        assert period.break_type is None
        assert period.subject is None
        assert period.teacher is None
        assert period.room == ""
        assert period.is_empty

    def test_break_period(self):
        period = Period.break_slot("09:30", "09:45", BreakType.LUNCH)
        assert period.is_break
        assert period.break_type == BreakType.LUNCH
        assert not period.is_empty

    def test_invalid_time_range(self):
        with pytest.raises(ValueError, match="must be before"):
            Period.slot("09:00", "08:00")

    def test_equal_start_end(self):
        with pytest.raises(ValueError):
            Period.slot("09:00", "09:00")

    def test_malformed_time(self):
        with pytest.raises(ValueError):
            Period.slot("8:00", "08:45")

    def test_break_requires_type(self):
        with pytest.raises(ValueError, match="break_type"):
            Period(start_time="09:30", end_time="09:45", is_break=True)

    def test_break_rejects_content(self):
        with pytest.raises(ValueError):
            Period(start_time="09:30", end_time="09:45", is_break=True, break_type="tea", subject="math")

    def test_break_type_only_on_breaks(self):
        with pytest.raises(ValueError):
            Period(start_time="09:30", end_time="09:45", break_type="tea")

    def test_populated_references_reduced_to_ids(self):
        period = Period.model_validate({
            "startTime": "08:00",
            "endTime": "08:45",
            "isBreak": False,
            "subject": {"_id": "math", "name": "Mathematics"},
            "teacher": {"_id": "t1", "profile": {"firstName": "Ada"}},
            "room": None,
            "_id": "subdoc",
        })
        assert period.subject == "math"
        assert period.teacher == "t1"
        assert period.room == ""

    def test_blank_reference_is_none(self):
        period = Period(start_time="08:00", end_time="08:45", subject="", teacher="")
        assert period.subject is None
        assert period.teacher is None

    def test_frozen(self):
        period = Period.slot("08:00", "08:45")
        with pytest.raises(Exception):
            period.subject = "math"

    def test_to_wire(self):
        teaching = Period(start_time="08:00", end_time="08:45", subject="math", teacher="t1", room="101")
        assert teaching.to_wire() == {
            "startTime": "08:00",
            "endTime": "08:45",
            "isBreak": False,
            "subject": "math",
            "teacher": "t1",
            "room": "101",
        }
        brk = Period.break_slot("09:30", "09:45", BreakType.TEA)
        assert brk.to_wire() == {"startTime": "09:30", "endTime": "09:45", "isBreak": True, "breakType": "tea"}


class TestDaySchedule:
    """Tests for DaySchedule."""

    def test_accepts_list(self):
        day = DaySchedule.model_validate(PERIODS)
        assert len(day) == 4
        assert day.break_indices == frozenset({2})

    def test_replace_returns_copy(self):
        day = DaySchedule.model_validate(PERIODS)
        updated = day.replace(0, Period(start_time="08:00", end_time="08:45", subject="math"))
        assert updated.periods[0].subject == "math"
        assert day.periods[0].subject is None


class TestTimetableWire:
    """Tests for decoding and encoding timetable documents."""

    def test_from_wire(self, wire_doc):
        tt = Timetable.from_wire(wire_doc)
        assert tt.id == "tt1"
        assert tt.class_id == "c1"
        assert tt.section == "s1"
        assert tt.periods_per_day == 4
        assert tt.slot_count == 4
        assert len(tt.days) == 6
        assert tt.break_indices == [2]

    def test_schedule_order_follows_weekday(self, wire_doc):
        wire_doc["schedule"].reverse()
        wire_doc["schedule"][0]["periods"][0]["subject"] = "sat-subject"
        tt = Timetable.from_wire(wire_doc)
        assert tt.period(Weekday.SATURDAY, 0).subject == "sat-subject"
        assert tt.period(Weekday.MONDAY, 0).subject is None

    def test_extra_fields_ignored(self, wire_doc):
        wire_doc["__v"] = 3
        wire_doc["institution"] = "inst1"
        wire_doc["class"] = {"_id": "c1", "name": "Grade 10"}
        tt = Timetable.from_wire(wire_doc)
        assert tt.class_id == "c1"

    def test_missing_day(self, wire_doc):
        wire_doc["schedule"].pop()
        with pytest.raises(ValidationError, match="saturday"):
            Timetable.from_wire(wire_doc)

    def test_duplicate_day(self, wire_doc):
        wire_doc["schedule"][5]["day"] = "monday"
        with pytest.raises(ValidationError, match="duplicate"):
            Timetable.from_wire(wire_doc)

    def test_unknown_day(self, wire_doc):
        wire_doc["schedule"][5]["day"] = "sunday"
        with pytest.raises(ValidationError):
            Timetable.from_wire(wire_doc)

    def test_unequal_lengths(self, wire_doc):
        wire_doc["schedule"][3]["periods"].pop()
        with pytest.raises(ValidationError, match="thursday has 3 periods"):
            Timetable.from_wire(wire_doc)

    def test_days_without_periods(self, wire_doc):
        for entry in wire_doc["schedule"]:
            entry["periods"] = []
        with pytest.raises(ValidationError, match="no periods"):
            Timetable.from_wire(wire_doc)

    def test_times_must_match_across_days(self, wire_doc):
        wire_doc["schedule"][1]["periods"][0]["endTime"] = "08:40"
        with pytest.raises(ValidationError, match="tuesday period 0"):
            Timetable.from_wire(wire_doc)

    def test_breaks_must_match_across_days(self, wire_doc):
        wire_doc["schedule"][4]["periods"][2] = {"startTime": "09:30", "endTime": "09:45", "isBreak": False}
        with pytest.raises(ValidationError, match="not shared by friday"):
            Timetable.from_wire(wire_doc)

    def test_to_wire_round_trip(self, wire_doc):
        tt = Timetable.from_wire(wire_doc)
        data = tt.to_wire()
        assert [d["day"] for d in data["schedule"]] == DAY_LABELS
        assert data["_id"] == "tt1"
        assert data["class"] == "c1"
        assert data["periodsPerDay"] == 4
        assert Timetable.from_wire(data) == tt

    def test_to_wire_without_id(self, wire_doc):
        del wire_doc["_id"]
        del wire_doc["section"]
        data = Timetable.from_wire(wire_doc).to_wire()
        assert "_id" not in data
        assert "section" not in data


class TestTimetableLookups:
    """Tests for Timetable lookup methods."""

    def test_period(self, wire_doc):
        tt = Timetable.from_wire(wire_doc)
        assert tt.period("monday", 2).is_break
        assert tt.period(Weekday.FRIDAY, 3).start_time == "09:45"

    @pytest.mark.parametrize("index", [-1, 4, 99, True, "1"])
    def test_period_out_of_range(self, wire_doc, index):
        tt = Timetable.from_wire(wire_doc)
        with pytest.raises(ValidationError, match="out of range"):
            tt.period("monday", index)

    def test_with_days_revalidates(self, wire_doc):
        tt = Timetable.from_wire(wire_doc)
        days = list(tt.days)
        days[0] = DaySchedule(periods=days[0].periods[:3])
        with pytest.raises(ValueError):
            tt.with_days(days)

    def test_summary(self, wire_doc):
        wire_doc["schedule"][0]["periods"][0]["subject"] = "math"
        summary = Timetable.from_wire(wire_doc).summary()
        assert summary["breaks"] == {2: "tea"}
        assert summary["assigned_periods"] == 1
        assert summary["teaching_periods"] == 18


class TestReferenceData:
    """Tests for read-only reference models."""

    def test_teacher_profile_flattened(self):
        teacher = Teacher.model_validate({"_id": "t1", "profile": {"firstName": "Ada", "lastName": "Lovelace"}})
        assert teacher.full_name == "Ada Lovelace"

    def test_teacher_without_names(self):
        teacher = Teacher(id="t1")
        assert teacher.full_name == ""
        assert str(teacher) == "t1"

    def test_school_class_sections(self):
        cls = SchoolClass.model_validate({
            "_id": "c1",
            "name": "Grade 10",
            "sections": [{"_id": "s1", "name": "A"}],
        })
        assert cls.get_section("s1").name == "A"
        assert cls.get_section("s2") is None


class TestTimetableSettings:
    """Tests for creation settings."""

    def test_defaults(self):
        settings = TimetableSettings()
        assert settings.periods_per_day == 8
        assert settings.day_start_time == "08:00"
        assert settings.period_duration == 45

    def test_wire(self):
        assert TimetableSettings(periods_per_day=6).to_wire() == {
            "periodsPerDay": 6,
            "dayStartTime": "08:00",
            "periodDuration": 45,
        }

    @pytest.mark.parametrize("kwargs", [
        {"periods_per_day": 3},
        {"periods_per_day": 13},
        {"period_duration": 29},
        {"period_duration": 61},
        {"day_start_time": "25:00"},
    ])
    def test_bounds(self, kwargs):
        with pytest.raises(ValueError):
            TimetableSettings(**kwargs)
