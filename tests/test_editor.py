"""Tests for single-cell editing."""

from __future__ import annotations

import pytest

from classtable.data.generator import GeneratorConfig, LocalScheduleGenerator, generate_timetable
from classtable.data.models import TimetableSettings, Weekday
from classtable.editor import PeriodForm, clear_period, open_period, save_form, save_period
from classtable.errors import ValidationError


@pytest.fixture
def timetable():
    return generate_timetable(
        "c1",
        TimetableSettings(periods_per_day=6),
        generator=LocalScheduleGenerator(GeneratorConfig(tea_index=2, lunch_index=5)),
    )


def changed_cells(before, after):
    """(day, index) positions whose period differs."""
    return [
        (day, index)
        for day in Weekday
        for index in range(before.slot_count)
        if before.period(day, index) != after.period(day, index)
    ]


class TestPeriodForm:
    """Tests for PeriodForm normalisation."""

    def test_blank_references(self):
        form = PeriodForm(subject="", teacher="", room=None)
        assert form.subject is None
        assert form.teacher is None
        assert form.room == ""

    def test_unknown_field_rejected(self):
        with pytest.raises(ValueError):
            PeriodForm(subject="math", colour="red")


class TestOpenPeriod:
    """Tests for open_period."""

    def test_open_empty(self, timetable):
        assert open_period(timetable, "monday", 0) == PeriodForm()

    def test_open_assigned(self, timetable):
        tt = save_period(timetable, "monday", 0, "math", "t1", "101")
        form = open_period(tt, Weekday.MONDAY, 0)
        assert form == PeriodForm(subject="math", teacher="t1", room="101")

    def test_open_break_rejected(self, timetable):
        with pytest.raises(ValidationError, match="tea break"):
            open_period(timetable, "monday", 2)


class TestSavePeriod:
    """Tests for save_period."""

    def test_only_target_cell_changes(self, timetable):
        updated = save_period(timetable, "wednesday", 3, subject="math", teacher="t1", room="101")
        assert changed_cells(timetable, updated) == [(Weekday.WEDNESDAY, 3)]
        period = updated.period("wednesday", 3)
        assert (period.subject, period.teacher, period.room) == ("math", "t1", "101")

    def test_times_preserved(self, timetable):
        updated = save_period(timetable, "monday", 4, subject="math")
        assert updated.period("monday", 4).start_time == timetable.period("monday", 4).start_time
        assert updated.period("monday", 4).end_time == timetable.period("monday", 4).end_time

    def test_input_not_modified(self, timetable):
        before = timetable.to_wire()
        save_period(timetable, "monday", 0, subject="math")
        assert timetable.to_wire() == before

    def test_blank_subject_is_none(self, timetable):
        updated = save_period(timetable, "monday", 0, subject="", teacher="t1")
        assert updated.period("monday", 0).subject is None
        assert updated.period("monday", 0).teacher == "t1"

    def test_overwrite(self, timetable):
        first = save_period(timetable, "monday", 0, subject="math", teacher="t1", room="101")
        second = save_period(first, "monday", 0, subject="english")
        period = second.period("monday", 0)
        assert period.subject == "english"
        assert period.teacher is None
        assert period.room == ""

    def test_save_form(self, timetable):
        updated = save_form(timetable, 1, 0, PeriodForm(subject="math", room="7"))
        assert updated.period(Weekday.TUESDAY, 0).room == "7"

    @pytest.mark.parametrize("index", [2, 5])
    def test_break_rejected(self, timetable, index):
        with pytest.raises(ValidationError, match="move the break column"):
            save_period(timetable, "monday", index, subject="math")

    @pytest.mark.parametrize("day,index", [("monday", -1), ("monday", 6), ("sunday", 0), (6, 0)])
    def test_out_of_range(self, timetable, day, index):
        with pytest.raises(ValidationError):
            save_period(timetable, day, index, subject="math")


class TestClearPeriod:
    """Tests for clear_period."""

    def test_clear(self, timetable):
        assigned = save_period(timetable, "friday", 1, "math", "t1", "101")
        cleared = clear_period(assigned, "friday", 1)
        period = cleared.period("friday", 1)
        assert period.is_empty
        assert not period.is_break
        assert period.start_time == "08:45"
        assert cleared == timetable

    def test_clear_empty_is_harmless(self, timetable):
        assert clear_period(timetable, "monday", 0) == timetable

    def test_clear_break_rejected(self, timetable):
        with pytest.raises(ValidationError):
            clear_period(timetable, "monday", 5)
