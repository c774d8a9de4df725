"""
Tests for reminder -> trigger mapping and time-of-day helpers
"""
from datetime import datetime
from zoneinfo import ZoneInfo

from taskapp.domain.reminder import (
    DailyReminder,
    MonthlyReminder,
    NoReminder,
    OnceReminder,
    WeeklyReminder,
)
from taskapp.domain.trigger import (
    DailyTrigger,
    DateTrigger,
    MonthlyTrigger,
    WeeklyTrigger,
    build_action_trigger,
    is_one_shot,
    iso_to_platform_weekday,
    next_occurrence,
    parse_time,
    parse_time_clamped,
)
from taskapp.utils.clock import to_ms

PARIS = ZoneInfo("Europe/Paris")


class TestParseTime:
    def test_regular(self):
        assert parse_time("08:30") == (8, 30)

    def test_unparseable_components_default_to_zero(self):
        assert parse_time("x:15") == (0, 15)
        assert parse_time("7:y") == (7, 0)
        assert parse_time("") == (0, 0)

    def test_clamped(self):
        assert parse_time_clamped("25:75") == (23, 59)
        assert parse_time_clamped("-3:-1") == (0, 0)


class TestWeekdayMapping:
    def test_iso_to_platform(self):
        assert iso_to_platform_weekday(1) == 0  # Monday
        assert iso_to_platform_weekday(3) == 2  # Wednesday
        assert iso_to_platform_weekday(7) == 6  # Sunday


class TestBuildActionTrigger:
    def test_no_reminder(self):
        assert build_action_trigger(NoReminder(), PARIS) is None

    def test_once(self):
        at = datetime(2026, 5, 1, 18, 45, tzinfo=PARIS)
        trigger = build_action_trigger(OnceReminder(at_ms=to_ms(at)), PARIS)
        assert trigger == DateTrigger(at=at)
        assert is_one_shot(trigger)

    def test_daily(self):
        assert build_action_trigger(DailyReminder("07:05"), PARIS) == DailyTrigger(hour=7, minute=5)

    def test_weekly_wednesday_at_eight(self):
        trigger = build_action_trigger(WeeklyReminder(time="08:00", weekday=3), PARIS)
        assert trigger == WeeklyTrigger(weekday=2, hour=8, minute=0)
        assert not is_one_shot(trigger)

    def test_monthly(self):
        assert build_action_trigger(MonthlyReminder("13:00", 15), PARIS) == MonthlyTrigger(day=15, hour=13, minute=0)

    def test_missing_weekday_skips(self):
        assert build_action_trigger(WeeklyReminder(time="08:00", weekday=None), PARIS) is None

    def test_missing_monthday_skips(self):
        assert build_action_trigger(MonthlyReminder(time="08:00", monthday=None), PARIS) is None

    def test_missing_time_skips(self):
        assert build_action_trigger(DailyReminder(time=None), PARIS) is None


class TestNextOccurrence:
    def test_later_today(self):
        now = datetime(2026, 3, 10, 9, 0, tzinfo=PARIS)
        assert next_occurrence("13:00", now) == datetime(2026, 3, 10, 13, 0, tzinfo=PARIS)

    def test_already_passed_rolls_to_tomorrow(self):
        now = datetime(2026, 3, 10, 9, 0, tzinfo=PARIS)
        assert next_occurrence("08:00", now) == datetime(2026, 3, 11, 8, 0, tzinfo=PARIS)

    def test_exactly_now_rolls_to_tomorrow(self):
        now = datetime(2026, 3, 10, 8, 0, tzinfo=PARIS)
        assert next_occurrence("08:00", now) == datetime(2026, 3, 11, 8, 0, tzinfo=PARIS)

    def test_out_of_range_time_is_clamped(self):
        now = datetime(2026, 3, 10, 9, 0, tzinfo=PARIS)
        assert next_occurrence("99:99", now) == datetime(2026, 3, 10, 23, 59, tzinfo=PARIS)
