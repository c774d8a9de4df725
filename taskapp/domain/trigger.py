"""
Notification triggers and the ReminderSpec -> trigger mapping.

Weekday numbering follows the notification platform (APScheduler
day_of_week): 0=Monday .. 6=Sunday.
"""
import re
from dataclasses import dataclass
from datetime import datetime, timedelta, tzinfo
from typing import Union

from taskapp.domain.reminder import (
    DailyReminder,
    MonthlyReminder,
    NoReminder,
    OnceReminder,
    ReminderSpec,
    WeeklyReminder,
)
from taskapp.utils.clock import from_ms

_LEADING_INT_RE = re.compile(r"^\s*([+-]?\d+)")


@dataclass(frozen=True)
class DateTrigger:
    """Fires once at an absolute, timezone-aware moment."""
    at: datetime


@dataclass(frozen=True)
class DailyTrigger:
    hour: int
    minute: int


@dataclass(frozen=True)
class WeeklyTrigger:
    weekday: int  # platform numbering, 0=Mon
    hour: int
    minute: int


@dataclass(frozen=True)
class MonthlyTrigger:
    day: int
    hour: int
    minute: int


NotificationTrigger = Union[DateTrigger, DailyTrigger, WeeklyTrigger, MonthlyTrigger]


def is_one_shot(trigger: NotificationTrigger | None) -> bool:
    return isinstance(trigger, DateTrigger)


def _leading_int(raw: str | None) -> int:
    match = _LEADING_INT_RE.match(raw or "")
    return int(match.group(1)) if match else 0


def parse_time(value: str) -> tuple[int, int]:
    """
    'HH:MM' -> (hour, minute). Unparseable components default to 0.

    >>> parse_time("08:30")
    (8, 30)
    >>> parse_time("x:15")
    (0, 15)
    """
    hour_raw, _, minute_raw = (value or "").partition(":")
    return _leading_int(hour_raw), _leading_int(minute_raw)


def parse_time_clamped(value: str) -> tuple[int, int]:
    hour, minute = parse_time(value)
    return max(0, min(23, hour)), max(0, min(59, minute))


def iso_to_platform_weekday(iso_weekday: int) -> int:
    """1=Mon..7=Sun -> 0=Mon..6=Sun"""
    return (iso_weekday - 1) % 7


def next_occurrence(time_of_day: str, now: datetime) -> datetime:
    """
    Next moment strictly after `now` whose wall clock reads time_of_day,
    in now's timezone. If today's slot has passed (or is now), tomorrow.
    """
    hour, minute = parse_time_clamped(time_of_day)
    candidate = now.replace(hour=hour, minute=minute, second=0, microsecond=0)
    if candidate <= now:
        candidate = candidate + timedelta(days=1)
    return candidate


def build_action_trigger(reminder: ReminderSpec, tz: tzinfo) -> NotificationTrigger | None:
    """Map an action's reminder to a trigger; None means "nothing to schedule"."""
    if isinstance(reminder, NoReminder):
        return None

    if isinstance(reminder, OnceReminder):
        if reminder.at_ms is None:
            return None
        return DateTrigger(at=from_ms(reminder.at_ms, tz))

    if not getattr(reminder, "time", None):
        return None
    hour, minute = parse_time(reminder.time)

    if isinstance(reminder, DailyReminder):
        return DailyTrigger(hour=hour, minute=minute)

    if isinstance(reminder, WeeklyReminder):
        if not reminder.weekday:
            return None
        return WeeklyTrigger(
            weekday=iso_to_platform_weekday(reminder.weekday),
            hour=hour,
            minute=minute,
        )

    if isinstance(reminder, MonthlyReminder):
        if not reminder.monthday:
            return None
        return MonthlyTrigger(day=reminder.monthday, hour=hour, minute=minute)

    return None
