"""
Action ReminderSpec - a tagged union over the five reminder shapes.

    NoReminder                      no reminder
    OnceReminder(at_ms)             absolute date, epoch ms, future at save time
    DailyReminder(time)             every day at HH:MM
    WeeklyReminder(time, weekday)   every week, weekday 1=Mon..7=Sun (ISO)
    MonthlyReminder(time, monthday) every month on day 1..31

The store keeps the union flattened into nullable columns
(reminder_type, reminder_date, reminder_time, reminder_weekday,
reminder_monthday). reminder_from_columns() / reminder_columns() are the only
places that cross that boundary.
"""
import logging
import re
from dataclasses import dataclass
from enum import Enum
from typing import Any, Union

logger = logging.getLogger(__name__)

TIME_RE = re.compile(r"^([01]\d|2[0-3]):([0-5]\d)$")


class ReminderType(str, Enum):
    NONE = "none"
    ONCE = "once"
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"


class ReminderSpecValidationError(ValueError):
    pass


@dataclass(frozen=True)
class NoReminder:
    type = ReminderType.NONE


@dataclass(frozen=True)
class OnceReminder:
    at_ms: int
    type = ReminderType.ONCE


@dataclass(frozen=True)
class DailyReminder:
    time: str
    type = ReminderType.DAILY


@dataclass(frozen=True)
class WeeklyReminder:
    time: str
    weekday: int
    type = ReminderType.WEEKLY


@dataclass(frozen=True)
class MonthlyReminder:
    time: str
    monthday: int
    type = ReminderType.MONTHLY


ReminderSpec = Union[NoReminder, OnceReminder, DailyReminder, WeeklyReminder, MonthlyReminder]


def _clamp_monthday(monthday: int) -> int:
    return max(1, min(31, monthday))


def build_reminder(
    reminder_type: str,
    date: int | None = None,
    time: str | None = None,
    weekday: int | None = None,
    monthday: int | None = None,
) -> ReminderSpec:
    """
    Build a ReminderSpec from user input. Fields that do not belong to the
    requested type are dropped; missing required fields raise.
    """
    try:
        kind = ReminderType(reminder_type)
    except ValueError:
        raise ReminderSpecValidationError(f"Unknown reminder type: {reminder_type}")

    if kind is ReminderType.NONE:
        return NoReminder()

    if kind is ReminderType.ONCE:
        if date is None:
            raise ReminderSpecValidationError("Reminder date is required")
        return OnceReminder(at_ms=int(date))

    if not time:
        raise ReminderSpecValidationError("Reminder time is required")
    if not TIME_RE.match(time):
        raise ReminderSpecValidationError(f"Reminder time must be HH:MM, got {time!r}")

    if kind is ReminderType.DAILY:
        return DailyReminder(time=time)

    if kind is ReminderType.WEEKLY:
        if weekday is None:
            raise ReminderSpecValidationError("Weekday is required")
        if not 1 <= weekday <= 7:
            raise ReminderSpecValidationError("Weekday must be between 1 (Monday) and 7 (Sunday)")
        return WeeklyReminder(time=time, weekday=weekday)

    if monthday is None:
        raise ReminderSpecValidationError("Day of month is required")
    return MonthlyReminder(time=time, monthday=_clamp_monthday(monthday))


def validate_reminder_for_save(spec: ReminderSpec, now_ms: int) -> None:
    """Save-time rule on top of build_reminder(): one-off dates must be in the future."""
    if isinstance(spec, OnceReminder) and spec.at_ms <= now_ms:
        raise ReminderSpecValidationError("Reminder date must be in the future")


def reminder_from_columns(
    reminder_type: str | None,
    reminder_date: int | None,
    reminder_time: str | None,
    reminder_weekday: int | None,
    reminder_monthday: int | None,
) -> ReminderSpec:
    """
    Rebuild the union from stored columns.

    Rows that break the one-shape invariant (unknown type, required field
    missing) come back as NoReminder, so they are never scheduled.
    """
    if reminder_type in (None, ReminderType.NONE.value):
        return NoReminder()

    if reminder_type == ReminderType.ONCE.value:
        if reminder_date is not None:
            return OnceReminder(at_ms=reminder_date)
    elif reminder_type == ReminderType.DAILY.value:
        if reminder_time:
            return DailyReminder(time=reminder_time)
    elif reminder_type == ReminderType.WEEKLY.value:
        if reminder_time and reminder_weekday:
            return WeeklyReminder(time=reminder_time, weekday=reminder_weekday)
    elif reminder_type == ReminderType.MONTHLY.value:
        if reminder_time and reminder_monthday:
            return MonthlyReminder(time=reminder_time, monthday=reminder_monthday)

    logger.warning(
        "Inconsistent reminder columns (type=%s date=%s time=%s weekday=%s monthday=%s), ignoring",
        reminder_type, reminder_date, reminder_time, reminder_weekday, reminder_monthday,
    )
    return NoReminder()


def reminder_columns(spec: ReminderSpec) -> dict[str, Any]:
    """Flatten the union into the five nullable columns."""
    columns: dict[str, Any] = {
        "reminder_type": spec.type.value,
        "reminder_date": None,
        "reminder_time": None,
        "reminder_weekday": None,
        "reminder_monthday": None,
    }
    if isinstance(spec, OnceReminder):
        columns["reminder_date"] = spec.at_ms
    elif isinstance(spec, DailyReminder):
        columns["reminder_time"] = spec.time
    elif isinstance(spec, WeeklyReminder):
        columns["reminder_time"] = spec.time
        columns["reminder_weekday"] = spec.weekday
    elif isinstance(spec, MonthlyReminder):
        columns["reminder_time"] = spec.time
        columns["reminder_monthday"] = spec.monthday
    return columns
