"""
Snooze - re-deliver a notification later as a one-shot.

The snoozed copy keeps the original title, body and data. When the data
carries a snooze key (SNOOZE_META_KEY_FIELD) the new handle is recorded in
that key's snoozed-copy slot (snoozed_copy_key), replacing an earlier copy.
The key's own notification (tomorrow's digest, say) is left alone.
"""
import logging
from datetime import datetime, timedelta
from typing import Any

from sqlalchemy.orm import Session

from taskapp.domain.trigger import DateTrigger
from taskapp.infrastructure.notifications.center import (
    CATEGORY_SNOOZE,
    NotificationCenter,
    NotificationContent,
    NotificationPlatformError,
)
from taskapp.application.reminders import ReminderError, ReminderRegistry, snoozed_copy_key

logger = logging.getLogger(__name__)

SNOOZE_META_KEY_FIELD = "__snoozeMetaKey"

# Quick durations offered by the "More…" screen, in ms
SNOOZE_DURATIONS = {
    "10min": 10 * 60 * 1000,
    "1h": 60 * 60 * 1000,
    "1d": 24 * 60 * 60 * 1000,
    "1w": 7 * 24 * 60 * 60 * 1000,
}


class SnoozeValidationError(ValueError):
    pass


def _schedule_snooze(
    db: Session,
    center: NotificationCenter,
    title: str,
    body: str,
    data: dict[str, Any] | None,
    at: datetime,
) -> str:
    data = dict(data or {})
    content = NotificationContent(title=title, body=body, data=data, category=CATEGORY_SNOOZE)
    try:
        handle = center.schedule_notification(content, DateTrigger(at=at))
    except NotificationPlatformError as exc:
        raise ReminderError("Unable to schedule snoozed notification") from exc

    meta_key = data.get(SNOOZE_META_KEY_FIELD)
    if meta_key:
        # The copy has its own slot: the series under meta_key stays scheduled
        ReminderRegistry(db, center).adopt(snoozed_copy_key(meta_key), handle)

    logger.info("Notification %r snoozed until %s", title, at.isoformat())
    return handle


def snooze_notification(
    db: Session,
    center: NotificationCenter,
    title: str,
    body: str,
    data: dict[str, Any] | None,
    delay_ms: int,
    now: datetime | None = None,
) -> str:
    """Re-deliver after delay_ms; returns the new handle."""
    if delay_ms <= 0:
        raise SnoozeValidationError("Snooze delay must be positive")
    now = now or datetime.now(center.tz)
    return _schedule_snooze(db, center, title, body, data, now + timedelta(milliseconds=delay_ms))


def snooze_notification_to_date(
    db: Session,
    center: NotificationCenter,
    title: str,
    body: str,
    data: dict[str, Any] | None,
    when: datetime,
    now: datetime | None = None,
) -> str:
    """Re-deliver at an absolute moment, which must be in the future."""
    now = now or datetime.now(center.tz)
    if when.tzinfo is None:
        when = when.replace(tzinfo=center.tz)
    if when <= now:
        raise SnoozeValidationError("Snooze date must be in the future")
    return _schedule_snooze(db, center, title, body, data, when)
