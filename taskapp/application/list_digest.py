"""
List digest - one daily notification per list summarising what is left.

Perso and Pro each get a one-shot notification at the list's configured
time-of-day (settings, defaults 08:00 / 13:00). The body lists how many
active actions remain and previews the first few by sort order:

    3 tasks remaining
    1. Buy milk
    2. Call Bob
    3. Book flights

refresh() rebuilds both digests; it runs after every mutation that changes
list membership and whenever a digest has just been presented.
"""
import logging
from datetime import datetime

from sqlalchemy.orm import Session

from taskapp.config import get_settings
from taskapp.domain.action import SUPPORTED_LISTS, ActionList
from taskapp.domain.settings import DEFAULT_REMINDER_TIMES, reminder_time_key
from taskapp.domain.trigger import DateTrigger, next_occurrence
from taskapp.infrastructure.db.repositories import ActionRepository, SettingsRepository
from taskapp.infrastructure.notifications.center import (
    CATEGORY_LIST_REMINDER,
    NotificationCenter,
    NotificationContent,
    NotificationPlatformError,
)
from taskapp.application.reminders import ReminderError, ReminderRegistry

logger = logging.getLogger(__name__)

LIST_DIGEST_TYPE = "list_reminder"


def list_reminder_key(list_value: ActionList) -> str:
    return f"list_{ActionList(list_value).value}"


def build_digest_body(count: int, titles: list[str], preview_size: int = 3) -> str:
    noun = "task" if count == 1 else "tasks"
    body = f"{count} {noun} remaining"
    if count == 0:
        return body
    for position, title in enumerate(titles[:preview_size], start=1):
        body += f"\n{position}. {title}"
    if count > preview_size:
        body += f"\n…and {count - preview_size} more"
    return body


class ListDigestService:
    def __init__(self, db: Session, center: NotificationCenter, preview_size: int | None = None):
        self.db = db
        self.center = center
        self.registry = ReminderRegistry(db, center)
        self.actions = ActionRepository(db)
        self.settings = SettingsRepository(db)
        self.preview_size = preview_size if preview_size is not None else get_settings().DIGEST_PREVIEW_SIZE

    def resolve_reminder_time(self, list_value: ActionList) -> str:
        stored = self.settings.get(reminder_time_key(list_value))
        return stored or DEFAULT_REMINDER_TIMES[list_value]

    def build_content(self, list_value: ActionList) -> NotificationContent:
        count = self.actions.count_active(list_value.value)
        titles = [action.title for action in self.actions.top_active(list_value.value, self.preview_size)]
        return NotificationContent(
            title=list_value.display_name,
            body=build_digest_body(count, titles, self.preview_size),
            data={"type": LIST_DIGEST_TYPE, "list": list_value.value},
            category=CATEGORY_LIST_REMINDER,
        )

    def schedule(self, list_value: ActionList, time_of_day: str, now: datetime | None = None) -> str:
        """Schedule the list's digest at the next occurrence of time_of_day."""
        list_value = ActionList(list_value)
        now = now or datetime.now(self.center.tz)
        trigger = DateTrigger(at=next_occurrence(time_of_day, now))
        content = self.build_content(list_value)
        try:
            handle = self.center.schedule_notification(content, trigger)
        except NotificationPlatformError as exc:
            raise ReminderError(f"Unable to schedule {list_value.value} digest") from exc
        self.registry.adopt(list_reminder_key(list_value), handle)

        logger.info("Digest %s scheduled at %s", list_value.value, trigger.at.isoformat())
        return handle

    def cancel(self, list_value: ActionList) -> bool:
        try:
            return self.registry.release(list_reminder_key(list_value))
        except NotificationPlatformError as exc:
            raise ReminderError(f"Unable to cancel {ActionList(list_value).value} digest") from exc

    def refresh(self, now: datetime | None = None) -> dict[ActionList, str]:
        """
        Cancel and reschedule both digests with up-to-date content.
        Does nothing when notifications are not permitted.
        """
        if not self.center.ensure_permission():
            logger.info("Notifications not permitted, digests not refreshed")
            return {}

        handles = {}
        for list_value in SUPPORTED_LISTS:
            self.cancel(list_value)
            handles[list_value] = self.schedule(list_value, self.resolve_reminder_time(list_value), now=now)
        return handles
