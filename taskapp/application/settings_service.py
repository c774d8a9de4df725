"""Settings - per-list digest time and the snooze debug-feedback flag"""
import logging

from sqlalchemy.orm import Session

from taskapp.domain.action import ActionList
from taskapp.domain.reminder import TIME_RE
from taskapp.domain.settings import DEFAULT_SETTINGS, SettingsKey, reminder_time_key
from taskapp.infrastructure.db.repositories import SettingsRepository
from taskapp.infrastructure.notifications.center import NotificationCenter, NotificationPlatformError
from taskapp.application.list_digest import ListDigestService
from taskapp.application.reminders import ReminderError

logger = logging.getLogger(__name__)


class SettingsValidationError(ValueError):
    pass


def _parse_list(list_value: str) -> ActionList:
    try:
        return ActionList(list_value)
    except ValueError:
        raise SettingsValidationError(f"Unknown list: {list_value}")


class SettingsService:
    def __init__(self, db: Session, center: NotificationCenter):
        self.db = db
        self.center = center
        self.repo = SettingsRepository(db)

    def get_all(self) -> dict[str, str]:
        values = {key.value: value for key, value in DEFAULT_SETTINGS.items()}
        values[SettingsKey.NOTIFICATION_ACTION_DEBUG_FEEDBACK.value] = "0"
        values.update(self.repo.get_all())
        return values

    def get_reminder_time(self, list_value: str) -> str:
        list_value = _parse_list(list_value)
        return ListDigestService(self.db, self.center).resolve_reminder_time(list_value)

    def set_reminder_time(self, list_value: str, time_of_day: str) -> str:
        """Store the list's digest time and re-arm that list's digest."""
        list_value = _parse_list(list_value)
        time_of_day = (time_of_day or "").strip()
        if not TIME_RE.match(time_of_day):
            raise SettingsValidationError(f"Reminder time must be HH:MM, got {time_of_day!r}")

        self.repo.set(reminder_time_key(list_value), time_of_day)
        self.db.commit()
        logger.info("Digest time for %s set to %s", list_value.value, time_of_day)

        digests = ListDigestService(self.db, self.center)
        try:
            digests.cancel(list_value)
            if self.center.ensure_permission():
                digests.schedule(list_value, time_of_day)
        except (ReminderError, NotificationPlatformError):
            logger.exception("Unable to reschedule %s digest", list_value.value)
        return time_of_day

    def is_debug_feedback_enabled(self) -> bool:
        return self.repo.get(SettingsKey.NOTIFICATION_ACTION_DEBUG_FEEDBACK) == "1"

    def set_debug_feedback(self, enabled: bool) -> None:
        self.repo.set(SettingsKey.NOTIFICATION_ACTION_DEBUG_FEEDBACK, "1" if enabled else "0")
        self.db.commit()
