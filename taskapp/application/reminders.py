"""
Action reminders.

Maps an action's ReminderSpec to one scheduled notification and keeps
notification_meta["action_<id>"] pointing at the live handle, so callers can
cancel or reschedule by action id without knowing the platform handle.

Primitives raise ReminderError; whether a failure is swallowed or surfaced
is decided by the caller.
"""
import logging

from sqlalchemy.orm import Session

from taskapp.domain.reminder import NoReminder, OnceReminder
from taskapp.domain.trigger import build_action_trigger
from taskapp.infrastructure.db.models import ActionModel
from taskapp.infrastructure.db.repositories import (
    ActionRepository,
    NotificationMetaRepository,
    action_reminder,
)
from taskapp.infrastructure.notifications.center import (
    CATEGORY_ACTION_REMINDER,
    NotificationCenter,
    NotificationContent,
    NotificationPlatformError,
    UnknownNotificationError,
)
from taskapp.utils.clock import now_ms

logger = logging.getLogger(__name__)

ACTION_REMINDER_TYPE = "action_reminder"
ACTION_REMINDER_TITLE = "Reminder"


class ReminderError(Exception):
    pass


def action_reminder_key(action_id: int) -> str:
    return f"action_{action_id}"


def snoozed_copy_key(key: str) -> str:
    """Slot of the pending snoozed copy of `key`, kept apart from the series itself."""
    return f"snooze_{key}"


class ReminderRegistry:
    """
    Logical reminder key -> live notification handle.

    Every change to notification_meta goes through here together with the
    matching call on the notification center, and is committed right away.
    """

    def __init__(self, db: Session, center: NotificationCenter):
        self.db = db
        self.center = center
        self.meta = NotificationMetaRepository(db)

    def get(self, key: str) -> str | None:
        return self.meta.get(key)

    def bind(self, key: str, handle: str) -> None:
        """Point key at handle; a different handle already bound is cancelled first."""
        previous = self.meta.get(key)
        if previous and previous != handle:
            self._cancel_handle(previous, key)
        self.meta.set(key, handle)
        self.db.commit()

    def adopt(self, key: str, handle: str) -> None:
        """
        bind() for a handle that was just scheduled. When it cannot be
        recorded the notification is cancelled again and the error re-raised.
        """
        try:
            self.bind(key, handle)
        except Exception as exc:
            self.db.rollback()
            self._discard(handle)
            if isinstance(exc, NotificationPlatformError):
                raise ReminderError(f"Unable to replace notification for {key}") from exc
            raise

    def _discard(self, handle: str) -> None:
        try:
            self.center.cancel_scheduled_notification(handle)
        except NotificationPlatformError:
            logger.exception("Unable to discard unrecorded notification %s", handle)

    def release(self, key: str) -> bool:
        """
        Cancel the handle bound to key and forget the mapping.
        The mapping is deleted even when cancelling fails.
        Returns False if nothing was bound.
        """
        handle = self.meta.get(key)
        if handle is None:
            return False
        try:
            self._cancel_handle(handle, key)
        finally:
            self.meta.delete(key)
            self.db.commit()
        return True

    def _cancel_handle(self, handle: str, key: str) -> None:
        try:
            self.center.cancel_scheduled_notification(handle)
        except UnknownNotificationError:
            # Already fired or lost on restart
            logger.info("Stale notification handle %s for %s", handle, key)


class ReminderService:
    def __init__(self, db: Session, center: NotificationCenter):
        self.db = db
        self.center = center
        self.registry = ReminderRegistry(db, center)

    def schedule(self, action: ActionModel, now: int | None = None) -> str | None:
        """
        Schedule the action's reminder and record its handle.

        Returns the handle, or None when there is nothing to schedule: no
        reminder, action done, a one-off moment already past, permission
        denied, or reminder columns that do not describe a complete reminder.
        """
        if action.is_done:
            return None

        reminder = action_reminder(action)
        if isinstance(reminder, NoReminder):
            return None
        if isinstance(reminder, OnceReminder) and reminder.at_ms is not None:
            if reminder.at_ms <= (now if now is not None else now_ms()):
                logger.info("One-off reminder of action #%d is past, not scheduled", action.id)
                return None

        if not self.center.ensure_permission():
            logger.info("Notifications not permitted, reminder for action #%d skipped", action.id)
            return None

        trigger = build_action_trigger(reminder, self.center.tz)
        if trigger is None:
            return None

        content = NotificationContent(
            title=ACTION_REMINDER_TITLE,
            body=action.title,
            data={"type": ACTION_REMINDER_TYPE, "actionId": action.id},
            category=CATEGORY_ACTION_REMINDER,
        )
        key = action_reminder_key(action.id)
        try:
            handle = self.center.schedule_notification(content, trigger)
        except NotificationPlatformError as exc:
            raise ReminderError(f"Unable to schedule reminder for action #{action.id}") from exc

        self.registry.adopt(key, handle)

        logger.info("Reminder scheduled for action #%d (%s)", action.id, reminder.type.value)
        return handle

    def cancel(self, action_id: int, include_snoozed: bool = False) -> bool:
        """
        Cancel the action's reminder. With include_snoozed, a pending snoozed
        copy of it goes too (the action is finished or gone).
        """
        key = action_reminder_key(action_id)
        try:
            released = self.registry.release(key)
            if include_snoozed:
                self.registry.release(snoozed_copy_key(key))
        except NotificationPlatformError as exc:
            raise ReminderError(f"Unable to cancel reminder for action #{action_id}") from exc
        return released

    def reschedule(self, action: ActionModel, now: int | None = None) -> str | None:
        self.cancel(action.id)
        return self.schedule(action, now=now)

    def restore_all(self, now: int | None = None) -> int:
        """
        Re-issue reminders of all active actions (scheduled jobs do not
        survive a restart). One-off reminders already in the past are dropped.
        """
        now = now if now is not None else now_ms()
        restored = 0
        for action in ActionRepository(self.db).list_active_with_reminders():
            try:
                if self.reschedule(action, now=now):
                    restored += 1
            except ReminderError:
                logger.exception("Unable to restore reminder for action #%d", action.id)
        logger.info("Restored %d action reminder(s)", restored)
        return restored
