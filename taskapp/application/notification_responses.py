"""
Notification responses - what happens when the user presses a button on a
presented notification.

    Idle -> ResponseReceived -> Deduplicated  (same key as the last one handled)
                             -> Handled       (SNOOZED / SNOOZE_FAILED /
                                               PENDING_SNOOZE / IGNORED)

Responses arriving before the database is initialised are DEFERRED and not
remembered, so a redelivery after start-up is handled normally.
"""
import logging
import threading
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Callable

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from taskapp.domain.settings import SettingsKey
from taskapp.domain.trigger import NotificationTrigger, is_one_shot
from taskapp.infrastructure.db.repositories import SettingsRepository
from taskapp.infrastructure.db.session import is_db_ready
from taskapp.infrastructure.notifications.center import (
    SNOOZE_10M,
    SNOOZE_1H,
    SNOOZE_MORE,
    NotificationCenter,
    NotificationPlatformError,
    NotificationResponse,
)
from taskapp.application.list_digest import LIST_DIGEST_TYPE, list_reminder_key
from taskapp.application.reminders import ACTION_REMINDER_TYPE, ReminderError, action_reminder_key
from taskapp.application.snooze import SNOOZE_DURATIONS, SNOOZE_META_KEY_FIELD, snooze_notification

logger = logging.getLogger(__name__)

# button -> (delay ms, label used in feedback messages)
QUICK_SNOOZES = {
    SNOOZE_10M: (SNOOZE_DURATIONS["10min"], "10 minutes", "10 min"),
    SNOOZE_1H: (SNOOZE_DURATIONS["1h"], "1 hour", "1 hour"),
}


class ResponseStatus(str, Enum):
    DEFERRED = "deferred"
    DEDUPLICATED = "deduplicated"
    SNOOZED = "snoozed"
    SNOOZE_FAILED = "snooze_failed"
    PENDING_SNOOZE = "pending_snooze"
    IGNORED = "ignored"


@dataclass
class SnoozeDraft:
    """Prefilled values for the "More…" snooze screen."""
    title: str
    body: str
    data: dict[str, Any] = field(default_factory=dict)


@dataclass
class ResponseOutcome:
    status: ResponseStatus
    key: str
    handle: str | None = None
    draft: SnoozeDraft | None = None
    feedback: str | None = None


def resolve_snooze_meta_key(data: dict[str, Any] | None, trigger: NotificationTrigger | None) -> str | None:
    """
    Logical key a snoozed copy of this notification should be recorded under.

    A key already carried in the data wins (snoozing a snooze). Otherwise
    only one-shot originals are keyed: action reminders by action id, list
    digests by list. Recurring reminders are never re-keyed.
    """
    data = data or {}
    existing = data.get(SNOOZE_META_KEY_FIELD)
    if isinstance(existing, str) and existing:
        return existing

    if not is_one_shot(trigger):
        return None

    kind = data.get("type")
    if kind == ACTION_REMINDER_TYPE:
        action_id = data.get("actionId")
        if isinstance(action_id, bool):
            return None
        if isinstance(action_id, int):
            return action_reminder_key(action_id)
        if isinstance(action_id, str) and action_id.strip().isdigit():
            return action_reminder_key(int(action_id))
        return None

    if kind == LIST_DIGEST_TYPE:
        try:
            return list_reminder_key(data.get("list"))
        except ValueError:
            return None

    return None


def build_snooze_data(data: dict[str, Any] | None, trigger: NotificationTrigger | None) -> dict[str, Any]:
    snooze_data = dict(data or {})
    meta_key = resolve_snooze_meta_key(snooze_data, trigger)
    if meta_key:
        snooze_data[SNOOZE_META_KEY_FIELD] = meta_key
    return snooze_data


class ResponseHandler:
    def __init__(
        self,
        center: NotificationCenter,
        session_factory: sessionmaker | Callable[[], Session],
        is_ready: Callable[[], bool] = is_db_ready,
    ):
        self.center = center
        self.session_factory = session_factory
        self.is_ready = is_ready
        self.last_handled_key: str | None = None
        self._lock = threading.Lock()

    def handle_last_response(self, now: datetime | None = None) -> ResponseOutcome | None:
        response = self.center.get_last_response()
        if response is None:
            return None
        return self.handle(response, now=now)

    def handle(self, response: NotificationResponse, now: datetime | None = None) -> ResponseOutcome:
        key = response.key
        if not self.is_ready():
            logger.info("Storage not ready, response %s deferred", key)
            return ResponseOutcome(ResponseStatus.DEFERRED, key)

        if not self._claim(key):
            return ResponseOutcome(ResponseStatus.DEDUPLICATED, key)

        action = response.action_identifier
        if action in QUICK_SNOOZES:
            return self._quick_snooze(response, action, now)

        if action == SNOOZE_MORE:
            draft = SnoozeDraft(
                title=response.content.title,
                body=response.content.body,
                data=build_snooze_data(response.content.data, response.trigger),
            )
            self._dismiss(response.notification_id)
            self.center.clear_last_response()
            return ResponseOutcome(ResponseStatus.PENDING_SNOOZE, key, draft=draft)

        self.center.clear_last_response()
        return ResponseOutcome(ResponseStatus.IGNORED, key)

    def _claim(self, key: str) -> bool:
        """Atomically mark key as handled; False if it already was."""
        with self._lock:
            if key == self.last_handled_key:
                return False
            self.last_handled_key = key
            return True

    def _quick_snooze(self, response: NotificationResponse, action: str, now: datetime | None) -> ResponseOutcome:
        delay_ms, done_label, failed_label = QUICK_SNOOZES[action]
        data = build_snooze_data(response.content.data, response.trigger)

        handle = None
        with self.session_factory() as db:
            debug = self._debug_feedback_enabled(db)
            try:
                handle = snooze_notification(
                    db,
                    self.center,
                    response.content.title,
                    response.content.body,
                    data,
                    delay_ms,
                    now=now,
                )
            except (ReminderError, SQLAlchemyError):
                db.rollback()
                logger.exception("Snooze (%s) failed for notification %s", failed_label, response.notification_id)

        if handle is None:
            self.center.clear_last_response()
            feedback = f"Unable to snooze ({failed_label})" if debug else None
            if feedback:
                logger.info(feedback)
            return ResponseOutcome(ResponseStatus.SNOOZE_FAILED, response.key, feedback=feedback)

        self._dismiss(response.notification_id)
        self.center.clear_last_response()
        feedback = f"Snoozed for {done_label}" if debug else None
        if feedback:
            logger.info(feedback)
        return ResponseOutcome(ResponseStatus.SNOOZED, response.key, handle=handle, feedback=feedback)

    def _dismiss(self, notification_id: str) -> None:
        try:
            self.center.dismiss_notification(notification_id)
        except NotificationPlatformError:
            logger.info("Notification %s already dismissed", notification_id)

    @staticmethod
    def _debug_feedback_enabled(db: Session) -> bool:
        """Debug setting; an unreadable setting counts as off."""
        try:
            return SettingsRepository(db).get(SettingsKey.NOTIFICATION_ACTION_DEBUG_FEEDBACK) == "1"
        except SQLAlchemyError:
            db.rollback()
            logger.exception("Unable to read the debug feedback setting")
            return False
