"""
In-process notification center - the local notification platform.

Scheduled notifications are APScheduler jobs; when a job fires the
notification is "presented" (kept in the tray until dismissed) and delivery
listeners are called. Clients read the tray and report which action button
was pressed; the last response is buffered until cleared.

Handles returned by schedule_notification() are opaque strings (job ids).
"""
import logging
import threading
import uuid
from dataclasses import dataclass, field
from datetime import datetime, tzinfo
from functools import lru_cache
from typing import Any, Callable
from zoneinfo import ZoneInfo

from apscheduler.jobstores.base import JobLookupError
from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.cron import CronTrigger
from apscheduler.triggers.date import DateTrigger as SchedulerDateTrigger

from taskapp.config import get_settings
from taskapp.domain.trigger import (
    DailyTrigger,
    DateTrigger,
    MonthlyTrigger,
    NotificationTrigger,
    WeeklyTrigger,
    is_one_shot,
)

logger = logging.getLogger(__name__)

# Categories (each shows the snooze buttons)
CATEGORY_ACTION_REMINDER = "action_reminder"
CATEGORY_LIST_REMINDER = "list_reminder"
CATEGORY_SNOOZE = "snooze"

# Action button identifiers
SNOOZE_10M = "SNOOZE_10M"
SNOOZE_1H = "SNOOZE_1H"
SNOOZE_MORE = "SNOOZE_MORE"
DEFAULT_ACTION_IDENTIFIER = "DEFAULT"  # plain tap on the notification body


class NotificationPlatformError(Exception):
    pass


class UnknownNotificationError(NotificationPlatformError):
    """Handle is not (or no longer) scheduled / presented."""
    pass


@dataclass(frozen=True)
class NotificationAction:
    identifier: str
    button_title: str
    opens_app: bool = False


SNOOZE_ACTIONS = (
    NotificationAction(SNOOZE_10M, "10 min"),
    NotificationAction(SNOOZE_1H, "1 hour"),
    NotificationAction(SNOOZE_MORE, "More…", opens_app=True),
)

CATEGORIES: dict[str, tuple[NotificationAction, ...]] = {
    CATEGORY_ACTION_REMINDER: SNOOZE_ACTIONS,
    CATEGORY_LIST_REMINDER: SNOOZE_ACTIONS,
    CATEGORY_SNOOZE: SNOOZE_ACTIONS,
}


@dataclass
class NotificationContent:
    title: str
    body: str
    data: dict[str, Any] = field(default_factory=dict)
    category: str | None = None

    @property
    def actions(self) -> tuple[NotificationAction, ...]:
        return CATEGORIES.get(self.category or "", ())


@dataclass(frozen=True)
class NotificationPermissions:
    granted: bool
    can_ask_again: bool


@dataclass
class NotificationRequest:
    identifier: str
    content: NotificationContent
    trigger: NotificationTrigger


@dataclass
class PresentedNotification:
    request: NotificationRequest
    presented_at: datetime

    @property
    def identifier(self) -> str:
        return self.request.identifier


@dataclass(frozen=True)
class NotificationResponse:
    """A user's reaction to a presented notification."""
    notification_id: str
    action_identifier: str
    content: NotificationContent
    trigger: NotificationTrigger | None

    @property
    def key(self) -> str:
        """Idempotency key: the same button on the same notification."""
        return f"{self.notification_id}:{self.action_identifier}"


DeliveryListener = Callable[[PresentedNotification], None]


def to_scheduler_trigger(trigger: NotificationTrigger, tz: tzinfo):
    """Domain trigger -> APScheduler trigger"""
    if isinstance(trigger, DateTrigger):
        return SchedulerDateTrigger(run_date=trigger.at, timezone=tz)
    if isinstance(trigger, DailyTrigger):
        return CronTrigger(hour=trigger.hour, minute=trigger.minute, timezone=tz)
    if isinstance(trigger, WeeklyTrigger):
        return CronTrigger(
            day_of_week=trigger.weekday, hour=trigger.hour, minute=trigger.minute, timezone=tz
        )
    if isinstance(trigger, MonthlyTrigger):
        return CronTrigger(day=trigger.day, hour=trigger.hour, minute=trigger.minute, timezone=tz)
    raise NotificationPlatformError(f"Unsupported trigger: {trigger!r}")


class NotificationCenter:
    def __init__(
        self,
        tz: tzinfo | str = "UTC",
        permissions_granted: bool = True,
        scheduler: BackgroundScheduler | None = None,
    ):
        self.tz = ZoneInfo(tz) if isinstance(tz, str) else tz
        self._scheduler = scheduler or BackgroundScheduler(daemon=True, timezone=self.tz)
        self._lock = threading.RLock()
        self._requests: dict[str, NotificationRequest] = {}
        self._presented: dict[str, PresentedNotification] = {}
        self._last_response: NotificationResponse | None = None
        self._delivery_listeners: list[DeliveryListener] = []
        self._permissions = NotificationPermissions(granted=permissions_granted, can_ask_again=False)

    # ── lifecycle ────────────────────────────────────────────────

    def start(self) -> None:
        if not self._scheduler.running:
            self._scheduler.start()
            logger.info("Notification center started (tz=%s)", self.tz)

    def shutdown(self) -> None:
        if self._scheduler.running:
            self._scheduler.shutdown(wait=False)
            logger.info("Notification center stopped")

    # ── permissions ──────────────────────────────────────────────

    def get_permissions(self) -> NotificationPermissions:
        return self._permissions

    def request_permissions(self) -> NotificationPermissions:
        # No interactive prompt in-process: the configured state is the answer
        return self._permissions

    def set_permissions(self, granted: bool, can_ask_again: bool = False) -> None:
        self._permissions = NotificationPermissions(granted=granted, can_ask_again=can_ask_again)

    def ensure_permission(self) -> bool:
        current = self.get_permissions()
        if current.granted:
            return True
        if not current.can_ask_again:
            return False
        return self.request_permissions().granted

    # ── scheduling ───────────────────────────────────────────────

    def schedule_notification(self, content: NotificationContent, trigger: NotificationTrigger) -> str:
        identifier = uuid.uuid4().hex
        request = NotificationRequest(identifier=identifier, content=content, trigger=trigger)
        try:
            scheduler_trigger = to_scheduler_trigger(trigger, self.tz)
            with self._lock:
                self._scheduler.add_job(
                    self.present,
                    trigger=scheduler_trigger,
                    args=[identifier],
                    id=identifier,
                    name=content.title,
                )
                self._requests[identifier] = request
        except NotificationPlatformError:
            raise
        except Exception as exc:
            raise NotificationPlatformError(f"Unable to schedule notification: {exc}") from exc

        logger.debug("Scheduled notification %s (%s)", identifier, trigger)
        return identifier

    def cancel_scheduled_notification(self, identifier: str) -> None:
        with self._lock:
            request = self._requests.pop(identifier, None)
            try:
                self._scheduler.remove_job(identifier)
            except JobLookupError:
                if request is None:
                    raise UnknownNotificationError(f"No scheduled notification {identifier}")
        logger.debug("Cancelled notification %s", identifier)

    def get_scheduled_notifications(self) -> list[NotificationRequest]:
        with self._lock:
            return list(self._requests.values())

    # ── presentation ─────────────────────────────────────────────

    def add_delivery_listener(self, listener: DeliveryListener) -> None:
        with self._lock:
            self._delivery_listeners.append(listener)

    def present(self, identifier: str) -> PresentedNotification | None:
        """Job callback: move a due notification into the tray."""
        with self._lock:
            request = self._requests.get(identifier)
            if request is None:
                logger.warning("Fired notification %s is not scheduled anymore", identifier)
                return None
            if is_one_shot(request.trigger):
                del self._requests[identifier]
            presented = PresentedNotification(request=request, presented_at=datetime.now(self.tz))
            self._presented[identifier] = presented
            listeners = list(self._delivery_listeners)

        logger.info("Notification presented: %s (%s)", request.content.title, identifier)
        for listener in listeners:
            try:
                listener(presented)
            except Exception:
                logger.exception("Delivery listener failed for notification %s", identifier)
        return presented

    def get_presented_notifications(self) -> list[PresentedNotification]:
        with self._lock:
            return sorted(self._presented.values(), key=lambda p: p.presented_at)

    def dismiss_notification(self, identifier: str) -> None:
        with self._lock:
            if self._presented.pop(identifier, None) is None:
                raise UnknownNotificationError(f"Notification {identifier} is not presented")

    # ── responses ────────────────────────────────────────────────

    def record_response(self, identifier: str, action_identifier: str) -> NotificationResponse:
        with self._lock:
            presented = self._presented.get(identifier)
            if presented is None:
                raise UnknownNotificationError(f"Notification {identifier} is not presented")
            response = NotificationResponse(
                notification_id=identifier,
                action_identifier=action_identifier,
                content=presented.request.content,
                trigger=presented.request.trigger,
            )
            self._last_response = response
        return response

    def get_last_response(self) -> NotificationResponse | None:
        return self._last_response

    def clear_last_response(self) -> None:
        with self._lock:
            self._last_response = None


@lru_cache
def get_notification_center() -> NotificationCenter:
    """
    Process-wide notification center (singleton)
    """
    settings = get_settings()
    return NotificationCenter(tz=settings.TIMEZONE, permissions_granted=settings.NOTIFICATIONS_ENABLED)
