"""Action use cases - create, edit, complete, delete and reorder actions"""
import logging

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from taskapp.domain.action import ActionValidationError, normalize_title, parse_list
from taskapp.domain.ordering import ReorderKind, ReorderPlan
from taskapp.domain.reminder import build_reminder, validate_reminder_for_save
from taskapp.infrastructure.db.models import ActionModel
from taskapp.infrastructure.db.repositories import ActionRepository, action_reminder
from taskapp.infrastructure.notifications.center import NotificationCenter, NotificationPlatformError
from taskapp.application.list_digest import ListDigestService
from taskapp.application.ordering_service import OrderingService
from taskapp.application.reminders import ReminderError, ReminderService
from taskapp.utils.clock import now_ms

logger = logging.getLogger(__name__)

# Filter value selecting the "no list" partition
NO_LIST_FILTER = "none"

BEST_EFFORT_ERRORS = (ReminderError, NotificationPlatformError, SQLAlchemyError)


class ActionNotFoundError(ActionValidationError):
    pass


def list_active_actions(db: Session, list_filter: str | None = None) -> list[ActionModel]:
    """
    Active actions in display order.
    list_filter: None -> every partition, "none" -> no list, "perso"/"pro" -> that list.
    """
    repo = ActionRepository(db)
    if list_filter is None:
        return repo.list_active()
    if list_filter == NO_LIST_FILTER:
        return repo.list_active_in_partition(None)
    return repo.list_active_in_partition(parse_list(list_filter).value)


def get_action_or_raise(db: Session, action_id: int) -> ActionModel:
    action = ActionRepository(db).get(action_id)
    if action is None:
        raise ActionNotFoundError(f"Action #{action_id} not found")
    return action


def _list_value(value: str | None) -> str | None:
    parsed = parse_list(value)
    return parsed.value if parsed else None


def refresh_digests(db: Session, center: NotificationCenter) -> None:
    """Rebuild both list digests; failures are logged, never raised."""
    try:
        ListDigestService(db, center).refresh()
    except BEST_EFFORT_ERRORS:
        db.rollback()
        logger.exception("Unable to refresh list digests")


def _reschedule_reminder(db: Session, center: NotificationCenter, action: ActionModel, now: int) -> None:
    try:
        ReminderService(db, center).reschedule(action, now=now)
    except BEST_EFFORT_ERRORS:
        db.rollback()
        logger.exception("Unable to schedule reminder for action #%d", action.id)


def _cancel_reminder(db: Session, center: NotificationCenter, action_id: int) -> None:
    try:
        ReminderService(db, center).cancel(action_id, include_snoozed=True)
    except BEST_EFFORT_ERRORS:
        db.rollback()
        logger.exception("Unable to cancel reminder for action #%d", action_id)


class CreateActionUseCase:
    def __init__(self, db: Session, center: NotificationCenter):
        self.db = db
        self.center = center
        self.actions = ActionRepository(db)

    def execute(
        self,
        title: str,
        list_value: str | None = None,
        reminder_type: str = "none",
        reminder_date: int | None = None,
        reminder_time: str | None = None,
        reminder_weekday: int | None = None,
        reminder_monthday: int | None = None,
        now: int | None = None,
    ) -> ActionModel:
        now = now if now is not None else now_ms()
        title = normalize_title(title)
        list_value = _list_value(list_value)
        reminder = build_reminder(reminder_type, reminder_date, reminder_time, reminder_weekday, reminder_monthday)
        validate_reminder_for_save(reminder, now)

        sort_index = OrderingService(self.db).compute_sort_index_for_new_action(list_value)
        try:
            action = self.actions.add(title, list_value, sort_index, reminder, now)
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

        logger.info("Action #%d created in %s (sort_index=%d)", action.id, list_value or "<none>", sort_index)

        _reschedule_reminder(self.db, self.center, action, now)
        refresh_digests(self.db, self.center)
        return action


class UpdateActionUseCase:
    """
    Replace an active action's editable fields (title, list, reminder).

    Moving to another list places the action as if it were new there.
    The reminder is rescheduled only when it changed, and a one-off date is
    only checked against "now" in that case.
    """

    def __init__(self, db: Session, center: NotificationCenter):
        self.db = db
        self.center = center

    def execute(
        self,
        action_id: int,
        title: str,
        list_value: str | None = None,
        reminder_type: str = "none",
        reminder_date: int | None = None,
        reminder_time: str | None = None,
        reminder_weekday: int | None = None,
        reminder_monthday: int | None = None,
        now: int | None = None,
    ) -> ActionModel:
        now = now if now is not None else now_ms()
        action = get_action_or_raise(self.db, action_id)
        if action.is_done:
            raise ActionValidationError("Only active actions can be edited")

        title = normalize_title(title)
        list_value = _list_value(list_value)
        reminder = build_reminder(reminder_type, reminder_date, reminder_time, reminder_weekday, reminder_monthday)
        reminder_changed = reminder != action_reminder(action)
        if reminder_changed:
            validate_reminder_for_save(reminder, now)

        list_changed = list_value != action.list
        title_changed = title != action.title

        try:
            if list_changed:
                action.sort_index = OrderingService(self.db).compute_sort_index_for_new_action(list_value)
                action.list = list_value
            action.title = title
            ActionRepository(self.db).set_reminder(action, reminder)
            action.updated_at = now
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

        logger.info("Action #%d updated", action.id)

        if reminder_changed or title_changed:
            _reschedule_reminder(self.db, self.center, action, now)
        if list_changed or title_changed:
            refresh_digests(self.db, self.center)
        return action


class CompleteActionUseCase:
    def __init__(self, db: Session, center: NotificationCenter):
        self.db = db
        self.center = center

    def execute(self, action_id: int, now: int | None = None) -> ActionModel:
        action = get_action_or_raise(self.db, action_id)
        if action.is_done:
            raise ActionValidationError("Action is already done")

        try:
            action.is_done = True
            action.updated_at = now if now is not None else now_ms()
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

        logger.info("Action #%d completed", action_id)

        _cancel_reminder(self.db, self.center, action_id)
        refresh_digests(self.db, self.center)
        return action


class DeleteActionUseCase:
    def __init__(self, db: Session, center: NotificationCenter):
        self.db = db
        self.center = center

    def execute(self, action_id: int) -> None:
        action = get_action_or_raise(self.db, action_id)
        try:
            ActionRepository(self.db).delete(action)
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

        logger.info("Action #%d deleted", action_id)

        # The row is gone but its notification_meta entry is not
        _cancel_reminder(self.db, self.center, action_id)
        refresh_digests(self.db, self.center)


class ReorderActionsUseCase:
    def __init__(self, db: Session, center: NotificationCenter):
        self.db = db
        self.center = center

    def execute(
        self,
        from_index: int,
        to_index: int,
        list_filter: str | None = None,
        now: int | None = None,
    ) -> ReorderPlan:
        """Move displayed[from_index] to to_index, displayed being the filtered active list."""
        displayed = list_active_actions(self.db, list_filter)
        plan = OrderingService(self.db).reorder(displayed, from_index, to_index, now=now)
        if plan.kind is not ReorderKind.NOOP:
            logger.info("Action #%d moved (%s)", plan.action_id, plan.kind.value)
            # Digest previews follow sort order
            refresh_digests(self.db, self.center)
        return plan
