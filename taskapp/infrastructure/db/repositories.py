"""
Repositories for actions, settings and notification_meta.

Repositories only flush; committing is left to the calling service so that
several writes can share one transaction.
"""
from enum import Enum
from typing import Iterable

from sqlalchemy import func
from sqlalchemy.orm import Session

from taskapp.domain.reminder import ReminderSpec, reminder_columns, reminder_from_columns
from taskapp.domain.settings import DEFAULT_SETTINGS
from taskapp.infrastructure.db.models import ActionModel, NotificationMetaModel, SettingModel


def _key(key) -> str:
    return key.value if isinstance(key, Enum) else key


def _partition_clause(list_value: str | None):
    if list_value is None:
        return ActionModel.list.is_(None)
    return ActionModel.list == list_value


def action_reminder(action: ActionModel) -> ReminderSpec:
    """ReminderSpec of a stored action"""
    return reminder_from_columns(
        action.reminder_type,
        action.reminder_date,
        action.reminder_time,
        action.reminder_weekday,
        action.reminder_monthday,
    )


class ActionRepository:
    def __init__(self, db: Session):
        self.db = db

    def get(self, action_id: int) -> ActionModel | None:
        return self.db.get(ActionModel, action_id)

    def _active(self):
        return self.db.query(ActionModel).filter(ActionModel.is_done.is_(False))

    def list_active(self) -> list[ActionModel]:
        """All active actions, every partition, in sort order"""
        return self._active().order_by(ActionModel.sort_index, ActionModel.id).all()

    def list_active_in_partition(self, list_value: str | None) -> list[ActionModel]:
        return (
            self._active()
            .filter(_partition_clause(list_value))
            .order_by(ActionModel.sort_index, ActionModel.id)
            .all()
        )

    def top_active(self, list_value: str, limit: int) -> list[ActionModel]:
        return (
            self._active()
            .filter(_partition_clause(list_value))
            .order_by(ActionModel.sort_index, ActionModel.id)
            .limit(limit)
            .all()
        )

    def count_active(self, list_value: str | None) -> int:
        return (
            self.db.query(func.count(ActionModel.id))
            .filter(ActionModel.is_done.is_(False), _partition_clause(list_value))
            .scalar()
        ) or 0

    def min_sort_index(self, list_value: str | None) -> int | None:
        return (
            self.db.query(func.min(ActionModel.sort_index))
            .filter(ActionModel.is_done.is_(False), _partition_clause(list_value))
            .scalar()
        )

    def max_sort_index(self, list_value: str | None) -> int | None:
        return (
            self.db.query(func.max(ActionModel.sort_index))
            .filter(ActionModel.is_done.is_(False), _partition_clause(list_value))
            .scalar()
        )

    def list_active_with_reminders(self) -> list[ActionModel]:
        return (
            self._active()
            .filter(ActionModel.reminder_type != "none")
            .order_by(ActionModel.id)
            .all()
        )

    def add(
        self,
        title: str,
        list_value: str | None,
        sort_index: int,
        reminder: ReminderSpec,
        now: int,
    ) -> ActionModel:
        action = ActionModel(
            title=title,
            list=list_value,
            sort_index=sort_index,
            is_done=False,
            created_at=now,
            updated_at=now,
            **reminder_columns(reminder),
        )
        self.db.add(action)
        self.db.flush()
        return action

    def set_reminder(self, action: ActionModel, reminder: ReminderSpec) -> None:
        for column, value in reminder_columns(reminder).items():
            setattr(action, column, value)

    def set_sort_indexes(self, assignments: Iterable[tuple[int, int]], now: int) -> None:
        """Write (id, sort_index) pairs; part of the caller's transaction."""
        for action_id, sort_index in assignments:
            self.db.query(ActionModel).filter(ActionModel.id == action_id).update(
                {ActionModel.sort_index: sort_index, ActionModel.updated_at: now},
                synchronize_session="fetch",
            )
        self.db.flush()

    def delete(self, action: ActionModel) -> None:
        self.db.delete(action)
        self.db.flush()


class SettingsRepository:
    def __init__(self, db: Session):
        self.db = db

    def get(self, key: str) -> str | None:
        row = self.db.get(SettingModel, _key(key))
        return row.value if row else None

    def set(self, key: str, value: str) -> None:
        self.db.merge(SettingModel(key=_key(key), value=value))
        self.db.flush()

    def get_all(self) -> dict[str, str]:
        return {row.key: row.value for row in self.db.query(SettingModel).all()}

    def seed_defaults(self) -> None:
        """Insert default settings that are not stored yet; existing values win."""
        for key, value in DEFAULT_SETTINGS.items():
            if self.db.get(SettingModel, key.value) is None:
                self.db.add(SettingModel(key=key.value, value=value))
        self.db.flush()


class NotificationMetaRepository:
    def __init__(self, db: Session):
        self.db = db

    def get(self, key: str) -> str | None:
        row = self.db.get(NotificationMetaModel, key)
        return row.notification_id if row else None

    def set(self, key: str, notification_id: str) -> None:
        self.db.merge(NotificationMetaModel(key=key, notification_id=notification_id))
        self.db.flush()

    def delete(self, key: str) -> None:
        self.db.query(NotificationMetaModel).filter(NotificationMetaModel.key == key).delete()
        self.db.flush()

    def all(self) -> dict[str, str]:
        return {row.key: row.notification_id for row in self.db.query(NotificationMetaModel).all()}
