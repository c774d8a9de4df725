"""
Tests for action reminders: scheduling, the key -> handle mapping, cancel and restore
"""
from datetime import datetime
from unittest.mock import patch

import pytest
from sqlalchemy.exc import OperationalError

from taskapp.application.reminders import (
    ReminderError,
    ReminderRegistry,
    ReminderService,
    action_reminder_key,
)
from taskapp.domain.reminder import (
    DailyReminder,
    NoReminder,
    OnceReminder,
    WeeklyReminder,
)
from taskapp.domain.trigger import DateTrigger, WeeklyTrigger
from taskapp.infrastructure.db.repositories import ActionRepository, NotificationMetaRepository
from taskapp.infrastructure.notifications.center import NotificationPlatformError
from taskapp.utils.clock import to_ms

FAR_FUTURE = datetime(2099, 1, 1, 12, 0).astimezone()


def _action(db, reminder, title="Water plants", list_value="perso"):
    action = ActionRepository(db).add(title, list_value, 0, reminder, now=1_000)
    db.commit()
    return action


class TestSchedule:
    def test_weekly_reminder_content_and_mapping(self, db_session, center):
        action = _action(db_session, WeeklyReminder(time="08:00", weekday=3))

        handle = ReminderService(db_session, center).schedule(action)

        assert handle is not None
        [request] = center.get_scheduled_notifications()
        assert request.identifier == handle
        assert request.trigger == WeeklyTrigger(weekday=2, hour=8, minute=0)
        assert request.content.title == "Reminder"
        assert request.content.body == "Water plants"
        assert request.content.category == "action_reminder"
        assert request.content.data == {"type": "action_reminder", "actionId": action.id}
        assert NotificationMetaRepository(db_session).get(action_reminder_key(action.id)) == handle

    def test_once_reminder_uses_date_trigger(self, db_session, center):
        action = _action(db_session, OnceReminder(at_ms=to_ms(FAR_FUTURE)))

        ReminderService(db_session, center).schedule(action)

        [request] = center.get_scheduled_notifications()
        assert isinstance(request.trigger, DateTrigger)
        assert to_ms(request.trigger.at) == to_ms(FAR_FUTURE)

    def test_no_reminder_is_noop(self, db_session, center):
        action = _action(db_session, NoReminder())
        assert ReminderService(db_session, center).schedule(action) is None
        assert center.get_scheduled_notifications() == []

    def test_done_action_is_never_scheduled(self, db_session, center):
        action = _action(db_session, DailyReminder("08:00"))
        action.is_done = True
        db_session.commit()
        assert ReminderService(db_session, center).schedule(action) is None
        assert center.get_scheduled_notifications() == []

    def test_permission_denied_is_silent(self, db_session, center):
        center.set_permissions(granted=False, can_ask_again=False)
        action = _action(db_session, DailyReminder("08:00"))

        assert ReminderService(db_session, center).schedule(action) is None
        assert center.get_scheduled_notifications() == []
        assert NotificationMetaRepository(db_session).all() == {}

    def test_inconsistent_columns_are_silent(self, db_session, center):
        action = _action(db_session, DailyReminder("08:00"))
        action.reminder_type = "weekly"  # weekday missing
        db_session.commit()

        assert ReminderService(db_session, center).schedule(action) is None
        assert center.get_scheduled_notifications() == []

    def test_platform_failure_raises_reminder_error(self, db_session, center):
        action = _action(db_session, DailyReminder("08:00"))
        with patch.object(center, "schedule_notification", side_effect=NotificationPlatformError("boom")):
            with pytest.raises(ReminderError):
                ReminderService(db_session, center).schedule(action)
        assert NotificationMetaRepository(db_session).all() == {}

    def test_schedule_twice_cancels_previous_handle(self, db_session, center):
        action = _action(db_session, DailyReminder("08:00"))
        service = ReminderService(db_session, center)

        first = service.schedule(action)
        second = service.schedule(action)

        assert first != second
        assert [r.identifier for r in center.get_scheduled_notifications()] == [second]
        assert NotificationMetaRepository(db_session).get(action_reminder_key(action.id)) == second

    def test_past_one_off_is_not_scheduled(self, db_session, center, now_ms):
        action = _action(db_session, OnceReminder(at_ms=now_ms - 1))

        assert ReminderService(db_session, center).schedule(action, now=now_ms) is None
        assert center.get_scheduled_notifications() == []
        assert NotificationMetaRepository(db_session).all() == {}

    def test_unrecorded_handle_is_withdrawn(self, db_session, center):
        action = _action(db_session, DailyReminder("08:00"))
        locked = OperationalError("INSERT notification_meta", {}, Exception("database is locked"))

        with patch.object(NotificationMetaRepository, "set", side_effect=locked):
            with pytest.raises(OperationalError):
                ReminderService(db_session, center).schedule(action)

        assert center.get_scheduled_notifications() == []
        assert NotificationMetaRepository(db_session).all() == {}


class TestCancel:
    def test_schedule_then_cancel(self, db_session, center):
        """One platform cancel, mapping gone."""
        action = _action(db_session, DailyReminder("08:00"))
        service = ReminderService(db_session, center)
        service.schedule(action)

        with patch.object(center, "cancel_scheduled_notification", wraps=center.cancel_scheduled_notification) as cancel:
            assert service.cancel(action.id) is True

        assert cancel.call_count == 1
        assert NotificationMetaRepository(db_session).get(action_reminder_key(action.id)) is None
        assert center.get_scheduled_notifications() == []

    def test_cancel_without_mapping_is_noop(self, db_session, center):
        with patch.object(center, "cancel_scheduled_notification") as cancel:
            assert ReminderService(db_session, center).cancel(42) is False
        cancel.assert_not_called()

    def test_stale_handle_still_deletes_mapping(self, db_session, center):
        NotificationMetaRepository(db_session).set("action_7", "gone-handle")
        db_session.commit()

        assert ReminderService(db_session, center).cancel(7) is True
        assert NotificationMetaRepository(db_session).get("action_7") is None

    def test_platform_error_still_deletes_mapping(self, db_session, center):
        NotificationMetaRepository(db_session).set("action_7", "some-handle")
        db_session.commit()

        with patch.object(center, "cancel_scheduled_notification", side_effect=NotificationPlatformError("busy")):
            with pytest.raises(ReminderError):
                ReminderService(db_session, center).cancel(7)

        assert NotificationMetaRepository(db_session).get("action_7") is None

    def test_cancel_can_include_snoozed_copy(self, db_session, center):
        meta = NotificationMetaRepository(db_session)
        meta.set("action_7", "series-handle")
        meta.set("snooze_action_7", "copy-handle")
        db_session.commit()
        service = ReminderService(db_session, center)

        service.cancel(7)
        assert meta.get("snooze_action_7") == "copy-handle"

        service.cancel(7, include_snoozed=True)
        assert meta.all() == {}


class TestReschedule:
    def test_never_two_live_handles(self, db_session, center):
        action = _action(db_session, DailyReminder("08:00"))
        service = ReminderService(db_session, center)

        for _ in range(3):
            service.reschedule(action)

        handles = [r.identifier for r in center.get_scheduled_notifications()]
        assert len(handles) == 1
        assert NotificationMetaRepository(db_session).get(action_reminder_key(action.id)) == handles[0]


class TestRegistry:
    def test_bind_replaces_and_cancels(self, db_session, center):
        registry = ReminderRegistry(db_session, center)
        with patch.object(center, "cancel_scheduled_notification") as cancel:
            registry.bind("list_pro", "h1")
            registry.bind("list_pro", "h2")
        cancel.assert_called_once_with("h1")
        assert registry.get("list_pro") == "h2"

    def test_rebinding_same_handle_does_not_cancel(self, db_session, center):
        registry = ReminderRegistry(db_session, center)
        with patch.object(center, "cancel_scheduled_notification") as cancel:
            registry.bind("list_pro", "h1")
            registry.bind("list_pro", "h1")
        cancel.assert_not_called()


class TestRestoreAll:
    def test_restores_active_reminders(self, db_session, center, now_ms):
        daily = _action(db_session, DailyReminder("08:00"), title="daily")
        future = _action(db_session, OnceReminder(at_ms=now_ms + 3_600_000), title="future")
        _action(db_session, NoReminder(), title="plain")
        done = _action(db_session, DailyReminder("09:00"), title="done")
        done.is_done = True
        db_session.commit()

        restored = ReminderService(db_session, center).restore_all(now=now_ms)

        assert restored == 2
        bodies = sorted(r.content.body for r in center.get_scheduled_notifications())
        assert bodies == ["daily", "future"]
        meta = NotificationMetaRepository(db_session).all()
        assert set(meta) == {action_reminder_key(daily.id), action_reminder_key(future.id)}

    def test_past_one_off_is_dropped(self, db_session, center, now_ms):
        past = _action(db_session, OnceReminder(at_ms=now_ms - 1))
        NotificationMetaRepository(db_session).set(action_reminder_key(past.id), "before-restart")
        db_session.commit()

        restored = ReminderService(db_session, center).restore_all(now=now_ms)

        assert restored == 0
        assert center.get_scheduled_notifications() == []
        assert NotificationMetaRepository(db_session).all() == {}

    def test_failure_on_one_action_does_not_stop_others(self, db_session, center, now_ms):
        _action(db_session, DailyReminder("08:00"), title="a")
        _action(db_session, DailyReminder("09:00"), title="b")
        real_schedule = center.schedule_notification
        calls = []

        def flaky(content, trigger):
            calls.append(content.body)
            if len(calls) == 1:
                raise NotificationPlatformError("first one fails")
            return real_schedule(content, trigger)

        with patch.object(center, "schedule_notification", side_effect=flaky):
            restored = ReminderService(db_session, center).restore_all(now=now_ms)

        assert restored == 1
        assert len(center.get_scheduled_notifications()) == 1
