"""
Tests for the in-process notification center
"""
from datetime import datetime
from unittest.mock import Mock
from zoneinfo import ZoneInfo

import pytest
from apscheduler.triggers.cron import CronTrigger
from apscheduler.triggers.date import DateTrigger as SchedulerDateTrigger

from taskapp.domain.trigger import DailyTrigger, DateTrigger, MonthlyTrigger, WeeklyTrigger
from taskapp.infrastructure.notifications.center import (
    SNOOZE_10M,
    SNOOZE_MORE,
    NotificationContent,
    UnknownNotificationError,
    to_scheduler_trigger,
)

PARIS = ZoneInfo("Europe/Paris")


def _content(category="action_reminder"):
    return NotificationContent(title="Reminder", body="Water plants", data={"actionId": 1}, category=category)


class TestSchedulerTriggers:
    def test_date(self):
        trigger = to_scheduler_trigger(DateTrigger(at=datetime(2026, 3, 10, 9, 0, tzinfo=PARIS)), PARIS)
        assert isinstance(trigger, SchedulerDateTrigger)

    def test_weekly_uses_day_of_week(self):
        trigger = to_scheduler_trigger(WeeklyTrigger(weekday=2, hour=8, minute=0), PARIS)
        assert isinstance(trigger, CronTrigger)
        fields = {f.name: str(f) for f in trigger.fields}
        assert fields["day_of_week"] == "2"
        assert fields["hour"] == "8"
        assert fields["minute"] == "0"

    def test_daily_and_monthly(self):
        daily = {f.name: str(f) for f in to_scheduler_trigger(DailyTrigger(7, 30), PARIS).fields}
        monthly = {f.name: str(f) for f in to_scheduler_trigger(MonthlyTrigger(15, 13, 0), PARIS).fields}
        assert (daily["hour"], daily["minute"], daily["day"]) == ("7", "30", "*")
        assert (monthly["day"], monthly["hour"]) == ("15", "13")


class TestScheduling:
    def test_schedule_and_cancel(self, center):
        handle = center.schedule_notification(_content(), DailyTrigger(8, 0))
        assert [r.identifier for r in center.get_scheduled_notifications()] == [handle]

        center.cancel_scheduled_notification(handle)
        assert center.get_scheduled_notifications() == []

    def test_cancel_unknown_handle(self, center):
        with pytest.raises(UnknownNotificationError):
            center.cancel_scheduled_notification("nope")

    def test_category_actions(self):
        identifiers = [a.identifier for a in _content().actions]
        assert identifiers == ["SNOOZE_10M", "SNOOZE_1H", "SNOOZE_MORE"]
        assert _content(category=None).actions == ()


class TestPresentation:
    def test_one_shot_leaves_schedule_when_presented(self, center, now):
        handle = center.schedule_notification(_content(), DateTrigger(at=now))

        presented = center.present(handle)

        assert presented.identifier == handle
        assert center.get_scheduled_notifications() == []
        assert [p.identifier for p in center.get_presented_notifications()] == [handle]

    def test_recurring_stays_scheduled(self, center):
        handle = center.schedule_notification(_content(), DailyTrigger(8, 0))
        center.present(handle)
        assert [r.identifier for r in center.get_scheduled_notifications()] == [handle]

    def test_listeners_are_called_and_isolated(self, center, now):
        failing = Mock(side_effect=RuntimeError("listener bug"))
        listener = Mock()
        center.add_delivery_listener(failing)
        center.add_delivery_listener(listener)
        handle = center.schedule_notification(_content(), DateTrigger(at=now))

        presented = center.present(handle)

        failing.assert_called_once_with(presented)
        listener.assert_called_once_with(presented)

    def test_present_cancelled_notification(self, center):
        assert center.present("cancelled") is None

    def test_dismiss(self, center, now):
        handle = center.schedule_notification(_content(), DateTrigger(at=now))
        center.present(handle)

        center.dismiss_notification(handle)

        assert center.get_presented_notifications() == []
        with pytest.raises(UnknownNotificationError):
            center.dismiss_notification(handle)


class TestResponses:
    def test_record_and_clear(self, center, now):
        handle = center.schedule_notification(_content(), DateTrigger(at=now))
        center.present(handle)

        response = center.record_response(handle, SNOOZE_10M)

        assert response.key == f"{handle}:SNOOZE_10M"
        assert response.content.body == "Water plants"
        assert response.trigger == DateTrigger(at=now)
        assert center.get_last_response() is response

        center.record_response(handle, SNOOZE_MORE)
        assert center.get_last_response().action_identifier == SNOOZE_MORE

        center.clear_last_response()
        assert center.get_last_response() is None

    def test_response_to_unknown_notification(self, center):
        with pytest.raises(UnknownNotificationError):
            center.record_response("nope", SNOOZE_10M)


class TestPermissions:
    def test_denied_without_asking_again(self, center):
        center.set_permissions(granted=False, can_ask_again=False)
        assert center.ensure_permission() is False

    def test_granted(self, center):
        assert center.ensure_permission() is True
        assert center.get_permissions().granted is True
