"""Settings keys and defaults"""
from enum import Enum

from taskapp.domain.action import ActionList


class SettingsKey(str, Enum):
    PERSO_REMINDER_TIME = "perso_reminder_time"
    PRO_REMINDER_TIME = "pro_reminder_time"
    NOTIFICATION_ACTION_DEBUG_FEEDBACK = "notification_action_debug_feedback"


DEFAULT_REMINDER_TIMES = {
    ActionList.PERSO: "08:00",
    ActionList.PRO: "13:00",
}

# Seeded on first start (insert-if-missing)
DEFAULT_SETTINGS = {
    SettingsKey.PERSO_REMINDER_TIME: DEFAULT_REMINDER_TIMES[ActionList.PERSO],
    SettingsKey.PRO_REMINDER_TIME: DEFAULT_REMINDER_TIMES[ActionList.PRO],
}


def reminder_time_key(list_value: ActionList) -> SettingsKey:
    if list_value is ActionList.PERSO:
        return SettingsKey.PERSO_REMINDER_TIME
    return SettingsKey.PRO_REMINDER_TIME
