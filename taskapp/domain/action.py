"""Action domain - lists and field validation for user tasks"""
from enum import Enum


class ActionList(str, Enum):
    PERSO = "perso"
    PRO = "pro"

    @property
    def display_name(self) -> str:
        return "Perso" if self is ActionList.PERSO else "Pro"


# Lists that get a daily digest notification
SUPPORTED_LISTS = (ActionList.PERSO, ActionList.PRO)


class ActionValidationError(ValueError):
    pass


def parse_list(value: str | None) -> ActionList | None:
    """'perso' / 'pro' -> ActionList, empty -> None (no list)."""
    if value is None or value == "":
        return None
    try:
        return ActionList(value)
    except ValueError:
        raise ActionValidationError(f"Unknown list: {value}")


def normalize_title(title: str) -> str:
    title = (title or "").strip()
    if not title:
        raise ActionValidationError("Title is required")
    return title
