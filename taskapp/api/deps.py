"""
FastAPI dependencies (DB session, notification center, response handler)
"""
from functools import lru_cache

from taskapp.infrastructure.db.session import get_db as _get_db, get_session_factory
from taskapp.infrastructure.notifications.center import NotificationCenter, get_notification_center
from taskapp.application.notification_responses import ResponseHandler


# Re-export get_db for routers
get_db = _get_db


def get_center() -> NotificationCenter:
    """
    Process-wide notification center

    Usage:
        @router.get("/notifications")
        def list_presented(center: NotificationCenter = Depends(get_center)):
            ...
    """
    return get_notification_center()


@lru_cache
def get_response_handler() -> ResponseHandler:
    """One handler per process: it remembers the last handled response."""
    return ResponseHandler(get_notification_center(), get_session_factory())
