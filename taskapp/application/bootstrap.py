"""
Start-up and shutdown of the notification side of the app.

Start-up:
  - initialise the database (migrations + default settings)
  - re-arm list digests whenever one is presented
  - start the notification center
  - restore action reminders and list digests (scheduled jobs live in memory)
"""
import logging

from sqlalchemy.exc import SQLAlchemyError

from taskapp.infrastructure.db.session import init_db
from taskapp.infrastructure.notifications.center import (
    NotificationCenter,
    NotificationPlatformError,
    PresentedNotification,
)
from taskapp.application.list_digest import LIST_DIGEST_TYPE, ListDigestService
from taskapp.application.reminders import ReminderError, ReminderService

logger = logging.getLogger(__name__)


def make_digest_rearm_listener(session_factory, center: NotificationCenter):
    """Delivery listener: a presented digest schedules tomorrow's."""

    def _rearm(presented: PresentedNotification) -> None:
        if presented.request.content.data.get("type") != LIST_DIGEST_TYPE:
            return
        db = session_factory()
        try:
            ListDigestService(db, center).refresh()
        except (ReminderError, NotificationPlatformError, SQLAlchemyError):
            logger.exception("Unable to re-arm list digests")
        finally:
            db.close()

    return _rearm


def restore_notifications(session_factory, center: NotificationCenter) -> None:
    db = session_factory()
    try:
        ReminderService(db, center).restore_all()
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Unable to restore action reminders")

    try:
        ListDigestService(db, center).refresh()
    except (ReminderError, NotificationPlatformError, SQLAlchemyError):
        db.rollback()
        logger.exception("Unable to schedule list digests")
    finally:
        db.close()


def start_notifications(center: NotificationCenter):
    """Run the whole start-up sequence; returns the session factory."""
    session_factory = init_db()
    center.add_delivery_listener(make_digest_rearm_listener(session_factory, center))
    center.start()
    restore_notifications(session_factory, center)
    return session_factory


def stop_notifications(center: NotificationCenter) -> None:
    center.shutdown()
