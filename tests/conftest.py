"""
Pytest fixtures for testing
"""
from datetime import datetime
from zoneinfo import ZoneInfo

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import StaticPool

from taskapp.infrastructure.db import models  # noqa: F401  (registers tables)
from taskapp.infrastructure.db.session import Base
from taskapp.infrastructure.notifications.center import NotificationCenter
from taskapp.utils.clock import to_ms

PARIS = ZoneInfo("Europe/Paris")


@pytest.fixture
def db_engine():
    """In-memory SQLite engine shared by every session of a test (one connection)"""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(db_engine):
    return sessionmaker(bind=db_engine, autoflush=False, autocommit=False)


@pytest.fixture
def db_session(session_factory) -> Session:
    """Create database session for tests"""
    session = session_factory()
    try:
        yield session
    finally:
        session.rollback()
        session.close()


@pytest.fixture
def center():
    """
    Notification center whose scheduler is never started: jobs stay pending,
    tests fire them with center.present(handle).
    """
    return NotificationCenter(tz=PARIS)


@pytest.fixture
def now():
    """Tuesday 10 March 2026, 09:00 Paris time"""
    return datetime(2026, 3, 10, 9, 0, tzinfo=PARIS)


@pytest.fixture
def now_ms(now):
    return to_ms(now)
