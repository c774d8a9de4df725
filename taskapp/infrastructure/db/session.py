"""
Database session management (SQLAlchemy)
"""
import logging
import threading

from sqlalchemy import create_engine, text
from sqlalchemy.orm import DeclarativeBase, sessionmaker, Session

from taskapp.config import get_settings

logger = logging.getLogger(__name__)


class Base(DeclarativeBase):
    """
    SQLAlchemy declarative base for all ORM models
    """
    pass


# Singleton engine and session factory
_engine = None
_SessionLocal = None

# init_db() state: concurrent callers converge on one initialisation
_init_lock = threading.Lock()
_db_ready = False


def get_engine():
    """Get or create SQLAlchemy engine (singleton)"""
    global _engine
    if _engine is None:
        settings = get_settings()
        url = settings.get_sqlalchemy_url()
        connect_args = {}
        if url.startswith("sqlite"):
            # API threadpool and scheduler threads share the engine
            connect_args["check_same_thread"] = False
        _engine = create_engine(url, pool_pre_ping=True, connect_args=connect_args)
    return _engine


def get_session_factory():
    """Get or create session factory (singleton)"""
    global _SessionLocal
    if _SessionLocal is None:
        engine = get_engine()
        _SessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False)
    return _SessionLocal


def init_db():
    """
    Apply migrations and seed default settings, once per process.

    Returns the session factory. Safe to call from several threads: the
    first caller does the work, the others wait for it and reuse the result.
    A failed initialisation leaves the store "not ready" so a later call
    can retry.
    """
    global _db_ready
    if _db_ready:
        return get_session_factory()

    with _init_lock:
        if _db_ready:
            return get_session_factory()

        from taskapp.infrastructure.db.migrations import upgrade_to_head
        from taskapp.infrastructure.db.repositories import SettingsRepository

        settings = get_settings()
        upgrade_to_head(settings.get_sqlalchemy_url())

        SessionLocal = get_session_factory()
        db = SessionLocal()
        try:
            SettingsRepository(db).seed_defaults()
            db.commit()
        finally:
            db.close()

        _db_ready = True
        logger.info("Database initialised")

    return get_session_factory()


def is_db_ready() -> bool:
    """True once init_db() has completed."""
    return _db_ready


def get_db() -> Session:
    """
    Dependency for FastAPI - creates a session and closes it afterwards

    Usage:
        @router.get("/actions")
        def list_actions(db: Session = Depends(get_db)):
            ...
    """
    SessionLocal = get_session_factory()
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def check_db_connection() -> None:
    """
    Health check - verifies the database answers a trivial query

    Raises:
        sqlalchemy.exc.OperationalError: if the database is unreachable
    """
    with get_engine().connect() as conn:
        conn.execute(text("SELECT 1"))
