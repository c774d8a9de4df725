"""
SQLAlchemy ORM models
"""
from sqlalchemy import BigInteger, Boolean, Integer, SmallInteger, String, Text, Index
from sqlalchemy.orm import Mapped, mapped_column

from taskapp.infrastructure.db.session import Base


class ActionModel(Base):
    """A user task. Timestamps are epoch milliseconds."""
    __tablename__ = "actions"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    title: Mapped[str] = mapped_column(Text, nullable=False)
    list: Mapped[str | None] = mapped_column(String(16), nullable=True)  # perso/pro/NULL
    sort_index: Mapped[int] = mapped_column(BigInteger, nullable=False)
    is_done: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    created_at: Mapped[int] = mapped_column(BigInteger, nullable=False)
    updated_at: Mapped[int] = mapped_column(BigInteger, nullable=False)

    # ReminderSpec columns, only the ones of reminder_type are populated
    reminder_type: Mapped[str] = mapped_column(String(16), nullable=False, default="none")
    reminder_date: Mapped[int | None] = mapped_column(BigInteger, nullable=True)
    reminder_time: Mapped[str | None] = mapped_column(String(5), nullable=True)  # HH:MM
    reminder_weekday: Mapped[int | None] = mapped_column(SmallInteger, nullable=True)  # 1=Mon..7=Sun
    reminder_monthday: Mapped[int | None] = mapped_column(SmallInteger, nullable=True)  # 1..31

    __table_args__ = (
        Index("idx_actions_list", "list"),
        Index("idx_actions_is_done", "is_done"),
        Index("idx_actions_sort_index", "sort_index"),
    )


class SettingModel(Base):
    """String-keyed application settings"""
    __tablename__ = "settings"

    key: Mapped[str] = mapped_column(String(64), primary_key=True)
    value: Mapped[str] = mapped_column(Text, nullable=False)


class NotificationMetaModel(Base):
    """Logical reminder key -> scheduled notification handle"""
    __tablename__ = "notification_meta"

    key: Mapped[str] = mapped_column(String(128), primary_key=True)
    notification_id: Mapped[str] = mapped_column(String(64), nullable=False)
