"""Alembic migration helpers."""

from __future__ import annotations

from pathlib import Path

from alembic import command
from alembic.config import Config

# Project root (holds the migrations/ directory)
BASE_DIR = Path(__file__).resolve().parents[3]


def _build_alembic_config(database_url: str) -> Config:
    config = Config()
    config.set_main_option("script_location", str(BASE_DIR / "migrations"))
    config.set_main_option("sqlalchemy.url", database_url)
    return config


def upgrade_to_head(database_url: str) -> None:
    """Apply migrations to the latest revision."""
    command.upgrade(_build_alembic_config(database_url), "head")
