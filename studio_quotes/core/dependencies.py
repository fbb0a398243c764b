"""Dependency providers for API handlers."""

from __future__ import annotations

from collections.abc import Generator

from sqlalchemy.orm import Session

from studio_quotes.collaborators import TaskDispatcher
from studio_quotes.core.config import Config, get_config
from studio_quotes.database.db import get_db


def get_settings() -> Config:
    """Return validated application configuration."""
    return get_config()


def get_db_session() -> Generator[Session, None, None]:
    """Yield SQLAlchemy session for dependency injection."""
    yield from get_db()


def get_task_dispatcher() -> TaskDispatcher:
    """Queue used for post-authorization follow-ups."""
    from studio_quotes.tasks.followup_tasks import CeleryTaskDispatcher

    return CeleryTaskDispatcher()
