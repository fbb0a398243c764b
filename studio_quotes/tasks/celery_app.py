"""Celery application bootstrap."""

from __future__ import annotations

from celery import Celery

from studio_quotes.core.config import get_config

config = get_config()

celery_app = Celery("studio_quotes", broker=config.CELERY_BROKER_URL, backend=config.CELERY_RESULT_BACKEND)
celery_app.conf.update(
    task_serializer="json",
    result_serializer="json",
    accept_content=["json"],
    timezone="UTC",
    enable_utc=True,
    task_track_started=True,
    task_soft_time_limit=config.COLLABORATOR_TIMEOUT_SECONDS,
    task_time_limit=config.COLLABORATOR_TIMEOUT_SECONDS * 2,
)

# Local/dev convenience: run tasks synchronously when requested.
if config.CELERY_TASK_ALWAYS_EAGER:
    celery_app.conf.task_always_eager = True
