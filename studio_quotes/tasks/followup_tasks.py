"""Queue tasks for the side effects that follow a committed authorization."""

from __future__ import annotations

import logging
import time
from collections import deque
import uuid
from datetime import datetime, timezone
from typing import Any

from studio_quotes.core.config import get_config
from studio_quotes.core.exceptions import TransientCollaboratorError
from studio_quotes.tasks.celery_app import celery_app
from studio_quotes.tasks.hooks import after_task, before_task
from studio_quotes.tasks.registry import (
    GENERATE_CONTRACT,
    NOTIFY_QUOTE_APPROVED,
    SYNC_EVENT_CALENDAR,
    TaskRegistry,
    default_registry,
)

logger = logging.getLogger(__name__)

DEAD_LETTER_LIMIT = 1000

dead_letter_queue: deque[dict[str, Any]] = deque(maxlen=DEAD_LETTER_LIMIT)


def _serialize_error(exc: Exception) -> dict[str, str]:
    return {
        "type": exc.__class__.__name__,
        "message": str(exc),
    }


def execute_registered_task(
    task_key: str,
    studio_id: int,
    payload: dict[str, Any] | None = None,
    max_retries: int | None = None,
    base_backoff_seconds: float = 0.25,
    registry: TaskRegistry | None = None,
    trace_id: str | None = None,
    dead_letters: deque[dict[str, Any]] | None = None,
) -> dict[str, Any]:
    """Run a registered follow-up with bounded retries and dead-letter capture.

    Collaborator failures never propagate: after the last retry the task is
    recorded in `dead_letters` (the bounded module queue by default) and
    reported as failed.
    """
    registry = registry or default_registry
    dead_letters = dead_letter_queue if dead_letters is None else dead_letters
    max_retries = get_config().TASK_MAX_RETRIES if max_retries is None else max_retries
    context = {
        "studio_id": studio_id,
        "trace_id": trace_id or uuid.uuid4().hex,
        "payload": payload or {},
    }
    logger.info("task.start", extra=before_task(task_key=task_key, context=context))

    attempt_used = 0
    last_error: dict[str, str] | None = None

    for attempt in range(max_retries + 1):
        attempt_used = attempt
        try:
            executor = registry.get(task_key)
            executor({"studio_id": studio_id, **(payload or {})})
            logger.info(
                "task.finish",
                extra=after_task(task_key=task_key, context=context, status="succeeded", attempts=attempt + 1),
            )
            return {
                "task_key": task_key,
                "status": "succeeded",
                "retry_count": attempt,
                "dead_lettered": False,
            }
        except KeyError as exc:
            last_error = _serialize_error(exc)
            break
        except Exception as exc:
            last_error = _serialize_error(TransientCollaboratorError(f"{task_key}: {exc}"))
            if attempt < max_retries:
                delay = max(0.0, base_backoff_seconds) * (2**attempt)
                if delay > 0:
                    time.sleep(delay)
                continue
            break

    dead_entry = {
        "task_key": task_key,
        "studio_id": studio_id,
        "payload": payload or {},
        "retry_count": attempt_used,
        "error_payload": last_error or {"message": "unknown error"},
        "failed_at": datetime.now(timezone.utc).isoformat(),
    }
    dead_letters.append(dead_entry)
    logger.error(
        "task.failed",
        extra=after_task(task_key=task_key, context=context, status="failed", attempts=attempt_used + 1),
    )
    return {
        "task_key": task_key,
        "status": "failed",
        "retry_count": attempt_used,
        "dead_lettered": True,
        "error_payload": last_error,
    }


@celery_app.task(name=NOTIFY_QUOTE_APPROVED)
def notify_quote_approved(studio_id: int, trace_id: str | None = None, **payload: Any) -> dict[str, Any]:
    return execute_registered_task(NOTIFY_QUOTE_APPROVED, studio_id, payload, trace_id=trace_id)


@celery_app.task(name=SYNC_EVENT_CALENDAR)
def sync_event_calendar(studio_id: int, trace_id: str | None = None, **payload: Any) -> dict[str, Any]:
    return execute_registered_task(SYNC_EVENT_CALENDAR, studio_id, payload, trace_id=trace_id)


@celery_app.task(name=GENERATE_CONTRACT)
def generate_contract(studio_id: int, trace_id: str | None = None, **payload: Any) -> dict[str, Any]:
    return execute_registered_task(GENERATE_CONTRACT, studio_id, payload, trace_id=trace_id)


FOLLOW_UP_TASKS = {
    NOTIFY_QUOTE_APPROVED: notify_quote_approved,
    SYNC_EVENT_CALENDAR: sync_event_calendar,
    GENERATE_CONTRACT: generate_contract,
}


class CeleryTaskDispatcher:
    """Queue follow-ups on the Celery broker."""

    def dispatch(self, task_name: str, **kwargs: Any) -> str | None:
        try:
            task = FOLLOW_UP_TASKS[task_name]
        except KeyError as exc:
            raise TransientCollaboratorError(f"Unknown follow-up task: {task_name}") from exc
        result = task.apply_async(kwargs=kwargs)
        return getattr(result, "id", None)
