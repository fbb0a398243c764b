"""Lifecycle hooks for queue task execution."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from studio_quotes.core.logging import LogContext, build_log_event


def _str_or_none(value: Any) -> str | None:
    return str(value) if value is not None else None


def _context(context: dict[str, Any]) -> LogContext:
    payload = context.get("payload") or {}
    return LogContext(
        studio_id=_str_or_none(context.get("studio_id")),
        promise_id=_str_or_none(payload.get("promise_id")),
        quotation_id=_str_or_none(payload.get("quotation_id")),
        event_id=_str_or_none(payload.get("event_id")),
        trace_id=context.get("trace_id"),
    )


def before_task(task_key: str, context: dict[str, Any]) -> dict[str, Any]:
    """Build pre-task log payload."""
    return build_log_event(event="task.start", context=_context(context), task_key=task_key)


def after_task(task_key: str, context: dict[str, Any], status: str, attempts: int = 1) -> dict[str, Any]:
    """Build post-task log payload."""
    return build_log_event(
        event="task.finish",
        context=_context(context),
        task_key=task_key,
        status=status,
        attempts=attempts,
        finished_at=datetime.now(timezone.utc).isoformat(),
    )
