"""Structured logging helpers."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any


@dataclass(frozen=True)
class LogContext:
    """Normalized context fields expected in structured logs."""

    studio_id: str | None = None
    promise_id: str | None = None
    quotation_id: str | None = None
    event_id: str | None = None
    trace_id: str | None = None


def build_log_event(event: str, context: LogContext, **fields: Any) -> dict[str, Any]:
    """Build a normalized structured log payload."""
    payload: dict[str, Any] = {
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "event": event,
        "studio_id": context.studio_id,
        "promise_id": context.promise_id,
        "quotation_id": context.quotation_id,
        "event_id": context.event_id,
        "trace_id": context.trace_id,
    }
    payload.update(fields)
    return payload
