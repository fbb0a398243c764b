"""Task registry mapping follow-up task keys to collaborator calls."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

from studio_quotes.collaborators import (
    CalendarSyncRequester,
    ContractGenerationRequester,
    LoggingCalendarSyncRequester,
    LoggingContractGenerationRequester,
    LoggingNotificationSink,
    NotificationSink,
)
from studio_quotes.core.config import get_config
from studio_quotes.tasks.dedup import InMemoryDedupStore

TaskExecutor = Callable[[dict[str, Any]], None]

NOTIFY_QUOTE_APPROVED = "followups.notify_quote_approved"
SYNC_EVENT_CALENDAR = "followups.sync_event_calendar"
GENERATE_CONTRACT = "followups.generate_contract"


class TaskRegistry:
    """Mutable task registry for post-authorization follow-ups."""

    def __init__(self) -> None:
        self._executors: dict[str, TaskExecutor] = {}

    def register(self, task_key: str, executor: TaskExecutor) -> None:
        self._executors[task_key] = executor

    def get(self, task_key: str) -> TaskExecutor:
        if task_key not in self._executors:
            raise KeyError(f"Unknown task key: {task_key}")
        return self._executors[task_key]

    def keys(self) -> list[str]:
        return sorted(self._executors.keys())


def build_default_registry(
    notifications: NotificationSink | None = None,
    calendar: CalendarSyncRequester | None = None,
    contracts: ContractGenerationRequester | None = None,
    dedup_store: InMemoryDedupStore | None = None,
) -> TaskRegistry:
    notifications = notifications or LoggingNotificationSink()
    calendar = calendar or LoggingCalendarSyncRequester()
    contracts = contracts or LoggingContractGenerationRequester()
    dedup_store = dedup_store or InMemoryDedupStore(get_config().NOTIFICATION_DEDUP_TTL_SECONDS)

    def notify_quote_approved(payload: dict[str, Any]) -> None:
        # A retried or re-dispatched task must not notify the studio twice.
        key = f"quote_approved:{payload['studio_id']}:{payload['quotation_id']}"
        if not dedup_store.claim(key):
            return
        try:
            notifications.notify(payload["studio_id"], "quote_approved", payload)
        except Exception:
            dedup_store.release(key)
            raise

    def sync_event_calendar(payload: dict[str, Any]) -> None:
        calendar.request_sync(payload["event_id"])

    def generate_contract(payload: dict[str, Any]) -> None:
        contracts.request_contract(payload["event_id"], payload["template_id"])

    registry = TaskRegistry()
    registry.register(NOTIFY_QUOTE_APPROVED, notify_quote_approved)
    registry.register(SYNC_EVENT_CALENDAR, sync_event_calendar)
    registry.register(GENERATE_CONTRACT, generate_contract)
    return registry


default_registry = build_default_registry()
