"""
External collaborators reached after an authorization commits.

The core never calls these inline: follow-ups are handed to a TaskDispatcher
and executed by queue workers through the task registry. The logging
implementations are the defaults until a deployment registers real ones.
"""

from __future__ import annotations

import logging
from typing import Any, Protocol

logger = logging.getLogger(__name__)


class NotificationSink(Protocol):
    def notify(self, studio_id: int, event_type: str, payload: dict[str, Any]) -> None: ...


class CalendarSyncRequester(Protocol):
    def request_sync(self, event_id: int) -> None: ...


class ContractGenerationRequester(Protocol):
    def request_contract(self, event_id: int, template_id: int) -> None: ...


class TaskDispatcher(Protocol):
    def dispatch(self, task_name: str, **kwargs: Any) -> str | None:
        """Queue a follow-up task. Returns the queue's task id when it has one."""
        ...


class LoggingNotificationSink:
    def notify(self, studio_id: int, event_type: str, payload: dict[str, Any]) -> None:
        logger.info(
            "notification.sent",
            extra={
                "event": "notification.sent",
                "studio_id": studio_id,
                "notification_type": event_type,
                "payload": payload,
            },
        )


class LoggingCalendarSyncRequester:
    def request_sync(self, event_id: int) -> None:
        logger.info("calendar.sync_requested", extra={"event": "calendar.sync_requested", "event_id": event_id})


class LoggingContractGenerationRequester:
    def request_contract(self, event_id: int, template_id: int) -> None:
        logger.info(
            "contract.generation_requested",
            extra={"event": "contract.generation_requested", "event_id": event_id, "template_id": template_id},
        )
