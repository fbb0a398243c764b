"""Audit trail of actions taken on a lead."""

from __future__ import annotations

from typing import Any

from sqlalchemy import select

from studio_quotes.models import PromiseLog
from studio_quotes.services.base_service import BaseService


class PromiseLogService(BaseService):
    def log_action(
        self,
        studio_id: int,
        promise_id: int,
        action: str,
        payload: dict[str, Any] | None = None,
        origin: str = "user",
    ) -> PromiseLog:
        """Write one audit entry in its own commit."""
        row = PromiseLog(
            studio_id=studio_id,
            promise_id=promise_id,
            action=action,
            origin=origin,
            payload=payload or {},
        )
        self.db.add(row)
        self.commit()
        return row

    def list_for_promise(self, studio_id: int, promise_id: int) -> list[PromiseLog]:
        return list(
            self.db.scalars(
                select(PromiseLog)
                .where(PromiseLog.studio_id == studio_id, PromiseLog.promise_id == promise_id)
                .order_by(PromiseLog.id)
            )
        )
