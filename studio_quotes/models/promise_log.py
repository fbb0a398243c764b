"""Promise audit log model module."""

from __future__ import annotations

from typing import Any

from sqlalchemy import JSON, ForeignKey, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from studio_quotes.models.base import AuditMixin, Base, StudioScopedMixin


class PromiseLog(Base, AuditMixin, StudioScopedMixin):
    __tablename__ = "promise_logs"
    __table_args__ = (Index("idx_promise_logs_studio_promise", "studio_id", "promise_id"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    promise_id: Mapped[int] = mapped_column(ForeignKey("promises.id", ondelete="CASCADE"), nullable=False)
    action: Mapped[str] = mapped_column(String(80), nullable=False)
    origin: Mapped[str] = mapped_column(String(40), default="user", nullable=False)
    payload: Mapped[dict[str, Any] | None] = mapped_column(JSON)
