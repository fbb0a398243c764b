"""Event model module."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import DateTime, Enum, ForeignKey, Index, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from studio_quotes.models.base import AuditMixin, Base, StudioScopedMixin
from studio_quotes.models.enums import EventStatus


class Event(Base, AuditMixin, StudioScopedMixin):
    __tablename__ = "events"
    __table_args__ = (
        UniqueConstraint("quotation_id", name="uq_events_quotation"),
        Index("idx_events_studio_date", "studio_id", "event_date"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    contact_id: Mapped[int] = mapped_column(ForeignKey("contacts.id", ondelete="RESTRICT"), nullable=False)
    promise_id: Mapped[int] = mapped_column(ForeignKey("promises.id", ondelete="RESTRICT"), nullable=False)
    quotation_id: Mapped[int] = mapped_column(ForeignKey("quotations.id", ondelete="RESTRICT"), nullable=False)
    stage_id: Mapped[int] = mapped_column(ForeignKey("event_pipeline_stages.id"), nullable=False)
    event_type: Mapped[str | None] = mapped_column(String(120))
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    address: Mapped[str | None] = mapped_column(Text)
    event_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    status: Mapped[EventStatus] = mapped_column(Enum(EventStatus), default=EventStatus.ACTIVE, nullable=False)

    stage = relationship("EventPipelineStage")
