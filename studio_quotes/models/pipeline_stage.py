"""Pipeline stage models for promises (leads) and events."""

from __future__ import annotations

from sqlalchemy import Boolean, Index, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from studio_quotes.models.base import AuditMixin, Base, StudioScopedMixin


class PromisePipelineStage(Base, AuditMixin, StudioScopedMixin):
    __tablename__ = "promise_pipeline_stages"
    __table_args__ = (
        UniqueConstraint("studio_id", "slug", name="uq_promise_stage_studio_slug"),
        Index("idx_promise_stage_studio_order", "studio_id", "order"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    slug: Mapped[str] = mapped_column(String(80), nullable=False)
    name: Mapped[str] = mapped_column(String(120), nullable=False)
    order: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)


class EventPipelineStage(Base, AuditMixin, StudioScopedMixin):
    __tablename__ = "event_pipeline_stages"
    __table_args__ = (Index("idx_event_stage_studio_order", "studio_id", "order"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    slug: Mapped[str] = mapped_column(String(80), nullable=False)
    name: Mapped[str] = mapped_column(String(120), nullable=False)
    order: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
