"""Promise (lead) and tag models."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Index, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from studio_quotes.models.base import AuditMixin, Base, StudioScopedMixin


class Promise(Base, AuditMixin, StudioScopedMixin):
    """A prospective client opportunity moving through the promise pipeline."""

    __tablename__ = "promises"
    __table_args__ = (Index("idx_promises_studio_stage", "studio_id", "pipeline_stage_id"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    contact_id: Mapped[int | None] = mapped_column(ForeignKey("contacts.id", ondelete="RESTRICT"))
    pipeline_stage_id: Mapped[int | None] = mapped_column(ForeignKey("promise_pipeline_stages.id"))
    name: Mapped[str | None] = mapped_column(String(255))
    event_type: Mapped[str | None] = mapped_column(String(120))
    event_location: Mapped[str | None] = mapped_column(Text)
    interest_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    event_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))

    contact = relationship("Contact")
    pipeline_stage = relationship("PromisePipelineStage")
    quotations = relationship("Quotation", back_populates="promise", order_by="Quotation.order")
    tags = relationship("PromiseTag", secondary="promise_tag_links")


class PromiseTag(Base, AuditMixin, StudioScopedMixin):
    __tablename__ = "promise_tags"
    __table_args__ = (UniqueConstraint("studio_id", "slug", name="uq_promise_tags_studio_slug"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    slug: Mapped[str] = mapped_column(String(80), nullable=False)
    name: Mapped[str] = mapped_column(String(120), nullable=False)


class PromiseTagLink(Base):
    __tablename__ = "promise_tag_links"

    promise_id: Mapped[int] = mapped_column(ForeignKey("promises.id", ondelete="CASCADE"), primary_key=True)
    tag_id: Mapped[int] = mapped_column(ForeignKey("promise_tags.id", ondelete="CASCADE"), primary_key=True)
