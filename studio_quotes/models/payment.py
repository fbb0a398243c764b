"""Payment and contract request models."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal

from sqlalchemy import DateTime, Enum, ForeignKey, Index, Integer, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from studio_quotes.models.base import AuditMixin, Base, StudioScopedMixin
from studio_quotes.models.enums import ContractRequestStatus, PaymentStatus


class Payment(Base, AuditMixin, StudioScopedMixin):
    __tablename__ = "payments"
    __table_args__ = (Index("idx_payments_studio_event", "studio_id", "event_id"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    contact_id: Mapped[int] = mapped_column(ForeignKey("contacts.id", ondelete="RESTRICT"), nullable=False)
    event_id: Mapped[int] = mapped_column(ForeignKey("events.id", ondelete="RESTRICT"), nullable=False)
    quotation_id: Mapped[int] = mapped_column(ForeignKey("quotations.id", ondelete="RESTRICT"), nullable=False)
    amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    method: Mapped[str] = mapped_column(String(80), nullable=False)
    payment_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    concept: Mapped[str | None] = mapped_column(Text)
    status: Mapped[PaymentStatus] = mapped_column(Enum(PaymentStatus), default=PaymentStatus.COMPLETED, nullable=False)


class ContractTemplate(Base, AuditMixin, StudioScopedMixin):
    __tablename__ = "contract_templates"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)


class ContractRequest(Base, AuditMixin, StudioScopedMixin):
    """A pending request to render a contract for an authorized event."""

    __tablename__ = "contract_requests"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    event_id: Mapped[int] = mapped_column(ForeignKey("events.id", ondelete="CASCADE"), nullable=False, index=True)
    template_id: Mapped[int] = mapped_column(ForeignKey("contract_templates.id", ondelete="RESTRICT"), nullable=False)
    status: Mapped[ContractRequestStatus] = mapped_column(
        Enum(ContractRequestStatus), default=ContractRequestStatus.REQUESTED, nullable=False
    )
