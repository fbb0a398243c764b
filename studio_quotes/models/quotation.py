"""Quotation and quotation item models."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal

from sqlalchemy import Boolean, DateTime, Enum, ForeignKey, Index, Integer, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from studio_quotes.models.base import AuditMixin, Base, StudioScopedMixin
from studio_quotes.models.enums import BillingType, MarginClass, PricingMode, QuotationStatus


class Quotation(Base, AuditMixin, StudioScopedMixin):
    __tablename__ = "quotations"
    __table_args__ = (
        Index("idx_quotations_studio_status", "studio_id", "status"),
        Index("idx_quotations_promise", "promise_id", "archived"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    promise_id: Mapped[int] = mapped_column(ForeignKey("promises.id", ondelete="RESTRICT"), nullable=False)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text)
    base_price: Mapped[Decimal] = mapped_column(Numeric(12, 2), default=Decimal("0"), nullable=False)
    status: Mapped[QuotationStatus] = mapped_column(Enum(QuotationStatus), default=QuotationStatus.DRAFT, nullable=False)
    archived: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    order: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    event_duration: Mapped[Decimal | None] = mapped_column(Numeric(6, 2))

    commercial_condition_id: Mapped[int | None] = mapped_column(ForeignKey("commercial_conditions.id", use_alter=True))
    pricing_mode: Mapped[PricingMode] = mapped_column(Enum(PricingMode), default=PricingMode.STANDARD, nullable=False)
    negotiated_price: Mapped[Decimal | None] = mapped_column(Numeric(12, 2))
    negotiation_original_price: Mapped[Decimal | None] = mapped_column(Numeric(12, 2))
    special_bonus: Mapped[Decimal] = mapped_column(Numeric(12, 2), default=Decimal("0"), nullable=False)
    negotiation_notes: Mapped[str | None] = mapped_column(Text)

    event_id: Mapped[int | None] = mapped_column(ForeignKey("events.id", use_alter=True))
    final_price: Mapped[Decimal | None] = mapped_column(Numeric(12, 2))
    payment_promise_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    payment_registered: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    promise = relationship("Promise", back_populates="quotations")
    items = relationship(
        "QuotationItem",
        back_populates="quotation",
        order_by="QuotationItem.order",
        cascade="all, delete-orphan",
    )
    commercial_condition = relationship("CommercialCondition", foreign_keys=[commercial_condition_id])


class QuotationItem(Base, AuditMixin):
    __tablename__ = "quotation_items"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    quotation_id: Mapped[int] = mapped_column(ForeignKey("quotations.id", ondelete="CASCADE"), nullable=False, index=True)
    catalog_item_id: Mapped[int] = mapped_column(ForeignKey("catalog_items.id", ondelete="RESTRICT"), nullable=False)
    quantity: Mapped[int] = mapped_column(Integer, default=1, nullable=False)
    is_courtesy: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    unit_price: Mapped[Decimal] = mapped_column(Numeric(12, 2), default=Decimal("0"), nullable=False)
    margin_class_snapshot: Mapped[MarginClass | None] = mapped_column(Enum(MarginClass))
    billing_type: Mapped[BillingType] = mapped_column(Enum(BillingType), default=BillingType.SERVICE, nullable=False)
    order: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    quotation = relationship("Quotation", back_populates="items")
    catalog_item = relationship("CatalogItem")
