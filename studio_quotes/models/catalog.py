"""Catalog category and item models."""

from __future__ import annotations

from decimal import Decimal

from sqlalchemy import Enum, ForeignKey, Index, Integer, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from studio_quotes.models.base import AuditMixin, Base, StudioScopedMixin
from studio_quotes.models.enums import BillingType, MarginClass


class CatalogCategory(Base, AuditMixin, StudioScopedMixin):
    __tablename__ = "catalog_categories"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    margin_class: Mapped[MarginClass] = mapped_column(Enum(MarginClass), default=MarginClass.SERVICE, nullable=False)
    order: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    items = relationship("CatalogItem", back_populates="category", order_by="CatalogItem.order")


class CatalogItem(Base, AuditMixin, StudioScopedMixin):
    __tablename__ = "catalog_items"
    __table_args__ = (Index("idx_catalog_items_studio_category", "studio_id", "category_id"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    category_id: Mapped[int] = mapped_column(ForeignKey("catalog_categories.id", ondelete="RESTRICT"), nullable=False)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    cost: Mapped[Decimal] = mapped_column(Numeric(12, 2), default=Decimal("0"), nullable=False)
    expense: Mapped[Decimal] = mapped_column(Numeric(12, 2), default=Decimal("0"), nullable=False)
    billing_type: Mapped[BillingType] = mapped_column(Enum(BillingType), default=BillingType.SERVICE, nullable=False)
    order: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    category = relationship("CatalogCategory", back_populates="items")
