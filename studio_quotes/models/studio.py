"""Studio (tenant) and pricing configuration models."""

from __future__ import annotations

from decimal import Decimal

from sqlalchemy import ForeignKey, Integer, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from studio_quotes.models.base import AuditMixin, Base


class Studio(Base, AuditMixin):
    __tablename__ = "studios"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    slug: Mapped[str] = mapped_column(String(120), unique=True, nullable=False)
    name: Mapped[str] = mapped_column(String(255), nullable=False)

    pricing_configuration = relationship("PricingConfiguration", back_populates="studio", uselist=False)


class PricingConfiguration(Base, AuditMixin):
    """Studio-wide pricing percentages (0-100) used by the catalog calculator."""

    __tablename__ = "pricing_configurations"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    studio_id: Mapped[int] = mapped_column(ForeignKey("studios.id", ondelete="CASCADE"), unique=True, nullable=False)
    service_margin: Mapped[Decimal] = mapped_column(Numeric(7, 4), default=Decimal("0"), nullable=False)
    product_margin: Mapped[Decimal] = mapped_column(Numeric(7, 4), default=Decimal("0"), nullable=False)
    sales_commission: Mapped[Decimal] = mapped_column(Numeric(7, 4), default=Decimal("0"), nullable=False)
    markup: Mapped[Decimal] = mapped_column(Numeric(7, 4), default=Decimal("0"), nullable=False)

    studio = relationship("Studio", back_populates="pricing_configuration")
