"""Commercial condition model module."""

from __future__ import annotations

from decimal import Decimal

from sqlalchemy import Boolean, Enum, ForeignKey, Index, Integer, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from studio_quotes.models.base import AuditMixin, Base, StudioScopedMixin
from studio_quotes.models.enums import AdvanceType


class CommercialCondition(Base, AuditMixin, StudioScopedMixin):
    """Reusable or temporary discount/advance template.

    Temporary conditions carry the id of the quotation they were negotiated for
    and are never offered as reusable templates.
    """

    __tablename__ = "commercial_conditions"
    __table_args__ = (Index("idx_conditions_studio_temporary", "studio_id", "is_temporary"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text)
    discount_percentage: Mapped[Decimal | None] = mapped_column(Numeric(5, 2))
    advance_type: Mapped[AdvanceType | None] = mapped_column(Enum(AdvanceType))
    advance_percentage: Mapped[Decimal | None] = mapped_column(Numeric(5, 2))
    advance_amount: Mapped[Decimal | None] = mapped_column(Numeric(12, 2))
    order: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    is_temporary: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    quotation_id: Mapped[int | None] = mapped_column(ForeignKey("quotations.id", ondelete="CASCADE"))
