"""Reusable and quotation-scoped commercial conditions."""

from __future__ import annotations

import logging
from decimal import Decimal

from sqlalchemy import or_, select

from studio_quotes.core.exceptions import NotFoundError, ValidationError
from studio_quotes.models import CommercialCondition
from studio_quotes.models.enums import AdvanceType
from studio_quotes.pricing.condition_resolver import CommercialTerms
from studio_quotes.services.base_service import BaseService

logger = logging.getLogger(__name__)

LEGACY_ADVANCE_TYPES = {"amount": AdvanceType.FIXED_AMOUNT}


def normalize_advance_type(value: AdvanceType | str | None) -> AdvanceType | None:
    if value is None or isinstance(value, AdvanceType):
        return value
    if value in LEGACY_ADVANCE_TYPES:
        return LEGACY_ADVANCE_TYPES[value]
    try:
        return AdvanceType(value)
    except ValueError as exc:
        raise ValidationError(f"Unknown advance type: {value!r}") from exc


class CommercialConditionService(BaseService):
    def create_condition(
        self,
        studio_id: int,
        name: str,
        discount_percentage: Decimal | None = None,
        advance_type: AdvanceType | str | None = None,
        advance_percentage: Decimal | None = None,
        advance_amount: Decimal | None = None,
        description: str | None = None,
        order: int = 0,
        quotation_id: int | None = None,
    ) -> CommercialCondition:
        """Create a reusable condition, or a temporary one when `quotation_id` is given."""
        if not name or not name.strip():
            raise ValidationError("Condition name is required")
        row = CommercialCondition(
            studio_id=studio_id,
            name=name.strip(),
            description=description,
            discount_percentage=discount_percentage,
            advance_type=normalize_advance_type(advance_type),
            advance_percentage=advance_percentage,
            advance_amount=advance_amount,
            order=order,
            is_temporary=quotation_id is not None,
            quotation_id=quotation_id,
        )
        # Rejects out-of-range discount or advance values before anything is written.
        CommercialTerms.from_condition(row)
        self.db.add(row)
        self.commit()
        logger.info(
            "condition.created",
            extra={
                "event": "condition.created",
                "studio_id": studio_id,
                "condition_id": row.id,
                "is_temporary": row.is_temporary,
            },
        )
        return row

    def create_temporary_condition(self, studio_id: int, quotation_id: int, name: str, **terms) -> CommercialCondition:
        return self.create_condition(studio_id, name, quotation_id=quotation_id, **terms)

    def list_reusable(self, studio_id: int) -> list[CommercialCondition]:
        return list(
            self.db.scalars(
                select(CommercialCondition)
                .where(CommercialCondition.studio_id == studio_id, CommercialCondition.is_temporary.is_(False))
                .order_by(CommercialCondition.order, CommercialCondition.id)
            )
        )

    def get_for_quotation(self, studio_id: int, condition_id: int, quotation_id: int) -> CommercialCondition:
        """A studio condition, or the temporary condition negotiated for this quotation."""
        row = self.db.scalar(
            select(CommercialCondition).where(
                CommercialCondition.id == condition_id,
                CommercialCondition.studio_id == studio_id,
                or_(
                    CommercialCondition.is_temporary.is_(False),
                    CommercialCondition.quotation_id == quotation_id,
                ),
            )
        )
        if row is None:
            raise NotFoundError(f"Commercial condition {condition_id} not available for quotation {quotation_id}")
        return row
