"""Quotation lifecycle before authorization: pricing snapshots and negotiation."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from decimal import Decimal

from sqlalchemy import func, select
from sqlalchemy.orm import selectinload

from studio_quotes.core.exceptions import ConflictError, NotFoundError, ValidationError
from studio_quotes.models import CommercialCondition, Promise, Quotation, QuotationItem
from studio_quotes.models.enums import MarginClass, PricingMode, QuotationStatus
from studio_quotes.pricing.catalog_calculator import CatalogPriceResult, PricedLine, effective_quantity
from studio_quotes.pricing.condition_resolver import CommercialTerms, ConditionBreakdown, resolve_condition
from studio_quotes.pricing.margin import (
    FinancialHealth,
    MarginCheck,
    ProfitSummary,
    financial_health,
    summarize_profit,
    validate_negotiated_margin,
)
from studio_quotes.pricing.money import ZERO, round_money
from studio_quotes.pricing.negotiation_ledger import NegotiationLedger
from studio_quotes.services.base_service import BaseService
from studio_quotes.services.catalog_service import CatalogService
from studio_quotes.services.commercial_condition_service import CommercialConditionService

logger = logging.getLogger(__name__)


def breakdown_for(quotation: Quotation, condition: CommercialCondition | None = None) -> ConditionBreakdown:
    """Resolve what the client pays for a quotation under a condition.

    Every caller that shows or checks an amount goes through here, so display
    and authorization always agree.
    """
    terms = CommercialTerms.from_condition(condition) if condition is not None else None
    negotiated = quotation.pricing_mode == PricingMode.NEGOTIATED
    return resolve_condition(
        quotation.base_price,
        terms,
        mode=quotation.pricing_mode,
        negotiated_price=quotation.negotiated_price if negotiated else None,
        original_price=quotation.negotiation_original_price if negotiated else None,
    )


def priced_lines(quotation: Quotation) -> tuple[PricedLine, ...]:
    """Rebuild priced lines from the unit-price snapshots stored on the items."""
    lines = []
    for item in quotation.items:
        qty = effective_quantity(item.quantity, item.billing_type, quotation.event_duration)
        catalog_item = item.catalog_item
        lines.append(
            PricedLine(
                item_id=item.catalog_item_id,
                quantity=item.quantity,
                unit_price=item.unit_price,
                line_total=round_money(item.unit_price * qty),
                margin_class=item.margin_class_snapshot or MarginClass.SERVICE,
                billing_type=item.billing_type,
                effective_quantity=qty,
                unit_cost=catalog_item.cost if catalog_item is not None else ZERO,
                unit_expense=catalog_item.expense if catalog_item is not None else ZERO,
            )
        )
    return tuple(lines)


class QuotationService(BaseService):
    def get_quotation(self, studio_id: int, quotation_id: int) -> Quotation:
        row = self.db.scalar(
            select(Quotation)
            .where(Quotation.id == quotation_id, Quotation.studio_id == studio_id)
            .options(selectinload(Quotation.items))
        )
        if row is None:
            raise NotFoundError(f"Quotation {quotation_id} not found")
        return row

    def create_quotation(
        self,
        studio_id: int,
        promise_id: int,
        name: str,
        selection: Mapping[int, int],
        event_duration: Decimal | None = None,
        description: str | None = None,
    ) -> Quotation:
        promise = self.db.scalar(select(Promise).where(Promise.id == promise_id, Promise.studio_id == studio_id))
        if promise is None:
            raise NotFoundError(f"Lead {promise_id} not found")
        position = self.db.scalar(select(func.count(Quotation.id)).where(Quotation.promise_id == promise_id)) or 0

        quotation = Quotation(
            studio_id=studio_id,
            promise_id=promise_id,
            name=name,
            description=description,
            event_duration=event_duration,
            order=position,
            base_price=ZERO,
        )
        self.db.add(quotation)
        result = CatalogService(self.db).price_selection(studio_id, selection, event_duration)
        self._apply_snapshots(quotation, result, replace=True)
        self.commit()
        logger.info(
            "quotation.created",
            extra={
                "event": "quotation.created",
                "studio_id": studio_id,
                "promise_id": promise_id,
                "quotation_id": quotation.id,
                "base_price": str(quotation.base_price),
            },
        )
        return quotation

    def recalculate_prices(self, studio_id: int, quotation_id: int) -> CatalogPriceResult:
        """Re-price a draft's items against the current catalog and configuration."""
        quotation = self._get_draft(studio_id, quotation_id)
        selection = {item.catalog_item_id: item.quantity for item in quotation.items}
        result = CatalogService(self.db).price_selection(studio_id, selection, quotation.event_duration)
        self._apply_snapshots(quotation, result)
        self.commit()
        return result

    def build_ledger(self, quotation: Quotation) -> NegotiationLedger:
        negotiated = quotation.pricing_mode == PricingMode.NEGOTIATED
        return NegotiationLedger(
            priced_lines(quotation),
            courtesy_item_ids=[item.catalog_item_id for item in quotation.items if item.is_courtesy],
            special_bonus=quotation.special_bonus,
            custom_price=quotation.negotiated_price if negotiated else None,
        )

    def apply_negotiation(
        self,
        studio_id: int,
        quotation_id: int,
        courtesy_item_ids: Iterable[int] = (),
        special_bonus: Decimal = ZERO,
        custom_price: Decimal | None = None,
        notes: str | None = None,
        condition_id: int | None = None,
    ) -> Quotation:
        """Freeze a negotiation onto a draft quotation and switch it to negotiated mode."""
        quotation = self._get_draft(studio_id, quotation_id)
        ledger = NegotiationLedger(
            priced_lines(quotation),
            courtesy_item_ids=courtesy_item_ids,
            special_bonus=special_bonus,
            custom_price=custom_price,
        )
        if condition_id is not None:
            condition = CommercialConditionService(self.db).get_for_quotation(studio_id, condition_id, quotation_id)
            quotation.commercial_condition_id = condition.id

        for item in quotation.items:
            item.is_courtesy = ledger.is_courtesy(item.catalog_item_id)
        quotation.special_bonus = ledger.special_bonus
        quotation.negotiation_original_price = quotation.base_price
        quotation.negotiated_price = ledger.freeze()
        quotation.negotiation_notes = notes
        quotation.pricing_mode = PricingMode.NEGOTIATED
        self.commit()
        logger.info(
            "quotation.negotiated",
            extra={
                "event": "quotation.negotiated",
                "studio_id": studio_id,
                "quotation_id": quotation_id,
                "negotiated_price": str(quotation.negotiated_price),
                "courtesy_count": len(ledger.courtesy_item_ids),
            },
        )
        return quotation

    def clear_negotiation(self, studio_id: int, quotation_id: int) -> Quotation:
        quotation = self._get_draft(studio_id, quotation_id)
        for item in quotation.items:
            item.is_courtesy = False
        quotation.special_bonus = ZERO
        quotation.negotiated_price = None
        quotation.negotiation_original_price = None
        quotation.pricing_mode = PricingMode.STANDARD
        self.commit()
        return quotation

    def breakdown(self, studio_id: int, quotation_id: int, condition_id: int | None = None) -> ConditionBreakdown:
        quotation = self.get_quotation(studio_id, quotation_id)
        condition = None
        if condition_id is not None:
            condition = CommercialConditionService(self.db).get_for_quotation(studio_id, condition_id, quotation_id)
        return breakdown_for(quotation, condition)

    def assess_price(
        self,
        studio_id: int,
        quotation_id: int,
        price: Decimal,
    ) -> tuple[ProfitSummary, MarginCheck, FinancialHealth]:
        """Profit, margin level and financial health of charging `price` for a quotation."""
        quotation = self.get_quotation(studio_id, quotation_id)
        lines = priced_lines(quotation)
        cost_total = sum((line.cost_total for line in lines), ZERO)
        expense_total = sum((line.expense_total for line in lines), ZERO)
        config = CatalogService(self.db).load_pricing_config(studio_id)
        commission = config.sales_commission if config is not None else ZERO

        summary = summarize_profit(price, cost_total, expense_total, commission, original_price=quotation.base_price)
        check = validate_negotiated_margin(summary.margin_percentage, summary.final_price, cost_total, expense_total)
        health = financial_health(cost_total, expense_total, price, commission)
        return summary, check, health

    def _get_draft(self, studio_id: int, quotation_id: int) -> Quotation:
        quotation = self.get_quotation(studio_id, quotation_id)
        if quotation.status != QuotationStatus.DRAFT or quotation.archived:
            raise ConflictError(f"Quotation {quotation_id} is {quotation.status.value} and can no longer change")
        return quotation

    def _apply_snapshots(self, quotation: Quotation, result: CatalogPriceResult, replace: bool = False) -> None:
        if replace:
            quotation.items = [
                QuotationItem(
                    catalog_item_id=line.item_id,
                    quantity=line.quantity,
                    unit_price=line.unit_price,
                    margin_class_snapshot=line.margin_class,
                    billing_type=line.billing_type,
                    order=position,
                )
                for position, line in enumerate(result.lines)
            ]
        else:
            for item in quotation.items:
                line = result.line_for(item.catalog_item_id)
                if line is None:
                    raise ValidationError(f"Catalog item {item.catalog_item_id} is no longer priced")
                item.unit_price = line.unit_price
                item.margin_class_snapshot = line.margin_class
                item.billing_type = line.billing_type
        quotation.base_price = result.total
