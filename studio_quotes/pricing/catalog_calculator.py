"""
Catalog Pricing Calculator

Turns a selection of catalog items and quantities into a priced breakdown.
Pure and deterministic: the same catalog, configuration and selection always
produce the same numbers.

    unit_price = cost x (1 + margin) x (1 + sales_commission) x (1 + markup)

rounded half-up to cents, where margin is the service or product margin of
the item's category.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from decimal import Decimal

from studio_quotes.core.exceptions import ValidationError
from studio_quotes.models.enums import BillingType, MarginClass
from studio_quotes.pricing.money import (
    HUNDRED,
    ZERO,
    require_non_negative,
    require_percentage,
    round_money,
    to_decimal,
)

logger = logging.getLogger(__name__)

ONE = Decimal("1")


@dataclass(frozen=True)
class CatalogItemSpec:
    """A priceable catalog item."""

    id: int
    cost: Decimal
    name: str = ""
    expense: Decimal = ZERO
    billing_type: BillingType = BillingType.SERVICE

    def __post_init__(self) -> None:
        object.__setattr__(self, "cost", require_non_negative(to_decimal(self.cost, "cost"), "cost"))
        object.__setattr__(self, "expense", require_non_negative(to_decimal(self.expense, "expense"), "expense"))


@dataclass(frozen=True)
class CatalogCategorySpec:
    """A catalog category; its margin class applies to every item inside it."""

    id: int
    margin_class: MarginClass
    items: tuple[CatalogItemSpec, ...] = ()
    name: str = ""


@dataclass(frozen=True)
class Catalog:
    categories: tuple[CatalogCategorySpec, ...] = ()

    @property
    def is_empty(self) -> bool:
        return not any(category.items for category in self.categories)

    def iter_items(self):
        """Yield (item, margin_class) in catalog order."""
        for category in self.categories:
            for item in category.items:
                yield item, category.margin_class


@dataclass(frozen=True)
class PricingConfig:
    """Studio pricing percentages, each between 0 and 100."""

    service_margin: Decimal = ZERO
    product_margin: Decimal = ZERO
    sales_commission: Decimal = ZERO
    markup: Decimal = ZERO

    def __post_init__(self) -> None:
        for name in ("service_margin", "product_margin", "sales_commission", "markup"):
            value = to_decimal(getattr(self, name), name)
            object.__setattr__(self, name, require_percentage(value, name))

    @classmethod
    def from_model(cls, row) -> "PricingConfig":
        return cls(
            service_margin=row.service_margin,
            product_margin=row.product_margin,
            sales_commission=row.sales_commission,
            markup=row.markup,
        )

    def margin_for(self, margin_class: MarginClass) -> Decimal:
        if margin_class == MarginClass.PRODUCT:
            return self.product_margin
        return self.service_margin

    def unit_price(self, cost: Decimal, margin_class: MarginClass) -> Decimal:
        price = (
            cost
            * (ONE + self.margin_for(margin_class) / HUNDRED)
            * (ONE + self.sales_commission / HUNDRED)
            * (ONE + self.markup / HUNDRED)
        )
        return round_money(price)


@dataclass(frozen=True)
class PricedLine:
    """One priced line of a selection."""

    item_id: int
    quantity: int
    unit_price: Decimal
    line_total: Decimal
    margin_class: MarginClass = MarginClass.SERVICE
    billing_type: BillingType = BillingType.SERVICE
    effective_quantity: Decimal = ONE
    unit_cost: Decimal = ZERO
    unit_expense: Decimal = ZERO

    @property
    def cost_total(self) -> Decimal:
        return self.unit_cost * self.effective_quantity

    @property
    def expense_total(self) -> Decimal:
        return self.unit_expense * self.effective_quantity


@dataclass(frozen=True)
class CatalogPriceResult:
    total: Decimal = ZERO
    lines: tuple[PricedLine, ...] = field(default_factory=tuple)

    @property
    def cost_total(self) -> Decimal:
        return round_money(sum((line.cost_total for line in self.lines), ZERO))

    @property
    def expense_total(self) -> Decimal:
        return round_money(sum((line.expense_total for line in self.lines), ZERO))

    def line_for(self, item_id: int) -> PricedLine | None:
        for line in self.lines:
            if line.item_id == item_id:
                return line
        return None


def effective_quantity(quantity: int, billing_type: BillingType, event_duration: Decimal | None) -> Decimal:
    """Hour-billed items are charged per hour of event duration."""
    if billing_type == BillingType.HOUR and event_duration is not None and event_duration > ZERO:
        return Decimal(quantity) * event_duration
    return Decimal(quantity)


def _validated_selection(selection: Mapping[int, int]) -> dict[int, int]:
    cleaned: dict[int, int] = {}
    for item_id, quantity in selection.items():
        if quantity is None:
            continue
        if isinstance(quantity, bool) or int(quantity) != quantity:
            raise ValidationError(f"quantity for item {item_id} must be a whole number, got: {quantity!r}")
        if quantity < 0:
            raise ValidationError(f"quantity for item {item_id} cannot be negative, got: {quantity}")
        if quantity > 0:
            cleaned[item_id] = int(quantity)
    return cleaned


def compute_catalog_price(
    selection: Mapping[int, int] | None,
    catalog: Catalog | None,
    pricing_config: PricingConfig | None,
    event_duration: Decimal | int | float | None = None,
) -> CatalogPriceResult:
    """Price a selection of catalog item ids and quantities.

    An empty catalog, a missing configuration or an empty selection is a valid
    transient state and yields a zero total with no lines.
    """
    quantities = _validated_selection(selection or {})
    if catalog is None or catalog.is_empty or pricing_config is None or not quantities:
        return CatalogPriceResult()

    duration = to_decimal(event_duration, "event_duration") if event_duration is not None else None

    lines: list[PricedLine] = []
    seen: set[int] = set()
    for item, margin_class in catalog.iter_items():
        quantity = quantities.get(item.id)
        if not quantity:
            continue
        seen.add(item.id)
        unit_price = pricing_config.unit_price(item.cost, margin_class)
        qty = effective_quantity(quantity, item.billing_type, duration)
        lines.append(
            PricedLine(
                item_id=item.id,
                quantity=quantity,
                unit_price=unit_price,
                line_total=round_money(unit_price * qty),
                margin_class=margin_class,
                billing_type=item.billing_type,
                effective_quantity=qty,
                unit_cost=item.cost,
                unit_expense=item.expense,
            )
        )

    missing = set(quantities) - seen
    if missing:
        logger.debug(
            "pricing.catalog.unknown_items",
            extra={"event": "pricing.catalog.unknown_items", "item_ids": sorted(missing)},
        )

    total = sum((line.line_total for line in lines), ZERO)
    return CatalogPriceResult(total=round_money(total), lines=tuple(lines))
