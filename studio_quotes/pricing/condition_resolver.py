"""
Commercial Condition Resolver

The single source of truth for turning a price and a commercial condition into
a payment breakdown. Two pure resolvers share one entry point and are selected
by an explicit PricingMode:

- STANDARD: the condition's discount percentage is applied to the base price.
- NEGOTIATED: an explicit negotiated price replaces the computed one and the
  discount is reported as the savings against the original price. A negotiated
  price of 0 means "negotiated to free".

In both modes every amount is rounded to cents before the deferred amount is
derived, so advance + deferred == total_to_pay exactly.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from decimal import Decimal
from typing import Union

from studio_quotes.core.exceptions import ValidationError
from studio_quotes.models.enums import AdvanceType, PricingMode
from studio_quotes.pricing.money import (
    ZERO,
    percent_of,
    require_non_negative,
    require_percentage,
    round_money,
    to_decimal,
)


@dataclass(frozen=True)
class NoAdvance:
    """No advance configured: the full total is due at authorization."""


@dataclass(frozen=True)
class PercentageAdvance:
    percentage: Decimal

    def __post_init__(self) -> None:
        value = to_decimal(self.percentage, "advance_percentage")
        object.__setattr__(self, "percentage", require_percentage(value, "advance_percentage"))


@dataclass(frozen=True)
class FixedAmountAdvance:
    amount: Decimal

    def __post_init__(self) -> None:
        value = to_decimal(self.amount, "advance_amount")
        object.__setattr__(self, "amount", round_money(require_non_negative(value, "advance_amount")))


AdvancePolicy = Union[NoAdvance, PercentageAdvance, FixedAmountAdvance]


@dataclass(frozen=True)
class CommercialTerms:
    """Discount and advance terms of a commercial condition."""

    discount_percentage: Decimal | None = None
    advance: AdvancePolicy = NoAdvance()
    name: str = ""

    def __post_init__(self) -> None:
        if self.discount_percentage is not None:
            value = to_decimal(self.discount_percentage, "discount_percentage")
            object.__setattr__(self, "discount_percentage", require_percentage(value, "discount_percentage"))

    @classmethod
    def from_condition(cls, condition) -> "CommercialTerms":
        """Build terms from a persisted condition row.

        The advance type selects which of advance_percentage / advance_amount is
        meaningful; a type without its value means no advance.
        """
        advance_type = getattr(condition, "advance_type", None)
        if isinstance(advance_type, AdvanceType):
            advance_type = advance_type.value
        if advance_type == "amount":
            advance_type = AdvanceType.FIXED_AMOUNT.value

        advance: AdvancePolicy = NoAdvance()
        if advance_type == AdvanceType.PERCENTAGE.value and condition.advance_percentage is not None:
            advance = PercentageAdvance(condition.advance_percentage)
        elif advance_type == AdvanceType.FIXED_AMOUNT.value and condition.advance_amount is not None:
            advance = FixedAmountAdvance(condition.advance_amount)

        return cls(
            discount_percentage=condition.discount_percentage,
            advance=advance,
            name=getattr(condition, "name", "") or "",
        )


@dataclass(frozen=True)
class ConditionBreakdown:
    mode: PricingMode
    base_price: Decimal
    discount_amount: Decimal
    subtotal: Decimal
    total_to_pay: Decimal
    advance_amount: Decimal
    deferred_amount: Decimal
    original_price: Decimal
    savings: Decimal | None = None
    deferred_due_before_event: bool = False

    @property
    def has_advance(self) -> bool:
        return self.deferred_due_before_event

    def as_dict(self) -> dict[str, object]:
        return {
            "mode": self.mode.value,
            "base_price": self.base_price,
            "original_price": self.original_price,
            "discount_amount": self.discount_amount,
            "savings": self.savings,
            "subtotal": self.subtotal,
            "total_to_pay": self.total_to_pay,
            "advance_amount": self.advance_amount,
            "deferred_amount": self.deferred_amount,
            "deferred_due_before_event": self.deferred_due_before_event,
        }


def _advance_for(total: Decimal, advance: AdvancePolicy) -> Decimal:
    if isinstance(advance, PercentageAdvance):
        return round_money(percent_of(total, advance.percentage))
    if isinstance(advance, FixedAmountAdvance):
        if advance.amount > total:
            raise ValidationError(
                f"advance_amount {advance.amount} exceeds the total to pay {total}"
            )
        return advance.amount
    if isinstance(advance, NoAdvance):
        return ZERO
    raise ValidationError(f"Unsupported advance policy: {advance!r}")


def _resolve_standard(
    base_price: Decimal,
    terms: CommercialTerms,
    negotiated_price: Decimal | None,
    original_price: Decimal | None,
) -> ConditionBreakdown:
    discount_amount = ZERO
    if terms.discount_percentage:
        discount_amount = round_money(percent_of(base_price, terms.discount_percentage))
    subtotal = base_price - discount_amount
    total_to_pay = subtotal
    advance_amount = _advance_for(total_to_pay, terms.advance)
    return ConditionBreakdown(
        mode=PricingMode.STANDARD,
        base_price=base_price,
        discount_amount=discount_amount,
        subtotal=subtotal,
        total_to_pay=total_to_pay,
        advance_amount=advance_amount,
        deferred_amount=total_to_pay - advance_amount,
        original_price=original_price if original_price is not None else base_price,
        deferred_due_before_event=not isinstance(terms.advance, NoAdvance),
    )


def _resolve_negotiated(
    base_price: Decimal,
    terms: CommercialTerms,
    negotiated_price: Decimal | None,
    original_price: Decimal | None,
) -> ConditionBreakdown:
    if negotiated_price is None:
        raise ValidationError("negotiated mode requires a negotiated_price")
    original = original_price if original_price is not None else base_price
    total_to_pay = negotiated_price
    savings = original - negotiated_price
    advance_amount = _advance_for(total_to_pay, terms.advance)
    return ConditionBreakdown(
        mode=PricingMode.NEGOTIATED,
        base_price=base_price,
        discount_amount=max(savings, ZERO),
        subtotal=total_to_pay,
        total_to_pay=total_to_pay,
        advance_amount=advance_amount,
        deferred_amount=total_to_pay - advance_amount,
        original_price=original,
        savings=savings,
        deferred_due_before_event=not isinstance(terms.advance, NoAdvance),
    )


_RESOLVERS: dict[PricingMode, Callable[..., ConditionBreakdown]] = {
    PricingMode.STANDARD: _resolve_standard,
    PricingMode.NEGOTIATED: _resolve_negotiated,
}


def _money_input(value, field: str) -> Decimal | None:
    if value is None:
        return None
    return round_money(require_non_negative(to_decimal(value, field), field))


def resolve_condition(
    base_price: Decimal | int | float | str,
    terms: CommercialTerms | None = None,
    mode: PricingMode = PricingMode.STANDARD,
    negotiated_price: Decimal | int | float | str | None = None,
    original_price: Decimal | int | float | str | None = None,
) -> ConditionBreakdown:
    """Resolve a price and commercial terms into a payment breakdown."""
    try:
        resolver = _RESOLVERS[PricingMode(mode)]
    except (KeyError, ValueError) as exc:
        raise ValidationError(f"Unsupported pricing mode: {mode!r}") from exc
    return resolver(
        _money_input(base_price if base_price is not None else ZERO, "base_price"),
        terms or CommercialTerms(),
        _money_input(negotiated_price, "negotiated_price"),
        _money_input(original_price, "original_price"),
    )
