"""Decimal money helpers shared by the pricing modules."""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from studio_quotes.core.exceptions import ValidationError

ZERO = Decimal("0")
CENT = Decimal("0.01")
HUNDRED = Decimal("100")


def to_decimal(value: Decimal | int | float | str | None, field: str = "amount") -> Decimal:
    """Convert user or database input to Decimal. None becomes zero."""
    if value is None:
        return ZERO
    if isinstance(value, Decimal):
        result = value
    else:
        try:
            result = Decimal(str(value))
        except InvalidOperation as exc:
            raise ValidationError(f"{field} is not a valid number: {value!r}") from exc
    if not result.is_finite():
        raise ValidationError(f"{field} must be a finite number, got: {value!r}")
    return result


def round_money(value: Decimal) -> Decimal:
    """Round to cents using half-up rounding."""
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def percent_of(amount: Decimal, percentage: Decimal) -> Decimal:
    return amount * percentage / HUNDRED


def require_non_negative(value: Decimal, field: str) -> Decimal:
    if value < ZERO:
        raise ValidationError(f"{field} cannot be negative, got: {value}")
    return value


def require_percentage(value: Decimal, field: str) -> Decimal:
    if not (ZERO <= value <= HUNDRED):
        raise ValidationError(f"{field} must be between 0 and 100, got: {value}")
    return value
