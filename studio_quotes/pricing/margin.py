"""Profit and margin analysis for negotiated prices."""

from __future__ import annotations

import enum
from dataclasses import dataclass
from decimal import Decimal

from studio_quotes.pricing.money import HUNDRED, ZERO, percent_of, round_money, to_decimal

LOW_MARGIN_THRESHOLD = Decimal("10")
HEALTHY_MARGIN_THRESHOLD = Decimal("20")
WARNING_MARGIN_THRESHOLD = Decimal("15")


class MarginLevel(str, enum.Enum):
    ACCEPTABLE = "acceptable"
    LOW = "low"
    CRITICAL = "critical"


class HealthStatus(str, enum.Enum):
    HEALTHY = "healthy"
    WARNING = "warning"
    CRITICAL = "critical"
    DANGER = "danger"


@dataclass(frozen=True)
class MarginCheck:
    is_valid: bool
    level: MarginLevel
    message: str


@dataclass(frozen=True)
class ProfitSummary:
    final_price: Decimal
    cost_total: Decimal
    expense_total: Decimal
    commission_amount: Decimal
    net_profit: Decimal
    margin_percentage: Decimal
    profit_impact: Decimal


@dataclass(frozen=True)
class FinancialHealth:
    status: HealthStatus
    current_margin: Decimal
    rescue_price: Decimal
    shortfall: Decimal
    message: str


def _margin(net_profit: Decimal, price: Decimal) -> Decimal:
    if price <= ZERO:
        return ZERO
    return round_money(net_profit / price * HUNDRED)


def summarize_profit(
    final_price: Decimal,
    cost_total: Decimal,
    expense_total: Decimal,
    sales_commission: Decimal = ZERO,
    original_price: Decimal | None = None,
) -> ProfitSummary:
    """Net profit after cost, expense and sales commission, and its change versus the original price."""
    final_price = to_decimal(final_price, "final_price")
    cost_total = to_decimal(cost_total, "cost_total")
    expense_total = to_decimal(expense_total, "expense_total")
    sales_commission = to_decimal(sales_commission, "sales_commission")

    commission = percent_of(final_price, sales_commission)
    net_profit = final_price - cost_total - expense_total - commission

    impact = ZERO
    if original_price is not None:
        original = to_decimal(original_price, "original_price")
        original_profit = original - cost_total - expense_total - percent_of(original, sales_commission)
        impact = net_profit - original_profit

    return ProfitSummary(
        final_price=round_money(final_price),
        cost_total=round_money(cost_total),
        expense_total=round_money(expense_total),
        commission_amount=round_money(commission),
        net_profit=round_money(net_profit),
        margin_percentage=_margin(net_profit, final_price),
        profit_impact=round_money(impact),
    )


def validate_negotiated_margin(
    margin_percentage: Decimal,
    final_price: Decimal,
    cost_total: Decimal,
    expense_total: Decimal,
) -> MarginCheck:
    floor = to_decimal(cost_total) + to_decimal(expense_total)
    margin_percentage = to_decimal(margin_percentage)
    if to_decimal(final_price) < floor:
        return MarginCheck(
            is_valid=False,
            level=MarginLevel.CRITICAL,
            message=f"Price cannot be lower than {round_money(floor)} (cost + expense)",
        )
    if margin_percentage < LOW_MARGIN_THRESHOLD:
        return MarginCheck(
            is_valid=True,
            level=MarginLevel.CRITICAL,
            message=f"Critical margin: {margin_percentage:.1f}%. A minimum margin of 10% is recommended.",
        )
    if margin_percentage < HEALTHY_MARGIN_THRESHOLD:
        return MarginCheck(
            is_valid=True,
            level=MarginLevel.LOW,
            message=f"Low margin: {margin_percentage:.1f}%. A minimum margin of 20% is recommended.",
        )
    return MarginCheck(
        is_valid=True,
        level=MarginLevel.ACCEPTABLE,
        message=f"Acceptable margin: {margin_percentage:.1f}%",
    )


def financial_health(
    cost_total: Decimal,
    expense_total: Decimal,
    negotiated_price: Decimal,
    sales_commission: Decimal = ZERO,
) -> FinancialHealth:
    """Classify a negotiated price and compute the price that restores a 20% margin.

    With commission c (as a fraction), a 20% net margin requires
    price * (0.80 - c) = cost + expense.
    """
    costs = to_decimal(cost_total) + to_decimal(expense_total)
    price = to_decimal(negotiated_price)
    commission_rate = to_decimal(sales_commission) / HUNDRED

    net_profit = price - costs - price * commission_rate
    margin = _margin(net_profit, price)

    denominator = Decimal("0.80") - commission_rate
    rescue_price = round_money(costs / denominator) if denominator > ZERO else round_money(price)
    shortfall = rescue_price - round_money(price)

    if margin >= HEALTHY_MARGIN_THRESHOLD:
        status = HealthStatus.HEALTHY
        message = "Solid margin for the operation."
    elif margin >= WARNING_MARGIN_THRESHOLD:
        status = HealthStatus.WARNING
        message = (
            f"Low margin: {margin:.1f}%. {shortfall} short of a 20% margin; "
            f"consider adjusting to {rescue_price}."
        )
    elif margin >= LOW_MARGIN_THRESHOLD:
        status = HealthStatus.CRITICAL
        message = f"Profitability compromised. Recommended minimum price: {rescue_price}."
    else:
        status = HealthStatus.DANGER
        message = "Operational risk: the price is below the safety limit."

    return FinancialHealth(
        status=status,
        current_margin=margin,
        rescue_price=rescue_price,
        shortfall=shortfall,
        message=message,
    )
