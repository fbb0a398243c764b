from __future__ import annotations

from decimal import Decimal

from studio_quotes.pricing.margin import (
    HealthStatus,
    MarginLevel,
    financial_health,
    summarize_profit,
    validate_negotiated_margin,
)


def test_profit_summary_subtracts_commission():
    summary = summarize_profit(Decimal("1000"), Decimal("500"), Decimal("100"), Decimal("10"))

    assert summary.commission_amount == Decimal("100.00")
    assert summary.net_profit == Decimal("300.00")
    assert summary.margin_percentage == Decimal("30.00")


def test_profit_impact_compares_against_original_price():
    summary = summarize_profit(
        Decimal("800"), Decimal("500"), Decimal("0"), original_price=Decimal("1000")
    )
    assert summary.profit_impact == Decimal("-200.00")


def test_price_below_cost_plus_expense_is_invalid():
    check = validate_negotiated_margin(Decimal("-5"), Decimal("550"), Decimal("500"), Decimal("100"))

    assert check.is_valid is False
    assert check.level == MarginLevel.CRITICAL


def test_margin_levels():
    assert validate_negotiated_margin(Decimal("5"), Decimal("1000"), Decimal("900"), Decimal("0")).level == MarginLevel.CRITICAL
    assert validate_negotiated_margin(Decimal("15"), Decimal("1000"), Decimal("800"), Decimal("0")).level == MarginLevel.LOW
    assert validate_negotiated_margin(Decimal("25"), Decimal("1000"), Decimal("700"), Decimal("0")).level == MarginLevel.ACCEPTABLE


def test_financial_health_rescue_price_targets_twenty_percent():
    health = financial_health(Decimal("700"), Decimal("100"), Decimal("900"), Decimal("10"))

    # 800 / (0.80 - 0.10)
    assert health.rescue_price == Decimal("1142.86")
    assert health.status == HealthStatus.DANGER


def test_financial_health_statuses():
    assert financial_health(Decimal("700"), Decimal("0"), Decimal("1000")).status == HealthStatus.HEALTHY
    assert financial_health(Decimal("830"), Decimal("0"), Decimal("1000")).status == HealthStatus.WARNING
    assert financial_health(Decimal("880"), Decimal("0"), Decimal("1000")).status == HealthStatus.CRITICAL
    assert financial_health(Decimal("950"), Decimal("0"), Decimal("1000")).status == HealthStatus.DANGER
