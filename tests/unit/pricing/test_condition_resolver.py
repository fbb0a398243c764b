from __future__ import annotations

from decimal import Decimal
from types import SimpleNamespace

import pytest

from studio_quotes.core.exceptions import ValidationError
from studio_quotes.models.enums import AdvanceType, PricingMode
from studio_quotes.pricing import (
    CommercialTerms,
    FixedAmountAdvance,
    NoAdvance,
    PercentageAdvance,
    resolve_condition,
)


def test_standard_discount_with_percentage_advance():
    terms = CommercialTerms(discount_percentage=Decimal("10"), advance=PercentageAdvance(Decimal("50")))

    breakdown = resolve_condition(Decimal("1000"), terms)

    assert breakdown.discount_amount == Decimal("100.00")
    assert breakdown.subtotal == Decimal("900.00")
    assert breakdown.total_to_pay == Decimal("900.00")
    assert breakdown.advance_amount == Decimal("450.00")
    assert breakdown.deferred_amount == Decimal("450.00")


def test_negotiated_price_with_fixed_advance():
    terms = CommercialTerms(advance=FixedAmountAdvance(Decimal("200")))

    breakdown = resolve_condition(
        Decimal("1000"),
        terms,
        mode=PricingMode.NEGOTIATED,
        negotiated_price=Decimal("800"),
        original_price=Decimal("1000"),
    )

    assert breakdown.savings == Decimal("200.00")
    assert breakdown.discount_amount == Decimal("200.00")
    assert breakdown.total_to_pay == Decimal("800.00")
    assert breakdown.advance_amount == Decimal("200.00")
    assert breakdown.deferred_amount == Decimal("600.00")


@pytest.mark.parametrize(
    "base, discount, advance",
    [
        ("1000", "10", PercentageAdvance(Decimal("50"))),
        ("999.99", "7.5", PercentageAdvance(Decimal("33.33"))),
        ("0.01", "0", PercentageAdvance(Decimal("50"))),
        ("1234.56", "15", FixedAmountAdvance(Decimal("100.10"))),
        ("333.33", "33.33", NoAdvance()),
        ("0", "0", PercentageAdvance(Decimal("100"))),
    ],
)
def test_advance_and_deferred_reconcile_exactly(base, discount, advance):
    terms = CommercialTerms(discount_percentage=Decimal(discount), advance=advance)

    standard = resolve_condition(Decimal(base), terms)
    negotiated = resolve_condition(
        Decimal(base), terms, mode=PricingMode.NEGOTIATED, negotiated_price=Decimal(base)
    )

    for breakdown in (standard, negotiated):
        assert breakdown.advance_amount + breakdown.deferred_amount == breakdown.total_to_pay
        for amount in (
            breakdown.discount_amount,
            breakdown.subtotal,
            breakdown.total_to_pay,
            breakdown.advance_amount,
            breakdown.deferred_amount,
        ):
            assert amount >= 0


@pytest.mark.parametrize("price", ["1000", "1958.00", "0.99"])
def test_negotiating_the_base_price_matches_standard_without_discount(price):
    terms = CommercialTerms(discount_percentage=Decimal("0"), advance=PercentageAdvance(Decimal("30")))

    standard = resolve_condition(Decimal(price), terms)
    negotiated = resolve_condition(
        Decimal(price), terms, mode=PricingMode.NEGOTIATED, negotiated_price=Decimal(price)
    )

    assert negotiated.total_to_pay == standard.total_to_pay


def test_no_advance_defers_nothing_before_the_event():
    breakdown = resolve_condition(Decimal("500"), CommercialTerms())

    assert breakdown.advance_amount == Decimal("0")
    assert breakdown.deferred_amount == Decimal("500.00")
    assert breakdown.deferred_due_before_event is False


def test_zero_percent_advance_is_still_an_advance_policy():
    breakdown = resolve_condition(Decimal("500"), CommercialTerms(advance=PercentageAdvance(Decimal("0"))))

    assert breakdown.advance_amount == Decimal("0.00")
    assert breakdown.deferred_due_before_event is True


def test_negotiated_to_zero_means_free():
    breakdown = resolve_condition(
        Decimal("1000"), CommercialTerms(), mode=PricingMode.NEGOTIATED, negotiated_price=Decimal("0")
    )

    assert breakdown.total_to_pay == Decimal("0.00")
    assert breakdown.savings == Decimal("1000.00")


def test_negotiated_above_original_reports_no_discount():
    breakdown = resolve_condition(
        Decimal("1000"), CommercialTerms(), mode=PricingMode.NEGOTIATED, negotiated_price=Decimal("1100")
    )

    assert breakdown.discount_amount == Decimal("0")
    assert breakdown.savings == Decimal("-100.00")


def test_negotiated_mode_requires_a_price():
    with pytest.raises(ValidationError):
        resolve_condition(Decimal("1000"), CommercialTerms(), mode=PricingMode.NEGOTIATED)


def test_fixed_advance_larger_than_total_is_rejected():
    with pytest.raises(ValidationError):
        resolve_condition(Decimal("100"), CommercialTerms(advance=FixedAmountAdvance(Decimal("150"))))


@pytest.mark.parametrize("bad", [Decimal("-1"), Decimal("100.01")])
def test_out_of_range_percentages_are_rejected(bad):
    with pytest.raises(ValidationError):
        CommercialTerms(discount_percentage=bad)
    with pytest.raises(ValidationError):
        PercentageAdvance(bad)


def test_negative_prices_are_rejected():
    with pytest.raises(ValidationError):
        resolve_condition(Decimal("-10"))


def test_unknown_mode_is_rejected():
    with pytest.raises(ValidationError):
        resolve_condition(Decimal("10"), mode="bartered")


def test_terms_from_condition_row_accept_legacy_amount_type():
    row = SimpleNamespace(
        name="Deposit",
        discount_percentage=None,
        advance_type="amount",
        advance_percentage=None,
        advance_amount=Decimal("250"),
    )

    terms = CommercialTerms.from_condition(row)

    assert terms.advance == FixedAmountAdvance(Decimal("250"))


def test_terms_from_condition_row_without_value_has_no_advance():
    row = SimpleNamespace(
        name="Broken",
        discount_percentage=Decimal("5"),
        advance_type=AdvanceType.PERCENTAGE,
        advance_percentage=None,
        advance_amount=None,
    )

    assert CommercialTerms.from_condition(row).advance == NoAdvance()
