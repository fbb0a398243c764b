from __future__ import annotations

from decimal import Decimal

import pytest

from studio_quotes.core.exceptions import ValidationError
from studio_quotes.models.enums import BillingType, MarginClass
from studio_quotes.pricing import Catalog, CatalogCategorySpec, CatalogItemSpec, PricingConfig, compute_catalog_price


def _catalog() -> Catalog:
    return Catalog(
        categories=(
            CatalogCategorySpec(
                id=1,
                margin_class=MarginClass.SERVICE,
                items=(
                    CatalogItemSpec(id=10, cost=Decimal("1000"), expense=Decimal("50")),
                    CatalogItemSpec(id=11, cost=Decimal("100"), billing_type=BillingType.HOUR),
                ),
            ),
            CatalogCategorySpec(
                id=2,
                margin_class=MarginClass.PRODUCT,
                items=(CatalogItemSpec(id=20, cost=Decimal("200")),),
            ),
        )
    )


def _config(**overrides) -> PricingConfig:
    values = {"service_margin": "30", "product_margin": "20", "sales_commission": "10", "markup": "0"}
    values.update(overrides)
    return PricingConfig(**{key: Decimal(value) for key, value in values.items()})


def test_unit_price_applies_margin_commission_and_markup():
    result = compute_catalog_price({10: 1, 20: 2}, _catalog(), _config())

    assert result.line_for(10).unit_price == Decimal("1430.00")
    assert result.line_for(20).unit_price == Decimal("264.00")
    assert result.line_for(20).line_total == Decimal("528.00")
    assert result.total == Decimal("1958.00")


def test_markup_compounds_on_top():
    result = compute_catalog_price({20: 1}, _catalog(), _config(markup="5"))
    # 200 * 1.20 * 1.10 * 1.05
    assert result.total == Decimal("277.20")


def test_lines_follow_catalog_order_not_selection_order():
    result = compute_catalog_price({20: 1, 10: 1}, _catalog(), _config())
    assert [line.item_id for line in result.lines] == [10, 20]


def test_zero_quantities_are_dropped():
    result = compute_catalog_price({10: 0, 20: 1}, _catalog(), _config())
    assert [line.item_id for line in result.lines] == [20]


@pytest.mark.parametrize(
    "selection, catalog, config",
    [
        ({}, _catalog(), _config()),
        ({10: 1}, Catalog(), _config()),
        ({10: 1}, _catalog(), None),
        (None, None, None),
    ],
)
def test_incomplete_inputs_price_to_zero(selection, catalog, config):
    result = compute_catalog_price(selection, catalog, config)
    assert result.total == Decimal("0")
    assert result.lines == ()


def test_unknown_items_are_ignored():
    result = compute_catalog_price({10: 1, 999: 3}, _catalog(), _config())
    assert result.total == Decimal("1430.00")


def test_negative_quantity_is_rejected():
    with pytest.raises(ValidationError):
        compute_catalog_price({10: -1}, _catalog(), _config())


def test_fractional_quantity_is_rejected():
    with pytest.raises(ValidationError):
        compute_catalog_price({10: 1.5}, _catalog(), _config())


def test_percentages_outside_range_are_rejected():
    with pytest.raises(ValidationError):
        _config(service_margin="120")
    with pytest.raises(ValidationError):
        _config(markup="-1")


def test_hour_billed_items_multiply_by_event_duration():
    result = compute_catalog_price({11: 1}, _catalog(), _config(), event_duration=Decimal("6"))

    line = result.line_for(11)
    assert line.unit_price == Decimal("143.00")
    assert line.effective_quantity == Decimal("6")
    assert result.total == Decimal("858.00")


def test_hour_billed_items_without_duration_bill_one_unit():
    result = compute_catalog_price({11: 2}, _catalog(), _config())
    assert result.total == Decimal("286.00")


def test_cost_and_expense_totals_follow_quantities():
    result = compute_catalog_price({10: 2}, _catalog(), _config())
    assert result.cost_total == Decimal("2000")
    assert result.expense_total == Decimal("100")
