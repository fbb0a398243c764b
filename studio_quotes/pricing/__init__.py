"""Pure pricing functions: catalog pricing, condition resolution, negotiation."""

from studio_quotes.pricing.catalog_calculator import (
    Catalog,
    CatalogCategorySpec,
    CatalogItemSpec,
    CatalogPriceResult,
    PricedLine,
    PricingConfig,
    compute_catalog_price,
)
from studio_quotes.pricing.condition_resolver import (
    CommercialTerms,
    ConditionBreakdown,
    FixedAmountAdvance,
    NoAdvance,
    PercentageAdvance,
    resolve_condition,
)
from studio_quotes.pricing.negotiation_ledger import ClearScope, NegotiationLedger

__all__ = [
    "Catalog",
    "CatalogCategorySpec",
    "CatalogItemSpec",
    "CatalogPriceResult",
    "ClearScope",
    "CommercialTerms",
    "ConditionBreakdown",
    "FixedAmountAdvance",
    "NegotiationLedger",
    "NoAdvance",
    "PercentageAdvance",
    "PricedLine",
    "PricingConfig",
    "compute_catalog_price",
    "resolve_condition",
]
