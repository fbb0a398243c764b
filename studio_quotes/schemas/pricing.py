"""Pricing request/response schemas."""

from __future__ import annotations

from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from studio_quotes.models.enums import AdvanceType, BillingType, MarginClass, PricingMode
from studio_quotes.pricing.catalog_calculator import Catalog, CatalogCategorySpec, CatalogItemSpec, PricingConfig


class CatalogItemIn(BaseModel):
    id: int
    name: str = ""
    cost: Decimal = Field(ge=0)
    expense: Decimal = Field(default=Decimal("0"), ge=0)
    billing_type: BillingType = BillingType.SERVICE


class CatalogCategoryIn(BaseModel):
    id: int
    name: str = ""
    margin_class: MarginClass = MarginClass.SERVICE
    items: list[CatalogItemIn] = Field(default_factory=list)


class PricingConfigIn(BaseModel):
    service_margin: Decimal = Field(default=Decimal("0"), ge=0, le=100)
    product_margin: Decimal = Field(default=Decimal("0"), ge=0, le=100)
    sales_commission: Decimal = Field(default=Decimal("0"), ge=0, le=100)
    markup: Decimal = Field(default=Decimal("0"), ge=0, le=100)

    def to_config(self) -> PricingConfig:
        return PricingConfig(**self.model_dump())


class CatalogPriceRequest(BaseModel):
    selection: dict[int, int] = Field(default_factory=dict)
    catalog: list[CatalogCategoryIn] = Field(default_factory=list)
    pricing_config: PricingConfigIn | None = None
    event_duration: Decimal | None = Field(default=None, ge=0)

    def to_catalog(self) -> Catalog:
        return Catalog(
            categories=tuple(
                CatalogCategorySpec(
                    id=category.id,
                    name=category.name,
                    margin_class=category.margin_class,
                    items=tuple(CatalogItemSpec(**item.model_dump()) for item in category.items),
                )
                for category in self.catalog
            )
        )


class PricedLineOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    item_id: int
    quantity: int
    unit_price: Decimal
    line_total: Decimal
    margin_class: MarginClass
    billing_type: BillingType


class CatalogPriceResponse(BaseModel):
    total: Decimal
    lines: list[PricedLineOut]


class ConditionTermsIn(BaseModel):
    """Commercial condition terms; `advance_type` accepts the legacy value "amount"."""

    name: str = ""
    discount_percentage: Decimal | None = Field(default=None, ge=0, le=100)
    advance_type: AdvanceType | None = None
    advance_percentage: Decimal | None = Field(default=None, ge=0, le=100)
    advance_amount: Decimal | None = Field(default=None, ge=0)

    @field_validator("advance_type", mode="before")
    @classmethod
    def _legacy_advance_type(cls, value):
        return AdvanceType.FIXED_AMOUNT if value == "amount" else value


class ResolveConditionRequest(BaseModel):
    base_price: Decimal = Field(ge=0)
    condition: ConditionTermsIn | None = None
    mode: PricingMode = PricingMode.STANDARD
    negotiated_price: Decimal | None = Field(default=None, ge=0)
    original_price: Decimal | None = Field(default=None, ge=0)


class ConditionBreakdownOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

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
