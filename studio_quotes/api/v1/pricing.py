"""Stateless pricing endpoints for API v1."""

from __future__ import annotations

from fastapi import APIRouter

from studio_quotes.api.v1._errors import to_http_exception
from studio_quotes.core.exceptions import StudioQuotesException
from studio_quotes.pricing.catalog_calculator import compute_catalog_price
from studio_quotes.pricing.condition_resolver import CommercialTerms, resolve_condition
from studio_quotes.schemas.pricing import (
    CatalogPriceRequest,
    CatalogPriceResponse,
    ConditionBreakdownOut,
    PricedLineOut,
    ResolveConditionRequest,
)

router = APIRouter(prefix="/pricing", tags=["pricing"])


@router.post("/catalog", response_model=CatalogPriceResponse)
def price_catalog_selection(payload: CatalogPriceRequest) -> CatalogPriceResponse:
    try:
        result = compute_catalog_price(
            payload.selection,
            payload.to_catalog(),
            payload.pricing_config.to_config() if payload.pricing_config is not None else None,
            event_duration=payload.event_duration,
        )
    except StudioQuotesException as exc:
        raise to_http_exception(exc) from exc
    return CatalogPriceResponse(
        total=result.total,
        lines=[PricedLineOut.model_validate(line) for line in result.lines],
    )


@router.post("/conditions/resolve", response_model=ConditionBreakdownOut)
def resolve_commercial_condition(payload: ResolveConditionRequest) -> ConditionBreakdownOut:
    try:
        terms = CommercialTerms.from_condition(payload.condition) if payload.condition is not None else None
        breakdown = resolve_condition(
            payload.base_price,
            terms,
            mode=payload.mode,
            negotiated_price=payload.negotiated_price,
            original_price=payload.original_price,
        )
    except StudioQuotesException as exc:
        raise to_http_exception(exc) from exc
    return ConditionBreakdownOut.model_validate(breakdown)

