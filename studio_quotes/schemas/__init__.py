"""Pydantic schema package for API contracts."""

from studio_quotes.schemas.authorization import (
    AuthorizationResponse,
    AuthorizeQuotationBody,
    AuthorizeQuotationRequest,
    PaymentData,
)
from studio_quotes.schemas.pricing import (
    CatalogPriceRequest,
    CatalogPriceResponse,
    ConditionBreakdownOut,
    ConditionTermsIn,
    ResolveConditionRequest,
)

__all__ = [
    "AuthorizationResponse",
    "AuthorizeQuotationBody",
    "AuthorizeQuotationRequest",
    "CatalogPriceRequest",
    "CatalogPriceResponse",
    "ConditionBreakdownOut",
    "ConditionTermsIn",
    "PaymentData",
    "ResolveConditionRequest",
]
