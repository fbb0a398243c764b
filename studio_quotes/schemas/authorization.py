"""Authorization request/response schemas."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, Field

from studio_quotes.models.enums import QuotationStatus


class PaymentData(BaseModel):
    amount: Decimal = Field(ge=0, decimal_places=2)
    method: str = Field(min_length=1, max_length=80)
    payment_date: datetime
    concept: str = Field(min_length=1, max_length=1000)


class AuthorizeQuotationBody(BaseModel):
    """Authorization payload sent by the studio; ids of the quotation come from the path."""

    promise_id: int = Field(ge=1)
    condition_id: int = Field(ge=1)
    amount: Decimal = Field(ge=0, decimal_places=2)
    payment: PaymentData | None = None
    contract_template_id: int | None = Field(default=None, ge=1)


class AuthorizeQuotationRequest(AuthorizeQuotationBody):
    studio_id: int = Field(ge=1)
    quotation_id: int = Field(ge=1)


class AuthorizationResponse(BaseModel):
    event_id: int
    quotation_status: QuotationStatus
    payment_id: int | None = None
    contract_request_id: int | None = None
    archived_quotation_ids: list[int] = Field(default_factory=list)
