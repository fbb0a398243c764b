from __future__ import annotations

from decimal import Decimal

import pytest
from fastapi import HTTPException

from studio_quotes.api.v1 import health, pricing, quotations
from studio_quotes.api.v1._errors import map_domain_error
from studio_quotes.core.exceptions import TransactionError
from studio_quotes.models import Quotation
from studio_quotes.models.enums import QuotationStatus
from studio_quotes.schemas import (
    AuthorizeQuotationBody,
    CatalogPriceRequest,
    ResolveConditionRequest,
)


def _catalog_payload(**overrides) -> dict:
    payload = {
        "selection": {"10": 1, "20": 2},
        "catalog": [
            {"id": 1, "margin_class": "service", "items": [{"id": 10, "cost": "1000"}]},
            {"id": 2, "margin_class": "product", "items": [{"id": 20, "cost": "200"}]},
        ],
        "pricing_config": {"service_margin": "30", "product_margin": "20", "sales_commission": "10"},
    }
    payload.update(overrides)
    return payload


def test_health_endpoint_works(monkeypatch):
    monkeypatch.setattr(health, "verify_database_connection", lambda: True)
    response = health.health()
    assert response["status"] == "ok"


def test_catalog_pricing_endpoint():
    response = pricing.price_catalog_selection(CatalogPriceRequest.model_validate(_catalog_payload()))

    assert response.total == Decimal("1958.00")
    assert [line.item_id for line in response.lines] == [10, 20]


def test_catalog_pricing_rejects_negative_quantity():
    with pytest.raises(HTTPException) as exc:
        pricing.price_catalog_selection(CatalogPriceRequest.model_validate(_catalog_payload(selection={"10": -1})))
    assert exc.value.status_code == 422


def test_condition_endpoint_accepts_legacy_advance_type():
    payload = ResolveConditionRequest.model_validate(
        {
            "base_price": "1000",
            "mode": "negotiated",
            "negotiated_price": "800",
            "condition": {"advance_type": "amount", "advance_amount": "200"},
        }
    )

    response = pricing.resolve_commercial_condition(payload)

    assert response.total_to_pay == Decimal("800.00")
    assert response.advance_amount == Decimal("200.00")
    assert response.deferred_amount == Decimal("600.00")


def test_condition_endpoint_maps_oversized_advance_to_422():
    payload = ResolveConditionRequest.model_validate(
        {"base_price": "100", "condition": {"advance_type": "fixed_amount", "advance_amount": "150"}}
    )
    with pytest.raises(HTTPException) as exc:
        pricing.resolve_commercial_condition(payload)
    assert exc.value.status_code == 422


def _body(studio, **overrides) -> AuthorizeQuotationBody:
    values = {"promise_id": studio.lead_id, "condition_id": studio.condition_id, "amount": "1762.20"}
    values.update(overrides)
    return AuthorizeQuotationBody.model_validate(values)


def test_authorize_endpoint(db_session, studio, dispatcher):
    response = quotations.authorize_quotation(
        studio.id, studio.quotation_a_id, _body(studio), db=db_session, dispatcher=dispatcher
    )

    assert response.quotation_status == QuotationStatus.AUTHORIZED
    assert response.archived_quotation_ids == [studio.quotation_b_id]
    assert db_session.get(Quotation, studio.quotation_a_id).event_id == response.event_id


def test_authorize_endpoint_maps_domain_errors(db_session, studio, dispatcher):
    with pytest.raises(HTTPException) as missing:
        quotations.authorize_quotation(studio.id, 9999, _body(studio), db=db_session, dispatcher=dispatcher)
    assert missing.value.status_code == 404

    quotations.authorize_quotation(studio.id, studio.quotation_a_id, _body(studio), db=db_session, dispatcher=dispatcher)
    with pytest.raises(HTTPException) as conflict:
        quotations.authorize_quotation(
            studio.id, studio.quotation_a_id, _body(studio), db=db_session, dispatcher=dispatcher
        )
    assert conflict.value.status_code == 409


def test_authorize_endpoint_rejects_non_positive_path_ids(db_session, studio, dispatcher):
    with pytest.raises(HTTPException) as invalid:
        quotations.authorize_quotation(0, studio.quotation_a_id, _body(studio), db=db_session, dispatcher=dispatcher)

    assert invalid.value.status_code == 422
    db_session.expire_all()
    assert db_session.get(Quotation, studio.quotation_a_id).status == QuotationStatus.DRAFT


def test_transaction_errors_hide_their_cause():
    code, detail = map_domain_error(TransactionError("authorization failed at step 'create_event'"))
    assert code == 500
    assert "create_event" not in detail
