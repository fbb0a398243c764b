from __future__ import annotations

from decimal import Decimal

import pytest

from studio_quotes.core.exceptions import NotFoundError, ValidationError
from studio_quotes.models.enums import AdvanceType
from studio_quotes.services.commercial_condition_service import CommercialConditionService
from studio_quotes.services.promise_log_service import PromiseLogService


def test_legacy_amount_advance_type_is_normalized(db_session, studio):
    condition = CommercialConditionService(db_session).create_condition(
        studio.id, "Deposit", advance_type="amount", advance_amount=Decimal("500")
    )
    assert condition.advance_type == AdvanceType.FIXED_AMOUNT


def test_invalid_terms_are_rejected_before_saving(db_session, studio):
    service = CommercialConditionService(db_session)
    with pytest.raises(ValidationError):
        service.create_condition(studio.id, "Too generous", discount_percentage=Decimal("150"))
    with pytest.raises(ValidationError):
        service.create_condition(studio.id, "Odd", advance_type="barter")
    with pytest.raises(ValidationError):
        service.create_condition(studio.id, "  ")
    assert [row.id for row in service.list_reusable(studio.id)] == [studio.condition_id]


def test_temporary_conditions_are_not_reusable(db_session, studio):
    service = CommercialConditionService(db_session)
    temporary = service.create_temporary_condition(
        studio.id, studio.quotation_a_id, "One-off", discount_percentage=Decimal("5")
    )

    assert temporary.is_temporary is True
    assert temporary.id not in [row.id for row in service.list_reusable(studio.id)]
    assert service.get_for_quotation(studio.id, temporary.id, studio.quotation_a_id).id == temporary.id
    with pytest.raises(NotFoundError):
        service.get_for_quotation(studio.id, temporary.id, studio.quotation_b_id)


def test_conditions_are_scoped_to_the_studio(db_session, studio):
    with pytest.raises(NotFoundError):
        CommercialConditionService(db_session).get_for_quotation(studio.id + 1, studio.condition_id, studio.quotation_a_id)


def test_promise_log_entries_are_listed_in_order(db_session, studio):
    service = PromiseLogService(db_session)
    service.log_action(studio.id, studio.lead_id, "quotation_sent", {"quotation_id": studio.quotation_a_id})
    service.log_action(studio.id, studio.lead_id, "call_scheduled")

    assert [entry.action for entry in service.list_for_promise(studio.id, studio.lead_id)] == [
        "quotation_sent",
        "call_scheduled",
    ]
