from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from types import SimpleNamespace

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from studio_quotes.models import (
    Base,
    CatalogCategory,
    CatalogItem,
    CommercialCondition,
    Contact,
    ContractTemplate,
    EventPipelineStage,
    PricingConfiguration,
    Promise,
    PromisePipelineStage,
    Studio,
)
from studio_quotes.models.enums import AdvanceType, BillingType, MarginClass
from studio_quotes.services.quotation_service import QuotationService


class RecordingDispatcher:
    def __init__(self) -> None:
        self.calls: list[tuple[str, dict]] = []

    def dispatch(self, task_name: str, **kwargs) -> str:
        self.calls.append((task_name, kwargs))
        return f"task-{len(self.calls)}"

    def names(self) -> list[str]:
        return [name for name, _ in self.calls]


class FailingDispatcher:
    def dispatch(self, task_name: str, **kwargs) -> str:
        raise ConnectionError("broker unavailable")


def _build_session_factory() -> sessionmaker:
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    return sessionmaker(bind=engine, autocommit=False, autoflush=False)


@pytest.fixture
def session_factory() -> sessionmaker:
    return _build_session_factory()


@pytest.fixture
def db_session(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def dispatcher() -> RecordingDispatcher:
    return RecordingDispatcher()


@pytest.fixture
def failing_dispatcher() -> FailingDispatcher:
    return FailingDispatcher()


@pytest.fixture
def studio(db_session):
    """A studio with catalog, pipelines, a lead with two draft quotations and a 10%/50% condition.

    Pricing: service margin 30%, product margin 20%, commission 10%, no markup.
      session  cost 1000 (service) -> 1430.00
      album    cost  200 (product) ->  264.00
      coverage cost  100 (service, hourly) -> 143.00 per hour
    Quotation A: 1 session + 2 albums = 1958.00
    Quotation B: 1 session            = 1430.00
    """
    s = db_session
    studio = Studio(slug="luz-studio", name="Luz Studio")
    s.add(studio)
    s.flush()
    sid = studio.id

    s.add(
        PricingConfiguration(
            studio_id=sid,
            service_margin=Decimal("30"),
            product_margin=Decimal("20"),
            sales_commission=Decimal("10"),
            markup=Decimal("0"),
        )
    )
    services = CatalogCategory(studio_id=sid, name="Services", margin_class=MarginClass.SERVICE, order=0)
    products = CatalogCategory(studio_id=sid, name="Products", margin_class=MarginClass.PRODUCT, order=1)
    s.add_all([services, products])
    s.flush()
    session_item = CatalogItem(studio_id=sid, category_id=services.id, name="Session", cost=Decimal("1000"), expense=Decimal("50"), order=0)
    coverage_item = CatalogItem(
        studio_id=sid,
        category_id=services.id,
        name="Coverage",
        cost=Decimal("100"),
        billing_type=BillingType.HOUR,
        order=1,
    )
    album_item = CatalogItem(studio_id=sid, category_id=products.id, name="Album", cost=Decimal("200"), expense=Decimal("10"), order=0)
    s.add_all([session_item, coverage_item, album_item])

    stages = [
        PromisePipelineStage(studio_id=sid, slug="pending", name="Pending", order=0),
        PromisePipelineStage(studio_id=sid, slug="negotiation", name="Negotiation", order=1),
        PromisePipelineStage(studio_id=sid, slug="approved", name="Approved", order=2),
    ]
    event_stages = [
        EventPipelineStage(studio_id=sid, slug="planning", name="Planning", order=0),
        EventPipelineStage(studio_id=sid, slug="delivered", name="Delivered", order=1),
    ]
    s.add_all(stages + event_stages)

    contact = Contact(studio_id=sid, name="Ana Ruiz", email="ana@example.com")
    s.add(contact)
    s.flush()
    lead = Promise(
        studio_id=sid,
        contact_id=contact.id,
        pipeline_stage_id=stages[1].id,
        name="Ruiz wedding",
        event_type="wedding",
        event_location="Hacienda San Miguel",
        event_date=datetime(2027, 5, 22, 17, 0),
    )
    s.add(lead)
    condition = CommercialCondition(
        studio_id=sid,
        name="10% off, half up front",
        discount_percentage=Decimal("10"),
        advance_type=AdvanceType.PERCENTAGE,
        advance_percentage=Decimal("50"),
    )
    template = ContractTemplate(studio_id=sid, name="Standard wedding contract")
    s.add_all([condition, template])
    s.commit()

    quotations = QuotationService(s)
    quotation_a = quotations.create_quotation(sid, lead.id, "Full day", {session_item.id: 1, album_item.id: 2})
    quotation_b = quotations.create_quotation(sid, lead.id, "Essentials", {session_item.id: 1})

    return SimpleNamespace(
        id=sid,
        session_item_id=session_item.id,
        coverage_item_id=coverage_item.id,
        album_item_id=album_item.id,
        contact_id=contact.id,
        lead_id=lead.id,
        condition_id=condition.id,
        template_id=template.id,
        quotation_a_id=quotation_a.id,
        quotation_b_id=quotation_b.id,
    )
