"""SQLAlchemy model package for the studio schema."""

from studio_quotes.models.base import Base
from studio_quotes.models.catalog import CatalogCategory, CatalogItem
from studio_quotes.models.commercial_condition import CommercialCondition
from studio_quotes.models.contact import Contact
from studio_quotes.models.enums import (
    AdvanceType,
    BillingType,
    ContactStatus,
    ContractRequestStatus,
    EventStatus,
    MarginClass,
    PaymentStatus,
    PricingMode,
    QuotationStatus,
)
from studio_quotes.models.event import Event
from studio_quotes.models.payment import ContractRequest, ContractTemplate, Payment
from studio_quotes.models.pipeline_stage import EventPipelineStage, PromisePipelineStage
from studio_quotes.models.promise import Promise, PromiseTag, PromiseTagLink
from studio_quotes.models.promise_log import PromiseLog
from studio_quotes.models.quotation import Quotation, QuotationItem
from studio_quotes.models.studio import PricingConfiguration, Studio

__all__ = [
    "AdvanceType",
    "Base",
    "BillingType",
    "CatalogCategory",
    "CatalogItem",
    "CommercialCondition",
    "Contact",
    "ContactStatus",
    "ContractRequest",
    "ContractRequestStatus",
    "ContractTemplate",
    "Event",
    "EventPipelineStage",
    "EventStatus",
    "MarginClass",
    "Payment",
    "PaymentStatus",
    "PricingConfiguration",
    "PricingMode",
    "Promise",
    "PromiseLog",
    "PromisePipelineStage",
    "PromiseTag",
    "PromiseTagLink",
    "Quotation",
    "QuotationItem",
    "QuotationStatus",
    "Studio",
]
