"""Canonical enum values for the studio schema."""

from __future__ import annotations

import enum


class QuotationStatus(str, enum.Enum):
    DRAFT = "draft"
    AUTHORIZED = "authorized"
    CANCELLED = "cancelled"


class PricingMode(str, enum.Enum):
    STANDARD = "standard"
    NEGOTIATED = "negotiated"


class AdvanceType(str, enum.Enum):
    PERCENTAGE = "percentage"
    FIXED_AMOUNT = "fixed_amount"


class MarginClass(str, enum.Enum):
    SERVICE = "service"
    PRODUCT = "product"


class BillingType(str, enum.Enum):
    SERVICE = "service"
    UNIT = "unit"
    HOUR = "hour"


class ContactStatus(str, enum.Enum):
    PROSPECT = "prospect"
    CLIENT = "client"


class EventStatus(str, enum.Enum):
    ACTIVE = "active"
    CANCELLED = "cancelled"


class PaymentStatus(str, enum.Enum):
    COMPLETED = "completed"
    PENDING = "pending"


class ContractRequestStatus(str, enum.Enum):
    REQUESTED = "requested"
    GENERATED = "generated"
    FAILED = "failed"


PENDING_STAGE_SLUG = "pending"
APPROVED_STAGE_SLUG = "approved"
CANCELLED_TAG_SLUG = "cancelled"
