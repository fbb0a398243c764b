"""
Quotation authorization.

Turns a draft quotation into a confirmed event in one transaction: the event
is created, the contact becomes a client, the quotation is claimed and priced,
its siblings are archived, the lead moves to the approved stage and the
optional payment and contract request are recorded. Audit logging and the
calendar, notification and contract follow-ups happen only after commit and
never undo it.
"""

from __future__ import annotations

import logging
import uuid
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from pydantic import ValidationError as PydanticValidationError
from sqlalchemy import func, select, update
from sqlalchemy.orm import Session

from studio_quotes.collaborators import TaskDispatcher
from studio_quotes.core.exceptions import ConflictError, NotFoundError, ValidationError
from studio_quotes.core.logging import LogContext, build_log_event
from studio_quotes.models import (
    CommercialCondition,
    Contact,
    ContractRequest,
    ContractTemplate,
    Event,
    EventPipelineStage,
    Payment,
    Promise,
    Quotation,
)
from studio_quotes.models.base import utcnow
from studio_quotes.models.enums import ContactStatus, PaymentStatus, QuotationStatus
from studio_quotes.orchestration.lead_pipeline import LeadPipeline
from studio_quotes.orchestration.state_machine import StateMachine
from studio_quotes.orchestration.transaction import TransactionalPipeline, TransactionStep
from studio_quotes.pricing.condition_resolver import ConditionBreakdown
from studio_quotes.pricing.money import round_money
from studio_quotes.schemas.authorization import AuthorizeQuotationRequest
from studio_quotes.services.base_service import BaseService
from studio_quotes.services.commercial_condition_service import CommercialConditionService
from studio_quotes.services.promise_log_service import PromiseLogService
from studio_quotes.services.quotation_service import breakdown_for
from studio_quotes.tasks.registry import GENERATE_CONTRACT, NOTIFY_QUOTE_APPROVED, SYNC_EVENT_CALENDAR

logger = logging.getLogger(__name__)

QUOTATION_TRANSITIONS = StateMachine(
    {
        QuotationStatus.DRAFT: {QuotationStatus.AUTHORIZED, QuotationStatus.CANCELLED},
        QuotationStatus.AUTHORIZED: {QuotationStatus.CANCELLED},
        QuotationStatus.CANCELLED: set(),
    }
)


@dataclass
class AuthorizationContext:
    """Everything the transactional steps read and produce."""

    request: AuthorizeQuotationRequest
    quotation: Quotation
    promise: Promise
    contact: Contact
    condition: CommercialCondition
    breakdown: ConditionBreakdown
    event_stage: EventPipelineStage
    lead_pipeline: LeadPipeline
    now: datetime
    trace_id: str
    event: Event | None = None
    payment: Payment | None = None
    contract_request: ContractRequest | None = None
    archived_quotation_ids: list[int] = field(default_factory=list)

    def log_context(self) -> LogContext:
        return LogContext(
            studio_id=str(self.request.studio_id),
            promise_id=str(self.promise.id),
            quotation_id=str(self.quotation.id),
            event_id=str(self.event.id) if self.event is not None else None,
            trace_id=self.trace_id,
        )


@dataclass(frozen=True)
class AuthorizationResult:
    event_id: int
    quotation_status: QuotationStatus
    payment_id: int | None = None
    contract_request_id: int | None = None
    archived_quotation_ids: tuple[int, ...] = ()


# -- transactional steps ------------------------------------------------


class CreateEventStep:
    name = "create_event"
    best_effort = False

    def __call__(self, db: Session, ctx: AuthorizationContext) -> None:
        event = Event(
            studio_id=ctx.request.studio_id,
            contact_id=ctx.contact.id,
            promise_id=ctx.promise.id,
            quotation_id=ctx.quotation.id,
            stage_id=ctx.event_stage.id,
            event_type=ctx.promise.event_type,
            name=ctx.promise.name or ctx.quotation.name,
            address=ctx.promise.event_location,
            event_date=ctx.promise.event_date,
        )
        db.add(event)
        db.flush()
        ctx.event = event


class PromoteContactStep:
    name = "promote_contact"
    best_effort = False

    def __call__(self, db: Session, ctx: AuthorizationContext) -> None:
        if ctx.contact.status == ContactStatus.PROSPECT:
            ctx.contact.status = ContactStatus.CLIENT


class ClaimQuotationStep:
    """Compare-and-set on the draft status so only one concurrent request wins."""

    name = "claim_quotation"
    best_effort = False

    def __call__(self, db: Session, ctx: AuthorizationContext) -> None:
        result = db.execute(
            update(Quotation)
            .where(
                Quotation.id == ctx.quotation.id,
                Quotation.status == QuotationStatus.DRAFT,
                Quotation.archived.is_(False),
            )
            .values(
                status=QuotationStatus.AUTHORIZED,
                event_id=ctx.event.id,
                commercial_condition_id=ctx.condition.id,
                final_price=ctx.breakdown.total_to_pay,
                payment_promise_date=ctx.now,
                payment_registered=ctx.request.payment is not None,
            )
        )
        if result.rowcount != 1:
            raise ConflictError(f"Quotation {ctx.quotation.id} was authorized or archived concurrently")


class ArchiveSiblingQuotationsStep:
    name = "archive_siblings"
    best_effort = False

    def __call__(self, db: Session, ctx: AuthorizationContext) -> None:
        sibling_ids = list(
            db.scalars(
                select(Quotation.id).where(
                    Quotation.promise_id == ctx.promise.id,
                    Quotation.id != ctx.quotation.id,
                    Quotation.archived.is_(False),
                    Quotation.status != QuotationStatus.CANCELLED,
                )
            )
        )
        if sibling_ids:
            db.execute(update(Quotation).where(Quotation.id.in_(sibling_ids)).values(archived=True))
        ctx.archived_quotation_ids = sibling_ids


class ApproveLeadStep:
    name = "approve_lead"
    best_effort = False

    def __call__(self, db: Session, ctx: AuthorizationContext) -> None:
        ctx.lead_pipeline.approve(ctx.promise)


class RegisterPaymentStep:
    name = "register_payment"
    best_effort = False

    def __call__(self, db: Session, ctx: AuthorizationContext) -> None:
        data = ctx.request.payment
        if data is None:
            return
        payment = Payment(
            studio_id=ctx.request.studio_id,
            contact_id=ctx.contact.id,
            event_id=ctx.event.id,
            quotation_id=ctx.quotation.id,
            amount=round_money(data.amount),
            method=data.method,
            payment_date=data.payment_date,
            concept=data.concept,
            status=PaymentStatus.COMPLETED,
        )
        db.add(payment)
        db.flush()
        ctx.payment = payment


class RequestContractStep:
    """Record a contract request. Failure is tolerated and leaves no request row."""

    name = "request_contract"
    best_effort = True

    def __call__(self, db: Session, ctx: AuthorizationContext) -> None:
        template_id = ctx.request.contract_template_id
        if template_id is None:
            return
        template = db.scalar(
            select(ContractTemplate).where(
                ContractTemplate.id == template_id,
                ContractTemplate.studio_id == ctx.request.studio_id,
            )
        )
        if template is None:
            raise NotFoundError(f"Contract template {template_id} not found")
        contract_request = ContractRequest(
            studio_id=ctx.request.studio_id,
            event_id=ctx.event.id,
            template_id=template.id,
        )
        db.add(contract_request)
        db.flush()
        ctx.contract_request = contract_request


AUTHORIZATION_STEPS: tuple[TransactionStep, ...] = (
    CreateEventStep(),
    PromoteContactStep(),
    ClaimQuotationStep(),
    ArchiveSiblingQuotationsStep(),
    ApproveLeadStep(),
    RegisterPaymentStep(),
    RequestContractStep(),
)


# -- orchestrator -------------------------------------------------------


def _default_dispatcher() -> TaskDispatcher:
    from studio_quotes.tasks.followup_tasks import CeleryTaskDispatcher

    return CeleryTaskDispatcher()


class AuthorizationOrchestrator(BaseService):
    """Authorize a quotation and fan out the post-commit follow-ups."""

    def __init__(
        self,
        db: Session | None = None,
        dispatcher: TaskDispatcher | None = None,
        clock: Callable[[], datetime] = utcnow,
        steps: Sequence[TransactionStep] = AUTHORIZATION_STEPS,
    ) -> None:
        super().__init__(db)
        self.dispatcher = dispatcher or _default_dispatcher()
        self.clock = clock
        self.pipeline = TransactionalPipeline(steps, name="authorization")

    def authorize_quotation(self, request: AuthorizeQuotationRequest | dict[str, Any]) -> AuthorizationResult:
        request = self._validate_request(request)
        trace_id = uuid.uuid4().hex
        logger.info(
            "authorization.start",
            extra=build_log_event(
                "authorization.start",
                LogContext(
                    studio_id=str(request.studio_id),
                    promise_id=str(request.promise_id),
                    quotation_id=str(request.quotation_id),
                    trace_id=trace_id,
                ),
                amount=str(request.amount),
            ),
        )

        try:
            ctx = self._load_context(request, trace_id)
        except Exception:
            self.db.rollback()
            raise

        self.pipeline.run(self.db, ctx)
        result = AuthorizationResult(
            event_id=ctx.event.id,
            quotation_status=QuotationStatus.AUTHORIZED,
            payment_id=ctx.payment.id if ctx.payment is not None else None,
            contract_request_id=ctx.contract_request.id if ctx.contract_request is not None else None,
            archived_quotation_ids=tuple(ctx.archived_quotation_ids),
        )
        logger.info(
            "authorization.committed",
            extra=build_log_event(
                "authorization.committed",
                ctx.log_context(),
                total_to_pay=str(ctx.breakdown.total_to_pay),
                archived_quotation_ids=list(result.archived_quotation_ids),
            ),
        )

        self._record_audit_log(ctx, result)
        self._dispatch_follow_ups(ctx, result)
        return result

    # -- preconditions --------------------------------------------------

    @staticmethod
    def _validate_request(request: AuthorizeQuotationRequest | dict[str, Any]) -> AuthorizeQuotationRequest:
        if isinstance(request, AuthorizeQuotationRequest):
            return request
        try:
            return AuthorizeQuotationRequest.model_validate(request)
        except PydanticValidationError as exc:
            raise ValidationError(f"Invalid authorization request: {exc}") from exc

    def _load_context(self, request: AuthorizeQuotationRequest, trace_id: str) -> AuthorizationContext:
        quotation = self.db.scalar(
            select(Quotation)
            .where(Quotation.id == request.quotation_id, Quotation.studio_id == request.studio_id)
            .with_for_update()
        )
        if quotation is None:
            raise NotFoundError(f"Quotation {request.quotation_id} not found")
        if quotation.archived or not QUOTATION_TRANSITIONS.can_transition(
            quotation.status, QuotationStatus.AUTHORIZED
        ):
            state = "archived" if quotation.archived else quotation.status.value
            raise ConflictError(f"Quotation {quotation.id} is {state} and cannot be authorized")
        if quotation.promise_id != request.promise_id:
            raise ConflictError(f"Quotation {quotation.id} does not belong to lead {request.promise_id}")

        promise = quotation.promise
        if promise is None or promise.studio_id != request.studio_id:
            raise ConflictError(f"Lead {request.promise_id} does not belong to studio {request.studio_id}")
        already_authorized = self.db.scalar(
            select(func.count(Quotation.id)).where(
                Quotation.promise_id == promise.id,
                Quotation.id != quotation.id,
                Quotation.status == QuotationStatus.AUTHORIZED,
            )
        )
        if already_authorized:
            raise ConflictError(f"Lead {promise.id} already has an authorized quotation")
        if promise.event_date is None:
            raise ValidationError("The lead has no confirmed event date")
        if promise.contact is None:
            raise ValidationError("The lead has no associated contact")

        condition = CommercialConditionService(self.db).get_for_quotation(
            request.studio_id, request.condition_id, quotation.id
        )
        event_stage = self.db.scalar(
            select(EventPipelineStage)
            .where(EventPipelineStage.studio_id == request.studio_id, EventPipelineStage.is_active.is_(True))
            .order_by(EventPipelineStage.order, EventPipelineStage.id)
            .limit(1)
        )
        if event_stage is None:
            raise ValidationError("The studio has no active event pipeline stage")
        lead_pipeline = LeadPipeline(self.db, request.studio_id)
        lead_pipeline.approved_stage()

        breakdown = breakdown_for(quotation, condition)
        if round_money(request.amount) != breakdown.total_to_pay:
            raise ValidationError(
                f"Amount {request.amount} does not match the total to pay {breakdown.total_to_pay}"
            )
        if request.payment is not None and request.payment.amount > breakdown.total_to_pay:
            raise ValidationError("Payment amount cannot exceed the total to pay")

        return AuthorizationContext(
            request=request,
            quotation=quotation,
            promise=promise,
            contact=promise.contact,
            condition=condition,
            breakdown=breakdown,
            event_stage=event_stage,
            lead_pipeline=lead_pipeline,
            now=self.clock(),
            trace_id=trace_id,
        )

    # -- post-commit ----------------------------------------------------

    def _record_audit_log(self, ctx: AuthorizationContext, result: AuthorizationResult) -> None:
        try:
            PromiseLogService(self.db).log_action(
                studio_id=ctx.request.studio_id,
                promise_id=ctx.promise.id,
                action="quotation_authorized",
                origin="system",
                payload={
                    "quotation_id": ctx.quotation.id,
                    "event_id": result.event_id,
                    "condition_id": ctx.condition.id,
                    "amount": str(ctx.breakdown.total_to_pay),
                    "payment_registered": result.payment_id is not None,
                },
            )
        except Exception as exc:
            self.db.rollback()
            logger.warning(
                "authorization.audit_log_failed",
                extra=build_log_event("authorization.audit_log_failed", ctx.log_context(), error=str(exc)),
            )

    def _follow_ups(self, ctx: AuthorizationContext, result: AuthorizationResult) -> list[tuple[str, dict[str, Any]]]:
        common = {"studio_id": ctx.request.studio_id, "trace_id": ctx.trace_id}
        follow_ups = [
            (SYNC_EVENT_CALENDAR, {**common, "event_id": result.event_id}),
            (
                NOTIFY_QUOTE_APPROVED,
                {
                    **common,
                    "quotation_id": ctx.quotation.id,
                    "promise_id": ctx.promise.id,
                    "event_id": result.event_id,
                    "contact_name": ctx.contact.name,
                    "amount": str(ctx.breakdown.total_to_pay),
                },
            ),
        ]
        if result.contract_request_id is not None:
            follow_ups.append(
                (
                    GENERATE_CONTRACT,
                    {
                        **common,
                        "event_id": result.event_id,
                        "template_id": ctx.request.contract_template_id,
                        "contract_request_id": result.contract_request_id,
                    },
                )
            )
        return follow_ups

    def _dispatch_follow_ups(self, ctx: AuthorizationContext, result: AuthorizationResult) -> None:
        for task_name, kwargs in self._follow_ups(ctx, result):
            try:
                self.dispatcher.dispatch(task_name, **kwargs)
            except Exception as exc:
                logger.warning(
                    "authorization.follow_up_dispatch_failed",
                    extra=build_log_event(
                        "authorization.follow_up_dispatch_failed",
                        ctx.log_context(),
                        task_name=task_name,
                        error=str(exc),
                    ),
                )
