"""Lead (promise) pipeline stage transitions and the cancelled tag."""

from __future__ import annotations

import logging

from sqlalchemy import select
from sqlalchemy.orm import Session

from studio_quotes.core.exceptions import ValidationError
from studio_quotes.models import Promise, PromisePipelineStage, PromiseTag
from studio_quotes.models.enums import APPROVED_STAGE_SLUG, CANCELLED_TAG_SLUG, PENDING_STAGE_SLUG
from studio_quotes.orchestration.state_machine import StateMachine

logger = logging.getLogger(__name__)


class LeadPipeline:
    """Stage movement for the leads of one studio.

    Intermediate stages are free-form. The approved stage can only be entered
    through `approve`, which the authorization flow calls inside its
    transaction.
    """

    def __init__(self, db: Session, studio_id: int) -> None:
        self.db = db
        self.studio_id = studio_id
        self._stages: list[PromisePipelineStage] | None = None

    def stages(self) -> list[PromisePipelineStage]:
        if self._stages is None:
            self._stages = list(
                self.db.scalars(
                    select(PromisePipelineStage)
                    .where(
                        PromisePipelineStage.studio_id == self.studio_id,
                        PromisePipelineStage.is_active.is_(True),
                    )
                    .order_by(PromisePipelineStage.order, PromisePipelineStage.id)
                )
            )
        return self._stages

    def stage_by_slug(self, slug: str) -> PromisePipelineStage | None:
        return next((stage for stage in self.stages() if stage.slug == slug), None)

    def initial_stage(self) -> PromisePipelineStage:
        """The `pending` stage, or the lowest-ordered active stage when the studio has none."""
        stage = self.stage_by_slug(PENDING_STAGE_SLUG)
        if stage is None and self.stages():
            stage = self.stages()[0]
        if stage is None:
            raise ValidationError(f"Studio {self.studio_id} has no active lead pipeline stages")
        return stage

    def approved_stage(self) -> PromisePipelineStage:
        stage = self.stage_by_slug(APPROVED_STAGE_SLUG)
        if stage is None:
            raise ValidationError(f"Studio {self.studio_id} has no active '{APPROVED_STAGE_SLUG}' stage")
        return stage

    def _slugs(self) -> set[str]:
        return {stage.slug for stage in self.stages()}

    def _source_slugs(self) -> set[str]:
        """Every stage slug of the studio, including deactivated ones a lead may still sit in."""
        return set(
            self.db.scalars(
                select(PromisePipelineStage.slug).where(PromisePipelineStage.studio_id == self.studio_id)
            )
        )

    def manual_transitions(self) -> StateMachine:
        targets = self._slugs() - {APPROVED_STAGE_SLUG}
        return StateMachine({current: targets - {current} for current in [None, *self._source_slugs()]})

    def authorization_transitions(self) -> StateMachine:
        return StateMachine({current: {APPROVED_STAGE_SLUG} for current in [None, *self._source_slugs()]})

    @staticmethod
    def current_slug(lead: Promise) -> str | None:
        return lead.pipeline_stage.slug if lead.pipeline_stage is not None else None

    def assign_initial_stage(self, lead: Promise) -> PromisePipelineStage:
        stage = self.initial_stage()
        self._set_stage(lead, stage)
        return stage

    def move_to_stage(self, lead: Promise, slug: str) -> PromisePipelineStage:
        """Move a lead between intermediate stages. Approval is not reachable from here."""
        self._require_same_studio(lead)
        stage = self.stage_by_slug(slug)
        if stage is None:
            raise ValidationError(f"Unknown lead pipeline stage: {slug}")
        self.manual_transitions().assert_transition(self.current_slug(lead), slug)
        self._set_stage(lead, stage)
        return stage

    def approve(self, lead: Promise) -> PromisePipelineStage:
        """Move the lead to `approved` and drop the cancelled marker."""
        self._require_same_studio(lead)
        stage = self.approved_stage()
        self.authorization_transitions().assert_transition(self.current_slug(lead), APPROVED_STAGE_SLUG)
        self._set_stage(lead, stage)
        self.detach_cancelled_tag(lead)
        return stage

    # -- cancelled tag --------------------------------------------------

    def _cancelled_tag(self, create: bool = False) -> PromiseTag | None:
        tag = self.db.scalar(
            select(PromiseTag).where(
                PromiseTag.studio_id == self.studio_id,
                PromiseTag.slug == CANCELLED_TAG_SLUG,
            )
        )
        if tag is None and create:
            tag = PromiseTag(studio_id=self.studio_id, slug=CANCELLED_TAG_SLUG, name="Cancelled")
            self.db.add(tag)
            self.db.flush()
        return tag

    def is_cancelled(self, lead: Promise) -> bool:
        return any(tag.slug == CANCELLED_TAG_SLUG for tag in lead.tags)

    def attach_cancelled_tag(self, lead: Promise) -> None:
        self._require_same_studio(lead)
        if self.is_cancelled(lead):
            return
        lead.tags.append(self._cancelled_tag(create=True))

    def detach_cancelled_tag(self, lead: Promise) -> bool:
        """Remove the cancelled tag if present. Returns whether it was removed."""
        tagged = [tag for tag in lead.tags if tag.slug == CANCELLED_TAG_SLUG]
        for tag in tagged:
            lead.tags.remove(tag)
        return bool(tagged)

    # -- helpers --------------------------------------------------------

    def _set_stage(self, lead: Promise, stage: PromisePipelineStage) -> None:
        previous = self.current_slug(lead)
        lead.pipeline_stage = stage
        lead.pipeline_stage_id = stage.id
        logger.info(
            "lead.stage_changed",
            extra={
                "event": "lead.stage_changed",
                "studio_id": self.studio_id,
                "promise_id": lead.id,
                "from_stage": previous,
                "to_stage": stage.slug,
            },
        )

    def _require_same_studio(self, lead: Promise) -> None:
        if lead.studio_id != self.studio_id:
            raise ValidationError(f"Lead {lead.id} does not belong to studio {self.studio_id}")
