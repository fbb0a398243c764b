"""
Ordered unit-of-work runner.

Steps run inside the session's current transaction. The pipeline commits once
after the last step; any failure rolls the whole unit back. Steps flagged as
best-effort run under a savepoint so their failure is logged and discarded
without aborting the rest.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Any, Protocol

from sqlalchemy.orm import Session

from studio_quotes.core.exceptions import ConflictError, TransactionError, TransientCollaboratorError, ValidationError

logger = logging.getLogger(__name__)

PASSTHROUGH_ERRORS: tuple[type[Exception], ...] = (ConflictError, ValidationError)


class TransactionStep(Protocol):
    name: str
    best_effort: bool

    def __call__(self, db: Session, context: Any) -> None: ...


class TransactionalPipeline:
    """Run steps against one session and commit them as a single unit."""

    def __init__(self, steps: Sequence[TransactionStep], name: str = "transaction") -> None:
        self.steps = tuple(steps)
        self.name = name

    def run(self, db: Session, context: Any) -> list[str]:
        """Execute every step and commit. Returns the names of the steps that took effect."""
        completed: list[str] = []
        current = None
        try:
            for step in self.steps:
                current = step
                if getattr(step, "best_effort", False):
                    if self._run_best_effort(db, step, context):
                        completed.append(step.name)
                    continue
                step(db, context)
                db.flush()
                completed.append(step.name)
            current = None
            db.commit()
        except PASSTHROUGH_ERRORS:
            db.rollback()
            logger.info(
                f"{self.name}.rolled_back",
                extra={"event": f"{self.name}.rolled_back", "step": getattr(current, "name", "commit")},
            )
            raise
        except Exception as exc:
            db.rollback()
            step_name = getattr(current, "name", "commit")
            logger.exception(
                f"{self.name}.failed",
                extra={"event": f"{self.name}.failed", "step": step_name, "completed_steps": completed},
            )
            raise TransactionError(f"{self.name} failed at step '{step_name}'") from exc
        return completed

    def _run_best_effort(self, db: Session, step: TransactionStep, context: Any) -> bool:
        try:
            with db.begin_nested():
                step(db, context)
        except Exception as exc:
            error = TransientCollaboratorError(f"{step.name} skipped: {exc}")
            logger.warning(
                f"{self.name}.best_effort_step_failed",
                extra={"event": f"{self.name}.best_effort_step_failed", "step": step.name, "error": str(error)},
            )
            return False
        return True
