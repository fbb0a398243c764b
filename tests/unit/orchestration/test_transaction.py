from __future__ import annotations

import pytest
from sqlalchemy import select

from studio_quotes.core.exceptions import ConflictError, TransactionError
from studio_quotes.models import Studio
from studio_quotes.orchestration.transaction import TransactionalPipeline


class _AddStudio:
    best_effort = False

    def __init__(self, slug: str) -> None:
        self.name = f"add_{slug}"
        self.slug = slug

    def __call__(self, db, context) -> None:
        db.add(Studio(slug=self.slug, name=self.slug.title()))
        context.append(self.slug)


class _Boom:
    name = "boom"
    best_effort = False

    def __init__(self, error: Exception) -> None:
        self.error = error

    def __call__(self, db, context) -> None:
        raise self.error


class _OptionalBoom(_Boom):
    name = "optional_boom"
    best_effort = True

    def __call__(self, db, context) -> None:
        db.add(Studio(slug="ghost", name="Ghost"))
        db.flush()
        raise self.error


def _slugs(db) -> list[str]:
    return sorted(db.scalars(select(Studio.slug)))


def test_all_steps_commit_together(db_session):
    context: list[str] = []
    completed = TransactionalPipeline([_AddStudio("a"), _AddStudio("b")]).run(db_session, context)

    assert completed == ["add_a", "add_b"]
    assert _slugs(db_session) == ["a", "b"]


def test_failure_rolls_back_every_step(db_session):
    pipeline = TransactionalPipeline([_AddStudio("a"), _Boom(RuntimeError("disk full")), _AddStudio("b")])

    with pytest.raises(TransactionError, match="boom") as exc:
        pipeline.run(db_session, [])

    assert isinstance(exc.value.__cause__, RuntimeError)
    assert _slugs(db_session) == []


def test_conflict_is_reraised_unchanged(db_session):
    pipeline = TransactionalPipeline([_AddStudio("a"), _Boom(ConflictError("taken"))])

    with pytest.raises(ConflictError):
        pipeline.run(db_session, [])
    assert _slugs(db_session) == []


def test_best_effort_failure_is_discarded_and_the_rest_commits(db_session):
    pipeline = TransactionalPipeline([_AddStudio("a"), _OptionalBoom(RuntimeError("offline")), _AddStudio("b")])

    completed = pipeline.run(db_session, [])

    assert completed == ["add_a", "add_b"]
    assert _slugs(db_session) == ["a", "b"]
