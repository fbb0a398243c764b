"""Canonical state transition helpers for pipeline entities."""

from __future__ import annotations

from collections.abc import Hashable, Mapping

from studio_quotes.core.exceptions import ValidationError


class InvalidTransitionError(ValidationError):
    """Raised when a disallowed state transition is attempted."""


class StateMachine:
    """Table-driven state machine. `None` stands for "no state yet"."""

    def __init__(self, transitions: Mapping[Hashable | None, set[Hashable]]) -> None:
        self._transitions = {state: frozenset(targets) for state, targets in transitions.items()}

    def can_transition(self, current: Hashable | None, target: Hashable) -> bool:
        return target in self._transitions.get(current, frozenset())

    def assert_transition(self, current: Hashable | None, target: Hashable) -> None:
        if not self.can_transition(current=current, target=target):
            raise InvalidTransitionError(f"Transition not allowed: {current} -> {target}")

    def allowed_targets(self, current: Hashable | None) -> frozenset[Hashable]:
        return self._transitions.get(current, frozenset())
