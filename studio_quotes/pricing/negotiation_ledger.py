"""
Negotiation Adjustment Ledger

Tracks the adjustments a studio makes while negotiating a quotation:

- courtesy lines: kept visible but excluded from the payable subtotal
- a flat special bonus subtracted after courtesies
- an optional custom price that is frozen into the quotation's negotiated price

    projected_subtotal = catalog_subtotal - courtesy_total - special_bonus >= 0

Any adjustment that would push the projected subtotal below zero is rejected
with a ValidationError and leaves the ledger untouched.
"""

from __future__ import annotations

import enum
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from decimal import Decimal

from studio_quotes.core.exceptions import ValidationError
from studio_quotes.pricing.catalog_calculator import PricedLine
from studio_quotes.pricing.money import ZERO, require_non_negative, round_money, to_decimal


class ClearScope(str, enum.Enum):
    COURTESIES = "courtesies"
    ALL = "all"


@dataclass(frozen=True)
class NegotiationAdjustment:
    """Snapshot of the ledger state, folded into the quotation when persisted."""

    courtesy_item_ids: frozenset[int]
    special_bonus: Decimal
    custom_price: Decimal | None


@dataclass(frozen=True)
class CourtesyImpact:
    courtesy_total: Decimal
    profit_impact: Decimal


class NegotiationLedger:
    """Courtesy flags, special bonus and custom price for one quotation."""

    def __init__(
        self,
        lines: Sequence[PricedLine],
        courtesy_item_ids: Iterable[int] = (),
        special_bonus: Decimal | int | str = ZERO,
        custom_price: Decimal | int | str | None = None,
    ) -> None:
        self._lines: dict[int, PricedLine] = {line.item_id: line for line in lines}
        self._courtesy_ids: set[int] = set()
        self._special_bonus = ZERO
        self._custom_price: Decimal | None = None
        self.courtesy_mode = False

        courtesy = set(courtesy_item_ids)
        self._require_known(courtesy)
        bonus = self._bonus_value(special_bonus)
        self._check_projected(courtesy, bonus)
        self._courtesy_ids = courtesy
        self._special_bonus = bonus
        if custom_price is not None:
            self.set_custom_price(custom_price)

    # -- derived totals -------------------------------------------------

    @property
    def lines(self) -> tuple[PricedLine, ...]:
        return tuple(self._lines.values())

    @property
    def courtesy_item_ids(self) -> frozenset[int]:
        return frozenset(self._courtesy_ids)

    @property
    def special_bonus(self) -> Decimal:
        return self._special_bonus

    @property
    def custom_price(self) -> Decimal | None:
        return self._custom_price

    @property
    def catalog_subtotal(self) -> Decimal:
        return sum((line.line_total for line in self._lines.values()), ZERO)

    @property
    def courtesy_total(self) -> Decimal:
        return self._courtesy_sum(self._courtesy_ids)

    @property
    def total_discount(self) -> Decimal:
        return self.courtesy_total + self._special_bonus

    @property
    def projected_subtotal(self) -> Decimal:
        return self._projected(self._courtesy_ids, self._special_bonus)

    def is_courtesy(self, item_id: int) -> bool:
        return item_id in self._courtesy_ids

    # -- operations -----------------------------------------------------

    def toggle_courtesy_mode(self) -> bool:
        """Enter or leave the mode where selecting a line toggles its courtesy flag."""
        self.courtesy_mode = not self.courtesy_mode
        return self.courtesy_mode

    def select_item(self, item_id: int) -> bool:
        """Handle a line selection. Returns whether the line is now a courtesy."""
        if not self.courtesy_mode:
            return self.is_courtesy(item_id)
        if self.is_courtesy(item_id):
            self.unmark_courtesy(item_id)
            return False
        self.mark_courtesy(item_id)
        return True

    def mark_courtesy(self, item_id: int) -> None:
        self._require_known({item_id})
        candidate = self._courtesy_ids | {item_id}
        self._check_projected(candidate, self._special_bonus)
        self._courtesy_ids = candidate

    def unmark_courtesy(self, item_id: int) -> None:
        self._courtesy_ids.discard(item_id)

    def set_special_bonus(self, amount: Decimal | int | str) -> None:
        bonus = self._bonus_value(amount)
        self._check_projected(self._courtesy_ids, bonus)
        self._special_bonus = bonus

    def set_custom_price(self, amount: Decimal | int | str | None) -> None:
        if amount is None:
            self._custom_price = None
            return
        value = to_decimal(amount, "custom_price")
        self._custom_price = round_money(require_non_negative(value, "custom_price"))

    def clear(self, scope: ClearScope = ClearScope.COURTESIES) -> Decimal:
        """Unmark courtesies (and reset the bonus for ClearScope.ALL).

        The custom price is set to the recomputed projected subtotal so the
        cleared state is what gets frozen, never a stale adjusted price.
        """
        scope = ClearScope(scope)
        self._courtesy_ids = set()
        if scope == ClearScope.ALL:
            self._special_bonus = ZERO
        self._custom_price = self.projected_subtotal
        return self._custom_price

    def freeze(self) -> Decimal:
        """Return the price to persist as the quotation's negotiated price."""
        if self._custom_price is None:
            self._custom_price = self.projected_subtotal
        return self._custom_price

    def snapshot(self) -> NegotiationAdjustment:
        return NegotiationAdjustment(
            courtesy_item_ids=self.courtesy_item_ids,
            special_bonus=self._special_bonus,
            custom_price=self._custom_price,
        )

    def courtesy_impact(self) -> CourtesyImpact:
        """Profit lost on courtesy lines: their price is waived, their cost is not."""
        impact = ZERO
        for item_id in self._courtesy_ids:
            line = self._lines[item_id]
            impact -= line.line_total - line.cost_total - line.expense_total
        return CourtesyImpact(courtesy_total=self.courtesy_total, profit_impact=round_money(impact))

    # -- helpers --------------------------------------------------------

    def _courtesy_sum(self, item_ids: Iterable[int]) -> Decimal:
        return sum((self._lines[item_id].line_total for item_id in item_ids), ZERO)

    def _projected(self, item_ids: Iterable[int], bonus: Decimal) -> Decimal:
        return self.catalog_subtotal - self._courtesy_sum(item_ids) - bonus

    def _check_projected(self, item_ids: set[int], bonus: Decimal) -> None:
        projected = self._projected(item_ids, bonus)
        if projected < ZERO:
            raise ValidationError(
                f"Adjustment exceeds the catalog subtotal by {-projected}; projected subtotal cannot be negative"
            )

    def _require_known(self, item_ids: Iterable[int]) -> None:
        unknown = sorted(set(item_ids) - set(self._lines))
        if unknown:
            raise ValidationError(f"Unknown quotation line(s): {unknown}")

    @staticmethod
    def _bonus_value(amount: Decimal | int | str) -> Decimal:
        return round_money(require_non_negative(to_decimal(amount, "special_bonus"), "special_bonus"))
