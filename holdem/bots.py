from __future__ import annotations

import random
from typing import Optional

from .errors import ContractViolation
from .models import Action, ActionType, TableSnapshot


# Baseline decision actors. They only see a TableSnapshot and answer with an
# Action, exactly like any external player would.


def passive_strategy(state: TableSnapshot) -> Action:
    """Check when free, otherwise call; never puts in a voluntary bet."""
    legal = state.legal
    if legal is None:
        raise ContractViolation("No decision pending")
    if ActionType.CHECK in legal.actions:
        return Action.check()
    if ActionType.CALL in legal.actions:
        return Action.call()
    return Action.fold()


class RandomStrategy:
    """Pick uniformly among legal moves; bet and raise sizes range from the minimum to all-in."""

    def __init__(self, rng: Optional[random.Random] = None, all_in_rate: float = 0.1) -> None:
        self.rng = rng or random.Random()
        self.all_in_rate = all_in_rate

    def __call__(self, state: TableSnapshot) -> Action:
        legal = state.legal
        if legal is None:
            raise ContractViolation("No decision pending")

        choice = self.rng.choice(legal.actions)
        if choice == ActionType.BET:
            return Action.bet(self._size(legal.min_bet, legal.max_raise_to))
        if choice == ActionType.RAISE:
            return Action.raise_to(self._size(legal.min_raise_to, legal.max_raise_to))
        if choice == ActionType.CALL:
            return Action.call()
        if choice == ActionType.CHECK:
            return Action.check()
        return Action.fold()

    def _size(self, lower: Optional[int], upper: Optional[int]) -> int:
        if lower is None or upper is None:
            raise ContractViolation("Sizing requested without bounds")
        if upper <= lower or self.rng.random() < self.all_in_rate:
            return upper
        return self.rng.randint(lower, upper)
