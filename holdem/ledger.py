from __future__ import annotations

import logging
from enum import Enum
from typing import Dict, Iterable, List, Mapping, Sequence

from .errors import ContractViolation, InsufficientChips
from .models import PlayerSeat, SidePot

LOGGER = logging.getLogger("holdem.ledger")

# PotLedger is the only place chips change hands. Everyone else reads it.


class AwardStatus(str, Enum):
    APPLIED = "APPLIED"
    ALREADY_APPLIED = "ALREADY_APPLIED"


def split_pot(amount: int, winners: Iterable[int]) -> Dict[int, int]:
    """Split evenly; the odd chips go to the first winner in seat order."""
    ordered = sorted(set(winners))
    if not ordered:
        raise ContractViolation("Cannot split a pot without winners")
    if amount < 0:
        raise ContractViolation("Pot amount must be non-negative")
    share, remainder = divmod(amount, len(ordered))
    shares = {seat_idx: share for seat_idx in ordered}
    shares[ordered[0]] += remainder
    return shares


def _require_amount(amount: int) -> None:
    if isinstance(amount, bool) or not isinstance(amount, int):
        raise ContractViolation(f"Chip amounts must be integers, got {amount!r}")
    if amount < 0:
        raise ContractViolation(f"Chip amounts must be non-negative, got {amount}")


class PotLedger:
    def __init__(self, seats: Sequence[PlayerSeat], last_transaction_id: int = 0) -> None:
        self._seats = seats
        self.committed: List[int] = [0] * len(seats)
        self.contributed: List[int] = [0] * len(seats)
        self.banked_pot = 0
        self.last_transaction_id = last_transaction_id
        self.settled = False

    @property
    def total_pot(self) -> int:
        return self.banked_pot + sum(self.committed)

    def stack(self, seat_idx: int) -> int:
        return self._seat(seat_idx).stack

    def chip_total(self) -> int:
        return sum(seat.stack for seat in self._seats) + self.total_pot

    def _seat(self, seat_idx: int) -> PlayerSeat:
        if not 0 <= seat_idx < len(self._seats):
            raise ContractViolation(f"Unknown seat {seat_idx}")
        return self._seats[seat_idx]

    def _require_open(self) -> None:
        if self.settled:
            raise ContractViolation("Pot already awarded for this hand")

    # Chip movement ---------------------------------------------------

    def commit(self, seat_idx: int, amount: int) -> None:
        self._require_open()
        _require_amount(amount)
        seat = self._seat(seat_idx)
        if amount > seat.stack:
            raise InsufficientChips(f"Seat {seat_idx} cannot commit {amount} with a stack of {seat.stack}")
        seat.stack -= amount
        self.committed[seat_idx] += amount
        self.contributed[seat_idx] += amount
        LOGGER.debug("Seat %s committed %s (street=%s, stack=%s)", seat_idx, amount, self.committed[seat_idx], seat.stack)

    def bank_street(self) -> None:
        self._require_open()
        self.banked_pot += sum(self.committed)
        self.committed = [0] * len(self._seats)

    def compute_side_pots(self, players: Sequence[PlayerSeat]) -> List[SidePot]:
        levels = sorted({amount for amount in self.contributed if amount > 0})
        pots: List[SidePot] = []
        previous = 0
        for level in levels:
            contributors = [idx for idx, amount in enumerate(self.contributed) if amount >= level]
            amount = (level - previous) * len(contributors)
            eligible = tuple(idx for idx in contributors if not players[idx].folded)
            previous = level
            if not eligible and pots:
                # Only folded seats reached this tier; fold it into the pot below.
                last = pots.pop()
                pots.append(SidePot(last.amount + amount, last.eligible_seats))
                continue
            pots.append(SidePot(amount, eligible))
        return pots

    def award(self, transaction_id: int, distribution: Mapping[int, int]) -> AwardStatus:
        if self.settled or transaction_id <= self.last_transaction_id:
            LOGGER.debug(
                "Award %s ignored; last applied transaction is %s", transaction_id, self.last_transaction_id
            )
            return AwardStatus.ALREADY_APPLIED

        for seat_idx, amount in distribution.items():
            self._seat(seat_idx)
            _require_amount(amount)
        paid = sum(distribution.values())
        if paid != self.total_pot:
            raise ContractViolation(f"Award of {paid} does not match pot of {self.total_pot}")

        for seat_idx, amount in distribution.items():
            self._seats[seat_idx].stack += amount
        self.banked_pot = 0
        self.committed = [0] * len(self._seats)
        self.last_transaction_id = transaction_id
        self.settled = True
        LOGGER.debug("Award %s applied: %s", transaction_id, dict(distribution))
        return AwardStatus.APPLIED

    def refund(self) -> Dict[int, int]:
        """Return every seat's contribution for this hand and close the ledger."""
        self._require_open()
        refunds = {idx: amount for idx, amount in enumerate(self.contributed) if amount > 0}
        for seat_idx, amount in refunds.items():
            self._seats[seat_idx].stack += amount
        self.banked_pot = 0
        self.committed = [0] * len(self._seats)
        self.settled = True
        return refunds
