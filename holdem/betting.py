from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Sequence, Set, Tuple

from .errors import ActionRejected
from .ledger import PotLedger
from .models import Action, ActionType, LegalActions, PlayerSeat, Street

LOGGER = logging.getLogger("holdem.betting")

# BettingRound runs a single street: whose turn it is, what they may do, and
# when the street is over. Chips only move through the PotLedger.


class RoundStatus(str, Enum):
    WAITING = "WAITING"
    ROUND_COMPLETE = "ROUND_COMPLETE"
    UNCONTESTED = "UNCONTESTED"
    RUN_OUT = "RUN_OUT"


@dataclass(frozen=True)
class ActionOutcome:
    seat: int
    kind: ActionType
    amount: int
    committed: int
    status: RoundStatus


class BettingRound:
    def __init__(
        self,
        street: Street,
        seats: Sequence[PlayerSeat],
        ledger: PotLedger,
        min_bet: int = 1,
        first_seat: int = 0,
    ) -> None:
        self.street = street
        self.seats = seats
        self.ledger = ledger
        self.min_bet = min_bet
        self.current_bet = max((ledger.committed[s.seat] for s in seats if s.live), default=0)
        self.last_raise_size = 0
        self.last_aggressor: Optional[int] = None
        self.raise_locked: Set[int] = set()
        self.active_seat: Optional[int] = None
        self.status = RoundStatus.WAITING

        for seat in seats:
            seat.reset_for_round()

        self._refresh_status(after=(first_seat - 1) % len(seats))

    # Queries ---------------------------------------------------------

    def live_seats(self) -> List[int]:
        return [seat.seat for seat in self.seats if seat.live]

    def actionable_seats(self) -> List[int]:
        return [seat.seat for seat in self.seats if seat.can_act]

    def to_call(self, seat_idx: int) -> int:
        return max(self.current_bet - self.ledger.committed[seat_idx], 0)

    def needs_action(self, seat_idx: int) -> bool:
        seat = self.seats[seat_idx]
        return seat.can_act and (not seat.has_acted or self.to_call(seat_idx) > 0)

    def is_complete(self) -> bool:
        return not any(self.needs_action(seat.seat) for seat in self.seats)

    @property
    def min_raise_increment(self) -> int:
        return max(self.last_raise_size, 1)

    def legal_actions(self, seat_idx: int) -> LegalActions:
        self._require_turn(seat_idx)
        seat = self.seats[seat_idx]
        committed = self.ledger.committed[seat_idx]
        ceiling = committed + seat.stack
        to_call = self.to_call(seat_idx)

        actions: List[ActionType] = [ActionType.FOLD]
        min_bet = min_raise_to = max_raise_to = None
        if to_call == 0:
            actions.append(ActionType.CHECK)
        else:
            actions.append(ActionType.CALL)

        if self.current_bet == 0:
            actions.append(ActionType.BET)
            min_bet = min(self.min_bet, seat.stack)
            max_raise_to = ceiling
        elif ceiling > self.current_bet and seat_idx not in self.raise_locked:
            actions.append(ActionType.RAISE)
            # A stack short of a full raise may still go all-in.
            min_raise_to = min(self.current_bet + self.min_raise_increment, ceiling)
            max_raise_to = ceiling

        return LegalActions(
            seat=seat_idx,
            actions=tuple(actions),
            call_amount=min(to_call, seat.stack),
            min_bet=min_bet,
            min_raise_to=min_raise_to,
            max_raise_to=max_raise_to,
        )

    # Transitions -----------------------------------------------------

    def apply(self, seat_idx: int, action: Action) -> ActionOutcome:
        self._require_turn(seat_idx)
        seat = self.seats[seat_idx]

        if action.kind == ActionType.FOLD:
            seat.folded = True
            kind, amount = ActionType.FOLD, 0
        elif action.kind == ActionType.CHECK:
            if self.to_call(seat_idx) > 0:
                raise ActionRejected("Cannot check when facing a bet", seat_idx)
            kind, amount = ActionType.CHECK, 0
        elif action.kind == ActionType.CALL:
            kind, amount = self._call(seat)
        elif action.kind == ActionType.BET:
            kind, amount = self._bet(seat, action.amount)
        elif action.kind == ActionType.RAISE:
            kind, amount = self._raise(seat, action.amount)
        else:
            raise ActionRejected(f"Unsupported action {action.kind}", seat_idx)

        seat.has_acted = True
        self._refresh_status(after=seat_idx)
        LOGGER.debug(
            "%s seat %s %s %s -> %s (bet=%s)",
            self.street.value,
            seat_idx,
            kind.value,
            amount,
            self.status.value,
            self.current_bet,
        )
        return ActionOutcome(
            seat=seat_idx,
            kind=kind,
            amount=amount,
            committed=self.ledger.committed[seat_idx],
            status=self.status,
        )

    def _call(self, seat: PlayerSeat) -> Tuple[ActionType, int]:
        to_call = self.to_call(seat.seat)
        if to_call <= 0:
            raise ActionRejected("Nothing to call", seat.seat)
        amount = min(to_call, seat.stack)
        self.ledger.commit(seat.seat, amount)
        return (ActionType.ALL_IN if seat.stack == 0 else ActionType.CALL), amount

    def _bet(self, seat: PlayerSeat, amount: int) -> Tuple[ActionType, int]:
        if self.current_bet > 0:
            raise ActionRejected("Cannot bet when facing a bet; raise instead", seat.seat)
        if amount > seat.stack:
            raise ActionRejected("Bet exceeds stack", seat.seat)
        if amount < self.min_bet and amount != seat.stack:
            raise ActionRejected(f"Bet below minimum of {self.min_bet}", seat.seat)
        self.ledger.commit(seat.seat, amount)
        self.current_bet = self.ledger.committed[seat.seat]
        self.last_raise_size = amount
        self._reopen(seat.seat)
        return (ActionType.ALL_IN if seat.stack == 0 else ActionType.BET), amount

    def _raise(self, seat: PlayerSeat, target: int) -> Tuple[ActionType, int]:
        if self.current_bet == 0:
            raise ActionRejected("Nothing to raise; bet instead", seat.seat)
        if seat.seat in self.raise_locked:
            raise ActionRejected("Action was not reopened; call or fold", seat.seat)
        committed = self.ledger.committed[seat.seat]
        ceiling = committed + seat.stack
        if target > ceiling:
            raise ActionRejected("Raise exceeds stack", seat.seat)
        if target <= self.current_bet:
            raise ActionRejected("Raise must exceed current bet", seat.seat)
        increment = target - self.current_bet
        full_raise = increment >= self.min_raise_increment
        if not full_raise and target != ceiling:
            raise ActionRejected(f"Raise below minimum of {self.current_bet + self.min_raise_increment}", seat.seat)

        amount = target - committed
        self.ledger.commit(seat.seat, amount)
        self.current_bet = target
        if full_raise:
            self.last_raise_size = increment
            self._reopen(seat.seat)
        else:
            # Short all-in: whoever already acted may only call or fold.
            self.last_aggressor = seat.seat
            self.raise_locked.update(
                other.seat for other in self.seats if other.seat != seat.seat and other.can_act and other.has_acted
            )
        return (ActionType.ALL_IN if seat.stack == 0 else ActionType.RAISE), amount

    def _reopen(self, aggressor: int) -> None:
        self.last_aggressor = aggressor
        self.raise_locked.clear()
        for other in self.seats:
            if other.seat != aggressor and other.can_act:
                other.has_acted = False

    def _refresh_status(self, after: int) -> None:
        if len(self.live_seats()) <= 1:
            self.status = RoundStatus.UNCONTESTED
            self.active_seat = None
            return
        actionable = self.actionable_seats()
        if len(actionable) <= 1 and not any(self.to_call(idx) for idx in actionable):
            self.status = RoundStatus.RUN_OUT
            self.active_seat = None
            return
        if self.is_complete():
            self.status = RoundStatus.ROUND_COMPLETE
            self.active_seat = None
            return
        self.status = RoundStatus.WAITING
        self.active_seat = self._next_to_act(after)

    def _next_to_act(self, after: int) -> Optional[int]:
        count = len(self.seats)
        for step in range(1, count + 1):
            idx = (after + step) % count
            if self.needs_action(idx):
                return idx
        return None

    def _require_turn(self, seat_idx: int) -> None:
        if self.status != RoundStatus.WAITING:
            raise ActionRejected(f"Betting on the {self.street.value} is closed", seat_idx)
        if seat_idx != self.active_seat:
            raise ActionRejected(f"Seat {seat_idx} acted out of turn; waiting on seat {self.active_seat}", seat_idx)
