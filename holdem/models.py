from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Dict, List, Mapping, Optional, Tuple

from .cards import Card, cards_to_labels
from .errors import ContractViolation
from .evaluator import HandScore, describe_rank


class Street(str, Enum):
    PRE_FLOP = "PRE_FLOP"
    FLOP = "FLOP"
    TURN = "TURN"
    RIVER = "RIVER"
    SHOWDOWN = "SHOWDOWN"


BETTING_STREETS = (Street.PRE_FLOP, Street.FLOP, Street.TURN, Street.RIVER)

# Community cards revealed when the street opens.
STREET_CARDS = {
    Street.PRE_FLOP: 0,
    Street.FLOP: 3,
    Street.TURN: 1,
    Street.RIVER: 1,
}


def next_street(street: Street) -> Street:
    if street == Street.SHOWDOWN:
        raise ContractViolation("No street follows the showdown")
    order = list(BETTING_STREETS) + [Street.SHOWDOWN]
    return order[order.index(street) + 1]


class ActionType(str, Enum):
    FOLD = "FOLD"
    CHECK = "CHECK"
    CALL = "CALL"
    BET = "BET"
    RAISE = "RAISE"
    # Recorded outcome only; callers submit CALL/BET/RAISE for their whole stack.
    ALL_IN = "ALL_IN"


SUBMITTABLE = frozenset({ActionType.FOLD, ActionType.CHECK, ActionType.CALL, ActionType.BET, ActionType.RAISE})


@dataclass(frozen=True)
class Action:
    """One seat's decision. BET and RAISE amounts are the seat's street total after acting."""

    kind: ActionType
    amount: Optional[int] = None

    def __post_init__(self) -> None:
        if not isinstance(self.kind, ActionType) or self.kind not in SUBMITTABLE:
            raise ContractViolation(f"Unsupported action {self.kind!r}")
        if self.kind in (ActionType.BET, ActionType.RAISE):
            if isinstance(self.amount, bool) or not isinstance(self.amount, int):
                raise ContractViolation(f"{self.kind.value} requires an integer amount")
            if self.amount <= 0:
                raise ContractViolation(f"{self.kind.value} amount must be positive")
        elif self.amount is not None:
            raise ContractViolation(f"{self.kind.value} takes no amount")

    @classmethod
    def fold(cls) -> "Action":
        return cls(ActionType.FOLD)

    @classmethod
    def check(cls) -> "Action":
        return cls(ActionType.CHECK)

    @classmethod
    def call(cls) -> "Action":
        return cls(ActionType.CALL)

    @classmethod
    def bet(cls, amount: int) -> "Action":
        return cls(ActionType.BET, amount)

    @classmethod
    def raise_to(cls, amount: int) -> "Action":
        return cls(ActionType.RAISE, amount)


@dataclass
class TableConfig:
    seats: int = 4
    starting_stack: int = 1_000
    min_bet: int = 1

    def __post_init__(self) -> None:
        if not 2 <= self.seats <= 10:
            raise ContractViolation(f"Table supports 2 to 10 seats, got {self.seats}")
        if self.starting_stack < 0:
            raise ContractViolation("starting_stack must be non-negative")
        if self.min_bet < 1:
            raise ContractViolation("min_bet must be at least 1")


@dataclass
class PlayerSeat:
    seat: int
    stack: int
    hole_cards: List[Card] = field(default_factory=list)
    folded: bool = False
    in_hand: bool = False
    has_acted: bool = False

    @property
    def all_in(self) -> bool:
        return self.in_hand and not self.folded and self.stack == 0

    @property
    def live(self) -> bool:
        return self.in_hand and not self.folded

    @property
    def can_act(self) -> bool:
        return self.live and self.stack > 0

    def reset_for_hand(self) -> None:
        self.hole_cards.clear()
        self.folded = False
        self.in_hand = self.stack > 0
        self.has_acted = False

    def reset_for_round(self) -> None:
        self.has_acted = False


@dataclass(frozen=True)
class LegalActions:
    seat: int
    actions: Tuple[ActionType, ...]
    call_amount: int
    min_bet: Optional[int]
    min_raise_to: Optional[int]
    max_raise_to: Optional[int]

    def to_payload(self) -> Dict[str, object]:
        return {
            "seat": self.seat,
            "legal": [action.value for action in self.actions],
            "call_amount": self.call_amount or None,
            "min_bet": self.min_bet,
            "min_raise_to": self.min_raise_to,
            "max_raise_to": self.max_raise_to,
        }


@dataclass(frozen=True)
class SidePot:
    amount: int
    eligible_seats: Tuple[int, ...]


class EndReason(str, Enum):
    UNCONTESTED = "UNCONTESTED"
    SHOWDOWN = "SHOWDOWN"


@dataclass(frozen=True)
class HandOutcome:
    reason: EndReason
    winners: Tuple[int, ...]
    amounts: Mapping[int, int]

    def __post_init__(self) -> None:
        object.__setattr__(self, "winners", tuple(self.winners))
        object.__setattr__(self, "amounts", MappingProxyType(dict(self.amounts)))


@dataclass(frozen=True)
class SeatView:
    seat: int
    stack: int
    committed: int
    contributed: int
    hole_cards: Tuple[Card, ...]
    folded: bool
    in_hand: bool
    all_in: bool
    has_acted: bool

    def to_payload(self) -> Dict[str, object]:
        return {
            "seat": self.seat,
            "stack": self.stack,
            "committed": self.committed,
            "contributed": self.contributed,
            "hole": cards_to_labels(self.hole_cards),
            "has_folded": self.folded,
            "in_hand": self.in_hand,
            "all_in": self.all_in,
            "has_acted": self.has_acted,
        }


@dataclass(frozen=True)
class TableSnapshot:
    hand_id: Optional[str]
    street: Optional[Street]
    seats: Tuple[SeatView, ...]
    community: Tuple[Card, ...] = ()
    banked_pot: int = 0
    total_pot: int = 0
    current_bet: int = 0
    last_raise_size: int = 0
    last_aggressor: Optional[int] = None
    active_seat: Optional[int] = None
    legal: Optional[LegalActions] = None
    side_pots: Tuple[SidePot, ...] = ()
    results: Mapping[int, HandScore] = field(default_factory=dict)
    outcome: Optional[HandOutcome] = None
    terminal: bool = True

    def seat(self, seat_idx: int) -> SeatView:
        return self.seats[seat_idx]

    def to_payload(self) -> Dict[str, object]:
        payload: Dict[str, object] = {
            "hand_id": self.hand_id,
            "phase": self.street.value if self.street else None,
            "players": [view.to_payload() for view in self.seats],
            "community": cards_to_labels(self.community),
            "banked_pot": self.banked_pot,
            "pot": self.total_pot,
            "current_bet": self.current_bet,
            "last_raise_size": self.last_raise_size,
            "last_aggressor": self.last_aggressor,
            "next_actor": self.active_seat,
            "side_pots": [
                {"amount": pot.amount, "eligible": list(pot.eligible_seats)} for pot in self.side_pots
            ],
            "results": {seat: describe_rank(score) for seat, score in self.results.items()},
            "terminal": self.terminal,
        }
        if self.legal is not None:
            payload.update(self.legal.to_payload())
        if self.outcome is not None:
            payload["outcome"] = {
                "reason": self.outcome.reason.value,
                "winners": list(self.outcome.winners),
                "amounts": dict(self.outcome.amounts),
            }
        return payload


@dataclass(frozen=True)
class Submission:
    accepted: bool
    reason: Optional[str] = None
    events: Tuple[object, ...] = ()
