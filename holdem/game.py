from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from functools import cmp_to_key
from types import MappingProxyType
from typing import Callable, Dict, List, Mapping, Optional, Sequence, Set, Tuple

from .betting import ActionOutcome, BettingRound, RoundStatus
from .cards import Card, Deck
from .errors import ActionRejected, ContractViolation, DeckExhausted
from .evaluator import Comparison, HandScore, compare_hand_score, describe_rank, evaluate_best
from .events import (
    Event,
    EventLog,
    HandAborted,
    HandEnded,
    HandsRevealed,
    HandStarted,
    Listener,
    PotAwarded,
    PotChanged,
    SeatActed,
    StreetAdvanced,
)
from .ledger import AwardStatus, PotLedger, split_pot
from .models import (
    Action,
    EndReason,
    HandOutcome,
    LegalActions,
    PlayerSeat,
    SeatView,
    SidePot,
    Street,
    STREET_CARDS,
    Submission,
    TableConfig,
    TableSnapshot,
    next_street,
)

LOGGER = logging.getLogger("holdem.game")

# GameEngine drives one hand at a time: deal, four betting streets, showdown,
# award. It owns no timers or I/O; callers feed it one Action per turn.


@dataclass
class HandContext:
    # Everything that lives for exactly one hand.
    hand_id: str
    transaction_id: int
    seed: Optional[int]
    deck: Deck
    ledger: PotLedger
    community: List[Card] = field(default_factory=list)
    street: Street = Street.PRE_FLOP
    betting: Optional[BettingRound] = None
    revealed: Set[int] = field(default_factory=set)
    results: Dict[int, HandScore] = field(default_factory=dict)
    side_pots: List[SidePot] = field(default_factory=list)
    outcome: Optional[HandOutcome] = None
    aborted: bool = False

    @property
    def terminal(self) -> bool:
        return self.outcome is not None or self.aborted


class GameEngine:
    """Single-table Texas Hold'em rule engine."""

    def __init__(self, config: Optional[TableConfig] = None) -> None:
        self.config = config or TableConfig()
        self.seats: List[PlayerSeat] = [
            PlayerSeat(seat=idx, stack=self.config.starting_stack) for idx in range(self.config.seats)
        ]
        self.hand_counter = 0
        self.hand: Optional[HandContext] = None
        self.events = EventLog()

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        return self.events.subscribe(listener)

    # Hand lifecycle --------------------------------------------------

    def funded_seats(self) -> List[int]:
        return [seat.seat for seat in self.seats if seat.stack > 0]

    def can_start_hand(self) -> bool:
        return len(self.funded_seats()) >= 2

    def start_hand(
        self,
        stacks: Optional[Mapping[int, int]] = None,
        seed: Optional[int] = None,
        deck: Optional[Deck] = None,
    ) -> str:
        if self.hand is not None and not self.hand.terminal:
            raise ContractViolation(f"Hand {self.hand.hand_id} is still in progress")
        if stacks:
            self._apply_stacks(stacks)
        if not self.can_start_hand():
            raise ContractViolation("Not enough active players to start a hand")

        for seat in self.seats:
            seat.reset_for_hand()

        if deck is None:
            if seed is None:
                seed = int(time.time() * 1000) & 0xFFFFFFFF
            deck = Deck.shuffled(seed)

        self.hand_counter += 1
        hand_id = f"H-{time.strftime('%Y%m%d')}-{self.hand_counter:05d}"
        ctx = HandContext(
            hand_id=hand_id,
            transaction_id=self.hand_counter,
            seed=seed,
            deck=deck,
            ledger=PotLedger(self.seats, last_transaction_id=self.hand_counter - 1),
        )
        self.hand = ctx

        in_hand = [seat.seat for seat in self.seats if seat.in_hand]
        LOGGER.info("Starting hand %s with seats %s", hand_id, in_hand)
        self._publish(HandStarted(hand_id, tuple(in_hand), {idx: self.seats[idx].stack for idx in in_hand}))

        try:
            self._deal_hole_cards(ctx, in_hand)
        except DeckExhausted as exc:
            self._abort(ctx, str(exc))
            raise

        self._publish(StreetAdvanced(hand_id, Street.PRE_FLOP, ()))
        self._open_street(ctx)
        return hand_id

    def _apply_stacks(self, stacks: Mapping[int, int]) -> None:
        for seat_idx, stack in stacks.items():
            if not 0 <= seat_idx < len(self.seats):
                raise ContractViolation(f"Unknown seat {seat_idx}")
            if isinstance(stack, bool) or not isinstance(stack, int) or stack < 0:
                raise ContractViolation(f"Stack for seat {seat_idx} must be a non-negative integer")
        for seat_idx, stack in stacks.items():
            self.seats[seat_idx].stack = stack

    def _deal_hole_cards(self, ctx: HandContext, in_hand: List[int]) -> None:
        for _ in range(2):
            for seat_idx in in_hand:
                self.seats[seat_idx].hole_cards.extend(ctx.deck.draw(1))

    def abort_hand(self, reason: str) -> Dict[int, int]:
        """Refund the current hand and leave the table ready for a new one."""
        if self.hand is None or self.hand.terminal:
            raise ContractViolation("No hand in progress")
        return self._abort(self.hand, reason)

    def _abort(self, ctx: HandContext, reason: str) -> Dict[int, int]:
        refunds = ctx.ledger.refund()
        ctx.aborted = True
        ctx.betting = None
        LOGGER.error("Hand %s aborted: %s (refunds=%s)", ctx.hand_id, reason, refunds)
        self._publish(HandAborted(ctx.hand_id, reason, refunds))
        return refunds

    # Action handling -------------------------------------------------

    def _current(self, seat_idx: int) -> HandContext:
        if self.hand is None:
            raise ActionRejected("Hand not in progress", seat_idx)
        if self.hand.terminal or self.hand.betting is None:
            raise ActionRejected(f"Hand {self.hand.hand_id} is over", seat_idx)
        return self.hand

    def next_actor(self) -> Optional[int]:
        if self.hand is None or self.hand.terminal or self.hand.betting is None:
            return None
        return self.hand.betting.active_seat

    def legal_actions(self, seat_idx: int) -> LegalActions:
        ctx = self._current(seat_idx)
        return ctx.betting.legal_actions(seat_idx)

    def apply_action(self, seat_idx: int, action: Action) -> List[Event]:
        ctx = self._current(seat_idx)
        if not isinstance(action, Action):
            raise ContractViolation(f"Expected an Action, got {action!r}")
        mark = len(self.events)

        outcome = ctx.betting.apply(seat_idx, action)
        self._publish(SeatActed(ctx.hand_id, seat_idx, outcome.kind, outcome.amount))
        self._publish_pot(ctx)
        self._advance(ctx, outcome)
        return self.events.replay(mark)

    def submit_action(self, seat_idx: int, action: Action) -> Submission:
        try:
            events = self.apply_action(seat_idx, action)
        except ContractViolation as exc:
            LOGGER.warning("Rejected action %s from seat %s: %s", action, seat_idx, exc)
            return Submission(accepted=False, reason=str(exc))
        return Submission(accepted=True, events=tuple(events))

    def _advance(self, ctx: HandContext, outcome: ActionOutcome) -> None:
        try:
            if outcome.status == RoundStatus.UNCONTESTED:
                self._finish_uncontested(ctx)
            elif outcome.status == RoundStatus.ROUND_COMPLETE:
                self._close_street(ctx)
            elif outcome.status == RoundStatus.RUN_OUT:
                self._run_out(ctx)
        except DeckExhausted as exc:
            self._abort(ctx, str(exc))
            raise

    # Streets ---------------------------------------------------------

    def _open_street(self, ctx: HandContext) -> None:
        ctx.betting = BettingRound(ctx.street, self.seats, ctx.ledger, min_bet=self.config.min_bet)
        status = ctx.betting.status
        if status == RoundStatus.RUN_OUT:
            self._run_out(ctx)
        elif status == RoundStatus.UNCONTESTED:
            self._finish_uncontested(ctx)

    def _close_street(self, ctx: HandContext) -> None:
        ctx.ledger.bank_street()
        self._publish_pot(ctx)
        if ctx.street == Street.RIVER:
            self._showdown(ctx)
            return
        self._deal_street(ctx)
        self._open_street(ctx)

    def _deal_street(self, ctx: HandContext) -> None:
        street = next_street(ctx.street)
        cards = ctx.deck.draw(STREET_CARDS[street])
        ctx.community.extend(cards)
        ctx.street = street
        LOGGER.info("Hand %s %s: %s", ctx.hand_id, street.value, " ".join(card.label for card in cards))
        self._publish(StreetAdvanced(ctx.hand_id, street, tuple(cards)))

    def _run_out(self, ctx: HandContext) -> None:
        # At most one seat can still bet: show hands and deal the rest face up.
        ctx.betting = None
        self._reveal(ctx)
        ctx.ledger.bank_street()
        self._publish_pot(ctx)
        while ctx.street != Street.RIVER:
            self._deal_street(ctx)
        self._showdown(ctx)

    def _reveal(self, ctx: HandContext) -> None:
        hands = {
            seat.seat: tuple(seat.hole_cards)
            for seat in self.seats
            if seat.live and seat.seat not in ctx.revealed
        }
        if not hands:
            return
        ctx.revealed.update(hands)
        self._publish(HandsRevealed(ctx.hand_id, hands))

    # Resolution ------------------------------------------------------

    def _finish_uncontested(self, ctx: HandContext) -> None:
        ctx.betting = None
        ctx.ledger.bank_street()
        winner = next(seat.seat for seat in self.seats if seat.live)
        pot = ctx.ledger.total_pot
        ctx.side_pots = [SidePot(pot, (winner,))]
        self._settle(ctx, {winner: pot}, (winner,), EndReason.UNCONTESTED)

    def _showdown(self, ctx: HandContext) -> None:
        ctx.betting = None
        ctx.street = Street.SHOWDOWN
        self._reveal(ctx)
        for seat in self.seats:
            if seat.live:
                ctx.results[seat.seat] = evaluate_best(seat.hole_cards + ctx.community)

        # A checked-down hand has no pot but still has winners.
        winners: Set[int] = set(self._best_seats(ctx, sorted(ctx.results)))
        ctx.side_pots = ctx.ledger.compute_side_pots(self.seats)
        distribution: Dict[int, int] = {}
        for pot_index, pot in enumerate(ctx.side_pots):
            if not pot.eligible_seats:
                raise ContractViolation(f"Side pot {pot_index} has no eligible seat")
            pot_winners = self._best_seats(ctx, pot.eligible_seats)
            winners.update(pot_winners)
            shares = split_pot(pot.amount, pot_winners)
            for seat_idx, share in shares.items():
                distribution[seat_idx] = distribution.get(seat_idx, 0) + share
            LOGGER.info(
                "Hand %s pot %s (%s chips) to %s with %s",
                ctx.hand_id,
                pot_index,
                pot.amount,
                list(pot_winners),
                describe_rank(ctx.results[pot_winners[0]]),
            )
            self._publish(PotAwarded(ctx.hand_id, pot_index, pot.amount, pot.eligible_seats, pot_winners, shares))
        self._settle(ctx, distribution, tuple(sorted(winners)), EndReason.SHOWDOWN)

    def _best_seats(self, ctx: HandContext, candidates: Sequence[int]) -> Tuple[int, ...]:
        ranked = cmp_to_key(lambda a, b: _comparison_sign(compare_hand_score(ctx.results[a], ctx.results[b])))
        best = max(candidates, key=ranked)
        return tuple(
            seat_idx
            for seat_idx in candidates
            if compare_hand_score(ctx.results[seat_idx], ctx.results[best]) == Comparison.EQUAL
        )

    def _settle(
        self,
        ctx: HandContext,
        distribution: Mapping[int, int],
        winners: Tuple[int, ...],
        reason: EndReason,
    ) -> AwardStatus:
        if ctx.terminal:
            return AwardStatus.ALREADY_APPLIED
        status = ctx.ledger.award(ctx.transaction_id, distribution)
        if status == AwardStatus.ALREADY_APPLIED:
            return status

        amounts = {seat_idx: distribution.get(seat_idx, 0) for seat_idx in winners}
        ctx.outcome = HandOutcome(reason=reason, winners=winners, amounts=amounts)
        ctx.betting = None
        self._publish_pot(ctx)
        LOGGER.info("Hand %s ended (%s): %s", ctx.hand_id, reason.value, amounts)
        self._publish(HandEnded(ctx.hand_id, winners, amounts, reason))
        return status

    # Public/Snapshot helpers -----------------------------------------

    def is_hand_complete(self) -> bool:
        return bool(self.hand and self.hand.terminal)

    def chip_total(self) -> int:
        if self.hand is not None:
            return self.hand.ledger.chip_total()
        return sum(seat.stack for seat in self.seats)

    def current_state(self, viewer: Optional[int] = None) -> TableSnapshot:
        ctx = self.hand
        if ctx is None:
            views = tuple(
                SeatView(seat.seat, seat.stack, 0, 0, (), False, False, False, False) for seat in self.seats
            )
            return TableSnapshot(hand_id=None, street=None, seats=views)

        ledger = ctx.ledger
        views = tuple(
            SeatView(
                seat=seat.seat,
                stack=seat.stack,
                committed=ledger.committed[seat.seat],
                contributed=ledger.contributed[seat.seat],
                hole_cards=tuple(seat.hole_cards) if self._visible(ctx, seat.seat, viewer) else (),
                folded=seat.folded,
                in_hand=seat.in_hand,
                all_in=seat.all_in,
                has_acted=seat.has_acted,
            )
            for seat in self.seats
        )
        betting = ctx.betting
        active = betting.active_seat if betting is not None else None
        legal = betting.legal_actions(active) if active is not None else None
        return TableSnapshot(
            hand_id=ctx.hand_id,
            street=ctx.street,
            seats=views,
            community=tuple(ctx.community),
            banked_pot=ledger.banked_pot,
            total_pot=ledger.total_pot,
            current_bet=betting.current_bet if betting else 0,
            last_raise_size=betting.last_raise_size if betting else 0,
            last_aggressor=betting.last_aggressor if betting else None,
            active_seat=active,
            legal=legal,
            side_pots=tuple(ctx.side_pots),
            results=MappingProxyType(
                {seat_idx: HandScore(score.category, list(score.tiebreak)) for seat_idx, score in ctx.results.items()}
            ),
            outcome=ctx.outcome,
            terminal=ctx.terminal,
        )

    def _visible(self, ctx: HandContext, seat_idx: int, viewer: Optional[int]) -> bool:
        return viewer is None or viewer == seat_idx or seat_idx in ctx.revealed

    def _publish(self, event: Event) -> None:
        self.events.publish(event)

    def _publish_pot(self, ctx: HandContext) -> None:
        self._publish(PotChanged(ctx.hand_id, ctx.ledger.banked_pot, tuple(ctx.ledger.committed)))


def _comparison_sign(result: Comparison) -> int:
    if result == Comparison.GREATER_THAN:
        return 1
    if result == Comparison.LESS_THAN:
        return -1
    return 0
