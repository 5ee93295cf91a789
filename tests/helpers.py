from __future__ import annotations

from typing import Iterable, List, Mapping, Optional, Sequence, Tuple

from holdem.bots import passive_strategy
from holdem.cards import Deck, full_deck, parse_cards
from holdem.events import Event
from holdem.game import GameEngine
from holdem.models import Action, TableConfig

# Default hands used across tests: seat 0 flops trip aces, seat 1 kings,
# seat 2 queens, seat 3 ace-high off the board.
HOLES = [["As", "Ad"], ["Kc", "Kd"], ["Qc", "Qd"], ["7c", "8d"]]
BOARD = ["Ah", "9c", "5d", "Js", "2h"]


def create_engine(*, seats: int = 4, starting_stack: int = 1_000, min_bet: int = 1) -> GameEngine:
    """Instantiate a game engine with every seat funded."""
    return GameEngine(TableConfig(seats=seats, starting_stack=starting_stack, min_bet=min_bet))


def stacked_deck(holes: Sequence[Sequence[str]], board: Sequence[str] = (), fill: bool = True) -> Deck:
    """Order a deck so each dealt seat (in seat order) receives ``holes`` and the board follows."""
    first = [pair[0] for pair in holes]
    second = [pair[1] for pair in holes]
    top = parse_cards(first + second + list(board))
    rest = [card for card in full_deck() if card not in top] if fill else []
    return Deck(top + rest)


def start_stacked_hand(
    engine: GameEngine,
    holes: Sequence[Sequence[str]] = HOLES,
    board: Sequence[str] = BOARD,
    stacks: Optional[Mapping[int, int]] = None,
) -> str:
    return engine.start_hand(stacks=stacks, deck=stacked_deck(holes, board))


def perform_actions(engine: GameEngine, actions: Iterable[Tuple[int, Action]]) -> List[Event]:
    """Apply a scripted sequence of (seat, action) pairs and collect the events."""
    events: List[Event] = []
    for seat_idx, action in actions:
        events.extend(engine.apply_action(seat_idx, action))
    return events


def auto_complete_hand(engine: GameEngine) -> List[Event]:
    """Check or call every remaining decision until the hand ends."""
    events: List[Event] = []
    while not engine.is_hand_complete():
        actor = engine.next_actor()
        if actor is None:
            break
        events.extend(engine.apply_action(actor, passive_strategy(engine.current_state())))
    return events


def event_names(events: Iterable[Event]) -> List[str]:
    return [event.ev for event in events]
