"""Rule engine for a four-seat Texas Hold'em cash game."""

from .betting import BettingRound, RoundStatus
from .cards import Card, Deck, RANKS, SUITS, parse_cards, parse_label
from .errors import (
    ActionRejected,
    ContractViolation,
    DeckExhausted,
    EngineError,
    InsufficientChips,
    ResourceExhaustion,
)
from .evaluator import Comparison, HandCategory, HandScore, compare_hand_score, evaluate_best
from .events import EventLog
from .game import GameEngine, HandContext
from .ledger import AwardStatus, PotLedger, split_pot
from .models import Action, ActionType, EndReason, PlayerSeat, SidePot, Street, TableConfig, TableSnapshot

__all__ = [
    "Action",
    "ActionRejected",
    "ActionType",
    "AwardStatus",
    "BettingRound",
    "Card",
    "Comparison",
    "ContractViolation",
    "Deck",
    "DeckExhausted",
    "EndReason",
    "EngineError",
    "EventLog",
    "GameEngine",
    "HandCategory",
    "HandContext",
    "HandScore",
    "InsufficientChips",
    "PlayerSeat",
    "PotLedger",
    "RANKS",
    "ResourceExhaustion",
    "RoundStatus",
    "SUITS",
    "SidePot",
    "Street",
    "TableConfig",
    "TableSnapshot",
    "compare_hand_score",
    "evaluate_best",
    "parse_cards",
    "parse_label",
    "split_pot",
]
