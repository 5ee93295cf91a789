from __future__ import annotations

import random
from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence

from .errors import ContractViolation, DeckExhausted

RANKS = tuple(range(2, 15))
RANK_LABELS = "23456789TJQKA"
SUITS = "hdcs"

LABEL_TO_RANK = {label: value for value, label in zip(RANKS, RANK_LABELS)}


@dataclass(frozen=True)
class Card:
    rank: int
    suit: str

    def __post_init__(self) -> None:
        if isinstance(self.rank, bool) or not isinstance(self.rank, int) or self.rank not in RANKS:
            raise ContractViolation(f"Invalid rank: {self.rank!r}")
        if not isinstance(self.suit, str) or len(self.suit) != 1 or self.suit not in SUITS:
            raise ContractViolation(f"Invalid suit: {self.suit!r}")

    @property
    def label(self) -> str:
        return f"{RANK_LABELS[self.rank - 2]}{self.suit}"

    def __str__(self) -> str:
        return self.label


def full_deck() -> List[Card]:
    return [Card(rank, suit) for rank in RANKS for suit in SUITS]


class Deck:
    """Ordered stack of unique cards. Draws always come off the front."""

    def __init__(self, cards: Optional[Iterable[Card]] = None) -> None:
        self._cards: List[Card] = list(cards) if cards is not None else full_deck()
        for card in self._cards:
            if not isinstance(card, Card):
                raise ContractViolation(f"Deck accepts Card values only, got {card!r}")
        if len(set(self._cards)) != len(self._cards):
            raise ContractViolation("Deck contains duplicate cards")

    @classmethod
    def shuffled(cls, seed: Optional[int] = None) -> "Deck":
        deck = cls()
        deck.shuffle(seed)
        return deck

    def __len__(self) -> int:
        return len(self._cards)

    @property
    def cards(self) -> List[Card]:
        return list(self._cards)

    def shuffle(self, seed: Optional[int] = None) -> None:
        random.Random(seed).shuffle(self._cards)

    def draw(self, count: int) -> List[Card]:
        if isinstance(count, bool) or not isinstance(count, int) or count < 0:
            raise ContractViolation(f"Draw count must be a non-negative integer, got {count!r}")
        if len(self._cards) < count:
            raise DeckExhausted(f"Not enough cards left in deck: need {count}, have {len(self._cards)}")
        drawn = self._cards[:count]
        del self._cards[:count]
        return drawn


def cards_to_labels(cards: Iterable[Card]) -> List[str]:
    return [card.label for card in cards]


def parse_label(label: str) -> Card:
    if not isinstance(label, str) or len(label) not in (2, 3):
        raise ContractViolation(f"Invalid card label: {label!r}")
    rank_text, suit = label[:-1].upper(), label[-1].lower()
    if rank_text == "10":
        rank_text = "T"
    if rank_text not in LABEL_TO_RANK:
        raise ContractViolation(f"Invalid rank: {rank_text!r}")
    return Card(LABEL_TO_RANK[rank_text], suit)


def parse_cards(labels: Sequence[str]) -> List[Card]:
    return [parse_label(label) for label in labels]
