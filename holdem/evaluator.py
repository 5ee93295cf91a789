from __future__ import annotations

import itertools
from enum import Enum, IntEnum
from typing import Dict, List, NamedTuple, Optional, Sequence, Tuple

from .cards import Card
from .errors import ContractViolation


class HandCategory(IntEnum):
    HIGH_CARD = 0
    ONE_PAIR = 1
    TWO_PAIR = 2
    THREE_OF_A_KIND = 3
    STRAIGHT = 4
    FLUSH = 5
    FULL_HOUSE = 6
    FOUR_OF_A_KIND = 7
    STRAIGHT_FLUSH = 8
    ROYAL_FLUSH = 9

    @property
    def label(self) -> str:
        return self.name.lower()


class HandScore(NamedTuple):
    category: HandCategory
    tiebreak: List[int]


class Comparison(str, Enum):
    GREATER_THAN = "GREATER_THAN"
    LESS_THAN = "LESS_THAN"
    EQUAL = "EQUAL"


WHEEL = frozenset({14, 2, 3, 4, 5})


def evaluate_best(cards: Sequence[Card]) -> HandScore:
    """Return the best five-card score for 5 to 7 cards. Higher is better."""
    cards = _validated(cards)
    best: Optional[HandScore] = None
    for combo in itertools.combinations(cards, 5):
        score = _evaluate_five(combo)
        if best is None or score_key(score) > score_key(best):
            best = score
    assert best is not None
    return best


def compare_hand_score(a: HandScore, b: HandScore) -> Comparison:
    left, right = score_key(a), score_key(b)
    if left > right:
        return Comparison.GREATER_THAN
    if left < right:
        return Comparison.LESS_THAN
    return Comparison.EQUAL


def score_key(score: HandScore) -> Tuple[int, ...]:
    # Missing trailing tiebreak entries count as zero.
    category, tiebreak = score
    padded = list(tiebreak) + [0] * (5 - len(tiebreak))
    return (int(category), *padded)


def describe_rank(score: HandScore) -> str:
    return HandCategory(score[0]).label


def _validated(cards: Sequence[Card]) -> Tuple[Card, ...]:
    cards = tuple(cards)
    if not 5 <= len(cards) <= 7:
        raise ContractViolation(f"Hand evaluation needs 5 to 7 cards, got {len(cards)}")
    for card in cards:
        if not isinstance(card, Card):
            raise ContractViolation(f"Not a card: {card!r}")
    if len(set(cards)) != len(cards):
        raise ContractViolation("Duplicate cards in hand")
    return cards


def _evaluate_five(cards: Sequence[Card]) -> HandScore:
    ranks = sorted((card.rank for card in cards), reverse=True)
    is_flush = len({card.suit for card in cards}) == 1
    straight_high = _straight_high(ranks)

    counts: Dict[int, int] = {}
    for rank in ranks:
        counts[rank] = counts.get(rank, 0) + 1
    # Groups ordered by size, then by rank, so the "made" part comes first.
    groups = sorted(counts.items(), key=lambda item: (item[1], item[0]), reverse=True)
    shape = [count for _, count in groups]
    by_group = [rank for rank, _ in groups]

    if straight_high and is_flush:
        if straight_high == 14:
            return HandScore(HandCategory.ROYAL_FLUSH, [14])
        return HandScore(HandCategory.STRAIGHT_FLUSH, [straight_high])
    if shape[0] == 4:
        return HandScore(HandCategory.FOUR_OF_A_KIND, by_group)
    if shape == [3, 2]:
        return HandScore(HandCategory.FULL_HOUSE, by_group)
    if is_flush:
        return HandScore(HandCategory.FLUSH, ranks)
    if straight_high:
        return HandScore(HandCategory.STRAIGHT, [straight_high])
    if shape[0] == 3:
        return HandScore(HandCategory.THREE_OF_A_KIND, by_group)
    if shape[:2] == [2, 2]:
        return HandScore(HandCategory.TWO_PAIR, by_group)
    if shape[0] == 2:
        return HandScore(HandCategory.ONE_PAIR, by_group)
    return HandScore(HandCategory.HIGH_CARD, ranks)


def _straight_high(ranks: Sequence[int]) -> Optional[int]:
    distinct = set(ranks)
    if len(distinct) != 5:
        return None
    if max(distinct) - min(distinct) == 4:
        return max(distinct)
    if distinct == WHEEL:  # Ace plays low
        return 5
    return None
