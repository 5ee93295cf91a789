import itertools

import pytest

from holdem.cards import Deck, parse_cards
from holdem.errors import ContractViolation
from holdem.evaluator import (
    Comparison,
    HandCategory,
    HandScore,
    compare_hand_score,
    describe_rank,
    evaluate_best,
)


def best(labels):
    return evaluate_best(parse_cards(labels))


def test_evaluate_best_identifies_all_hand_categories():
    cases = [
        (HandCategory.ROYAL_FLUSH, ["Ah", "Kh", "Qh", "Jh", "Th"]),
        (HandCategory.STRAIGHT_FLUSH, ["9h", "Kh", "Qh", "Jh", "Th"]),
        (HandCategory.FOUR_OF_A_KIND, ["As", "Ah", "Ad", "Ac", "Kd"]),
        (HandCategory.FULL_HOUSE, ["Qc", "Qd", "Qs", "9h", "9s"]),
        (HandCategory.FLUSH, ["Ah", "Jh", "9h", "6h", "2h"]),
        (HandCategory.STRAIGHT, ["9h", "8d", "7c", "6s", "5h"]),
        (HandCategory.THREE_OF_A_KIND, ["8h", "8d", "8s", "Qd", "Js"]),
        (HandCategory.TWO_PAIR, ["7h", "7d", "4s", "4c", "As"]),
        (HandCategory.ONE_PAIR, ["6h", "6s", "Qh", "8d", "4c"]),
        (HandCategory.HIGH_CARD, ["As", "Kd", "Jh", "9c", "4d"]),
    ]

    for expected, labels in cases:
        category, _ = best(labels)
        assert category == expected, f"labels={labels}"


def test_royal_flush_score():
    assert best(["AS", "KS", "QS", "JS", "TS"]) == (HandCategory.ROYAL_FLUSH, [14])


def test_full_house_beats_high_card():
    full_house = best(["2H", "2D", "2C", "3S", "3H"])
    high_card = best(["AS", "KS", "QH", "JD", "9C"])
    assert full_house == (HandCategory.FULL_HOUSE, [2, 3])
    assert high_card == (HandCategory.HIGH_CARD, [14, 13, 12, 11, 9])
    assert compare_hand_score(full_house, high_card) == Comparison.GREATER_THAN
    assert compare_hand_score(high_card, full_house) == Comparison.LESS_THAN


def test_wheel_straight_reports_five_high():
    assert best(["AS", "2H", "3D", "4C", "5S"]) == (HandCategory.STRAIGHT, [5])
    assert best(["Ah", "2d", "3c", "4s", "5h", "9d", "Kd"]) == (HandCategory.STRAIGHT, [5])
    assert best(["As", "2s", "3s", "4s", "5s"]) == (HandCategory.STRAIGHT_FLUSH, [5])


def test_six_high_straight_beats_wheel():
    six_high = best(["2h", "3d", "4c", "5s", "6h"])
    wheel = best(["Ah", "2d", "3c", "4s", "5h"])
    assert compare_hand_score(six_high, wheel) == Comparison.GREATER_THAN


def test_tiebreak_lists_per_category():
    assert best(["7h", "7d", "4s", "4c", "As"]) == (HandCategory.TWO_PAIR, [7, 4, 14])
    assert best(["8h", "8d", "8s", "Qd", "Js"]) == (HandCategory.THREE_OF_A_KIND, [8, 12, 11])
    assert best(["6h", "6s", "Qh", "8d", "4c"]) == (HandCategory.ONE_PAIR, [6, 12, 8, 4])
    assert best(["As", "Ah", "Ad", "Ac", "Kd", "2c", "3c"]) == (HandCategory.FOUR_OF_A_KIND, [14, 13])
    assert best(["Ah", "Jh", "9h", "6h", "2h"]) == (HandCategory.FLUSH, [14, 11, 9, 6, 2])


def test_seven_cards_pick_the_best_subset():
    assert best(["Ah", "Kh", "Qh", "Jh", "Th", "9h", "2c"]) == (HandCategory.ROYAL_FLUSH, [14])
    assert best(["Ks", "Kh", "Kd", "2s", "2h", "2d", "9c"]) == (HandCategory.FULL_HOUSE, [13, 2])
    # Board straight loses to the flush hidden in it.
    assert best(["9s", "8s", "7d", "6s", "5c", "2s", "Ks"])[0] == HandCategory.FLUSH


def test_evaluate_best_compares_kickers_for_equal_pairs():
    hand_a = best(["Ah", "Ad", "Kc", "Qs", "9h", "2d", "3c"])
    hand_b = best(["Ah", "Ad", "Qc", "Js", "8h", "2d", "3c"])
    assert compare_hand_score(hand_a, hand_b) == Comparison.GREATER_THAN


def test_evaluation_ignores_input_order():
    labels = ["Td", "Tc", "4h", "4s", "Kd", "2c", "9s"]
    expected = best(labels)
    for ordering in itertools.islice(itertools.permutations(labels), 0, 5040, 97):
        assert best(list(ordering)) == expected


def test_missing_tiebreak_entries_count_as_zero():
    short = HandScore(HandCategory.HIGH_CARD, [14, 13])
    padded = HandScore(HandCategory.HIGH_CARD, [14, 13, 0])
    longer = HandScore(HandCategory.HIGH_CARD, [14, 13, 1])
    assert compare_hand_score(short, padded) == Comparison.EQUAL
    assert compare_hand_score(longer, short) == Comparison.GREATER_THAN


def test_identical_boards_tie():
    a = best(["4h", "5c", "As", "Ks", "Qd", "Jd", "Tc"])
    b = best(["6h", "7c", "As", "Ks", "Qd", "Jd", "Tc"])
    assert compare_hand_score(a, b) == Comparison.EQUAL


def test_evaluate_best_rejects_malformed_input():
    with pytest.raises(ContractViolation, match="5 to 7"):
        best(["As", "Kd", "Qh", "Jc"])
    with pytest.raises(ContractViolation, match="5 to 7"):
        evaluate_best(Deck().cards[:8])
    with pytest.raises(ContractViolation, match="Duplicate"):
        best(["As", "As", "Qh", "Jc", "9d"])
    with pytest.raises(ContractViolation, match="Not a card"):
        evaluate_best(parse_cards(["As", "Kd", "Qh", "Jc"]) + ["9d"])  # type: ignore[list-item]


def test_describe_rank_uses_category_label():
    assert describe_rank(best(["Qc", "Qd", "Qs", "9h", "9s"])) == "full_house"


def test_seven_card_hands_from_shuffled_deck():
    deck = Deck.shuffled(777)
    for _ in range(7):
        category, tiebreak = evaluate_best(deck.draw(7))
        assert HandCategory.HIGH_CARD <= category <= HandCategory.ROYAL_FLUSH
        assert isinstance(tiebreak, list) and tiebreak
