from holdem.models import Action, ActionType, SidePot

from .helpers import auto_complete_hand, create_engine, perform_actions, start_stacked_hand


def test_multiple_raises_update_min_increment_and_last_raiser():
    engine = create_engine(starting_stack=500)
    start_stacked_hand(engine)

    engine.apply_action(0, Action.bet(10))
    betting = engine.hand.betting
    legal = engine.legal_actions(1)
    assert legal.min_raise_to == 20
    engine.apply_action(1, Action.raise_to(35))
    assert betting.current_bet == 35
    assert betting.last_raise_size == 25
    assert betting.last_aggressor == 1

    legal = engine.legal_actions(2)
    assert legal.min_raise_to == 60
    engine.apply_action(2, Action.raise_to(legal.min_raise_to))
    assert betting.current_bet == 60
    assert betting.last_raise_size == 25
    assert betting.last_aggressor == 2
    assert engine.next_actor() == 3


def test_three_all_ins_create_three_tier_side_pots():
    engine = create_engine()
    start_stacked_hand(engine, stacks={0: 50, 1: 150, 2: 400})
    perform_actions(
        engine,
        [
            (0, Action.bet(50)),
            (1, Action.raise_to(150)),
            (2, Action.raise_to(400)),
            (3, Action.call()),
        ],
    )
    assert engine.is_hand_complete()
    assert engine.hand.side_pots == [
        SidePot(200, (0, 1, 2, 3)),
        SidePot(300, (1, 2, 3)),
        SidePot(500, (2, 3)),
    ]
    assert engine.hand.outcome.amounts == {0: 200, 1: 300, 2: 500}
    assert [seat.stack for seat in engine.seats] == [200, 300, 500, 600]


def test_folded_chips_stay_in_the_pot_for_the_winner():
    engine = create_engine()
    start_stacked_hand(engine, stacks={0: 100})
    perform_actions(
        engine,
        [
            (0, Action.bet(100)),
            (1, Action.raise_to(250)),
            (2, Action.call()),
            (3, Action.fold()),
        ],
    )
    # Seat 0 is all-in; seats 1 and 2 keep betting on later streets.
    assert engine.hand.street.value == "FLOP"
    perform_actions(engine, [(1, Action.bet(100)), (2, Action.fold())])
    assert engine.is_hand_complete()
    # Seat 0 wins the main pot; seat 1 collects the side pot after seat 2 folds.
    assert engine.hand.outcome.amounts == {0: 300, 1: 400}
    assert [seat.stack for seat in engine.seats] == [300, 1050, 750, 1000]


def test_short_all_in_call_then_run_out_with_callers_behind():
    engine = create_engine()
    start_stacked_hand(engine, stacks={3: 30})
    events = perform_actions(
        engine,
        [
            (0, Action.bet(60)),
            (1, Action.call()),
            (2, Action.fold()),
            (3, Action.call()),
        ],
    )
    seat_acted = [event for event in events if event.ev == "SEAT_ACTED"]
    assert seat_acted[-1].kind == ActionType.ALL_IN
    assert seat_acted[-1].amount == 30
    assert engine.hand.street.value == "FLOP"
    auto_complete_hand(engine)
    # Seat 3 is capped at 30 per opponent and loses to seat 0.
    assert engine.hand.side_pots == [SidePot(90, (0, 1, 3)), SidePot(60, (0, 1))]
    assert engine.hand.outcome.amounts == {0: 150}
    assert sum(seat.stack for seat in engine.seats) == 3030
