import argparse
import logging
import random
from typing import Callable, Dict, List, Optional

from .bots import RandomStrategy, passive_strategy
from .game import GameEngine
from .models import Action, TableConfig, TableSnapshot

LOGGER = logging.getLogger("holdem.sim")

Strategy = Callable[[TableSnapshot], Action]


def build_strategies(name: str, seats: int, seed: int) -> List[Strategy]:
    if name == "passive":
        return [passive_strategy] * seats
    return [RandomStrategy(random.Random(seed + idx)) for idx in range(seats)]


def play_hand(engine: GameEngine, strategies: List[Strategy], seed: Optional[int] = None) -> str:
    hand_id = engine.start_hand(seed=seed)
    while not engine.is_hand_complete():
        actor = engine.next_actor()
        if actor is None:
            break
        action = strategies[actor](engine.current_state(viewer=actor))
        submission = engine.submit_action(actor, action)
        if not submission.accepted:
            # Decision actors only pick from the legal set; a rejection is a bug.
            raise RuntimeError(f"Seat {actor} submitted an illegal action: {submission.reason}")
    return hand_id


def run_simulation(args: argparse.Namespace) -> Dict[int, int]:
    config = TableConfig(seats=args.seats, starting_stack=args.starting_stack, min_bet=args.min_bet)
    engine = GameEngine(config)
    strategies = build_strategies(args.strategy, config.seats, args.seed)
    starting_total = engine.chip_total()

    played = 0
    for offset in range(args.hands):
        if not engine.can_start_hand():
            LOGGER.info("Only one seat has chips left; stopping")
            break
        play_hand(engine, strategies, seed=args.seed + offset)
        played += 1

    if engine.chip_total() != starting_total:
        raise RuntimeError("Chip total drifted during the simulation")

    stacks = {seat.seat: seat.stack for seat in engine.seats}
    LOGGER.info("Played %s hands; final stacks %s", played, stacks)
    return stacks


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Simulate Texas Hold'em hands between baseline actors")
    parser.add_argument("--hands", type=int, default=100)
    parser.add_argument("--seats", type=int, default=4)
    parser.add_argument("--starting-stack", type=int, default=1_000)
    parser.add_argument("--min-bet", type=int, default=1)
    parser.add_argument("--strategy", choices=("random", "passive"), default="random")
    parser.add_argument("--seed", type=int, default=42)
    parser.add_argument("--log-level", default="INFO")
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(level=getattr(logging, args.log_level.upper(), logging.INFO))
    run_simulation(args)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
