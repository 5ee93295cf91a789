from holdem.__main__ import main, parse_args, run_simulation


def test_parse_args_defaults():
    args = parse_args([])
    assert args.hands == 100
    assert args.seats == 4
    assert args.starting_stack == 1000
    assert args.min_bet == 1
    assert args.strategy == "random"


def test_passive_simulation_keeps_every_stack():
    args = parse_args(["--hands", "5", "--strategy", "passive"])
    assert run_simulation(args) == {0: 1000, 1: 1000, 2: 1000, 3: 1000}


def test_random_simulation_conserves_chips():
    args = parse_args(["--hands", "25", "--seats", "3", "--starting-stack", "300", "--seed", "11"])
    stacks = run_simulation(args)
    assert sorted(stacks) == [0, 1, 2]
    assert sum(stacks.values()) == 900


def test_main_returns_zero():
    assert main(["--hands", "3", "--log-level", "WARNING"]) == 0
