import pytest

from tanksim.battlefield import InitialSatellite
from tanksim.cli import Cli
from tanksim.game import AbstractMode, GameArgs, GameResult, RanGame, Reason
from tanksim.registrars import (
    AlgorithmRegistrar,
    GameManagerRegistrar,
    get_algorithm_registrar,
    get_game_manager_registrar,
)


class _RecordingMode(AbstractMode):
    def __init__(self, algorithms=None, game_managers=None):
        super().__init__(algorithms, game_managers)
        self.recorded = []

    def get_all_games(self, game_maps):
        return [_args(name) for name in game_maps]

    def open_plugins(self, cli, loader):
        return [loader(cli.kv["a"])], []

    def apply_score(self, game, result, final_state):
        self.recorded.append((game.map_name, result.winner, final_state))


def _args(map_name="m"):
    return GameArgs(
        map_width=3,
        map_height=2,
        max_steps=10,
        num_shells=5,
        map=InitialSatellite({(0, 0)}, {(2, 1)}, set(), set()),
        map_name=map_name,
        game_manager_name="gm",
        player1_name="alpha",
        player2_name="beta",
        player1_algo_id=0,
        player2_algo_id=1,
        game_manager_id=0,
    )


def test_abstract_mode_cannot_be_instantiated():
    with pytest.raises(TypeError):
        AbstractMode()


def test_default_registrars_are_process_wide():
    mode = _RecordingMode()
    assert mode.algorithms is get_algorithm_registrar()
    assert mode.game_managers is get_game_manager_registrar()


def test_explicit_registrars_are_used():
    algos, gms = AlgorithmRegistrar(), GameManagerRegistrar()
    mode = _RecordingMode(algos, gms)
    assert mode.algorithms is algos and mode.game_managers is gms


def test_subclass_interface_round_trip():
    mode = _RecordingMode(AlgorithmRegistrar(), GameManagerRegistrar())
    games = mode.get_all_games(["one", "two"])
    assert [g.map_name for g in games] == ["one", "two"]
    mode.apply_score(games[1], GameResult(2, Reason.MAX_STEPS, 7), "board\n")
    assert mode.recorded == [("two", 2, "board\n")]
    assert mode.open_plugins(Cli(kv={"a": "x.py"}), str.upper) == (["X.PY"], [])


def test_results_sort_by_reason_in_enumeration_order():
    results = [
        GameResult(0, Reason.ZERO_SHELLS, 1),
        GameResult(0, Reason.ALL_TANKS_DEAD, 1),
        GameResult(0, Reason.MAX_STEPS, 1),
    ]
    ordered = sorted(results, key=lambda r: r.reason)
    assert [r.reason for r in ordered] == [
        Reason.ALL_TANKS_DEAD,
        Reason.MAX_STEPS,
        Reason.ZERO_SHELLS,
    ]
    assert int(ordered[0].reason) == 0


def test_game_args_keeps_satellite():
    args = _args()
    assert args.map.get_object_at(0, 0) == "1"
    assert args.map.get_object_at(2, 1) == "2"


def test_ran_game_holds_result():
    result = GameResult(0, Reason.ZERO_SHELLS, 12)
    ran = RanGame("gm", "m", 0, 1, result, "  \n")
    assert ran.result.rounds == 12
    assert ran.result.game_state is None
    assert ran.final_state == "  \n"