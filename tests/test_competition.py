from pathlib import Path

import pytest

from tanksim.cli import Cli, Mode, PluginError
from tanksim.competition import CompetitionMode
from tanksim.game import GameArgs, GameResult, Reason
from tanksim.registrars import (
    AlgorithmRegistrar,
    AlgorithmRegistrationError,
    GameManagerRegistrar,
)

MAP_TEXT = "test map\nMaxSteps = 100\nNumShells = 5\nRows = 2\nCols = 3\n1 2\n#@ \n"


def _loader(algorithms, game_managers, failing=(), incomplete=()):
    def load(path):
        stem = Path(path).stem
        if stem in failing:
            raise OSError(f"cannot load {stem}")
        if stem.startswith("gm"):
            game_managers.add_factory(lambda verbose: stem)
        else:
            algorithms.add_player_factory(lambda *args: ("player", stem))
            if stem not in incomplete:
                algorithms.add_tank_algorithm_factory(lambda p, t: ("tank", stem))
        return path

    return load


def _mode_with(names):
    algos, gms = AlgorithmRegistrar(), GameManagerRegistrar()
    for name in names:
        algos.create_entry(name)
        algos.add_player_factory(lambda *a: None)
        algos.add_tank_algorithm_factory(lambda p, t: None)
        algos.advance()
    gms.create_entry("gm")
    gms.add_factory(lambda verbose: None)
    gms.advance()
    return CompetitionMode(algos, gms)


def _game(p1="alpha", p2="beta"):
    return GameArgs(3, 2, 10, 5, None, "m", "gm", p1, p2, 0, 1, 0)


def _write_map(tmp_path, name="map.txt", text=MAP_TEXT):
    path = tmp_path / name
    path.write_text(text)
    return str(path)


def test_two_algorithms_one_map_make_one_game(tmp_path):
    mode = _mode_with(["alpha", "beta"])
    games = mode.get_all_games([_write_map(tmp_path)])
    assert len(games) == 1
    game = games[0]
    assert (game.player1_algo_id, game.player2_algo_id) == (0, 1)
    assert (game.player1_name, game.player2_name) == ("alpha", "beta")
    assert game.game_manager_name == "gm"
    assert (game.map_width, game.map_height, game.max_steps, game.num_shells) == (3, 2, 100, 5)
    assert game.map.get_object_at(0, 0) == "1"
    assert game.map.get_object_at(0, 1) == "#"


def test_three_algorithms_pairings(tmp_path):
    mode = _mode_with(["a", "b", "c"])
    games = mode.get_all_games([_write_map(tmp_path)])
    pairs = {(g.player1_algo_id, g.player2_algo_id) for g in games}
    assert all(p1 != p2 for p1, p2 in pairs)
    assert pairs == {(1, 0), (0, 1), (1, 2)}


def test_each_game_gets_its_own_satellite(tmp_path):
    mode = _mode_with(["a", "b", "c"])
    games = mode.get_all_games([_write_map(tmp_path)])
    games[0].map.walls.clear()
    assert games[1].map.get_object_at(0, 1) == "#"


def test_bad_maps_are_skipped(tmp_path, capsys):
    mode = _mode_with(["alpha", "beta"])
    bad = _write_map(tmp_path, "bad.txt", "only a title\n")
    good = _write_map(tmp_path)
    games = mode.get_all_games([bad, good])
    assert [g.map_name for g in games] == [good]
    assert "Error parsing map file" in capsys.readouterr().err


def test_no_valid_games_raises(tmp_path):
    mode = _mode_with(["alpha", "beta"])
    bad = _write_map(tmp_path, "bad.txt", "only a title\n")
    with pytest.raises(RuntimeError, match="No valid games"):
        mode.get_all_games([bad])


def test_no_game_managers_raises(tmp_path):
    mode = CompetitionMode(AlgorithmRegistrar(), GameManagerRegistrar())
    with pytest.raises(RuntimeError, match="No game managers registered"):
        mode.get_all_games([_write_map(tmp_path)])


def test_scores_win_and_tie():
    mode = _mode_with([])
    mode.apply_score(_game(), GameResult(1, Reason.ALL_TANKS_DEAD, 5), "")
    mode.apply_score(_game(), GameResult(2, Reason.ALL_TANKS_DEAD, 5), "")
    mode.apply_score(_game(), GameResult(0, Reason.MAX_STEPS, 5), "")
    assert mode.scores == {"alpha": 4, "beta": 4}
    mode.apply_score(_game(), GameResult(2, Reason.ZERO_SHELLS, 5), "")
    assert mode.scores["beta"] == mode.scores["alpha"] + 3


def test_sorted_table_by_score_then_name():
    mode = _mode_with([])
    mode.scores = {"zeta": 3, "alpha": 3, "mid": 7, "low": 0}
    assert mode.sorted_score_table() == [("mid", 7), ("alpha", 3), ("zeta", 3), ("low", 0)]


def test_register_algorithms_skips_failures(tmp_path, capsys):
    for name in ["alpha", "beta", "broken"]:
        (tmp_path / f"{name}.py").write_text("")
    algos, gms = AlgorithmRegistrar(), GameManagerRegistrar()
    mode = CompetitionMode(algos, gms)
    cli = Cli(Mode.COMPETITION, kv={"algorithms_folder": str(tmp_path)})
    loaded = mode.register_algorithms(cli, _loader(algos, gms, failing={"broken"}))
    assert [Path(p).stem for p in loaded] == ["alpha", "beta"]
    assert algos.algo_id == 2
    assert mode.scores == {"alpha": 0, "beta": 0}
    assert "Failed to load Algorithm shared object" in capsys.readouterr().err


def test_register_algorithms_needs_two(tmp_path):
    (tmp_path / "alpha.py").write_text("")
    algos, gms = AlgorithmRegistrar(), GameManagerRegistrar()
    mode = CompetitionMode(algos, gms)
    cli = Cli(Mode.COMPETITION, kv={"algorithms_folder": str(tmp_path)})
    with pytest.raises(PluginError, match="at least two"):
        mode.register_algorithms(cli, _loader(algos, gms))


def test_incomplete_registration_raises(tmp_path):
    (tmp_path / "alpha.py").write_text("")
    algos, gms = AlgorithmRegistrar(), GameManagerRegistrar()
    mode = CompetitionMode(algos, gms)
    cli = Cli(Mode.COMPETITION, kv={"algorithms_folder": str(tmp_path)})
    with pytest.raises(AlgorithmRegistrationError):
        mode.register_algorithms(cli, _loader(algos, gms, incomplete={"alpha"}))


def test_register_game_manager(tmp_path):
    gm_path = tmp_path / "gm_one.py"
    gm_path.write_text("")
    algos, gms = AlgorithmRegistrar(), GameManagerRegistrar()
    mode = CompetitionMode(algos, gms)
    cli = Cli(Mode.COMPETITION, kv={"game_manager": str(gm_path)})
    assert mode.register_game_manager(cli, _loader(algos, gms)) == [str(gm_path)]
    assert gms.count == 1
    assert gms.get(0).name == "gm_one"
    assert gms.get(0).create(False) == "gm_one"


def test_register_game_manager_missing_file(tmp_path):
    mode = CompetitionMode(AlgorithmRegistrar(), GameManagerRegistrar())
    cli = Cli(Mode.COMPETITION, kv={"game_manager": str(tmp_path / "nope.py")})
    with pytest.raises(PluginError, match="game_manager not found"):
        mode.register_game_manager(cli, lambda path: path)


def test_register_game_manager_load_failure(tmp_path):
    gm_path = tmp_path / "gm_bad.py"
    gm_path.write_text("")
    algos, gms = AlgorithmRegistrar(), GameManagerRegistrar()
    mode = CompetitionMode(algos, gms)
    cli = Cli(Mode.COMPETITION, kv={"game_manager": str(gm_path)})
    with pytest.raises(PluginError, match="Failed to load GameManager"):
        mode.register_game_manager(cli, _loader(algos, gms, failing={"gm_bad"}))


def test_open_plugins_loads_both(tmp_path):
    algo_dir = tmp_path / "algos"
    algo_dir.mkdir()
    for name in ["alpha", "beta"]:
        (algo_dir / f"{name}.py").write_text("")
    gm_path = tmp_path / "gm_main.py"
    gm_path.write_text("")
    algos, gms = AlgorithmRegistrar(), GameManagerRegistrar()
    mode = CompetitionMode(algos, gms)
    cli = Cli(
        Mode.COMPETITION,
        kv={"algorithms_folder": str(algo_dir), "game_manager": str(gm_path)},
    )
    algo_libs, gm_libs = mode.open_plugins(cli, _loader(algos, gms))
    assert len(algo_libs) == 2 and gm_libs == [str(gm_path)]
    games = mode.get_all_games([_write_map(tmp_path)])
    assert games[0].game_manager_name == "gm_main"


def test_write_results_file(tmp_path):
    mode = _mode_with([])
    mode.scores = {"beta": 1, "alpha": 3}
    path = mode.write_results(str(tmp_path), "maps", "gm.py")
    assert path.parent == tmp_path
    assert path.name.startswith("competition_") and path.suffix == ".txt"
    assert path.read_text() == "game_maps_folder=maps\ngame_manager=gm.py\n\nalpha 3\nbeta 1\n"


def test_write_results_falls_back_to_stdout(tmp_path, capsys):
    mode = _mode_with([])
    mode.scores = {"alpha": 3}
    assert mode.write_results(str(tmp_path / "missing"), "maps", "gm.py") is None
    captured = capsys.readouterr()
    assert captured.out == "game_maps_folder=maps\ngame_manager=gm.py\n\nalpha 3\n"
    assert "Could not create" in captured.err