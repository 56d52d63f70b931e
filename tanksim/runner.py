"""Running games, building modes from the command line, and the simulator entry point."""

from __future__ import annotations

import re
import sys
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Any, Callable, Iterable

from tanksim.battlefield import satellite_to_string
from tanksim.cli import (
    Cli,
    Mode,
    PluginError,
    dir_exists,
    file_exists,
    list_files,
    parse_cli,
    stem_key,
    usage,
)
from tanksim.comparative import ComparativeMode
from tanksim.competition import CompetitionMode
from tanksim.game import AbstractMode, GameArgs, RanGame
from tanksim.registrars import (
    AlgorithmRegistrar,
    AlgorithmRegistrationError,
    GameManagerRegistrar,
    GameManagerRegistrationError,
)

# Installers for plugins known to this process, keyed by the stem of the plugin file.
# An installer registers its factories through the registration functions when called.
_PLUGIN_INSTALLERS: dict[str, Callable[[], Any]] = {}


def make_tank_factory(
    algorithms: AlgorithmRegistrar, algo_id: int
) -> Callable[[int, int], Any]:
    """A factory creating tank algorithms from the given registered algorithm."""

    def factory(player_index: int, tank_index: int) -> Any:
        return algorithms.get(algo_id).create_tank_algorithm(player_index, tank_index)

    return factory


def make_player(
    algorithms: AlgorithmRegistrar,
    algo_id: int,
    player_index: int,
    width: int,
    height: int,
    max_steps: int,
    num_shells: int,
) -> Any:
    """Create a player from the given registered algorithm."""
    return algorithms.get(algo_id).create_player(
        player_index, width, height, max_steps, num_shells
    )


def run_single_game(
    game: GameArgs,
    algorithms: AlgorithmRegistrar,
    game_managers: GameManagerRegistrar,
    verbose: bool,
) -> RanGame:
    """Run one game under its game manager and capture the final board."""
    if game.game_manager_id not in game_managers or not game_managers.get(
        game.game_manager_id
    ).has_factory():
        raise RuntimeError(f"GameManager not found or not loadable: {game.game_manager_name}")
    manager = game_managers.get(game.game_manager_id).create(verbose)
    tanks1 = make_tank_factory(algorithms, game.player1_algo_id)
    tanks2 = make_tank_factory(algorithms, game.player2_algo_id)
    player1 = make_player(
        algorithms, game.player1_algo_id, 1,
        game.map_width, game.map_height, game.max_steps, game.num_shells,
    )
    player2 = make_player(
        algorithms, game.player2_algo_id, 2,
        game.map_width, game.map_height, game.max_steps, game.num_shells,
    )
    result = manager.run(
        game.map_width, game.map_height,
        game.map, game.map_name,
        game.max_steps, game.num_shells,
        player1, game.player1_name, player2, game.player2_name,
        tanks1, tanks2,
    )
    final_state = (
        satellite_to_string(result.game_state, game.map_width, game.map_height)
        if result.game_state is not None
        else ""
    )
    return RanGame(
        game.game_manager_name,
        game.map_name,
        game.player1_algo_id,
        game.player2_algo_id,
        result,
        final_state,
    )


def _play(mode: AbstractMode, game: GameArgs, verbose: bool) -> None:
    ran = run_single_game(game, mode.algorithms, mode.game_managers, verbose)
    mode.apply_score(game, ran.result, ran.final_state)


def run_all_games(mode: AbstractMode, jobs: Iterable[GameArgs], verbose: bool) -> None:
    """Run the games one after another, scoring each."""
    for game in jobs:
        _play(mode, game, verbose)


def run_threads(
    mode: AbstractMode, jobs: Iterable[GameArgs], num_threads: int, verbose: bool
) -> None:
    """Run the games on a pool of worker threads, scoring each."""
    with ThreadPoolExecutor(max_workers=max(1, num_threads)) as pool:
        for _ in pool.map(lambda game: _play(mode, game, verbose), list(jobs)):
            pass


def _require(cli: Cli, keys: Iterable[str]) -> None:
    for key in keys:
        if key not in cli.kv:
            raise ValueError(f"Missing {key}")


def create_mode(cli: Cli) -> tuple[AbstractMode, list[str]]:
    """Check the arguments of the chosen mode; return the mode and its map files."""
    kv = cli.kv
    if cli.mode is Mode.COMPARATIVE:
        _require(cli, ("game_map", "game_managers_folder", "algorithm1", "algorithm2"))
        if not file_exists(kv["game_map"]):
            raise ValueError(f"game_map not found: {kv['game_map']}")
        if not dir_exists(kv["game_managers_folder"]):
            raise ValueError(
                f"game_managers_folder missing/not dir: {kv['game_managers_folder']}"
            )
        return ComparativeMode(), [kv["game_map"]]
    _require(cli, ("game_maps_folder", "game_manager", "algorithms_folder"))
    if not dir_exists(kv["game_maps_folder"]):
        raise ValueError(f"game_maps_folder missing/not dir: {kv['game_maps_folder']}")
    if not dir_exists(kv["algorithms_folder"]):
        raise ValueError(f"algorithms_folder missing/not dir: {kv['algorithms_folder']}")
    maps = list_files(kv["game_maps_folder"])
    if not maps:
        raise ValueError("game_maps_folder has no files.")
    return CompetitionMode(), maps


def write_mode_results(mode: AbstractMode, cli: Cli) -> Path | None:
    """Write the results file of the mode; return its path if one was written."""
    kv = cli.kv
    if isinstance(mode, CompetitionMode):
        return mode.write_results(
            kv.get("algorithms_folder", ""),
            kv.get("game_maps_folder", ""),
            Path(kv.get("game_manager", "")).name,
        )
    if isinstance(mode, ComparativeMode):
        return mode.write_results(
            kv.get("game_managers_folder", ""),
            Path(kv.get("game_map", "")).name,
            Path(kv.get("algorithm1", "")).name,
            Path(kv.get("algorithm2", "")).name,
        )
    return None


def _leading_int(text: str) -> int:
    match = re.match(r"\s*([+-]?\d+)", text)
    if match is None:
        raise ValueError(text)
    return int(match.group(1))


def _load_installed_plugin(path: str) -> Any:
    """Run the installer known for the plugin file's stem."""
    stem = stem_key(path)
    installer = _PLUGIN_INSTALLERS.get(stem)
    if installer is None:
        raise PluginError(f"no plugin installed under the name {stem!r} ({path})")
    return installer()


def main(argv: list[str] | None = None) -> int:
    """Run the simulator; return the process exit status."""
    args = sys.argv[1:] if argv is None else list(argv)
    cli, bad = parse_cli(args)
    if bad:
        usage("Unsupported or missing arguments.", bad)
        return 1

    num_threads = 1
    if "num_threads" in cli.kv:
        try:
            num_threads = max(1, _leading_int(cli.kv["num_threads"]))
        except ValueError:
            usage("num_threads must be an integer.")
            return 1

    try:
        mode, maps = create_mode(cli)
    except ValueError as exc:
        usage(str(exc))
        return 1

    try:
        mode.open_plugins(cli, _load_installed_plugin)
    except (PluginError, AlgorithmRegistrationError, GameManagerRegistrationError) as exc:
        usage(str(exc))
        print("Failed to open shared object files.", file=sys.stderr)
        return 1

    try:
        jobs = mode.get_all_games(maps)
    except (RuntimeError, LookupError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    if not jobs:
        print("No games to run.", file=sys.stderr)
        return 0

    num_threads = min(num_threads, len(jobs))
    if num_threads > 1:
        run_threads(mode, jobs, num_threads, cli.verbose)
    else:
        run_all_games(mode, jobs, cli.verbose)

    write_mode_results(mode, cli)
    return 0