"""Comparative mode: two algorithms on one map under every game manager."""

from __future__ import annotations

import threading
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable

from tanksim.battlefield import (
    InitialSatellite,
    MapError,
    parse_battlefield_file,
    unique_time_str,
)
from tanksim.cli import (
    Cli,
    PluginError,
    file_exists,
    list_shared_objects,
    load_plugin,
    stem_key,
    usage,
)
from tanksim.game import AbstractMode, GameArgs, GameResult, Reason
from tanksim.registrars import AlgorithmRegistrar, GameManagerRegistrar

import sys


@dataclass(frozen=True)
class ComparativeKey:
    """An outcome that game managers are grouped by."""

    winner: int
    reason: Reason
    rounds: int
    final_board: str


def _basename(path: str) -> str:
    cut = max(path.rfind("/"), path.rfind("\\"))
    return path if cut < 0 else path[cut + 1 :]


def _winner_str(winner: int) -> str:
    return {0: "Draw", 1: "Player 1", 2: "Player 2"}.get(winner, "Unknown")


def _reason_str(reason: object) -> str:
    try:
        return Reason(reason).name
    except ValueError:
        return "UNKNOWN"


class ComparativeMode(AbstractMode):
    """Groups game managers by the outcome they produce for the same game."""

    def __init__(
        self,
        algorithms: AlgorithmRegistrar | None = None,
        game_managers: GameManagerRegistrar | None = None,
    ) -> None:
        super().__init__(algorithms, game_managers)
        self.groups: dict[ComparativeKey, list[str]] = {}
        self._lock = threading.Lock()

    def get_all_games(self, game_maps: list[str]) -> list[GameArgs]:
        """One game per loadable game manager, first algorithm against last, on the first map."""
        id1, entry1 = self.algorithms.first()
        id2, entry2 = self.algorithms.last()
        game_map = game_maps[0]
        try:
            parsed = parse_battlefield_file(game_map)
        except MapError as exc:
            usage(f"Error parsing map file: {exc}")
            return []
        games: list[GameArgs] = []
        for gm_id in range(self.game_managers.count):
            if gm_id not in self.game_managers:
                continue
            gm_entry = self.game_managers.get(gm_id)
            if not gm_entry.has_factory():
                continue
            satellite = InitialSatellite(
                set(parsed.player1_tanks),
                set(parsed.player2_tanks),
                set(parsed.walls),
                set(parsed.mines),
            )
            games.append(
                GameArgs(
                    map_width=parsed.map_width,
                    map_height=parsed.map_height,
                    max_steps=parsed.max_steps,
                    num_shells=parsed.num_shells,
                    map=satellite,
                    map_name=game_map,
                    game_manager_name=gm_entry.name,
                    player1_name=entry1.name,
                    player2_name=entry2.name,
                    player1_algo_id=id1,
                    player2_algo_id=id2,
                    game_manager_id=gm_id,
                )
            )
        return games

    def open_plugins(self, cli: Cli, loader: Callable[[str], Any]) -> tuple[list[Any], list[Any]]:
        """Load both algorithms and every game manager in the folder."""
        algo_libs = self.register_two_algorithms(cli, loader)
        gm_libs = self.register_game_managers(cli, loader)
        return algo_libs, gm_libs

    def _register_algorithm(self, path: str, loader: Callable[[str], Any]) -> Any:
        self.algorithms.create_entry(stem_key(path))
        try:
            lib = load_plugin(path, loader)
        except PluginError as exc:
            raise PluginError(
                f"Failed to load Algorithm shared object: {path}\nError: {exc}\n"
            ) from exc
        self.algorithms.validate_last_registration()
        self.algorithms.advance()
        return lib

    def register_two_algorithms(self, cli: Cli, loader: Callable[[str], Any]) -> list[Any]:
        """Load the two algorithm plugins named on the command line."""
        path1 = cli.kv.get("algorithm1", "")
        path2 = cli.kv.get("algorithm2", "")
        if not file_exists(path1) or not file_exists(path2):
            raise PluginError(f"One or both algorithms not found: {path1}, {path2}")
        lib1 = self._register_algorithm(path1, loader)
        lib2 = self._register_algorithm(path2, loader)
        if len(self.algorithms) < 2:
            raise PluginError("algorithms_folder must contain at least two algorithms.")
        return [lib1, lib2]

    def register_game_managers(self, cli: Cli, loader: Callable[[str], Any]) -> list[Any]:
        """Load every game manager plugin in the folder, skipping those that fail."""
        loaded = []
        for path in list_shared_objects(cli.kv.get("game_managers_folder", "")):
            self.game_managers.create_entry(stem_key(path))
            try:
                lib = load_plugin(path, loader)
            except PluginError as exc:
                print(
                    f"Failed to load GameManager shared object: {path}\nError: {exc}",
                    file=sys.stderr,
                )
                continue
            self.game_managers.validate_last_registration()
            self.game_managers.advance()
            loaded.append(lib)
        if self.game_managers.count == 0:
            raise PluginError("game_managers_folder must contain at least one game manager.")
        return loaded

    def apply_score(self, game: GameArgs, result: GameResult, final_state: str) -> None:
        key = ComparativeKey(result.winner, result.reason, result.rounds, final_state)
        with self._lock:
            self.groups.setdefault(key, []).append(game.game_manager_name)

    def sorted_groups(self) -> list[tuple[ComparativeKey, list[str]]]:
        """Groups ordered by winner, reason and rounds, larger groups first, then by board."""
        with self._lock:
            groups = [(key, sorted(names)) for key, names in self.groups.items()]
        return sorted(
            groups,
            key=lambda item: (
                item[0].winner,
                int(item[0].reason),
                item[0].rounds,
                -len(item[1]),
                item[0].final_board,
            ),
        )

    def write_results(
        self,
        game_managers_folder: str,
        game_map_filename: str,
        algorithm1_so: str,
        algorithm2_so: str,
    ) -> Path:
        """Write the grouped outcomes to a file in the game managers folder."""
        groups = self.sorted_groups()
        lines = [
            "=== Comparative Mode Results ===\n",
            f"Map: {_basename(game_map_filename)}\n",
            f"Algorithm 1: {_basename(algorithm1_so)}\n",
            f"Algorithm 2: {_basename(algorithm2_so)}\n",
            f"Game Managers folder: {game_managers_folder}\n",
            f"Total distinct outcome groups: {len(groups)}\n\n",
        ]
        if not groups:
            lines.append("(No results)\n")
        for key, managers in groups:
            lines.append("---- Group ----\n")
            lines.append(
                f"Winner: {_winner_str(key.winner)}"
                f"  |  Reason: {_reason_str(key.reason)}"
                f"  |  Rounds: {key.rounds}"
                f"  |  GameManagers: {len(managers)}\n"
            )
            lines.append("Managers: " + ", ".join(managers) + "\n")
            lines.append("Final board:\n")
            if key.final_board:
                board = key.final_board
                lines.append(board if board.endswith("\n") else board + "\n")
            else:
                lines.append("(no board captured)\n")
            lines.append("\n")
        out_path = Path(f"{game_managers_folder}/comparative_results_{unique_time_str()}.txt")
        try:
            with out_path.open("w", encoding="utf-8") as out:
                out.writelines(lines)
        except OSError as exc:
            raise RuntimeError(f"Failed to open output file: {out_path}") from exc
        return out_path