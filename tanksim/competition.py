"""Competition mode: every algorithm plays others on every map under one game manager."""

from __future__ import annotations

import sys
import threading
from pathlib import Path
from typing import Any, Callable

from tanksim.battlefield import InitialSatellite, MapError, parse_battlefield_file, unique_time_str
from tanksim.cli import (
    Cli,
    PluginError,
    file_exists,
    list_shared_objects,
    load_plugin,
    stem_key,
    usage,
)
from tanksim.game import AbstractMode, GameArgs, GameResult
from tanksim.registrars import AlgorithmRegistrar, GameManagerRegistrar

_NO_GAMES = "No valid games could be created. Please check the map files."


class CompetitionMode(AbstractMode):
    """Scores algorithms: 3 points for a win, 1 each for a tie."""

    def __init__(
        self,
        algorithms: AlgorithmRegistrar | None = None,
        game_managers: GameManagerRegistrar | None = None,
    ) -> None:
        super().__init__(algorithms, game_managers)
        self.scores: dict[str, int] = {}
        self._lock = threading.Lock()

    def get_all_games(self, game_maps: list[str]) -> list[GameArgs]:
        """Pair algorithms on each map, rotating the pairing from map to map."""
        registered = list(self.game_managers)
        if not registered:
            raise RuntimeError("No game managers registered.")
        gm_name = registered[0][1].name
        algo_count = self.algorithms.algo_id
        games: list[GameArgs] = []
        for i, game_map in enumerate(game_maps):
            try:
                parsed = parse_battlefield_file(game_map)
                if algo_count < 2:
                    continue
                for j in range(algo_count):
                    k = (i + j + 1) % (algo_count - 1)
                    if k == j:
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
                            game_manager_name=gm_name,
                            player1_name=self.algorithms.get(k).name,
                            player2_name=self.algorithms.get(j).name,
                            player1_algo_id=k,
                            player2_algo_id=j,
                            game_manager_id=0,
                        )
                    )
            except (MapError, KeyError) as exc:
                print(f"Error parsing map file: {exc}", file=sys.stderr)
        if not games:
            usage(_NO_GAMES)
            raise RuntimeError(_NO_GAMES)
        return games

    def open_plugins(self, cli: Cli, loader: Callable[[str], Any]) -> tuple[list[Any], list[Any]]:
        """Load the algorithms folder and the game manager; return what was loaded."""
        algo_libs = self.register_algorithms(cli, loader)
        gm_libs = self.register_game_manager(cli, loader)
        return algo_libs, gm_libs

    def register_algorithms(self, cli: Cli, loader: Callable[[str], Any]) -> list[Any]:
        """Load every plugin in the algorithms folder, skipping those that fail to load."""
        loaded = []
        for path in list_shared_objects(cli.kv.get("algorithms_folder", "")):
            name = stem_key(path)
            self.algorithms.create_entry(name)
            try:
                lib = load_plugin(path, loader)
            except PluginError as exc:
                print(
                    f"Failed to load Algorithm shared object: {path}\nError: {exc}",
                    file=sys.stderr,
                )
                continue
            self.algorithms.validate_last_registration()
            self.algorithms.advance()
            loaded.append(lib)
            with self._lock:
                self.scores[name] = 0
        if len(self.algorithms) < 2:
            raise PluginError("algorithms_folder must contain at least two algorithms.")
        return loaded

    def register_game_manager(self, cli: Cli, loader: Callable[[str], Any]) -> list[Any]:
        """Load the single game manager plugin."""
        path = cli.kv.get("game_manager", "")
        if not file_exists(path):
            raise PluginError(f"game_manager not found: {path}")
        self.game_managers.create_entry(stem_key(path))
        try:
            lib = load_plugin(path, loader)
        except PluginError as exc:
            raise PluginError(
                f"Failed to load GameManager shared object: {path}\nError: {exc}"
            ) from exc
        self.game_managers.validate_last_registration()
        self.game_managers.advance()
        return [lib]

    def apply_score(self, game: GameArgs, result: GameResult, final_state: str) -> None:
        with self._lock:
            if result.winner == 1:
                self._add(game.player1_name, 3)
            elif result.winner == 2:
                self._add(game.player2_name, 3)
            else:
                self._add(game.player1_name, 1)
                self._add(game.player2_name, 1)

    def _add(self, name: str, points: int) -> None:
        self.scores[name] = self.scores.get(name, 0) + points

    def sorted_score_table(self) -> list[tuple[str, int]]:
        """Scores, highest first, ties broken by name."""
        with self._lock:
            items = list(self.scores.items())
        return sorted(items, key=lambda item: (-item[1], item[0]))

    def write_results(
        self, algorithms_folder: str, game_maps_folder: str, game_manager_so: str
    ) -> Path | None:
        """Write the score table to a file in the algorithms folder, or to stdout if that fails."""
        lines = [
            f"game_maps_folder={game_maps_folder}\n",
            f"game_manager={game_manager_so}\n",
            "\n",
        ]
        lines.extend(f"{name} {score}\n" for name, score in self.sorted_score_table())
        out_path = Path(algorithms_folder) / f"competition_{unique_time_str()}.txt"
        try:
            with out_path.open("w", encoding="utf-8") as out:
                out.writelines(lines)
        except OSError:
            print(
                f"Could not create {out_path} - printing competition results to stdout instead.",
                file=sys.stderr,
            )
            sys.stdout.writelines(lines)
            return None
        return out_path