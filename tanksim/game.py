"""Game descriptions, results and the interface shared by the simulator modes."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import IntEnum
from typing import Any, Callable

from tanksim.battlefield import SatelliteView
from tanksim.cli import Cli
from tanksim.registrars import (
    AlgorithmRegistrar,
    GameManagerRegistrar,
    get_algorithm_registrar,
    get_game_manager_registrar,
)


class Reason(IntEnum):
    """Why a game ended."""

    ALL_TANKS_DEAD = 0
    MAX_STEPS = 1
    ZERO_SHELLS = 2


@dataclass
class GameResult:
    """Outcome of one game: winner 0 is a tie, 1 or 2 the winning player."""

    winner: int
    reason: Reason
    rounds: int
    game_state: SatelliteView | None = None


@dataclass
class GameArgs:
    """Everything needed to run one game."""

    map_width: int
    map_height: int
    max_steps: int
    num_shells: int
    map: SatelliteView
    map_name: str
    game_manager_name: str
    player1_name: str
    player2_name: str
    player1_algo_id: int
    player2_algo_id: int
    game_manager_id: int


@dataclass
class RanGame:
    """A finished game with its result and the final board as text."""

    gm_name: str
    map_name: str
    algo1_id: int
    algo2_id: int
    result: GameResult
    final_state: str


class AbstractMode(ABC):
    """A way of choosing games and scoring their results."""

    def __init__(
        self,
        algorithms: AlgorithmRegistrar | None = None,
        game_managers: GameManagerRegistrar | None = None,
    ) -> None:
        self.algorithms = algorithms if algorithms is not None else get_algorithm_registrar()
        self.game_managers = (
            game_managers if game_managers is not None else get_game_manager_registrar()
        )

    @abstractmethod
    def get_all_games(self, game_maps: list[str]) -> list[GameArgs]:
        """Build the list of games to run on the given maps."""

    @abstractmethod
    def open_plugins(self, cli: Cli, loader: Callable[[str], Any]) -> tuple[list[Any], list[Any]]:
        """Load and register the plugins the command line names."""

    @abstractmethod
    def apply_score(self, game: GameArgs, result: GameResult, final_state: str) -> None:
        """Record the result of one finished game."""