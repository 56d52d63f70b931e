"""Registries of algorithm and game manager factories, filled as plugins load."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Iterator

PlayerFactory = Callable[[int, int, int, int, int], Any]
TankAlgorithmFactory = Callable[[int, int], Any]
GameManagerFactory = Callable[[bool], Any]


class AlgorithmRegistrationError(Exception):
    """The last algorithm entry lacks a name or one of its factories."""

    def __init__(
        self, name: str, has_name: bool, has_player_factory: bool, has_tank_algorithm_factory: bool
    ) -> None:
        super().__init__(
            f"bad algorithm registration {name!r}: name={has_name}, "
            f"player={has_player_factory}, tank_algorithm={has_tank_algorithm_factory}"
        )
        self.name = name
        self.has_name = has_name
        self.has_player_factory = has_player_factory
        self.has_tank_algorithm_factory = has_tank_algorithm_factory


class GameManagerRegistrationError(Exception):
    """The last game manager entry lacks a name or a factory."""

    def __init__(self, name: str, has_name: bool, has_factory: bool) -> None:
        super().__init__(
            f"bad game manager registration {name!r}: name={has_name}, factory={has_factory}"
        )
        self.name = name
        self.has_name = has_name
        self.has_factory = has_factory


class AlgorithmEntry:
    """A named pair of player and tank algorithm factories."""

    def __init__(self, name: str = "") -> None:
        self.name = name
        self._player_factory: PlayerFactory | None = None
        self._tank_factory: TankAlgorithmFactory | None = None

    def set_player_factory(self, factory: PlayerFactory) -> None:
        if self._player_factory is not None:
            raise ValueError(f"player factory already set for {self.name!r}")
        self._player_factory = factory

    def set_tank_algorithm_factory(self, factory: TankAlgorithmFactory) -> None:
        if self._tank_factory is not None:
            raise ValueError(f"tank algorithm factory already set for {self.name!r}")
        self._tank_factory = factory

    def create_player(
        self, player_index: int, width: int, height: int, max_steps: int, num_shells: int
    ) -> Any:
        if self._player_factory is None:
            raise RuntimeError(f"no player factory for {self.name!r}")
        return self._player_factory(player_index, width, height, max_steps, num_shells)

    def create_tank_algorithm(self, player_index: int, tank_index: int) -> Any:
        if self._tank_factory is None:
            raise RuntimeError(f"no tank algorithm factory for {self.name!r}")
        return self._tank_factory(player_index, tank_index)

    def has_player_factory(self) -> bool:
        return self._player_factory is not None

    def has_tank_algorithm_factory(self) -> bool:
        return self._tank_factory is not None


class AlgorithmRegistrar:
    """Algorithm entries keyed by id; new registrations go to the current id."""

    def __init__(self) -> None:
        self.algo_id = 0
        self._entries: dict[int, AlgorithmEntry] = {}

    def _current(self) -> AlgorithmEntry:
        return self._entries.setdefault(self.algo_id, AlgorithmEntry())

    def create_entry(self, name: str) -> AlgorithmEntry:
        entry = AlgorithmEntry(name)
        self._entries[self.algo_id] = entry
        return entry

    def add_player_factory(self, factory: PlayerFactory) -> None:
        self._current().set_player_factory(factory)

    def add_tank_algorithm_factory(self, factory: TankAlgorithmFactory) -> None:
        self._current().set_tank_algorithm_factory(factory)

    def validate_last_registration(self) -> None:
        last = self._current()
        has_name = last.name != ""
        if not (has_name and last.has_player_factory() and last.has_tank_algorithm_factory()):
            raise AlgorithmRegistrationError(
                last.name, has_name, last.has_player_factory(), last.has_tank_algorithm_factory()
            )

    def advance(self) -> None:
        self.algo_id += 1

    def reset_id(self) -> None:
        self.algo_id = 0

    def get(self, algo_id: int) -> AlgorithmEntry:
        try:
            return self._entries[algo_id]
        except KeyError:
            raise KeyError(f"Algorithm ID not found: {algo_id}") from None

    def first(self) -> tuple[int, AlgorithmEntry]:
        if not self._entries:
            raise LookupError("no algorithms registered")
        key = min(self._entries)
        return key, self._entries[key]

    def last(self) -> tuple[int, AlgorithmEntry]:
        if not self._entries:
            raise LookupError("no algorithms registered")
        key = max(self._entries)
        return key, self._entries[key]

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[tuple[int, AlgorithmEntry]]:
        return iter(sorted(self._entries.items()))


class GameManagerEntry:
    """A named game manager factory."""

    def __init__(self, name: str = "") -> None:
        self.name = name
        self._factory: GameManagerFactory | None = None

    def set_factory(self, factory: GameManagerFactory) -> None:
        if self._factory is not None:
            raise ValueError(f"game manager factory already set for {self.name!r}")
        self._factory = factory

    def create(self, verbose: bool) -> Any:
        if self._factory is None:
            raise RuntimeError(f"no game manager factory for {self.name!r}")
        return self._factory(verbose)

    def has_factory(self) -> bool:
        return self._factory is not None


class GameManagerRegistrar:
    """Game manager entries keyed by id; new registrations go to the current count."""

    def __init__(self) -> None:
        self.count = 0
        self._entries: dict[int, GameManagerEntry] = {}

    def _current(self) -> GameManagerEntry:
        return self._entries.setdefault(self.count, GameManagerEntry())

    def create_entry(self, name: str) -> GameManagerEntry:
        entry = GameManagerEntry(name)
        self._entries[self.count] = entry
        return entry

    def add_factory(self, factory: GameManagerFactory) -> None:
        self._current().set_factory(factory)

    def validate_last_registration(self) -> None:
        last = self._current()
        has_name = last.name != ""
        if not (has_name and last.has_factory()):
            raise GameManagerRegistrationError(last.name, has_name, last.has_factory())

    def advance(self) -> None:
        self.count += 1

    def reset_count(self) -> None:
        self.count = 0

    def get(self, gm_id: int) -> GameManagerEntry:
        try:
            return self._entries[gm_id]
        except KeyError:
            raise KeyError(f"GameManager not found: {gm_id}") from None

    def remove_last(self) -> None:
        """Drop the most recently completed registration."""
        if not self._entries:
            raise LookupError("No game manager registrations to remove.")
        self._entries.pop(self.count - 1, None)
        self.count -= 1

    def __contains__(self, gm_id: object) -> bool:
        return gm_id in self._entries

    def __iter__(self) -> Iterator[tuple[int, GameManagerEntry]]:
        return iter(sorted(self._entries.items()))


_ALGORITHMS = AlgorithmRegistrar()
_GAME_MANAGERS = GameManagerRegistrar()


def get_algorithm_registrar() -> AlgorithmRegistrar:
    """The process-wide algorithm registrar."""
    return _ALGORITHMS


def get_game_manager_registrar() -> GameManagerRegistrar:
    """The process-wide game manager registrar."""
    return _GAME_MANAGERS


def register_player(factory: PlayerFactory) -> PlayerFactory:
    """Attach a player factory to the entry being loaded; usable as a decorator."""
    _ALGORITHMS.add_player_factory(factory)
    return factory


def register_tank_algorithm(factory: TankAlgorithmFactory) -> TankAlgorithmFactory:
    """Attach a tank algorithm factory to the entry being loaded; usable as a decorator."""
    _ALGORITHMS.add_tank_algorithm_factory(factory)
    return factory


def register_game_manager(factory: GameManagerFactory) -> GameManagerFactory:
    """Attach a game manager factory to the entry being loaded; usable as a decorator."""
    _GAME_MANAGERS.add_factory(factory)
    return factory