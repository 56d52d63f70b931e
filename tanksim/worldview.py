"""Toroidal grid snapshot used by the tank algorithm, with its basic types."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, IntFlag
from typing import Iterator


class RoleTag(Enum):
    """Role a tank plays in its team."""

    AGGRESSOR = "Aggressor"
    ANCHOR = "Anchor"
    SURVIVOR = "Survivor"
    FLANKER = "Flanker"


@dataclass
class TankLocal:
    """A tank's own view of itself."""

    player_idx: int = 0
    tank_idx: int = 0
    x: int = 0
    y: int = 0
    facing_deg: int = 0


@dataclass(frozen=True)
class Cell:
    """A grid coordinate."""

    x: int = 0
    y: int = 0


class CellMask(IntFlag):
    """Occupancy and tag bits of a cell."""

    EMPTY = 0
    WALL = 1 << 0
    MINE = 1 << 1
    FRIEND = 1 << 2
    ENEMY = 1 << 3
    SHELL = 1 << 4
    GOAL = 1 << 5
    VISITED = 1 << 6


NO_SHELL = 0xFFFF

_NEIGHBOR_STEPS = ((1, 0), (-1, 0), (0, 1), (0, -1))


class WorldView:
    """Per-cell masks, danger costs and shell arrival times on a wrapping grid."""

    def __init__(self, width: int = 0, height: int = 0) -> None:
        self.w = 0
        self.h = 0
        self.mask: list[int] = []
        self.danger: list[int] = []
        self.shell_eta: list[int] = []
        self.reset(width, height)

    def reset(self, width: int, height: int) -> None:
        """Resize and clear every grid."""
        self.w = width
        self.h = height
        size = width * height
        self.mask = [CellMask.EMPTY.value] * size
        self.danger = [0] * size
        self.shell_eta = [NO_SHELL] * size

    def idx(self, x: int, y: int) -> int:
        """Flat index of a cell."""
        if not (0 <= x < self.w and 0 <= y < self.h):
            raise IndexError(f"cell ({x}, {y}) outside {self.w}x{self.h} grid")
        return y * self.w + x

    def wrap_x(self, x: int) -> int:
        return x % self.w

    def wrap_y(self, y: int) -> int:
        return y % self.h

    def toroidal_dx(self, a: int, b: int) -> int:
        """Shortest horizontal distance with wrap-around."""
        d = abs(a - b)
        return d if self.w == 0 else min(d, self.w - d)

    def toroidal_dy(self, a: int, b: int) -> int:
        """Shortest vertical distance with wrap-around."""
        d = abs(a - b)
        return d if self.h == 0 else min(d, self.h - d)

    def manhattan_toroidal(self, a: Cell, b: Cell) -> int:
        return self.toroidal_dx(a.x, b.x) + self.toroidal_dy(a.y, b.y)

    def get_mask(self, x: int, y: int) -> int:
        return self.mask[self.idx(x, y)]

    def set_mask(self, x: int, y: int, bits: int) -> None:
        self.mask[self.idx(x, y)] |= int(bits) & 0xFF

    def clear_mask(self, x: int, y: int, bits: int) -> None:
        self.mask[self.idx(x, y)] &= ~int(bits) & 0xFF

    def is_wall(self, x: int, y: int) -> bool:
        return bool(self.get_mask(x, y) & CellMask.WALL)

    def is_mine(self, x: int, y: int) -> bool:
        return bool(self.get_mask(x, y) & CellMask.MINE)

    def has_friend(self, x: int, y: int) -> bool:
        return bool(self.get_mask(x, y) & CellMask.FRIEND)

    def has_enemy(self, x: int, y: int) -> bool:
        return bool(self.get_mask(x, y) & CellMask.ENEMY)

    def has_shell(self, x: int, y: int) -> bool:
        return bool(self.get_mask(x, y) & CellMask.SHELL)

    def is_blocked(self, x: int, y: int) -> bool:
        """Walls and mines block movement."""
        return self.is_wall(x, y) or self.is_mine(x, y)

    def add_danger(self, x: int, y: int, amount: int) -> None:
        i = self.idx(x, y)
        self.danger[i] = (self.danger[i] + amount) & 0xFFFFFFFF

    def get_danger(self, x: int, y: int) -> int:
        return self.danger[self.idx(x, y)]

    def set_shell_eta(self, x: int, y: int, ticks: int) -> None:
        if not 0 <= ticks <= NO_SHELL:
            raise ValueError(f"shell ETA out of range: {ticks}")
        self.shell_eta[self.idx(x, y)] = ticks

    def get_shell_eta(self, x: int, y: int) -> int:
        return self.shell_eta[self.idx(x, y)]

    def neighbors4(self, x: int, y: int) -> Iterator[tuple[int, int]]:
        """The four orthogonal neighbours, wrapped: east, west, south, north."""
        for dx, dy in _NEIGHBOR_STEPS:
            yield self.wrap_x(x + dx), self.wrap_y(y + dy)