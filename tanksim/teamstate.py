"""Shared per-team movement reservations and shot lanes."""

from __future__ import annotations

from dataclasses import dataclass, field

FREE = -1


def _check_ttl(ttl: int) -> int:
    if not 0 <= ttl <= 255:
        raise ValueError(f"ttl must be in 0..255, got {ttl}")
    return ttl


@dataclass
class TeamState:
    """Reservation grids that let the tanks of one team avoid each other."""

    w: int = 0
    h: int = 0
    move_owner: list[int] = field(default_factory=list)
    move_ttl: list[int] = field(default_factory=list)
    shot_ttl: list[int] = field(default_factory=list)

    def ensure(self, width: int, height: int) -> None:
        """Reset only if the size changed."""
        if (width, height) != (self.w, self.h):
            self.reset(width, height)

    def reset(self, width: int, height: int) -> None:
        """Resize and clear all reservations and lanes."""
        self.w = width
        self.h = height
        size = width * height
        self.move_owner = [FREE] * size
        self.move_ttl = [0] * size
        self.shot_ttl = [0] * size

    def clear_reservations(self) -> None:
        """Clear everything without changing the size."""
        size = self.w * self.h
        self.move_owner = [FREE] * size
        self.move_ttl = [0] * size
        self.shot_ttl = [0] * size

    def idx(self, x: int, y: int) -> int:
        if not (0 <= x < self.w and 0 <= y < self.h):
            raise IndexError(f"cell ({x}, {y}) outside {self.w}x{self.h} grid")
        return y * self.w + x

    def age(self) -> None:
        """Count every TTL down by one and free expired move reservations."""
        self.move_ttl = [t - 1 if t else 0 for t in self.move_ttl]
        self.shot_ttl = [t - 1 if t else 0 for t in self.shot_ttl]
        self.move_owner = [
            owner if ttl else FREE for owner, ttl in zip(self.move_owner, self.move_ttl)
        ]

    def reserve_move(self, x: int, y: int, tank_id: int, ttl: int) -> bool:
        """Claim a cell; a held claim is taken over only by a lower tank id."""
        _check_ttl(ttl)
        i = self.idx(x, y)
        if self.move_ttl[i] == 0 or tank_id < self.move_owner[i]:
            self.move_owner[i] = tank_id
            self.move_ttl[i] = ttl
            return True
        return False

    def move_reservation(self, x: int, y: int) -> int | None:
        """Tank id holding the cell, or None if it is free."""
        i = self.idx(x, y)
        return self.move_owner[i] if self.move_ttl[i] else None

    def mark_shot(self, x: int, y: int, ttl: int) -> None:
        """Mark a cell as on a planned shot lane (a TTL of 0 counts as 1)."""
        self.shot_ttl[self.idx(x, y)] = _check_ttl(ttl) or 1

    def has_shot(self, x: int, y: int) -> bool:
        return self.shot_ttl[self.idx(x, y)] != 0