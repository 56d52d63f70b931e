"""Compass directions, rotation helpers and action names."""

from __future__ import annotations

import math
from enum import Enum, IntEnum


class Direction(IntEnum):
    """Eight compass directions, clockwise from up."""

    U = 0
    UR = 1
    R = 2
    DR = 3
    D = 4
    DL = 5
    L = 6
    UL = 7

    def offset(self) -> tuple[int, int]:
        """Unit grid step (dx, dy) for this direction; y grows downwards."""
        return _OFFSETS[self]

    def reversed(self) -> Direction:
        """The opposite direction."""
        return _REVERSE[self]

    def rotated(self, angle: float) -> Direction:
        """Rotate by a fraction of a full turn (0.125 is one 45 degree step clockwise)."""
        shift = int(angle * 8)
        return Direction((self.value + shift) % 8)


class ActionRequest(Enum):
    """Actions a tank can request on a turn."""

    MOVE_FORWARD = "MoveForward"
    MOVE_BACKWARD = "MoveBackward"
    ROTATE_LEFT_90 = "RotateLeft90"
    ROTATE_RIGHT_90 = "RotateRight90"
    ROTATE_LEFT_45 = "RotateLeft45"
    ROTATE_RIGHT_45 = "RotateRight45"
    SHOOT = "Shoot"
    GET_BATTLE_INFO = "GetBattleInfo"
    DO_NOTHING = "DoNothing"


_OFFSETS: dict[Direction, tuple[int, int]] = {
    Direction.U: (0, -1),
    Direction.UR: (1, -1),
    Direction.R: (1, 0),
    Direction.DR: (1, 1),
    Direction.D: (0, 1),
    Direction.DL: (-1, 1),
    Direction.L: (-1, 0),
    Direction.UL: (-1, -1),
}

_BY_OFFSET: dict[tuple[int, int], Direction] = {off: d for d, off in _OFFSETS.items()}

_REVERSE: dict[Direction, Direction] = {
    Direction.U: Direction.D,
    Direction.UR: Direction.DL,
    Direction.R: Direction.L,
    Direction.DR: Direction.UL,
    Direction.D: Direction.U,
    Direction.DL: Direction.UR,
    Direction.L: Direction.R,
    Direction.UL: Direction.DR,
}

_ANGLES: dict[str, float] = {"a": -0.25, "d": 0.25, "q": -0.125, "e": 0.125, "x": 0.0}


def direction_from_offset(dx: int, dy: int) -> Direction:
    """Direction whose unit step is (dx, dy)."""
    try:
        return _BY_OFFSET[(dx, dy)]
    except KeyError:
        raise ValueError(f"no direction for offset ({dx}, {dy})") from None


def direction_from_name(name: str) -> Direction:
    """Direction for its short name, such as "UR"."""
    try:
        return Direction[name]
    except KeyError:
        raise ValueError(f"unknown direction name: {name!r}") from None


def angle_for_key(key: str) -> float:
    """Rotation fraction bound to a control key ('a', 'd', 'q', 'e', 'x')."""
    try:
        return _ANGLES[key]
    except KeyError:
        raise ValueError(f"unknown rotation key: {key!r}") from None


def bijection(x: int, y: int) -> int:
    """Cantor pairing of two non-negative integers."""
    s = x + y
    return (s * (s + 1)) // 2 + y


def inverse_bijection(z: int) -> tuple[int, int]:
    """Inverse of :func:`bijection`."""
    w = (math.isqrt(8 * z + 1) - 1) // 2
    t = (w * w + w) // 2
    y = z - t
    return w - y, y


def action_to_string(action: object) -> str:
    """Display name of an action, or "UnknownAction"."""
    if isinstance(action, ActionRequest):
        return action.value
    return "UnknownAction"