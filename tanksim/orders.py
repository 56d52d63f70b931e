"""Orders passed from a player to its tanks, and role plans."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import ClassVar

from tanksim.worldview import Cell, RoleTag

_UNIT = (-1, 0, 1)


@dataclass(frozen=True)
class PlanStep:
    """One scripted step: move by (dx, dy), or shoot."""

    dx: int
    dy: int
    shoot: bool = False


@dataclass
class BattleInfoLite:
    """Per-tick order from a player to one tank, with a short action script."""

    MAX_STEPS: ClassVar[int] = 4

    tag: RoleTag = RoleTag.AGGRESSOR
    waypoint: Cell = field(default_factory=Cell)
    dir_dx: int = 0
    dir_dy: int = 0
    shoot_when_aligned: bool = False
    steps: list[PlanStep] = field(default_factory=list)

    @property
    def plan_len(self) -> int:
        return len(self.steps)

    def add_step(self, dx: int, dy: int, shoot: bool) -> PlanStep:
        """Append a step to the script."""
        if dx not in _UNIT or dy not in _UNIT:
            raise ValueError(f"step components must be -1, 0 or 1, got ({dx}, {dy})")
        if len(self.steps) >= self.MAX_STEPS:
            raise ValueError(f"plan already holds {self.MAX_STEPS} steps")
        step = PlanStep(dx, dy, bool(shoot))
        self.steps.append(step)
        return step

    def clear_plan(self) -> None:
        self.steps.clear()


@dataclass
class Plan:
    """Where a role wants its tank to go."""

    tag: RoleTag = RoleTag.AGGRESSOR
    waypoint: Cell = field(default_factory=Cell)
    secondary: Cell | None = None
    focus: int | None = None
    valid_until_tick: int = 0