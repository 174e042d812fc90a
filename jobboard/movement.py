"""
Point-to-point movement.

The core treats the mover as an opaque navigator: set a target, poll
`is_at_target()`, then `consume_arrival()`. `StraightLineMover` is a
minimal kinematic stand-in that walks a fixed distance per tick.
"""

from __future__ import annotations

import math
from typing import Optional, Protocol

from jobboard.clock import Tickable

Position = tuple[float, float]


class Mover(Protocol):
    position: Position

    @property
    def has_target(self) -> bool:
        ...

    def set_target(self, position: Position) -> None:
        ...

    def clear_target(self) -> None:
        ...

    def is_at_target(self) -> bool:
        ...

    def consume_arrival(self) -> None:
        ...


class StraightLineMover(Tickable):
    def __init__(self, position: Position = (0.0, 0.0), speed_per_tick: float = 0.25, arrival_tolerance: float = 0.05):
        self.position: Position = (float(position[0]), float(position[1]))
        self.speed_per_tick = speed_per_tick
        self.arrival_tolerance = arrival_tolerance
        self._target: Optional[Position] = None

    @property
    def has_target(self) -> bool:
        return self._target is not None

    @property
    def target(self) -> Optional[Position]:
        return self._target

    def set_target(self, position: Position) -> None:
        self._target = (float(position[0]), float(position[1]))

    def clear_target(self) -> None:
        self._target = None

    def is_at_target(self) -> bool:
        """True when there is no target or we are within tolerance of it."""
        if self._target is None:
            return True
        return math.dist(self.position, self._target) <= self.arrival_tolerance

    def consume_arrival(self) -> None:
        self._target = None

    def tick(self, now_tick: int) -> None:
        if self._target is None:
            return
        remaining = math.dist(self.position, self._target)
        if remaining <= self.speed_per_tick:
            self.position = self._target
            return
        ratio = self.speed_per_tick / remaining
        self.position = (
            self.position[0] + (self._target[0] - self.position[0]) * ratio,
            self.position[1] + (self._target[1] - self.position[1]) * ratio,
        )
