"""
JOBBOARD Clock — The Heartbeat

A discrete tick counter advanced at a fixed rate, plus an explicit
scheduler that drives an ordered list of tickable components once
per tick. No subscriptions, no global instance: the simulation
driver owns both objects.
"""

from __future__ import annotations

import math
from abc import ABC, abstractmethod

from loguru import logger

DEFAULT_TICKS_PER_SECOND = 20


class Tickable(ABC):
    """Anything the scheduler drives once per simulation tick."""

    @abstractmethod
    def tick(self, now_tick: int) -> None:
        ...


class SimClock:
    """
    Converts elapsed wall-clock time into whole ticks.

    Catch-up work is bounded by `max_ticks_per_update`; any surplus
    beyond the cap is discarded rather than queued, so a long stall
    never turns into an endless backlog.
    """

    def __init__(
        self,
        ticks_per_second: int = DEFAULT_TICKS_PER_SECOND,
        max_ticks_per_update: int = 5,
        speed: float = 1.0,
    ):
        if ticks_per_second <= 0:
            raise ValueError("ticks_per_second must be positive")
        if max_ticks_per_update < 1:
            raise ValueError("max_ticks_per_update must be >= 1")
        self.ticks_per_second = ticks_per_second
        self.max_ticks_per_update = max_ticks_per_update
        self.speed = max(0.0, speed)
        self.current_tick = 0
        self._accumulator = 0.0

    @property
    def tick_duration(self) -> float:
        return 1.0 / self.ticks_per_second

    def advance(self, elapsed_seconds: float) -> list[int]:
        """Consume elapsed time and return the ticks that were advanced, in order."""
        dt = elapsed_seconds * self.speed
        if dt <= 0:
            return []

        self._accumulator += dt
        advanced: list[int] = []
        tick_len = self.tick_duration

        while self._accumulator >= tick_len and len(advanced) < self.max_ticks_per_update:
            self._accumulator -= tick_len
            self.current_tick += 1
            advanced.append(self.current_tick)

        if len(advanced) >= self.max_ticks_per_update:
            if self._accumulator >= tick_len:
                logger.debug(f"[CLOCK] Dropping {self._accumulator:.3f}s of backlog at tick {self.current_tick}")
            self._accumulator = 0.0

        return advanced

    def step(self) -> int:
        self.current_tick += 1
        return self.current_tick

    def ticks_to_seconds(self, ticks: int) -> float:
        return ticks / self.ticks_per_second

    def seconds_to_ticks(self, seconds: float) -> int:
        """Convert seconds to ticks, rounded up."""
        return math.ceil(seconds * self.ticks_per_second)


class TickScheduler:
    """Invokes registered components synchronously, in registration order, once per tick."""

    def __init__(self, clock: SimClock):
        self.clock = clock
        self._components: list[Tickable] = []

    @property
    def components(self) -> tuple[Tickable, ...]:
        return tuple(self._components)

    def add(self, component: Tickable) -> None:
        if any(c is component for c in self._components):
            raise ValueError(f"{component!r} is already scheduled")
        self._components.append(component)

    def remove(self, component: Tickable) -> bool:
        for i, c in enumerate(self._components):
            if c is component:
                del self._components[i]
                return True
        return False

    def clear(self) -> None:
        self._components.clear()

    def run_tick(self, now_tick: int) -> None:
        for component in list(self._components):
            component.tick(now_tick)

    def update(self, elapsed_seconds: float) -> list[int]:
        """Advance the clock from wall-clock time and run every new tick."""
        ticks = self.clock.advance(elapsed_seconds)
        for now_tick in ticks:
            self.run_tick(now_tick)
        return ticks

    def run_ticks(self, count: int) -> int:
        """Step `count` ticks directly, bypassing wall-clock conversion."""
        for _ in range(max(0, count)):
            self.run_tick(self.clock.step())
        return self.clock.current_tick
