"""
JOBBOARD Routines — per-kind execution strategies

Each routine is a small phase machine sharing one interface:
  reset() → begin(ticket, now) → step(ticket, now) until not RUNNING.

Routines never touch the board directly except through the
executor's helpers, and never complete the ticket themselves:
they report COMPLETED and the executor calls Board.complete.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Optional

from loguru import logger

from jobboard.ticket import ResourceKind, Ticket, TicketKind
from jobboard.world import ResourceProvider

if TYPE_CHECKING:
    from jobboard.agents.executor import ExecutionStateMachine


class RoutineStatus(str, Enum):
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"


@dataclass(frozen=True)
class RoutineResult:
    status: RoutineStatus
    reason: str = ""
    notes: str = ""

    @classmethod
    def running(cls) -> "RoutineResult":
        return cls(RoutineStatus.RUNNING)

    @classmethod
    def completed(cls, notes: str = "") -> "RoutineResult":
        return cls(RoutineStatus.COMPLETED, notes=notes)

    @classmethod
    def failed(cls, reason: str) -> "RoutineResult":
        return cls(RoutineStatus.FAILED, reason=reason)


class TicketRoutine(ABC):
    def __init__(self, executor: "ExecutionStateMachine"):
        self.exec = executor
        self.phase = "none"

    @property
    def name(self) -> str:
        return type(self).__name__

    def reset(self) -> None:
        self.phase = "none"

    @abstractmethod
    def begin(self, ticket: Ticket, now_tick: int) -> None:
        ...

    @abstractmethod
    def step(self, ticket: Ticket, now_tick: int) -> RoutineResult:
        ...


# ---------------------------------------------------------------------------
# Fetch: provider → pickup wait → back to the job site → deposit wait → done
# ---------------------------------------------------------------------------

class FetchRoutine(TicketRoutine):
    def __init__(self, executor: "ExecutionStateMachine"):
        super().__init__(executor)
        self.provider: Optional[ResourceProvider] = None
        self.resource = ResourceKind.NONE
        self.carry = 0

    def reset(self) -> None:
        super().reset()
        self.provider = None
        self.resource = ResourceKind.NONE
        self.carry = 0

    def begin(self, ticket: Ticket, now_tick: int) -> None:
        self.resource = ticket.resource
        self.carry = 0

        self.provider = self.exec.find_provider(self.resource, ticket.quantity)
        if self.provider is None:
            self.phase = "no_provider"
            return

        self.phase = "go_to_provider"
        self.exec.mark_progress(ticket.id, now_tick, "Started fetch")
        self.exec.mover.set_target(self.provider.position)

    def step(self, ticket: Ticket, now_tick: int) -> RoutineResult:
        if self.provider is None:
            return RoutineResult.failed("No provider/stock")

        mover = self.exec.mover

        if self.phase == "go_to_provider":
            if mover.is_at_target():
                mover.consume_arrival()
                self.exec.mark_progress(ticket.id, now_tick, "Arrived at provider")
                self.phase = "pickup_wait"
                self.exec.set_wait(now_tick, self.exec.config.pickup_wait_seconds)
            return RoutineResult.running()

        if self.phase == "pickup_wait":
            if not self.exec.is_wait_done(now_tick):
                return RoutineResult.running()

            self.carry = self.provider.take(ticket.quantity)
            if self.carry <= 0:
                return RoutineResult.failed("Provider returned 0")

            self.exec.mark_progress(ticket.id, now_tick, f"Picked up {self.carry} {self.resource.value}")
            self.phase = "go_to_dropoff"
            mover.set_target(self.exec.job_site_position())
            return RoutineResult.running()

        if self.phase == "go_to_dropoff":
            if mover.is_at_target():
                mover.consume_arrival()
                self.exec.mark_progress(ticket.id, now_tick, "Arrived drop-off")
                self.phase = "deposit_wait"
                self.exec.set_wait(now_tick, self.exec.config.deposit_wait_seconds)
            return RoutineResult.running()

        if self.phase == "deposit_wait":
            if not self.exec.is_wait_done(now_tick):
                return RoutineResult.running()

            self.exec.deposit(self.resource, self.carry)
            self.exec.mark_progress(ticket.id, now_tick, "Depositing")
            self.phase = "complete"
            return RoutineResult.completed(f"Delivered {self.carry} {self.resource.value}")

        return RoutineResult.failed(f"Unknown fetch phase '{self.phase}'")


# ---------------------------------------------------------------------------
# Timed work: go to the job site → work for a kind-specific time → done
# ---------------------------------------------------------------------------

class TimedWorkRoutine(TicketRoutine):
    """Used for clean / repair / cook."""

    def begin(self, ticket: Ticket, now_tick: int) -> None:
        self.phase = "go_to_site"
        self.exec.mark_progress(ticket.id, now_tick, f"Started {ticket.kind.value}")
        self.exec.mover.set_target(self.exec.job_site_position())

    def step(self, ticket: Ticket, now_tick: int) -> RoutineResult:
        kind = ticket.kind.value
        mover = self.exec.mover

        if self.phase == "go_to_site":
            if mover.is_at_target():
                mover.consume_arrival()
                self.exec.mark_progress(ticket.id, now_tick, f"Arrived for {kind}")
                self.phase = "working"
                self.exec.set_wait(now_tick, self.exec.work_seconds_for(ticket.kind))
                logger.debug(f"[EXEC] agent {self.exec.identity.agent_id} working on {ticket.describe()}")
            return RoutineResult.running()

        if self.phase == "working":
            if not self.exec.is_wait_done(now_tick):
                return RoutineResult.running()

            self.exec.mark_progress(ticket.id, now_tick, f"{kind} finished")
            self.phase = "complete"
            return RoutineResult.completed(f"{kind} complete")

        return RoutineResult.failed(f"Unknown timed-work phase '{self.phase}'")


# Closed dispatch table: ticket kind → routine implementation.
ROUTINE_TABLE: dict[TicketKind, type[TicketRoutine]] = {
    TicketKind.FETCH: FetchRoutine,
    TicketKind.CLEAN: TimedWorkRoutine,
    TicketKind.REPAIR: TimedWorkRoutine,
    TicketKind.COOK: TimedWorkRoutine,
}
