"""
JOBBOARD Executor — The Hands

Drives the agent's reserved ticket to completion, one step per tick:

  1. Resolve the owning board and its inventory from memory.
  2. Re-fetch the ticket; bail out if it vanished or is no longer ours.
  3. Count stalled ticks; abandon on timeout.
  4. Bind the routine for the ticket's kind and start the work.
  5. Step the routine; complete or abandon on its verdict.

Only a successful progress mark resets the stall counter.
"""

from __future__ import annotations

from typing import Optional, Union

from loguru import logger

from jobboard.agents.routines import ROUTINE_TABLE, RoutineStatus, TicketRoutine
from jobboard.board import Board
from jobboard.clock import Tickable
from jobboard.config_loader import ExecutorConfig
from jobboard.context import SimContext
from jobboard.movement import Mover, Position
from jobboard.state import AgentIdentity, AgentMemory
from jobboard.ticket import ResourceKind, Ticket, TicketId, TicketKind, TicketState
from jobboard.world import ResourceProvider

TIMEOUT_REASON = "Executor timeout (no progress)"
START_FAILED_REASON = "Could not start work"


class ExecutionStateMachine(Tickable):
    def __init__(
        self,
        ctx: SimContext,
        identity: AgentIdentity,
        memory: AgentMemory,
        mover: Mover,
        config: Optional[ExecutorConfig] = None,
    ):
        self.ctx = ctx
        self.identity = identity
        self.memory = memory
        self.mover = mover
        self.config = config or ctx.config.executor

        self.routine: Optional[TicketRoutine] = None
        self.routine_kind: Optional[TicketKind] = None
        self.ticks_without_progress = 0
        self.board: Optional[Board] = None

        self._routines: dict[type[TicketRoutine], TicketRoutine] = {}
        self._wait_until_tick = 0

    # ------------------------------------------------------------------
    # Tick
    # ------------------------------------------------------------------

    def tick(self, now_tick: int) -> None:
        if not self.memory.has_ticket:
            self.reset()
            return

        if not self._resolve_board():
            return

        ticket = self.board.find_by_id(self.memory.ticket_id)
        if ticket is None or ticket.reserved_by_agent_id != self.identity.agent_id:
            logger.debug(f"[EXEC] agent {self.identity.agent_id} lost #{self.memory.ticket_id}")
            self._drop()
            return

        self.ticks_without_progress += 1
        if self.ticks_without_progress > self.config.max_ticks_without_progress:
            self._abandon(ticket, now_tick, TIMEOUT_REASON)
            return

        if self.routine is None or self.routine_kind is not ticket.kind:
            routine = self.select_routine(ticket.kind)
            if routine is None:
                return

            self.routine = routine
            self.routine_kind = ticket.kind
            routine.reset()
            self.ticks_without_progress = 0

            if not self._ensure_started(ticket, now_tick):
                self._abandon(ticket, now_tick, START_FAILED_REASON)
                return

            routine.begin(ticket, now_tick)

        result = self.routine.step(ticket, now_tick)

        if result.status is RoutineStatus.RUNNING:
            return

        if result.status is RoutineStatus.FAILED:
            self._abandon(ticket, now_tick, result.reason)
            return

        if not self.board.complete(ticket.id, self.identity.agent_id, result.notes or None):
            logger.warning(f"[EXEC] agent {self.identity.agent_id} could not complete {ticket.describe()}")
        self._drop()

    def select_routine(self, kind: TicketKind) -> Optional[TicketRoutine]:
        routine_cls = ROUTINE_TABLE.get(kind)
        if routine_cls is None:
            return None
        if routine_cls not in self._routines:
            self._routines[routine_cls] = routine_cls(self)
        return self._routines[routine_cls]

    def reset(self) -> None:
        if self.routine is not None:
            self.routine.reset()
        self.routine = None
        self.routine_kind = None
        self.ticks_without_progress = 0
        self.board = None
        self._wait_until_tick = 0

    @property
    def phase(self) -> str:
        return self.routine.phase if self.routine else "none"

    # ------------------------------------------------------------------
    # Helpers exposed to routines
    # ------------------------------------------------------------------

    def mark_progress(self, ticket_id: TicketId, now_tick: int, notes: str) -> bool:
        if self.board is None:
            return False
        ok = self.board.touch_progress(ticket_id, self.identity.agent_id, now_tick, notes)
        if ok:
            self.ticks_without_progress = 0
        return ok

    def set_wait(self, now_tick: int, seconds: float) -> None:
        self._wait_until_tick = now_tick + self.ctx.clock.seconds_to_ticks(max(0.0, seconds))

    def is_wait_done(self, now_tick: int) -> bool:
        return now_tick >= self._wait_until_tick

    def work_seconds_for(self, kind: TicketKind) -> float:
        return self.config.work_seconds.get(kind, self.config.default_work_seconds)

    def job_site_position(self) -> Position:
        """The job site is the board itself."""
        if self.board is not None:
            return self.board.position
        return self.mover.position

    def find_provider(self, resource: ResourceKind, amount: int) -> Optional[ResourceProvider]:
        return self.ctx.providers.find_best_provider(resource, amount, self.mover.position)

    def deposit(self, resource: ResourceKind, amount: int) -> None:
        if self.board is None or self.board.inventory is None:
            return
        level = self.board.inventory.deposit(resource, amount)
        logger.debug(f"[EXEC] {self.board.board_id}: +{amount} {resource.value} (now {level})")

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _resolve_board(self) -> bool:
        board = self.memory.board
        if board is None:
            logger.warning(f"[EXEC] agent {self.identity.agent_id}: reservation has no board")
            self._drop()
            return False

        if board.inventory is None:
            logger.warning(f"[EXEC] agent {self.identity.agent_id}: board {board.board_id} has no inventory")
            self._drop()
            return False

        self.board = board
        return True

    def _ensure_started(self, ticket: Ticket, now_tick: int) -> bool:
        if ticket.state is TicketState.IN_PROGRESS:
            return True
        if ticket.state is not TicketState.RESERVED:
            return False
        return self.board.start_work(ticket.id, self.identity.agent_id, now_tick)

    def _abandon(self, ticket: Ticket, now_tick: int, reason: str) -> None:
        logger.info(f"[EXEC] agent {self.identity.agent_id} abandoning {ticket.describe()}: {reason}")
        self.board.abandon(ticket.id, self.identity.agent_id, now_tick, reason)
        self._drop()

    def _drop(self) -> None:
        # a pending walk belonged to the dropped ticket
        self.mover.clear_target()
        self.memory.clear()
        self.reset()

    def status(self) -> dict[str, Union[str, int, None]]:
        return {
            "routine": self.routine.name if self.routine else None,
            "phase": self.phase,
            "ticket_id": self.memory.ticket_id if self.memory.has_ticket else None,
            "stalled_ticks": self.ticks_without_progress,
        }
