"""
JOBBOARD Seeker — The Scout

Decides which board to walk to, reads boards only when physically
near them, scores what it reads and reserves the best eligible
open ticket.

States:
  IDLE → GOING_TO_BOARD → LINGERING_AT_BOARD → IDLE
Dormant (no visits, no reads) while the agent holds a reservation.

"Personal memory degrades": the seeker remembers when it last read
each board and prefers walking to the board it knows least about.
"""

from __future__ import annotations

import math
from enum import Enum
from typing import Optional

from loguru import logger

from jobboard.board import Board, BoardKind
from jobboard.clock import Tickable
from jobboard.config_loader import SeekerConfig
from jobboard.context import SimContext
from jobboard.eligibility import can_plan_visit, can_read, is_eligible
from jobboard.movement import Mover
from jobboard.scoring import ScoredTicket, rank
from jobboard.state import AgentIdentity, AgentMemory

STALE_BONUS = 1_000_000
NEVER_READ_STALENESS = 1 << 30


class SeekerState(str, Enum):
    IDLE = "idle"
    GOING_TO_BOARD = "going_to_board"
    LINGERING_AT_BOARD = "lingering_at_board"


class SeekerStateMachine(Tickable):
    def __init__(
        self,
        ctx: SimContext,
        identity: AgentIdentity,
        memory: AgentMemory,
        mover: Mover,
        config: Optional[SeekerConfig] = None,
    ):
        self.ctx = ctx
        self.identity = identity
        self.memory = memory
        self.mover = mover
        self.config = config or ctx.config.seeker

        self.state = SeekerState.IDLE
        self.target_board: Optional[Board] = None
        self.last_arrival_tick = 0
        self._last_read_tick: dict[str, int] = {}

    # ------------------------------------------------------------------
    # Tick
    # ------------------------------------------------------------------

    def tick(self, now_tick: int) -> None:
        if self.memory.has_ticket:
            self.reset()
            return

        if self.state is SeekerState.GOING_TO_BOARD:
            if self.mover.has_target:
                if self.mover.is_at_target():
                    self.mover.consume_arrival()
                    self.state = SeekerState.LINGERING_AT_BOARD
                    self.last_arrival_tick = now_tick
                    # read on arrival
                    self.read_and_reserve(now_tick)
                return
            self.state = SeekerState.IDLE
            self.target_board = None

        if self.state is SeekerState.LINGERING_AT_BOARD:
            if self.read_and_reserve(now_tick):
                self.reset()
                return

            if now_tick - self.last_arrival_tick >= self.config.linger_at_board_ticks:
                self.state = SeekerState.IDLE
                self.target_board = None

        if now_tick % self.config.attempt_read_every_n_ticks == 0:
            if self.read_and_reserve(now_tick):
                self.reset()
                return

        if now_tick % self.config.plan_visit_every_n_ticks == 0:
            self.plan_next_visit(now_tick)

    def reset(self) -> None:
        self.state = SeekerState.IDLE
        self.target_board = None
        self.last_arrival_tick = 0

    # ------------------------------------------------------------------
    # Board memory
    # ------------------------------------------------------------------

    def is_near(self, board: Board) -> bool:
        return math.dist(self.mover.position, board.position) <= self.config.read_radius

    def mark_read(self, board: Board, now_tick: int) -> None:
        self._last_read_tick[board.board_id] = now_tick

    def last_read_tick(self, board: Board) -> Optional[int]:
        return self._last_read_tick.get(board.board_id)

    def staleness(self, board: Board, now_tick: int) -> int:
        last = self.last_read_tick(board)
        if last is None:
            return NEVER_READ_STALENESS
        return now_tick - last

    # ------------------------------------------------------------------
    # Visit planning
    # ------------------------------------------------------------------

    def visit_candidates(self) -> list[Board]:
        boards = self.ctx.boards_of_kind(BoardKind.HOME) + self.ctx.boards_of_kind(BoardKind.WORK)
        return [b for b in boards if can_plan_visit(b, self.identity)]

    def plan_next_visit(self, now_tick: int) -> Optional[Board]:
        """Walk toward the stalest board this agent could ever use."""
        if self.mover.has_target:
            return None

        best: Optional[Board] = None
        best_score = -1
        for board in self.visit_candidates():
            staleness = self.staleness(board, now_tick)
            score = (STALE_BONUS if staleness >= self.config.stale_after_ticks else 0) + staleness
            if score > best_score:
                best_score = score
                best = board

        if best is None:
            return None

        self.target_board = best
        self.state = SeekerState.GOING_TO_BOARD
        self.mover.set_target(best.position)
        logger.debug(f"[SEEKER] agent {self.identity.agent_id} heading to {best.board_id} at tick {now_tick}")
        return best

    # ------------------------------------------------------------------
    # Read and reserve
    # ------------------------------------------------------------------

    def readable_boards(self) -> list[Board]:
        """Boards within read radius, home boards first, each group in board-id order."""
        boards = self.ctx.boards_of_kind(BoardKind.HOME) + self.ctx.boards_of_kind(BoardKind.WORK)
        return [b for b in boards if can_read(b, self.identity) and self.is_near(b)]

    def collect_candidates(self, now_tick: int) -> list[ScoredTicket]:
        candidates: list[ScoredTicket] = []
        for order, board in enumerate(self.readable_boards()):
            self.mark_read(board, now_tick)
            for ticket in board.open_tickets():
                if not is_eligible(ticket, board, self.identity):
                    continue
                candidates.append(
                    ScoredTicket(
                        score=self.ctx.scoring.score(ticket, now_tick, self.identity),
                        board_order=order,
                        ticket_id=ticket.id,
                        board=board,
                    )
                )
        return candidates

    def read_and_reserve(self, now_tick: int) -> bool:
        """Read every nearby board and reserve the best eligible ticket across all of them."""
        for candidate in rank(self.collect_candidates(now_tick)):
            if candidate.board.reserve(candidate.ticket_id, self.identity.agent_id, now_tick):
                self.memory.set(candidate.ticket_id, candidate.board)
                logger.info(
                    f"[SEEKER] agent {self.identity.agent_id} reserved #{candidate.ticket_id} "
                    f"on {candidate.board.board_id} (score {candidate.score})"
                )
                return True
        return False
