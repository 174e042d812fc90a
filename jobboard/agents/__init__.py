"""
JOBBOARD Agent Roster

Each agent is:
  - An identity (who it is, which family / workplace it belongs to)
  - A working memory (at most one reservation)
  - A mover (how it gets around)
  - A seeker (finds and reserves work)
  - An executor (does the work)

Agents never mutate tickets directly. Boards do.
"""

from __future__ import annotations

from typing import Any, Optional

from jobboard.agents.executor import ExecutionStateMachine
from jobboard.agents.seeker import SeekerState, SeekerStateMachine
from jobboard.clock import Tickable
from jobboard.context import SimContext
from jobboard.movement import Position, StraightLineMover
from jobboard.state import AgentIdentity, AgentMemory


class Agent(Tickable):
    """One autonomous worker. Per tick: move, then seek, then execute."""

    def __init__(
        self,
        ctx: SimContext,
        identity: AgentIdentity,
        position: Position = (0.0, 0.0),
        mover: Optional[StraightLineMover] = None,
    ):
        self.ctx = ctx
        self.identity = identity
        self.memory = AgentMemory()
        self.mover = mover or StraightLineMover(
            position,
            speed_per_tick=ctx.config.movement.speed_per_tick,
            arrival_tolerance=ctx.config.movement.arrival_tolerance,
        )
        self.seeker = SeekerStateMachine(ctx, identity, self.memory, self.mover)
        self.executor = ExecutionStateMachine(ctx, identity, self.memory, self.mover)

    @property
    def agent_id(self) -> int:
        return self.identity.agent_id

    def tick(self, now_tick: int) -> None:
        self.mover.tick(now_tick)
        self.seeker.tick(now_tick)
        self.executor.tick(now_tick)

    def summary(self) -> dict[str, Any]:
        return {
            "agent_id": self.agent_id,
            "position": tuple(round(c, 2) for c in self.mover.position),
            "seeker": self.seeker.state.value if not self.memory.has_ticket else "dormant",
            "board": self.memory.board.board_id if self.memory.board else None,
            **self.executor.status(),
        }


__all__ = [
    "Agent",
    "AgentIdentity",
    "AgentMemory",
    "ExecutionStateMachine",
    "SeekerState",
    "SeekerStateMachine",
]
