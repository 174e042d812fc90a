"""
JOBBOARD Scoring — The Appetite

    score = round(aged_priority × world_multiplier × personal_affinity)

Aged priority is exact integer arithmetic (Python ints do not
overflow); the multiplication happens in float and is rounded
half-to-even to an integer for ranking.

Ranking is deterministic: higher score first, then earlier board
in scan order, then lower ticket id.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Optional, Protocol

from jobboard.state import AgentIdentity
from jobboard.ticket import Ticket

if TYPE_CHECKING:
    from jobboard.board import Board


class WorldModifierSource(Protocol):
    def get_multiplier_for(self, ticket: Ticket) -> float:
        ...


@dataclass(frozen=True)
class ScoredTicket:
    score: int
    board_order: int
    ticket_id: int
    board: "Board"

    @property
    def rank_key(self) -> tuple[int, int, int]:
        return (-self.score, self.board_order, self.ticket_id)


class ScoringEngine:
    def __init__(self, world: Optional[WorldModifierSource] = None):
        self.world = world

    def aged_priority(self, ticket: Ticket, now_tick: int) -> int:
        return ticket.aged_priority(now_tick)

    def world_multiplier(self, ticket: Ticket) -> float:
        if self.world is None:
            return 1.0
        return max(0.0, self.world.get_multiplier_for(ticket))

    @staticmethod
    def personal_affinity(identity: Optional[AgentIdentity], ticket: Ticket) -> float:
        if identity is None:
            return 1.0
        return identity.affinity_for(ticket.kind)

    def score(self, ticket: Ticket, now_tick: int, identity: Optional[AgentIdentity] = None) -> int:
        combined = (
            float(self.aged_priority(ticket, now_tick))
            * self.world_multiplier(ticket)
            * self.personal_affinity(identity, ticket)
        )
        return round(combined)


def rank(candidates: list[ScoredTicket]) -> list[ScoredTicket]:
    """Best candidate first."""
    return sorted(candidates, key=lambda c: c.rank_key)
