from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Optional

from pydantic import BaseModel, Field, field_validator

from jobboard.ticket import TicketId, TicketKind

if TYPE_CHECKING:
    from jobboard.board import Board


class AgentIdentity(BaseModel):
    """Who an agent is. Affinities bias scoring only, never eligibility."""
    agent_id: int = Field(ge=0)
    family_id: int = Field(default=0, ge=0)
    workplace_id: int = Field(default=0, ge=0)  # 0 = unemployed
    affinities: dict[TicketKind, float] = Field(default_factory=dict)

    @field_validator("affinities")
    @classmethod
    def _non_negative(cls, value: dict[TicketKind, float]) -> dict[TicketKind, float]:
        for kind, multiplier in value.items():
            if multiplier < 0:
                raise ValueError(f"affinity for {kind.value} must be >= 0, got {multiplier}")
        return value

    @property
    def is_employed(self) -> bool:
        return self.workplace_id > 0

    def affinity_for(self, kind: TicketKind) -> float:
        return self.affinities.get(kind, 1.0)


@dataclass
class AgentMemory:
    """The agent's 'Working Memory': at most one active reservation."""
    has_ticket: bool = False
    ticket_id: TicketId = 0
    board: Optional[Board] = None

    def set(self, ticket_id: TicketId, board: Board) -> None:
        self.has_ticket = True
        self.ticket_id = ticket_id
        self.board = board

    def clear(self) -> None:
        self.has_ticket = False
        self.ticket_id = 0
        self.board = None
