"""
JOBBOARD Ticket — The Unit of Work

A ticket lives on exactly one local board for its whole life.
Time is measured in ticks and priority in fixed-point integer
points (100 points = 1.00 priority unit) so scoring stays
deterministic.

Lifecycle:
  OPEN → RESERVED → IN_PROGRESS → DONE
  RESERVED / IN_PROGRESS → OPEN   (abandon or stale reclaim)
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, Field

TicketId = int

UNRESERVED_AGENT_ID = -1
PRIORITY_POINTS_PER_UNIT = 100


class TicketKind(str, Enum):
    FETCH = "fetch"
    CLEAN = "clean"
    REPAIR = "repair"
    COOK = "cook"


class ResourceKind(str, Enum):
    NONE = "none"
    FOOD = "food"
    WATER = "water"
    FUEL = "fuel"
    MATERIALS = "materials"
    MEDICINE = "medicine"


class TicketScope(str, Enum):
    FAMILY_ONLY = "family_only"
    WORKPLACE_ONLY = "workplace_only"
    PUBLIC = "public"


class TicketState(str, Enum):
    OPEN = "open"
    RESERVED = "reserved"
    IN_PROGRESS = "in_progress"
    DONE = "done"
    FAILED = "failed"


HELD_STATES = (TicketState.RESERVED, TicketState.IN_PROGRESS)


class Ticket(BaseModel):
    """A single job ticket posted on a local board."""

    id: TicketId = 0
    kind: TicketKind
    resource: ResourceKind = ResourceKind.NONE
    scope: TicketScope = TicketScope.PUBLIC

    quantity: int = Field(default=0, ge=0)

    base_priority_points: int = Field(default=0, ge=0)
    aging_priority_points_per_tick: int = Field(default=0, ge=0)
    created_at_tick: int = 0

    state: TicketState = TicketState.OPEN
    reserved_by_agent_id: int = UNRESERVED_AGENT_ID
    reserved_at_tick: int = 0
    last_progress_tick: int = 0

    notes: str = ""

    @property
    def is_reserved(self) -> bool:
        return self.state in HELD_STATES

    def aged_priority(self, now_tick: int) -> int:
        """Priority points at `now_tick`. World modifiers are applied later when scoring."""
        elapsed = max(0, now_tick - self.created_at_tick)
        return self.base_priority_points + self.aging_priority_points_per_tick * elapsed

    def describe(self) -> str:
        if self.resource is ResourceKind.NONE:
            return f"#{self.id} {self.kind.value}"
        return f"#{self.id} {self.kind.value} {self.quantity} {self.resource.value}"
