"""
Ground-truth stock held by a home or workplace.

This is NOT what agents know directly; audits read it to post
tickets, and fetch routines deposit into it.
"""

from __future__ import annotations

from pydantic import BaseModel, Field

from jobboard.ticket import ResourceKind


class Inventory(BaseModel):
    stock: dict[ResourceKind, int] = Field(default_factory=dict)
    low_thresholds: dict[ResourceKind, int] = Field(default_factory=dict)

    def units(self, resource: ResourceKind) -> int:
        return self.stock.get(resource, 0)

    def is_low(self, resource: ResourceKind) -> bool:
        threshold = self.low_thresholds.get(resource)
        if threshold is None:
            return False
        return self.units(resource) < threshold

    def deposit(self, resource: ResourceKind, amount: int) -> int:
        """Add `amount` units. Returns the new stock level."""
        if amount <= 0 or resource is ResourceKind.NONE:
            return self.units(resource)
        self.stock[resource] = self.units(resource) + amount
        return self.stock[resource]

    def consume(self, resource: ResourceKind, amount: int) -> int:
        """Remove up to `amount` units. Returns how many were actually removed."""
        taken = min(self.units(resource), max(0, amount))
        if taken:
            self.stock[resource] = self.units(resource) - taken
        return taken
