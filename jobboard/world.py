"""
JOBBOARD World — Shared Surroundings

World-level collaborators the core consumes but does not own:

  - WorldBlackboard: active announcements (global events). They never
    create tickets; they only bend how agents score local tickets.
  - ResourceProvider / ProviderDirectory: where fetch routines pick up
    resources (well, market, depot...).
"""

from __future__ import annotations

from typing import Optional

from loguru import logger
from pydantic import BaseModel, Field

from jobboard.movement import Position
from jobboard.ticket import ResourceKind, Ticket, TicketKind, TicketScope


# ---------------------------------------------------------------------------
# Announcements
# ---------------------------------------------------------------------------

class ModifierRule(BaseModel):
    """Multiplies scores of tickets matching every filter that is set."""
    kind: Optional[TicketKind] = None
    resource: Optional[ResourceKind] = None
    scope: Optional[TicketScope] = None
    multiplier: float = Field(default=1.0, ge=0.01)

    def matches(self, ticket: Ticket) -> bool:
        if self.kind is not None and ticket.kind is not self.kind:
            return False
        if self.resource is not None and ticket.resource is not self.resource:
            return False
        if self.scope is not None and ticket.scope is not self.scope:
            return False
        return True


class AnnouncementDefinition(BaseModel):
    type: str
    rules: list[ModifierRule] = Field(default_factory=list)
    active_by_default: bool = False

    def multiplier_for(self, ticket: Ticket) -> Optional[float]:
        """Product of all matching rules, or None when no rule matches."""
        product: Optional[float] = None
        for rule in self.rules:
            if rule.matches(ticket):
                product = (product or 1.0) * rule.multiplier
        return product


class AnnouncementInstance(BaseModel):
    definition: AnnouncementDefinition
    is_active: bool = False
    intensity: float = 1.0

    @property
    def safe_intensity(self) -> float:
        return 1.0 if self.intensity <= 0 else self.intensity


class WorldBlackboard:
    """Runtime holder of announcements; the world multiplier source for scoring."""

    def __init__(self):
        self._announcements: list[AnnouncementInstance] = []

    @property
    def announcements(self) -> tuple[AnnouncementInstance, ...]:
        return tuple(self._announcements)

    def register(self, definition: AnnouncementDefinition, active: bool = False, intensity: float = 1.0) -> None:
        self._announcements.append(
            AnnouncementInstance(definition=definition, is_active=active, intensity=intensity)
        )

    def set_active(self, announcement_type: str, active: bool, intensity: float = 1.0) -> bool:
        for inst in self._announcements:
            if inst.definition.type != announcement_type:
                continue
            inst.is_active = active
            inst.intensity = max(0.0, intensity)
            logger.info(f"[WORLD] Announcement '{announcement_type}' active={active} intensity={inst.intensity}")
            return True
        return False

    def has_active(self, announcement_type: str) -> bool:
        return any(i.is_active and i.definition.type == announcement_type for i in self._announcements)

    def get_multiplier_for(self, ticket: Ticket) -> float:
        m = 1.0
        for inst in self._announcements:
            if not inst.is_active:
                continue
            rule_product = inst.definition.multiplier_for(ticket)
            if rule_product is None:
                continue
            m *= rule_product * inst.safe_intensity
        return m


# ---------------------------------------------------------------------------
# Resource providers
# ---------------------------------------------------------------------------

class ResourceProvider(BaseModel):
    """A resource source. Infinite stock by default."""
    name: str = ""
    provides: ResourceKind
    position: Position = (0.0, 0.0)
    infinite_stock: bool = True
    stock_units: int = Field(default=999, ge=0)

    def can_provide(self, amount: int) -> bool:
        if amount <= 0:
            return False
        if self.infinite_stock:
            return True
        return self.stock_units >= amount

    def take(self, amount: int) -> int:
        """Hand out up to `amount` units; returns how many were actually taken."""
        if amount <= 0:
            return 0
        if self.infinite_stock:
            return amount
        taken = min(self.stock_units, amount)
        self.stock_units -= taken
        return taken


class ProviderDirectory:
    """Registry of providers; answers 'nearest provider that can supply this'."""

    def __init__(self):
        self._providers: list[ResourceProvider] = []

    @property
    def providers(self) -> tuple[ResourceProvider, ...]:
        return tuple(self._providers)

    def register(self, provider: ResourceProvider) -> None:
        if any(p is provider for p in self._providers):
            return
        self._providers.append(provider)

    def unregister(self, provider: ResourceProvider) -> None:
        self._providers = [p for p in self._providers if p is not provider]

    def find_best_provider(
        self, resource: ResourceKind, amount: int, from_position: Position
    ) -> Optional[ResourceProvider]:
        best: Optional[ResourceProvider] = None
        best_dist_sq = float("inf")

        for p in self._providers:
            if p.provides is not resource or not p.can_provide(amount):
                continue
            dx = p.position[0] - from_position[0]
            dy = p.position[1] - from_position[1]
            dist_sq = dx * dx + dy * dy
            if dist_sq < best_dist_sq:
                best_dist_sq = dist_sq
                best = p

        return best
