"""
JOBBOARD Auditor — Inventory Audit

Every `audit_every_n_ticks`:
  1. Apply configured consumption to the inventory.
  2. Post a Fetch ticket for each low resource that has no
     unresolved ticket of the same (kind, resource, scope).
  3. Homes only: accumulate dirt and post a single Clean ticket
     once it crosses the threshold.

Workplace shortages are solved by that workplace's own staff, so
workplace fetch tickets default to WORKPLACE_ONLY.
"""

from __future__ import annotations

import math
from typing import Optional

from loguru import logger

from jobboard.board import Board, BoardKind
from jobboard.clock import Tickable
from jobboard.config_loader import AuditConfig, FetchTuning
from jobboard.ticket import (
    PRIORITY_POINTS_PER_UNIT,
    ResourceKind,
    Ticket,
    TicketId,
    TicketKind,
    TicketScope,
    TicketState,
)


def points_per_tick(units_per_second: int, ticks_per_second: int) -> int:
    """Convert priority units/second into fixed-point points/tick, rounded up."""
    return math.ceil(units_per_second * PRIORITY_POINTS_PER_UNIT / ticks_per_second)


class InventoryAudit(Tickable):
    def __init__(self, board: Board, config: AuditConfig, ticks_per_second: int):
        if board.inventory is None:
            raise ValueError(f"Board {board.board_id} has no inventory to audit")
        self.board = board
        self.inventory = board.inventory
        self.config = config
        self.ticks_per_second = ticks_per_second

        self.dirt = 0
        self._clean_ticket_id: Optional[TicketId] = None

    @property
    def fetch_scope(self) -> TicketScope:
        if self.board.kind is BoardKind.HOME:
            return self.config.home_fetch_scope
        return self.config.work_fetch_scope

    @property
    def cleans(self) -> bool:
        return self.board.kind is BoardKind.HOME and self.config.enable_clean_tickets

    def tick(self, now_tick: int) -> None:
        if now_tick % self.config.audit_every_n_ticks != 0:
            return

        self._consume()

        if self._clean_ticket_done():
            self.dirt = 0
            self._clean_ticket_id = None

        for tuning in self.config.fetch:
            self.audit_fetch(tuning, now_tick)

        if self.cleans:
            self.audit_clean(now_tick)

    def audit_fetch(self, tuning: FetchTuning, now_tick: int) -> Optional[TicketId]:
        if not self.inventory.is_low(tuning.resource):
            return None
        if self.board.has_unresolved(TicketKind.FETCH, tuning.resource, self.fetch_scope):
            return None

        ticket = Ticket(
            kind=TicketKind.FETCH,
            resource=tuning.resource,
            scope=self.fetch_scope,
            quantity=tuning.quantity,
            base_priority_points=tuning.base_priority_units * PRIORITY_POINTS_PER_UNIT,
            aging_priority_points_per_tick=points_per_tick(tuning.aging_units_per_second, self.ticks_per_second),
            created_at_tick=now_tick,
            notes=f"Audit: {tuning.resource.value} low",
        )
        ticket_id = self.board.add_ticket(ticket)
        logger.info(f"[AUDIT] {self.board.board_id}: {tuning.resource.value} low, posted #{ticket_id}")
        return ticket_id

    def audit_clean(self, now_tick: int) -> Optional[TicketId]:
        self.dirt += self.config.dirt_per_audit
        if self.dirt < self.config.dirt_threshold:
            return None
        if self.board.has_unresolved(TicketKind.CLEAN, ResourceKind.NONE, TicketScope.FAMILY_ONLY):
            return None

        ticket = Ticket(
            kind=TicketKind.CLEAN,
            scope=TicketScope.FAMILY_ONLY,
            base_priority_points=self.config.clean_base_priority_units * PRIORITY_POINTS_PER_UNIT,
            aging_priority_points_per_tick=points_per_tick(
                self.config.clean_aging_units_per_second, self.ticks_per_second
            ),
            created_at_tick=now_tick,
            notes="Audit: home needs cleaning",
        )
        self._clean_ticket_id = self.board.add_ticket(ticket)
        logger.info(f"[AUDIT] {self.board.board_id}: dirt {self.dirt}, posted clean #{self._clean_ticket_id}")
        return self._clean_ticket_id

    def _consume(self) -> None:
        for resource, amount in self.config.consumption_per_audit.items():
            self.inventory.consume(resource, amount)

    def _clean_ticket_done(self) -> bool:
        """The last clean ticket was completed (and possibly already pruned)."""
        if self._clean_ticket_id is None:
            return False
        ticket = self.board.find_by_id(self._clean_ticket_id)
        return ticket is None or ticket.state is TicketState.DONE
