"""
JOBBOARD Board — The Ledger

A local bulletin board for one home or workplace. It is the
authoritative, sole mutator of its own tickets; agents change a
ticket only by calling the board.

Every mutator is a same-call check-then-set and returns a bool.
Expected contention (ticket not open, caller not the holder,
ticket gone) is a False result, never an exception.
"""

from __future__ import annotations

from collections import Counter
from enum import Enum
from typing import Iterator, Optional

from loguru import logger

from jobboard.clock import Tickable
from jobboard.event_bus import EventBus
from jobboard.inventory import Inventory
from jobboard.movement import Position
from jobboard.ticket import (
    HELD_STATES,
    UNRESERVED_AGENT_ID,
    ResourceKind,
    Ticket,
    TicketId,
    TicketKind,
    TicketScope,
    TicketState,
)


class BoardKind(str, Enum):
    HOME = "home"  # owner_id is a family id
    WORK = "work"  # owner_id is a workplace id


class Board(Tickable):
    def __init__(
        self,
        board_id: str,
        kind: BoardKind,
        owner_id: int,
        position: Position = (0.0, 0.0),
        stale_timeout_ticks: int = 200,
        prune_every_n_ticks: int = 1,
        inventory: Optional[Inventory] = None,
        events: Optional[EventBus] = None,
    ):
        if stale_timeout_ticks < 1:
            raise ValueError("stale_timeout_ticks must be >= 1")
        self.board_id = board_id
        self.kind = kind
        self.owner_id = owner_id
        self.position = position
        self.stale_timeout_ticks = stale_timeout_ticks
        self.prune_every_n_ticks = prune_every_n_ticks
        self.inventory = inventory
        self.events = events

        self._tickets: dict[TicketId, Ticket] = {}
        self._next_ticket_id = 1
        self._last_tick = 0

    def __repr__(self) -> str:
        return f"Board({self.board_id!r}, {self.kind.value}, owner={self.owner_id})"

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------

    @property
    def tickets(self) -> tuple[Ticket, ...]:
        return tuple(self._tickets.values())

    def __len__(self) -> int:
        return len(self._tickets)

    def open_tickets(self) -> Iterator[Ticket]:
        return (t for t in self._tickets.values() if t.state is TicketState.OPEN)

    def find_by_id(self, ticket_id: TicketId) -> Optional[Ticket]:
        return self._tickets.get(ticket_id)

    def find_open_ticket(
        self, kind: TicketKind, resource: ResourceKind, scope: TicketScope
    ) -> Optional[Ticket]:
        for t in self._tickets.values():
            if t.kind is kind and t.resource is resource and t.scope is scope and t.state is TicketState.OPEN:
                return t
        return None

    def has_unresolved(
        self, kind: TicketKind, resource: ResourceKind, scope: Optional[TicketScope] = None
    ) -> bool:
        """True if a not-yet-done ticket of this (kind, resource[, scope]) is on the board."""
        for t in self._tickets.values():
            if t.kind is not kind or t.resource is not resource:
                continue
            if scope is not None and t.scope is not scope:
                continue
            if t.state is not TicketState.DONE:
                return True
        return False

    def counts_by_state(self) -> dict[str, int]:
        counts = Counter(t.state.value for t in self._tickets.values())
        return {state.value: counts.get(state.value, 0) for state in TicketState}

    # ------------------------------------------------------------------
    # Creation / mutation
    # ------------------------------------------------------------------

    def add_ticket(self, ticket: Ticket) -> TicketId:
        """Add a ticket, assigning an id when the caller left it at 0."""
        if ticket.id == 0:
            while self._next_ticket_id in self._tickets:
                self._next_ticket_id += 1
            ticket.id = self._next_ticket_id
            self._next_ticket_id += 1

        if ticket.id in self._tickets:
            logger.warning(f"[BOARD] {self.board_id}: duplicate ticket id {ticket.id}. Ticket not added.")
            return ticket.id

        self._tickets[ticket.id] = ticket
        logger.debug(f"[BOARD] {self.board_id}: posted {ticket.describe()} ({ticket.scope.value})")
        self._emit("ticket.added", ticket.created_at_tick, ticket, None, {"notes": ticket.notes})
        return ticket.id

    def reserve(self, ticket_id: TicketId, agent_id: int, now_tick: int) -> bool:
        t = self._tickets.get(ticket_id)
        if t is None or t.state is not TicketState.OPEN:
            return False

        t.state = TicketState.RESERVED
        t.reserved_by_agent_id = agent_id
        t.reserved_at_tick = now_tick
        t.last_progress_tick = now_tick
        self._emit("ticket.reserved", now_tick, t, agent_id)
        return True

    def start_work(self, ticket_id: TicketId, agent_id: int, now_tick: int) -> bool:
        t = self._tickets.get(ticket_id)
        if t is None or t.state is not TicketState.RESERVED:
            return False
        if t.reserved_by_agent_id != agent_id:
            return False

        t.state = TicketState.IN_PROGRESS
        t.last_progress_tick = now_tick
        self._emit("ticket.started", now_tick, t, agent_id)
        return True

    def touch_progress(
        self, ticket_id: TicketId, agent_id: int, now_tick: int, notes: Optional[str] = None
    ) -> bool:
        """Refresh the holder's progress tick. The only thing that resets staleness."""
        t = self._held_by(ticket_id, agent_id)
        if t is None:
            return False

        t.last_progress_tick = now_tick
        if notes:
            t.notes = notes
        return True

    def abandon(self, ticket_id: TicketId, agent_id: int, now_tick: int, reason: str) -> bool:
        t = self._held_by(ticket_id, agent_id)
        if t is None:
            return False

        self._release(t, f"Abandoned@{now_tick}: {reason}")
        logger.info(f"[BOARD] {self.board_id}: agent {agent_id} abandoned {t.describe()}: {reason}")
        self._emit("ticket.abandoned", now_tick, t, agent_id, {"reason": reason})
        return True

    def complete(self, ticket_id: TicketId, agent_id: int, notes: Optional[str] = None) -> bool:
        t = self._held_by(ticket_id, agent_id)
        if t is None:
            return False

        t.state = TicketState.DONE
        if notes:
            t.notes = notes
        logger.info(f"[BOARD] {self.board_id}: agent {agent_id} completed {t.describe()}")
        self._emit("ticket.completed", self._last_tick, t, agent_id, {"notes": t.notes})
        return True

    def prune_done(self) -> int:
        """Remove all DONE tickets. Returns how many were removed."""
        done = [tid for tid, t in self._tickets.items() if t.state is TicketState.DONE]
        for tid in done:
            del self._tickets[tid]
        if done:
            logger.debug(f"[BOARD] {self.board_id}: pruned {len(done)} done ticket(s)")
        return len(done)

    def reclaim_stale(self, now_tick: int) -> list[TicketId]:
        """Force held tickets with no recent progress back to OPEN. Not an agent action."""
        reclaimed: list[TicketId] = []
        for t in self._tickets.values():
            if t.state not in HELD_STATES:
                continue
            if t.reserved_by_agent_id == UNRESERVED_AGENT_ID:
                continue

            age = now_tick - t.last_progress_tick
            if age > self.stale_timeout_ticks:
                holder = t.reserved_by_agent_id
                self._release(t, f"Auto-release@{now_tick}: stale for {age} ticks")
                reclaimed.append(t.id)
                logger.info(f"[BOARD] {self.board_id}: reclaimed {t.describe()} from agent {holder} (stale {age})")
                self._emit("ticket.reclaimed", now_tick, t, holder, {"stale_ticks": age})
        return reclaimed

    # ------------------------------------------------------------------
    # Maintenance
    # ------------------------------------------------------------------

    def tick(self, now_tick: int) -> None:
        self._last_tick = now_tick
        self.reclaim_stale(now_tick)
        if self.prune_every_n_ticks > 0 and now_tick % self.prune_every_n_ticks == 0:
            self.prune_done()

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _held_by(self, ticket_id: TicketId, agent_id: int) -> Optional[Ticket]:
        t = self._tickets.get(ticket_id)
        if t is None or t.reserved_by_agent_id != agent_id or t.state not in HELD_STATES:
            return None
        return t

    @staticmethod
    def _release(t: Ticket, notes: str) -> None:
        t.state = TicketState.OPEN
        t.reserved_by_agent_id = UNRESERVED_AGENT_ID
        t.reserved_at_tick = 0
        t.last_progress_tick = 0
        t.notes = notes

    def _emit(self, event_type: str, tick: int, t: Ticket, agent_id: Optional[int], payload: Optional[dict] = None) -> None:
        if self.events is None:
            return
        self.events.emit(
            event_type,
            tick=tick,
            board_id=self.board_id,
            ticket_id=t.id,
            agent_id=agent_id,
            payload={"kind": t.kind.value, "resource": t.resource.value, **(payload or {})},
        )
