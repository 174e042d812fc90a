"""
JOBBOARD Controller — The Brainstem

It is NOT smart. It is deterministic.

Responsibilities:
  - Build the simulation context from config
  - Create boards, audits, providers, announcements and agents
  - Register tickables in a fixed order:
      boards (maintenance) → audits (producers) → agents (consumers)
  - Advance time, by fixed steps or from wall-clock time
  - Report a summary
  - Tear everything down

It never executes tickets. It only coordinates.
"""

from __future__ import annotations

from collections import Counter
from pathlib import Path
from typing import Any, Optional

from loguru import logger

from jobboard.agents import Agent
from jobboard.audit_logger import AuditLogger
from jobboard.auditor import InventoryAudit
from jobboard.board import Board, BoardKind
from jobboard.config_loader import JobBoardConfig, ScenarioError, load_config
from jobboard.context import SimContext
from jobboard.event_bus import TicketEvent
from jobboard.state import AgentIdentity


class Simulation:
    def __init__(self, config: Optional[JobBoardConfig] = None, events_path: Optional[Path] = None):
        self.config = config or JobBoardConfig()
        self.ctx = SimContext.create(self.config)
        self.audits: list[InventoryAudit] = []
        self.agents: list[Agent] = []
        self.event_counts: Counter[str] = Counter()
        self._events_path = events_path
        self._audit_logger: Optional[AuditLogger] = None
        self._started = False

    @classmethod
    def from_scenario(cls, scenario_path: Path, events_path: Optional[Path] = None) -> "Simulation":
        sim = cls(load_config(scenario_path), events_path=events_path)
        sim.build()
        return sim

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def build(self) -> "Simulation":
        """Instantiate the scenario's world from config."""
        scenario = self.config.scenario

        for definition in scenario.announcements:
            self.ctx.world.register(definition, active=definition.active_by_default)

        for provider in scenario.providers:
            self.ctx.providers.register(provider.model_copy(deep=True))

        for spec in scenario.boards:
            board = Board(
                board_id=spec.id,
                kind=spec.kind,
                owner_id=spec.owner_id,
                position=spec.position,
                stale_timeout_ticks=spec.stale_timeout_ticks or self.config.board.stale_timeout_ticks,
                prune_every_n_ticks=self.config.board.prune_every_n_ticks,
                inventory=spec.inventory.model_copy(deep=True) if spec.inventory else None,
            )
            self.ctx.add_board(board)
            if spec.audit and board.inventory is not None:
                self.audits.append(InventoryAudit(board, self.config.audit, self.config.clock.ticks_per_second))

        for spec in scenario.agents:
            identity = AgentIdentity(
                agent_id=spec.id,
                family_id=spec.family_id,
                workplace_id=spec.workplace_id,
                affinities=spec.affinities,
            )
            self.agents.append(Agent(self.ctx, identity, position=spec.position))

        self._check_references()
        logger.info(
            f"[SIM] Built '{scenario.name}': {len(self.ctx.boards)} boards, "
            f"{len(self.agents)} agents, {len(self.ctx.providers.providers)} providers"
        )
        return self

    def start(self) -> None:
        if self._started:
            return
        for board in self.ctx.boards:
            self.ctx.scheduler.add(board)
        for audit in self.audits:
            self.ctx.scheduler.add(audit)
        for agent in self.agents:
            self.ctx.scheduler.add(agent)

        self.ctx.events.subscribe(self._count_event)
        if self._events_path is not None:
            self._audit_logger = AuditLogger(str(self._events_path), self.ctx.events)
        self._started = True

    def shutdown(self) -> None:
        if not self._started:
            return
        self.ctx.scheduler.clear()
        self.ctx.events.unsubscribe(self._count_event)
        if self._audit_logger is not None:
            self._audit_logger.close()
            self._audit_logger = None
        self._started = False
        logger.info(f"[SIM] Shut down at tick {self.ctx.now_tick}")

    def __enter__(self) -> "Simulation":
        self.start()
        return self

    def __exit__(self, *exc: Any) -> None:
        self.shutdown()

    # ------------------------------------------------------------------
    # Time
    # ------------------------------------------------------------------

    def run(self, ticks: int) -> dict[str, Any]:
        self.start()
        self.ctx.scheduler.run_ticks(ticks)
        return self.summary()

    def update(self, elapsed_seconds: float) -> list[int]:
        self.start()
        return self.ctx.scheduler.update(elapsed_seconds)

    # ------------------------------------------------------------------
    # Reporting
    # ------------------------------------------------------------------

    def agent(self, agent_id: int) -> Optional[Agent]:
        for a in self.agents:
            if a.agent_id == agent_id:
                return a
        return None

    def summary(self) -> dict[str, Any]:
        return {
            "scenario": self.config.scenario.name,
            "tick": self.ctx.now_tick,
            "boards": [
                {
                    "board_id": b.board_id,
                    "kind": b.kind.value,
                    "owner_id": b.owner_id,
                    "tickets": b.counts_by_state(),
                    "inventory": {r.value: n for r, n in b.inventory.stock.items()} if b.inventory else {},
                }
                for b in self.ctx.boards
            ],
            "agents": [a.summary() for a in self.agents],
            "events": dict(self.event_counts),
        }

    def _count_event(self, event: TicketEvent) -> None:
        self.event_counts[event.event_type] += 1

    def _check_references(self) -> None:
        homes = {b.owner_id for b in self.ctx.boards if b.kind is BoardKind.HOME}
        works = {b.owner_id for b in self.ctx.boards if b.kind is BoardKind.WORK}
        for agent in self.agents:
            identity = agent.identity
            if identity.family_id and identity.family_id not in homes:
                raise ScenarioError(f"Agent {identity.agent_id} belongs to family {identity.family_id} with no home board")
            if identity.workplace_id and identity.workplace_id not in works:
                raise ScenarioError(
                    f"Agent {identity.agent_id} works at {identity.workplace_id} which has no work board"
                )
