"""
The explicit simulation context.

Everything that would otherwise be a process-wide singleton (clock,
provider directory, world blackboard, board registry) lives here and
is handed to each component at construction time.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from jobboard.board import Board, BoardKind
from jobboard.clock import SimClock, TickScheduler
from jobboard.config_loader import JobBoardConfig
from jobboard.event_bus import EventBus
from jobboard.scoring import ScoringEngine
from jobboard.world import ProviderDirectory, WorldBlackboard


@dataclass
class SimContext:
    config: JobBoardConfig
    clock: SimClock
    scheduler: TickScheduler
    events: EventBus
    providers: ProviderDirectory
    world: WorldBlackboard
    scoring: ScoringEngine
    boards: list[Board] = field(default_factory=list)

    @classmethod
    def create(cls, config: Optional[JobBoardConfig] = None) -> "SimContext":
        config = config or JobBoardConfig()
        clock = SimClock(
            ticks_per_second=config.clock.ticks_per_second,
            max_ticks_per_update=config.clock.max_ticks_per_update,
            speed=config.clock.speed,
        )
        world = WorldBlackboard()
        return cls(
            config=config,
            clock=clock,
            scheduler=TickScheduler(clock),
            events=EventBus(),
            providers=ProviderDirectory(),
            world=world,
            scoring=ScoringEngine(world),
        )

    @property
    def now_tick(self) -> int:
        return self.clock.current_tick

    def add_board(self, board: Board) -> Board:
        if any(b.board_id == board.board_id for b in self.boards):
            raise ValueError(f"Board id {board.board_id!r} already registered")
        if board.events is None:
            board.events = self.events
        self.boards.append(board)
        return board

    def board(self, board_id: str) -> Optional[Board]:
        for b in self.boards:
            if b.board_id == board_id:
                return b
        return None

    def boards_of_kind(self, kind: BoardKind) -> list[Board]:
        """Boards of one kind in stable scan order (sorted by board id)."""
        return sorted((b for b in self.boards if b.kind is kind), key=lambda b: b.board_id)
