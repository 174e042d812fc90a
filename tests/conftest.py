import pytest

from jobboard.board import Board, BoardKind
from jobboard.config_loader import JobBoardConfig
from jobboard.context import SimContext
from jobboard.inventory import Inventory
from jobboard.ticket import ResourceKind, Ticket, TicketKind, TicketScope


def make_ticket(
    kind: TicketKind = TicketKind.FETCH,
    resource: ResourceKind = ResourceKind.WATER,
    scope: TicketScope = TicketScope.PUBLIC,
    base: int = 400,
    aging: int = 0,
    created: int = 0,
    quantity: int = 20,
) -> Ticket:
    return Ticket(
        kind=kind,
        resource=resource if kind is TicketKind.FETCH else ResourceKind.NONE,
        scope=scope,
        quantity=quantity if kind is TicketKind.FETCH else 0,
        base_priority_points=base,
        aging_priority_points_per_tick=aging,
        created_at_tick=created,
    )


@pytest.fixture
def ctx() -> SimContext:
    return SimContext.create(JobBoardConfig())


@pytest.fixture
def home_board() -> Board:
    return Board(
        "home-1",
        BoardKind.HOME,
        owner_id=1,
        inventory=Inventory(
            stock={ResourceKind.WATER: 5},
            low_thresholds={ResourceKind.WATER: 10},
        ),
    )


@pytest.fixture
def work_board() -> Board:
    return Board("work-7", BoardKind.WORK, owner_id=7, position=(1.0, 0.0), inventory=Inventory())
