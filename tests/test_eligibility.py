from jobboard.board import Board, BoardKind
from jobboard.eligibility import can_plan_visit, can_read, is_eligible
from jobboard.state import AgentIdentity
from jobboard.ticket import TicketScope

from conftest import make_ticket

HOME = Board("home-1", BoardKind.HOME, owner_id=1)
OTHER_HOME = Board("home-2", BoardKind.HOME, owner_id=2)
WORK = Board("work-7", BoardKind.WORK, owner_id=7)

EMPLOYED = AgentIdentity(agent_id=1, family_id=1, workplace_id=7)
UNEMPLOYED = AgentIdentity(agent_id=2, family_id=1, workplace_id=0)


def test_family_only_needs_own_home():
    t = make_ticket(scope=TicketScope.FAMILY_ONLY)
    assert is_eligible(t, HOME, EMPLOYED)
    assert not is_eligible(t, OTHER_HOME, EMPLOYED)
    assert not is_eligible(t, WORK, EMPLOYED)


def test_workplace_only_needs_own_workplace():
    t = make_ticket(scope=TicketScope.WORKPLACE_ONLY)
    assert is_eligible(t, WORK, EMPLOYED)
    assert not is_eligible(t, HOME, EMPLOYED)
    assert not is_eligible(t, Board("work-8", BoardKind.WORK, owner_id=8), EMPLOYED)


def test_unemployed_never_claims_workplace_tickets():
    t = make_ticket(scope=TicketScope.WORKPLACE_ONLY)
    unowned = Board("work-0", BoardKind.WORK, owner_id=0)
    assert not is_eligible(t, WORK, UNEMPLOYED)
    assert not is_eligible(t, unowned, UNEMPLOYED)


def test_public_is_open_to_everyone():
    t = make_ticket(scope=TicketScope.PUBLIC)
    for board in (HOME, OTHER_HOME, WORK):
        assert is_eligible(t, board, UNEMPLOYED)


def test_read_and_visit_rules():
    assert can_read(HOME, EMPLOYED)
    assert not can_read(OTHER_HOME, EMPLOYED)
    assert can_read(WORK, UNEMPLOYED)

    assert can_plan_visit(HOME, EMPLOYED)
    assert can_plan_visit(WORK, EMPLOYED)
    assert not can_plan_visit(WORK, UNEMPLOYED)
    assert not can_plan_visit(OTHER_HOME, UNEMPLOYED)
