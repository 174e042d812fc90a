from jobboard.board import Board, BoardKind
from jobboard.scoring import ScoredTicket, ScoringEngine, rank
from jobboard.state import AgentIdentity
from jobboard.ticket import ResourceKind, TicketKind
from jobboard.world import AnnouncementDefinition, ModifierRule, WorldBlackboard

from conftest import make_ticket


def _drought_world() -> WorldBlackboard:
    world = WorldBlackboard()
    world.register(
        AnnouncementDefinition(
            type="drought",
            rules=[ModifierRule(kind=TicketKind.FETCH, resource=ResourceKind.WATER, multiplier=2.0)],
        )
    )
    return world


def test_affinity_multiplies_aged_priority():
    engine = ScoringEngine()
    agent = AgentIdentity(agent_id=1, affinities={TicketKind.FETCH: 1.5})
    assert engine.score(make_ticket(base=900), 0, agent) == 1350
    assert engine.score(make_ticket(kind=TicketKind.CLEAN, base=1200), 0, agent) == 1200


def test_score_without_identity_is_aged_priority():
    engine = ScoringEngine()
    t = make_ticket(base=400, aging=5, created=0)
    assert engine.score(t, 20) == 500


def test_aged_priority_times_world_multiplier():
    world = WorldBlackboard()
    world.register(
        AnnouncementDefinition(
            type="heatwave",
            rules=[ModifierRule(kind=TicketKind.FETCH, resource=ResourceKind.WATER, multiplier=1.5)],
        ),
        active=True,
    )
    t = make_ticket(resource=ResourceKind.WATER, quantity=20, base=400, aging=5, created=0)
    assert ScoringEngine(world).score(t, 100, AgentIdentity(agent_id=1)) == 1350


def test_score_rounds_half_to_even():
    engine = ScoringEngine()
    agent = AgentIdentity(agent_id=1, affinities={TicketKind.FETCH: 0.5})
    assert engine.score(make_ticket(base=5), 0, agent) == 2
    assert engine.score(make_ticket(base=7), 0, agent) == 4


def test_score_never_decreases_with_age():
    engine = ScoringEngine()
    t = make_ticket(base=100, aging=3, created=10)
    scores = [engine.score(t, now) for now in range(0, 200, 7)]
    assert scores == sorted(scores)


def test_world_multiplier_applies_to_matching_tickets_only():
    world = _drought_world()
    engine = ScoringEngine(world)
    water = make_ticket(resource=ResourceKind.WATER, base=400)
    food = make_ticket(resource=ResourceKind.FOOD, base=400)

    assert engine.score(water, 0) == 400

    world.set_active("drought", True)
    assert engine.score(water, 0) == 800
    assert engine.score(food, 0) == 400

    world.set_active("drought", True, intensity=1.5)
    assert engine.score(water, 0) == 1200


def test_non_positive_intensity_counts_as_one():
    world = _drought_world()
    world.set_active("drought", True, intensity=0.0)
    assert ScoringEngine(world).score(make_ticket(base=400), 0) == 800


def test_rank_tie_breaks_by_board_then_ticket_id():
    board = Board("b", BoardKind.HOME, owner_id=1)
    candidates = [
        ScoredTicket(score=500, board_order=1, ticket_id=1, board=board),
        ScoredTicket(score=500, board_order=0, ticket_id=3, board=board),
        ScoredTicket(score=600, board_order=2, ticket_id=9, board=board),
        ScoredTicket(score=500, board_order=0, ticket_id=2, board=board),
    ]
    ordered = [(c.score, c.board_order, c.ticket_id) for c in rank(candidates)]
    assert ordered == [(600, 2, 9), (500, 0, 2), (500, 0, 3), (500, 1, 1)]
