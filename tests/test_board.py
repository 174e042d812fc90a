from jobboard.board import Board, BoardKind
from jobboard.event_bus import EventBus
from jobboard.ticket import ResourceKind, TicketKind, TicketScope, TicketState

from conftest import make_ticket


def _board(**kwargs) -> Board:
    return Board("home-1", BoardKind.HOME, owner_id=1, **kwargs)


def test_add_ticket_assigns_sequential_ids():
    board = _board()
    assert board.add_ticket(make_ticket()) == 1
    assert board.add_ticket(make_ticket()) == 2
    assert len(board) == 2


def test_duplicate_id_is_rejected():
    board = _board()
    first = make_ticket()
    first.id = 5
    board.add_ticket(first)

    dup = make_ticket(base=999)
    dup.id = 5
    assert board.add_ticket(dup) == 5
    assert len(board) == 1
    assert board.find_by_id(5).base_priority_points == 400


def test_reserve_has_single_winner():
    board = _board()
    tid = board.add_ticket(make_ticket())

    assert board.reserve(tid, agent_id=1, now_tick=3)
    assert not board.reserve(tid, agent_id=2, now_tick=3)

    t = board.find_by_id(tid)
    assert t.state is TicketState.RESERVED
    assert t.reserved_by_agent_id == 1
    assert t.reserved_at_tick == 3
    assert t.last_progress_tick == 3


def test_reserve_unknown_ticket_fails():
    assert not _board().reserve(42, agent_id=1, now_tick=0)


def test_start_work_requires_holder():
    board = _board()
    tid = board.add_ticket(make_ticket())
    board.reserve(tid, 1, 0)

    assert not board.start_work(tid, 2, 1)
    assert board.start_work(tid, 1, 1)
    assert board.find_by_id(tid).state is TicketState.IN_PROGRESS
    assert not board.start_work(tid, 1, 2)


def test_complete_is_idempotent_and_holder_only():
    board = _board()
    tid = board.add_ticket(make_ticket())

    assert not board.complete(tid, 1)

    board.reserve(tid, 1, 0)
    assert not board.complete(tid, 2)
    assert board.complete(tid, 1, "Delivered 20 water")
    assert not board.complete(tid, 1)

    t = board.find_by_id(tid)
    assert t.state is TicketState.DONE
    assert t.notes == "Delivered 20 water"


def test_abandon_returns_ticket_to_open():
    board = _board()
    tid = board.add_ticket(make_ticket())
    board.reserve(tid, 1, 0)
    board.start_work(tid, 1, 1)

    assert not board.abandon(tid, 2, 5, "not mine")
    assert board.abandon(tid, 1, 5, "No provider/stock")

    t = board.find_by_id(tid)
    assert t.state is TicketState.OPEN
    assert t.reserved_by_agent_id == -1
    assert t.notes == "Abandoned@5: No provider/stock"


def test_touch_progress_only_for_holder():
    board = _board()
    tid = board.add_ticket(make_ticket())
    board.reserve(tid, 1, 0)

    assert not board.touch_progress(tid, 2, 50)
    assert board.touch_progress(tid, 1, 50, "Arrived at provider")
    t = board.find_by_id(tid)
    assert t.last_progress_tick == 50
    assert t.notes == "Arrived at provider"


def test_stale_reservation_is_reclaimed_once_timeout_is_exceeded():
    board = _board(stale_timeout_ticks=200)
    tid = board.add_ticket(make_ticket())
    board.reserve(tid, 1, 10)

    assert board.reclaim_stale(209) == []
    # exactly at the timeout the holder still owns it
    assert board.reclaim_stale(210) == []
    assert board.find_by_id(tid).state is TicketState.RESERVED

    assert board.reclaim_stale(211) == [tid]
    t = board.find_by_id(tid)
    assert t.state is TicketState.OPEN
    assert t.reserved_by_agent_id == -1
    assert t.notes == "Auto-release@211: stale for 201 ticks"


def test_progress_keeps_reservation_alive():
    board = _board(stale_timeout_ticks=10)
    tid = board.add_ticket(make_ticket())
    board.reserve(tid, 1, 0)
    board.touch_progress(tid, 1, 8)

    assert board.reclaim_stale(15) == []
    assert board.reclaim_stale(19) == [tid]


def test_prune_removes_only_done():
    board = _board()
    a = board.add_ticket(make_ticket())
    b = board.add_ticket(make_ticket())
    board.reserve(a, 1, 0)
    board.complete(a, 1)

    assert board.prune_done() == 1
    assert board.find_by_id(a) is None
    assert board.find_by_id(b) is not None


def test_tick_prunes_on_cadence():
    board = _board(prune_every_n_ticks=20)
    tid = board.add_ticket(make_ticket())
    board.reserve(tid, 1, 0)
    board.complete(tid, 1)

    board.tick(19)
    assert board.find_by_id(tid) is not None
    board.tick(20)
    assert board.find_by_id(tid) is None


def test_has_unresolved_ignores_done():
    board = _board()
    tid = board.add_ticket(make_ticket(scope=TicketScope.FAMILY_ONLY))

    assert board.has_unresolved(TicketKind.FETCH, ResourceKind.WATER, TicketScope.FAMILY_ONLY)
    assert not board.has_unresolved(TicketKind.FETCH, ResourceKind.WATER, TicketScope.PUBLIC)
    assert not board.has_unresolved(TicketKind.FETCH, ResourceKind.FOOD)

    board.reserve(tid, 1, 0)
    assert board.has_unresolved(TicketKind.FETCH, ResourceKind.WATER)
    board.complete(tid, 1)
    assert not board.has_unresolved(TicketKind.FETCH, ResourceKind.WATER)


def test_find_open_ticket():
    board = _board()
    tid = board.add_ticket(make_ticket())
    assert board.find_open_ticket(TicketKind.FETCH, ResourceKind.WATER, TicketScope.PUBLIC).id == tid
    board.reserve(tid, 1, 0)
    assert board.find_open_ticket(TicketKind.FETCH, ResourceKind.WATER, TicketScope.PUBLIC) is None


def test_counts_by_state_lists_every_state():
    board = _board()
    board.add_ticket(make_ticket())
    tid = board.add_ticket(make_ticket())
    board.reserve(tid, 1, 0)

    counts = board.counts_by_state()
    assert counts["open"] == 1
    assert counts["reserved"] == 1
    assert counts["done"] == 0
    assert counts["failed"] == 0


def test_lifecycle_events_are_emitted():
    bus = EventBus()
    seen = []
    bus.subscribe(seen.append)
    board = _board(events=bus)

    tid = board.add_ticket(make_ticket())
    board.reserve(tid, 1, 1)
    board.start_work(tid, 1, 2)
    board.abandon(tid, 1, 3, "gave up")

    assert [e.event_type for e in seen] == [
        "ticket.added",
        "ticket.reserved",
        "ticket.started",
        "ticket.abandoned",
    ]
    assert seen[-1].payload["reason"] == "gave up"
    assert seen[-1].payload["resource"] == "water"
    assert all(e.board_id == "home-1" and e.ticket_id == tid for e in seen)
