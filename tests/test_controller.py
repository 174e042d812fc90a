import json

import pytest

from jobboard.agents import Agent
from jobboard.auditor import InventoryAudit
from jobboard.board import Board
from jobboard.config_loader import ScenarioError, load_config
from jobboard.controller import Simulation

VILLAGE = {
    "scenario": {
        "name": "village",
        "boards": [
            {
                "id": "home-1",
                "kind": "home",
                "owner_id": 1,
                "position": [0.0, 0.0],
                "inventory": {"stock": {"water": 5}, "low_thresholds": {"water": 10}},
            },
        ],
        "agents": [{"id": 1, "family_id": 1, "position": [0.0, 0.0]}],
        "providers": [{"name": "well", "provides": "water", "position": [2.0, 0.0]}],
        "announcements": [
            {"type": "drought", "rules": [{"kind": "fetch", "resource": "water", "multiplier": 2.0}]},
        ],
    }
}


def _village() -> Simulation:
    return Simulation(load_config(overrides=VILLAGE)).build()


def test_build_creates_world():
    sim = _village()
    assert [b.board_id for b in sim.ctx.boards] == ["home-1"]
    assert len(sim.audits) == 1
    assert sim.agent(1) is not None
    assert sim.agent(2) is None
    assert len(sim.ctx.providers.providers) == 1
    assert not sim.ctx.world.has_active("drought")


def test_tickables_run_boards_then_audits_then_agents():
    sim = _village()
    sim.start()
    kinds = [type(c) for c in sim.ctx.scheduler.components]
    assert kinds == [Board, InventoryAudit, Agent]
    sim.shutdown()
    assert sim.ctx.scheduler.components == ()


def test_shortage_is_noticed_fetched_and_delivered():
    with _village() as sim:
        summary = sim.run(600)

    assert summary["tick"] == 600
    assert summary["events"]["ticket.added"] >= 1
    assert summary["events"]["ticket.completed"] >= 1
    home = summary["boards"][0]
    assert home["inventory"]["water"] == 25
    assert home["tickets"]["reserved"] + home["tickets"]["in_progress"] <= 1


def test_update_is_capped_per_call():
    with _village() as sim:
        assert sim.update(0.5) == [1, 2, 3, 4, 5]
        assert sim.ctx.now_tick == 5


def test_events_are_written_as_jsonl(tmp_path):
    events_path = tmp_path / "logs" / "events.jsonl"
    sim = Simulation(load_config(overrides=VILLAGE), events_path=events_path).build()
    with sim:
        sim.run(100)

    lines = events_path.read_text().splitlines()
    events = [json.loads(line) for line in lines]
    assert events[0]["event_type"] == "ticket.added"
    assert events[0]["board_id"] == "home-1"
    assert {"ticket.reserved", "ticket.started", "ticket.completed"} <= {e["event_type"] for e in events}


def test_from_scenario_file(tmp_path):
    path = tmp_path / "scenario.yaml"
    path.write_text(
        "scenario:\n"
        "  name: tiny\n"
        "  boards:\n"
        "    - {id: work-7, kind: work, owner_id: 7}\n"
        "  agents:\n"
        "    - {id: 1, workplace_id: 7}\n"
    )
    sim = Simulation.from_scenario(path)
    assert sim.config.scenario.name == "tiny"
    # no inventory, nothing to audit
    assert sim.audits == []


def test_agent_without_home_board_is_rejected():
    overrides = {"scenario": {"agents": [{"id": 1, "family_id": 2}]}}
    with pytest.raises(ScenarioError):
        Simulation(load_config(overrides=overrides)).build()


def test_agent_without_work_board_is_rejected():
    overrides = {
        "scenario": {
            "boards": [{"id": "home-1", "kind": "home", "owner_id": 1}],
            "agents": [{"id": 1, "family_id": 1, "workplace_id": 9}],
        }
    }
    with pytest.raises(ScenarioError):
        Simulation(load_config(overrides=overrides)).build()
