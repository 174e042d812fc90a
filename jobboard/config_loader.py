"""
Configuration loader for JOBBOARD.
Merges built-in defaults with a scenario YAML file.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Optional

import yaml
from pydantic import BaseModel, Field, model_validator

from jobboard.board import BoardKind
from jobboard.inventory import Inventory
from jobboard.movement import Position
from jobboard.ticket import ResourceKind, TicketKind, TicketScope
from jobboard.world import AnnouncementDefinition, ResourceProvider


class ScenarioError(Exception):
    """Raised when a scenario file cannot be read or is inconsistent."""
    pass


# ---------------------------------------------------------------------------
# Schema
# ---------------------------------------------------------------------------

class ClockConfig(BaseModel):
    ticks_per_second: int = Field(default=20, ge=1)
    max_ticks_per_update: int = Field(default=5, ge=1)
    speed: float = Field(default=1.0, ge=0.0)


class BoardConfig(BaseModel):
    stale_timeout_ticks: int = Field(default=200, ge=1)
    prune_every_n_ticks: int = Field(default=1, ge=0)


class SeekerConfig(BaseModel):
    read_radius: float = Field(default=1.5, ge=0.0)
    attempt_read_every_n_ticks: int = Field(default=20, ge=1)
    plan_visit_every_n_ticks: int = Field(default=20, ge=1)
    stale_after_ticks: int = Field(default=200, ge=1)
    linger_at_board_ticks: int = Field(default=10, ge=0)


class ExecutorConfig(BaseModel):
    pickup_wait_seconds: float = Field(default=1.0, ge=0.0)
    deposit_wait_seconds: float = Field(default=0.2, ge=0.0)
    work_seconds: dict[TicketKind, float] = Field(default_factory=lambda: {
        TicketKind.CLEAN: 2.0,
        TicketKind.REPAIR: 3.0,
        TicketKind.COOK: 4.0,
    })
    default_work_seconds: float = Field(default=1.0, ge=0.0)
    max_ticks_without_progress: int = Field(default=200, ge=1)


class MovementConfig(BaseModel):
    speed_per_tick: float = Field(default=0.25, gt=0.0)
    arrival_tolerance: float = Field(default=0.05, ge=0.0)


class FetchTuning(BaseModel):
    resource: ResourceKind
    base_priority_units: int = Field(default=4, ge=0)
    aging_units_per_second: int = Field(default=1, ge=0)
    quantity: int = Field(default=20, ge=1)


class AuditConfig(BaseModel):
    audit_every_n_ticks: int = Field(default=20, ge=1)
    home_fetch_scope: TicketScope = TicketScope.FAMILY_ONLY
    work_fetch_scope: TicketScope = TicketScope.WORKPLACE_ONLY
    fetch: list[FetchTuning] = Field(default_factory=list)
    consumption_per_audit: dict[ResourceKind, int] = Field(default_factory=dict)
    enable_clean_tickets: bool = True
    dirt_per_audit: int = Field(default=1, ge=0)
    dirt_threshold: int = Field(default=10, ge=1)
    clean_base_priority_units: int = Field(default=2, ge=0)
    clean_aging_units_per_second: int = Field(default=1, ge=0)


class BoardSpec(BaseModel):
    id: str
    kind: BoardKind
    owner_id: int = Field(ge=0)
    position: Position = (0.0, 0.0)
    stale_timeout_ticks: Optional[int] = Field(default=None, ge=1)
    inventory: Optional[Inventory] = None
    audit: bool = True


class AgentSpec(BaseModel):
    id: int = Field(ge=0)
    family_id: int = Field(default=0, ge=0)
    workplace_id: int = Field(default=0, ge=0)
    position: Position = (0.0, 0.0)
    affinities: dict[TicketKind, float] = Field(default_factory=dict)


class ScenarioConfig(BaseModel):
    name: str = "unnamed"
    boards: list[BoardSpec] = Field(default_factory=list)
    agents: list[AgentSpec] = Field(default_factory=list)
    providers: list[ResourceProvider] = Field(default_factory=list)
    announcements: list[AnnouncementDefinition] = Field(default_factory=list)

    @model_validator(mode="after")
    def _unique_ids(self) -> "ScenarioConfig":
        board_ids = [b.id for b in self.boards]
        dupes = {b for b in board_ids if board_ids.count(b) > 1}
        if dupes:
            raise ValueError(f"duplicate board ids: {sorted(dupes)}")
        agent_ids = [a.id for a in self.agents]
        dupes_a = {a for a in agent_ids if agent_ids.count(a) > 1}
        if dupes_a:
            raise ValueError(f"duplicate agent ids: {sorted(dupes_a)}")
        return self


class JobBoardConfig(BaseModel):
    clock: ClockConfig = Field(default_factory=ClockConfig)
    board: BoardConfig = Field(default_factory=BoardConfig)
    seeker: SeekerConfig = Field(default_factory=SeekerConfig)
    executor: ExecutorConfig = Field(default_factory=ExecutorConfig)
    movement: MovementConfig = Field(default_factory=MovementConfig)
    audit: AuditConfig = Field(default_factory=AuditConfig)
    scenario: ScenarioConfig = Field(default_factory=ScenarioConfig)


# ---------------------------------------------------------------------------
# Loader
# ---------------------------------------------------------------------------

_DEFAULT_CONFIG_PATH = Path(__file__).parent / "config.yaml"


def _deep_merge(base: dict, override: dict) -> dict:
    """Recursively merge override into base."""
    merged = base.copy()
    for key, value in override.items():
        if key in merged and isinstance(merged[key], dict) and isinstance(value, dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def _read_yaml(path: Path) -> dict[str, Any]:
    try:
        with open(path, "r") as f:
            data = yaml.safe_load(f) or {}
    except OSError as e:
        raise ScenarioError(f"Cannot read {path}: {e}") from e
    except yaml.YAMLError as e:
        raise ScenarioError(f"Invalid YAML in {path}: {e}") from e
    if not isinstance(data, dict):
        raise ScenarioError(f"{path} must contain a mapping at the top level")
    return data


def load_config(scenario_path: Path | None = None, overrides: dict[str, Any] | None = None) -> JobBoardConfig:
    """
    Load config by merging:
      1. Built-in defaults (jobboard/config.yaml)
      2. Scenario file overrides (tuning sections + `scenario:`)
      3. Explicit overrides (e.g. from the CLI)
    """
    base = _read_yaml(_DEFAULT_CONFIG_PATH)

    if scenario_path:
        if not scenario_path.exists():
            raise ScenarioError(f"Scenario file not found: {scenario_path}")
        base = _deep_merge(base, _read_yaml(scenario_path))

    if overrides:
        base = _deep_merge(base, overrides)

    return JobBoardConfig(**base)
