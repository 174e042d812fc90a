"""
JOBBOARD CLI — The Interface

Main mode:
  jobboard run --scenario <file> --ticks <n>     (one simulation)

Plus utilities:
  - jobboard status --scenario <file>   (show merged config)
  - jobboard init <dir>                 (write an example scenario)
  - jobboard batch --dir <dir>          (parallel scenario runs)
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Optional

import typer
from loguru import logger
from pydantic import ValidationError
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from jobboard.config_loader import JobBoardConfig, ScenarioError, load_config
from jobboard.controller import Simulation
from jobboard.identity import BANNER, __codename__, __tagline__, __version__
from jobboard.parallel import run_parallel

app = typer.Typer(
    name="jobboard",
    help=f"{__codename__} — {__tagline__}\nA decentralized ticket marketplace simulation.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

console = Console()


EXAMPLE_SCENARIO = """# JOBBOARD example scenario.
# Any section of the built-in defaults (clock, board, seeker, executor,
# movement, audit) may be overridden here as well.

audit:
  consumption_per_audit:
    water: 1
    food: 1

scenario:
  name: example-village
  boards:
    - id: home-1
      kind: home
      owner_id: 1
      position: [0.0, 0.0]
      inventory:
        stock: {water: 5, food: 30}
        low_thresholds: {water: 10, food: 10}
    - id: work-1
      kind: work
      owner_id: 7
      position: [6.0, 0.0]
      inventory:
        stock: {fuel: 2}
        low_thresholds: {fuel: 5}
  agents:
    - id: 1
      family_id: 1
      workplace_id: 7
      position: [0.0, 0.0]
      affinities: {fetch: 1.5}
    - id: 2
      family_id: 1
      position: [0.5, 0.0]
  providers:
    - name: well
      provides: water
      position: [3.0, 0.0]
    - name: market
      provides: food
      position: [0.0, 4.0]
    - name: depot
      provides: fuel
      position: [8.0, 0.0]
      infinite_stock: false
      stock_units: 40
  announcements:
    - type: drought
      rules:
        - kind: fetch
          resource: water
          multiplier: 2.0
"""


def version_callback(value: bool):
    if value:
        console.print(f"{__codename__} v{__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: Optional[bool] = typer.Option(
        None,
        "--version",
        callback=version_callback,
        is_eager=True,
        help="Show the version and exit.",
    ),
):
    pass


# ---------------------------------------------------------------------------
# Banner
# ---------------------------------------------------------------------------


def _print_banner():
    console.print(f"[bright_green]{BANNER}[/]")
    console.print(f"  [dim]v{__version__} — {__tagline__}[/]\n")


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------

@app.command()
def run(
    scenario: Path = typer.Option(..., "--scenario", "-s", help="Path to the scenario YAML"),
    ticks: int = typer.Option(600, "--ticks", "-n", min=0, help="Number of ticks to simulate"),
    events_out: Optional[Path] = typer.Option(None, "--events-out", "-e", help="Write ticket events as JSONL"),
    announce: Optional[list[str]] = typer.Option(None, "--announce", "-a", help="Activate an announcement by type"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
):
    """Run one scenario for a fixed number of ticks."""
    _print_banner()
    _configure_logging(verbose)

    sim = _build_simulation(scenario, events_out)

    for announcement_type in announce or []:
        if not sim.ctx.world.set_active(announcement_type, True):
            console.print(f"[yellow]Unknown announcement: {announcement_type}[/]")

    console.print(
        f"[cyan]Running '{sim.config.scenario.name}' for {ticks} ticks "
        f"({ticks / sim.config.clock.ticks_per_second:.1f}s simulated)[/]"
    )

    with sim:
        summary = sim.run(ticks)

    _print_summary(summary)
    if events_out:
        console.print(f"[dim]Events written to {events_out}[/]")


@app.command()
def status(
    scenario: Optional[Path] = typer.Option(None, "--scenario", "-s", help="Scenario YAML to inspect"),
):
    """Show the merged configuration and the scenario layout."""
    _print_banner()

    try:
        config = load_config(scenario.resolve() if scenario else None)
    except (ScenarioError, ValidationError) as e:
        console.print(f"[red]Invalid scenario: {e}[/]")
        raise typer.Exit(1)

    _print_tuning(config)

    if not config.scenario.boards:
        console.print("\n[dim]No boards configured. Run 'jobboard init' for an example scenario.[/]")
        return

    boards = Table(title=f"Scenario: {config.scenario.name}", border_style="cyan")
    boards.add_column("Board")
    boards.add_column("Kind")
    boards.add_column("Owner", justify="right")
    boards.add_column("Position")
    boards.add_column("Audited")
    for b in config.scenario.boards:
        audited = b.audit and b.inventory is not None
        boards.add_row(b.id, b.kind.value, str(b.owner_id), _fmt_pos(b.position), "✓" if audited else "✗")
    console.print(boards)

    agents = Table(title="Agents", border_style="cyan")
    agents.add_column("Agent", justify="right")
    agents.add_column("Family", justify="right")
    agents.add_column("Workplace", justify="right")
    agents.add_column("Affinities")
    for a in config.scenario.agents:
        affinities = ", ".join(f"{k.value}×{v}" for k, v in a.affinities.items()) or "—"
        agents.add_row(str(a.id), str(a.family_id), str(a.workplace_id or "—"), affinities)
    console.print(agents)

    if config.scenario.providers:
        console.print("\n[bold]Providers:[/]")
        for p in config.scenario.providers:
            stock = "∞" if p.infinite_stock else str(p.stock_units)
            console.print(f"  {p.name or '?'}: {p.provides.value} at {_fmt_pos(p.position)} (stock {stock})")

    if config.scenario.announcements:
        console.print("\n[bold]Announcements:[/]")
        for a in config.scenario.announcements:
            state = "active" if a.active_by_default else "inactive"
            console.print(f"  {a.type}: {len(a.rules)} rule(s), {state}")


@app.command()
def init(
    directory: Optional[Path] = typer.Argument(None, help="Where to write the example scenario"),
):
    """Write an example scenario file."""
    _print_banner()

    directory = (directory or Path.cwd()).resolve()
    directory.mkdir(parents=True, exist_ok=True)

    scenario_path = directory / "scenario.yaml"
    if scenario_path.exists():
        console.print(f"[yellow]Scenario already exists: {scenario_path}[/]")
        return

    scenario_path.write_text(EXAMPLE_SCENARIO)
    console.print(f"[green]✅ Example scenario written to {scenario_path}[/]")
    console.print(f"  Try: jobboard run --scenario {scenario_path} --ticks 1200")


@app.command()
def batch(
    scenarios_dir: Path = typer.Option(..., "--dir", "-d", help="Directory of scenario YAMLs"),
    ticks: int = typer.Option(600, "--ticks", "-n", min=0, help="Ticks per scenario"),
    workers: int = typer.Option(3, "--workers", "-w", min=1, help="Max concurrent scenarios"),
    events_dir: Optional[Path] = typer.Option(None, "--events-dir", help="Write one JSONL event log per scenario"),
    verbose: bool = typer.Option(False, "--verbose", "-v"),
):
    """Run every scenario in a directory in parallel."""
    _print_banner()
    _configure_logging(verbose)

    if not scenarios_dir.exists():
        console.print(f"[red]Scenario directory not found: {scenarios_dir}[/]")
        raise typer.Exit(1)

    scenario_files = sorted(scenarios_dir.glob("*.yaml")) + sorted(scenarios_dir.glob("*.yml"))
    if not scenario_files:
        console.print(f"[red]No scenario files found in {scenarios_dir}[/]")
        raise typer.Exit(1)

    console.print(f"[cyan]Found {len(scenario_files)} scenarios in {scenarios_dir}[/]")
    for sf in scenario_files:
        console.print(f"  [dim]{sf.name}[/]")

    results = run_parallel(
        scenario_files=scenario_files,
        ticks=ticks,
        max_workers=workers,
        events_dir=events_dir,
    )

    if any(r.get("status") != "ok" for r in results):
        raise typer.Exit(1)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _build_simulation(scenario: Path, events_out: Optional[Path]) -> Simulation:
    try:
        return Simulation.from_scenario(scenario.resolve(), events_path=events_out)
    except (ScenarioError, ValidationError) as e:
        console.print(f"[red]Invalid scenario: {e}[/]")
        raise typer.Exit(1)


def _fmt_pos(position: tuple[float, float]) -> str:
    return f"({position[0]:g}, {position[1]:g})"


def _print_tuning(config: JobBoardConfig) -> None:
    console.print("[bold]Clock:[/]")
    console.print(f"  Ticks/second:      {config.clock.ticks_per_second}")
    console.print(f"  Max ticks/update:  {config.clock.max_ticks_per_update}")
    console.print(f"  Speed:             {config.clock.speed}")

    console.print("\n[bold]Boards:[/]")
    console.print(f"  Stale timeout:     {config.board.stale_timeout_ticks} ticks")
    console.print(f"  Prune every:       {config.board.prune_every_n_ticks} ticks")

    console.print("\n[bold]Seeker:[/]")
    console.print(f"  Read radius:       {config.seeker.read_radius}")
    console.print(f"  Read every:        {config.seeker.attempt_read_every_n_ticks} ticks")
    console.print(f"  Plan every:        {config.seeker.plan_visit_every_n_ticks} ticks")

    console.print("\n[bold]Audit:[/]")
    console.print(f"  Every:             {config.audit.audit_every_n_ticks} ticks")
    for tuning in config.audit.fetch:
        console.print(
            f"  fetch {tuning.resource.value:<9} base {tuning.base_priority_units}, "
            f"aging {tuning.aging_units_per_second}/s, qty {tuning.quantity}"
        )


def _print_summary(summary: dict[str, Any]) -> None:
    boards = Table(title=f"Boards at tick {summary['tick']}", border_style="bright_green")
    boards.add_column("Board")
    boards.add_column("Kind")
    boards.add_column("Open", justify="right")
    boards.add_column("Held", justify="right")
    boards.add_column("Done", justify="right")
    boards.add_column("Inventory")
    for b in summary["boards"]:
        t = b["tickets"]
        held = t.get("reserved", 0) + t.get("in_progress", 0)
        inventory = ", ".join(f"{k}={v}" for k, v in b["inventory"].items()) or "—"
        boards.add_row(b["board_id"], b["kind"], str(t.get("open", 0)), str(held), str(t.get("done", 0)), inventory)
    console.print(boards)

    agents = Table(title="Agents", border_style="bright_green")
    agents.add_column("Agent", justify="right")
    agents.add_column("Position")
    agents.add_column("Seeker")
    agents.add_column("Routine")
    agents.add_column("Phase")
    agents.add_column("Ticket")
    for a in summary["agents"]:
        ticket = f"{a['board']}#{a['ticket_id']}" if a.get("ticket_id") is not None else "—"
        agents.add_row(
            str(a["agent_id"]),
            _fmt_pos(a["position"]),
            a["seeker"],
            a.get("routine") or "—",
            a.get("phase", "none"),
            ticket,
        )
    console.print(agents)

    events = summary.get("events", {})
    lines = "\n".join(f"{name}: {count}" for name, count in sorted(events.items())) or "no ticket events"
    console.print(Panel(lines, title="Ticket events", border_style="dim"))


def _configure_logging(verbose: bool) -> None:
    logger.remove()
    if verbose:
        logger.add(
            lambda msg: console.print(f"[dim]{escape(str(msg))}[/]", highlight=False),
            level="DEBUG",
            format="{time:HH:mm:ss} | {level:<7} | {message}",
        )
    else:
        logger.add(
            lambda msg: console.print(f"[dim]{escape(str(msg))}[/]", highlight=False),
            level="WARNING",
            format="{message}",
        )


# ---------------------------------------------------------------------------
# Entry
# ---------------------------------------------------------------------------

if __name__ == "__main__":
    app()
