"""
JOBBOARD Batch Runner

Runs independent scenario files side by side. Each worker:
  1. Loads its own config from the scenario file.
  2. Builds a fresh Simulation (no shared state between scenarios).
  3. Runs a fixed number of ticks and returns the summary.

Scenarios never interact, so a process pool is enough.
"""

from __future__ import annotations

import concurrent.futures
from pathlib import Path
from typing import Any, Optional

from loguru import logger
from rich.console import Console
from rich.table import Table

console = Console()


def _run_single_scenario(
    scenario_file: Path,
    ticks: int,
    events_dir: Optional[Path],
) -> dict[str, Any]:
    """Worker entry point. Never raises; failures come back as an error record."""
    try:
        from jobboard.controller import Simulation

        events_path = events_dir / f"{scenario_file.stem}.jsonl" if events_dir else None
        sim = Simulation.from_scenario(scenario_file, events_path=events_path)
        with sim:
            summary = sim.run(ticks)

        summary["scenario_file"] = scenario_file.name
        summary["status"] = "ok"
        return summary

    except Exception as e:
        logger.error(f"[BATCH] Scenario failed: {scenario_file.name}: {e}")
        return {
            "scenario_file": scenario_file.name,
            "status": "error",
            "error": str(e),
        }


def run_parallel(
    scenario_files: list[Path],
    ticks: int,
    max_workers: int = 3,
    events_dir: Optional[Path] = None,
) -> list[dict[str, Any]]:
    """Run every scenario in its own process and collect the summaries."""
    _print_parallel_header(len(scenario_files), max_workers)

    if events_dir is not None:
        events_dir.mkdir(parents=True, exist_ok=True)

    results: list[dict[str, Any]] = []

    with concurrent.futures.ProcessPoolExecutor(max_workers=max_workers) as executor:
        future_to_file = {
            executor.submit(_run_single_scenario, sf, ticks, events_dir): sf
            for sf in scenario_files
        }

        for future in concurrent.futures.as_completed(future_to_file):
            scenario_file = future_to_file[future]
            try:
                result = future.result()
            except Exception as e:
                result = {
                    "scenario_file": scenario_file.name,
                    "status": "error",
                    "error": str(e),
                }
            results.append(result)
            _log_scenario_completion(result)

    results.sort(key=lambda r: r.get("scenario_file", ""))
    _print_parallel_summary(results)
    return results


# --- Helpers ---

def _print_parallel_header(count: int, workers: int):
    console.print(f"\n[bold]JOBBOARD batch: {count} scenarios, {workers} workers[/]")
    console.print("[dim]Each scenario runs in its own process.[/]\n")


def _log_scenario_completion(result: dict):
    status = result.get("status", "unknown")
    color = "green" if status == "ok" else "red"
    console.print(f"  [{color}]{result.get('scenario_file', '?')}: {status}[/]")


def _completed_count(result: dict) -> int:
    return result.get("events", {}).get("ticket.completed", 0)


def _print_parallel_summary(results: list[dict]) -> None:
    table = Table(title="Batch Results", border_style="bright_green")
    table.add_column("Scenario")
    table.add_column("Status")
    table.add_column("Ticks", justify="right")
    table.add_column("Completed", justify="right")
    table.add_column("Abandoned", justify="right")
    table.add_column("Reclaimed", justify="right")

    for r in results:
        status = r.get("status", "unknown")
        color = "green" if status == "ok" else "red"
        events = r.get("events", {})
        if status == "ok":
            table.add_row(
                r.get("scenario_file", "?"),
                f"[{color}]{status}[/]",
                str(r.get("tick", 0)),
                str(_completed_count(r)),
                str(events.get("ticket.abandoned", 0)),
                str(events.get("ticket.reclaimed", 0)),
            )
        else:
            table.add_row(r.get("scenario_file", "?"), f"[{color}]{status}[/]", "-", "-", "-", "-")

    console.print(table)

    for r in results:
        if r.get("status") != "ok":
            console.print(f"[red]  {r.get('scenario_file', '?')}: {str(r.get('error', ''))[:120]}[/]")

    successes = sum(1 for r in results if r.get("status") == "ok")
    completed = sum(_completed_count(r) for r in results)
    console.print(f"\n[bold]{successes}/{len(results)} scenarios ran | {completed} tickets completed[/]")
