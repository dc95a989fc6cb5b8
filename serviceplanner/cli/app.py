"""
Main CLI application using Typer.
"""

import logging
from pathlib import Path
from typing import List, Optional, Annotated

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.table import Table

from ..config import AppConfig, get_default_config_path
from ..domain.exceptions import PlannerError
from ..domain.models import AggregationResult, EventTally, OrderedItem
from ..domain.slot_grid import generate_slots
from ..domain.summary import format_time_12h
from ..adapters.mock_store import MockPlannerStore
from ..adapters.rest_store import RestPlannerStore
from ..services.order_of_service import OrderOfServiceService
from ..services.planner_store import PlannerStoreProtocol
from ..services.task_results import TaskReport, TaskResultsService

app = typer.Typer(
    name="serviceplanner",
    help="Plan services: rehearsal polls, availability results and order of service",
    add_completion=False
)

console = Console()

ConfigOption = Annotated[Optional[Path], typer.Option("--config", "-c", help="Path to config file. Defaults to ./config.yaml")]
MockOption = Annotated[bool, typer.Option("--mock", help="Use bundled sample data instead of the hosted store.")]


def _load_config(config_file: Optional[Path], mock: bool = False) -> AppConfig:
    """Load the config file; in mock mode a missing file falls back to defaults."""
    config_path = config_file or get_default_config_path()
    if mock:
        config = AppConfig.load_or_default(config_path)
    else:
        config = AppConfig.load_from_yaml(config_path)

    logging.basicConfig(
        level=config.get_log_level(),
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )
    return config


def _build_store(config: AppConfig, mock: bool) -> PlannerStoreProtocol:
    if mock:
        return MockPlannerStore()

    if not config.store.is_configured():
        raise PlannerError("Store is not configured. Set store.url and store.api_key in config.yaml or use --mock.")

    return RestPlannerStore(
        base_url=config.store.url,
        api_key=config.store.api_key,
        access_token=config.store.access_token or None,
        timeout=config.store.timeout_seconds,
    )


def _fail(error: Exception) -> None:
    console.print(f"[bold red]Error:[/bold red] {error}")
    raise typer.Exit(1)


def _heatmap_table(heatmap: AggregationResult) -> Table:
    table = Table(title="Availability Heatmap", show_header=True, header_style="bold cyan")
    table.add_column("Time", style="bold")
    for day in heatmap.grid.days:
        table.add_column(day[:3], justify="center")

    for time, slots in heatmap.grid.rows():
        cells = []
        for slot in slots:
            count = heatmap.count(slot.id)
            if heatmap.total_assigned and count == heatmap.total_assigned:
                cells.append(f"[bold green]{count} ★[/bold green]")
            elif count == 0:
                cells.append(f"[dim]{count}[/dim]")
            else:
                cells.append(str(count))
        table.add_row(format_time_12h(time), *cells)

    return table


def _event_table(tallies: List[EventTally]) -> Table:
    table = Table(title="Availability Breakdown", show_header=True, header_style="bold cyan")
    table.add_column("Event", style="bold")
    table.add_column("Date", style="dim")
    table.add_column("Available", style="green")
    table.add_column("Unavailable", style="red")
    table.add_column("Maybe", style="yellow")
    table.add_column("No response", style="dim")

    for tally in tallies:
        table.add_row(
            tally.label,
            tally.date or "-",
            ", ".join(tally.available) or "None",
            ", ".join(tally.unavailable) or "None",
            ", ".join(tally.maybe) or "None",
            ", ".join(tally.no_response) or "None",
        )

    return table


def _print_report(report: TaskReport) -> None:
    console.print(Panel.fit(
        f"[bold]{report.task.title or report.task.id}[/bold]\n{report.task.type.label} · {report.assignment_count} assigned",
        title="Results & Responses"
    ))

    if report.heatmap is not None:
        if report.suggestions:
            console.print("\n[bold yellow]★ Suggested Times:[/bold yellow]")
            for day, ranges in report.suggestions.items():
                console.print(f"  {day}: {', '.join(ranges)}")
        console.print()
        console.print(_heatmap_table(report.heatmap))
        console.print(
            f"{report.heatmap.total_responded} of {report.assignment_count} responded"
        )

    if report.event_tallies:
        console.print()
        console.print(_event_table(report.event_tallies))

    if report.acknowledgements is not None:
        console.print(
            f"\n[green]{len(report.acknowledgements.acknowledged)} acknowledged[/green], "
            f"[yellow]{len(report.acknowledgements.pending)} pending[/yellow]"
        )

    table = Table(title="Individual Responses", show_header=True, header_style="bold cyan")
    table.add_column("Musician", style="bold")
    table.add_column("Status")
    table.add_column("Details")
    for line in report.responses:
        table.add_row(line.name, line.status, "\n".join(line.details) or "-")
    console.print()
    console.print(table)


def _print_items(items: List[OrderedItem]) -> None:
    if not items:
        console.print("[yellow]No items in the order of service yet.[/yellow]")
        return

    table = Table(title="Order of Service", show_header=True, header_style="bold cyan")
    table.add_column("#", justify="right")
    table.add_column("Item", style="bold")
    table.add_column("Type", style="dim")
    table.add_column("Duration")
    table.add_column("Id", style="dim")
    for item in items:
        table.add_row(
            str(item.sequence_position),
            str(item.payload.get("title", "")),
            str(item.payload.get("type", "")),
            str(item.payload.get("duration") or ""),
            item.id,
        )
    console.print(table)


@app.command()
def slots(
    days: Annotated[List[str], typer.Option("--day", "-d", help="Weekday to include (repeatable)")],
    start: Annotated[Optional[str], typer.Option("--start", help="First slot start (HH:MM)")] = None,
    end: Annotated[Optional[str], typer.Option("--end", help="Exclusive end time (HH:MM)")] = None,
    interval: Annotated[Optional[int], typer.Option("--interval", "-i", help="Slot length in minutes")] = None,
    config_file: ConfigOption = None,
):
    """
    Preview the slot grid of a rehearsal poll.

    Examples:

        serviceplanner slots -d Monday -d Tuesday --start 18:00 --end 20:00
    """
    try:
        config = _load_config(config_file, mock=True)
        defaults = config.poll_defaults
        grid = generate_slots({
            "days": days,
            "time_start": start or defaults.time_start,
            "time_end": end or defaults.time_end,
            "interval_minutes": interval if interval is not None else defaults.interval_minutes,
        })
    except (PlannerError, ValueError) as e:
        _fail(e)

    if not len(grid):
        console.print("[yellow]The configuration produces no slots.[/yellow]")
        return

    table = Table(title=f"{len(grid)} slot(s)", show_header=True, header_style="bold cyan")
    table.add_column("Time", style="bold")
    for day in grid.days:
        table.add_column(day)
    for time, row in grid.rows():
        table.add_row(format_time_12h(time), *[slot.id for slot in row])
    console.print(table)


@app.command()
def results(
    task_id: Annotated[str, typer.Argument(help="Task id")],
    config_file: ConfigOption = None,
    mock: MockOption = False,
):
    """
    Show the aggregated results of a task.
    """
    try:
        config = _load_config(config_file, mock)
        service = TaskResultsService(store=_build_store(config, mock))
        report = service.build_report(task_id)
    except (FileNotFoundError, PlannerError, ValueError) as e:
        _fail(e)

    _print_report(report)


@app.command()
def order(
    plan_id: Annotated[str, typer.Argument(help="Plan (event) id")],
    config_file: ConfigOption = None,
    mock: MockOption = False,
):
    """
    List the order of service of a plan.
    """
    try:
        config = _load_config(config_file, mock)
        items = OrderOfServiceService(store=_build_store(config, mock)).list_items(plan_id)
    except (FileNotFoundError, PlannerError, ValueError) as e:
        _fail(e)

    _print_items(items)


@app.command()
def reorder(
    plan_id: Annotated[str, typer.Argument(help="Plan (event) id")],
    from_index: Annotated[int, typer.Argument(help="Current position (0-based)")],
    to_index: Annotated[int, typer.Argument(help="New position (0-based)")],
    config_file: ConfigOption = None,
    mock: MockOption = False,
):
    """
    Move a service item to a new position.
    """
    try:
        config = _load_config(config_file, mock)
        items = OrderOfServiceService(store=_build_store(config, mock)).move_item(plan_id, from_index, to_index)
    except (FileNotFoundError, PlannerError, IndexError, ValueError) as e:
        _fail(e)

    console.print(f"[green]✓ Moved item {from_index} to {to_index}[/green]\n")
    _print_items(items)


@app.command()
def seed(
    plan_id: Annotated[str, typer.Argument(help="Plan (event) id")],
    config_file: ConfigOption = None,
    mock: MockOption = False,
):
    """
    Fill a plan's order of service with the default template.
    """
    try:
        config = _load_config(config_file, mock)
        items = OrderOfServiceService(store=_build_store(config, mock)).seed_from_template(plan_id)
    except (FileNotFoundError, PlannerError, ValueError) as e:
        _fail(e)

    console.print(f"[green]✓ Added the default items to {plan_id}[/green]\n")
    _print_items(items)


@app.command()
def remove_item(
    plan_id: Annotated[str, typer.Argument(help="Plan (event) id")],
    item_id: Annotated[str, typer.Argument(help="Service item id")],
    config_file: ConfigOption = None,
    mock: MockOption = False,
):
    """
    Delete a service item and close the gap.
    """
    try:
        config = _load_config(config_file, mock)
        items = OrderOfServiceService(store=_build_store(config, mock)).remove_item(plan_id, item_id)
    except (FileNotFoundError, PlannerError, ValueError) as e:
        _fail(e)

    console.print(f"[green]✓ Removed {item_id}[/green]\n")
    _print_items(items)


@app.command()
def version():
    """
    Show version information.
    """
    from .. import __version__
    console.print(f"\n[bold cyan]serviceplanner[/bold cyan] version [bold]{__version__}[/bold]\n")


if __name__ == "__main__":
    app()
