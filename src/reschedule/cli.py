"""Command-line interface for reschedule."""

from __future__ import annotations

from datetime import date
from pathlib import Path
from typing import Annotated

import typer

from .config import ProjectConfig, discover_config
from .exceptions import RescheduleError
from .loader import load_work_plan, write_work_plan
from .logger import setup_logger
from .models import WorkItem, WorkPlan
from .scheduler import UNSET, EditSession, ServiceResult, Unset

app = typer.Typer(
    name="reschedule",
    help="Propagate date changes through work item hierarchies and follows relations",
    add_completion=False,
)


@app.callback()
def main_callback(
    ctx: typer.Context,
    verbose: Annotated[
        int,
        typer.Option(
            "--verbose",
            "-v",
            help="Verbosity level: 0=silent (default), 1=show changes, 2=show all checks, 3=debug",
            min=0,
            max=3,
        ),
    ] = 0,
    config: Annotated[
        Path | None,
        typer.Option(
            "--config",
            "-c",
            help="Path to config file (default: reschedule_config.yaml)",
        ),
    ] = None,
) -> None:
    """Global options for reschedule commands."""
    setup_logger(verbose)
    ctx.obj = {"config_path": config}


def _load(ctx: typer.Context, file: Path) -> tuple[WorkPlan, ProjectConfig]:
    config_path: Path | None = ctx.obj.get("config_path") if ctx.obj else None
    try:
        config = discover_config(file, config_path)
        plan = load_work_plan(file, config=config)
    except (RescheduleError, FileNotFoundError) as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1) from None
    return plan, config


def _parse_date_option(date_str: str | None, option_name: str) -> date | None:
    """Parse a YYYY-MM-DD option value."""
    if date_str is None:
        return None
    try:
        return date.fromisoformat(date_str)
    except ValueError:
        typer.echo(f"Error: Invalid {option_name} format. Use YYYY-MM-DD", err=True)
        raise typer.Exit(1) from None


def _format_item(item: WorkItem) -> str:
    start = item.start_date.isoformat() if item.start_date else "-"
    due = item.due_date.isoformat() if item.due_date else "-"
    duration = str(item.duration) if item.duration is not None else "-"
    line = f"{item.id:<16} {start:<10}  {due:<10}  {duration:>4}"
    if item.parent_id:
        line += f"  parent={item.parent_id}"
    if item.manually_scheduled:
        line += "  (manual)"
    return line


@app.command()
def show(
    ctx: typer.Context,
    file: Annotated[Path, typer.Argument(help="Path to the work plan YAML file")] = Path(
        "work_plan.yaml"
    ),
) -> None:
    """List all work items with their dates and durations."""
    plan, _ = _load(ctx, file)

    typer.echo(f"{'ID':<16} {'Start':<10}  {'Due':<10}  {'Days':>4}")
    typer.echo("-" * 48)
    for item in plan.items:
        typer.echo(_format_item(item))


@app.command()
def move(  # noqa: PLR0913 - CLI command needs multiple options
    ctx: typer.Context,
    file: Annotated[Path, typer.Argument(help="Path to the work plan YAML file")],
    item_id: Annotated[str, typer.Argument(help="ID of the item to edit")],
    *,
    start: Annotated[
        str | None, typer.Option("--start", "-s", help="New start date (YYYY-MM-DD)")
    ] = None,
    due: Annotated[
        str | None, typer.Option("--due", "-d", help="New due date (YYYY-MM-DD)")
    ] = None,
    parent: Annotated[str | None, typer.Option("--parent", "-p", help="New parent ID")] = None,
    no_parent: Annotated[
        bool, typer.Option("--no-parent", help="Remove the item from its parent")
    ] = False,
    write: Annotated[
        bool, typer.Option("--write", "-w", help="Write the new dates back to the YAML file")
    ] = False,
) -> None:
    """Edit one item and reschedule everything depending on it."""
    if parent and no_parent:
        typer.echo("Error: Cannot specify both --parent and --no-parent", err=True)
        raise typer.Exit(1)

    start_date = _parse_date_option(start, "start")
    due_date = _parse_date_option(due, "due")

    plan, config = _load(ctx, file)

    new_parent: str | None | Unset = UNSET
    if parent:
        new_parent = parent
    elif no_parent:
        new_parent = None

    session = EditSession(plan, config.scheduling.create_days())
    try:
        result = session.change(
            item_id,
            start_date=start_date if start_date else UNSET,
            due_date=due_date if due_date else UNSET,
            parent_id=new_parent,
        )
    except RescheduleError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1) from None

    _display_result(result)

    if write:
        count = write_work_plan(file, plan)
        typer.echo(f"Wrote {count} items to {file}")


def _display_result(result: ServiceResult) -> None:
    if result.result is not None:
        typer.echo("Edited:")
        typer.echo(f"  {_format_item(result.result)}")

    if not result.dependent_results:
        typer.echo("No other items were rescheduled")
        return

    typer.echo("Rescheduled:")
    for dependent in result.dependent_results:
        if dependent.result is not None:
            typer.echo(f"  {_format_item(dependent.result)}")


def main() -> int:
    """Main entry point."""
    # Typer handles sys.exit() internally
    app()
    return 0


if __name__ == "__main__":
    main()
