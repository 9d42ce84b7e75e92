"""Command-line interface for lastrun."""

import asyncio
import logging
import sys
from pathlib import Path
from typing import Optional

import click
from pydantic import ValidationError
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from lastrun import __version__
from lastrun.config import RunConfig
from lastrun.tracker import LastRunReporter


console = Console()
err_console = Console(stderr=True)


def _configure_logging(verbose: bool) -> None:
    package_logger = logging.getLogger("lastrun")
    package_logger.setLevel(logging.DEBUG if verbose else logging.WARNING)
    if not any(isinstance(h, RichHandler) for h in package_logger.handlers):
        handler = RichHandler(console=err_console, show_path=False)
        handler.setFormatter(logging.Formatter("%(name)s: %(message)s"))
        package_logger.addHandler(handler)


def _load_config(ctx: click.Context) -> RunConfig:
    """Build the run configuration from the command-line options."""
    config_path = ctx.obj.get("config_path")
    last_run_file = ctx.obj.get("last_run_file")
    projects = ctx.obj.get("projects")

    if last_run_file and not config_path:
        return RunConfig(last_run_file=last_run_file)

    try:
        if config_path:
            config = RunConfig.from_file(config_path)
            base_dir = Path(config_path).parent
        else:
            config, base_dir = RunConfig.find_and_load()
    except FileNotFoundError as e:
        err_console.print(f"[red]Error:[/red] {e}")
        sys.exit(1)
    except (ValidationError, ValueError) as e:
        err_console.print(f"[red]Invalid configuration:[/red] {e}")
        sys.exit(1)

    config = config.resolve_paths(base_dir)
    if last_run_file:
        config.last_run_file = last_run_file
    if projects:
        config.cli_project_filter = list(projects)
    return config


def _tracker(ctx: click.Context) -> LastRunReporter:
    tracker = LastRunReporter(_load_config(ctx))
    if tracker.last_run_file is None:
        err_console.print("[yellow]No project matches, cannot locate the last run file[/yellow]")
        sys.exit(1)
    return tracker


@click.group()
@click.version_option(version=__version__, prog_name="lastrun")
@click.option(
    "--config",
    "-c",
    type=click.Path(exists=False),
    help="Path to configuration file (default: lastrun.json)",
)
@click.option(
    "--last-run-file",
    type=click.Path(dir_okay=False),
    help="Use this state file instead of the project's output directory",
)
@click.option("--project", "-p", multiple=True, help="Only consider the named project(s)")
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output")
@click.pass_context
def main(
    ctx: click.Context,
    config: Optional[str],
    last_run_file: Optional[str],
    project: tuple[str, ...],
    verbose: bool,
) -> None:
    """lastrun - inspect the outcome of the previous test run."""
    _configure_logging(verbose)
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config
    ctx.obj["last_run_file"] = last_run_file
    ctx.obj["projects"] = project


@main.command()
@click.pass_context
def show(ctx: click.Context) -> None:
    """Show the status and failures of the last run."""
    tracker = _tracker(ctx)
    info = asyncio.run(tracker.load())

    if info is None:
        console.print(f"[yellow]No last run recorded at[/yellow] {tracker.last_run_file}")
        sys.exit(1)

    style = "green" if info.status.value == "passed" else "red"
    console.print(f"Status: [{style}]{info.status.value}[/{style}]")
    console.print(f"Tests:  {len(info.test_durations)}  Failed: {len(info.failed_tests)}")

    if info.failed_tests:
        table = Table(title="Failed Tests")
        table.add_column("Test", style="red")
        table.add_column("Duration (ms)", justify="right")
        for test_id in info.failed_tests:
            duration = info.test_durations.get(test_id)
            table.add_row(test_id, str(duration) if duration is not None else "-")
        console.print(table)


@main.command()
@click.pass_context
def failed(ctx: click.Context) -> None:
    """Print the ids of the tests that failed in the last run."""
    tracker = _tracker(ctx)
    info = asyncio.run(tracker.load())
    if info is None:
        return

    for test_id in info.failed_tests:
        click.echo(test_id)


@main.command()
@click.option("--limit", "-n", type=int, default=10, help="Number of tests to show")
@click.pass_context
def durations(ctx: click.Context, limit: int) -> None:
    """Show the slowest tests of the last run."""
    tracker = _tracker(ctx)
    info = asyncio.run(tracker.load())

    if info is None or not info.test_durations:
        console.print("[yellow]No test durations recorded[/yellow]")
        return

    slowest = sorted(info.test_durations.items(), key=lambda item: item[1], reverse=True)

    table = Table(title="Slowest Tests")
    table.add_column("Test", style="cyan")
    table.add_column("Duration (ms)", justify="right")
    for test_id, duration in slowest[:limit]:
        table.add_row(test_id, str(duration))

    console.print(table)


@main.command()
@click.pass_context
def clear(ctx: click.Context) -> None:
    """Delete the last run file."""
    tracker = _tracker(ctx)
    path = tracker.last_run_file

    if not path.exists():
        console.print(f"[dim]Nothing to clear at {path}[/dim]")
        return

    try:
        path.unlink()
    except OSError as e:
        err_console.print(f"[red]Error removing last run file:[/red] {e}")
        sys.exit(1)
    console.print(f"[green]Removed[/green] {path}")


if __name__ == "__main__":
    main()
