"""CLI commands for uirunner."""

from __future__ import annotations

from pathlib import Path

import typer
from dotenv import load_dotenv
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from uirunner import __version__
from uirunner.models.test import Platform

# Load .env file from current directory or parent directories
load_dotenv()

app = typer.Typer(
    name="uirunner",
    help="Mobile UI test runner - run Maestro flows with retries and reports",
    no_args_is_help=True,
)
console = Console()


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"uirunner version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool | None = typer.Option(
        None,
        "--version",
        "-V",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit",
    ),
) -> None:
    """uirunner - Mobile UI test runner."""
    pass


@app.command()
def run(
    platform: Platform = typer.Argument(
        Platform.ANDROID, help="Target platform: android, ios (simulator) or catalyst"
    ),
    app_id: str | None = typer.Option(
        None, "--app-id", "-a", help="Application ID / bundle identifier (exposed as ${APP_ID})"
    ),
    test: str | None = typer.Option(None, "--test", "-t", help="Run specific test file only"),
    continue_on_failure: bool = typer.Option(
        False, "--continue", "-c", help="Continue running tests even if one fails"
    ),
    retries: int | None = typer.Option(
        None, "--retries", "-r", min=0, help="Retries for failed tests (default: 2)"
    ),
    no_report: bool = typer.Option(False, "--no-report", help="Skip report generation"),
    list_only: bool = typer.Option(False, "--list", help="List available test files and exit"),
    device: str | None = typer.Option(None, "--device", "-d", help="Device or simulator ID"),
    test_dir: Path | None = typer.Option(None, "--test-dir", help="Directory with test flows"),
    results_dir: Path | None = typer.Option(None, "--results-dir", help="Output directory"),
    verbose: bool = typer.Option(False, "--verbose", help="Write debug.log to the results directory"),
) -> None:
    """Run UI test flows on a device, simulator or Catalyst app."""
    from uirunner.core.config import ConfigLoader, setup_logging
    from uirunner.core.console_reporter import ConsoleReporter
    from uirunner.core.discovery import TestDiscovery
    from uirunner.core.errors import NoTestsFoundError, PreconditionError, TestNotFoundError
    from uirunner.core.orchestrator import RunOptions, RunOrchestrator

    config = ConfigLoader.load()

    # CLI flags override config
    if test_dir:
        config.test_dir = test_dir
    if results_dir:
        config.results_dir = results_dir
    if verbose:
        config.verbose = True

    reporter = ConsoleReporter(console=console)

    if list_only:
        discovery = TestDiscovery(config.test_dir, platform)
        reporter.test_list(discovery.list_tests(), config.test_dir)
        raise typer.Exit(0)

    if config.verbose:
        log_file = setup_logging(verbose=True, log_dir=config.results_dir)
        if log_file:
            console.print(f"[dim]Verbose logging → {log_file}[/dim]")

    options = RunOptions(
        platform=platform,
        test_filter=test,
        continue_on_failure=continue_on_failure,
        max_retries=retries if retries is not None else config.retry.count,
        generate_report=not no_report,
        app_id=app_id or config.app_id,
        device=device or config.device,
    )

    panel_content = f"[dim]Platform:[/dim]  {platform.value}\n"
    panel_content += f"[dim]Tests:[/dim]     {config.test_dir}\n"
    panel_content += f"[dim]Retries:[/dim]   {options.max_retries}"
    if options.app_id:
        panel_content += f"\n[dim]App:[/dim]       {options.app_id}"
    console.print(Panel(panel_content, title="UI Test Runner", border_style="blue", padding=(0, 1)))
    console.print()

    orchestrator = RunOrchestrator(config, options, reporter=reporter)

    try:
        result = orchestrator.run()
    except PreconditionError as e:
        reporter.precondition_failed(e)
        raise typer.Exit(1)
    except TestNotFoundError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)
    except NoTestsFoundError as e:
        console.print(f"[yellow]Warning:[/yellow] {e}")
        console.print("[dim]Add Maestro flows (*.yaml, *.yml) or pass --test FILE[/dim]")
        raise typer.Exit(0)

    reporter.summary(result.summary)

    if result.reports:
        console.print()
        for kind, path in result.reports.items():
            console.print(f"[dim]{kind.upper()}: {path}[/dim]")

    raise typer.Exit(result.exit_code)


@app.command()
def targets(
    platform: Platform = typer.Argument(Platform.ANDROID, help="Platform to query"),
) -> None:
    """List devices, simulators or hosts available for a platform."""
    from uirunner.core.config import ConfigLoader
    from uirunner.core.targets import create_target

    config = ConfigLoader.load()
    bridge = create_target(platform, config, device=config.device, app_id=config.app_id)

    problems = bridge.check()
    targets_list = bridge.available_targets()

    if not targets_list:
        console.print(f"[yellow]No {platform.value} targets found[/yellow]")
        for message, hint in problems:
            console.print(f"  {message}")
            if hint:
                console.print(f"  [dim]{hint}[/dim]")
        raise typer.Exit(1)

    table = Table(title=f"Available Targets ({platform.value})")
    table.add_column("ID", style="cyan")
    table.add_column("Name", style="green")
    table.add_column("Status", style="yellow")

    for target in targets_list:
        table.add_row(
            target.get("id", "unknown"),
            target.get("name", "unknown"),
            target.get("status", "unknown"),
        )

    console.print(table)


@app.command()
def report(
    summary_file: Path = typer.Argument(..., help="summary_<timestamp>.json from a previous run"),
    output: Path | None = typer.Option(None, "--output", "-o", help="Output directory"),
) -> None:
    """Regenerate the HTML report from a saved run summary."""
    from uirunner.core.report import ReportGenerator, load_summary

    if not summary_file.exists():
        console.print(f"[red]Error:[/red] File not found: {summary_file}")
        raise typer.Exit(1)

    try:
        summary = load_summary(summary_file)
    except ValueError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)

    generator = ReportGenerator(output or summary_file.parent)
    html_path = generator.generate_html(summary)

    console.print(f"[green]Generated:[/green] {html_path}")


if __name__ == "__main__":
    app()
