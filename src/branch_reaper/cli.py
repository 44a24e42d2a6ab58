"""Command-line interface for branch-reaper."""

import asyncio
import logging
import sys
from pathlib import Path

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape

from branch_reaper import __version__
from branch_reaper.config import (
    ConfigurationError,
    InvalidConfigurationError,
    ReaperSettings,
    RepoTarget,
    load_targets,
)
from branch_reaper.models import RunSummary, TargetStatus
from branch_reaper.orchestrator import ReaperOrchestrator
from branch_reaper.slug import slug as slugify

app = typer.Typer(
    name="branch-reaper",
    help="Delete branch-scoped Kubernetes resources whose Git branch is gone",
    add_completion=False,
)
console = Console()

# Help text constants
VERBOSE_OUTPUT_HELP = "Verbose output"
ENV_FILE_HELP = "Path to custom environment file (default: .env.branchreaper or .env)"
CONFIG_FILE_HELP = "Path to the repository configuration file (overrides BRANCH_REAPER_CONFIG_FILE)"


def setup_logging(verbose: bool) -> None:
    """Setup logging configuration.

    Args:
        verbose: If True, enable debug logging
    """
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[RichHandler(console=console, rich_tracebacks=True)],
    )

    # GitPython logs every command at DEBUG
    if not verbose:
        logging.getLogger("git").setLevel(logging.WARNING)


def load_settings(env_file: str | None, config_file: Path | None) -> ReaperSettings:
    """Load settings, applying the command-line config file override.

    Args:
        env_file: Optional custom env file
        config_file: Optional configuration file path

    Returns:
        Loaded settings

    Raises:
        ConfigurationError: If the env file is missing or a setting is invalid
    """
    overrides: dict[str, Path] = {}
    if config_file is not None:
        overrides["config_file"] = config_file
    try:
        return ReaperSettings(env_file=env_file, **overrides)
    except ValidationError as e:
        raise InvalidConfigurationError(f"Invalid settings: {e}") from e


def _display_run_summary(summary: RunSummary) -> None:
    """Display run results.

    Args:
        summary: Summary of the finished run
    """
    verb = "would delete" if summary.simulate else "deleted"
    console.print("\n[bold]Reconciliation Summary:[/bold]")
    console.print(f"  Mode: {'simulate' if summary.simulate else 'live'}")
    console.print(f"  Targets: {len(summary.targets)}")
    console.print(f"  Candidates: {summary.total_candidates}")

    for result in summary.targets:
        if result.status == TargetStatus.FAILED:
            console.print(f"  [red]✗[/red] {result.target}: failed - {result.message}")
            continue
        if result.status == TargetStatus.SKIPPED:
            console.print(f"  [yellow]-[/yellow] {result.target}: skipped - {result.message}")
            continue

        status = "[green]✓[/green]" if result.failed_deletions == 0 else "[red]✗[/red]"
        console.print(f"  {status} {result.target}: {verb} {result.deleted} branches")
        for outcome in result.deletions:
            mark = "[green]✓[/green]" if outcome.success else "[red]✗[/red]"
            console.print(f"      {mark} {escape(outcome.branch)} [dim]({escape(outcome.selector)})[/dim]")
            if outcome.error_message:
                console.print(f"          [red]Error: {escape(outcome.error_message)}[/red]")

    if summary.simulate and summary.total_candidates:
        console.print("\n[yellow]Simulate mode: nothing was deleted. Re-run with --no-dry-run to apply.[/yellow]")


@app.command()
def run(
    dry_run: bool = typer.Option(
        True,
        "--dry-run/--no-dry-run",
        help="Only report what would be deleted",
    ),
    config_file: Path | None = typer.Option(
        None,
        "--config",
        "-c",
        help=CONFIG_FILE_HELP,
    ),
    env_file: str | None = typer.Option(
        None,
        "--env-file",
        help=ENV_FILE_HELP,
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help=VERBOSE_OUTPUT_HELP,
    ),
) -> None:
    """Reconcile deployed branch resources against their repositories."""
    setup_logging(verbose)

    try:
        settings = load_settings(env_file, config_file)
        targets = load_targets(settings.config_file)

        orchestrator = ReaperOrchestrator(settings)
        summary = asyncio.run(orchestrator.run(targets, simulate=dry_run))

        # Target failures are reported, not fatal
        _display_run_summary(summary)

    except ConfigurationError as e:
        console.print(f"[red]Configuration error: {e}[/red]")
        sys.exit(1)
    except Exception as e:
        console.print(f"[red]Error: {e}[/red]")
        if verbose:
            console.print_exception()
        sys.exit(1)


def _display_target(target: RepoTarget) -> None:
    console.print(f"\n[bold cyan]{target.name}[/bold cyan]")
    console.print(f"  URL: {target.url}")
    console.print(f"  Namespace: {target.namespace}")
    console.print(f"  Query selector: {target.query_selector or '(none)'}")
    console.print(f"  Resource types: {', '.join(target.resource_types)}")
    console.print(f"  Branch annotation: {target.branch_annotation}")
    console.print(f"  Delete labels: {target.delete_labels} + {target.branch_label}=<slug>")
    console.print(f"  Delete kinds: {', '.join(target.delete_kinds)}")
    if target.branch_prefix:
        console.print(f"  Branch prefix: {target.branch_prefix}")


@app.command()
def config(
    config_file: Path | None = typer.Option(
        None,
        "--config",
        "-c",
        help=CONFIG_FILE_HELP,
    ),
    env_file: str | None = typer.Option(
        None,
        "--env-file",
        help=ENV_FILE_HELP,
    ),
) -> None:
    """Show current settings and configured repositories."""
    try:
        settings = load_settings(env_file, config_file)
        console.print("[bold]Current Configuration:[/bold]\n")
        console.print(f"  Config file: {settings.config_file}")
        console.print(f"  Cache directory: {settings.cache_dir}")
        console.print(f"  kubectl: {settings.kubectl}")
        console.print(f"  Request timeout: {settings.request_timeout:g}s")
        console.print(f"  Git timeout: {settings.git_timeout:g}s")
        console.print(f"  Abort on degraded queries: {settings.abort_on_degraded}")

        targets = load_targets(settings.config_file)
        console.print(f"\n[bold]Repositories ({len(targets)}):[/bold]")
        for target in targets:
            _display_target(target)
    except ConfigurationError as e:
        console.print(f"[red]Configuration error: {e}[/red]")
        sys.exit(1)


@app.command()
def slug(
    branch: str = typer.Argument(..., help="Branch name to normalize"),
    prefix: str = typer.Option("", "--prefix", "-p", help="Prefix prepended before normalizing"),
) -> None:
    """Print the label value used for a branch."""
    console.print(slugify(prefix + branch), highlight=False, markup=False)


@app.command()
def version() -> None:
    """Show version information."""
    console.print(f"branch-reaper version {__version__}")


if __name__ == "__main__":
    app()
