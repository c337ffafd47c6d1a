"""
Propener CLI - Open pull requests awaiting your review as browser tabs.

Commands:
    (none)    - Run one pass (add --dry-run to skip opening tabs)
    pause     - Stop opening tabs until resumed
    resume    - Resume opening tabs
    status    - Show whether Propener is paused
    stats     - Summary of notified PRs
"""

from __future__ import annotations

from pathlib import Path

import click
from dotenv import load_dotenv

# Load .env so GH_TOKEN/GITHUB_TOKEN reach the gh subprocess
load_dotenv()  # Loads from current directory

from . import __version__
from .config import AppPaths, OpenerConfig
from .ledger import LedgerStats, ledger_stats, load_ledger
from .logs import setup_logging
from .opener import run_once


PAUSED_LABEL = "⏸ Paused"
ACTIVE_LABEL = "▶ Active"
RESUMED_LABEL = "▶ Resumed"


def format_stats(stats: LedgerStats) -> str:
    lines = [
        "📊 PR Opener Stats",
        "─" * 30,
        f"Total PRs notified: {stats.total}",
        f"Last 7 days: {stats.recent}",
        "",
    ]
    if stats.top_repos:
        lines.append("Top repositories:")
        for i, (repo, count) in enumerate(stats.top_repos, start=1):
            lines.append(f"  {i}. {repo} ({count})")
    else:
        lines.append("No PR history yet.")
    return "\n".join(lines)


@click.group(invoke_without_command=True)
@click.version_option(version=__version__)
@click.option("--dry-run", is_flag=True, help="Log the tabs that would open instead of opening them")
@click.option(
    "--home",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Data directory for config and logs (default: ~/.propener)",
)
@click.option("--verbose", "-v", is_flag=True, help="Show debug output")
@click.pass_context
def main(ctx: click.Context, dry_run: bool, home: Path | None, verbose: bool):
    """Propener - Open pull requests awaiting your review as browser tabs."""
    paths = AppPaths(home=home.expanduser()) if home else AppPaths()
    paths.ensure_logs_dir()
    setup_logging(paths.log_file, verbose=verbose)
    ctx.obj = paths

    if ctx.invoked_subcommand is None:
        run_once(paths, dry_run=dry_run)


@main.command()
@click.pass_obj
def pause(paths: AppPaths):
    """Stop opening tabs until `propener resume`."""
    _set_paused(paths, True)
    click.echo(PAUSED_LABEL)


@main.command()
@click.pass_obj
def resume(paths: AppPaths):
    """Resume opening tabs."""
    _set_paused(paths, False)
    click.echo(RESUMED_LABEL)


@main.command()
@click.pass_obj
def status(paths: AppPaths):
    """Show whether Propener is paused."""
    config = OpenerConfig.load(paths.config_file)
    click.echo(PAUSED_LABEL if config.paused else ACTIVE_LABEL)


@main.command()
@click.pass_obj
def stats(paths: AppPaths):
    """Summary of PRs opened so far."""
    ledger = load_ledger(paths.notified_file)
    click.echo(format_stats(ledger_stats(ledger)))


def _set_paused(paths: AppPaths, paused: bool) -> None:
    config = OpenerConfig.load(paths.config_file)
    config.paused = paused
    config.save(paths.config_file)


if __name__ == "__main__":
    main()
