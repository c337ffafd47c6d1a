"""
One Propener pass: find review requests and open the new ones.

Steps, in order:
    load config -> stop if paused -> load + prune ledger -> fetch PRs
    -> pick new PRs -> open tabs -> notify -> save ledger

A pass never retries a failed step. Failures of gh, the browser or the
notifier are logged and degrade only that step; the ledger is always saved
at the end so pruning survives even an empty or failed fetch.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone

from loguru import logger

from .browser import open_tab
from .config import AppPaths, OpenerConfig
from .github import PullRequest, fetch_review_requests
from .ledger import LedgerEntry, format_timestamp, load_ledger, prune_ledger, save_ledger
from .notifier import NOTIFICATION_TITLE, send_notification
from .shell import CommandRunner, default_runner


@dataclass
class RunSummary:
    """What a single pass did."""

    paused: bool = False
    fetched: int = 0
    selected: list[PullRequest] = field(default_factory=list)
    opened: list[PullRequest] = field(default_factory=list)
    failed: list[PullRequest] = field(default_factory=list)
    notified: bool = False


def select_new_pull_requests(
    pull_requests: list[PullRequest],
    ledger: dict[str, LedgerEntry],
    max_tabs: int,
) -> list[PullRequest]:
    """PRs not yet in the ledger, in fetch order, capped at ``max_tabs``."""
    if max_tabs < 0:
        logger.warning(f"maxTabsToOpen is {max_tabs}; opening no tabs")
        max_tabs = 0
    fresh = [pr for pr in pull_requests if pr.key not in ledger]
    return fresh[:max_tabs]


def notification_message(count: int) -> str:
    noun = "PR" if count == 1 else "PRs"
    return f"{count} new {noun} awaiting your review"


def run_once(
    paths: AppPaths,
    dry_run: bool = False,
    runner: CommandRunner | None = None,
    now: datetime | None = None,
) -> RunSummary:
    """Run one pass and return a summary of what happened."""
    runner = runner or default_runner()
    summary = RunSummary()

    config = OpenerConfig.load(paths.config_file)
    if config.paused:
        logger.info("Paused")
        summary.paused = True
        return summary

    started = now or datetime.now(timezone.utc)
    logger.info(f"[{format_timestamp(started)}] Started")

    ledger = load_ledger(paths.notified_file)
    ledger = prune_ledger(ledger, config.notified_retention_days, now=started)

    fetch = fetch_review_requests(config.exclude_draft, runner=runner)
    if not fetch.ok:
        logger.error(f"GitHub search failed: {fetch.error}")
    pull_requests = fetch.pull_requests
    summary.fetched = len(pull_requests)
    logger.info(f"Fetched: {len(pull_requests)} PRs")

    if not pull_requests:
        save_ledger(paths.notified_file, ledger)
        logger.info("No review requests")
        return summary

    summary.selected = select_new_pull_requests(pull_requests, ledger, config.max_tabs_to_open)
    logger.info(f"New: {len(summary.selected)} PRs")

    for pr in summary.selected:
        result = open_tab(pr.url, dry_run=dry_run, runner=runner)
        if result.ok:
            opened_at = now or datetime.now(timezone.utc)
            ledger[pr.key] = LedgerEntry(at=opened_at, title=pr.title)
            summary.opened.append(pr)
        else:
            summary.failed.append(pr)

    if summary.opened and config.enable_notification:
        message = notification_message(len(summary.opened))
        summary.notified = send_notification(NOTIFICATION_TITLE, message, runner=runner)

    save_ledger(paths.notified_file, ledger)
    logger.info("Done")
    return summary
