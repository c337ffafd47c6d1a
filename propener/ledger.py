"""
Notification ledger for Propener.

The ledger (logs/notified.json) maps a PR identity key ("owner/repo#123")
to the time a tab was opened for it and the PR title at that moment:

    {"owner/repo#123": {"at": "2026-10-19T08:30:00.123Z", "title": "Fix bug"}}

Older files stored the timestamp under "notifiedAt"; both names are read and
normalised into ``LedgerEntry.at``, and only "at" is written back.
"""

from __future__ import annotations

import json
import os
import tempfile
from collections import Counter
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any

from loguru import logger


STATS_WINDOW_DAYS = 7
TOP_REPOS_LIMIT = 3


@dataclass
class LedgerEntry:
    """A PR that has already been opened for the user."""

    at: datetime | None
    title: str = ""

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "LedgerEntry":
        raw = data.get("at") or data.get("notifiedAt")
        return cls(at=parse_timestamp(raw), title=str(data.get("title") or ""))

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {}
        if self.at is not None:
            data["at"] = format_timestamp(self.at)
        data["title"] = self.title
        return data


@dataclass
class LedgerStats:
    """Read-only summary of the ledger for `propener stats`."""

    total: int = 0
    recent: int = 0
    top_repos: list[tuple[str, int]] = field(default_factory=list)


def format_timestamp(dt: datetime) -> str:
    """Format as ISO-8601 UTC with millisecond precision and a Z suffix."""
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def parse_timestamp(value: Any) -> datetime | None:
    """Parse an ISO-8601 timestamp; naive values are UTC, bad values are None."""
    if not value or not isinstance(value, str):
        return None
    try:
        dt = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
    except ValueError:
        return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


def repo_of_key(key: str) -> str:
    """Repository part of an identity key ("owner/repo#12" -> "owner/repo")."""
    return key.split("#", 1)[0]


def load_ledger(path: Path) -> dict[str, LedgerEntry]:
    """Load the ledger; a missing or unreadable file gives an empty ledger."""
    if not path.exists():
        return {}
    try:
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, ValueError) as e:
        logger.warning(f"Ignoring unreadable ledger {path}: {e}")
        return {}
    if not isinstance(data, dict):
        logger.warning(f"Ignoring malformed ledger {path}: expected a JSON object")
        return {}

    ledger: dict[str, LedgerEntry] = {}
    for key, value in data.items():
        if isinstance(value, dict):
            ledger[key] = LedgerEntry.from_dict(value)
    return ledger


def save_ledger(path: Path, ledger: dict[str, LedgerEntry]) -> None:
    """Write the whole ledger, replacing the previous file atomically."""
    path.parent.mkdir(parents=True, exist_ok=True)
    payload = {key: entry.to_dict() for key, entry in ledger.items()}
    # Unique temp name per writer so overlapping runs never share one
    tmp_path: Path | None = None
    try:
        with tempfile.NamedTemporaryFile(
            "w",
            encoding="utf-8",
            dir=path.parent,
            prefix=path.name + ".",
            suffix=".tmp",
            delete=False,
        ) as f:
            tmp_path = Path(f.name)
            json.dump(payload, f, ensure_ascii=False, indent=2)
        os.replace(tmp_path, path)
    finally:
        if tmp_path is not None:
            tmp_path.unlink(missing_ok=True)


def prune_ledger(
    ledger: dict[str, LedgerEntry],
    retention_days: int,
    now: datetime | None = None,
) -> dict[str, LedgerEntry]:
    """
    Drop entries older than the retention window.

    Keeps only entries whose timestamp is strictly newer than
    ``now - retention_days``. Entries without a usable timestamp are dropped.
    The input mapping is not modified.
    """
    now = now or datetime.now(timezone.utc)
    cutoff = now - timedelta(days=retention_days)
    return {
        key: entry
        for key, entry in ledger.items()
        if entry.at is not None and entry.at > cutoff
    }


def ledger_stats(ledger: dict[str, LedgerEntry], now: datetime | None = None) -> LedgerStats:
    now = now or datetime.now(timezone.utc)
    cutoff = now - timedelta(days=STATS_WINDOW_DAYS)
    recent = sum(1 for entry in ledger.values() if entry.at is not None and entry.at > cutoff)

    # Counter keeps first-seen order and sorted() is stable, so ties keep it too
    counts = Counter(repo_of_key(key) for key in ledger)
    top_repos = sorted(counts.items(), key=lambda item: item[1], reverse=True)[:TOP_REPOS_LIMIT]

    return LedgerStats(total=len(ledger), recent=recent, top_repos=top_repos)
