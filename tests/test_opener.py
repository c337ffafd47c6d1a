from __future__ import annotations

import json
from datetime import datetime, timedelta, timezone

from fakes import FakeRunner, gh_item, gh_output

from propener.config import OpenerConfig
from propener.ledger import LedgerEntry, load_ledger, save_ledger
from propener.opener import notification_message, run_once, select_new_pull_requests
from propener.github import PullRequest
from propener.shell import CommandResult


NOW = datetime(2026, 10, 19, 9, 0, 0, tzinfo=timezone.utc)


def _write_config(paths, **values):
    OpenerConfig(**values).save(paths.config_file)


def _prs(count: int, repo: str = "owner/repo"):
    return [gh_item(repo, n) for n in range(1, count + 1)]


def test_paused_run_does_nothing(paths, log_messages):
    _write_config(paths, paused=True)
    runner = FakeRunner({"gh": gh_output(*_prs(2))})

    summary = run_once(paths, runner=runner, now=NOW)

    assert summary.paused is True
    assert runner.calls == []
    assert not paths.notified_file.exists()
    assert log_messages == ["INFO: Paused"]


def test_opens_min_of_fetched_and_cap_in_fetch_order(paths, log_messages):
    _write_config(paths, max_tabs_to_open=3)
    items = [gh_item("o/b", 9), gh_item("o/a", 1), gh_item("o/c", 4), gh_item("o/a", 2), gh_item("o/d", 5)]
    runner = FakeRunner({"gh": gh_output(*items)})

    summary = run_once(paths, runner=runner, now=NOW)

    opened_urls = [cmd[-1] for cmd in runner.commands("open")]
    assert opened_urls == [
        "https://github.com/o/b/pull/9",
        "https://github.com/o/a/pull/1",
        "https://github.com/o/c/pull/4",
    ]
    assert [pr.key for pr in summary.opened] == ["o/b#9", "o/a#1", "o/c#4"]
    assert sorted(load_ledger(paths.notified_file)) == ["o/a#1", "o/b#9", "o/c#4"]
    assert "INFO: Fetched: 5 PRs" in log_messages
    assert "INFO: New: 3 PRs" in log_messages
    assert log_messages[-1] == "INFO: Done"


def test_fewer_prs_than_cap_opens_all(paths):
    runner = FakeRunner({"gh": gh_output(*_prs(2))})

    summary = run_once(paths, runner=runner, now=NOW)

    assert len(summary.opened) == 2
    assert len(runner.commands("open")) == 2


def test_ledger_entry_records_time_and_title(paths):
    runner = FakeRunner({"gh": gh_output(gh_item("owner/repo", 7, "Add feature"))})

    run_once(paths, runner=runner, now=NOW)

    data = json.loads(paths.notified_file.read_text())
    assert data == {"owner/repo#7": {"at": "2026-10-19T09:00:00.000Z", "title": "Add feature"}}


def test_known_pr_is_never_reopened(paths):
    save_ledger(paths.notified_file, {"owner/repo#1": LedgerEntry(at=NOW - timedelta(days=1), title="Old title")})
    runner = FakeRunner({"gh": gh_output(gh_item("owner/repo", 1, "Renamed"), gh_item("owner/repo", 2))})

    summary = run_once(paths, runner=runner, now=NOW)

    assert [pr.key for pr in summary.selected] == ["owner/repo#2"]
    assert [cmd[-1] for cmd in runner.commands("open")] == ["https://github.com/owner/repo/pull/2"]
    # The existing entry keeps its original title and timestamp
    ledger = load_ledger(paths.notified_file)
    assert ledger["owner/repo#1"].title == "Old title"
    assert ledger["owner/repo#1"].at == NOW - timedelta(days=1)


def test_second_run_opens_nothing_new(paths):
    runner = FakeRunner({"gh": gh_output(*_prs(3))})

    run_once(paths, runner=runner, now=NOW)
    summary = run_once(paths, runner=runner, now=NOW + timedelta(minutes=5))

    assert summary.selected == []
    assert len(runner.commands("open")) == 3


def test_failed_open_is_not_recorded(paths, log_messages):
    def open_result(cmd):
        if cmd[-1].endswith("/2"):
            return CommandResult(ok=False, error="open failed: boom")
        return CommandResult(ok=True)

    runner = FakeRunner({"gh": gh_output(*_prs(3)), "open": open_result})

    summary = run_once(paths, runner=runner, now=NOW)

    assert [pr.key for pr in summary.failed] == ["owner/repo#2"]
    assert sorted(load_ledger(paths.notified_file)) == ["owner/repo#1", "owner/repo#3"]
    assert any(m.startswith("ERROR: Failed: https://github.com/owner/repo/pull/2") for m in log_messages)
    assert log_messages[-1] == "INFO: Done"


def test_dry_run_records_and_notifies_without_opening(paths, log_messages):
    runner = FakeRunner({"gh": gh_output(*_prs(2))})

    summary = run_once(paths, dry_run=True, runner=runner, now=NOW)

    assert runner.commands("open") == []
    assert len(runner.commands("osascript")) == 1
    assert "2 new PRs awaiting your review" in runner.commands("osascript")[0][2]
    assert summary.notified is True
    assert sorted(load_ledger(paths.notified_file)) == ["owner/repo#1", "owner/repo#2"]
    assert "INFO: [DRY-RUN] Would open: https://github.com/owner/repo/pull/1" in log_messages


def test_one_notification_reports_opened_count(paths):
    def open_result(cmd):
        return CommandResult(ok=not cmd[-1].endswith("/3"), error="nope")

    runner = FakeRunner({"gh": gh_output(*_prs(3)), "open": open_result})

    summary = run_once(paths, runner=runner, now=NOW)

    notifications = runner.commands("osascript")
    assert len(notifications) == 1
    assert "2 new PRs awaiting your review" in notifications[0][2]
    assert 'with title "PR Opener"' in notifications[0][2]
    assert summary.notified is True


def test_notification_disabled(paths):
    _write_config(paths, enable_notification=False)
    runner = FakeRunner({"gh": gh_output(*_prs(1))})

    run_once(paths, runner=runner, now=NOW)

    assert runner.commands("osascript") == []


def test_no_notification_when_nothing_opened(paths):
    runner = FakeRunner({"gh": gh_output(*_prs(1)), "open": CommandResult(ok=False, error="x")})

    summary = run_once(paths, runner=runner, now=NOW)

    assert runner.commands("osascript") == []
    assert summary.notified is False


def test_notification_failure_does_not_affect_run(paths, log_messages):
    runner = FakeRunner({"gh": gh_output(*_prs(1)), "osascript": CommandResult(ok=False, error="x")})

    summary = run_once(paths, runner=runner, now=NOW)

    assert summary.notified is False
    assert sorted(load_ledger(paths.notified_file)) == ["owner/repo#1"]
    assert log_messages[-1] == "INFO: Done"


def test_empty_fetch_persists_pruned_ledger(paths, log_messages):
    save_ledger(paths.notified_file, {
        "owner/repo#1": LedgerEntry(at=NOW - timedelta(days=30), title="stale"),
        "owner/repo#2": LedgerEntry(at=NOW - timedelta(days=1), title="fresh"),
    })
    runner = FakeRunner({"gh": gh_output()})

    run_once(paths, runner=runner, now=NOW)

    assert sorted(load_ledger(paths.notified_file)) == ["owner/repo#2"]
    assert "INFO: Fetched: 0 PRs" in log_messages
    assert log_messages[-1] == "INFO: No review requests"


def test_failed_fetch_is_logged_and_ledger_still_saved(paths, log_messages):
    runner = FakeRunner({"gh": CommandResult(ok=False, error="gh failed: HTTP 502")})

    summary = run_once(paths, runner=runner, now=NOW)

    assert summary.fetched == 0
    assert paths.notified_file.exists()
    assert "ERROR: GitHub search failed: gh failed: HTTP 502" in log_messages


def test_retention_days_from_config(paths):
    _write_config(paths, notified_retention_days=2)
    save_ledger(paths.notified_file, {"owner/repo#1": LedgerEntry(at=NOW - timedelta(days=3), title="")})
    runner = FakeRunner({"gh": gh_output(gh_item("owner/repo", 1))})

    summary = run_once(paths, runner=runner, now=NOW)

    # Pruned out of the ledger, so it is new again
    assert [pr.key for pr in summary.opened] == ["owner/repo#1"]


def test_draft_filter_follows_config(paths):
    _write_config(paths, exclude_draft=False)
    runner = FakeRunner({"gh": gh_output()})

    run_once(paths, runner=runner, now=NOW)

    assert "--draft=false" not in runner.commands("gh")[0]


def test_started_line_has_iso_timestamp(paths, log_messages):
    run_once(paths, runner=FakeRunner({"gh": gh_output()}), now=NOW)

    assert log_messages[0] == "INFO: [2026-10-19T09:00:00.000Z] Started"


def test_select_new_pull_requests_negative_cap_opens_nothing(log_messages):
    prs = [PullRequest(number=1, url="u1", repository="o/r"), PullRequest(number=2, url="u2", repository="o/r")]

    assert select_new_pull_requests(prs, {}, -2) == []
    assert select_new_pull_requests(prs, {}, 0) == []
    assert any(m.startswith("WARNING:") for m in log_messages)


def test_notification_message():
    assert notification_message(1) == "1 new PR awaiting your review"
    assert notification_message(4) == "4 new PRs awaiting your review"


def test_mistyped_config_values_fall_back_to_defaults(paths):
    paths.config_file.write_text(json.dumps({"maxTabsToOpen": "3", "notifiedRetentionDays": None}))
    runner = FakeRunner({"gh": gh_output(*_prs(1))})

    summary = run_once(paths, runner=runner, now=NOW)

    assert [pr.key for pr in summary.opened] == ["owner/repo#1"]
