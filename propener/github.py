"""
GitHub review-request source for Propener.

Asks the GitHub CLI for open pull requests where the current user is a
requested reviewer:

    gh search prs --review-requested=@me --state=open --draft=false \
        --json number,url,repository,title,updatedAt,isDraft --limit 50

Authentication is whatever ``gh auth`` (or GH_TOKEN) provides.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any

from .shell import CommandRunner, default_runner


SEARCH_FIELDS = ["number", "url", "repository", "title", "updatedAt", "isDraft"]
SEARCH_LIMIT = 50
FETCH_TIMEOUT = 30


@dataclass
class PullRequest:
    """A PR awaiting review, as reported by gh."""

    number: int
    url: str
    repository: str  # full_name like "owner/repo"
    title: str = ""
    updated_at: str | None = None
    is_draft: bool = False

    @property
    def key(self) -> str:
        """Identity key used by the ledger ("owner/repo#123")."""
        return f"{self.repository}#{self.number}"

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "PullRequest":
        """Build from one item of ``gh search prs --json`` output.

        Raises:
            KeyError, TypeError: when a required field is missing.
        """
        return cls(
            number=data["number"],
            url=data["url"],
            repository=data["repository"]["nameWithOwner"],
            title=data.get("title") or "",
            updated_at=data.get("updatedAt"),
            is_draft=bool(data.get("isDraft", False)),
        )


@dataclass
class FetchResult:
    """Outcome of a review-request search."""

    ok: bool
    pull_requests: list[PullRequest] = field(default_factory=list)
    error: str = ""


def build_search_command(exclude_draft: bool = True, limit: int = SEARCH_LIMIT) -> list[str]:
    cmd = ["gh", "search", "prs", "--review-requested=@me", "--state=open"]
    if exclude_draft:
        cmd.append("--draft=false")
    cmd.extend(["--json", ",".join(SEARCH_FIELDS), "--limit", str(limit)])
    return cmd


def parse_search_output(output: str) -> list[PullRequest]:
    """
    Parse ``gh search prs`` JSON output, keeping gh's order.

    Raises:
        ValueError: If the output is not a JSON array of PR objects.
    """
    data = json.loads(output)
    if not isinstance(data, list):
        raise ValueError(f"expected a JSON array, got {type(data).__name__}")
    try:
        return [PullRequest.from_dict(item) for item in data]
    except (KeyError, TypeError) as e:
        raise ValueError(f"unexpected PR payload: {e!r}") from e


def fetch_review_requests(
    exclude_draft: bool = True,
    runner: CommandRunner | None = None,
) -> FetchResult:
    """
    Fetch open PRs awaiting the user's review.

    Any failure (gh missing, non-zero exit, timeout, bad JSON) is reported
    through ``FetchResult.ok``/``error`` with an empty PR list.
    """
    runner = runner or default_runner()
    result = runner.run(build_search_command(exclude_draft), timeout=FETCH_TIMEOUT)
    if not result.ok:
        return FetchResult(ok=False, error=result.error)

    try:
        pull_requests = parse_search_output(result.output)
    except ValueError as e:
        return FetchResult(ok=False, error=f"could not parse gh output: {e}")
    return FetchResult(ok=True, pull_requests=pull_requests)
