"""
Tab launcher: opens a PR URL in a named macOS browser application.
"""

from __future__ import annotations

from dataclasses import dataclass

from loguru import logger

from .shell import CommandRunner, default_runner


DEFAULT_BROWSER = "Google Chrome"


@dataclass
class OpenResult:
    ok: bool
    url: str
    error: str = ""


def build_open_command(url: str, app: str = DEFAULT_BROWSER) -> list[str]:
    return ["open", "-a", app, url]


def open_tab(
    url: str,
    dry_run: bool = False,
    runner: CommandRunner | None = None,
    app: str = DEFAULT_BROWSER,
) -> OpenResult:
    """
    Open ``url`` in ``app``.

    In dry-run mode nothing is launched; the intended action is logged and
    reported as a success.
    """
    if dry_run:
        logger.info(f"[DRY-RUN] Would open: {url}")
        return OpenResult(ok=True, url=url)

    runner = runner or default_runner()
    result = runner.run(build_open_command(url, app))
    if not result.ok:
        logger.error(f"Failed: {url} {result.error}")
        return OpenResult(ok=False, url=url, error=result.error)

    logger.info(f"Opened: {url}")
    return OpenResult(ok=True, url=url)
