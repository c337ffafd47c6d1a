"""
External command runner.

Every collaborator Propener talks to (gh, open, osascript) is a command-line
program. This module wraps subprocess so callers get a ``CommandResult``
instead of exceptions, and so tests can swap in a fake runner.
"""

from __future__ import annotations

import subprocess
from dataclasses import dataclass
from typing import Protocol


@dataclass
class CommandResult:
    """Outcome of one external command."""

    ok: bool
    output: str = ""
    error: str = ""


class CommandRunner(Protocol):
    """Protocol for running external commands."""

    def run(self, cmd: list[str], timeout: float | None = None) -> CommandResult:
        """Run a command and return its result."""
        ...


class SubprocessRunner:
    """Runs commands via subprocess, never through a shell."""

    def run(self, cmd: list[str], timeout: float | None = None) -> CommandResult:
        try:
            result = subprocess.run(
                cmd,
                capture_output=True,
                text=True,
                timeout=timeout,
            )
        except subprocess.TimeoutExpired:
            return CommandResult(ok=False, error=f"{cmd[0]} timed out after {timeout}s")
        except OSError as e:
            return CommandResult(ok=False, error=f"{cmd[0]} could not be started: {e}")

        if result.returncode != 0:
            detail = (result.stderr or "").strip() or f"exit status {result.returncode}"
            return CommandResult(ok=False, output=result.stdout, error=f"{cmd[0]} failed: {detail}")
        return CommandResult(ok=True, output=result.stdout)


def default_runner() -> CommandRunner:
    return SubprocessRunner()
