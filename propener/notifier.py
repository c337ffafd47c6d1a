"""
Desktop notifications through macOS Notification Center (osascript).

Best effort only: a failed notification is never reported to the caller
as an error.
"""

from __future__ import annotations

from loguru import logger

from .shell import CommandRunner, default_runner


NOTIFICATION_TITLE = "PR Opener"
NOTIFICATION_SOUND = "Glass"


def escape_applescript(text: str) -> str:
    """Escape a value for use inside an AppleScript string literal."""
    return text.replace("\\", "\\\\").replace('"', '\\"')


def build_notification_script(title: str, message: str, sound: str = NOTIFICATION_SOUND) -> str:
    return (
        f'display notification "{escape_applescript(message)}" '
        f'with title "{escape_applescript(title)}" '
        f'sound name "{escape_applescript(sound)}"'
    )


def send_notification(title: str, message: str, runner: CommandRunner | None = None) -> bool:
    """Show a notification; returns whether osascript succeeded."""
    runner = runner or default_runner()
    result = runner.run(["osascript", "-e", build_notification_script(title, message)])
    if not result.ok:
        logger.debug(f"Notification skipped: {result.error}")
    return result.ok
