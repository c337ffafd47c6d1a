"""
Configuration management for Propener.

Loads and saves:
- config.json: Run settings (tab cap, pause flag, draft filter, retention)

All state lives under a single home directory (``~/.propener`` by default),
described by ``AppPaths`` and handed to each component explicitly.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any


CONFIG_FILENAME = "config.json"
LOGS_DIRNAME = "logs"
NOTIFIED_FILENAME = "notified.json"
LOG_FILENAME = "stdout.log"

# JSON key -> OpenerConfig attribute
_CONFIG_KEYS = {
    "maxTabsToOpen": "max_tabs_to_open",
    "paused": "paused",
    "excludeDraft": "exclude_draft",
    "notifiedRetentionDays": "notified_retention_days",
    "enableNotification": "enable_notification",
}


def get_default_home() -> Path:
    """Get the default ~/.propener directory path."""
    return Path.home() / ".propener"


@dataclass
class AppPaths:
    """Locations of the config, ledger and log files."""

    home: Path = field(default_factory=get_default_home)

    @property
    def config_file(self) -> Path:
        return self.home / CONFIG_FILENAME

    @property
    def logs_dir(self) -> Path:
        return self.home / LOGS_DIRNAME

    @property
    def notified_file(self) -> Path:
        return self.logs_dir / NOTIFIED_FILENAME

    @property
    def log_file(self) -> Path:
        return self.logs_dir / LOG_FILENAME

    def ensure_logs_dir(self) -> Path:
        """Ensure the logs directory exists and return its path."""
        self.logs_dir.mkdir(parents=True, exist_ok=True)
        return self.logs_dir


@dataclass
class OpenerConfig:
    """Run settings persisted as config.json."""

    max_tabs_to_open: int = 5
    paused: bool = False
    exclude_draft: bool = True
    notified_retention_days: int = 7
    enable_notification: bool = True

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "OpenerConfig":
        """Merge known keys over the defaults.

        Unknown keys are ignored. A value whose type differs from the
        default (bool and int are distinct) keeps the default.
        """
        config = cls()
        for key, attr in _CONFIG_KEYS.items():
            if key not in data:
                continue
            value = data[key]
            if type(value) is not type(getattr(config, attr)):
                continue
            setattr(config, attr, value)
        return config

    def to_dict(self) -> dict[str, Any]:
        return {key: getattr(self, attr) for key, attr in _CONFIG_KEYS.items()}

    @classmethod
    def load(cls, path: Path) -> "OpenerConfig":
        """Load configuration, falling back to defaults on any read failure."""
        try:
            with open(path, encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError):
            return cls()
        if not isinstance(data, dict):
            return cls()
        return cls.from_dict(data)

    def save(self, path: Path) -> None:
        """Write the full record back, replacing the previous file."""
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(self.to_dict(), indent=2) + "\n", encoding="utf-8")

