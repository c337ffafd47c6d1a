from __future__ import annotations

import pytest
from loguru import logger

from propener.config import AppPaths


@pytest.fixture
def paths(tmp_path) -> AppPaths:
    app_paths = AppPaths(home=tmp_path / "home")
    app_paths.ensure_logs_dir()
    return app_paths


@pytest.fixture
def log_messages() -> list[str]:
    """Collect loguru output as "LEVEL: message" strings."""
    messages: list[str] = []
    logger.add(lambda message: messages.append(str(message).rstrip("\n")), level="DEBUG", format="{level}: {message}")
    return messages


@pytest.fixture(autouse=True)
def _reset_loguru():
    yield
    logger.remove()
