"""Pytest fixtures for ngsread test suite."""

from __future__ import annotations

from collections.abc import Callable, Iterator
from pathlib import Path

import pytest
from loguru import logger

# =============================================================================
# Test Tier System
# =============================================================================
#
# tier0 - Fast unit tests (<1s each)
#   - Pure computation on small arrays, header predicates, stream helpers
#   - Run: pytest -m tier0
#
# tier1 - End-to-end loading tests
#   - Write small input files to tmp_path and load them, including CLI runs
#   - Run: pytest -m tier1
#
# tier2 - Scale tests (memory/time intensive)
#   - Run manually: pytest -m tier2
# =============================================================================


@pytest.fixture
def write_file(tmp_path: Path) -> Callable[[str, str], Path]:
    """Return a helper that writes text content to a file under tmp_path.

    Returns:
        Function (name, content) -> Path of the written file
    """

    def _write(name: str, content: str) -> Path:
        path = tmp_path / name
        path.write_text(content)
        return path

    return _write


@pytest.fixture
def log_messages() -> Iterator[list[str]]:
    """Collect loguru messages emitted during a test.

    Yields:
        List that receives "LEVEL | message" strings as they are logged
    """
    messages: list[str] = []
    handler_id = logger.add(
        lambda msg: messages.append(
            f"{msg.record['level'].name} | {msg.record['message']}"
        ),
        level="DEBUG",
    )
    yield messages
    logger.remove(handler_id)

