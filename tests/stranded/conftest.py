"""Shared fixtures for stranded tests."""

from __future__ import annotations

import pytest
from loguru import logger


@pytest.fixture
def log_records():
    """Capture loguru records emitted during the test.

    Each entry is ``(level_name, message)``.
    """
    records: list[tuple[str, str]] = []
    handler_id = logger.add(
        lambda msg: records.append((msg.record["level"].name, msg.record["message"])),
        level="DEBUG",
    )
    yield records
    logger.remove(handler_id)
