"""Shared pytest configuration and fixtures.

This module provides global fixtures and configuration that are available
to all tests in the test suite.

Fixtures defined here are automatically available to all tests without explicit
import statements. Keep fixtures small, composable, and focused on setup/teardown.
Do NOT put business logic in fixtures.
"""

import logging
from collections.abc import Iterator

import pytest


@pytest.fixture(autouse=True)
def _reset_launcher_logger() -> Iterator[None]:
    """Let caplog see launcher records even after a CLI test ran dictConfig."""
    root = logging.getLogger()
    root_handlers, root_level = list(root.handlers), root.level
    yield
    root.handlers[:] = root_handlers
    root.setLevel(root_level)
    launcher_logger = logging.getLogger("backup_launcher")
    launcher_logger.handlers.clear()
    launcher_logger.propagate = True
    launcher_logger.setLevel(logging.NOTSET)
