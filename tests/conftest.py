# tests/conftest.py
"""Shared test fixtures and helpers.

Hypothesis Configuration:
- "ci" profile: Fast tests for CI (100 examples) - default
- "nightly" profile: Thorough tests (1000 examples)
- "debug" profile: Minimal tests with verbose output (10 examples)

Set profile via environment variable:
    HYPOTHESIS_PROFILE=nightly pytest tests/property/
"""

from __future__ import annotations

import logging
import os
from collections.abc import Iterator
from datetime import UTC, datetime

import pytest
import structlog
from hypothesis import Phase, Verbosity, settings

from keepsake.contracts.events import DeploymentSkipped, ReleaseKept, RetentionSummary
from keepsake.core.events import EventBus

# =============================================================================
# Hypothesis Configuration
# =============================================================================

# CI profile: Fast tests for continuous integration
settings.register_profile(
    "ci",
    max_examples=100,
    phases=[Phase.explicit, Phase.reuse, Phase.generate, Phase.shrink],
    deadline=None,  # Timing varies on shared runners
)

# Nightly profile: Thorough testing for scheduled runs
settings.register_profile(
    "nightly",
    max_examples=1000,
    phases=[Phase.explicit, Phase.reuse, Phase.generate, Phase.shrink],
    deadline=None,
)

# Debug profile: Minimal examples with verbose output for debugging
settings.register_profile(
    "debug",
    max_examples=10,
    verbosity=Verbosity.verbose,
    phases=[Phase.explicit, Phase.reuse, Phase.generate, Phase.shrink],
    deadline=None,
)

settings.load_profile(os.getenv("HYPOTHESIS_PROFILE", "ci"))


# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture
def now() -> datetime:
    """Fixed reference time so relative timestamps are reproducible."""
    return datetime(2024, 6, 1, 12, 0, tzinfo=UTC)


class RecordingBus(EventBus):
    """EventBus that records every retention event it sees."""

    def __init__(self) -> None:
        super().__init__()
        self.kept: list[ReleaseKept] = []
        self.skipped: list[DeploymentSkipped] = []
        self.summaries: list[RetentionSummary] = []
        self.subscribe(ReleaseKept, self.kept.append)
        self.subscribe(DeploymentSkipped, self.skipped.append)
        self.subscribe(RetentionSummary, self.summaries.append)


@pytest.fixture
def recording_bus() -> RecordingBus:
    return RecordingBus()


@pytest.fixture(autouse=True)
def _restore_logging() -> Iterator[None]:
    """Undo configure_logging() calls made by a test."""
    root = logging.getLogger()
    handlers = root.handlers[:]
    level = root.level
    yield
    root.handlers = handlers
    root.setLevel(level)
    structlog.reset_defaults()
