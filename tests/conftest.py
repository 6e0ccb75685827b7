# tests/conftest.py
"""Shared test fixtures and Hypothesis configuration.

Hypothesis Configuration:
- "ci" profile: Fast tests for CI (100 examples) - default
- "nightly" profile: Thorough tests (1000 examples)
- "debug" profile: Minimal tests with verbose output (10 examples)

Set profile via environment variable:
    HYPOTHESIS_PROFILE=nightly pytest tests/property/
"""

from __future__ import annotations

import os
from datetime import UTC, datetime

import pytest
import structlog
from hypothesis import Phase, Verbosity, settings

from scmpulse.contracts import JobConfiguration, RunContext
from scmpulse.core.tags import parse_tags
from tests.fixtures.telemetry import FakeRun, RecordingSink, StaticHost

# =============================================================================
# Hypothesis Configuration
# =============================================================================

settings.register_profile(
    "ci",
    max_examples=100,
    phases=[Phase.explicit, Phase.reuse, Phase.generate, Phase.shrink],
    deadline=None,  # Disable deadline for CI (timing varies)
)

settings.register_profile(
    "nightly",
    max_examples=1000,
    phases=[Phase.explicit, Phase.reuse, Phase.generate, Phase.shrink],
    deadline=None,
)

settings.register_profile(
    "debug",
    max_examples=10,
    verbosity=Verbosity.verbose,
    phases=[Phase.explicit, Phase.reuse, Phase.generate, Phase.shrink],
    deadline=None,
)

settings.load_profile(os.getenv("HYPOTHESIS_PROFILE", "ci"))


# =============================================================================
# Shared fixtures
# =============================================================================


@pytest.fixture(autouse=True)
def _reset_structlog() -> None:
    """Give every test the default structlog configuration.

    CLI tests call configure_logging(); later capture_logs() assertions need
    a clean slate.
    """
    structlog.reset_defaults()


@pytest.fixture
def started_at() -> datetime:
    """Fixed run start for deterministic payloads."""
    return datetime(2026, 1, 30, 12, 0, 0, tzinfo=UTC)


@pytest.fixture
def run(started_at: datetime) -> FakeRun:
    return FakeRun(
        number=42,
        run_id="42",
        url="https://ci.example.com/job/demo/job/main/42/",
        started_at=started_at,
        environment={"NODE_NAME": "agent-1", "GIT_BRANCH": "origin/main"},
    )


@pytest.fixture
def context(run: FakeRun) -> RunContext:
    return RunContext(job_full_name="demo/main", run=run)


@pytest.fixture
def sink() -> RecordingSink:
    return RecordingSink()


@pytest.fixture
def host() -> StaticHost:
    """Host where the job is tracked, opted in, and has one extra tag."""
    return StaticHost(
        configuration=JobConfiguration(emit_on_checkout=True),
        tracked=True,
        extra_tags=parse_tags(["team:ci"]),
    )
