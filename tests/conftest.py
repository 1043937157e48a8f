"""Shared fixtures.

Async tests run under pytest-asyncio in auto mode (see pyproject.toml).
Every test gets its own frozen clock and its own in-memory stores, so no
state leaks between tests.
"""

import pytest

from tests.helpers.fake_time_authority import FakeTimeAuthority
from tests.helpers.governance_harness import GovernanceHarness


@pytest.fixture
def project_version() -> str:
    from src import __version__

    return __version__


@pytest.fixture
def fake_time() -> FakeTimeAuthority:
    return FakeTimeAuthority()


@pytest.fixture
def harness(fake_time: FakeTimeAuthority) -> GovernanceHarness:
    """RoleRegistry, ProxyGraph, WorkflowEngine, VotingSession and
    ResolutionRegistry services wired onto fresh stubs and `fake_time`."""
    return GovernanceHarness(time=fake_time)
