"""Test helpers for the meeting governance tests.

Helpers:
    FakeTimeAuthority: Controllable time authority for deterministic tests
    GovernanceHarness: Every governance service wired onto in-memory stubs
"""

from tests.helpers.fake_time_authority import FakeTimeAuthority
from tests.helpers.governance_harness import GovernanceHarness

__all__ = ["FakeTimeAuthority", "GovernanceHarness"]
