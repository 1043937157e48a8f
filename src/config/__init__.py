"""Engine tunables, overridable through GOVERNANCE_* environment variables."""

from src.config.governance_config import (
    DEFAULT_GOVERNANCE_CONFIG,
    TEST_GOVERNANCE_CONFIG,
    GovernanceConfig,
)

__all__ = ["DEFAULT_GOVERNANCE_CONFIG", "GovernanceConfig", "TEST_GOVERNANCE_CONFIG"]
