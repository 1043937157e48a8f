"""Governance engine configuration.

This module defines tunables for the workflow engine, proxy graph and voting
sessions with environment variable overrides.

Environment Variables:
- GOVERNANCE_DEFAULT_PASS_THRESHOLD: Default pass threshold percent (default: 50.0)
- GOVERNANCE_INCLUSIVE_THRESHOLD: "true" compares with >=, "false" with > (default: true)
- GOVERNANCE_MAX_PROXY_CHAIN_DEPTH: Maximum delegation depth, 1..5 (default: 5)
- GOVERNANCE_LOCK_TIMEOUT_SECONDS: Max wait for a per-aggregate lock (default: 10.0)
- GOVERNANCE_AUDIT_TIMEOUT_SECONDS: Max wait for one audit emit (default: 2.0)
- GOVERNANCE_PROXY_SWEEP_INTERVAL_SECONDS: Proxy expiry sweep period (default: 60.0)
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation

from src.domain.models.proxy_grant import MAX_PROXY_CHAIN_DEPTH


def _get_int_env(key: str, default: int) -> int:
    """Get integer environment variable, falling back to default when unset or invalid."""
    value = os.environ.get(key)
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        return default


def _get_float_env(key: str, default: float) -> float:
    """Get float environment variable, falling back to default when unset or invalid."""
    value = os.environ.get(key)
    if value is None:
        return default
    try:
        return float(value)
    except ValueError:
        return default


def _get_decimal_env(key: str, default: Decimal) -> Decimal:
    value = os.environ.get(key)
    if value is None:
        return default
    try:
        return Decimal(value)
    except InvalidOperation:
        return default


def _get_bool_env(key: str, default: bool) -> bool:
    value = os.environ.get(key)
    if value is None:
        return default
    normalized = value.strip().lower()
    if normalized in ("1", "true", "yes", "on"):
        return True
    if normalized in ("0", "false", "no", "off"):
        return False
    return default


@dataclass(frozen=True)
class GovernanceConfig:
    """Configuration for the governance engine.

    Attributes:
        default_pass_threshold_percent: Threshold used when neither the
            session nor the item overrides it.
        inclusive_threshold: When True an item passes at exactly the
            threshold (50% of 10 for/10 against passes).
        max_proxy_chain_depth: Maximum delegation chain depth. Can be
            lowered but never raised above 5.
        lock_timeout_seconds: How long an operation waits for its
            per-aggregate lock before failing with LockTimeoutError.
        audit_timeout_seconds: Upper bound on a single audit emit.
        proxy_sweep_interval_seconds: Period of the proxy expiry worker.
    """

    default_pass_threshold_percent: Decimal = Decimal("50.0")
    inclusive_threshold: bool = True
    max_proxy_chain_depth: int = MAX_PROXY_CHAIN_DEPTH
    lock_timeout_seconds: float = 10.0
    audit_timeout_seconds: float = 2.0
    proxy_sweep_interval_seconds: float = 60.0

    def __post_init__(self) -> None:
        """Validate configuration values."""
        if not Decimal(0) <= self.default_pass_threshold_percent <= Decimal(100):
            raise ValueError(
                "default_pass_threshold_percent must be within 0..100, got "
                f"{self.default_pass_threshold_percent}"
            )
        if not 1 <= self.max_proxy_chain_depth <= MAX_PROXY_CHAIN_DEPTH:
            raise ValueError(
                f"max_proxy_chain_depth must be within 1..{MAX_PROXY_CHAIN_DEPTH}, "
                f"got {self.max_proxy_chain_depth}"
            )
        if self.lock_timeout_seconds <= 0:
            raise ValueError(
                f"lock_timeout_seconds must be positive, got {self.lock_timeout_seconds}"
            )
        if self.audit_timeout_seconds <= 0:
            raise ValueError(
                f"audit_timeout_seconds must be positive, got {self.audit_timeout_seconds}"
            )
        if self.proxy_sweep_interval_seconds <= 0:
            raise ValueError(
                "proxy_sweep_interval_seconds must be positive, got "
                f"{self.proxy_sweep_interval_seconds}"
            )

    def to_log_dict(self) -> dict[str, object]:
        """Values for the startup log line; decimals as strings."""
        return {
            "default_pass_threshold_percent": str(self.default_pass_threshold_percent),
            "inclusive_threshold": self.inclusive_threshold,
            "max_proxy_chain_depth": self.max_proxy_chain_depth,
            "lock_timeout_seconds": self.lock_timeout_seconds,
            "audit_timeout_seconds": self.audit_timeout_seconds,
            "proxy_sweep_interval_seconds": self.proxy_sweep_interval_seconds,
        }

    @classmethod
    def from_environment(cls) -> "GovernanceConfig":
        """Create config from environment variables with defaults.

        Returns:
            GovernanceConfig with values from environment or defaults.
        """
        return cls(
            default_pass_threshold_percent=_get_decimal_env(
                "GOVERNANCE_DEFAULT_PASS_THRESHOLD", Decimal("50.0")
            ),
            inclusive_threshold=_get_bool_env("GOVERNANCE_INCLUSIVE_THRESHOLD", True),
            max_proxy_chain_depth=_get_int_env(
                "GOVERNANCE_MAX_PROXY_CHAIN_DEPTH", MAX_PROXY_CHAIN_DEPTH
            ),
            lock_timeout_seconds=_get_float_env("GOVERNANCE_LOCK_TIMEOUT_SECONDS", 10.0),
            audit_timeout_seconds=_get_float_env("GOVERNANCE_AUDIT_TIMEOUT_SECONDS", 2.0),
            proxy_sweep_interval_seconds=_get_float_env(
                "GOVERNANCE_PROXY_SWEEP_INTERVAL_SECONDS", 60.0
            ),
        )


# Pre-defined configurations

DEFAULT_GOVERNANCE_CONFIG = GovernanceConfig()

# Short timeouts for unit tests
TEST_GOVERNANCE_CONFIG = GovernanceConfig(
    lock_timeout_seconds=1.0,
    audit_timeout_seconds=0.1,
    proxy_sweep_interval_seconds=0.05,
)
