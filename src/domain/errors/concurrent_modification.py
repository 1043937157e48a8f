"""Concurrency errors for optimistic locking and keyed serialization.

Aggregates that are mutated by several participants at once (workflow
instances, voting sessions, proxy grant sets) are written with an expected
version. A mismatch means another writer got there first.
"""

from __future__ import annotations

from uuid import UUID

from src.domain.exceptions import GovernanceError


class ConcurrentModificationError(GovernanceError):
    """Raised when a compare-and-swap write fails due to a concurrent writer.

    This is a recoverable error - the caller should re-read the aggregate
    and decide whether to retry or abort.

    Attributes:
        aggregate: Name of the aggregate type (e.g. "workflow_instance").
        aggregate_id: Identity of the aggregate being written.
        expected_version: Version the writer read before mutating.
        actual_version: Version currently stored.
    """

    kind = "ConcurrentModification"
    title = "Concurrent Modification"
    http_status = 409
    invariant = "aggregate writes are serialized by version"

    def __init__(
        self,
        aggregate: str,
        aggregate_id: UUID,
        expected_version: int,
        actual_version: int,
    ) -> None:
        self.aggregate = aggregate
        self.aggregate_id = aggregate_id
        self.expected_version = expected_version
        self.actual_version = actual_version
        super().__init__(
            f"Concurrent modification detected for {aggregate} {aggregate_id}. "
            f"Expected version {expected_version}, found {actual_version}."
        )


class LockTimeoutError(GovernanceError):
    """Raised when a keyed lock cannot be acquired within the configured timeout.

    HTTP Status: 503 Service Unavailable (caller retries with backoff)
    """

    kind = "LockTimeout"
    title = "Resource Busy"
    http_status = 503
    invariant = "no operation blocks indefinitely"

    def __init__(self, key: str, timeout_seconds: float) -> None:
        self.key = key
        self.timeout_seconds = timeout_seconds
        super().__init__(
            f"Timed out after {timeout_seconds}s waiting for lock on {key}"
        )
