"""Audit publisher.

Wraps AuditSinkPort so that every service emits audit events the same way:
one GovernanceEvent envelope per change, bounded by a timeout, and never
allowed to fail the operation that produced it. A sink failure is logged
at error level with the event id so the gap can be reconciled.
"""

from __future__ import annotations

import asyncio
from uuid import UUID

import structlog

from src.application.ports.audit_sink import AuditSinkPort
from src.application.ports.time_authority import TimeAuthorityProtocol
from src.domain.events.governance_event import EventPayload, GovernanceEvent
from src.infrastructure.observability.correlation import get_correlation_id

logger = structlog.get_logger()


class AuditPublisher:
    """Fire-and-forget audit emission with a bounded wait."""

    def __init__(
        self,
        sink: AuditSinkPort,
        time_authority: TimeAuthorityProtocol,
        timeout_seconds: float = 2.0,
    ) -> None:
        self._sink = sink
        self._time = time_authority
        self._timeout_seconds = timeout_seconds

    async def publish(
        self, event_type: str, meeting_id: UUID, payload: EventPayload
    ) -> GovernanceEvent:
        """Build and emit an event. Returns the envelope whether or not delivery succeeded."""
        event = GovernanceEvent.create(
            event_type=event_type,
            meeting_id=meeting_id,
            payload=payload,
            occurred_at=self._time.now(),
            correlation_id=get_correlation_id() or None,
        )
        try:
            await asyncio.wait_for(self._sink.emit(event), timeout=self._timeout_seconds)
        except asyncio.TimeoutError:
            logger.error(
                "audit_emit_timeout",
                event_id=str(event.event_id),
                event_type=event_type,
                timeout_seconds=self._timeout_seconds,
            )
        except Exception as e:
            # Audit is a side channel; the engine's own state is already committed
            logger.error(
                "audit_emit_failed",
                event_id=str(event.event_id),
                event_type=event_type,
                error=str(e),
                error_type=type(e).__name__,
            )
        return event
