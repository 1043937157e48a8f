"""Structured logging shared by the governance services.

Every service logs through a structlog logger bound with its class name,
and every public operation derives a child logger carrying the operation
name, the request correlation id and the aggregate ids it touches:

    class WorkflowEngineService(LoggingMixin):
        def __init__(self, ...) -> None:
            ...
            self._init_logger()

        async def advance(self, instance_id: UUID, requested_by: str) -> ...:
            log = self._log_operation("advance", instance_id=instance_id)
            log.info("stage_advance_requested")
"""

from uuid import UUID

import structlog

from src.infrastructure.observability.correlation import get_correlation_id


def _loggable(value: object) -> object:
    return str(value) if isinstance(value, UUID) else value


class LoggingMixin:
    """Mixin giving a service `_log` and per-operation child loggers.

    Attributes:
        _log: Logger bound with `service` and `component`.
    """

    _log: structlog.BoundLogger

    def _init_logger(self, component: str = "governance") -> None:
        """Bind the service logger. Call at the end of __init__."""
        self._log = structlog.get_logger().bind(
            service=type(self).__name__,
            component=component,
        )

    def _log_operation(self, operation: str, **context: object) -> structlog.BoundLogger:
        """Return a logger scoped to one operation.

        UUID values are rendered as strings and None values are dropped,
        so callers can pass aggregate ids straight through.
        """
        bound = {k: _loggable(v) for k, v in context.items() if v is not None}
        correlation_id = get_correlation_id()
        if correlation_id:
            bound["correlation_id"] = correlation_id
        return self._log.bind(operation=operation, **bound)
