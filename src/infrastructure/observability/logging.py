"""structlog setup for the governance engine.

Every entry carries the bound `service` and `component`, the ISO
timestamp, the level and, inside a request or expiry sweep, the
`correlation_id`. Production writes one JSON object per line:

    {"event": "ballot_cast", "service": "VotingSessionService",
     "component": "governance", "correlation_id": "...",
     "level": "info", "timestamp": "2026-03-02T09:00:00Z"}

Any other environment gets the colored console renderer.
"""

import logging
import os
from typing import cast

import structlog
from structlog.typing import Processor

from src.infrastructure.observability.correlation import correlation_id_processor

LOG_LEVEL_ENV = "LOG_LEVEL"
DEFAULT_LOG_LEVEL = "INFO"
PRODUCTION = "production"


def _get_log_level() -> int:
    """Numeric level from LOG_LEVEL; unknown names mean INFO."""
    name = os.getenv(LOG_LEVEL_ENV, DEFAULT_LOG_LEVEL).upper()
    level = logging.getLevelName(name)
    return level if isinstance(level, int) else logging.INFO


def _renderer(environment: str) -> Processor:
    if environment == PRODUCTION:
        return structlog.processors.JSONRenderer(sort_keys=True)
    return structlog.dev.ConsoleRenderer(colors=True)


def configure_structlog(environment: str = PRODUCTION) -> None:
    """Install the processor chain. Called once from the API lifespan."""
    processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        cast(Processor, correlation_id_processor),
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        _renderer(environment),
    ]
    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(_get_log_level()),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger_for_service(
    service_name: str, component: str = "governance"
) -> structlog.BoundLogger:
    return structlog.get_logger().bind(service=service_name, component=component)
