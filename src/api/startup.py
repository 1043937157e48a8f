"""Lifespan startup steps: logging first, then configuration."""

import os

import structlog

from src.config.governance_config import GovernanceConfig
from src.infrastructure.observability import configure_structlog

ENVIRONMENT_VAR = "ENVIRONMENT"
DEFAULT_ENVIRONMENT = "development"

log = structlog.get_logger(component="startup")


def configure_logging() -> str:
    """Configure structlog from ENVIRONMENT and return the environment used.

    "production" gives JSON lines; anything else the console renderer.
    """
    environment = os.getenv(ENVIRONMENT_VAR, DEFAULT_ENVIRONMENT)
    configure_structlog(environment=environment)
    log.info("structured_logging_configured", environment=environment)
    return environment


def validate_governance_config_at_startup() -> GovernanceConfig:
    """Load GovernanceConfig from the environment.

    An out-of-range override aborts startup instead of serving requests
    with a threshold or chain depth nobody asked for.

    Raises:
        ValueError: An override is invalid.
    """
    try:
        config = GovernanceConfig.from_environment()
    except ValueError as e:
        log.critical("governance_config_invalid", error=str(e))
        raise

    log.info("governance_config_loaded", **config.to_log_dict())
    return config
