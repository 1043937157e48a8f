"""Unit tests for the lifespan startup steps."""

import os
from unittest.mock import patch

import pytest
import structlog

from src.api.startup import configure_logging, validate_governance_config_at_startup


@pytest.fixture(autouse=True)
def _reset_structlog():
    yield
    structlog.reset_defaults()


class TestStartup:
    def test_logging_defaults_to_development(self) -> None:
        with patch.dict(os.environ, {}, clear=True):
            assert configure_logging() == "development"

        processors = structlog.get_config()["processors"]
        assert isinstance(processors[-1], structlog.dev.ConsoleRenderer)

    def test_production_logging_is_json(self) -> None:
        with patch.dict(os.environ, {"ENVIRONMENT": "production"}):
            assert configure_logging() == "production"

        processors = structlog.get_config()["processors"]
        assert isinstance(processors[-1], structlog.processors.JSONRenderer)

    def test_config_loaded_from_environment(self) -> None:
        with patch.dict(os.environ, {"GOVERNANCE_MAX_PROXY_CHAIN_DEPTH": "3"}):
            config = validate_governance_config_at_startup()

        assert config.max_proxy_chain_depth == 3

    def test_invalid_config_aborts_startup(self) -> None:
        with patch.dict(os.environ, {"GOVERNANCE_MAX_PROXY_CHAIN_DEPTH": "9"}):
            with pytest.raises(ValueError, match="max_proxy_chain_depth"):
                validate_governance_config_at_startup()
