"""Tests for the gitgate.logging module."""

from __future__ import annotations

import json
import logging
import os
from unittest.mock import patch

import pytest
import structlog

from gitgate.logging import (
    bind_context,
    clear_context,
    configure_logging,
    get_logger,
)


class TestConfigureLogging:
    """Tests for configure_logging function."""

    def test_configure_logging_custom_level(self) -> None:
        """Test setting custom log level."""
        configure_logging(level=logging.DEBUG)

        assert logging.getLogger().level == logging.DEBUG

    def test_configure_logging_level_from_env(self) -> None:
        """Test log level from GITGATE_LOG_LEVEL env var."""
        with patch.dict(os.environ, {"GITGATE_LOG_LEVEL": "error"}):
            configure_logging()

        assert logging.getLogger().level == logging.ERROR

    def test_unknown_level_falls_back_to_info(self) -> None:
        with patch.dict(os.environ, {"GITGATE_LOG_LEVEL": "chatty"}):
            configure_logging()

        assert logging.getLogger().level == logging.INFO

    def test_single_stderr_handler(self) -> None:
        """Repeated configuration never stacks handlers."""
        configure_logging()
        configure_logging()

        handlers = logging.getLogger().handlers
        assert len(handlers) == 1

    def test_json_output_goes_to_stderr(
        self, capsys: pytest.CaptureFixture[str]
    ) -> None:
        """Diagnostics never reach stdout, which carries JSON-RPC."""
        with patch.dict(os.environ, {"GITGATE_LOG_FORMAT": "json"}):
            configure_logging(level=logging.INFO)

        get_logger("gitgate.test").info("push_started", repo="web-app")

        captured = capsys.readouterr()
        assert captured.out == ""
        record = json.loads(captured.err.strip().splitlines()[-1])
        assert record["event"] == "push_started"
        assert record["repo"] == "web-app"


class TestContextBinding:
    """Tests for per-request context variables."""

    def test_bind_and_clear(self) -> None:
        clear_context()
        bind_context(rpc_method="tools/call", request_id=7)

        assert structlog.contextvars.get_contextvars() == {
            "rpc_method": "tools/call",
            "request_id": 7,
        }

        clear_context()
        assert structlog.contextvars.get_contextvars() == {}

    def test_get_logger_returns_usable_logger(self) -> None:
        log = get_logger(__name__)

        log.debug("test_event", key="value")
