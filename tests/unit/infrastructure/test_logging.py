"""Unit tests for logging configuration."""

from __future__ import annotations

import json

import pytest
import structlog

from provisioner.infrastructure.observability.logging import redact_secrets, REDACTED, setup_logging


class TestLogging:
    def test_setup_logging_info(self) -> None:
        setup_logging("INFO")  # Should not raise

    def test_setup_logging_console(self) -> None:
        setup_logging("DEBUG", json_logs=False)  # Should not raise

    def test_unknown_level_falls_back(self) -> None:
        setup_logging("CHATTY")  # Should not raise

    def test_renders_json_with_bound_context(self, capsys: pytest.CaptureFixture[str]) -> None:
        setup_logging("INFO")
        logger = structlog.get_logger("test")

        with structlog.contextvars.bound_contextvars(workflow="create", hostname="node42"):
            logger.info("stage_passed", stage="login_details", password="pw-555")

        record = json.loads(capsys.readouterr().out.strip().splitlines()[-1])
        assert record["event"] == "stage_passed"
        assert record["workflow"] == "create"
        assert record["hostname"] == "node42"
        assert record["level"] == "info"
        assert record["password"] == REDACTED


class TestRedactSecrets:
    def test_top_level_and_nested(self) -> None:
        event = {
            "event": "resource_ready",
            "password": "pw",
            "login": {"user": "root", "password": "pw"},
            "resource_id": 555,
        }

        redacted = redact_secrets(None, "info", event)

        assert redacted["password"] == REDACTED
        assert redacted["login"] == {"user": "root", "password": REDACTED}
        assert redacted["resource_id"] == 555
