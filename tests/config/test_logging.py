"""Tests for structlog configuration."""

from __future__ import annotations

import json
import logging

import pytest
import structlog

from evalsrv.config.logging import configure_logging


class TestConfigureLogging:
    def test_default_is_info(self) -> None:
        configure_logging()
        assert logging.getLogger("evalsrv").level == logging.INFO
        assert logging.getLogger().level == logging.WARNING

    def test_verbose_enables_debug(self) -> None:
        configure_logging(verbose=True)
        assert logging.getLogger("evalsrv").level == logging.DEBUG

    def test_quiet_sets_warning(self) -> None:
        configure_logging(quiet=True)
        assert logging.getLogger("evalsrv").level == logging.WARNING

    def test_verbose_wins_over_quiet(self) -> None:
        configure_logging(verbose=True, quiet=True)
        assert logging.getLogger("evalsrv").level == logging.DEBUG

    def test_human_mode_output(self) -> None:
        configure_logging(log_json=False)
        log = structlog.get_logger("evalsrv.test")
        log.info("hello world", key="val")
        # Smoke test — verify no exception; format depends on terminal

    def test_json_mode_output(self, capfd: pytest.CaptureFixture[str]) -> None:
        configure_logging(log_json=True)
        log = structlog.get_logger("evalsrv.server.listener")
        log.info("connection_accepted", peer_host="127.0.0.1", peer_port=5000)
        captured = capfd.readouterr()
        parsed = json.loads(captured.err.strip())
        assert parsed["event"] == "connection_accepted"
        assert parsed["peer_port"] == 5000
        assert parsed["level"] == "info"
        assert parsed["logger"] == "evalsrv.server.listener"
        assert "timestamp" in parsed

    def test_quiet_hides_connection_records(self, capfd: pytest.CaptureFixture[str]) -> None:
        configure_logging(quiet=True, log_json=True)
        structlog.get_logger("evalsrv.server.listener").info("connection_accepted")
        assert capfd.readouterr().err == ""

    def test_stdlib_logger_gets_structured_fields(
        self, capfd: pytest.CaptureFixture[str]
    ) -> None:
        configure_logging(verbose=True, log_json=True)

        logging.getLogger("evalsrv.plugins.manager").debug("Registered plugin: probe")

        parsed = json.loads(capfd.readouterr().err.strip())
        assert parsed["event"] == "Registered plugin: probe"
        assert parsed["level"] == "debug"
        assert parsed["logger"] == "evalsrv.plugins.manager"

    def test_third_party_debug_is_suppressed(self, capfd: pytest.CaptureFixture[str]) -> None:
        configure_logging(verbose=True, log_json=True)
        logging.getLogger("somelib").debug("noise")
        assert capfd.readouterr().err == ""

    def test_idempotent_calls(self) -> None:
        """Multiple configure_logging calls don't stack handlers."""
        configure_logging(log_json=False)
        configure_logging(log_json=True)
        assert len(logging.getLogger().handlers) == 1
