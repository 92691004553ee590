"""Tests for guardian logging utilities."""

from __future__ import annotations

import http.client
import io
import logging
import sys

import pytest
import structlog

from guardian.logging import (
    add_log_level,
    configure_logging,
    cycle_context,
    enable_network_debug,
    get_logger,
)


class TestAddLogLevel:
    def test_warn_translated(self) -> None:
        assert add_log_level(None, "warn", {})["level"] == "warning"

    def test_other_levels_passed_through(self) -> None:
        assert add_log_level(None, "info", {})["level"] == "info"


class TestConfigureLogging:
    def test_json_output(self, capsys: pytest.CaptureFixture[str]) -> None:
        configure_logging(level="INFO", json_output=True)
        get_logger("test").info("keepalive_cycle_started", cycle=3)
        err = capsys.readouterr().err
        assert '"event": "keepalive_cycle_started"' in err
        assert '"cycle": 3' in err
        assert '"level": "info"' in err

    def test_level_filters_lower_events(self, capsys: pytest.CaptureFixture[str]) -> None:
        configure_logging(level="WARNING", json_output=True)
        get_logger("test").info("hidden_event")
        get_logger("test").warning("shown_event")
        err = capsys.readouterr().err
        assert "hidden_event" not in err
        assert "shown_event" in err

    def test_follows_replaced_stderr(self, monkeypatch: pytest.MonkeyPatch) -> None:
        configure_logging(level="WARNING", json_output=True)
        redirected = io.StringIO()
        monkeypatch.setattr(sys, "stderr", redirected)

        get_logger("test").warning("keepalive_cycle_failed", status_code=401)

        assert "keepalive_cycle_failed" in redirected.getvalue()


class TestCycleContext:
    def test_binds_cycle_fields(self, capsys: pytest.CaptureFixture[str]) -> None:
        configure_logging(level="INFO", json_output=True)
        with cycle_context(7, "https://api.example.com"):
            get_logger("test").info("inside")
        get_logger("test").info("outside")
        inside, outside = capsys.readouterr().err.strip().splitlines()
        assert '"cycle": 7' in inside
        assert '"base_url": "https://api.example.com"' in inside
        assert "cycle" not in outside

    def test_unbinds_on_exception(self) -> None:
        with pytest.raises(RuntimeError), cycle_context(1):
            raise RuntimeError("boom")
        assert "cycle" not in structlog.contextvars.get_contextvars()


class TestEnableNetworkDebug:
    def test_turns_on_wire_logging(self) -> None:
        urllib3_logger = logging.getLogger("urllib3")
        previous = (
            http.client.HTTPConnection.debuglevel,
            urllib3_logger.level,
            list(urllib3_logger.handlers),
            urllib3_logger.propagate,
        )
        try:
            enable_network_debug()
            assert http.client.HTTPConnection.debuglevel == 1
            assert urllib3_logger.level == logging.DEBUG
            assert urllib3_logger.handlers
        finally:
            http.client.HTTPConnection.debuglevel = previous[0]
            urllib3_logger.setLevel(previous[1])
            urllib3_logger.handlers[:] = previous[2]
            urllib3_logger.propagate = previous[3]
