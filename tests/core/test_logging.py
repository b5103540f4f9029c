"""Tests for rdao.core.logging - structlog configuration and context binding."""

from __future__ import annotations

import structlog

from rdao.core.logging import (
    LogContext,
    _add_service_metadata,
    _elasticsearch_compatible,
    bind_context,
    clear_context,
    configure_logging,
    get_logger,
    unbind_context,
)


class TestProcessors:
    def test_service_metadata(self):
        event = _add_service_metadata(None, "info", {"event": "x"})
        assert event["service.name"]

    def test_service_metadata_not_overwritten(self):
        event = _add_service_metadata(None, "info", {"event": "x", "service.name": "billing"})
        assert event["service.name"] == "billing"

    def test_elasticsearch_compatible(self):
        event = _elasticsearch_compatible(None, "info", {"timestamp": "t", "level": "info", "event": "x"})
        assert event == {"@timestamp": "t", "log.level": "info", "event": "x"}


class TestConfigureLogging:
    def test_json_configuration(self):
        configure_logging(level="DEBUG", json_format=True, service="rdao-test")
        try:
            assert structlog.is_configured()
            assert _add_service_metadata(None, "info", {})["service.name"] == "rdao-test"
        finally:
            configure_logging(service="rdao")
            structlog.reset_defaults()


class TestContextBinding:
    def test_bind_and_unbind(self):
        clear_context()
        bind_context(connection="reporting")
        assert structlog.contextvars.get_contextvars() == {"connection": "reporting"}
        unbind_context("connection")
        assert structlog.contextvars.get_contextvars() == {}

    def test_log_context(self):
        clear_context()
        with LogContext(job="nightly-export"):
            assert structlog.contextvars.get_contextvars()["job"] == "nightly-export"
        assert "job" not in structlog.contextvars.get_contextvars()

    def test_get_logger(self, log_events):
        get_logger("rdao.test").info("rdao.test.event", answer=42)
        assert log_events[-1]["event"] == "rdao.test.event"
        assert log_events[-1]["answer"] == 42
