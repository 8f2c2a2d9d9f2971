"""Tests for structured logging and request auditing."""

import json
import logging
from unittest.mock import MagicMock

from pulsemesh_control.common.logging_setup import (
    JsonFormatter,
    ServiceLoggerAdapter,
    log_restart,
)
from pulsemesh_control.dependencies.services import get_restart_runner
from pulsemesh_control.middleware import audit
from pulsemesh_control.middleware.audit import parse_action_from_path
from pulsemesh_control.services.restart_runner import RestartResult


def make_record(**extra) -> logging.LogRecord:
    record = logging.LogRecord("pulsemesh.test", logging.INFO, __file__, 1, "hello %s", ("world",), None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


class TestJsonFormatter:

    def test_core_fields(self):
        data = json.loads(JsonFormatter().format(make_record(service="restart")))
        assert data["message"] == "hello world"
        assert data["level"] == "INFO"
        assert data["service"] == "restart"
        assert data["logger"] == "pulsemesh.test"
        assert "timestamp" in data

    def test_extra_fields_included(self):
        data = json.loads(JsonFormatter().format(make_record(exit_code=1, argv=["a", "b"])))
        assert data["exit_code"] == 1
        assert data["argv"] == ["a", "b"]
        assert "pathname" not in data


class TestServiceLoggerAdapter:

    def test_adds_service_name(self):
        adapter = ServiceLoggerAdapter(logging.getLogger("pulsemesh.adapter-test"), {"service": "api"})
        msg, kwargs = adapter.process("msg", {"extra": {"x": 1}})
        assert kwargs["extra"] == {"x": 1, "service": "api"}


class TestLogRestart:

    def test_success_logs_info(self):
        logger = MagicMock()
        log_restart(logger, 0, [], 12.4)
        logger.info.assert_called_once()
        assert logger.info.call_args.kwargs["extra"] == {"exit_code": 0, "duration_ms": 12}

    def test_failure_logs_error_with_output(self):
        logger = MagicMock()
        log_restart(logger, 1, ["denied"], 5)
        logger.error.assert_called_once()
        assert logger.error.call_args.kwargs["extra"]["output_lines"] == ["denied"]


class TestAuditMiddleware:

    def test_parse_action(self):
        assert parse_action_from_path("/api/restart") == "restart"
        assert parse_action_from_path("/api/service/status") == "service.status"
        assert parse_action_from_path("/health") is None
        assert parse_action_from_path("/api/") is None

    def test_post_is_audited(self, client, monkeypatch):
        fake_logger = MagicMock()
        monkeypatch.setattr(audit, "logger", fake_logger)
        client.app.dependency_overrides[get_restart_runner] = lambda: MagicMock(
            restart=lambda: RestartResult(exit_code=0)
        )

        client.post("/api/restart", headers={"X-Forwarded-For": "10.0.0.7, 172.17.0.1"})

        fake_logger.info.assert_called_once()
        extra = fake_logger.info.call_args.kwargs["extra"]
        assert extra["action"] == "restart"
        assert extra["status_code"] == 200
        assert extra["client"] == "10.0.0.7"

    def test_get_is_not_audited(self, client, monkeypatch):
        fake_logger = MagicMock()
        monkeypatch.setattr(audit, "logger", fake_logger)

        client.get("/api/service/settings-group")

        fake_logger.info.assert_not_called()
