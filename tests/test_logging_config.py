"""Tests for structured logging configuration."""

from __future__ import annotations

import json
import logging
import sys

from core.logging_config import (
    JSONFormatter,
    bind_log_context,
    current_log_context,
    get_logger,
    get_request_id,
    new_request_id,
    reset_log_context,
    setup_logging,
)


def _record(msg="hello %s", args=("world",), exc_info=None, level=logging.INFO):
    return logging.LogRecord(
        name="test", level=level, pathname="test.py",
        lineno=1, msg=msg, args=args, exc_info=exc_info
    )


def test_json_formatter_outputs_valid_json():
    parsed = json.loads(JSONFormatter().format(_record()))
    assert parsed["message"] == "hello world"
    assert parsed["level"] == "INFO"
    assert parsed["logger"] == "test"
    assert "timestamp" in parsed
    assert "request_id" not in parsed


def test_json_formatter_includes_exception():
    try:
        raise ValueError("test error")
    except ValueError:
        exc_info = sys.exc_info()
    parsed = json.loads(JSONFormatter().format(_record("fail", (), exc_info, logging.ERROR)))
    assert parsed["exception"]["type"] == "ValueError"
    assert parsed["exception"]["message"] == "test error"


def test_json_formatter_collects_ctx_extras():
    record = _record()
    record.ctx_week = 3
    record.ctx_days = ["Monday"]
    record.unrelated = "skip"
    parsed = json.loads(JSONFormatter().format(record))
    assert parsed["context"] == {"ctx_week": 3, "ctx_days": ["Monday"]}


def test_json_formatter_includes_bound_context():
    outer = bind_log_context(request_id="req-42")
    try:
        inner = bind_log_context(user_id="u1", plan_id=None)
        try:
            assert get_request_id() == "req-42"
            assert current_log_context() == {"request_id": "req-42", "user_id": "u1"}
            parsed = json.loads(JSONFormatter().format(_record()))
        finally:
            reset_log_context(inner)
        assert current_log_context() == {"request_id": "req-42"}
    finally:
        reset_log_context(outer)
    assert parsed["request_id"] == "req-42"
    assert parsed["user_id"] == "u1"
    assert "plan_id" not in parsed
    assert get_request_id() is None


def test_new_request_ids_are_unique():
    assert new_request_id() != new_request_id()


def test_get_logger_returns_named_logger():
    log = get_logger("my.module")
    assert log.name == "my.module"
    assert isinstance(log, logging.Logger)


def test_setup_logging_idempotent():
    root = logging.getLogger()
    initial_count = len(root.handlers)
    setup_logging()
    setup_logging()
    # Should not add duplicate handlers
    assert len(root.handlers) <= initial_count + 1
