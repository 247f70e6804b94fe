"""
Tests for environment configuration and logging setup.
"""

import logging

import pytest

from evsource.config import DEFAULT_LOG_PATH, EngineConfig
from evsource.logging_config import TraceIDFilter, get_logger, setup_logging


def test_defaults(monkeypatch):
    for key in ("EVSOURCE_LOG_PATH", "EVSOURCE_UNHANDLED_POLICY", "EVSOURCE_CLOSED_POLICY"):
        monkeypatch.delenv(key, raising=False)

    config = EngineConfig.from_env()

    assert config.log_path == DEFAULT_LOG_PATH
    assert config.unhandled_policy == "log"
    assert config.closed_policy == "unhandled"


def test_env_overrides(monkeypatch):
    monkeypatch.setenv("EVSOURCE_LOG_PATH", "/data/events.log")
    monkeypatch.setenv("EVSOURCE_UNHANDLED_POLICY", "RAISE")
    monkeypatch.setenv("EVSOURCE_CLOSED_POLICY", "reject")

    config = EngineConfig.from_env()

    assert config == EngineConfig("/data/events.log", "raise", "reject")


def test_invalid_env_value(monkeypatch):
    monkeypatch.setenv("EVSOURCE_CLOSED_POLICY", "explode")

    with pytest.raises(ValueError):
        EngineConfig.from_env()


def test_invalid_direct_value():
    with pytest.raises(ValueError):
        EngineConfig(unhandled_policy="ignore")


def test_logger_adapter_carries_trace_id():
    logger = get_logger("evsource.test", trace_id="Account|acc-1")

    assert logger.extra == {"trace_id": "Account|acc-1"}
    assert get_logger("evsource.test").extra == {"trace_id": "N/A"}


def test_trace_id_filter_fills_missing():
    record = logging.LogRecord("x", logging.INFO, __file__, 1, "msg", None, None)

    assert TraceIDFilter().filter(record)
    assert record.trace_id == "N/A"


def test_setup_logging_json_and_text():
    root = logging.getLogger()
    saved_handlers, saved_level = root.handlers[:], root.level
    try:
        setup_logging(level="debug", log_format="json")
        assert root.level == logging.DEBUG
        assert len(root.handlers) == 1
        assert type(root.handlers[0].formatter).__name__ == "JsonFormatter"

        setup_logging(level="WARNING", log_format="text")
        assert root.level == logging.WARNING
        assert type(root.handlers[0].formatter) is logging.Formatter
    finally:
        root.handlers[:] = saved_handlers
        root.setLevel(saved_level)
