# File: /tests/test_logging.py | Version: 1.0 | Title: Logging configuration
import json
import logging

from gridbase.core.logging import JsonConsole, configure_logging


def test_json_formatter_includes_logger_and_message():
    record = logging.LogRecord("gridbase.test", logging.WARNING, __file__, 1, "hello %s", ("world",), None)
    payload = json.loads(JsonConsole().format(record))
    assert payload == {"level": "WARNING", "logger": "gridbase.test", "message": "hello world"}


def test_index_logger_level_is_configurable(monkeypatch):
    monkeypatch.setenv("INDEX_LOG_LEVEL", "error")
    configure_logging()
    assert logging.getLogger("gridbase.db.indexes").level == logging.ERROR
    monkeypatch.delenv("INDEX_LOG_LEVEL")
    configure_logging()
