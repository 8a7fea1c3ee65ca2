"""Structured Logging - JSON formatter fields and handler setup."""

import json
import logging

from bookstore.infrastructure.observability import JSONFormatter, setup_logging


def _record(**extra) -> logging.LogRecord:
    record = logging.LogRecord(
        "bookstore.test", logging.INFO, __file__, 1, "hello %s", ("world",), None,
    )
    record.__dict__.update(extra)
    return record


def test_json_formatter_includes_base_and_extra_fields():
    payload = json.loads(JSONFormatter().format(
        _record(method="GET", path="/", status_code=200, unrelated="x"),
    ))
    assert payload["message"] == "hello world"
    assert payload["level"] == "INFO"
    assert payload["logger"] == "bookstore.test"
    assert payload["status_code"] == 200
    assert "unrelated" not in payload


def test_setup_logging_does_not_stack_handlers():
    root = logging.getLogger()
    previous_level = root.level
    try:
        setup_logging("DEBUG", "json")
        setup_logging("WARNING", "text")
        ours = [h for h in root.handlers if h.get_name() == "bookstore"]
        assert len(ours) == 1
        assert not isinstance(ours[0].formatter, JSONFormatter)
        assert root.level == logging.WARNING
    finally:
        for handler in [h for h in root.handlers if h.get_name() == "bookstore"]:
            root.removeHandler(handler)
        root.setLevel(previous_level)
