from __future__ import annotations

import json
import logging

from bakery_backend.utils.logging import JsonFormatter, _json_formatter, configure_logging

EXPECTED_ID = 10
EXPECTED_ROWS = 4


def _record(msg: str = "hello") -> logging.LogRecord:
    return logging.LogRecord(
        name="test.logger",
        level=logging.INFO,
        pathname=__file__,
        lineno=1,
        msg=msg,
        args=(),
        exc_info=None,
    )


def test_json_formatter_promotes_standard_extra_fields() -> None:
    record = _record()
    record.id = EXPECTED_ID
    record.table = "bakery"

    payload = json.loads(_json_formatter(record))

    assert "time" in payload
    assert payload["level"] == "INFO"
    assert payload["logger"] == "test.logger"
    assert payload["message"] == "hello"
    assert payload["id"] == EXPECTED_ID
    assert payload["table"] == "bakery"
    assert "pathname" not in payload
    assert "lineno" not in payload


def test_json_formatter_supports_legacy_nested_extra_field() -> None:
    record = _record()
    record.extra = {"rows": EXPECTED_ROWS}

    payload = json.loads(_json_formatter(record))

    assert payload["rows"] == EXPECTED_ROWS


def test_json_formatter_renders_non_json_values_as_strings() -> None:
    record = _record()
    record.statement = object()

    payload = json.loads(JsonFormatter().format(record))

    assert payload["statement"].startswith("<object")


def test_configure_logging_sets_root_level() -> None:
    configure_logging(level="debug", json_logs=True)
    root = logging.getLogger()

    assert root.level == logging.DEBUG
    assert any(isinstance(h.formatter, JsonFormatter) for h in root.handlers)

    configure_logging(level="INFO")
    assert logging.getLogger().level == logging.INFO
