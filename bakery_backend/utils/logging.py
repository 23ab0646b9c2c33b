"""
Logging setup shared by the CLI, the GraphQL server and the data-access layer.

Records go to stderr so that `demo` tables printed on stdout stay readable.
Two renderings are available: a one-line console format for local work and a
JSON object per record for log collectors. Structured context is passed the
stdlib way, through `extra=`, and is promoted to top-level JSON keys:

    from bakery_backend.utils.logging import configure_logging, get_logger

    configure_logging(level="DEBUG", json_logs=True)
    log = get_logger(__name__)
    log.info("Inserted bakery", extra={"table": "bakery", "id": 1})
    # {"time": "...", "level": "INFO", ..., "table": "bakery", "id": 1}
"""

from __future__ import annotations

import json
import logging
import logging.config
from typing import Any, Dict, Optional

# Attributes every LogRecord carries; anything else came in through `extra=`.
_RESERVED_ATTRS = frozenset(
    vars(logging.LogRecord("", logging.INFO, "", 0, "", (), None)).keys()
) | {"message", "asctime", "extra"}

# Third-party loggers kept quieter than the application.
_LIBRARY_LEVELS = {
    "psycopg.pool": "WARNING",
    "uvicorn.access": "WARNING",
}

_CONSOLE_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def _json_formatter(record: logging.LogRecord) -> str:
    """Serialize `record` with its `extra=` fields flattened into the object."""
    payload: Dict[str, Any] = {
        "time": logging.Formatter(datefmt=_DATE_FORMAT).formatTime(record, _DATE_FORMAT),
        "level": record.levelname,
        "logger": record.name,
        "message": record.getMessage(),
    }
    payload.update(
        (key, value) for key, value in vars(record).items() if key not in _RESERVED_ATTRS
    )
    # older call sites pass extra={"extra": {...}}
    nested = getattr(record, "extra", None)
    if isinstance(nested, dict):
        payload.update(nested)
    if record.exc_info:
        payload["exc_info"] = logging.Formatter().formatException(record.exc_info)
    if record.stack_info:
        payload["stack_info"] = record.stack_info
    # statements and params may hold non-JSON values (Decimal, Composed, ...)
    return json.dumps(payload, default=str)


class JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:  # type: ignore[override]
        return _json_formatter(record)


def configure_logging(level: str = "INFO", json_logs: bool = False) -> None:
    """
    Install the root handler.

    Parameters
    ----------
    level : str
        Level name, case-insensitive (`LOG_LEVEL`).
    json_logs : bool
        Emit one JSON object per record instead of the console format (`LOG_JSON`).
    """
    level = level.upper()

    logging.config.dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "console": {"format": _CONSOLE_FORMAT, "datefmt": _DATE_FORMAT},
                "json": {"()": JsonFormatter},
            },
            "handlers": {
                "stderr": {
                    "class": "logging.StreamHandler",
                    "stream": "ext://sys.stderr",
                    "formatter": "json" if json_logs else "console",
                    "level": level,
                }
            },
            "root": {"handlers": ["stderr"], "level": level},
            "loggers": {name: {"level": lvl} for name, lvl in _LIBRARY_LEVELS.items()},
        }
    )


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Return the named logger (the root logger when `name` is None)."""
    return logging.getLogger(name)


__all__ = ["configure_logging", "get_logger", "JsonFormatter"]
