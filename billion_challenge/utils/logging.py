"""
Logging setup shared by the CLI, the orchestrator and the strategies.

Two renderings of the same records are available:

- console (default): one line per event, with any ``extra=`` fields appended
  as ``key=value`` pairs so the bracketed event tags stay readable;
- JSON: one object per line, ``extra=`` fields promoted to top-level keys,
  for CI logs that are parsed afterwards.

Both go to stderr so ``run --json`` keeps stdout clean for the report.

Usage:
    from billion_challenge.utils.logging import configure_logging, get_logger

    configure_logging(level="INFO", json_logs=False)
    log = get_logger(__name__)
    log.info("[RUN 1/5] Simple Loop", extra={"strategy": "simple_loop", "seconds": 0.42})
"""

from __future__ import annotations

import json
import logging
import logging.config
from datetime import datetime, timezone
from typing import Any, Dict, Optional

CONSOLE_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
CONSOLE_DATEFMT = "%Y-%m-%d %H:%M:%S"

# Attributes every LogRecord carries; anything else arrived through `extra=`.
_RESERVED_ATTRS = frozenset(
    logging.LogRecord("", logging.INFO, "", 0, "", (), None).__dict__
) | {"message", "asctime", "taskName"}


def _extra_fields(record: logging.LogRecord) -> Dict[str, Any]:
    fields = {
        key: value
        for key, value in record.__dict__.items()
        if key not in _RESERVED_ATTRS and key != "extra" and not key.startswith("_")
    }
    # `extra={"extra": {...}}` nests one level deeper; flatten it
    nested = getattr(record, "extra", None)
    if isinstance(nested, dict):
        fields.update(nested)
    return fields


def _json_formatter(record: logging.LogRecord) -> str:
    """Serialise a record to one JSON line; non-JSON values fall back to ``str``."""
    payload: Dict[str, Any] = {
        "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
        "level": record.levelname,
        "logger": record.name,
        "message": record.getMessage(),
    }
    payload.update(_extra_fields(record))
    if record.exc_info:
        payload["exc_info"] = logging.Formatter().formatException(record.exc_info)
    if record.stack_info:
        payload["stack_info"] = record.stack_info
    return json.dumps(payload, default=str)


class JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:  # type: ignore[override]
        return _json_formatter(record)


class ConsoleFormatter(logging.Formatter):
    """Human formatter that appends structured fields after the message."""

    def formatMessage(self, record: logging.LogRecord) -> str:  # noqa: N802
        line = super().formatMessage(record)
        fields = _extra_fields(record)
        if not fields:
            return line
        return line + " | " + " ".join(f"{key}={value}" for key, value in fields.items())


def build_logging_config(level: str = "INFO", json_logs: bool = False) -> Dict[str, Any]:
    """Return the `logging.config.dictConfig` mapping for the given options."""
    level = level.upper()
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "console": {
                "()": ConsoleFormatter,
                "fmt": CONSOLE_FORMAT,
                "datefmt": CONSOLE_DATEFMT,
            },
            "json": {"()": JsonFormatter},
        },
        "handlers": {
            "stderr": {
                "class": "logging.StreamHandler",
                "formatter": "json" if json_logs else "console",
                "level": level,
                "stream": "ext://sys.stderr",
            }
        },
        "root": {"handlers": ["stderr"], "level": level},
    }


def configure_logging(level: str = "INFO", json_logs: bool = False) -> None:
    """
    Configure root logging for one CLI invocation.

    Parameters
    ----------
    level : str
        Level name, case-insensitive ("debug", "INFO", ...).
    json_logs : bool
        Emit JSON lines instead of the console format.
    """
    logging.config.dictConfig(build_logging_config(level, json_logs))


def get_logger(name: Optional[str] = None) -> logging.Logger:
    return logging.getLogger(name)


__all__ = [
    "ConsoleFormatter",
    "JsonFormatter",
    "build_logging_config",
    "configure_logging",
    "get_logger",
]
