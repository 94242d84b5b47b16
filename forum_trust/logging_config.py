"""
Logging setup for the trust and moderation engine.

Every record carries the request id and the acting user id, taken from
context variables that ``RequestIdMiddleware`` and the auth dependency set.
Structured fields go through ``extra=`` and are rendered as JSON in
production and as trailing ``key=value`` pairs in development.

Usage:
    from forum_trust.logging_config import get_logger
    logger = get_logger(__name__)
    logger.info("Content quarantined", extra={"content_id": str(cid)})

Do not pass ``request_id`` or ``actor_id`` through ``extra``; they come from
context.
"""

import json
import logging
import sys
from contextvars import ContextVar
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, Optional

request_id_var: ContextVar[Optional[str]] = ContextVar("request_id", default=None)
actor_id_var: ContextVar[Optional[str]] = ContextVar("actor_id", default=None)

CONTEXT_FIELDS = ("request_id", "actor_id")

# Attributes present on every LogRecord; anything else arrived via extra=
_STANDARD_ATTRS = frozenset(vars(logging.LogRecord("", 0, "", 0, "", (), None))) | {
    "message",
    "asctime",
    "taskName",
    *CONTEXT_FIELDS,
}

NOISY_LOGGERS = ("uvicorn.access", "sqlalchemy.engine", "aiosqlite")


def get_request_id() -> Optional[str]:
    return request_id_var.get()


def get_actor_id() -> Optional[str]:
    return actor_id_var.get()


def structured_fields(record: logging.LogRecord) -> Dict[str, Any]:
    """The ``extra=`` fields of a record, in insertion order."""
    return {
        key: value
        for key, value in record.__dict__.items()
        if key not in _STANDARD_ATTRS and value is not None
    }


class ContextFilter(logging.Filter):
    """Stamp request_id and actor_id from context onto every record."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.request_id = get_request_id() or "-"  # type: ignore[attr-defined]
        record.actor_id = get_actor_id() or "-"  # type: ignore[attr-defined]
        return True


class JsonFormatter(logging.Formatter):
    """One JSON object per line for log aggregation."""

    def format(self, record: logging.LogRecord) -> str:
        entry: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for name in CONTEXT_FIELDS:
            value = getattr(record, name, "-")
            if value != "-":
                entry[name] = value
        entry.update(structured_fields(record))
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, default=str)


class ConsoleFormatter(logging.Formatter):
    """Readable single-line format with structured fields appended."""

    def __init__(self):
        super().__init__(
            "%(asctime)s %(levelname)-5s [%(name)s] req=%(request_id)s actor=%(actor_id)s %(message)s",
            datefmt="%H:%M:%S",
        )

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        fields = structured_fields(record)
        if not fields:
            return line
        pairs = " ".join(f"{key}={value}" for key, value in fields.items())
        head, sep, tail = line.partition("\n")
        return f"{head} | {pairs}{sep}{tail}"


def configure_logging(
    *,
    log_level: str = "INFO",
    environment: str = "development",
    debug: bool = False,
    quiet: Iterable[str] = NOISY_LOGGERS,
) -> None:
    """
    Install a single stderr handler on the root logger.

    Args:
        log_level: DEBUG, INFO, WARNING or ERROR
        environment: 'production' selects JSON output
        debug: Force DEBUG regardless of log_level
        quiet: Loggers capped at WARNING
    """
    level = logging.DEBUG if debug else getattr(logging, log_level.upper(), logging.INFO)

    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)
    handler.addFilter(ContextFilter())
    handler.setFormatter(JsonFormatter() if environment == "production" else ConsoleFormatter())

    root = logging.getLogger()
    root.setLevel(level)
    for existing in root.handlers[:]:
        root.removeHandler(existing)
    root.addHandler(handler)

    for name in quiet:
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)
