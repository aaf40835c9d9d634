"""Logging configuration for the comment notification service.

Two output formats share one record model:
- json: one object per line for log collectors
- key-value: ``timestamp [level] logger: message k=v ...`` for terminals

Fields whose name looks like a credential (smtp_pass, push tokens, API keys)
are masked by both formatters.
"""

import json
import logging
import re
import sys
from datetime import datetime, timezone
from typing import Any, Dict, Iterator, Literal, Tuple

from .context import get_log_context

LogFormat = Literal["json", "key-value"]

SERVICE_NAME = "comment-notify"
MASK = "***"

# Attributes every LogRecord carries; anything else came from ``extra`` or a filter
RESERVED_ATTRS = frozenset(
    vars(logging.LogRecord("", logging.INFO, "", 0, "", (), None))
) | {"message", "asctime", "taskName"}

SECRET_FIELD_PATTERN = re.compile(r"(pass|password|secret|token|key)$", re.IGNORECASE)


def _is_worker_thread(record: logging.LogRecord) -> bool:
    return bool(record.threadName) and record.threadName != "MainThread"


def _extra_fields(record: logging.LogRecord, skip=frozenset()) -> Iterator[Tuple[str, Any]]:
    """Yield the non-standard fields of a record, secrets masked, sorted by name."""
    for key in sorted(record.__dict__):
        if key in RESERVED_ATTRS or key in skip or key.startswith("_"):
            continue
        value = record.__dict__[key]
        if value and SECRET_FIELD_PATTERN.search(key):
            value = MASK
        yield key, value


class ContextualFilter(logging.Filter):
    """Stamps records with the service name, environment and active log context.

    Context fields (request_id, action, comment_id) never overwrite fields
    passed explicitly through ``extra``.
    """

    def __init__(self, service: str = SERVICE_NAME, environment: str = "local"):
        super().__init__()
        self.service = service
        self.environment = environment

    def filter(self, record: logging.LogRecord) -> bool:
        record.service = self.service
        record.environment = self.environment

        for key, value in get_log_context().items():
            if not hasattr(record, key):
                setattr(record, key, value)

        return True


class JSONFormatter(logging.Formatter):
    """One JSON object per line: timestamp, level, logger, message, then extras."""

    def format(self, record: logging.LogRecord) -> str:
        log_obj: Dict[str, Any] = {
            "timestamp": self._format_timestamp(record.created),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if _is_worker_thread(record):
            log_obj["thread_name"] = record.threadName

        for key, value in _extra_fields(record):
            if isinstance(value, datetime):
                value = value.isoformat()
            elif not isinstance(value, (str, int, float, bool, type(None), list, dict)):
                value = str(value)
            log_obj[key] = value

        if record.exc_info:
            log_obj["exc_info"] = self.formatException(record.exc_info)

        return json.dumps(log_obj, ensure_ascii=False, default=str)

    @staticmethod
    def _format_timestamp(created: float) -> str:
        """ISO-8601 UTC with millisecond precision, e.g. 2024-05-01T08:00:00.000Z."""
        dt = datetime.fromtimestamp(created, tz=timezone.utc)
        return dt.strftime("%Y-%m-%dT%H:%M:%S.%f")[:-3] + "Z"


def _format_value(value: Any) -> str:
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, datetime):
        return value.isoformat()
    text = str(value)
    if any(ch in text for ch in ' =,"'):
        return json.dumps(text, ensure_ascii=False)
    return text


class KeyValueFormatter(logging.Formatter):
    """Human-readable formatter.

    Produces: ``timestamp [level] logger: message key1=value1 key2=value2``.
    The service name and environment are left out; they are constant per
    process.
    """

    SKIP_FIELDS = frozenset({"service", "environment"})

    def format(self, record: logging.LogRecord) -> str:
        base = super().format(record)

        extras = [f"{key}={_format_value(value)}" for key, value in _extra_fields(record, self.SKIP_FIELDS)]
        if _is_worker_thread(record):
            extras.append(f"thread_name={record.threadName}")

        if extras:
            return f"{base} {' '.join(extras)}"
        return base


def configure_logging(
    level: str = "INFO",
    format_type: LogFormat = "key-value",
    environment: str = "local",
) -> None:
    """
    Install a single stdout handler on the root logger.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        format_type: 'json' or 'key-value'
        environment: Environment label stamped on every record

    Raises:
        ValueError: If level or format_type is invalid
    """
    numeric_level = logging.getLevelName(level.upper())
    if not isinstance(numeric_level, int):
        raise ValueError(f"Invalid log level: {level}")

    if format_type == "json":
        formatter: logging.Formatter = JSONFormatter()
    elif format_type == "key-value":
        formatter = KeyValueFormatter(
            "%(asctime)s [%(levelname)s] %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
    else:
        raise ValueError(f"Invalid log format: {format_type}. Must be 'json' or 'key-value'")

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(formatter)
    handler.addFilter(ContextualFilter(environment=environment))

    root_logger = logging.getLogger()
    root_logger.setLevel(numeric_level)
    root_logger.handlers.clear()
    root_logger.addHandler(handler)

    # Server logs go through the root handler
    for name in ("uvicorn", "uvicorn.error", "uvicorn.access"):
        server_logger = logging.getLogger(name)
        server_logger.handlers.clear()
        server_logger.propagate = True

    logging.getLogger(__name__).info(
        "Logging configured",
        extra={
            "event": "logging.configured",
            "component": "logging",
            "log_level": level.upper(),
            "log_format": format_type,
        },
    )
