"""
Log formatters: JSON, plain text and ANSI-colored text.
"""

import json
import logging
from datetime import datetime, timezone
from typing import Any, Dict, List

from ..exceptions import ConfigurationError

# Attributes every LogRecord has; anything else came in via ``extra``
_RESERVED = frozenset({
    'name', 'msg', 'args', 'created', 'filename', 'funcName',
    'levelname', 'levelno', 'lineno', 'module', 'msecs',
    'message', 'pathname', 'process', 'processName', 'relativeCreated',
    'thread', 'threadName', 'exc_info', 'exc_text', 'stack_info',
    'taskName', 'asctime',
})


def extra_fields(record: logging.LogRecord) -> Dict[str, Any]:
    """Fields attached to the record beyond the standard attributes."""
    return {
        key: value
        for key, value in record.__dict__.items()
        if key not in _RESERVED and not key.startswith('_')
    }


class JSONFormatter(logging.Formatter):
    """
    One JSON object per record.

    Example output:
        {"timestamp": "2024-01-15T10:30:45.123000+00:00", "level": "INFO",
         "logger": "dintero_client.core.executor", "message": "Request completed",
         "method": "GET", "status_code": 200}
    """

    def format(self, record: logging.LogRecord) -> str:
        log_data: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        log_data.update(extra_fields(record))

        if record.exc_info:
            log_data['exception'] = self.formatException(record.exc_info)

        return json.dumps(log_data, default=str)


class TextFormatter(logging.Formatter):
    """
    ``[timestamp] [level] [logger] message key=value ...``
    """

    def __init__(self):
        super().__init__(
            fmt='[%(asctime)s] [%(levelname)s] [%(name)s] %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )

    def format(self, record: logging.LogRecord) -> str:
        base_msg = super().format(record)
        pairs: List[str] = [f"{key}={value}" for key, value in extra_fields(record).items()]
        if pairs:
            base_msg += " " + " ".join(pairs)
        return base_msg


class ColoredFormatter(TextFormatter):
    """Text formatter with the level name colored for terminals."""

    COLORS = {
        'DEBUG': '\033[36m',
        'INFO': '\033[32m',
        'WARNING': '\033[33m',
        'ERROR': '\033[31m',
        'CRITICAL': '\033[1;31m',
    }
    RESET = '\033[0m'

    def format(self, record: logging.LogRecord) -> str:
        levelname = record.levelname
        color = self.COLORS.get(levelname)
        if color:
            record.levelname = f"{color}{levelname}{self.RESET}"
        try:
            return super().format(record)
        finally:
            record.levelname = levelname


_FORMATTERS = {
    "json": JSONFormatter,
    "text": TextFormatter,
    "colored": ColoredFormatter,
}


def get_formatter(format_type: str) -> logging.Formatter:
    """
    Formatter by name.

    Raises:
        ConfigurationError: Unknown format name
    """
    formatter_class = _FORMATTERS.get(format_type.lower())
    if formatter_class is None:
        raise ConfigurationError(
            f"Unknown format type: {format_type}. "
            f"Available: {', '.join(_FORMATTERS)}"
        )
    return formatter_class()
