"""
Client logger.

Wraps a stdlib logger, installs handlers/filters from ``LoggingConfig`` and
masks secrets in structured fields before they reach any handler.
"""

import logging
from typing import Any, List, Optional

from ...utils.sanitizer import mask_sensitive_data
from .config import LoggingConfig
from .filters import CorrelationIdFilter, ExtraFieldsFilter
from .formatters import get_formatter
from .handlers import create_console_handler, create_file_handler

DEFAULT_LOGGER_NAME = "dintero_client"


class DinteroLogger:
    """
    Structured logger used by the request executor.

    Handlers are installed on the named stdlib logger, which stops
    propagating to the root logger. Module loggers below the package name
    (``dintero_client.core.auth`` etc.) therefore end up in the same
    handlers.

    There is one logging configuration per process: a new instance replaces
    the handlers of the previous one, and ``close`` detaches only the
    handlers this instance installed.

    Example:
        >>> logger = DinteroLogger(LoggingConfig.create(level="DEBUG", format="json"))
        >>> logger.info("Request completed", method="GET", status_code=200)
    """

    def __init__(self, config: Optional[LoggingConfig] = None, name: str = DEFAULT_LOGGER_NAME):
        self.config = config or LoggingConfig()
        self.name = name
        self._closed = False
        self._handlers: List[logging.Handler] = []

        level = self.config.level.numeric
        self._logger = logging.getLogger(name)
        self._logger.setLevel(level)
        self._logger.propagate = False

        # Re-initialisation replaces handlers of a previous instance
        for handler in self._logger.handlers[:]:
            self._logger.removeHandler(handler)
            handler.close()

        filters = []
        if self.config.enable_correlation_id:
            filters.append(CorrelationIdFilter())
        if self.config.extra_fields:
            filters.append(ExtraFieldsFilter(self.config.extra_fields))

        formatter = get_formatter(self.config.format.value)

        if self.config.enable_console:
            self._handlers.append(create_console_handler(level, formatter, filters))

        if self.config.enable_file and self.config.file_path:
            self._handlers.append(create_file_handler(
                file_path=self.config.file_path,
                level=level,
                formatter=formatter,
                max_bytes=self.config.max_bytes,
                backup_count=self.config.backup_count,
                filters=filters
            ))

        for handler in self._handlers:
            self._logger.addHandler(handler)

    @property
    def logger(self) -> logging.Logger:
        """Underlying stdlib logger."""
        return self._logger

    def _log(self, level: int, message: str, fields: dict, exc_info: bool = False) -> None:
        if self._closed or not self._logger.isEnabledFor(level):
            return
        self._logger.log(level, message, extra=mask_sensitive_data(fields), exc_info=exc_info)

    def debug(self, message: str, **kwargs: Any) -> None:
        self._log(logging.DEBUG, message, kwargs)

    def info(self, message: str, **kwargs: Any) -> None:
        """
        Log info message with extra fields.

        Example:
            >>> logger.info("Request completed", status_code=200, duration_ms=150)
        """
        self._log(logging.INFO, message, kwargs)

    def warning(self, message: str, **kwargs: Any) -> None:
        self._log(logging.WARNING, message, kwargs)

    def error(self, message: str, **kwargs: Any) -> None:
        self._log(logging.ERROR, message, kwargs)

    def exception(self, message: str, **kwargs: Any) -> None:
        """Log error with the active exception's traceback."""
        self._log(logging.ERROR, message, kwargs, exc_info=True)

    def close(self) -> None:
        """
        Flush and detach the handlers installed by this instance.

        Safe to call more than once.
        """
        if self._closed:
            return

        for handler in self._handlers:
            handler.flush()
            handler.close()
            self._logger.removeHandler(handler)
        self._handlers = []

        self._closed = True

    @property
    def closed(self) -> bool:
        return self._closed

    def __enter__(self) -> "DinteroLogger":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False
