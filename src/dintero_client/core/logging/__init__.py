"""
Logging for the Dintero client.

Example:
    >>> from dintero_client.core.logging import LoggingConfig
    >>> config = DinteroConfig.create(
    ...     "T12345678",
    ...     api_key="...",
    ...     logging=LoggingConfig.create(level="DEBUG", format="json"),
    ... )
"""

from .config import LogFormat, LoggingConfig, LogLevel
from .filters import (
    CorrelationIdFilter,
    ExtraFieldsFilter,
    clear_correlation_id,
    correlation_scope,
    get_correlation_id,
    new_correlation_id,
    set_correlation_id,
)
from .formatters import ColoredFormatter, JSONFormatter, TextFormatter, get_formatter
from .handlers import create_console_handler, create_file_handler
from .logger import DEFAULT_LOGGER_NAME, DinteroLogger

__all__ = [
    # Config
    "LoggingConfig",
    "LogLevel",
    "LogFormat",
    # Logger
    "DinteroLogger",
    "DEFAULT_LOGGER_NAME",
    # Formatters
    "JSONFormatter",
    "TextFormatter",
    "ColoredFormatter",
    "get_formatter",
    # Filters
    "CorrelationIdFilter",
    "ExtraFieldsFilter",
    "set_correlation_id",
    "get_correlation_id",
    "clear_correlation_id",
    "new_correlation_id",
    "correlation_scope",
    # Handlers
    "create_console_handler",
    "create_file_handler",
]
