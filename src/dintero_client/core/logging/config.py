"""
Logging configuration for the Dintero client.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional

from ..exceptions import ConfigurationError


class LogLevel(str, Enum):
    """Log levels."""
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"

    @property
    def numeric(self) -> int:
        """Matching ``logging`` module level."""
        return {
            "DEBUG": 10,
            "INFO": 20,
            "WARNING": 30,
            "ERROR": 40,
            "CRITICAL": 50,
        }[self.value]


class LogFormat(str, Enum):
    """Log output formats."""
    JSON = "json"
    TEXT = "text"
    COLORED = "colored"


@dataclass(frozen=True)
class LoggingConfig:
    """
    Configuration for client logging.

    Attributes:
        level: Minimum level emitted by the client logger
        format: Output format (json, text, colored)
        enable_console: Log to stdout
        enable_file: Log to a rotating file
        file_path: Log file path (required when enable_file=True)
        max_bytes: Size at which the log file rotates (default: 10MB)
        backup_count: Rotated files to keep
        enable_correlation_id: Attach the current correlation id to records
        extra_fields: Static fields added to every record

    Example:
        >>> config = LoggingConfig.create(level="DEBUG", format="json")
    """

    level: LogLevel = LogLevel.INFO
    format: LogFormat = LogFormat.TEXT
    enable_console: bool = True
    enable_file: bool = False
    file_path: Optional[str] = None
    max_bytes: int = 10 * 1024 * 1024  # 10MB
    backup_count: int = 5
    enable_correlation_id: bool = True
    extra_fields: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        if self.enable_file and not self.file_path:
            raise ConfigurationError("file_path is required when enable_file=True")
        if self.max_bytes <= 0:
            raise ConfigurationError("max_bytes must be positive")
        if self.backup_count < 0:
            raise ConfigurationError("backup_count must be non-negative")

    @classmethod
    def create(
        cls,
        level: str = "INFO",
        format: str = "text",
        enable_console: bool = True,
        enable_file: bool = False,
        file_path: Optional[str] = None,
        max_bytes: int = 10 * 1024 * 1024,
        backup_count: int = 5,
        enable_correlation_id: bool = True,
        extra_fields: Optional[Dict[str, Any]] = None
    ) -> "LoggingConfig":
        """
        Create LoggingConfig from string values.

        Raises:
            ConfigurationError: Unknown level or format

        Example:
            >>> LoggingConfig.create(level="debug", format="colored")
        """
        try:
            log_level = LogLevel(level.upper())
            log_format = LogFormat(format.lower())
        except ValueError as e:
            raise ConfigurationError(f"invalid logging configuration: {e}") from e

        return cls(
            level=log_level,
            format=log_format,
            enable_console=enable_console,
            enable_file=enable_file or file_path is not None,
            file_path=file_path,
            max_bytes=max_bytes,
            backup_count=backup_count,
            enable_correlation_id=enable_correlation_id,
            extra_fields=extra_fields or {}
        )
