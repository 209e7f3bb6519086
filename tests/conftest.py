"""
Pytest configuration and fixtures for dintero-client-core tests.
"""

import logging
from typing import List

import pytest

from dintero_client.core.config import DinteroConfig
from dintero_client.core.logging import LoggingConfig


ACCOUNT_ID = "T12345678"
API_BASE = "https://api.test.dintero.com/v1"
ACCOUNT_BASE = f"{API_BASE}/accounts/{ACCOUNT_ID}"


class RecordingSleep:
    """Подменяет asyncio.sleep и запоминает запрошенные задержки."""

    def __init__(self):
        self.calls: List[float] = []

    async def __call__(self, seconds: float) -> None:
        self.calls.append(seconds)


class ListHandler(logging.Handler):
    """Собирает записи логгера в список."""

    def __init__(self):
        super().__init__(level=logging.DEBUG)
        self.records: List[logging.LogRecord] = []

    def emit(self, record: logging.LogRecord) -> None:
        self.records.append(record)

    def messages(self) -> List[str]:
        return [record.getMessage() for record in self.records]

    def attach(self) -> "ListHandler":
        """
        Attach to the ``dintero_client`` logger.

        DinteroLogger replaces handlers when it is created, so call this
        after the executor or client is built.
        """
        logging.getLogger("dintero_client").addHandler(self)
        return self


@pytest.fixture
def account_id():
    """Account id used across tests."""
    return ACCOUNT_ID


@pytest.fixture
def api_base():
    """Versioned test environment base URL."""
    return API_BASE


@pytest.fixture
def account_base():
    """Account scoped base URL."""
    return ACCOUNT_BASE


@pytest.fixture
def config():
    """API key config with the default retry schedule."""
    return DinteroConfig.create(ACCOUNT_ID, api_key="test-key", max_retries=3)


@pytest.fixture
def recording_sleep():
    """Sleep stub that records every requested wait."""
    return RecordingSleep()


@pytest.fixture
def logging_config():
    """
    LoggingConfig fixture for testing.

    Console output is disabled, tests attach their own handler.
    """
    return LoggingConfig.create(level="DEBUG", enable_console=False)


@pytest.fixture
def logging_config_with_file(tmp_path):
    """
    LoggingConfig fixture with file logging enabled.

    Uses temporary directory for log files to avoid cleanup issues.
    """
    log_file = tmp_path / "test.log"
    return LoggingConfig.create(
        level="DEBUG",
        format="json",
        enable_console=False,
        enable_file=True,
        file_path=str(log_file),
    )


@pytest.fixture
def log_records():
    """Record collector, see ``ListHandler.attach``."""
    return ListHandler()


@pytest.fixture(autouse=True)
def restore_client_logger():
    """DinteroLogger reconfigures a process-wide logger, undo it after each test."""
    logger = logging.getLogger("dintero_client")
    handlers = logger.handlers[:]
    level = logger.level
    propagate = logger.propagate
    yield
    for handler in logger.handlers[:]:
        if handler not in handlers:
            logger.removeHandler(handler)
            handler.close()
    for handler in handlers:
        if handler not in logger.handlers:
            logger.addHandler(handler)
    logger.setLevel(level)
    logger.propagate = propagate
