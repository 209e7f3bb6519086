"""Dintero Client - async SDK for the Dintero payment platform API."""

import logging
from importlib.metadata import PackageNotFoundError, version

from .client import DinteroClient
from .core.auth import ApiKeyAuth, AuthProvider, JwtAuth, OAuthAuth
from .core.config import (
    ConnectionPoolConfig,
    DinteroConfig,
    Environment,
    RetryConfig,
)
from .core.env_config import ConfigFileLoader, load_from_env
from .core.exceptions import (
    APIError,
    AuthError,
    ClientError,
    ConfigurationError,
    ConnectionError,
    DinteroError,
    EmptyResponseError,
    RateLimitedError,
    SerializationError,
    ServerError,
    TimeoutError,
    TransportError,
    ValidationError,
)
from .core.executor import RequestExecutor
from .core.logging import LoggingConfig
from .types import Address, Currency, Metadata, Money, Pagination, PaginationParams

logging.getLogger('dintero_client').addHandler(logging.NullHandler())

try:
    __version__ = version("dintero-client-core")
except PackageNotFoundError:
    # Package is not installed (development mode)
    __version__ = "0.0.0-dev"

__all__ = [
    # Core
    "DinteroClient",
    "RequestExecutor",

    # Config
    "DinteroConfig",
    "Environment",
    "RetryConfig",
    "ConnectionPoolConfig",
    "LoggingConfig",
    "load_from_env",
    "ConfigFileLoader",

    # Auth
    "AuthProvider",
    "ApiKeyAuth",
    "JwtAuth",
    "OAuthAuth",

    # Types
    "Money",
    "Currency",
    "Address",
    "Metadata",
    "Pagination",
    "PaginationParams",

    # Exceptions
    "DinteroError",
    "TransportError",
    "TimeoutError",
    "ConnectionError",
    "RateLimitedError",
    "APIError",
    "ClientError",
    "ServerError",
    "EmptyResponseError",
    "SerializationError",
    "AuthError",
    "ValidationError",
    "ConfigurationError",

    # Version
    "__version__",
]
