"""Core модули Dintero client: конфигурация, аутентификация, retry, executor."""

from .auth import (
    ApiKeyAuth,
    AuthProvider,
    JwtAuth,
    OAuthAuth,
    create_auth_provider,
)
from .config import (
    API_VERSION,
    ApiKeyAuthConfig,
    AuthConfig,
    ConnectionPoolConfig,
    DinteroConfig,
    Environment,
    JwtAuthConfig,
    OAuthAuthConfig,
    RetryConfig,
)
from .context import RequestContext
from .error_handler import ErrorHandler
from .exceptions import (
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
from .executor import RequestExecutor
from .retry_engine import ClassifiedOutcome, Outcome, RetryEngine
from .token_cache import AsyncRWLock, CachedToken, TokenCache

__all__ = [
    # Config
    "API_VERSION",
    "Environment",
    "RetryConfig",
    "ConnectionPoolConfig",
    "ApiKeyAuthConfig",
    "JwtAuthConfig",
    "OAuthAuthConfig",
    "AuthConfig",
    "DinteroConfig",
    # Auth
    "AuthProvider",
    "ApiKeyAuth",
    "JwtAuth",
    "OAuthAuth",
    "create_auth_provider",
    "TokenCache",
    "CachedToken",
    "AsyncRWLock",
    # Retry
    "RetryEngine",
    "ClassifiedOutcome",
    "Outcome",
    # Core
    "RequestExecutor",
    "ErrorHandler",
    "RequestContext",
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
]
