"""
Build DinteroConfig from environment variables and .env files.
"""

from typing import Any, Optional

from pydantic import ValidationError as PydanticValidationError

from ..config import DinteroConfig
from ..exceptions import ConfigurationError
from ..logging.config import LoggingConfig
from .settings import DinteroSettings


def load_settings(env_file: Optional[str] = None, **overrides: Any) -> DinteroSettings:
    """
    Read DinteroSettings.

    Raises:
        ConfigurationError: Unknown override name or invalid value
    """
    unknown = set(overrides) - set(DinteroSettings.model_fields)
    if unknown:
        raise ConfigurationError(f"unknown settings: {', '.join(sorted(unknown))}")

    try:
        return DinteroSettings(_env_file=env_file, **overrides)
    except PydanticValidationError as e:
        raise ConfigurationError(f"invalid environment configuration: {e}") from e


def load_from_env(env_file: Optional[str] = None, **overrides: Any) -> DinteroConfig:
    """
    Load DinteroConfig from ``DINTERO_*`` variables.

    Priority (highest to lowest):
    1. **overrides - explicit parameters (settings field names)
    2. Environment variables
    3. ``env_file``
    4. Defaults

    Args:
        env_file: Optional .env file path
        **overrides: Explicit values, e.g. ``max_retries=0``

    Raises:
        ConfigurationError: Account id or credentials missing, or invalid values

    Example:
        >>> # export DINTERO_ACCOUNT_ID=T12345678 DINTERO_API_KEY=...
        >>> config = load_from_env()
        >>> config = load_from_env(".env.production", environment="production")
    """
    settings = load_settings(env_file, **overrides)

    if not settings.account_id:
        raise ConfigurationError("DINTERO_ACCOUNT_ID not set")

    api_key = DinteroSettings.reveal(settings.api_key)
    jwt = DinteroSettings.reveal(settings.jwt)
    client_secret = DinteroSettings.reveal(settings.client_secret)

    if not (api_key or jwt or settings.client_id or client_secret):
        raise ConfigurationError(
            "DINTERO_API_KEY, DINTERO_JWT or DINTERO_CLIENT_ID/DINTERO_CLIENT_SECRET not set"
        )

    logging_config = None
    if settings.logging_enabled:
        logging_config = LoggingConfig.create(
            level=settings.log_level or "INFO",
            format=settings.log_format,
            enable_console=settings.log_enable_console,
            file_path=settings.log_file_path,
        )

    return DinteroConfig.create(
        settings.account_id,
        api_key=api_key or None,
        jwt=jwt or None,
        client_id=settings.client_id or None,
        client_secret=client_secret or None,
        environment=settings.environment,
        timeout=settings.timeout,
        max_retries=settings.max_retries,
        initial_backoff_ms=settings.initial_backoff_ms,
        max_backoff_ms=settings.max_backoff_ms,
        backoff_multiplier=settings.backoff_multiplier,
        logging=logging_config,
    )
