"""
Load client configuration from environment variables, .env and config files.

Example:
    >>> from dintero_client.core.env_config import load_from_env
    >>> config = load_from_env()
    >>> config = load_from_env(".env.test", max_retries=0)
"""

from .file_loader import ConfigFileLoader, ConfigValidationError
from .loader import load_from_env, load_settings
from .settings import DinteroSettings

__all__ = [
    "load_from_env",
    "load_settings",
    "DinteroSettings",
    "ConfigFileLoader",
    "ConfigValidationError",
]
