"""
Pydantic settings for environment based configuration.
"""

from typing import Literal, Optional

from pydantic import Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class DinteroSettings(BaseSettings):
    """
    Dintero client settings read from ``DINTERO_*`` environment variables.

    Reads from (highest priority first):
    1. Keyword arguments
    2. Environment variables
    3. The ``.env`` file passed as ``_env_file``
    4. Defaults

    Example .env file:
        DINTERO_ACCOUNT_ID=T12345678
        DINTERO_API_KEY=secret-key
        DINTERO_ENVIRONMENT=test
        DINTERO_MAX_RETRIES=5
        DINTERO_LOG_LEVEL=DEBUG

    Usage:
        >>> settings = DinteroSettings(_env_file=".env")
        >>> settings.account_id
        'T12345678'
    """

    model_config = SettingsConfigDict(
        env_prefix='DINTERO_',
        env_file=None,
        env_file_encoding='utf-8',
        case_sensitive=False,
        extra='ignore',
    )

    account_id: Optional[str] = None
    environment: str = Field(default="test")
    timeout: float = Field(default=30.0, gt=0)

    # Credentials (one method)
    api_key: Optional[SecretStr] = None
    jwt: Optional[SecretStr] = None
    client_id: Optional[str] = None
    client_secret: Optional[SecretStr] = None

    # Retry
    max_retries: int = Field(default=3, ge=0)
    initial_backoff_ms: int = Field(default=100, ge=0)
    max_backoff_ms: int = Field(default=10_000, ge=0)
    backoff_multiplier: float = Field(default=2.0, ge=1.0)

    # Logging is enabled when a level or a file path is given
    log_level: Optional[Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]] = None
    log_format: Literal["json", "text", "colored"] = "text"
    log_enable_console: bool = True
    log_file_path: Optional[str] = None

    @field_validator('log_level', mode='before')
    @classmethod
    def normalize_level(cls, v):
        if isinstance(v, str):
            return v.upper()
        return v

    @field_validator('log_format', mode='before')
    @classmethod
    def normalize_format(cls, v):
        if isinstance(v, str):
            return v.lower()
        return v

    @property
    def logging_enabled(self) -> bool:
        return self.log_level is not None or self.log_file_path is not None

    @staticmethod
    def reveal(value: Optional[SecretStr]) -> Optional[str]:
        """Plain value of a secret field."""
        return value.get_secret_value() if value is not None else None
