"""
Configuration file loader for YAML and JSON files.
"""

import json
import os
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml

from ..config import (
    ApiKeyAuthConfig,
    AuthConfig,
    ConnectionPoolConfig,
    DinteroConfig,
    JwtAuthConfig,
    OAuthAuthConfig,
    RetryConfig,
)
from ..exceptions import ConfigurationError
from ..logging import LoggingConfig

CONFIG_FILE_ENV = "DINTERO_CONFIG_FILE"


class ConfigValidationError(ConfigurationError):
    """Raised when a configuration file is invalid."""


class ConfigFileLoader:
    """
    Загрузчик конфигурации из файлов.

    Формат файла (YAML, секция ``dintero`` необязательна)::

        dintero:
          account_id: T12345678
          environment: test
          timeout: 30
          auth:
            client_id: my-client
            client_secret: ...
          retry:
            max_retries: 5
            initial_backoff_ms: 200
          pool:
            max_connections: 50
          logging:
            level: DEBUG
            format: json

    Examples:
        >>> config = ConfigFileLoader.from_yaml("dintero.yaml")
        >>> config = ConfigFileLoader.from_file("dintero.json")  # по расширению
        >>> config = ConfigFileLoader.from_env_path()  # из DINTERO_CONFIG_FILE
    """

    @staticmethod
    def from_yaml(path: Union[str, Path]) -> DinteroConfig:
        """
        Загрузить конфиг из YAML файла.

        Raises:
            FileNotFoundError: Если файл не найден
            ConfigValidationError: Если конфиг невалидный
        """
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {path}")

        try:
            with open(path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigValidationError(f"Invalid YAML syntax in {path}: {e}") from e

        return ConfigFileLoader.build_config(data, str(path))

    @staticmethod
    def from_json(path: Union[str, Path]) -> DinteroConfig:
        """
        Загрузить конфиг из JSON файла.

        Raises:
            FileNotFoundError: Если файл не найден
            ConfigValidationError: Если конфиг невалидный
        """
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {path}")

        try:
            with open(path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            raise ConfigValidationError(f"Invalid JSON syntax in {path}: {e}") from e

        return ConfigFileLoader.build_config(data, str(path))

    @staticmethod
    def from_file(path: Union[str, Path]) -> DinteroConfig:
        """
        Автоопределение формата по расширению (.yaml, .yml, .json).

        Raises:
            ConfigValidationError: Формат не поддерживается или конфиг невалидный
        """
        path = Path(path)
        suffix = path.suffix.lower()

        if suffix in (".yaml", ".yml"):
            return ConfigFileLoader.from_yaml(path)
        if suffix == ".json":
            return ConfigFileLoader.from_json(path)

        raise ConfigValidationError(
            f"Unsupported config file format: {suffix or path.name}. "
            f"Supported formats: .yaml, .yml, .json"
        )

    @staticmethod
    def from_env_path() -> Optional[DinteroConfig]:
        """
        Загрузить из пути в переменной DINTERO_CONFIG_FILE.

        Returns:
            DinteroConfig или None, если переменная не задана
        """
        config_path = os.environ.get(CONFIG_FILE_ENV)
        if not config_path:
            return None
        return ConfigFileLoader.from_file(config_path)

    @staticmethod
    def build_config(data: Any, source: str) -> DinteroConfig:
        """
        Собрать DinteroConfig из распарсенных данных.

        Raises:
            ConfigValidationError: Если конфиг невалидный
        """
        if not data:
            raise ConfigValidationError(f"Empty config file: {source}")

        if isinstance(data, dict) and "dintero" in data:
            data = data["dintero"]

        config_data = _section(data, "config", source)

        try:
            account_id = config_data.get("account_id")
            if not account_id:
                raise ConfigValidationError(f"account_id is required in {source}")

            auth = _build_auth(_section(config_data.get("auth"), "auth", source), source)

            retry_cfg = RetryConfig(**_section(config_data.get("retry", {}), "retry", source))
            pool_cfg = ConnectionPoolConfig(**_section(config_data.get("pool", {}), "pool", source))

            logging_cfg = None
            if "logging" in config_data:
                logging_cfg = LoggingConfig.create(
                    **_section(config_data["logging"], "logging", source)
                )

            headers = _section(config_data.get("headers", {}), "headers", source)

            return DinteroConfig(
                account_id=str(account_id),
                auth=auth,
                environment=config_data.get("environment", "test"),
                timeout=float(config_data.get("timeout", 30.0)),
                retry=retry_cfg,
                pool=pool_cfg,
                headers={str(k): str(v) for k, v in headers.items()},
                logging=logging_cfg,
            )
        except ConfigValidationError:
            raise
        except ConfigurationError as e:
            raise ConfigValidationError(f"Invalid config in {source}: {e.message}") from e
        except (ValueError, TypeError) as e:
            raise ConfigValidationError(f"Invalid config in {source}: {e}") from e


def _section(value: Any, name: str, source: str) -> Dict[str, Any]:
    if not isinstance(value, dict):
        raise ConfigValidationError(
            f"{name} must be a dictionary in {source}, got {type(value).__name__}"
        )
    return value


def _build_auth(data: Dict[str, Any], source: str) -> AuthConfig:
    if "api_key" in data:
        return ApiKeyAuthConfig(str(data["api_key"]))
    if "jwt" in data:
        return JwtAuthConfig(str(data["jwt"]))
    if "client_id" in data or "client_secret" in data:
        if not data.get("client_id") or not data.get("client_secret"):
            raise ConfigValidationError(
                f"auth requires both client_id and client_secret in {source}"
            )
        return OAuthAuthConfig(
            client_id=str(data["client_id"]),
            client_secret=str(data["client_secret"]),
            grant_type=data.get("grant_type", "client_credentials"),
            expiry_margin=float(data.get("expiry_margin", 0.0)),
        )
    raise ConfigValidationError(
        f"auth must contain api_key, jwt or client_id/client_secret in {source}"
    )
