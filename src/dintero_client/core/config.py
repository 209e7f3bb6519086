"""
Система конфигурации для Dintero client.

Все конфиги immutable (frozen dataclasses): executor читает их один раз
при создании и не поддерживает переконфигурацию на лету.
"""

from dataclasses import dataclass, field, replace
from enum import Enum
from types import MappingProxyType
from typing import Dict, Mapping, Optional, Union, TYPE_CHECKING

from .exceptions import ConfigurationError

if TYPE_CHECKING:
    from .logging import LoggingConfig

API_VERSION = "v1"

# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# ENVIRONMENT
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

class Environment(str, Enum):
    """Окружение Dintero API."""
    PRODUCTION = "production"
    TEST = "test"

    @property
    def base_url(self) -> str:
        """Базовый URL окружения (без версии API)."""
        if self is Environment.PRODUCTION:
            return "https://api.dintero.com"
        return "https://api.test.dintero.com"

    @classmethod
    def parse(cls, value: Union[str, "Environment", None]) -> "Environment":
        """
        Распознать окружение из строки.

        "production" и "prod" (без учёта регистра) - production,
        всё остальное - test.

        Examples:
            >>> Environment.parse("PROD")
            <Environment.PRODUCTION: 'production'>
            >>> Environment.parse("staging")
            <Environment.TEST: 'test'>
        """
        if isinstance(value, Environment):
            return value
        if value and value.strip().lower() in ("production", "prod"):
            return cls.PRODUCTION
        return cls.TEST

# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# RETRY CONFIG
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

@dataclass(frozen=True)
class RetryConfig:
    """
    Конфигурация retry стратегии.

    Args:
        max_retries: Количество повторов после первой попытки
            (всего попыток = max_retries + 1)
        initial_backoff_ms: Первая задержка (мс)
        max_backoff_ms: Максимальная задержка (мс)
        backoff_multiplier: Множитель роста задержки

    Backoff детерминированный, без jitter:
        next = min(current * backoff_multiplier, max_backoff_ms)

    Examples:
        >>> RetryConfig(max_retries=5)
        >>> RetryConfig(initial_backoff_ms=250, max_backoff_ms=5_000)
    """
    max_retries: int = 3
    initial_backoff_ms: int = 100
    max_backoff_ms: int = 10_000
    backoff_multiplier: float = 2.0

    def __post_init__(self):
        """Валидация."""
        if self.max_retries < 0:
            raise ConfigurationError("max_retries must be non-negative")
        if self.initial_backoff_ms < 0:
            raise ConfigurationError("initial_backoff_ms must be non-negative")
        if self.max_backoff_ms < self.initial_backoff_ms:
            raise ConfigurationError("max_backoff_ms must be >= initial_backoff_ms")
        if self.backoff_multiplier < 1:
            raise ConfigurationError("backoff_multiplier must be >= 1")

    @property
    def initial_backoff(self) -> float:
        """Первая задержка в секундах."""
        return self.initial_backoff_ms / 1000

    @property
    def max_backoff(self) -> float:
        """Максимальная задержка в секундах."""
        return self.max_backoff_ms / 1000

# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# CONNECTION POOL CONFIG
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

@dataclass(frozen=True)
class ConnectionPoolConfig:
    """
    Конфигурация connection pool (общий для всех запросов клиента).

    Args:
        max_connections: Максимум одновременных соединений
        max_keepalive_connections: Максимум idle keep-alive соединений
    """
    max_connections: int = 100
    max_keepalive_connections: int = 10

    def __post_init__(self):
        """Валидация."""
        if self.max_connections <= 0:
            raise ConfigurationError("max_connections must be positive")
        if self.max_keepalive_connections < 0:
            raise ConfigurationError("max_keepalive_connections must be non-negative")

# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# AUTH CONFIG
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

@dataclass(frozen=True)
class ApiKeyAuthConfig:
    """API key аутентификация (заголовок ``Token <key>``)."""
    api_key: str

    def __repr__(self) -> str:
        return "ApiKeyAuthConfig(api_key='***')"


@dataclass(frozen=True)
class JwtAuthConfig:
    """Фиксированный JWT (заголовок ``Bearer <token>``)."""
    token: str

    def __repr__(self) -> str:
        return "JwtAuthConfig(token='***')"


@dataclass(frozen=True)
class OAuthAuthConfig:
    """
    OAuth2 client credentials.

    Args:
        client_id: OAuth client ID
        client_secret: OAuth client secret
        grant_type: Тип grant (реализован только client_credentials)
        expiry_margin: На сколько секунд раньше считать токен истёкшим
    """
    client_id: str
    client_secret: str
    grant_type: str = "client_credentials"
    expiry_margin: float = 0.0

    def __repr__(self) -> str:
        return (
            f"OAuthAuthConfig(client_id={self.client_id!r}, client_secret='***', "
            f"grant_type={self.grant_type!r})"
        )


AuthConfig = Union[ApiKeyAuthConfig, JwtAuthConfig, OAuthAuthConfig]

# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# MAIN CONFIG
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

@dataclass(frozen=True)
class DinteroConfig:
    """
    Главная конфигурация DinteroClient.

    Args:
        account_id: ID аккаунта Dintero (например "T12345678")
        auth: Конфигурация аутентификации
        environment: Окружение API
        timeout: Таймаут запроса (сек)
        retry: Конфигурация retry
        pool: Конфигурация connection pool
        headers: Дополнительные заголовки для всех запросов
        logging: Конфигурация логирования (None = без логирования)

    Examples:
        >>> config = DinteroConfig("T12345678", ApiKeyAuthConfig("key"))
        >>> config = DinteroConfig.create("T12345678", api_key="key", max_retries=5)
    """
    account_id: str
    auth: Optional[AuthConfig] = None
    environment: Environment = Environment.TEST
    timeout: float = 30.0
    retry: RetryConfig = field(default_factory=RetryConfig)
    pool: ConnectionPoolConfig = field(default_factory=ConnectionPoolConfig)
    headers: Mapping[str, str] = field(default_factory=lambda: MappingProxyType({}))
    logging: Optional['LoggingConfig'] = None

    def __post_init__(self):
        """Валидация и заморозка mutable полей."""
        if isinstance(self.headers, dict):
            object.__setattr__(self, 'headers', MappingProxyType(dict(self.headers)))
        if not isinstance(self.environment, Environment):
            object.__setattr__(self, 'environment', Environment.parse(self.environment))

        if not self.account_id:
            raise ConfigurationError("account_id cannot be empty")
        if self.auth is None:
            raise ConfigurationError("auth configuration required")
        if self.timeout <= 0:
            raise ConfigurationError("timeout must be greater than 0")

    @property
    def base_url(self) -> str:
        """Базовый URL выбранного окружения."""
        return self.environment.base_url

    @classmethod
    def create(
        cls,
        account_id: str,
        *,
        api_key: Optional[str] = None,
        jwt: Optional[str] = None,
        client_id: Optional[str] = None,
        client_secret: Optional[str] = None,
        environment: Union[str, Environment] = Environment.TEST,
        timeout: float = 30.0,
        max_retries: int = 3,
        initial_backoff_ms: int = 100,
        max_backoff_ms: int = 10_000,
        backoff_multiplier: float = 2.0,
        headers: Optional[Dict[str, str]] = None,
        logging: Optional['LoggingConfig'] = None,
    ) -> 'DinteroConfig':
        """
        Удобный конструктор конфигурации.

        Нужно указать ровно один способ аутентификации: ``api_key``,
        ``jwt`` или пару ``client_id``/``client_secret``.

        Raises:
            ConfigurationError: Не указана аутентификация, указано
                несколько способов или параметры невалидны

        Examples:
            >>> DinteroConfig.create("T12345678", api_key="secret")
            >>> DinteroConfig.create(
            ...     "P12345678",
            ...     client_id="id", client_secret="secret",
            ...     environment="production",
            ... )
        """
        candidates = []
        if api_key is not None:
            candidates.append(ApiKeyAuthConfig(api_key))
        if jwt is not None:
            candidates.append(JwtAuthConfig(jwt))
        if client_id is not None or client_secret is not None:
            if not client_id or not client_secret:
                raise ConfigurationError("OAuth requires both client_id and client_secret")
            candidates.append(OAuthAuthConfig(client_id, client_secret))

        if not candidates:
            raise ConfigurationError("auth configuration required")
        if len(candidates) > 1:
            raise ConfigurationError("only one auth method may be configured")

        retry_cfg = RetryConfig(
            max_retries=max_retries,
            initial_backoff_ms=initial_backoff_ms,
            max_backoff_ms=max_backoff_ms,
            backoff_multiplier=backoff_multiplier,
        )

        return cls(
            account_id=account_id,
            auth=candidates[0],
            environment=Environment.parse(environment),
            timeout=timeout,
            retry=retry_cfg,
            headers=headers or {},
            logging=logging,
        )

    def with_retry(self, **changes) -> 'DinteroConfig':
        """
        Создать новый конфиг с изменённым retry.

        Example:
            >>> new_config = config.with_retry(max_retries=0)
        """
        return replace(self, retry=replace(self.retry, **changes))

    def with_environment(self, environment: Union[str, Environment]) -> 'DinteroConfig':
        """Создать новый конфиг с другим окружением."""
        return replace(self, environment=Environment.parse(environment))

    def with_headers(self, headers: Dict[str, str]) -> 'DinteroConfig':
        """
        Создать новый конфиг с дополнительными заголовками.

        Example:
            >>> new_config = config.with_headers({"X-Request-Source": "batch"})
        """
        merged = dict(self.headers)
        merged.update(headers)
        return replace(self, headers=merged)
