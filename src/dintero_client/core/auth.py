# src/dintero_client/core/auth.py
"""
Провайдеры аутентификации.

Закрытый набор вариантов за одним интерфейсом ``get_auth_header()``:
- ApiKeyAuth - ``Token <key>``
- JwtAuth - ``Bearer <token>``
- OAuthAuth - ``Bearer <access_token>`` с кешем и обновлением токена
"""

import logging
from abc import ABC, abstractmethod
from typing import Awaitable, Callable, Optional

import httpx
from pydantic import BaseModel, Field
from pydantic import ValidationError as PydanticValidationError

from .config import (
    API_VERSION,
    ApiKeyAuthConfig,
    AuthConfig,
    DinteroConfig,
    JwtAuthConfig,
    OAuthAuthConfig,
)
from .exceptions import AuthError, ConfigurationError
from .token_cache import CachedToken, TokenCache

logger = logging.getLogger(__name__)

CLIENT_CREDENTIALS = "client_credentials"

TokenFetcher = Callable[[], Awaitable[CachedToken]]


class AuthProvider(ABC):
    """Источник значения заголовка Authorization."""

    @abstractmethod
    async def get_auth_header(self) -> str:
        """
        Вернуть значение заголовка Authorization.

        Может вызываться конкурентно из нескольких запросов.

        Raises:
            AuthError: Провайдер не смог получить учётные данные
        """

    async def aclose(self) -> None:
        """Освободить ресурсы провайдера."""


class ApiKeyAuth(AuthProvider):
    """Аутентификация по API ключу"""

    def __init__(self, api_key: str):
        self._api_key = api_key

    async def get_auth_header(self) -> str:
        return f"Token {self._api_key}"

    def __repr__(self) -> str:
        return "ApiKeyAuth(api_key='***')"


class JwtAuth(AuthProvider):
    """Фиксированный JWT токен"""

    def __init__(self, token: str):
        self._token = token

    async def get_auth_header(self) -> str:
        return f"Bearer {self._token}"

    def __repr__(self) -> str:
        return "JwtAuth(token='***')"


class TokenResponse(BaseModel):
    """Ответ token endpoint."""

    access_token: str = Field(min_length=1)
    token_type: str = "Bearer"
    expires_in: float


class OAuthAuth(AuthProvider):
    """
    OAuth2 client credentials с кешированием токена.

    Токен хранится в собственном TokenCache; конкурентные вызовы при
    пустом кеше приводят ровно к одному обмену.

    Args:
        client_id: OAuth client ID
        client_secret: OAuth client secret
        token_url: URL token endpoint
        audience: Audience для client_credentials
        grant_type: Тип grant (реализован только client_credentials)
        expiry_margin: На сколько секунд раньше считать токен истёкшим
        timeout: Таймаут обмена (сек)
        cache: TokenCache (по умолчанию создаётся свой)
        token_fetcher: Своя корутина обмена вместо HTTP запроса
        http_client: httpx.AsyncClient для обмена (по умолчанию свой)

    Example:
        >>> auth = OAuthAuth(
        ...     "client-id", "client-secret",
        ...     token_url="https://api.test.dintero.com/v1/accounts/T123/auth/token",
        ...     audience="https://api.test.dintero.com/v1/accounts/T123",
        ... )
        >>> await auth.get_auth_header()
        'Bearer eyJ...'
    """

    def __init__(
        self,
        client_id: str,
        client_secret: str,
        *,
        token_url: Optional[str] = None,
        audience: Optional[str] = None,
        grant_type: str = CLIENT_CREDENTIALS,
        expiry_margin: float = 0.0,
        timeout: float = 30.0,
        cache: Optional[TokenCache] = None,
        token_fetcher: Optional[TokenFetcher] = None,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        self.client_id = client_id
        self._client_secret = client_secret
        self.token_url = token_url
        self.audience = audience
        self.grant_type = grant_type
        self.expiry_margin = expiry_margin
        self._timeout = timeout
        self._cache = cache if cache is not None else TokenCache()
        self._token_fetcher = token_fetcher
        self._http_client = http_client
        self._owns_client = http_client is None

    @property
    def cache(self) -> TokenCache:
        """Кеш токена этого провайдера."""
        return self._cache

    async def get_auth_header(self) -> str:
        token = await self._cache.get_or_refresh(self._fetch)
        return f"Bearer {token.access_token}"

    async def invalidate(self) -> None:
        """Сбросить кешированный токен (следующий вызов сделает обмен)."""
        await self._cache.invalidate()

    async def _fetch(self) -> CachedToken:
        if self._token_fetcher is not None:
            try:
                token = await self._token_fetcher()
            except AuthError:
                raise
            except Exception as e:
                raise AuthError(f"token fetch failed: {e}") from e
        else:
            token = await self._exchange()

        if not token.is_valid(self._cache.now()):
            raise AuthError("token endpoint returned an already expired token")
        return token

    async def _exchange(self) -> CachedToken:
        """Обмен client credentials на access token."""
        if self.grant_type != CLIENT_CREDENTIALS:
            raise AuthError(
                f"OAuth token exchange not implemented for grant type '{self.grant_type}'"
            )
        if not self.token_url:
            raise AuthError("OAuth token URL is not configured")

        payload = {"grant_type": self.grant_type}
        if self.audience:
            payload["audience"] = self.audience

        client = self._get_client()
        try:
            response = await client.post(
                self.token_url,
                json=payload,
                auth=(self.client_id, self._client_secret),
                headers={"Accept": "application/json"},
            )
        except httpx.HTTPError as e:
            raise AuthError(f"token request failed: {e}") from e

        if not response.is_success:
            raise AuthError(
                f"token endpoint returned HTTP {response.status_code}: {response.text[:200]}"
            )

        try:
            data = TokenResponse.model_validate_json(response.content)
        except PydanticValidationError as e:
            raise AuthError(f"invalid token response: {e}") from e

        logger.debug(
            "OAuth token obtained for client %s, expires in %ss",
            self.client_id,
            data.expires_in,
        )

        lifetime = data.expires_in - self.expiry_margin
        return CachedToken(
            access_token=data.access_token,
            expires_at=self._cache.now() + lifetime,
        )

    def _get_client(self) -> httpx.AsyncClient:
        if self._http_client is None:
            self._http_client = httpx.AsyncClient(timeout=self._timeout)
        return self._http_client

    async def aclose(self) -> None:
        if self._http_client is not None and self._owns_client:
            await self._http_client.aclose()
            self._http_client = None

    def __repr__(self) -> str:
        return f"OAuthAuth(client_id={self.client_id!r}, grant_type={self.grant_type!r})"


def create_auth_provider(config: DinteroConfig) -> AuthProvider:
    """
    Создать провайдер аутентификации по конфигурации.

    Вариант выбирается один раз, при сборке клиента.

    Raises:
        ConfigurationError: Неизвестный тип auth конфигурации
    """
    auth: Optional[AuthConfig] = config.auth

    if isinstance(auth, ApiKeyAuthConfig):
        return ApiKeyAuth(auth.api_key)

    if isinstance(auth, JwtAuthConfig):
        return JwtAuth(auth.token)

    if isinstance(auth, OAuthAuthConfig):
        audience = f"{config.base_url}/{API_VERSION}/accounts/{config.account_id}"
        return OAuthAuth(
            auth.client_id,
            auth.client_secret,
            token_url=f"{audience}/auth/token",
            audience=audience,
            grant_type=auth.grant_type,
            expiry_margin=auth.expiry_margin,
            timeout=config.timeout,
        )

    raise ConfigurationError(f"unsupported auth configuration: {type(auth).__name__}")
