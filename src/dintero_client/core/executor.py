# src/dintero_client/core/executor.py
"""
Исполнитель запросов к Dintero API на базе httpx.

Собирает запрос, подставляет Authorization, выполняет его с retry
(429 / 5xx / таймауты), классифицирует итог и декодирует тело ответа.
"""

import asyncio
import logging
from functools import lru_cache
from typing import Any, Dict, Mapping, Optional, Type, TypeVar

import httpx
from pydantic import TypeAdapter

from .auth import AuthProvider
from .config import API_VERSION, DinteroConfig
from .context import RequestContext
from .error_handler import ErrorHandler, response_url
from .exceptions import (
    DinteroError,
    EmptyResponseError,
    SerializationError,
    ValidationError,
)
from .logging import DinteroLogger, correlation_scope
from .retry_engine import (
    ClassifiedOutcome,
    Outcome,
    RetryEngine,
    Sleep,
    classify_exception,
    classify_response,
)

T = TypeVar("T")

Params = Optional[Mapping[str, Any]]

JSON_CONTENT_TYPE = "application/json"


@lru_cache(maxsize=256)
def _type_adapter(model: Any) -> TypeAdapter:
    return TypeAdapter(model)


class RequestExecutor:
    """
    Ядро HTTP клиента: отправка, retry, аутентификация, декодирование.

    Один экземпляр обслуживает все ресурсы клиента и делит между ними
    пул соединений httpx. Состояние retry создаётся заново на каждый
    логический запрос.

    Args:
        config: Конфигурация клиента (читается один раз)
        auth: Провайдер Authorization
        client: Готовый httpx.AsyncClient (по умолчанию создаётся свой)
        sleep: Корутина ожидания между попытками (по умолчанию asyncio.sleep)

    Example:
        >>> async with RequestExecutor(config, ApiKeyAuth("key")) as executor:
        ...     session = await executor.get_json(
        ...         "checkout/sessions/T123.abc", response_model=dict
        ...     )
    """

    def __init__(
        self,
        config: DinteroConfig,
        auth: AuthProvider,
        *,
        client: Optional[httpx.AsyncClient] = None,
        sleep: Optional[Sleep] = None,
    ):
        self._config = config
        self._auth = auth
        self._sleep: Sleep = sleep if sleep is not None else asyncio.sleep
        self._client = client
        self._owns_client = client is None
        self._log: Optional[DinteroLogger] = (
            DinteroLogger(config.logging) if config.logging is not None else None
        )

    @property
    def config(self) -> DinteroConfig:
        return self._config

    @property
    def auth(self) -> AuthProvider:
        return self._auth

    @property
    def base_url(self) -> str:
        """Базовый URL с версией API."""
        return f"{self._config.base_url}/{API_VERSION}"

    def _get_client(self) -> httpx.AsyncClient:
        """Получить или создать httpx клиент."""
        if self._client is None:
            pool = self._config.pool
            self._client = httpx.AsyncClient(
                timeout=httpx.Timeout(self._config.timeout),
                limits=httpx.Limits(
                    max_connections=pool.max_connections,
                    max_keepalive_connections=pool.max_keepalive_connections,
                ),
            )
        return self._client

    async def __aenter__(self) -> "RequestExecutor":
        self._get_client()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Закрыть клиент и освободить ресурсы."""
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None
        await self._auth.aclose()
        if self._log is not None:
            self._log.close()

    # ==================== Сборка запроса ====================

    def build_url(self, path: str) -> str:
        """``{base_url}/v1/{path}``"""
        return f"{self.base_url}/{path.lstrip('/')}"

    def build_request(
        self,
        method: str,
        path: str,
        *,
        json: Any = None,
        params: Params = None,
    ) -> httpx.Request:
        """
        Собрать запрос без Authorization.

        Authorization подставляется на каждой попытке в ``execute``.
        """
        headers: Dict[str, str] = {
            "Content-Type": JSON_CONTENT_TYPE,
            "Accept": JSON_CONTENT_TYPE,
        }
        headers.update(self._config.headers)

        return httpx.Request(
            method.upper(),
            self.build_url(path),
            json=json,
            params=_clean_params(params),
            headers=headers,
        )

    @staticmethod
    def _replayable_content(request: httpx.Request) -> bytes:
        try:
            return request.content
        except httpx.RequestNotRead as e:
            raise ValidationError(
                "request body is a stream and cannot be resent on retry"
            ) from e

    @staticmethod
    def _clone(request: httpx.Request, content: bytes, auth_header: str) -> httpx.Request:
        headers = request.headers.copy()
        headers["Authorization"] = auth_header
        return httpx.Request(
            request.method,
            request.url,
            headers=headers,
            content=content or None,
            extensions=dict(request.extensions),
        )

    # ==================== Retry loop ====================

    async def execute(self, request: httpx.Request) -> httpx.Response:
        """
        Выполнить запрос с retry.

        Returns:
            Успешный (2xx) ответ

        Raises:
            ValidationError: Тело запроса нельзя отправить повторно
            AuthError: Провайдер не выдал Authorization
            RateLimitedError: 429 после исчерпания попыток
            ServerError: 5xx после исчерпания попыток
            ClientError: Остальные не-2xx ответы
            TimeoutError: Таймаут после исчерпания попыток
            TransportError: Прочие ошибки транспорта
        """
        content = self._replayable_content(request)
        client = self._get_client()
        engine = RetryEngine(self._config.retry)
        url = str(request.url)

        with correlation_scope() as request_id:
            ctx = RequestContext(request.method, url, request_id=request_id)
            self._emit(logging.DEBUG, "Request started", ctx)

            while True:
                ctx.attempts += 1
                try:
                    auth_header = await self._auth.get_auth_header()
                except DinteroError as e:
                    self._emit(
                        logging.ERROR, "Request failed", ctx,
                        error_type=type(e).__name__,
                        duration_ms=ctx.elapsed_ms(),
                    )
                    raise
                attempt = self._clone(request, content, auth_header)

                try:
                    response = await client.send(attempt)
                except httpx.RequestError as e:
                    outcome = classify_exception(e)
                else:
                    outcome = classify_response(response)

                if outcome.kind is Outcome.SUCCESS:
                    self._emit(
                        logging.INFO, "Request completed", ctx,
                        status_code=outcome.status_code,
                        duration_ms=ctx.elapsed_ms(),
                    )
                    return outcome.response

                if engine.should_retry(outcome):
                    wait = engine.get_wait_time(outcome)
                    self._emit(
                        logging.WARNING, "Retry scheduled", ctx,
                        outcome=outcome.kind.value,
                        status_code=outcome.status_code,
                        wait_seconds=wait,
                    )
                    await engine.async_wait(outcome, self._sleep)
                    engine.increment()
                    continue

                error = self._to_error(outcome, url)
                self._emit(
                    logging.ERROR, "Request failed", ctx,
                    outcome=outcome.kind.value,
                    status_code=outcome.status_code,
                    error_type=type(error).__name__,
                    duration_ms=ctx.elapsed_ms(),
                )
                raise error from outcome.error

    @staticmethod
    def _to_error(outcome: ClassifiedOutcome, url: str) -> DinteroError:
        """Финальная ошибка для итога, который больше не повторяется."""
        if outcome.kind is Outcome.RATE_LIMITED:
            return ErrorHandler.build_rate_limited_error(outcome.response, outcome.retry_after)

        if outcome.response is not None:
            return ErrorHandler.build_api_error(outcome.response)

        return ErrorHandler.handle_transport_error(outcome.error, url)

    def _emit(self, level: int, message: str, ctx: RequestContext, **fields: Any) -> None:
        if self._log is None:
            return
        fields = ctx.log_fields(**fields)
        if level >= logging.ERROR:
            self._log.error(message, **fields)
        elif level >= logging.WARNING:
            self._log.warning(message, **fields)
        elif level >= logging.INFO:
            self._log.info(message, **fields)
        else:
            self._log.debug(message, **fields)

    # ==================== Декодирование ====================

    @staticmethod
    def decode(response: httpx.Response, response_model: Optional[Type[T]] = None) -> Any:
        """
        Декодировать тело успешного ответа.

        Raises:
            EmptyResponseError: Пустое тело (парсинг не выполняется)
            SerializationError: Тело не соответствует JSON/модели
        """
        body = response.content
        if not body:
            raise EmptyResponseError(
                status_code=response.status_code, url=response_url(response)
            )

        try:
            if response_model is None:
                return response.json()
            return _type_adapter(response_model).validate_json(body)
        except ValueError as e:
            # pydantic ValidationError и JSONDecodeError - подклассы ValueError
            raise SerializationError(str(e), body=response.text, cause=e) from e

    async def request(
        self,
        method: str,
        path: str,
        *,
        json: Any = None,
        params: Params = None,
        response_model: Optional[Type[T]] = None,
    ) -> Any:
        """
        Выполнить запрос и декодировать JSON ответ.

        Args:
            method: HTTP метод
            path: Путь относительно ``/v1``
            json: Тело запроса (сериализуется в JSON)
            params: Query параметры (None значения отбрасываются)
            response_model: Тип результата (pydantic модель или тип для TypeAdapter)

        Returns:
            Экземпляр ``response_model`` или JSON значение
        """
        request = self.build_request(method, path, json=json, params=params)
        response = await self.execute(request)
        return self.decode(response, response_model)

    async def request_empty(
        self,
        method: str,
        path: str,
        *,
        json: Any = None,
        params: Params = None,
    ) -> None:
        """Выполнить запрос, тело успешного ответа игнорируется."""
        request = self.build_request(method, path, json=json, params=params)
        await self.execute(request)

    # ==================== Удобные методы ====================

    async def get_json(self, path: str, *, params: Params = None,
                       response_model: Optional[Type[T]] = None) -> Any:
        """GET запрос."""
        return await self.request("GET", path, params=params, response_model=response_model)

    async def post_json(self, path: str, json: Any = None, *, params: Params = None,
                        response_model: Optional[Type[T]] = None) -> Any:
        """POST запрос."""
        return await self.request("POST", path, json=json, params=params,
                                  response_model=response_model)

    async def put_json(self, path: str, json: Any = None, *, params: Params = None,
                       response_model: Optional[Type[T]] = None) -> Any:
        """PUT запрос."""
        return await self.request("PUT", path, json=json, params=params,
                                  response_model=response_model)

    async def patch_json(self, path: str, json: Any = None, *, params: Params = None,
                         response_model: Optional[Type[T]] = None) -> Any:
        """PATCH запрос."""
        return await self.request("PATCH", path, json=json, params=params,
                                  response_model=response_model)

    async def delete(self, path: str, *, params: Params = None) -> None:
        """DELETE запрос без тела ответа."""
        await self.request_empty("DELETE", path, params=params)


def _clean_params(params: Params) -> Optional[Dict[str, Any]]:
    if not params:
        return None
    cleaned = {key: value for key, value in params.items() if value is not None}
    return cleaned or None


