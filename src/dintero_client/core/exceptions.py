"""
Иерархия исключений Dintero client.

Классификация:
- retryable=True - executor может повторить попытку (таймаут, 5xx, 429)
- fatal=True - цикл retry завершается, ошибка уходит вызывающему коду

Каждый класс несёт ``kind`` - стабильное имя категории ошибки
(transport, rate_limited, server_error, client_error, serialization,
auth, validation, config).
"""

from typing import Any, Optional

# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# BASE
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

class DinteroError(Exception):
    """Базовое исключение Dintero client."""

    kind: str = "error"
    retryable: bool = False
    fatal: bool = True

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)

# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# TRANSPORT
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

class TransportError(DinteroError):
    """
    Ошибка транспорта: DNS, соединение, TLS, таймаут.

    Args:
        message: Сообщение об ошибке
        url: URL запроса
        cause: Исходное исключение httpx
    """

    kind = "transport"

    def __init__(
        self,
        message: str,
        url: Optional[str] = None,
        cause: Optional[BaseException] = None
    ):
        self.url = url
        self.cause = cause

        full_message = message
        if url:
            full_message += f" (url: {url})"

        super().__init__(full_message)


class TimeoutError(TransportError):
    """
    Таймаут запроса.

    Единственная транспортная ошибка, которую executor ретраит.
    """

    retryable = True
    fatal = False


class ConnectionError(TransportError):
    """
    Ошибка подключения.

    Примеры:
    - Connection refused
    - Connection reset
    - Name resolution failed
    """
    pass

# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# RATE LIMIT
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

class RateLimitedError(DinteroError):
    """
    429 Rate Limit после исчерпания всех попыток.

    Args:
        retry_after: Последнее значение Retry-After (секунды) или None
        url: URL
        body: Тело ответа
    """

    kind = "rate_limited"

    def __init__(
        self,
        retry_after: Optional[float] = None,
        url: Optional[str] = None,
        body: str = ""
    ):
        self.retry_after = retry_after
        self.url = url
        self.body = body
        self.status_code = 429

        msg = "Rate limited"
        if retry_after is not None:
            msg += f", retry after {retry_after:g}s"
        if url:
            msg += f" (url: {url})"

        super().__init__(msg)

# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# API ERRORS
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

class APIError(DinteroError):
    """
    Ошибка, возвращённая API.

    ``code`` и ``message`` берутся из структурированного тела
    ``{"error": {"code": ..., "message": ...}}``; если тело не
    распознано, ``code`` - это HTTP статус строкой, а ``message`` -
    сырой текст ответа.

    Args:
        code: Машиночитаемый код ошибки
        message: Сообщение
        status_code: HTTP статус (None для локально созданных ошибок)
        body: Сырое тело ответа
        url: URL
    """

    kind = "api"

    def __init__(
        self,
        code: str,
        message: str,
        status_code: Optional[int] = None,
        body: str = "",
        url: Optional[str] = None
    ):
        self.code = code
        self.status_code = status_code
        self.body = body
        self.url = url

        super().__init__(f"API error ({code}): {message}")
        # message атрибут хранит именно сообщение API, без префикса
        self.message = message


class ClientError(APIError):
    """4xx (кроме 429) - никогда не ретраится."""

    kind = "client_error"


class ServerError(APIError):
    """5xx - ретраится, пока есть попытки."""

    kind = "server_error"


class EmptyResponseError(APIError):
    """Успешный ответ с пустым телом там, где ожидалось значение."""

    CODE = "EMPTY_RESPONSE"

    def __init__(self, status_code: Optional[int] = None, url: Optional[str] = None):
        super().__init__(
            self.CODE,
            "Expected JSON response but got empty body",
            status_code=status_code,
            url=url,
        )

# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# LOCAL ERRORS
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

class SerializationError(DinteroError):
    """
    Тело ответа не соответствует ожидаемой схеме.

    Args:
        diagnostic: Сообщение парсера
        body: Сырое тело
        cause: Исключение парсера
    """

    kind = "serialization"

    def __init__(
        self,
        diagnostic: str,
        body: Any = None,
        cause: Optional[BaseException] = None
    ):
        self.diagnostic = diagnostic
        self.body = body
        self.cause = cause
        super().__init__(f"Serialization error: {diagnostic}")


class AuthError(DinteroError):
    """Провайдер аутентификации не смог выдать заголовок."""

    kind = "auth"

    def __init__(self, message: str):
        super().__init__(f"Authentication failed: {message}")


class ValidationError(DinteroError):
    """Нарушено предусловие executor (например, body нельзя клонировать)."""

    kind = "validation"

    def __init__(self, message: str):
        super().__init__(f"Validation error: {message}")


class ConfigurationError(DinteroError):
    """Ошибка конфигурации."""

    kind = "config"

    def __init__(self, message: str):
        super().__init__(f"Configuration error: {message}")
        # без префикса, чтобы обёртки не дублировали его
        self.message = message
