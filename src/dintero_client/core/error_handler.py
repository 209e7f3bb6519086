# src/dintero_client/core/error_handler.py

import json
from typing import Optional, Tuple

import httpx

from .exceptions import (
    APIError,
    ClientError,
    ConnectionError,
    RateLimitedError,
    ServerError,
    TimeoutError,
    TransportError,
)


def response_url(response: httpx.Response) -> Optional[str]:
    try:
        return str(response.request.url)
    except RuntimeError:
        # Response собран вручную, без запроса
        return None


class ErrorHandler:
    """Преобразует ответы и исключения httpx в исключения клиента"""

    @staticmethod
    def parse_api_error(body: str) -> Optional[Tuple[str, str]]:
        """
        Извлекает (code, message) из тела ``{"error": {"code", "message"}}``.

        Возвращает None, если тело не JSON или не той формы.
        """
        if not body:
            return None

        try:
            payload = json.loads(body)
        except ValueError:
            return None

        if not isinstance(payload, dict):
            return None
        detail = payload.get("error")
        if not isinstance(detail, dict):
            return None

        code = detail.get("code")
        message = detail.get("message")
        if not isinstance(code, str) or not isinstance(message, str):
            return None

        return code, message

    @staticmethod
    def build_api_error(response: httpx.Response) -> APIError:
        """Строит фатальную ошибку API по статус коду и телу ответа"""

        status_code = response.status_code
        body = response.text
        url = response_url(response)

        parsed = ErrorHandler.parse_api_error(body)
        if parsed is not None:
            code, message = parsed
        else:
            code, message = str(status_code), body

        if 500 <= status_code < 600:
            return ServerError(code, message, status_code=status_code, body=body, url=url)

        return ClientError(code, message, status_code=status_code, body=body, url=url)

    @staticmethod
    def build_rate_limited_error(
        response: httpx.Response,
        retry_after: Optional[float]
    ) -> RateLimitedError:
        """429 после исчерпания попыток"""

        url = response_url(response)
        return RateLimitedError(retry_after=retry_after, url=url, body=response.text)

    @staticmethod
    def handle_transport_error(error: Exception, url: str) -> TransportError:
        """Оборачивает исключение httpx, сохраняя его как cause"""

        if isinstance(error, httpx.TimeoutException):
            return TimeoutError(f"Request timeout: {error}", url, cause=error)

        if isinstance(error, httpx.ConnectError):
            return ConnectionError(f"Connection error: {error}", url, cause=error)

        return TransportError(f"HTTP request failed: {error}", url, cause=error)
