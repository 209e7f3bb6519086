"""
Retry engine для повторных попыток запроса.

Включает:
- Классификацию ответа/ошибки в ClassifiedOutcome
- Детерминированный exponential backoff (без jitter)
- Retry-After header parsing (целые секунды)
"""

import asyncio
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Awaitable, Callable, Optional

import httpx

from .config import RetryConfig

logger = logging.getLogger(__name__)

Sleep = Callable[[float], Awaitable[None]]

MAX_RETRY_AFTER_LENGTH = 20


class Outcome(str, Enum):
    """Итог одной попытки."""
    SUCCESS = "success"
    RATE_LIMITED = "rate_limited"
    RETRYABLE_SERVER_ERROR = "retryable_server_error"
    RETRYABLE_TRANSPORT_TIMEOUT = "retryable_transport_timeout"
    FATAL_CLIENT_ERROR = "fatal_client_error"
    FATAL_TRANSPORT_ERROR = "fatal_transport_error"


_RETRYABLE = frozenset({
    Outcome.RATE_LIMITED,
    Outcome.RETRYABLE_SERVER_ERROR,
    Outcome.RETRYABLE_TRANSPORT_TIMEOUT,
})


@dataclass(frozen=True)
class ClassifiedOutcome:
    """
    Классифицированный итог попытки.

    Attributes:
        kind: Категория итога
        response: Ответ сервера (если был)
        error: Исключение транспорта (если было)
        retry_after: Значение Retry-After в секундах (только для 429)
    """
    kind: Outcome
    response: Optional[httpx.Response] = None
    error: Optional[BaseException] = None
    retry_after: Optional[float] = None

    @property
    def retryable(self) -> bool:
        """Можно ли повторить попытку при наличии лимита."""
        return self.kind in _RETRYABLE

    @property
    def status_code(self) -> Optional[int]:
        """HTTP статус, если был ответ."""
        return self.response.status_code if self.response is not None else None


def parse_retry_after(headers: httpx.Headers) -> Optional[float]:
    """
    Распарсить Retry-After header.

    Принимается только положительное целое число секунд. HTTP-date,
    дробные, нулевые и отрицательные значения игнорируются - тогда
    используется текущий backoff.

    Args:
        headers: Заголовки ответа

    Returns:
        Секунды или None
    """
    value = headers.get('Retry-After')
    if not value:
        return None

    value = value.strip()
    # Защита от oversized header
    if len(value) > MAX_RETRY_AFTER_LENGTH:
        logger.warning(
            "Retry-After header too long (%d chars), ignoring", len(value)
        )
        return None

    if not (value.isascii() and value.isdigit()):
        logger.debug("Ignoring non-integer Retry-After header %r", value)
        return None

    seconds = int(value)
    if seconds <= 0:
        return None
    return float(seconds)


def classify_response(response: httpx.Response) -> ClassifiedOutcome:
    """
    Классифицировать полученный ответ.

    - 2xx -> SUCCESS
    - 429 -> RATE_LIMITED (с Retry-After, если он валиден)
    - 5xx -> RETRYABLE_SERVER_ERROR
    - остальное -> FATAL_CLIENT_ERROR
    """
    status = response.status_code

    if response.is_success:
        return ClassifiedOutcome(Outcome.SUCCESS, response=response)

    if status == 429:
        return ClassifiedOutcome(
            Outcome.RATE_LIMITED,
            response=response,
            retry_after=parse_retry_after(response.headers),
        )

    if response.is_server_error:
        return ClassifiedOutcome(Outcome.RETRYABLE_SERVER_ERROR, response=response)

    return ClassifiedOutcome(Outcome.FATAL_CLIENT_ERROR, response=response)


def classify_exception(error: BaseException) -> ClassifiedOutcome:
    """
    Классифицировать ошибку транспорта.

    Таймауты (connect/read/write/pool) ретраятся, всё остальное фатально.
    """
    if isinstance(error, httpx.TimeoutException):
        return ClassifiedOutcome(Outcome.RETRYABLE_TRANSPORT_TIMEOUT, error=error)
    return ClassifiedOutcome(Outcome.FATAL_TRANSPORT_ERROR, error=error)


@dataclass
class RetryState:
    """Состояние retry одного логического запроса."""
    attempt: int = 0
    backoff_ms: int = 0


class RetryEngine:
    """
    Механизм retry для одного логического запроса.

    Создаётся заново на каждый запрос и никогда не разделяется между
    запросами. 429, 5xx и таймауты двигают одно и то же состояние backoff.

    Examples:
        >>> engine = RetryEngine(RetryConfig(max_retries=3))
        >>> outcome = classify_response(response)
        >>> if engine.should_retry(outcome):
        >>>     await engine.async_wait(outcome)
        >>>     engine.increment()
    """

    def __init__(self, config: RetryConfig):
        """
        Args:
            config: Конфигурация retry
        """
        self.config = config
        self._state = RetryState(attempt=0, backoff_ms=config.initial_backoff_ms)

    def can_retry(self) -> bool:
        """Остались ли повторы."""
        return self._state.attempt < self.config.max_retries

    def should_retry(self, outcome: ClassifiedOutcome) -> bool:
        """
        Решить нужен ли retry.

        Args:
            outcome: Итог текущей попытки

        Returns:
            True если итог retryable и лимит не исчерпан
        """
        return outcome.retryable and self.can_retry()

    def get_wait_time(self, outcome: Optional[ClassifiedOutcome] = None) -> float:
        """
        Вычислить время ожидания (сек).

        Приоритет 1: Retry-After у 429.
        Приоритет 2: текущий backoff.
        """
        if (
            outcome is not None
            and outcome.kind is Outcome.RATE_LIMITED
            and outcome.retry_after is not None
        ):
            return outcome.retry_after

        return self._state.backoff_ms / 1000

    async def async_wait(
        self,
        outcome: Optional[ClassifiedOutcome] = None,
        sleep: Sleep = asyncio.sleep,
    ) -> float:
        """
        Асинхронное ожидание перед retry.

        Returns:
            Сколько секунд ждали
        """
        wait_time = self.get_wait_time(outcome)
        await sleep(wait_time)
        return wait_time

    def increment(self) -> None:
        """Увеличить счётчик попыток и нарастить backoff."""
        self._state.attempt += 1
        grown = self._state.backoff_ms * self.config.backoff_multiplier
        self._state.backoff_ms = int(min(grown, self.config.max_backoff_ms))

    @property
    def attempt(self) -> int:
        """Сколько повторов уже сделано."""
        return self._state.attempt

    @property
    def backoff(self) -> float:
        """Текущий backoff (сек)."""
        return self._state.backoff_ms / 1000
