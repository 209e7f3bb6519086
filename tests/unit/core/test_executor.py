"""Тесты RequestExecutor: retry, классификация, декодирование, заголовки."""

import asyncio

import httpx
import pytest
import respx
from pydantic import BaseModel

from dintero_client.core.auth import ApiKeyAuth, AuthProvider
from dintero_client.core.config import DinteroConfig
from dintero_client.core.exceptions import (
    AuthError,
    ClientError,
    ConnectionError,
    EmptyResponseError,
    RateLimitedError,
    SerializationError,
    ServerError,
    TimeoutError,
    TransportError,
    ValidationError,
)
from dintero_client.core.executor import RequestExecutor
from dintero_client.core.logging import correlation_scope

URL = "https://api.test.dintero.com/v1/accounts/T12345678/sessions/s1"
PATH = "accounts/T12345678/sessions/s1"


class Session(BaseModel):
    id: str
    amount: int = 0


class CountingAuth(AuthProvider):
    """Провайдер, считающий обращения."""

    def __init__(self):
        self.calls = 0

    async def get_auth_header(self) -> str:
        self.calls += 1
        return f"Bearer token-{self.calls}"


class FailingAuth(AuthProvider):
    async def get_auth_header(self) -> str:
        raise AuthError("no credentials")


def make_executor(config, sleep, auth=None):
    return RequestExecutor(config, auth or ApiKeyAuth("test-key"), sleep=sleep)


class TestRetry:
    """Retry по 5xx, 429 и таймаутам."""

    @respx.mock
    @pytest.mark.asyncio
    async def test_server_error_exhausts_attempts(self, config, recording_sleep):
        """500 на каждой попытке: max_retries+1 отправок и растущий backoff."""
        route = respx.get(URL).mock(return_value=httpx.Response(500, text="boom"))

        async with make_executor(config, recording_sleep) as executor:
            with pytest.raises(ServerError) as exc_info:
                await executor.get_json(PATH)

        assert route.call_count == 4
        assert recording_sleep.calls == [0.1, 0.2, 0.4]
        assert exc_info.value.status_code == 500
        assert exc_info.value.code == "500"
        assert exc_info.value.message == "boom"

    @respx.mock
    @pytest.mark.asyncio
    async def test_recovers_after_server_errors(self, config, recording_sleep):
        """Успех после двух 5xx."""
        route = respx.get(URL).mock(side_effect=[
            httpx.Response(502),
            httpx.Response(503),
            httpx.Response(200, json={"id": "s1"}),
        ])

        async with make_executor(config, recording_sleep) as executor:
            result = await executor.get_json(PATH)

        assert result == {"id": "s1"}
        assert route.call_count == 3
        assert recording_sleep.calls == [0.1, 0.2]

    @respx.mock
    @pytest.mark.asyncio
    async def test_backoff_is_capped(self, recording_sleep):
        """Задержка не превышает max_backoff_ms."""
        config = DinteroConfig.create(
            "T12345678", api_key="k",
            max_retries=4, initial_backoff_ms=100, max_backoff_ms=300,
        )
        respx.get(URL).mock(return_value=httpx.Response(500))

        async with make_executor(config, recording_sleep) as executor:
            with pytest.raises(ServerError):
                await executor.get_json(PATH)

        assert recording_sleep.calls == [0.1, 0.2, 0.3, 0.3]

    @respx.mock
    @pytest.mark.asyncio
    async def test_no_retries_configured(self, config, recording_sleep):
        """max_retries=0: ровно одна попытка."""
        route = respx.get(URL).mock(return_value=httpx.Response(500))

        async with make_executor(config.with_retry(max_retries=0), recording_sleep) as executor:
            with pytest.raises(ServerError):
                await executor.get_json(PATH)

        assert route.call_count == 1
        assert recording_sleep.calls == []

    @respx.mock
    @pytest.mark.asyncio
    async def test_rate_limit_honors_retry_after(self, config, recording_sleep):
        """429 с Retry-After: 2 ждёт ровно 2 секунды."""
        route = respx.get(URL).mock(side_effect=[
            httpx.Response(429, headers={"Retry-After": "2"}),
            httpx.Response(200, json={"id": "s1"}),
        ])

        async with make_executor(config, recording_sleep) as executor:
            await executor.get_json(PATH)

        assert route.call_count == 2
        assert recording_sleep.calls == [2.0]

    @pytest.mark.parametrize("header", ["0", "1.5", "-3", "Wed, 21 Oct 2015 07:28:00 GMT"])
    @respx.mock
    @pytest.mark.asyncio
    async def test_invalid_retry_after_falls_back_to_backoff(self, header, config,
                                                            recording_sleep):
        """Невалидный Retry-After игнорируется."""
        respx.get(URL).mock(side_effect=[
            httpx.Response(429, headers={"Retry-After": header}),
            httpx.Response(200, json={}),
        ])

        async with make_executor(config, recording_sleep) as executor:
            await executor.get_json(PATH)

        assert recording_sleep.calls == [0.1]

    @respx.mock
    @pytest.mark.asyncio
    async def test_rate_limit_and_server_errors_share_backoff(self, config, recording_sleep):
        """429 без Retry-After и 5xx двигают одно состояние backoff."""
        respx.get(URL).mock(side_effect=[
            httpx.Response(429),
            httpx.Response(500),
            httpx.Response(429, headers={"Retry-After": "5"}),
            httpx.Response(200, json={}),
        ])

        async with make_executor(config, recording_sleep) as executor:
            await executor.get_json(PATH)

        assert recording_sleep.calls == [0.1, 0.2, 5.0]

    @respx.mock
    @pytest.mark.asyncio
    async def test_rate_limit_exhausted(self, config, recording_sleep):
        """429 после всех попыток -> RateLimitedError с последним Retry-After."""
        route = respx.get(URL).mock(
            return_value=httpx.Response(429, headers={"Retry-After": "3"}, text="slow down")
        )

        async with make_executor(config, recording_sleep) as executor:
            with pytest.raises(RateLimitedError) as exc_info:
                await executor.get_json(PATH)

        assert route.call_count == 4
        assert recording_sleep.calls == [3.0, 3.0, 3.0]
        assert exc_info.value.retry_after == 3.0
        assert exc_info.value.status_code == 429
        assert exc_info.value.body == "slow down"
        assert exc_info.value.url == URL

    @respx.mock
    @pytest.mark.asyncio
    async def test_timeout_is_retried(self, config, recording_sleep):
        """Таймаут ретраится и в итоге превращается в TimeoutError."""
        route = respx.get(URL).mock(side_effect=httpx.ReadTimeout)

        async with make_executor(config, recording_sleep) as executor:
            with pytest.raises(TimeoutError) as exc_info:
                await executor.get_json(PATH)

        assert route.call_count == 4
        assert recording_sleep.calls == [0.1, 0.2, 0.4]
        assert isinstance(exc_info.value.cause, httpx.ReadTimeout)
        assert exc_info.value.url == URL

    @respx.mock
    @pytest.mark.asyncio
    async def test_timeout_then_success(self, config, recording_sleep):
        respx.get(URL).mock(side_effect=[
            httpx.ConnectTimeout("connect timeout"),
            httpx.Response(200, json={"id": "s1"}),
        ])

        async with make_executor(config, recording_sleep) as executor:
            assert await executor.get_json(PATH) == {"id": "s1"}

        assert recording_sleep.calls == [0.1]

    @respx.mock
    @pytest.mark.asyncio
    async def test_connect_error_is_fatal(self, config, recording_sleep):
        """Ошибка соединения не ретраится."""
        route = respx.get(URL).mock(side_effect=httpx.ConnectError)

        async with make_executor(config, recording_sleep) as executor:
            with pytest.raises(ConnectionError) as exc_info:
                await executor.get_json(PATH)

        assert route.call_count == 1
        assert recording_sleep.calls == []
        assert isinstance(exc_info.value, TransportError)
        assert isinstance(exc_info.value.__cause__, httpx.ConnectError)

    @respx.mock
    @pytest.mark.asyncio
    async def test_other_transport_error_is_fatal(self, config, recording_sleep):
        route = respx.get(URL).mock(side_effect=httpx.RemoteProtocolError)

        async with make_executor(config, recording_sleep) as executor:
            with pytest.raises(TransportError) as exc_info:
                await executor.get_json(PATH)

        assert route.call_count == 1
        assert not isinstance(exc_info.value, (TimeoutError, ConnectionError))

    @respx.mock
    @pytest.mark.asyncio
    async def test_request_body_resent_on_retry(self, config, recording_sleep):
        """Тело POST одинаково на каждой попытке."""
        route = respx.post(URL).mock(side_effect=[
            httpx.Response(500),
            httpx.Response(200, json={"id": "s1"}),
        ])

        async with make_executor(config, recording_sleep) as executor:
            await executor.post_json(PATH, {"amount": 1000})

        first, second = route.calls
        assert first.request.content == second.request.content == b'{"amount":1000}'


class TestClientErrors:
    """4xx никогда не ретраятся."""

    @respx.mock
    @pytest.mark.asyncio
    async def test_structured_error_body(self, config, recording_sleep):
        route = respx.post(URL).mock(return_value=httpx.Response(
            400, json={"error": {"code": "INVALID_AMOUNT", "message": "Amount must be positive"}}
        ))

        async with make_executor(config, recording_sleep) as executor:
            with pytest.raises(ClientError) as exc_info:
                await executor.post_json(PATH, {"amount": -1})

        error = exc_info.value
        assert route.call_count == 1
        assert recording_sleep.calls == []
        assert error.status_code == 400
        assert error.code == "INVALID_AMOUNT"
        assert error.message == "Amount must be positive"
        assert "INVALID_AMOUNT" in error.body
        assert error.url == URL

    @respx.mock
    @pytest.mark.asyncio
    async def test_plain_text_error_body(self, config, recording_sleep):
        """Неструктурированное тело: code = статус, message = текст."""
        respx.post(URL).mock(return_value=httpx.Response(400, text="Bad Request"))

        async with make_executor(config, recording_sleep) as executor:
            with pytest.raises(ClientError) as exc_info:
                await executor.post_json(PATH, {})

        assert exc_info.value.code == "400"
        assert exc_info.value.message == "Bad Request"

    @pytest.mark.parametrize("status", [401, 403, 404, 409, 422])
    @respx.mock
    @pytest.mark.asyncio
    async def test_not_retried(self, status, config, recording_sleep):
        route = respx.get(URL).mock(return_value=httpx.Response(status))

        async with make_executor(config, recording_sleep) as executor:
            with pytest.raises(ClientError) as exc_info:
                await executor.get_json(PATH)

        assert route.call_count == 1
        assert exc_info.value.status_code == status

    @respx.mock
    @pytest.mark.asyncio
    async def test_redirect_is_client_error(self, config, recording_sleep):
        """Не-2xx вне 4xx/5xx тоже фатальны."""
        respx.get(URL).mock(return_value=httpx.Response(304))

        async with make_executor(config, recording_sleep) as executor:
            with pytest.raises(ClientError):
                await executor.get_json(PATH)


class TestDecoding:
    """Декодирование тела успешного ответа."""

    @respx.mock
    @pytest.mark.asyncio
    async def test_typed_response(self, config, recording_sleep):
        respx.get(URL).mock(return_value=httpx.Response(200, json={"id": "s1", "amount": 500}))

        async with make_executor(config, recording_sleep) as executor:
            session = await executor.get_json(PATH, response_model=Session)

        assert session == Session(id="s1", amount=500)

    @respx.mock
    @pytest.mark.asyncio
    async def test_empty_body_raises(self, config, recording_sleep):
        """Пустое тело при ожидаемом значении -> EmptyResponseError."""
        respx.get(URL).mock(return_value=httpx.Response(200))

        async with make_executor(config, recording_sleep) as executor:
            with pytest.raises(EmptyResponseError) as exc_info:
                await executor.get_json(PATH, response_model=Session)

        assert exc_info.value.code == "EMPTY_RESPONSE"
        assert exc_info.value.status_code == 200
        assert exc_info.value.url == URL

    @respx.mock
    @pytest.mark.asyncio
    async def test_empty_body_untyped_raises(self, config, recording_sleep):
        respx.get(URL).mock(return_value=httpx.Response(204))

        async with make_executor(config, recording_sleep) as executor:
            with pytest.raises(EmptyResponseError):
                await executor.get_json(PATH)

    @respx.mock
    @pytest.mark.asyncio
    async def test_request_empty_ignores_body(self, config, recording_sleep):
        route = respx.delete(URL).mock(return_value=httpx.Response(204))

        async with make_executor(config, recording_sleep) as executor:
            assert await executor.delete(PATH) is None

        assert route.call_count == 1

    @respx.mock
    @pytest.mark.asyncio
    async def test_invalid_json(self, config, recording_sleep):
        respx.get(URL).mock(return_value=httpx.Response(200, text="<html>oops</html>"))

        async with make_executor(config, recording_sleep) as executor:
            with pytest.raises(SerializationError) as exc_info:
                await executor.get_json(PATH)

        assert exc_info.value.body == "<html>oops</html>"
        assert exc_info.value.cause is not None

    @respx.mock
    @pytest.mark.asyncio
    async def test_schema_mismatch(self, config, recording_sleep):
        """JSON не той формы -> SerializationError, не ошибка pydantic."""
        respx.get(URL).mock(return_value=httpx.Response(200, json={"amount": "lots"}))

        async with make_executor(config, recording_sleep) as executor:
            with pytest.raises(SerializationError):
                await executor.get_json(PATH, response_model=Session)

    def test_decode_is_static(self):
        response = httpx.Response(200, json=[1, 2, 3])
        assert RequestExecutor.decode(response) == [1, 2, 3]


class TestRequestBuilding:
    """Заголовки, URL и query параметры."""

    @respx.mock
    @pytest.mark.asyncio
    async def test_headers(self, recording_sleep):
        config = DinteroConfig.create(
            "T12345678", api_key="test-key", headers={"X-Source": "tests"}
        )
        route = respx.get(URL).mock(return_value=httpx.Response(200, json={}))

        async with make_executor(config, recording_sleep) as executor:
            await executor.get_json(PATH)

        headers = route.calls.last.request.headers
        assert headers["Authorization"] == "Token test-key"
        assert headers["Content-Type"] == "application/json"
        assert headers["Accept"] == "application/json"
        assert headers["X-Source"] == "tests"

    @respx.mock
    @pytest.mark.asyncio
    async def test_auth_header_fetched_per_attempt(self, config, recording_sleep):
        """Authorization запрашивается у провайдера на каждой попытке."""
        auth = CountingAuth()
        route = respx.get(URL).mock(side_effect=[
            httpx.Response(500),
            httpx.Response(200, json={}),
        ])

        async with make_executor(config, recording_sleep, auth=auth) as executor:
            await executor.get_json(PATH)

        assert auth.calls == 2
        assert route.calls[0].request.headers["Authorization"] == "Bearer token-1"
        assert route.calls[1].request.headers["Authorization"] == "Bearer token-2"

    @respx.mock
    @pytest.mark.asyncio
    async def test_auth_failure_sends_nothing(self, config, recording_sleep):
        route = respx.get(URL).mock(return_value=httpx.Response(200, json={}))

        async with make_executor(config, recording_sleep, auth=FailingAuth()) as executor:
            with pytest.raises(AuthError):
                await executor.get_json(PATH)

        assert route.call_count == 0

    @respx.mock
    @pytest.mark.asyncio
    async def test_none_params_are_dropped(self, config, recording_sleep):
        route = respx.get(URL).mock(return_value=httpx.Response(200, json={}))

        async with make_executor(config, recording_sleep) as executor:
            await executor.get_json(PATH, params={"limit": 10, "starting_after": None})

        assert dict(route.calls.last.request.url.params) == {"limit": "10"}

    def test_build_url(self, config):
        executor = RequestExecutor(config, ApiKeyAuth("k"))
        assert executor.base_url == "https://api.test.dintero.com/v1"
        assert executor.build_url("/accounts/T1") == "https://api.test.dintero.com/v1/accounts/T1"
        assert executor.build_url("accounts/T1") == "https://api.test.dintero.com/v1/accounts/T1"

    def test_production_url(self, config):
        executor = RequestExecutor(config.with_environment("prod"), ApiKeyAuth("k"))
        assert executor.base_url == "https://api.dintero.com/v1"

    @pytest.mark.asyncio
    async def test_stream_body_rejected(self, config, recording_sleep):
        """Потоковое тело нельзя повторить -> ValidationError до отправки."""

        async def chunks():
            yield b"{}"

        request = httpx.Request("POST", URL, content=chunks())
        async with make_executor(config, recording_sleep) as executor:
            with pytest.raises(ValidationError):
                await executor.execute(request)


class TestLifecycle:
    """Владение httpx клиентом."""

    @pytest.mark.asyncio
    async def test_external_client_not_closed(self, config):
        client = httpx.AsyncClient()
        executor = RequestExecutor(config, ApiKeyAuth("k"), client=client)

        await executor.aclose()

        assert not client.is_closed
        await client.aclose()

    @pytest.mark.asyncio
    async def test_owned_client_closed(self, config):
        executor = RequestExecutor(config, ApiKeyAuth("k"))
        async with executor:
            client = executor._get_client()
        assert client.is_closed

    @respx.mock
    @pytest.mark.asyncio
    async def test_cancel_during_backoff(self):
        """Отмена во время ожидания backoff: CancelledError наружу, повтора нет."""
        config = DinteroConfig.create(
            "T12345678", api_key="k", initial_backoff_ms=10_000, max_backoff_ms=10_000,
        )
        route = respx.get(URL).mock(side_effect=[
            httpx.Response(500),
            httpx.Response(200, json={"id": "s1"}),
        ])

        async with RequestExecutor(config, ApiKeyAuth("k")) as executor:
            task = asyncio.create_task(executor.get_json(PATH))
            for _ in range(100):
                if route.call_count:
                    break
                await asyncio.sleep(0.01)
            await asyncio.sleep(0.05)

            task.cancel()
            with pytest.raises(asyncio.CancelledError):
                await task
            assert route.call_count == 1

            # следующий запрос начинается с чистого состояния
            assert await executor.get_json(PATH) == {"id": "s1"}

        assert route.call_count == 2


class TestLogging:
    """События executor в логе."""

    @respx.mock
    @pytest.mark.asyncio
    async def test_retry_events(self, logging_config, log_records, recording_sleep):
        config = DinteroConfig.create("T12345678", api_key="secret-key", logging=logging_config)
        respx.get(URL).mock(side_effect=[
            httpx.Response(503),
            httpx.Response(200, json={}),
        ])

        executor = make_executor(config, recording_sleep)
        log_records.attach()
        async with executor:
            await executor.get_json(PATH)

        assert log_records.messages() == [
            "Request started", "Retry scheduled", "Request completed",
        ]
        retry = log_records.records[1]
        assert retry.status_code == 503
        assert retry.wait_seconds == 0.1
        assert retry.attempt == 1
        completed = log_records.records[2]
        assert completed.attempt == 2
        assert completed.status_code == 200
        assert len({record.request_id for record in log_records.records}) == 1

    @respx.mock
    @pytest.mark.asyncio
    async def test_failure_event(self, logging_config, log_records, recording_sleep):
        config = DinteroConfig.create("T12345678", api_key="k", logging=logging_config)
        respx.get(URL).mock(return_value=httpx.Response(404))

        executor = make_executor(config, recording_sleep)
        log_records.attach()
        async with executor:
            with pytest.raises(ClientError):
                await executor.get_json(PATH)

        failed = log_records.records[-1]
        assert failed.getMessage() == "Request failed"
        assert failed.error_type == "ClientError"
        assert failed.outcome == "fatal_client_error"

    @respx.mock
    @pytest.mark.asyncio
    async def test_auth_failure_event(self, logging_config, log_records, recording_sleep):
        """Ошибка провайдера попадает в лог до того, как уйти к вызывающему."""
        config = DinteroConfig.create("T12345678", api_key="k", logging=logging_config)
        route = respx.get(URL).mock(return_value=httpx.Response(200, json={}))

        executor = make_executor(config, recording_sleep, auth=FailingAuth())
        log_records.attach()
        async with executor:
            with pytest.raises(AuthError):
                await executor.get_json(PATH)

        assert route.call_count == 0
        assert log_records.messages() == ["Request started", "Request failed"]
        failed = log_records.records[-1]
        assert failed.error_type == "AuthError"
        assert failed.attempt == 1
        assert failed.levelname == "ERROR"

    @respx.mock
    @pytest.mark.asyncio
    async def test_bound_correlation_id_is_request_id(self, logging_config, log_records,
                                                      recording_sleep):
        config = DinteroConfig.create("T12345678", api_key="k", logging=logging_config)
        respx.get(URL).mock(return_value=httpx.Response(200, json={}))

        executor = make_executor(config, recording_sleep)
        log_records.attach()
        async with executor:
            with correlation_scope("order-42"):
                await executor.get_json(PATH)

        assert {record.request_id for record in log_records.records} == {"order-42"}

    @respx.mock
    @pytest.mark.asyncio
    async def test_no_logging_without_config(self, config, log_records, recording_sleep):
        respx.get(URL).mock(return_value=httpx.Response(200, json={}))

        executor = make_executor(config, recording_sleep)
        log_records.attach()
        async with executor:
            await executor.get_json(PATH)

        assert "Request completed" not in log_records.messages()
