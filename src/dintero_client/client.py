# src/dintero_client/client.py
"""
DinteroClient - точка входа SDK.

Example:
    >>> config = DinteroConfig.create("T12345678", api_key="...")
    >>> async with DinteroClient(config) as client:
    ...     session = await client.checkout.get_session("T12345678.abc")
    ...     order = await client.orders.get_order("ord_1")
"""

from typing import Any, Optional

import httpx

from .core.auth import AuthProvider, create_auth_provider
from .core.config import DinteroConfig
from .core.env_config import load_from_env
from .core.executor import RequestExecutor
from .core.retry_engine import Sleep
from .resources import (
    AccountsResource,
    CheckoutResource,
    InsightsResource,
    LoyaltyResource,
    OrdersResource,
    PaymentsResource,
)


class DinteroClient:
    """
    Клиент Dintero API.

    Один RequestExecutor (пул соединений, провайдер аутентификации)
    разделяется всеми ресурсами.

    Args:
        config: Конфигурация клиента
        auth: Свой провайдер аутентификации (по умолчанию из config.auth)
        http_client: Готовый httpx.AsyncClient
        sleep: Корутина ожидания между попытками
    """

    def __init__(
        self,
        config: DinteroConfig,
        *,
        auth: Optional[AuthProvider] = None,
        http_client: Optional[httpx.AsyncClient] = None,
        sleep: Optional[Sleep] = None,
    ):
        self._config = config
        self._executor = RequestExecutor(
            config,
            auth if auth is not None else create_auth_provider(config),
            client=http_client,
            sleep=sleep,
        )

        account_id = config.account_id
        self._checkout = CheckoutResource(self._executor, account_id)
        self._orders = OrdersResource(self._executor, account_id)
        self._payments = PaymentsResource(self._executor, account_id)
        self._accounts = AccountsResource(self._executor, account_id)
        self._loyalty = LoyaltyResource(self._executor, account_id)
        self._insights = InsightsResource(self._executor, account_id)

    @classmethod
    def from_env(cls, env_file: Optional[str] = None, **overrides: Any) -> "DinteroClient":
        """
        Создать клиент из переменных окружения DINTERO_*.

        Raises:
            ConfigurationError: Не заданы account id или учётные данные

        Example:
            >>> # export DINTERO_ACCOUNT_ID=T12345678 DINTERO_API_KEY=...
            >>> client = DinteroClient.from_env()
        """
        return cls(load_from_env(env_file, **overrides))

    # ==================== Ресурсы ====================

    @property
    def checkout(self) -> CheckoutResource:
        return self._checkout

    @property
    def orders(self) -> OrdersResource:
        return self._orders

    @property
    def payments(self) -> PaymentsResource:
        return self._payments

    @property
    def accounts(self) -> AccountsResource:
        return self._accounts

    @property
    def loyalty(self) -> LoyaltyResource:
        return self._loyalty

    @property
    def insights(self) -> InsightsResource:
        return self._insights

    # ==================== Properties ====================

    @property
    def account_id(self) -> str:
        return self._config.account_id

    @property
    def config(self) -> DinteroConfig:
        return self._config

    @property
    def executor(self) -> RequestExecutor:
        """Исполнитель запросов (для вызовов без готового ресурса)."""
        return self._executor

    async def aclose(self) -> None:
        """Закрыть соединения."""
        await self._executor.aclose()

    async def __aenter__(self) -> "DinteroClient":
        await self._executor.__aenter__()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.aclose()

    def __repr__(self) -> str:
        return (
            f"DinteroClient(account_id={self.account_id!r}, "
            f"environment={self._config.environment.value!r})"
        )
