"""Orders API."""

from typing import Any, Optional

from ..types import PaginationParams
from .base import BaseResource, ResponseModel, page_query


class OrdersResource(BaseResource):
    """
    Orders, their captures and refunds.

    Example:
        >>> order = await client.orders.get_order("ord_123")
        >>> await client.orders.create_capture("ord_123", {"amount": 10000})
    """

    async def create_order(self, order: Any, *, response_model: ResponseModel = None) -> Any:
        return await self._post(self._path("orders"), order, response_model=response_model)

    async def get_order(self, order_id: str, *, response_model: ResponseModel = None) -> Any:
        return await self._get(self._path("orders", order_id), response_model=response_model)

    async def update_order(self, order_id: str, changes: Any, *,
                           response_model: ResponseModel = None) -> Any:
        return await self._put(self._path("orders", order_id), changes,
                               response_model=response_model)

    async def list_orders(self, page: Optional[PaginationParams] = None, *,
                          page_token: Optional[str] = None,
                          status: Optional[str] = None,
                          merchant_reference: Optional[str] = None,
                          response_model: ResponseModel = None) -> Any:
        params = page_query(
            page,
            page_token=page_token,
            status=status,
            merchant_reference=merchant_reference,
        )
        return await self._get(self._path("orders"), params=params,
                               response_model=response_model)

    async def close_order(self, order_id: str, *, response_model: ResponseModel = None) -> Any:
        return await self._post(self._path("orders", order_id, "close"),
                                response_model=response_model)

    # ==================== Captures ====================

    async def create_capture(self, order_id: str, capture: Any, *,
                             response_model: ResponseModel = None) -> Any:
        return await self._post(self._path("orders", order_id, "capture"), capture,
                                response_model=response_model)

    async def list_captures(self, order_id: str, *, response_model: ResponseModel = None) -> Any:
        return await self._get(self._path("orders", order_id, "captures"),
                               response_model=response_model)

    # ==================== Refunds ====================

    async def create_refund(self, order_id: str, refund: Any, *,
                            response_model: ResponseModel = None) -> Any:
        return await self._post(self._path("orders", order_id, "refunds"), refund,
                                response_model=response_model)

    async def list_refunds(self, order_id: str, *, response_model: ResponseModel = None) -> Any:
        return await self._get(self._path("orders", order_id, "refunds"),
                               response_model=response_model)
