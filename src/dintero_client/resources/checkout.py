"""Checkout API: payment sessions and their transactions."""

from typing import Any, Dict, List, Optional

from ..types import PaginationParams
from .base import Amount, BaseResource, ResponseModel, amount_body, page_query


class CheckoutResource(BaseResource):
    """
    Checkout sessions and transactions.

    Example:
        >>> session = await client.checkout.create_session({
        ...     "url": {"return_url": "https://shop.example/return"},
        ...     "order": {"amount": 29990, "currency": "NOK",
        ...               "merchant_reference": "order-1"},
        ... })
    """

    # ==================== Sessions ====================

    async def create_session(self, session: Any, *,
                             response_model: ResponseModel = None) -> Any:
        return await self._post(self._path("sessions"), session, response_model=response_model)

    async def get_session(self, session_id: str, *,
                          response_model: ResponseModel = None) -> Any:
        return await self._get(self._path("sessions", session_id), response_model=response_model)

    async def update_session(self, session_id: str, changes: Any, *,
                             response_model: ResponseModel = None) -> Any:
        return await self._put(self._path("sessions", session_id), changes,
                               response_model=response_model)

    async def cancel_session(self, session_id: str) -> None:
        """Cancel a session that has not been paid."""
        await self._post_empty(self._path("sessions", session_id, "cancel"))

    async def list_sessions(self, page: Optional[PaginationParams] = None, *,
                            page_token: Optional[str] = None,
                            response_model: ResponseModel = None) -> Any:
        params = page_query(page, page_token=page_token)
        return await self._get(self._path("sessions"), params=params,
                               response_model=response_model)

    # ==================== Transactions ====================

    async def get_transaction(self, transaction_id: str, *,
                              response_model: ResponseModel = None) -> Any:
        return await self._get(self._path("transactions", transaction_id),
                               response_model=response_model)

    async def list_transactions(self, page: Optional[PaginationParams] = None, *,
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
        return await self._get(self._path("transactions"), params=params,
                               response_model=response_model)

    async def capture_transaction(self, transaction_id: str, amount: Amount, *,
                                  items: Optional[List[Dict[str, Any]]] = None,
                                  capture_reference: Optional[str] = None,
                                  response_model: ResponseModel = None) -> Any:
        """
        Capture an authorized amount.

        Example:
            >>> await client.checkout.capture_transaction(
            ...     "T123.abc", Money.from_major(299, Currency.NOK)
            ... )
        """
        body = amount_body(amount, items=items, capture_reference=capture_reference)
        return await self._post(self._path("transactions", transaction_id, "capture"), body,
                                response_model=response_model)

    async def refund_transaction(self, transaction_id: str, amount: Amount, *,
                                 items: Optional[List[Dict[str, Any]]] = None,
                                 reason: Optional[str] = None,
                                 response_model: ResponseModel = None) -> Any:
        body = amount_body(amount, items=items, reason=reason)
        return await self._post(self._path("transactions", transaction_id, "refund"), body,
                                response_model=response_model)

    async def void_transaction(self, transaction_id: str, *,
                               response_model: ResponseModel = None) -> Any:
        return await self._post(self._path("transactions", transaction_id, "void"),
                                response_model=response_model)

    async def extend_authorization(self, transaction_id: str, days: int, *,
                                   response_model: ResponseModel = None) -> Any:
        """Extend the authorization period by ``days``."""
        return await self._post(
            self._path("transactions", transaction_id, "extend_authorization"),
            {"days": days},
            response_model=response_model,
        )
