"""Payments API: transactions, payouts and settlements."""

from typing import Any, Dict, List, Optional

from ..types import PaginationParams
from .base import Amount, BaseResource, ResponseModel, amount_body, page_query


class PaymentsResource(BaseResource):
    """
    Payment operations on transactions, payout transfers and settlements.

    Example:
        >>> await client.payments.refund("T123.abc", 5000, reason="damaged")
    """

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

    async def get_transaction(self, transaction_id: str, *,
                              response_model: ResponseModel = None) -> Any:
        return await self._get(self._path("transactions", transaction_id),
                               response_model=response_model)

    async def capture(self, transaction_id: str, amount: Amount, *,
                      items: Optional[List[Dict[str, Any]]] = None,
                      response_model: ResponseModel = None) -> Any:
        return await self._post(self._path("transactions", transaction_id, "capture"),
                                amount_body(amount, items=items),
                                response_model=response_model)

    async def refund(self, transaction_id: str, amount: Amount, *,
                     items: Optional[List[Dict[str, Any]]] = None,
                     reason: Optional[str] = None,
                     response_model: ResponseModel = None) -> Any:
        return await self._post(self._path("transactions", transaction_id, "refund"),
                                amount_body(amount, items=items, reason=reason),
                                response_model=response_model)

    async def void(self, transaction_id: str, *, response_model: ResponseModel = None) -> Any:
        return await self._post(self._path("transactions", transaction_id, "void"),
                                response_model=response_model)

    async def list_payouts(self, destination_id: str,
                           page: Optional[PaginationParams] = None, *,
                           page_token: Optional[str] = None,
                           from_date: Optional[str] = None,
                           to_date: Optional[str] = None,
                           response_model: ResponseModel = None) -> Any:
        """Payout transfers of one payout destination."""
        params = page_query(page, page_token=page_token, from_date=from_date, to_date=to_date)
        return await self._get(self._path("payout_destinations", destination_id, "transfers"),
                               params=params, response_model=response_model)

    async def list_settlements(self, *, response_model: ResponseModel = None) -> Any:
        return await self._get(self._path("settlements"), response_model=response_model)
