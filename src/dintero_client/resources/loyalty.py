"""Loyalty API: customers and discount rules."""

from typing import Any, Optional

from ..types import PaginationParams
from .base import BaseResource, ResponseModel, page_query


class LoyaltyResource(BaseResource):
    """
    Loyalty customers and discounts.

    Example:
        >>> await client.loyalty.create_customer({
        ...     "customer_id": "cus_1",
        ...     "email": "ola@example.com",
        ... })
    """

    async def create_customer(self, customer: Any, *,
                              response_model: ResponseModel = None) -> Any:
        return await self._post(self._path("customers"), customer, response_model=response_model)

    async def get_customer(self, customer_id: str, *,
                           response_model: ResponseModel = None) -> Any:
        return await self._get(self._path("customers", customer_id),
                               response_model=response_model)

    async def update_customer(self, customer_id: str, changes: Any, *,
                              response_model: ResponseModel = None) -> Any:
        return await self._put(self._path("customers", customer_id), changes,
                               response_model=response_model)

    async def delete_customer(self, customer_id: str) -> None:
        await self._delete(self._path("customers", customer_id))

    async def list_customers(self, page: Optional[PaginationParams] = None, *,
                             offset: Optional[int] = None,
                             query: Optional[str] = None,
                             response_model: ResponseModel = None) -> Any:
        params = page_query(page, offset=offset, query=query)
        return await self._get(self._path("customers"), params=params,
                               response_model=response_model)

    async def list_discount_rules(self, page: Optional[PaginationParams] = None, *,
                                  offset: Optional[int] = None,
                                  response_model: ResponseModel = None) -> Any:
        params = page_query(page, offset=offset)
        return await self._get(self._path("discounts", "rules"), params=params,
                               response_model=response_model)
