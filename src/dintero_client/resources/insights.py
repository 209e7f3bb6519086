"""Insights API: KPIs and report configurations."""

from datetime import datetime
from typing import Any, Dict, Optional, Union

from .base import BaseResource, ResponseModel

DateLike = Union[datetime, str]


def _kpi_query(from_date: DateLike, to_date: DateLike,
               group_by: Optional[str]) -> Dict[str, Any]:
    def fmt(value: DateLike) -> str:
        return value.isoformat() if isinstance(value, datetime) else value

    query: Dict[str, Any] = {"from_date": fmt(from_date), "to_date": fmt(to_date)}
    if group_by:
        query["group_by"] = group_by
    return query


class InsightsResource(BaseResource):
    """
    KPI aggregates over a date range.

    Example:
        >>> await client.insights.transaction_kpis(
        ...     datetime(2024, 1, 1, tzinfo=timezone.utc),
        ...     datetime(2024, 2, 1, tzinfo=timezone.utc),
        ...     group_by="day",
        ... )
    """

    async def _kpi(self, name: str, from_date: DateLike, to_date: DateLike,
                   group_by: Optional[str], response_model: ResponseModel) -> Any:
        return await self._get(self._path("insight", "kpi", name),
                               params=_kpi_query(from_date, to_date, group_by),
                               response_model=response_model)

    async def transaction_kpis(self, from_date: DateLike, to_date: DateLike, *,
                               group_by: Optional[str] = None,
                               response_model: ResponseModel = None) -> Any:
        return await self._kpi("transactions", from_date, to_date, group_by, response_model)

    async def payment_method_kpis(self, from_date: DateLike, to_date: DateLike, *,
                                  group_by: Optional[str] = None,
                                  response_model: ResponseModel = None) -> Any:
        return await self._kpi("payment-methods", from_date, to_date, group_by, response_model)

    async def revenue_kpis(self, from_date: DateLike, to_date: DateLike, *,
                           group_by: Optional[str] = None,
                           response_model: ResponseModel = None) -> Any:
        return await self._kpi("revenue", from_date, to_date, group_by, response_model)

    async def list_report_configurations(self, *, response_model: ResponseModel = None) -> Any:
        return await self._get(self._path("reports", "configuration"),
                               response_model=response_model)
