"""
Base class for resource adapters.

Adapters only build paths, query parameters and bodies, then forward to the
RequestExecutor. Responses are returned as decoded JSON unless the caller
passes a ``response_model``.
"""

from typing import Any, Dict, Mapping, Optional, Type, Union

from pydantic import BaseModel

from ..core.executor import RequestExecutor
from ..types import Money, PaginationParams

ResponseModel = Optional[Type[Any]]

Amount = Union[Money, int]


def to_payload(body: Any) -> Any:
    """
    JSON-ready copy of a request body.

    pydantic models are dumped without unset (None) fields, mappings and
    lists are converted recursively, None values in mappings are dropped.
    """
    if isinstance(body, BaseModel):
        return body.model_dump(mode="json", exclude_none=True, by_alias=True)
    if isinstance(body, Mapping):
        return {key: to_payload(value) for key, value in body.items() if value is not None}
    if isinstance(body, (list, tuple)):
        return [to_payload(item) for item in body]
    return body


def page_query(page: Optional[PaginationParams] = None, **filters: Any) -> Dict[str, Any]:
    """Query parameters from pagination and filters; None values are dropped."""
    query: Dict[str, Any] = page.to_query() if page is not None else {}
    query.update({key: value for key, value in filters.items() if value is not None})
    return query


def amount_body(amount: Amount, **fields: Any) -> Dict[str, Any]:
    """Body with an amount in minor units plus optional fields."""
    body: Dict[str, Any] = {"amount": int(amount)}
    body.update(fields)
    return body


class BaseResource:
    """
    Resource adapter bound to one account.

    Args:
        executor: Shared request executor
        account_id: Dintero account id (``T...`` for test, ``P...`` for production)
    """

    def __init__(self, executor: RequestExecutor, account_id: str):
        self._executor = executor
        self._account_id = account_id

    @property
    def account_id(self) -> str:
        return self._account_id

    def _path(self, *parts: str) -> str:
        """``accounts/{account_id}/{parts...}``"""
        return "/".join(("accounts", self._account_id) + tuple(str(p).strip("/") for p in parts))

    async def _get(self, path: str, *, params: Optional[Dict[str, Any]] = None,
                   response_model: ResponseModel = None) -> Any:
        return await self._executor.get_json(path, params=params, response_model=response_model)

    async def _post(self, path: str, body: Any = None, *,
                    response_model: ResponseModel = None) -> Any:
        return await self._executor.post_json(path, to_payload(body), response_model=response_model)

    async def _put(self, path: str, body: Any = None, *,
                   response_model: ResponseModel = None) -> Any:
        return await self._executor.put_json(path, to_payload(body), response_model=response_model)

    async def _post_empty(self, path: str, body: Any = None) -> None:
        await self._executor.request_empty("POST", path, json=to_payload(body))

    async def _delete(self, path: str) -> None:
        await self._executor.delete(path)
