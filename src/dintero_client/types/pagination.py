"""
Paginated list responses and cursor parameters.
"""

from typing import Any, Dict, Generic, List, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field

T = TypeVar("T")

DEFAULT_PAGE_LIMIT = 50


class Pagination(BaseModel, Generic[T]):
    """
    One page of a list endpoint.

    Example:
        >>> page = await client.loyalty.list_customers()
        >>> for customer in page.data:
        ...     print(customer["customer_id"])
    """

    model_config = ConfigDict(extra="allow")

    data: List[T] = Field(default_factory=list)
    starting_after: Optional[str] = None
    has_more: Optional[bool] = None

    def __len__(self) -> int:
        return len(self.data)

    def is_empty(self) -> bool:
        return not self.data


class PaginationParams(BaseModel):
    """
    Cursor parameters for list endpoints.

    Example:
        >>> PaginationParams(limit=10, starting_after="cus_123").to_query()
        {'limit': 10, 'starting_after': 'cus_123'}
    """

    limit: Optional[int] = Field(default=DEFAULT_PAGE_LIMIT, ge=1)
    starting_after: Optional[str] = None

    def to_query(self) -> Dict[str, Any]:
        """Query parameters without unset values."""
        return self.model_dump(exclude_none=True)
