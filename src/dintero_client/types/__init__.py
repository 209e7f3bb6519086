"""Shared value types."""

from typing import Any, Dict

from .address import Address
from .money import Currency, Money
from .pagination import DEFAULT_PAGE_LIMIT, Pagination, PaginationParams

# Free-form key/value data attached to Dintero resources
Metadata = Dict[str, Any]

__all__ = [
    "Address",
    "Currency",
    "Money",
    "Metadata",
    "Pagination",
    "PaginationParams",
    "DEFAULT_PAGE_LIMIT",
]
