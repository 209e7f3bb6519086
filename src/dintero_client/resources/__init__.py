"""Resource adapters over the request executor."""

from .accounts import AccountsResource
from .base import BaseResource, page_query, to_payload
from .checkout import CheckoutResource
from .insights import InsightsResource
from .loyalty import LoyaltyResource
from .orders import OrdersResource
from .payments import PaymentsResource

__all__ = [
    "BaseResource",
    "AccountsResource",
    "CheckoutResource",
    "InsightsResource",
    "LoyaltyResource",
    "OrdersResource",
    "PaymentsResource",
    "page_query",
    "to_payload",
]
