"""Postal address shared by customers, orders and checkout sessions."""

from typing import Optional

from pydantic import BaseModel, ConfigDict


class Address(BaseModel):
    """Postal address; unknown fields from the API are kept."""

    model_config = ConfigDict(extra="allow")

    address_line: Optional[str] = None
    address_line_2: Optional[str] = None
    postal_code: Optional[str] = None
    postal_place: Optional[str] = None
    country: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None
