# pricewatch/models/price_observation.py

"""Append-only price observation model."""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal


@dataclass(frozen=True)
class PriceObservation:
    """A single price snapshot for a product on one marketplace.

    ``price`` is ``None`` when the listing had no usable price; it is never
    replaced by zero.  ``is_available`` is ``None`` when stock is unknown.
    """

    id: int
    product_id: int
    source: str
    price: Decimal | None
    observed_at: datetime
    currency: str = "INR"
    product_url: str | None = None
    seller_name: str | None = None
    rating: Decimal | None = None
    rating_count: int | None = None
    is_available: bool | None = None
