# pricewatch/models/comparison.py

"""Render-ready comparison records built for a user's watchlist."""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal

from pricewatch.config.settings import Settings

_CENTS = Decimal("0.01")


def format_price(price: Decimal | None, currency: str) -> str:
    """Format a price for display, e.g. ``INR 1,234.50``."""
    if price is None:
        return Settings.UNAVAILABLE_LABEL
    return f"{currency} {price.quantize(_CENTS):,.2f}"


@dataclass(frozen=True)
class PriceSide:
    """One marketplace's latest price as shown in a comparison."""

    source: str
    price: Decimal | None = None
    currency: str = "INR"
    url: str | None = None
    seller_name: str | None = None
    is_available: bool | None = None
    observed_at: datetime | None = None

    @property
    def available(self) -> bool:
        """True when a usable price exists for this side."""
        return self.price is not None

    def to_dict(self) -> dict[str, object]:
        """Serialise to JSON-safe primitives."""
        return {
            "source": self.source,
            "available": self.available,
            "price": (
                str(self.price.quantize(_CENTS))
                if self.price is not None
                else None
            ),
            "currency": self.currency,
            "display_price": format_price(self.price, self.currency),
            "url": self.url,
            "seller_name": self.seller_name,
            "is_available": self.is_available,
            "observed_at": (
                self.observed_at.isoformat() if self.observed_at else None
            ),
        }


@dataclass(frozen=True)
class ComparisonRecord:
    """A watched listing next to the price of one alternate marketplace."""

    entry_id: int
    product_id: int
    product_name: str
    description: str | None
    image_url: str
    watched: PriceSide
    alternate: PriceSide | None
    added_at: datetime

    def to_dict(self) -> dict[str, object]:
        """Serialise to JSON-safe primitives."""
        return {
            "entry_id": self.entry_id,
            "product_id": self.product_id,
            "product_name": self.product_name,
            "description": self.description,
            "image_url": self.image_url,
            "added_at": self.added_at.isoformat(),
            "watched": self.watched.to_dict(),
            "alternate": (
                self.alternate.to_dict() if self.alternate else None
            ),
        }
