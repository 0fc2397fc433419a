# pricewatch/models/watchlist_entry.py

"""User watchlist entry model."""

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class WatchlistEntry:
    """A user's subscription to one (product, source) listing."""

    id: int
    user_id: int
    product_id: int
    source: str
    added_at: datetime
