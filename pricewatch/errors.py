# pricewatch/errors.py

"""Error taxonomy shared by the storage layer, services and API."""

from typing import Any


class PriceWatchError(Exception):
    """Base exception for pricewatch."""

    def __init__(
        self,
        message: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        self.message = message
        self.details = details or {}
        super().__init__(message)


class StorageConnectionError(PriceWatchError, ConnectionError):
    """Storage unreachable, busy past its timeout, or failing I/O.

    Transient: the caller may retry the same request.
    """


class QueryError(PriceWatchError):
    """Malformed query, schema mismatch or constraint failure (a defect)."""


class ValidationError(PriceWatchError):
    """Rejected identifiers or source supplied to a watchlist mutation."""

    def __init__(self, field: str, reason: str) -> None:
        super().__init__(
            message=reason,
            details={"field": field},
        )
        self.field = field


class NotFoundError(PriceWatchError):
    """No row matched a delete or lookup."""


class OrphanedEntryWarning(UserWarning):
    """A watchlist entry references a product that no longer exists."""

    def __init__(self, entry_id: int, product_id: int) -> None:
        super().__init__(
            f"Watchlist entry {entry_id} references missing product {product_id}"
        )
        self.entry_id = entry_id
        self.product_id = product_id
