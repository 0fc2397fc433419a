# pricewatch/services/watchlist_api.py

"""JSON-serialisable watchlist operations exposed to collaborators.

Every call returns a plain dict.  Failures never raise out of this layer;
they are mapped onto ``{"success": False, "error": ..., "retryable": ...}``
with a message suitable for end users.
"""

import logging
from collections.abc import Callable

from pricewatch.errors import (
    PriceWatchError,
    QueryError,
    StorageConnectionError,
    ValidationError,
)
from pricewatch.filters.watch_validator import WatchValidator
from pricewatch.services.comparison_aggregator import (
    WatchlistComparisonAggregator,
)
from pricewatch.services.watchlist_service import WatchlistMembershipService
from pricewatch.storage.watch_store import WatchStore

logger = logging.getLogger("pricewatch.api")

UNAVAILABLE_MESSAGE = (
    "The watchlist service is temporarily unavailable. "
    "Please try again later."
)
GENERIC_MESSAGE = "Could not process your watchlist request at this time."


def _failure(exc: PriceWatchError) -> dict[str, object]:
    """Translate the error taxonomy into a user-facing payload."""
    if isinstance(exc, ValidationError):
        return {"success": False, "error": exc.message, "retryable": False}
    if isinstance(exc, StorageConnectionError):
        return {
            "success": False,
            "error": UNAVAILABLE_MESSAGE,
            "retryable": True,
        }
    # QueryError and anything else: the detail stays in the log
    return {"success": False, "error": GENERIC_MESSAGE, "retryable": False}


class WatchlistAPI:
    """Facade over the aggregator and membership service."""

    def __init__(
        self,
        store: WatchStore,
        aggregator: WatchlistComparisonAggregator | None = None,
        membership: WatchlistMembershipService | None = None,
    ) -> None:
        self.aggregator = aggregator or WatchlistComparisonAggregator(store)
        self.membership = membership or WatchlistMembershipService(store)

    def _call(
        self,
        operation: str,
        func: Callable[[], dict[str, object]],
    ) -> dict[str, object]:
        try:
            return func()
        except ValidationError as exc:
            logger.info("%s rejected: %s", operation, exc.message)
            return _failure(exc)
        except StorageConnectionError as exc:
            logger.warning("%s failed, storage unavailable: %s", operation, exc)
            return _failure(exc)
        except QueryError as exc:
            logger.error(
                "%s failed: %s %s", operation, exc.message, exc.details,
                exc_info=True,
            )
            return _failure(exc)

    def get_comparisons(self, user_id: object) -> dict[str, object]:
        """Return ``{"success": True, "items": [...]}`` newest first."""

        def run() -> dict[str, object]:
            uid = WatchValidator.identifier(user_id, "user_id")
            records = self.aggregator.get_comparisons(uid)
            return {
                "success": True,
                "items": [r.to_dict() for r in records],
            }

        return self._call("get_comparisons", run)

    def add_watch(
        self, user_id: object, product_id: object, source: object,
    ) -> dict[str, object]:
        """Return ``{"success": True, "entry_id": ..., "created": ...}``."""

        def run() -> dict[str, object]:
            result = self.membership.add(user_id, product_id, source)
            return {
                "success": result.success,
                "entry_id": result.entry_id,
                "created": result.created,
                "message": (
                    "Added to watchlist."
                    if result.created
                    else "Already in your watchlist."
                ),
            }

        return self._call("add_watch", run)

    def remove_watch(
        self, user_id: object, product_id: object, source: object,
    ) -> dict[str, object]:
        """Return ``{"success": True, "removed": ...}``; absent is fine."""

        def run() -> dict[str, object]:
            result = self.membership.remove(user_id, product_id, source)
            return {
                "success": result.success,
                "removed": result.removed,
                "message": (
                    "Removed from watchlist."
                    if result.removed
                    else "Item was not in your watchlist."
                ),
            }

        return self._call("remove_watch", run)
