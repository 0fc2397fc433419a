# pricewatch/services/watchlist_service.py

"""Idempotent add/remove of a user's watchlist entries."""

import logging
from dataclasses import dataclass

from pricewatch.errors import NotFoundError, ValidationError
from pricewatch.filters.watch_validator import WatchValidator
from pricewatch.storage.watch_store import WatchStore

logger = logging.getLogger("pricewatch.watchlist")


@dataclass(frozen=True)
class WatchResult:
    """Outcome of a membership change.

    ``created`` / ``removed`` report whether this call changed anything;
    ``success`` is true for the idempotent no-op as well.
    """

    success: bool
    entry_id: int | None = None
    created: bool = False
    removed: bool = False


class WatchlistMembershipService:
    """Add and remove (product, source) listings on a user's watchlist."""

    def __init__(self, store: WatchStore) -> None:
        self._store = store

    def add(
        self, user_id: object, product_id: object, source: object,
    ) -> WatchResult:
        """Watch a listing; an existing entry is returned, not duplicated."""
        uid, pid, name = WatchValidator.watch_triple(
            user_id, product_id, source,
        )
        if not self._store.user_exists(uid):
            raise ValidationError("user_id", f"Unknown user {uid}")
        if self._store.get_product(pid) is None:
            raise ValidationError("product_id", f"Unknown product {pid}")

        entry_id, created = self._store.insert_watch_if_absent(uid, pid, name)
        if created:
            logger.info(
                "User %d now watching product %d on %s (entry %d)",
                uid, pid, name, entry_id,
            )
        else:
            logger.debug(
                "User %d already watching product %d on %s (entry %d)",
                uid, pid, name, entry_id,
            )
        return WatchResult(success=True, entry_id=entry_id, created=created)

    def remove(
        self, user_id: object, product_id: object, source: object,
    ) -> WatchResult:
        """Stop watching a listing; removing an absent entry succeeds."""
        uid, pid, name = WatchValidator.watch_triple(
            user_id, product_id, source,
        )
        try:
            self._store.delete_watch(uid, pid, name)
        except NotFoundError:
            logger.debug(
                "Nothing to remove for user %d, product %d on %s",
                uid, pid, name,
            )
            return WatchResult(success=True, removed=False)

        logger.info(
            "User %d stopped watching product %d on %s", uid, pid, name,
        )
        return WatchResult(success=True, removed=True)
