# pricewatch/services/comparison_aggregator.py

"""Assemble ordered price comparisons for a user's watchlist."""

import logging
from collections.abc import Iterable, Mapping

from pricewatch.config.settings import Settings
from pricewatch.errors import OrphanedEntryWarning
from pricewatch.filters.alternate_source import AlternateSourceSelector
from pricewatch.filters.latest_price import LatestPriceResolver
from pricewatch.filters.watch_validator import absolute_url
from pricewatch.models.comparison import ComparisonRecord, PriceSide
from pricewatch.models.price_observation import PriceObservation
from pricewatch.models.product import Product
from pricewatch.models.watchlist_entry import WatchlistEntry
from pricewatch.storage.watch_store import WatchStore

logger = logging.getLogger("pricewatch.comparisons")


def _side(source: str, obs: PriceObservation | None) -> PriceSide:
    """Build one side of a comparison; no observation means unavailable."""
    if obs is None:
        return PriceSide(source=source, currency=Settings.DEFAULT_CURRENCY)
    return PriceSide(
        source=source,
        price=obs.price,
        currency=obs.currency,
        url=absolute_url(obs.product_url),
        seller_name=obs.seller_name,
        is_available=obs.is_available,
        observed_at=obs.observed_at,
    )


class WatchlistComparisonAggregator:
    """Compose the resolver and selector into render-ready records."""

    def __init__(
        self,
        store: WatchStore,
        selector: AlternateSourceSelector | None = None,
    ) -> None:
        self._store = store
        self.selector = selector or AlternateSourceSelector()

    def get_comparisons(self, user_id: int) -> list[ComparisonRecord]:
        """Load the user's watchlist and build its comparison records."""
        entries = self._store.list_watches(user_id)

        products: dict[int, Product] = {}
        observations: list[PriceObservation] = []
        for product_id in sorted({e.product_id for e in entries}):
            product = self._store.get_product(product_id)
            if product is None:
                continue
            products[product_id] = product
            observations.extend(self._store.get_observations(product_id))

        records = self.build(entries, products, observations)
        logger.info(
            "Built %d comparisons for user %d (%d entries)",
            len(records), user_id, len(entries),
        )
        return records

    def build(
        self,
        entries: Iterable[WatchlistEntry],
        products: Mapping[int, Product],
        observations: Iterable[PriceObservation],
    ) -> list[ComparisonRecord]:
        """Pure assembly step, newest watchlist entry first.

        Entries whose product is missing, or whose product's history
        cannot be resolved, are logged and left out; every other entry
        still produces a record.
        """
        by_product: dict[int, list[PriceObservation]] = {}
        for obs in observations:
            by_product.setdefault(obs.product_id, []).append(obs)

        source_maps: dict[int, dict[str, PriceObservation]] = {}
        ordered = sorted(
            entries, key=lambda e: (e.added_at, e.id), reverse=True,
        )

        records: list[ComparisonRecord] = []
        for entry in ordered:
            try:
                if entry.product_id not in source_maps:
                    source_maps[entry.product_id] = LatestPriceResolver.resolve(
                        by_product.get(entry.product_id, []),
                    )
                records.append(
                    self._build_record(
                        entry,
                        products.get(entry.product_id),
                        source_maps[entry.product_id],
                    )
                )
            except OrphanedEntryWarning as warning:
                logger.warning("Skipping orphaned entry: %s", warning)
            except (TypeError, ValueError) as exc:
                logger.error(
                    "Skipping entry %d: prices for product %d unresolvable: %s",
                    entry.id, entry.product_id, exc,
                )
        return records

    def _build_record(
        self,
        entry: WatchlistEntry,
        product: Product | None,
        source_map: Mapping[str, PriceObservation],
    ) -> ComparisonRecord:
        if product is None:
            raise OrphanedEntryWarning(entry.id, entry.product_id)

        watched = _side(entry.source, source_map.get(entry.source))

        alternate: PriceSide | None = None
        alt_source = self.selector.select(source_map, entry.source)
        if alt_source is not None:
            alternate = _side(alt_source, source_map[alt_source])

        return ComparisonRecord(
            entry_id=entry.id,
            product_id=product.id,
            product_name=product.name,
            description=product.description,
            image_url=product.image_url or Settings.PLACEHOLDER_IMAGE,
            watched=watched,
            alternate=alternate,
            added_at=entry.added_at,
        )
