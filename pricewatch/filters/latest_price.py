# pricewatch/filters/latest_price.py

"""Reduce raw price observations to the latest record per source."""

import dataclasses
import logging
from collections.abc import Iterable
from decimal import Decimal, InvalidOperation

from pricewatch.models.price_observation import PriceObservation

logger = logging.getLogger("pricewatch.filters")


def coerce_price(raw: object) -> Decimal | None:
    """Return *raw* as a non-negative finite Decimal, or ``None``.

    Non-numeric strings, NaN, infinities and negative values are treated
    as an absent price.  Booleans are rejected even though they are ints.
    """
    if raw is None or isinstance(raw, bool):
        return None
    if isinstance(raw, float):
        raw = repr(raw)
    try:
        value = raw if isinstance(raw, Decimal) else Decimal(str(raw).strip())
    except (InvalidOperation, ValueError):
        return None
    if not value.is_finite() or value < 0:
        return None
    return value


def _supersedes(
    candidate: PriceObservation, best: PriceObservation,
) -> bool:
    """Later timestamp wins; equal timestamps go to the larger id."""
    return (candidate.observed_at, candidate.id) > (best.observed_at, best.id)


class LatestPriceResolver:
    """Pick the most recent observation for every source of a product."""

    @staticmethod
    def resolve(
        observations: Iterable[PriceObservation],
    ) -> dict[str, PriceObservation]:
        """Map each source to its latest observation for one product.

        Single pass keeping a best-so-far candidate per source.  Sources
        with no observations are simply absent from the result.

        Raises ``ValueError`` when observations span several products;
        use :meth:`resolve_all` for mixed collections.
        """
        best: dict[str, PriceObservation] = {}
        product_id: int | None = None

        for obs in observations:
            if product_id is None:
                product_id = obs.product_id
            elif obs.product_id != product_id:
                msg = (
                    "Observations span products "
                    f"{product_id} and {obs.product_id}"
                )
                raise ValueError(msg)

            current = best.get(obs.source)
            if current is None or _supersedes(obs, current):
                best[obs.source] = obs

        return {
            source: LatestPriceResolver._sanitise(obs)
            for source, obs in best.items()
        }

    @staticmethod
    def resolve_all(
        observations: Iterable[PriceObservation],
    ) -> dict[int, dict[str, PriceObservation]]:
        """Partition a mixed collection by product, then resolve each."""
        by_product: dict[int, list[PriceObservation]] = {}
        for obs in observations:
            by_product.setdefault(obs.product_id, []).append(obs)
        return {
            product_id: LatestPriceResolver.resolve(group)
            for product_id, group in by_product.items()
        }

    @staticmethod
    def _sanitise(obs: PriceObservation) -> PriceObservation:
        """Replace a malformed price with ``None``."""
        price = coerce_price(obs.price)
        if price is obs.price:
            return obs
        if price is None:
            logger.debug(
                "Unusable price %r for product %d on %s (observation %d)",
                obs.price,
                obs.product_id,
                obs.source,
                obs.id,
            )
        return dataclasses.replace(obs, price=price)
