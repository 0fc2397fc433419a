# pricewatch/filters/alternate_source.py

"""Choose the marketplace a watched listing is compared against."""

import logging
from collections.abc import Mapping, Sequence

from pricewatch.config.settings import Settings
from pricewatch.models.price_observation import PriceObservation

logger = logging.getLogger("pricewatch.filters")


class AlternateSourceSelector:
    """Deterministic alternate-source policy.

    Priority sources win in list order whenever they have a resolved
    observation.  Otherwise the most recently observed remaining source is
    used, with ties going to the lexically smallest name.
    """

    def __init__(self, priority: Sequence[str] | None = None) -> None:
        self.priority: tuple[str, ...] = tuple(
            Settings.ALTERNATE_SOURCE_PRIORITY
            if priority is None
            else priority
        )

    def select(
        self,
        source_map: Mapping[str, PriceObservation],
        watched_source: str,
    ) -> str | None:
        """Return the alternate source name, or ``None`` if there is none."""
        candidates = {
            source: obs
            for source, obs in source_map.items()
            if source != watched_source
        }
        if not candidates:
            return None

        for source in self.priority:
            if source in candidates:
                return source

        # max() keeps the first of equal keys, so sort names first
        fallback = max(
            sorted(candidates),
            key=lambda s: candidates[s].observed_at,
        )
        logger.debug(
            "No priority source for watched %s; falling back to %s",
            watched_source,
            fallback,
        )
        return fallback
