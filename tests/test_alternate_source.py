# tests/test_alternate_source.py

"""Tests for alternate-source selection."""

import unittest
from datetime import datetime
from decimal import Decimal
from unittest.mock import patch

from pricewatch.filters.alternate_source import AlternateSourceSelector
from pricewatch.models.price_observation import PriceObservation

T1 = datetime(2026, 2, 1, 8, 0)
T2 = datetime(2026, 2, 2, 8, 0)
T3 = datetime(2026, 2, 3, 8, 0)


def _source_map(**observed: datetime) -> dict[str, PriceObservation]:
    """Build a resolved map from source name to observation time."""
    return {
        source: PriceObservation(
            id=idx,
            product_id=1,
            source=source,
            price=Decimal("10"),
            observed_at=ts,
        )
        for idx, (source, ts) in enumerate(observed.items(), 1)
    }


class TestAlternateSourceSelector(unittest.TestCase):
    """AlternateSourceSelector.select policy tests."""

    def setUp(self) -> None:
        """Use the default two-store priority list."""
        self.selector = AlternateSourceSelector(["Amazon", "Flipkart"])

    def test_first_priority_source_wins(self) -> None:
        """Amazon beats Flipkart when both are present."""
        source_map = _source_map(Amazon=T1, Flipkart=T3, GeM=T2)
        self.assertEqual(self.selector.select(source_map, "GeM"), "Amazon")

    def test_priority_beats_recency(self) -> None:
        """A priority source is chosen over a fresher non-priority one."""
        source_map = _source_map(Flipkart=T1, Croma=T3, Snapdeal=T2)
        self.assertEqual(
            self.selector.select(source_map, "Snapdeal"), "Flipkart",
        )

    def test_watched_priority_source_is_skipped(self) -> None:
        """Watching Amazon falls through to Flipkart."""
        source_map = _source_map(Amazon=T3, Flipkart=T1)
        self.assertEqual(
            self.selector.select(source_map, "Amazon"), "Flipkart",
        )

    def test_fallback_most_recent(self) -> None:
        """Without priority matches, the freshest remaining source wins."""
        source_map = _source_map(Snapdeal=T1, Croma=T2)
        self.assertEqual(self.selector.select(source_map, "Snapdeal"), "Croma")

    def test_fallback_tie_breaks_by_name(self) -> None:
        """Equal recency resolves to the lexically smallest name."""
        source_map = _source_map(Tata=T2, Croma=T2, Reliance=T2, GeM=T3)
        self.assertEqual(self.selector.select(source_map, "GeM"), "Croma")

    def test_no_candidates(self) -> None:
        """Only the watched source present means no alternate."""
        source_map = _source_map(GeM=T1)
        self.assertIsNone(self.selector.select(source_map, "GeM"))
        self.assertIsNone(self.selector.select({}, "GeM"))

    def test_never_returns_watched_source(self) -> None:
        """Property: the result is never the watched source."""
        source_map = _source_map(Amazon=T1, Flipkart=T2, GeM=T3, Croma=T3)
        for watched in ("Amazon", "Flipkart", "GeM", "Croma", "Other"):
            with self.subTest(watched=watched):
                self.assertNotEqual(
                    self.selector.select(source_map, watched), watched,
                )

    def test_watched_absent_from_map(self) -> None:
        """A watched source with no data still gets a priority alternate."""
        source_map = _source_map(Amazon=T2, Flipkart=T3)
        self.assertEqual(self.selector.select(source_map, "GeM"), "Amazon")

    def test_custom_priority(self) -> None:
        """The priority list is configuration, not a literal."""
        selector = AlternateSourceSelector(["Croma"])
        source_map = _source_map(Amazon=T3, Croma=T1, GeM=T2)
        self.assertEqual(selector.select(source_map, "GeM"), "Croma")

    def test_empty_priority_uses_recency(self) -> None:
        """An empty priority list always uses the recency fallback."""
        selector = AlternateSourceSelector([])
        source_map = _source_map(Amazon=T1, Flipkart=T3, GeM=T2)
        self.assertEqual(selector.select(source_map, "GeM"), "Flipkart")

    def test_default_priority_from_settings(self) -> None:
        """Without an explicit list the Settings value is used."""
        with patch(
            "pricewatch.config.settings.Settings.ALTERNATE_SOURCE_PRIORITY",
            ["Flipkart"],
        ):
            selector = AlternateSourceSelector()
        self.assertEqual(selector.priority, ("Flipkart",))

    def test_case_sensitive_match(self) -> None:
        """Source names match exactly; 'amazon' is not 'Amazon'."""
        source_map = _source_map(amazon=T3, Flipkart=T1)
        self.assertEqual(self.selector.select(source_map, "GeM"), "Flipkart")


if __name__ == "__main__":
    unittest.main()
