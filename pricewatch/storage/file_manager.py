# pricewatch/storage/file_manager.py

"""Handles saving watchlist comparisons to disk."""

import csv
import json
import logging
from datetime import datetime
from pathlib import Path

from pricewatch.config.settings import Settings
from pricewatch.models.comparison import ComparisonRecord

logger = logging.getLogger("pricewatch.storage")

_CSV_HEADER = [
    "Product",
    "Watched Source",
    "Watched Price",
    "Alternate Source",
    "Alternate Price",
    "Added At",
    "Watched URL",
    "Alternate URL",
]


class FileManager:
    """Handles saving watchlist comparisons to disk."""

    def __init__(self, results_dir: Path | None = None) -> None:
        self.results_dir: Path = results_dir or Settings.RESULTS_DIR
        self.results_dir.mkdir(parents=True, exist_ok=True)
        logger.debug("FileManager initialised, results_dir=%s", self.results_dir)

    def save_comparisons(
        self, user_id: int, records: list[ComparisonRecord],
    ) -> Path:
        """Save comparison records to a timestamped JSON file."""
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        filepath = self.results_dir / f"watchlist_{user_id}_{timestamp}.json"

        with open(filepath, "w", encoding="utf-8") as f:
            json.dump(
                [r.to_dict() for r in records], f, ensure_ascii=False, indent=2,
            )

        logger.info(
            "Saved %d comparisons for user %d to %s",
            len(records), user_id, filepath,
        )
        return filepath

    def export_csv(
        self, user_id: int, records: list[ComparisonRecord],
    ) -> Path:
        """Export comparisons to a human-readable CSV file."""
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        filepath = self.results_dir / f"export_watchlist_{user_id}_{timestamp}.csv"

        with open(filepath, "w", newline="", encoding="utf-8") as f:
            writer = csv.writer(f)
            writer.writerow(_CSV_HEADER)
            for r in records:
                alt = r.alternate
                writer.writerow([
                    r.product_name,
                    r.watched.source,
                    r.watched.to_dict()["display_price"],
                    alt.source if alt else "",
                    alt.to_dict()["display_price"] if alt else "",
                    r.added_at.isoformat(),
                    r.watched.url or "",
                    (alt.url or "") if alt else "",
                ])

        logger.info(
            "Exported %d comparisons for user %d to %s",
            len(records), user_id, filepath,
        )
        return filepath
