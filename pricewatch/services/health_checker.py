# pricewatch/services/health_checker.py

"""Storage connectivity health checker."""

import logging
import time
from dataclasses import dataclass
from pathlib import Path

from pricewatch.config.settings import Settings
from pricewatch.errors import PriceWatchError
from pricewatch.storage.watch_store import WatchStore

logger = logging.getLogger("pricewatch.health")


@dataclass
class HealthResult:
    """Result of a single storage health probe."""

    target: str
    status: str  # "ok", "slow", "down"
    latency_ms: float
    message: str


def probe_storage(db_path: Path | None = None) -> HealthResult:
    """Open an existing store, run a trivial query and time it.

    A missing database file is reported as down rather than created.
    """
    path = db_path or Settings.DB_PATH
    if not path.is_file():
        logger.warning("Health check %s: down (database file missing)", path)
        return HealthResult(
            target=str(path),
            status="down",
            latency_ms=0.0,
            message="Database file not found",
        )

    start = time.monotonic()
    try:
        store = WatchStore(db_path=path)
        try:
            store.ping()
        finally:
            store.close()
    except PriceWatchError as exc:
        elapsed_ms = (time.monotonic() - start) * 1000
        logger.warning("Health check %s: down (%s)", path, exc.message)
        return HealthResult(
            target=str(path),
            status="down",
            latency_ms=elapsed_ms,
            message=exc.message[:80],
        )

    elapsed_ms = (time.monotonic() - start) * 1000
    status = "slow" if elapsed_ms > Settings.HEALTH_SLOW_MS else "ok"
    logger.info(
        "Health check %s: %s (%.0fms)", path, status, elapsed_ms,
    )
    return HealthResult(
        target=str(path),
        status=status,
        latency_ms=elapsed_ms,
        message="High latency" if status == "slow" else "",
    )
