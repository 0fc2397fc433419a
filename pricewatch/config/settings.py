# pricewatch/config/settings.py

"""Central configuration for the pricewatch engine."""

import os
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()


def _csv_env(name: str, default: list[str]) -> list[str]:
    """Read a comma-separated list from the environment."""
    raw = os.getenv(name)
    if raw is None:
        return default
    return [item.strip() for item in raw.split(",") if item.strip()]


class Settings:
    """Central configuration for the pricewatch engine."""

    # --- Paths ---
    BASE_DIR: Path = Path(__file__).resolve().parent.parent.parent
    DB_PATH: Path = Path(
        os.getenv("PRICEWATCH_DB_PATH", str(BASE_DIR / "data" / "pricewatch.db"))
    )
    RESULTS_DIR: Path = BASE_DIR / "results"
    LOGS_DIR: Path = Path(
        os.getenv("PRICEWATCH_LOGS_DIR", str(BASE_DIR / "logs"))
    )

    # --- Logging ---
    LOG_LEVEL: str = os.getenv("PRICEWATCH_LOG_LEVEL", "WARNING").upper()  # Console threshold
    LOG_RETENTION: int = int(os.getenv("PRICEWATCH_LOG_RETENTION", "20"))  # Run logs kept

    # --- Storage ---
    DB_TIMEOUT: float = float(os.getenv("PRICEWATCH_DB_TIMEOUT", "5.0"))  # Busy timeout (secs)

    # --- Comparison ---
    ALTERNATE_SOURCE_PRIORITY: list[str] = _csv_env(
        "PRICEWATCH_ALT_PRIORITY", ["Amazon", "Flipkart"],
    )
    DEFAULT_CURRENCY: str = "INR"
    UNAVAILABLE_LABEL: str = "Price not available"
    PLACEHOLDER_IMAGE: str = "images/placeholder.png"

    # --- Validation ---
    MAX_SOURCE_LENGTH: int = 50         # VARCHAR(50) in the legacy schema

    # --- Health ---
    HEALTH_SLOW_MS: float = 500.0       # Storage probe latency considered slow

    # --- Marketplaces (registry for CLI help and labels) ---
    KNOWN_SOURCES: list[dict[str, str]] = [
        {"id": "GeM", "label": "Government e-Marketplace"},
        {"id": "Amazon", "label": "Amazon"},
        {"id": "Flipkart", "label": "Flipkart"},
    ]
