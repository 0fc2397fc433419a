# tests/conftest.py

"""Shared pytest fixtures for the pricewatch test suite."""

from collections.abc import Generator
from pathlib import Path
from unittest.mock import patch

import pytest


@pytest.fixture(autouse=True)
def isolated_paths(tmp_path: Path) -> Generator[None, None, None]:
    """Point default DB, results and logs paths at a per-test temp dir."""
    with (
        patch("pricewatch.config.settings.Settings.DB_PATH", tmp_path / "default.db"),
        patch("pricewatch.config.settings.Settings.RESULTS_DIR", tmp_path / "results"),
        patch("pricewatch.config.settings.Settings.LOGS_DIR", tmp_path / "logs"),
    ):
        yield
