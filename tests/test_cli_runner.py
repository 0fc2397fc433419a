# tests/test_cli_runner.py

"""Tests for the headless CLI runner."""

import io
import json
import tempfile
import unittest
from datetime import datetime
from decimal import Decimal
from pathlib import Path
from unittest.mock import patch

from pricewatch.cli import runner
from pricewatch.storage.watch_store import WatchStore


class TestCliRunner(unittest.TestCase):
    """Exercise run_* entry points against a temp DB."""

    def setUp(self) -> None:
        """Seed a user watching one product."""
        self.tmp_dir = Path(tempfile.mkdtemp())
        self.db_path = str(self.tmp_dir / "cli.db")
        store = WatchStore(db_path=Path(self.db_path))
        self.user_id = store.add_user("asha", "asha@example.com")
        self.product_id = store.add_product("Scanner")
        store.record_observation(
            self.product_id, "Amazon", Decimal("5600"),
            observed_at=datetime(2026, 7, 1),
        )
        store.close()

    def _run(self, func, *args, **kwargs) -> tuple[int, str]:  # type: ignore[no-untyped-def]
        """Call a runner function capturing stdout."""
        buf = io.StringIO()
        with patch("sys.stdout", buf):
            code = func(*args, **kwargs)
        return code, buf.getvalue()

    def test_watch_then_comparisons_json(self) -> None:
        """watch prints a success payload; comparisons prints items."""
        code, out = self._run(
            runner.run_mutation, "watch", str(self.user_id),
            str(self.product_id), "GeM", db_path=self.db_path,
        )
        self.assertEqual(code, 0)
        self.assertTrue(json.loads(out)["success"])

        code, out = self._run(
            runner.run_comparisons, str(self.user_id), "json", None,
            db_path=self.db_path,
        )
        self.assertEqual(code, 0)
        items = json.loads(out)
        self.assertEqual(items[0]["watched"]["source"], "GeM")
        self.assertEqual(items[0]["alternate"]["source"], "Amazon")

    def test_unwatch_missing_succeeds(self) -> None:
        """unwatch of an absent triple exits 0."""
        code, out = self._run(
            runner.run_mutation, "unwatch", str(self.user_id),
            str(self.product_id), "GeM", db_path=self.db_path,
        )
        self.assertEqual(code, 0)
        self.assertFalse(json.loads(out)["removed"])

    def test_watch_invalid_source_fails(self) -> None:
        """Validation failures exit 1 with an error payload."""
        code, out = self._run(
            runner.run_mutation, "watch", str(self.user_id),
            str(self.product_id), "<bad>", db_path=self.db_path,
        )
        self.assertEqual(code, 1)
        self.assertFalse(json.loads(out)["success"])

    def test_comparisons_with_exports(self) -> None:
        """-o writes JSON and CSV exports."""
        out_dir = self.tmp_dir / "exports"
        self._run(
            runner.run_mutation, "watch", str(self.user_id),
            str(self.product_id), "GeM", db_path=self.db_path,
        )
        code, out = self._run(
            runner.run_comparisons, str(self.user_id), "json",
            str(out_dir), db_path=self.db_path,
        )
        self.assertEqual(code, 0)
        self.assertEqual(len(json.loads(out)), 1)
        self.assertEqual(len(list(out_dir.glob("watchlist_*.json"))), 1)
        self.assertEqual(len(list(out_dir.glob("export_watchlist_*.csv"))), 1)

    def test_comparisons_table(self) -> None:
        """Table output exits 0."""
        code, _ = self._run(
            runner.run_comparisons, str(self.user_id), "table", None,
            db_path=self.db_path,
        )
        self.assertEqual(code, 0)

    def test_comparisons_bad_user(self) -> None:
        """A malformed user id exits 1."""
        code, _ = self._run(
            runner.run_comparisons, "abc", "json", None,
            db_path=self.db_path,
        )
        self.assertEqual(code, 1)

    def test_init_db_and_health(self) -> None:
        """init-db creates the schema and health reports it reachable."""
        fresh = str(self.tmp_dir / "fresh" / "new.db")
        code, _ = self._run(runner.run_init_db, db_path=fresh)
        self.assertEqual(code, 0)
        self.assertTrue(Path(fresh).exists())
        code, _ = self._run(runner.run_health_check, db_path=fresh)
        self.assertEqual(code, 0)

    def test_health_on_missing_database(self) -> None:
        """health against a mistyped path fails and leaves nothing behind."""
        missing = self.tmp_dir / "nope" / "missing.db"
        code, _ = self._run(runner.run_health_check, db_path=str(missing))
        self.assertEqual(code, 1)
        self.assertFalse(missing.exists())


if __name__ == "__main__":
    unittest.main()
