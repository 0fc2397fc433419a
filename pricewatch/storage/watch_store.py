# pricewatch/storage/watch_store.py

"""SQLite-backed store for products, price observations and watchlists."""

import logging
import sqlite3
from collections.abc import Iterator
from contextlib import contextmanager, suppress
from datetime import datetime, timezone
from decimal import Decimal
from pathlib import Path
from typing import cast

from pricewatch.config.settings import Settings
from pricewatch.errors import NotFoundError, QueryError, StorageConnectionError
from pricewatch.filters.latest_price import coerce_price
from pricewatch.models.price_observation import PriceObservation
from pricewatch.models.product import Product
from pricewatch.models.watchlist_entry import WatchlistEntry

logger = logging.getLogger("pricewatch.storage")

# sqlite3.OperationalError messages that mean "try again later"
_TRANSIENT_MARKERS: tuple[str, ...] = (
    "database is locked",
    "database is busy",
    "database table is locked",
    "unable to open database",
    "disk i/o error",
)

_SCHEMA = """\
CREATE TABLE IF NOT EXISTS products (
    product_id     INTEGER PRIMARY KEY AUTOINCREMENT,
    name           TEXT    NOT NULL,
    description    TEXT,
    category       TEXT,
    brand          TEXT,
    base_image_url TEXT,
    created_at     TEXT    NOT NULL,
    updated_at     TEXT    NOT NULL
);

CREATE TABLE IF NOT EXISTS users (
    user_id    INTEGER PRIMARY KEY AUTOINCREMENT,
    username   TEXT    NOT NULL UNIQUE,
    email      TEXT    NOT NULL UNIQUE,
    created_at TEXT    NOT NULL
);

CREATE TABLE IF NOT EXISTS prices (
    price_id     INTEGER PRIMARY KEY AUTOINCREMENT,
    product_id   INTEGER NOT NULL
                 REFERENCES products(product_id)
                 ON DELETE CASCADE ON UPDATE CASCADE,
    source       TEXT    NOT NULL,
    price        TEXT,
    currency     TEXT    NOT NULL DEFAULT 'INR',
    product_url  TEXT,
    seller_name  TEXT,
    rating       TEXT,
    rating_count INTEGER,
    is_available INTEGER,
    fetched_at   TEXT    NOT NULL
);

CREATE INDEX IF NOT EXISTS idx_prices_product_source_date
    ON prices(product_id, source, fetched_at);

CREATE TABLE IF NOT EXISTS watchlist_items (
    item_id    INTEGER PRIMARY KEY AUTOINCREMENT,
    user_id    INTEGER NOT NULL
               REFERENCES users(user_id)
               ON DELETE CASCADE ON UPDATE CASCADE,
    product_id INTEGER NOT NULL
               REFERENCES products(product_id)
               ON DELETE CASCADE ON UPDATE CASCADE,
    source     TEXT    NOT NULL,
    added_at   TEXT    NOT NULL,
    UNIQUE (user_id, product_id, source)
);

CREATE INDEX IF NOT EXISTS idx_watchlist_user
    ON watchlist_items(user_id);
"""


def _classify(exc: sqlite3.Error, operation: str) -> Exception:
    """Map a sqlite3 failure onto the pricewatch error taxonomy."""
    text = str(exc).lower()
    if isinstance(exc, sqlite3.OperationalError) and any(
        marker in text for marker in _TRANSIENT_MARKERS
    ):
        logger.warning("Storage unavailable during %s: %s", operation, exc)
        return StorageConnectionError(
            "Storage is temporarily unavailable",
            details={"operation": operation, "reason": str(exc)},
        )
    logger.error("Query failed during %s: %s", operation, exc, exc_info=exc)
    return QueryError(
        f"Storage query failed during {operation}",
        details={"operation": operation, "reason": str(exc)},
    )


@contextmanager
def _translate_errors(
    operation: str, conn: sqlite3.Connection | None = None,
) -> Iterator[None]:
    """Re-raise sqlite3 errors as StorageConnectionError / QueryError.

    An open transaction on *conn* is rolled back first so a failed write
    never keeps the database locked.
    """
    try:
        yield
    except sqlite3.Error as exc:
        with suppress(sqlite3.Error):
            if conn is not None and conn.in_transaction:
                conn.rollback()
        raise _classify(exc, operation) from exc
    except OSError as exc:
        logger.warning("Storage path unusable during %s: %s", operation, exc)
        raise StorageConnectionError(
            "Storage is temporarily unavailable",
            details={"operation": operation, "reason": str(exc)},
        ) from exc


def _decimal_text(value: Decimal | float | int | str | None) -> str | None:
    """Store decimals as exact text so ``95.10`` never becomes ``95.1000001``."""
    if value is None:
        return None
    return str(value)


def _utc_text(value: datetime | None = None) -> str:
    """Serialise a timestamp as naive UTC ISO text.

    Aware values are converted to UTC; naive values are taken as UTC
    already, so every stored timestamp compares against every other.
    """
    ts = value or datetime.now(timezone.utc)
    if ts.tzinfo is not None:
        ts = ts.astimezone(timezone.utc).replace(tzinfo=None)
    return ts.isoformat()


def _parse_ts(text: str) -> datetime:
    ts = datetime.fromisoformat(text)
    if ts.tzinfo is not None:
        ts = ts.astimezone(timezone.utc).replace(tzinfo=None)
    return ts


def _parse_flag(value: int | None) -> bool | None:
    return None if value is None else bool(value)


class WatchStore:
    """SQLite store implementing the watchlist storage contracts.

    Each instance owns one connection.  Use one store per request or per
    thread; the unique (user, product, source) constraint keeps concurrent
    inserts from different connections consistent.
    """

    def __init__(
        self,
        db_path: Path | None = None,
        timeout: float | None = None,
    ) -> None:
        path = db_path or Settings.DB_PATH
        busy_timeout = Settings.DB_TIMEOUT if timeout is None else timeout
        with _translate_errors("open"):
            path.parent.mkdir(parents=True, exist_ok=True)
            self._conn = sqlite3.connect(
                str(path),
                timeout=busy_timeout,
                check_same_thread=False,
            )
            self._conn.execute("PRAGMA journal_mode=WAL")
            self._conn.execute("PRAGMA foreign_keys=ON")
            self._conn.executescript(_SCHEMA)
        logger.debug(
            "WatchStore opened at %s (timeout=%.1fs)", path, busy_timeout,
        )

    def close(self) -> None:
        """Close the database connection."""
        self._conn.close()

    def ping(self) -> None:
        """Run a trivial query; raises on an unusable connection."""
        with _translate_errors("ping", self._conn):
            self._conn.execute("SELECT 1 FROM watchlist_items LIMIT 1").fetchall()

    # ── Catalog ──────────────────────────────────────────

    def add_product(
        self,
        name: str,
        description: str | None = None,
        image_url: str | None = None,
        brand: str | None = None,
        category: str | None = None,
    ) -> int:
        """Insert a catalog product and return its id."""
        ts = _utc_text()
        with _translate_errors("add_product", self._conn):
            cur = self._conn.execute(
                "INSERT INTO products "
                "(name, description, category, brand, base_image_url, "
                " created_at, updated_at) "
                "VALUES (?, ?, ?, ?, ?, ?, ?)",
                (name, description, category, brand, image_url, ts, ts),
            )
            self._conn.commit()
        return cast(int, cur.lastrowid)

    def get_product(self, product_id: int) -> Product | None:
        """Return the product, or ``None`` when it does not exist."""
        with _translate_errors("get_product", self._conn):
            row = self._conn.execute(
                "SELECT product_id, name, description, base_image_url, "
                "       brand, category "
                "FROM products WHERE product_id = ?",
                (product_id,),
            ).fetchone()
        if row is None:
            return None
        return Product(
            id=row[0],
            name=row[1],
            description=row[2],
            image_url=row[3],
            brand=row[4],
            category=row[5],
        )

    def delete_product(self, product_id: int) -> bool:
        """Delete a product; its prices and watch entries cascade."""
        with _translate_errors("delete_product", self._conn):
            cur = self._conn.execute(
                "DELETE FROM products WHERE product_id = ?", (product_id,),
            )
            self._conn.commit()
        return cur.rowcount > 0

    # ── Users ────────────────────────────────────────────

    def add_user(self, username: str, email: str) -> int:
        """Insert a user account record and return its id."""
        with _translate_errors("add_user", self._conn):
            cur = self._conn.execute(
                "INSERT INTO users (username, email, created_at) "
                "VALUES (?, ?, ?)",
                (username, email, _utc_text()),
            )
            self._conn.commit()
        return cast(int, cur.lastrowid)

    def user_exists(self, user_id: int) -> bool:
        """Check whether a user id refers to an account."""
        with _translate_errors("user_exists", self._conn):
            row = self._conn.execute(
                "SELECT 1 FROM users WHERE user_id = ?", (user_id,),
            ).fetchone()
        return row is not None

    def delete_user(self, user_id: int) -> bool:
        """Delete a user; their watch entries cascade."""
        with _translate_errors("delete_user", self._conn):
            cur = self._conn.execute(
                "DELETE FROM users WHERE user_id = ?", (user_id,),
            )
            self._conn.commit()
        return cur.rowcount > 0

    # ── Price observations ───────────────────────────────

    def record_observation(
        self,
        product_id: int,
        source: str,
        price: Decimal | float | int | str | None,
        *,
        currency: str | None = None,
        product_url: str | None = None,
        seller_name: str | None = None,
        rating: Decimal | float | str | None = None,
        rating_count: int | None = None,
        is_available: bool | None = None,
        observed_at: datetime | None = None,
    ) -> int:
        """Append one price observation and return its id.

        Observations are never updated; a new price is a new row.
        """
        ts = _utc_text(observed_at)
        with _translate_errors("record_observation", self._conn):
            cur = self._conn.execute(
                "INSERT INTO prices "
                "(product_id, source, price, currency, product_url, "
                " seller_name, rating, rating_count, is_available, "
                " fetched_at) "
                "VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)",
                (
                    product_id,
                    source,
                    _decimal_text(price),
                    currency or Settings.DEFAULT_CURRENCY,
                    product_url,
                    seller_name,
                    _decimal_text(rating),
                    rating_count,
                    None if is_available is None else int(is_available),
                    ts,
                ),
            )
            self._conn.commit()
        price_id = cast(int, cur.lastrowid)
        logger.debug(
            "Recorded %s price %s for product %d at %s",
            source, price, product_id, ts,
        )
        return price_id

    def get_observations(
        self,
        product_id: int,
        source: str | None = None,
    ) -> list[PriceObservation]:
        """Return every observation for a product, optionally one source."""
        sql = (
            "SELECT price_id, product_id, source, price, currency, "
            "       product_url, seller_name, rating, rating_count, "
            "       is_available, fetched_at "
            "FROM prices WHERE product_id = ?"
        )
        params: tuple[object, ...] = (product_id,)
        if source is not None:
            sql += " AND source = ?"
            params = (product_id, source)

        with _translate_errors("get_observations", self._conn):
            rows = self._conn.execute(sql, params).fetchall()
        return [
            PriceObservation(
                id=r[0],
                product_id=r[1],
                source=r[2],
                price=coerce_price(r[3]),
                currency=r[4],
                product_url=r[5],
                seller_name=r[6],
                rating=coerce_price(r[7]),
                rating_count=r[8],
                is_available=_parse_flag(r[9]),
                observed_at=_parse_ts(r[10]),
            )
            for r in rows
        ]

    # ── Watchlist ────────────────────────────────────────

    def insert_watch_if_absent(
        self,
        user_id: int,
        product_id: int,
        source: str,
        added_at: datetime | None = None,
    ) -> tuple[int, bool]:
        """Atomically create a watch entry unless the triple exists.

        Returns ``(entry_id, created)``.  A caller that loses a concurrent
        race gets the winner's id with ``created=False``.
        """
        ts = _utc_text(added_at)
        with _translate_errors("insert_watch_if_absent", self._conn):
            cur = self._conn.execute(
                "INSERT INTO watchlist_items "
                "(user_id, product_id, source, added_at) "
                "VALUES (?, ?, ?, ?) "
                "ON CONFLICT(user_id, product_id, source) DO NOTHING",
                (user_id, product_id, source, ts),
            )
            created = cur.rowcount == 1
            row = self._conn.execute(
                "SELECT item_id FROM watchlist_items "
                "WHERE user_id = ? AND product_id = ? AND source = ?",
                (user_id, product_id, source),
            ).fetchone()
            self._conn.commit()
        if row is None:
            raise QueryError(
                "Watch entry missing after insert",
                details={
                    "user_id": user_id,
                    "product_id": product_id,
                    "source": source,
                },
            )
        return row[0], created

    def delete_watch(
        self, user_id: int, product_id: int, source: str,
    ) -> None:
        """Delete the user's entry for the triple.

        Raises ``NotFoundError`` when no entry matched.
        """
        with _translate_errors("delete_watch", self._conn):
            cur = self._conn.execute(
                "DELETE FROM watchlist_items "
                "WHERE user_id = ? AND product_id = ? AND source = ?",
                (user_id, product_id, source),
            )
            self._conn.commit()
        if cur.rowcount == 0:
            raise NotFoundError(
                "Watch entry not found",
                details={
                    "user_id": user_id,
                    "product_id": product_id,
                    "source": source,
                },
            )

    def list_watches(self, user_id: int) -> list[WatchlistEntry]:
        """Return the user's entries, most recently added first."""
        with _translate_errors("list_watches", self._conn):
            rows = self._conn.execute(
                "SELECT item_id, user_id, product_id, source, added_at "
                "FROM watchlist_items WHERE user_id = ? "
                "ORDER BY added_at DESC, item_id DESC",
                (user_id,),
            ).fetchall()
        return [
            WatchlistEntry(
                id=r[0],
                user_id=r[1],
                product_id=r[2],
                source=r[3],
                added_at=_parse_ts(r[4]),
            )
            for r in rows
        ]
