# -*- coding: utf-8 -*-
"""SQLite-backed seen listing repository.

One row per alerted listing id. Survives restarts; rows older than the
retention window are removed once when the store is opened. Blocking
sqlite3 calls run in a worker thread so the event loop is never held.
"""

from __future__ import annotations

import asyncio
import sqlite3
from collections.abc import Callable
from contextlib import closing
from datetime import UTC, datetime, timedelta
from pathlib import Path
from typing import Any

import structlog

from mercari_deal_hunter.exceptions import DedupStoreError
from mercari_deal_hunter.models.seen_listing import SeenListing
from mercari_deal_hunter.persistence.repositories.interfaces.seen_listing_repository import (
    ISeenListingRepository,
)

_CREATE_TABLE = """
CREATE TABLE IF NOT EXISTS seen_items (
    id TEXT PRIMARY KEY,
    brand TEXT NOT NULL,
    name TEXT DEFAULT '',
    price INTEGER DEFAULT 0,
    seen_at TEXT NOT NULL
)
"""


def _format_ts(value: datetime) -> str:
    # Fixed-width UTC ISO strings compare correctly as text.
    return value.astimezone(UTC).isoformat(timespec="microseconds")


class SqliteSeenListingRepository(ISeenListingRepository):
    """Durable dedup store in a single SQLite file (WAL journal)."""

    def __init__(
        self,
        db_path: str | Path,
        *,
        retention_days: int = 7,
        clock: Callable[[], datetime] = lambda: datetime.now(UTC),
        get_logger: Callable[[str], Any] = structlog.get_logger,
        logger_name: str | None = None,
    ) -> None:
        """Open (or create) the store and drop expired rows.

        Args:
            db_path: Path to the SQLite file; parent directories are created.
            retention_days: Rows older than this are removed on open.
            clock: Returns the current UTC time (injectable for tests).
            get_logger: Logger factory (injected) with default of structlog.get_logger.
            logger_name: Optional logger name (defaults to class name).

        Raises:
            DedupStoreError: The database cannot be opened or initialised.
        """
        self._db_path = Path(db_path)
        self._retention = timedelta(days=retention_days)
        self._clock = clock
        self._closed = False
        self._logger = get_logger(logger_name or self.__class__.__name__)
        try:
            self._db_path.parent.mkdir(parents=True, exist_ok=True)
            with closing(self._connect()) as conn:
                self._apply_pragmas(conn)
                conn.execute(_CREATE_TABLE)
                conn.commit()
        except (sqlite3.Error, OSError) as e:
            raise DedupStoreError(f"cannot open dedup store at {self._db_path}: {e}") from e
        try:
            removed = self.cleanup()
        except DedupStoreError as e:
            # Expired rows stay until the next open.
            self._logger.warning(
                "dedup_store_cleanup_failed", db_path=str(self._db_path), error=str(e)
            )
            removed = 0
        self._logger.info(
            "dedup_store_opened",
            db_path=str(self._db_path),
            retention_days=retention_days,
            expired_removed=removed,
        )

    @property
    def db_path(self) -> Path:
        return self._db_path

    def _connect(self) -> sqlite3.Connection:
        return sqlite3.connect(self._db_path, timeout=5.0)

    def _apply_pragmas(self, conn: sqlite3.Connection) -> None:
        for pragma in ("PRAGMA journal_mode=WAL", "PRAGMA synchronous=NORMAL"):
            try:
                conn.execute(pragma)
            except sqlite3.Error as e:
                self._logger.warning("dedup_store_pragma_failed", pragma=pragma, error=str(e))

    def _ensure_open(self) -> None:
        if self._closed:
            raise DedupStoreError("dedup store is closed")

    # --- sync bodies (run in a worker thread) ---

    def _has_seen_sync(self, listing_id: str) -> bool:
        with closing(self._connect()) as conn:
            row = conn.execute("SELECT 1 FROM seen_items WHERE id = ?", (listing_id,)).fetchone()
            return row is not None

    def _mark_seen_sync(self, record: SeenListing) -> None:
        with closing(self._connect()) as conn:
            conn.execute(
                "INSERT OR IGNORE INTO seen_items (id, brand, name, price, seen_at) VALUES (?, ?, ?, ?, ?)",
                (record.id, record.brand, record.name, record.price, _format_ts(record.seen_at)),
            )
            conn.commit()

    def _count_sync(self) -> int:
        with closing(self._connect()) as conn:
            row = conn.execute("SELECT COUNT(*) FROM seen_items").fetchone()
            return int(row[0]) if row else 0

    def _get_sync(self, listing_id: str) -> SeenListing | None:
        with closing(self._connect()) as conn:
            row = conn.execute(
                "SELECT id, brand, name, price, seen_at FROM seen_items WHERE id = ?",
                (listing_id,),
            ).fetchone()
        if row is None:
            return None
        return SeenListing(
            id=row[0],
            brand=row[1],
            name=row[2] or "",
            price=int(row[3] or 0),
            seen_at=datetime.fromisoformat(row[4]),
        )

    # --- public API ---

    def cleanup(self) -> int:
        """Delete rows older than the retention window; return how many were removed.

        Raises:
            DedupStoreError: The delete failed.
        """
        cutoff = _format_ts(self._clock() - self._retention)
        try:
            with closing(self._connect()) as conn:
                cur = conn.execute("DELETE FROM seen_items WHERE seen_at < ?", (cutoff,))
                conn.commit()
                return cur.rowcount
        except sqlite3.Error as e:
            raise DedupStoreError(f"dedup cleanup failed: {e}") from e

    async def has_seen(self, listing_id: str) -> bool:
        self._ensure_open()
        try:
            return await asyncio.to_thread(self._has_seen_sync, listing_id.strip())
        except sqlite3.Error as e:
            raise DedupStoreError(f"has_seen failed for {listing_id}: {e}") from e

    async def mark_seen(self, listing_id: str, brand: str, name: str, price: int) -> None:
        self._ensure_open()
        record = SeenListing.create(listing_id, brand, name, price, seen_at=self._clock())
        try:
            await asyncio.to_thread(self._mark_seen_sync, record)
        except sqlite3.Error as e:
            raise DedupStoreError(f"mark_seen failed for {listing_id}: {e}") from e

    async def count(self) -> int:
        self._ensure_open()
        try:
            return await asyncio.to_thread(self._count_sync)
        except sqlite3.Error as e:
            raise DedupStoreError(f"count failed: {e}") from e

    async def get(self, listing_id: str) -> SeenListing | None:
        """Return the stored record for listing_id, if any."""
        self._ensure_open()
        try:
            return await asyncio.to_thread(self._get_sync, listing_id.strip())
        except sqlite3.Error as e:
            raise DedupStoreError(f"get failed for {listing_id}: {e}") from e

    async def close(self) -> None:
        if not self._closed:
            self._closed = True
            self._logger.debug("dedup_store_closed", db_path=str(self._db_path))
