# -*- coding: utf-8 -*-
"""Unit tests for SqliteSeenListingRepository."""

from __future__ import annotations

import sqlite3
from datetime import datetime, timedelta
from pathlib import Path
from unittest.mock import Mock

import pytest

from mercari_deal_hunter.exceptions import DedupStoreError
from mercari_deal_hunter.persistence.repositories.sqlite import SqliteSeenListingRepository


class _Clock:
    def __init__(self, now: datetime) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now


async def test_mark_then_has_seen(tmp_path: Path) -> None:
    repo = SqliteSeenListingRepository(tmp_path / "seen.db")

    assert await repo.has_seen("m1") is False
    await repo.mark_seen("m1", "Prada", "bag", 9800)

    assert await repo.has_seen("m1") is True
    assert await repo.count() == 1


async def test_mark_seen_is_idempotent_and_keeps_first_record(
    tmp_path: Path, now_utc: datetime
) -> None:
    clock = _Clock(now_utc)
    repo = SqliteSeenListingRepository(tmp_path / "seen.db", clock=clock)

    await repo.mark_seen("m1", "Prada", "first", 100)
    clock.now = now_utc + timedelta(hours=1)
    await repo.mark_seen("m1", "Gucci", "second", 200)

    assert await repo.count() == 1
    stored = await repo.get("m1")
    assert stored is not None
    assert (stored.brand, stored.name, stored.price) == ("Prada", "first", 100)
    assert stored.seen_at == now_utc


async def test_persists_across_instances(tmp_path: Path) -> None:
    path = tmp_path / "nested" / "dir" / "seen.db"
    first = SqliteSeenListingRepository(path)
    await first.mark_seen("m1", "Prada", "bag", 1)
    await first.close()

    second = SqliteSeenListingRepository(path)

    assert await second.has_seen("m1") is True


async def test_retention_cleanup_on_open(tmp_path: Path, now_utc: datetime) -> None:
    path = tmp_path / "seen.db"
    clock = _Clock(now_utc - timedelta(days=8))
    old = SqliteSeenListingRepository(path, clock=clock)
    await old.mark_seen("old", "Prada", "", 0)
    clock.now = now_utc - timedelta(days=6)
    await old.mark_seen("recent", "Prada", "", 0)

    reopened = SqliteSeenListingRepository(path, clock=_Clock(now_utc))

    assert await reopened.has_seen("old") is False
    assert await reopened.has_seen("recent") is True
    assert await reopened.count() == 1


async def test_wal_journal_mode(tmp_path: Path) -> None:
    path = tmp_path / "seen.db"
    SqliteSeenListingRepository(path)

    with sqlite3.connect(path) as conn:
        mode = conn.execute("PRAGMA journal_mode").fetchone()[0]

    assert mode.lower() == "wal"


def test_open_failure_raises_dedup_store_error(tmp_path: Path) -> None:
    blocker = tmp_path / "not_a_dir"
    blocker.write_text("x")

    with pytest.raises(DedupStoreError):
        SqliteSeenListingRepository(blocker / "seen.db")


async def test_cleanup_failure_on_open_is_logged_not_fatal(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    def _failing_cleanup(self: SqliteSeenListingRepository) -> int:
        raise DedupStoreError("dedup cleanup failed: disk I/O error")

    monkeypatch.setattr(SqliteSeenListingRepository, "cleanup", _failing_cleanup)
    logger = Mock()

    repo = SqliteSeenListingRepository(tmp_path / "seen.db", get_logger=lambda name: logger)

    logger.warning.assert_called_once()
    assert logger.warning.call_args.args[0] == "dedup_store_cleanup_failed"
    await repo.mark_seen("m1", "Prada", "bag", 100)
    assert await repo.has_seen("m1") is True


async def test_closed_store_raises(tmp_path: Path) -> None:
    repo = SqliteSeenListingRepository(tmp_path / "seen.db")
    await repo.close()

    with pytest.raises(DedupStoreError):
        await repo.has_seen("m1")


async def test_read_failure_is_distinct_from_not_seen(tmp_path: Path) -> None:
    path = tmp_path / "seen.db"
    repo = SqliteSeenListingRepository(path)
    with sqlite3.connect(path) as conn:
        conn.execute("DROP TABLE seen_items")

    with pytest.raises(DedupStoreError):
        await repo.has_seen("m1")

