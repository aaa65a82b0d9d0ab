# -*- coding: utf-8 -*-
"""In-memory seen listing repository (keyed by listing id)."""

from __future__ import annotations

from collections.abc import Callable
from datetime import UTC, datetime, timedelta

from mercari_deal_hunter.models.seen_listing import SeenListing
from mercari_deal_hunter.persistence.repositories.interfaces.seen_listing_repository import (
    ISeenListingRepository,
)


class InMemorySeenListingRepository(ISeenListingRepository):
    """In-memory implementation of ISeenListingRepository (tests and dry runs)."""

    def __init__(
        self,
        *,
        retention: timedelta = timedelta(days=7),
        clock: Callable[[], datetime] = lambda: datetime.now(UTC),
    ) -> None:
        """Initialize an empty in-memory store."""
        self._store: dict[str, SeenListing] = {}
        self._retention = retention
        self._clock = clock

    async def has_seen(self, listing_id: str) -> bool:
        return listing_id.strip() in self._store

    async def mark_seen(self, listing_id: str, brand: str, name: str, price: int) -> None:
        record = SeenListing.create(listing_id, brand, name, price, seen_at=self._clock())
        if record.id not in self._store:
            self._store[record.id] = record

    async def count(self) -> int:
        return len(self._store)

    def get(self, listing_id: str) -> SeenListing | None:
        """Return the stored record, if any."""
        return self._store.get(listing_id.strip())

    def cleanup(self) -> int:
        """Drop records older than the retention window; return how many were removed."""
        cutoff = self._clock() - self._retention
        stale = [k for k, v in self._store.items() if v.seen_at < cutoff]
        for k in stale:
            del self._store[k]
        return len(stale)
