"""Abstract interface for seen listing storage (in-memory, SQLite, etc.)."""

from __future__ import annotations

from abc import ABC, abstractmethod


class ISeenListingRepository(ABC):
    """Interface for the dedup store: which listings have already been alerted.

    Implementations raise DedupStoreError when the backing storage fails,
    so callers can tell a failed lookup apart from "not seen".
    """

    @abstractmethod
    async def has_seen(self, listing_id: str) -> bool:
        """Return True if a record for listing_id exists."""
        ...

    @abstractmethod
    async def mark_seen(self, listing_id: str, brand: str, name: str, price: int) -> None:
        """Record that a listing was alerted. Idempotent (re-adding same id is no-op)."""
        ...

    @abstractmethod
    async def count(self) -> int:
        """Return the number of records currently held."""
        ...

    async def close(self) -> None:
        """Release resources. Default is a no-op."""
        return None
