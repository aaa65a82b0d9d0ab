"""SeenListing: persisted record that a listing has already been alerted.

Identity is the Mercari listing id. Used to avoid duplicate alerts across
cycles and restarts; seen_at drives the retention window.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime


@dataclass(frozen=True, slots=True)
class SeenListing:
    """Record that a notification attempt was made for a listing."""

    id: str
    brand: str
    name: str
    price: int
    seen_at: datetime
    """When the notification attempt happened (UTC)."""

    @classmethod
    def create(
        cls,
        listing_id: str,
        brand: str,
        name: str = "",
        price: int = 0,
        *,
        seen_at: datetime | None = None,
    ) -> SeenListing:
        """Create a new SeenListing record."""
        listing_id = listing_id.strip()
        if not listing_id:
            raise ValueError("listing_id must be non-empty")
        return cls(
            id=listing_id,
            brand=brand,
            name=name,
            price=price,
            seen_at=seen_at or datetime.now(UTC),
        )
