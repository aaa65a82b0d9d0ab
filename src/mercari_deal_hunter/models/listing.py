"""Listing: a single Mercari search result, normalized from the API response."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime


@dataclass(frozen=True, slots=True)
class Listing:
    """Immutable view of one on-sale Mercari item.

    Built fresh from each search response and discarded at the end of the
    scan cycle.
    """

    id: str
    """Mercari item id (e.g. m12345678901); globally unique per marketplace."""
    title: str
    price: int
    """Price in yen."""
    status: str
    image_urls: tuple[str, ...] = field(default_factory=tuple)
    """Thumbnail URLs in API order; may be empty."""
    created_at: datetime = field(default_factory=lambda: datetime.now(UTC))
    updated_at: datetime = field(default_factory=lambda: datetime.now(UTC))
    brand_name: str = ""
    """Brand reported by Mercari (itemBrand.name); empty when absent."""
    item_url: str = ""

    @property
    def first_image_url(self) -> str:
        """First thumbnail URL, or empty string when the listing has none."""
        return self.image_urls[0] if self.image_urls else ""

    def age_minutes(self, now: datetime | None = None) -> float:
        """Minutes elapsed since the listing was created."""
        reference = now or datetime.now(UTC)
        return (reference - self.created_at).total_seconds() / 60.0
