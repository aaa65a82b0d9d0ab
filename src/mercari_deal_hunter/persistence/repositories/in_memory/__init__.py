"""In-memory repository implementations."""

from mercari_deal_hunter.persistence.repositories.in_memory.seen_listing_repository import (
    InMemorySeenListingRepository,
)

__all__ = ["InMemorySeenListingRepository"]
