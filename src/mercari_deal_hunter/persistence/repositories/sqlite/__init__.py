"""SQLite repository implementations."""

from mercari_deal_hunter.persistence.repositories.sqlite.seen_listing_repository import (
    SqliteSeenListingRepository,
)

__all__ = ["SqliteSeenListingRepository"]
