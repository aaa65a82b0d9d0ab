"""Repository interfaces."""

from mercari_deal_hunter.persistence.repositories.interfaces.seen_listing_repository import (
    ISeenListingRepository,
)

__all__ = ["ISeenListingRepository"]
