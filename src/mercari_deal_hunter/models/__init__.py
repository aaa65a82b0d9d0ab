"""Domain models."""

from mercari_deal_hunter.models.listing import Listing
from mercari_deal_hunter.models.scan_stats import ScanCycleStats
from mercari_deal_hunter.models.seen_listing import SeenListing

__all__ = ["Listing", "ScanCycleStats", "SeenListing"]
