"""Repositories: interfaces and implementations."""

from mercari_deal_hunter.persistence.repositories.in_memory import InMemorySeenListingRepository
from mercari_deal_hunter.persistence.repositories.interfaces import ISeenListingRepository
from mercari_deal_hunter.persistence.repositories.sqlite import SqliteSeenListingRepository

__all__ = [
    "ISeenListingRepository",
    "InMemorySeenListingRepository",
    "SqliteSeenListingRepository",
]
