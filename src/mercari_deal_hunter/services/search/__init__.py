"""Search orchestration."""

from mercari_deal_hunter.services.search.retry import SearchRetrier

__all__ = ["SearchRetrier"]
