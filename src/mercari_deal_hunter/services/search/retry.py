# -*- coding: utf-8 -*-
"""Bounded exponential-backoff retries around Mercari searches."""

from __future__ import annotations

import asyncio
import random
from typing import TYPE_CHECKING, Any, Callable, List, Optional, Sequence

import structlog

from mercari_deal_hunter.exceptions import SearchRetriesExhaustedError
from mercari_deal_hunter.models.listing import Listing

if TYPE_CHECKING:
    from mercari_deal_hunter.clients.mercari.search_client import MercariSearchClient
    from mercari_deal_hunter.config import Settings


class SearchRetrier:
    """Retry a keyword search with 2**(k-1)s + jitter between attempts."""

    def __init__(
        self,
        search_client: "MercariSearchClient",
        settings: "Settings",
        *,
        get_logger: Callable[[str], Any] = structlog.get_logger,
        logger_name: Optional[str] = None,
    ) -> None:
        """Initialize the retrier.

        Args:
            search_client: Client performing a single search request.
            settings: Application settings (uses settings.mercari.max_retries).
            get_logger: Logger factory (injected) with default of structlog.get_logger.
            logger_name: Optional logger name (defaults to class name).
        """
        self._client = search_client
        self._default_max_retries = settings.mercari.max_retries
        self._logger = get_logger(logger_name or self.__class__.__name__)

    @staticmethod
    def backoff_delay(attempt: int) -> float:
        """Delay before attempt number `attempt` (1-based): 2**(attempt-1) plus up to 1s jitter."""
        return float(2 ** (attempt - 1)) + random.random()

    async def search_with_retry(
        self,
        keyword: str,
        price_min: int,
        price_max: int,
        category_ids: Sequence[int],
        page_size: int,
        max_retries: Optional[int] = None,
    ) -> List[Listing]:
        """Search, retrying up to max_retries times after the first failure.

        Raises:
            SearchRetriesExhaustedError: All max_retries + 1 attempts failed;
                the last error is chained as __cause__.
        """
        retries = self._default_max_retries if max_retries is None else max_retries
        last_error: Optional[Exception] = None
        for attempt in range(retries + 1):
            if attempt > 0:
                delay = self.backoff_delay(attempt)
                self._logger.info(
                    "search_retry_scheduled",
                    keyword=keyword,
                    attempt=attempt,
                    max_retries=retries,
                    backoff_seconds=round(delay, 3),
                )
                await asyncio.sleep(delay)
            try:
                return await self._client.search(
                    keyword, price_min, price_max, category_ids, page_size
                )
            except Exception as exc:
                last_error = exc
                self._logger.warning(
                    "search_retry_attempt_failed",
                    keyword=keyword,
                    attempt=attempt,
                    error_type=type(exc).__name__,
                    error_message=str(exc),
                )

        self._logger.error("search_retries_exhausted", keyword=keyword, attempts=retries + 1)
        raise SearchRetriesExhaustedError(keyword, retries + 1, last_error) from last_error
