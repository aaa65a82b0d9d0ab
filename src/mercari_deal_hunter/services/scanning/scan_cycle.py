# -*- coding: utf-8 -*-
"""One scan cycle: search, freshness, dedup, cap, classify, notify, mark seen."""

from __future__ import annotations

import asyncio
import random
import time
from collections.abc import Callable, Sequence
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any, Optional

import structlog
from structlog.contextvars import bound_contextvars

from mercari_deal_hunter.config import BrandSettings, Settings
from mercari_deal_hunter.exceptions import DedupStoreError, SearchRetriesExhaustedError
from mercari_deal_hunter.models.listing import Listing
from mercari_deal_hunter.models.scan_stats import ScanCycleStats
from mercari_deal_hunter.notifications.types import SCAN_SUMMARY, DealItem, NotificationMessage

if TYPE_CHECKING:
    from mercari_deal_hunter.notifications.notification_manager import NotificationService
    from mercari_deal_hunter.persistence.repositories.interfaces.seen_listing_repository import (
        ISeenListingRepository,
    )
    from mercari_deal_hunter.services.classification.gate import ClassificationGate
    from mercari_deal_hunter.services.search.retry import SearchRetrier

SEARCH_MAX_RETRIES = 3


class ScanCycle:
    """Runs the discovery pipeline over every brand keyword, sequentially."""

    def __init__(
        self,
        retrier: "SearchRetrier",
        seen_repository: "ISeenListingRepository",
        gate: "ClassificationGate",
        notification_service: "NotificationService",
        settings: Settings,
        *,
        get_logger: Callable[[str], Any] = structlog.get_logger,
        logger_name: Optional[str] = None,
    ) -> None:
        """Initialize the cycle.

        Args:
            retrier: Search with bounded retries.
            seen_repository: Dedup store (has_seen / mark_seen).
            gate: Image classification gate.
            notification_service: Deal delivery and system notifications.
            settings: Application settings (uses settings.scan and settings.telegram).
            get_logger: Logger factory (injected) with default of structlog.get_logger.
            logger_name: Optional logger name (defaults to class name).
        """
        self._retrier = retrier
        self._seen = seen_repository
        self._gate = gate
        self._notifications = notification_service
        self._settings = settings
        self._logger = get_logger(logger_name or self.__class__.__name__)

    async def run_cycle(self, brands: Optional[Sequence[BrandSettings]] = None) -> ScanCycleStats:
        """Scan all brands once and return the aggregated counters.

        Brands and keywords run one after the other. A keyword whose search
        fails is skipped for this cycle; nothing here raises for it.
        """
        brands = self._settings.brands if brands is None else brands
        stats = ScanCycleStats()
        started = time.monotonic()
        self._logger.info("scan_cycle_started", brands_count=len(brands))

        for brand in brands:
            for keyword in brand.keywords:
                stats.merge(await self.scan_keyword(brand, keyword))
                await asyncio.sleep(self._keyword_delay())

        stats.duration_seconds = time.monotonic() - started
        self._logger.info(
            "scan_cycle_completed",
            found=stats.found,
            fresh=stats.fresh,
            unseen=stats.unseen,
            kept=stats.kept,
            sent=stats.sent,
            duration_seconds=round(stats.duration_seconds, 1),
        )
        if stats.unseen > 0:
            self._notifications.notify(
                NotificationMessage(
                    event_type=SCAN_SUMMARY,
                    message="Scan complete",
                    payload={
                        "found": stats.found,
                        "unseen": stats.unseen,
                        "sent": stats.sent,
                        "duration_seconds": stats.duration_seconds,
                    },
                )
            )
        return stats

    async def scan_keyword(self, brand: BrandSettings, keyword: str) -> ScanCycleStats:
        """Run the pipeline for one keyword of one brand."""
        scan = self._settings.scan
        stats = ScanCycleStats()
        price_min, price_max = self._settings.price_range(brand)

        with bound_contextvars(brand=brand.name, keyword=keyword):
            try:
                listings = await self._retrier.search_with_retry(
                    keyword,
                    price_min,
                    price_max,
                    scan.default_categories,
                    scan.max_deals_per_keyword * 2,
                    max_retries=SEARCH_MAX_RETRIES,
                )
            except SearchRetriesExhaustedError as exc:
                self._logger.error("keyword_search_failed", error_message=str(exc))
                return stats
            stats.found = len(listings)

            now = datetime.now(UTC)
            fresh = [item for item in listings if item.age_minutes(now) <= scan.max_age_minutes]
            stats.fresh = len(fresh)

            unseen = [item for item in fresh if not await self._has_seen(item)]
            stats.unseen = len(unseen)
            if not unseen:
                self._logger.info("keyword_scanned", found=stats.found, fresh=stats.fresh, unseen=0)
                return stats

            capped = unseen[: scan.max_deals_per_keyword]
            kept = await self._gate.filter(capped)
            stats.kept = len(kept)
            self._logger.info(
                "keyword_scanned",
                found=stats.found,
                fresh=stats.fresh,
                unseen=stats.unseen,
                kept=stats.kept,
            )

            for listing in kept:
                if await self._send_deal(brand, listing):
                    stats.sent += 1
                await self._mark_seen(brand, listing)
                await asyncio.sleep(self._settings.telegram.send_delay_seconds)

        return stats

    async def _has_seen(self, listing: Listing) -> bool:
        try:
            return await self._seen.has_seen(listing.id)
        except DedupStoreError as exc:
            self._logger.warning(
                "dedup_lookup_failed_treated_unseen",
                listing_id=listing.id,
                error_message=str(exc),
            )
            return False

    async def _send_deal(self, brand: BrandSettings, listing: Listing) -> bool:
        deal = DealItem.from_listing(listing, brand.name)
        try:
            delivered = await self._notifications.deliver(deal.to_message())
        except Exception as exc:
            self._logger.exception(
                "deal_delivery_error",
                listing_id=listing.id,
                error_type=type(exc).__name__,
            )
            return False
        if delivered:
            self._logger.info("deal_sent", listing_id=listing.id, price=listing.price)
        else:
            self._logger.warning("deal_send_failed", listing_id=listing.id)
        return delivered

    async def _mark_seen(self, brand: BrandSettings, listing: Listing) -> None:
        try:
            await self._seen.mark_seen(listing.id, brand.name, listing.title, listing.price)
        except DedupStoreError as exc:
            self._logger.error("dedup_mark_seen_failed", listing_id=listing.id, error_message=str(exc))

    def _keyword_delay(self) -> float:
        scan = self._settings.scan
        return random.uniform(scan.keyword_delay_min_ms, scan.keyword_delay_max_ms) / 1000.0
