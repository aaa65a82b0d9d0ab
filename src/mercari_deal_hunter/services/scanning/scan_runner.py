# -*- coding: utf-8 -*-
"""Orchestrator: runs a scan cycle on a fixed interval until shutdown."""

from __future__ import annotations

import asyncio
import time
from collections.abc import Callable
from dataclasses import asdict
from typing import TYPE_CHECKING, Any, Optional

import structlog

from mercari_deal_hunter.config import Settings
from mercari_deal_hunter.exceptions import DedupStoreError
from mercari_deal_hunter.models.scan_stats import ScanCycleStats
from mercari_deal_hunter.notifications.types import BOT_STATUS, SCAN_ERROR, NotificationMessage

if TYPE_CHECKING:
    from mercari_deal_hunter.notifications.notification_manager import NotificationService
    from mercari_deal_hunter.persistence.repositories.interfaces.seen_listing_repository import (
        ISeenListingRepository,
    )
    from mercari_deal_hunter.services.scanning.scan_cycle import ScanCycle


class ScanRunner:
    """Runs ScanCycle immediately, then every scan.interval_minutes, one at a time.

    Also keeps the counters shown by the operator status command.
    """

    def __init__(
        self,
        scan_cycle: "ScanCycle",
        seen_repository: "ISeenListingRepository",
        notification_service: "NotificationService",
        settings: Settings,
        *,
        clock: Callable[[], float] = time.monotonic,
        get_logger: Callable[[str], Any] = structlog.get_logger,
        logger_name: Optional[str] = None,
    ) -> None:
        """Initialize the runner.

        Args:
            scan_cycle: Injected ScanCycle.
            seen_repository: Dedup store, read for the tracked-items count.
            notification_service: Used to report crashed cycles.
            settings: Application settings (uses settings.scan).
            clock: Monotonic seconds (injectable for tests).
            get_logger: Logger factory (injected) with default of structlog.get_logger.
            logger_name: Optional logger name (defaults to class name).
        """
        self._cycle = scan_cycle
        self._seen = seen_repository
        self._notifications = notification_service
        self._settings = settings
        self._clock = clock
        self._logger = get_logger(logger_name or self.__class__.__name__)

        self._started_at = clock()
        self._last_scan_at: Optional[float] = None
        self._run_count = 0
        self._last_stats: Optional[ScanCycleStats] = None

    @property
    def run_count(self) -> int:
        return self._run_count

    @property
    def last_stats(self) -> Optional[ScanCycleStats]:
        return self._last_stats

    async def run(self, shutdown_event: asyncio.Event) -> None:
        """Scan now, then once per interval until shutdown_event is set.

        Args:
            shutdown_event: When set, return after the cycle in progress (if any).
        """
        interval = self._settings.scan.interval_minutes * 60
        self._logger.info(
            "scan_runner_started",
            scan_interval_minutes=self._settings.scan.interval_minutes,
            brands_count=len(self._settings.brands),
        )
        await self.safe_scan()
        while not shutdown_event.is_set():
            self._logger.info("scan_runner_next_scan_scheduled", next_scan_in_seconds=interval)
            try:
                await asyncio.wait_for(shutdown_event.wait(), timeout=interval)
            except TimeoutError:
                await self.safe_scan()
        self._logger.info("scan_runner_stopped", cycles=self._run_count)

    async def run_once(self) -> ScanCycleStats:
        """Run a single cycle; errors propagate to the caller."""
        stats = await self._cycle.run_cycle()
        self._record(stats)
        return stats

    async def safe_scan(self) -> Optional[ScanCycleStats]:
        """Run one cycle; on any error, log it, report it and cool down.

        Returns:
            The cycle stats, or None when the cycle crashed.
        """
        try:
            return await self.run_once()
        except Exception as exc:
            cooldown = self._settings.scan.error_cooldown_seconds
            self._logger.exception(
                "scan_cycle_crashed",
                error_type=type(exc).__name__,
                cooldown_seconds=cooldown,
            )
            self._notifications.notify(
                NotificationMessage(
                    event_type=SCAN_ERROR,
                    message=f"Scan cycle crashed: {type(exc).__name__}: {exc}",
                )
            )
            await asyncio.sleep(cooldown)
            return None

    async def status_message(self) -> NotificationMessage:
        """Snapshot of uptime, cycles, last scan and tracked items for /check."""
        now = self._clock()
        try:
            tracked: Optional[int] = await self._seen.count()
        except DedupStoreError as exc:
            self._logger.warning("status_count_failed", error_message=str(exc))
            tracked = None
        payload: dict[str, Any] = {
            "uptime_seconds": now - self._started_at,
            "cycles": self._run_count,
            "last_scan_ago_seconds": (
                None if self._last_scan_at is None else now - self._last_scan_at
            ),
            "tracked_items": tracked,
        }
        if self._last_stats is not None:
            last = asdict(self._last_stats)
            last.pop("started_at", None)
            payload["last_stats"] = last
        return NotificationMessage(event_type=BOT_STATUS, message="Running", payload=payload)

    def _record(self, stats: ScanCycleStats) -> None:
        self._last_stats = stats
        self._last_scan_at = self._clock()
        self._run_count += 1
