"""Notification service: fan-out of deal alerts and system messages to all channels."""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

import structlog

from mercari_deal_hunter.notifications.strategies import BaseNotificationStrategy
from mercari_deal_hunter.notifications.types import NotificationMessage


@dataclass
class NotificationService:
    """Fan a message out to every channel.

    Two paths:
      - deliver(): awaited; used for deals so the caller knows whether the
        alert reached at least one channel.
      - notify(): fire-and-forget for startup/summary/error messages; a
        bounded queue drained by one worker task, dropping when full.
    """

    notifiers: list[BaseNotificationStrategy]
    queue_size: int = 1000
    get_logger: Callable[[str], Any] = field(default=structlog.get_logger)
    _queue: asyncio.Queue[NotificationMessage] | None = field(init=False, default=None)
    _worker: asyncio.Task[None] | None = field(init=False, default=None)
    _logger: Any = field(init=False)

    def __post_init__(self) -> None:
        self._logger = self.get_logger("NotificationService")

    @property
    def channels(self) -> list[str]:
        return [notifier.channel for notifier in self.notifiers]

    async def initialize(self) -> None:
        for notifier in self.notifiers:
            await notifier.initialize()
        if self.notifiers:
            self._queue = asyncio.Queue(maxsize=self.queue_size)
            self._worker = asyncio.create_task(self._drain())
        self._logger.info(
            "notification_channels_ready",
            channels=self.channels,
            queue_size=self.queue_size if self.notifiers else 0,
        )

    async def shutdown(self) -> None:
        """Send whatever is still queued, stop the worker, close every channel."""
        queue, worker = self._queue, self._worker
        self._queue = self._worker = None
        if queue is not None:
            queue.shutdown()
            await queue.join()
        if worker is not None:
            await worker
        for notifier in self.notifiers:
            await notifier.shutdown()
        self._logger.debug("notification_channels_closed", channels=self.channels)

    def notify(self, message: NotificationMessage) -> None:
        """Queue a system message without waiting for delivery.

        Raises:
            RuntimeError: Channels exist but initialize() has not run.
        """
        if self._queue is None:
            if self.notifiers:
                raise RuntimeError("NotificationService not initialized")
            return
        try:
            self._queue.put_nowait(message)
        except asyncio.QueueFull:
            self._logger.warning("notification_queue_full_dropped", event_type=message.event_type)

    async def deliver(self, message: NotificationMessage) -> bool:
        """Send now; True if at least one channel accepted the message."""
        outcomes = await self._send_all(message)
        if any(ok for _, ok in outcomes):
            return True
        self._logger.warning(
            "notification_not_delivered",
            event_type=message.event_type,
            failed_channels=[name for name, _ in outcomes],
        )
        return False

    async def _send_all(self, message: NotificationMessage) -> list[tuple[str, bool]]:
        return [
            (notifier.channel, await notifier.send_notification(message))
            for notifier in self.notifiers
        ]

    async def _drain(self) -> None:
        queue = self._queue
        assert queue is not None
        while True:
            try:
                message = await queue.get()
            except asyncio.QueueShutDown:
                return
            try:
                await self._send_all(message)
            except Exception:
                self._logger.exception("notification_send_crashed", event_type=message.event_type)
            finally:
                queue.task_done()
