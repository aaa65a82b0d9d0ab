# -*- coding: utf-8 -*-
"""Base notification channel."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

from mercari_deal_hunter.notifications.types import NotificationMessage

if TYPE_CHECKING:  # pragma: no cover
    from mercari_deal_hunter.config.config import Settings
    from mercari_deal_hunter.notifications.types import NotificationStyler


class BaseNotificationStrategy(ABC):
    """A delivery channel (Telegram, console) rendering messages through a styler."""

    channel: str = "base"

    def __init__(self, settings: "Settings", styler: "NotificationStyler") -> None:
        self.settings = settings
        self._styler = styler
        self._running = False

    @property
    def is_running(self) -> bool:
        return self._running

    def render(self, message: NotificationMessage) -> str:
        """HTML text for the message (caption when the message has a photo)."""
        return self._styler.render(message)

    async def initialize(self) -> None:
        self._running = True

    async def shutdown(self) -> None:
        self._running = False

    @abstractmethod
    async def send_notification(self, message: NotificationMessage) -> bool:
        """Deliver one message.

        Returns:
            True if the channel accepted the message; False on a handled failure.
        """
