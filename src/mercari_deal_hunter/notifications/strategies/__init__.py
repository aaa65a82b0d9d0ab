"""Notification strategies."""

from mercari_deal_hunter.notifications.strategies.base import (
    BaseNotificationStrategy,
)
from mercari_deal_hunter.notifications.strategies.console import ConsoleNotifier
from mercari_deal_hunter.notifications.strategies.telegram import TelegramNotifier

__all__ = [
    "BaseNotificationStrategy",
    "ConsoleNotifier",
    "TelegramNotifier",
]
