"""Notification subsystem."""

from mercari_deal_hunter.notifications.notification_manager import (
    NotificationService,
)
from mercari_deal_hunter.notifications.strategies import (
    BaseNotificationStrategy,
    ConsoleNotifier,
    TelegramNotifier,
)
from mercari_deal_hunter.notifications.types import (
    DealItem,
    NotificationMessage,
    NotificationStyler,
)

__all__ = [
    "BaseNotificationStrategy",
    "ConsoleNotifier",
    "DealItem",
    "TelegramNotifier",
    "NotificationMessage",
    "NotificationService",
    "NotificationStyler",
]
