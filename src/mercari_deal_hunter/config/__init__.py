"""Configuration subpackage."""

from mercari_deal_hunter.config.config import (
    AppSettings,
    BrandSettings,
    ConsoleNotificationSettings,
    HuggingFaceSettings,
    LoggingSettings,
    MercariSettings,
    ScanSettings,
    Settings,
    StorageSettings,
    TelegramNotificationSettings,
    get_settings,
)

__all__ = [
    "AppSettings",
    "BrandSettings",
    "ConsoleNotificationSettings",
    "HuggingFaceSettings",
    "LoggingSettings",
    "MercariSettings",
    "ScanSettings",
    "Settings",
    "StorageSettings",
    "TelegramNotificationSettings",
    "get_settings",
]
