# -*- coding: utf-8 -*-
"""Configuration loaded from environment and an optional JSON file via Pydantic Settings.

Nested env vars use <section>__<key>, e.g. SCAN__INTERVAL_MINUTES, TELEGRAM__CHAT_ID.
A JSON config file uses the same section names as top-level keys.
"""

from __future__ import annotations

import json
from functools import lru_cache
from pathlib import Path
from typing import Any, Literal, Optional

from pydantic import BaseModel, Field, ValidationInfo, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class AppSettings(BaseSettings):
    """Identity stamped on every log event."""

    model_config = SettingsConfigDict(extra="ignore")

    app_name: str = "mercari-deal-hunter"
    service_name: Optional[str] = None
    service_version: Optional[str] = None
    environment: Literal["development", "test", "production"] = "development"


class LoggingSettings(BaseSettings):
    """Log sinks and levels: console, rotating file, optional Logfire."""

    model_config = SettingsConfigDict(extra="ignore")

    console_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    file_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    logfire_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"

    log_to_console: bool = True
    log_to_file: bool = False
    log_file_path: str = "logs/deal_hunter.log"
    log_file_when: Literal[
        "S", "M", "H", "D", "W0", "W1", "W2", "W3", "W4", "W5", "W6", "midnight"
    ] = "midnight"
    log_file_interval: int = 1
    log_file_backup_count: int = 14
    log_file_utc: bool = True

    # JSON lines instead of the coloured dev renderer (always JSON when logging to file)
    json_format: bool = False

    logfire_enabled: bool = False
    logfire_token: Optional[str] = None


class MercariSettings(BaseSettings):
    """Mercari search API endpoint and request behaviour."""

    model_config = SettingsConfigDict(extra="ignore")

    search_url: str = Field(
        default="https://api.mercari.jp/v2/entities:search",
        description="Mercari v2 search endpoint (DPoP authenticated).",
    )
    item_base_url: str = Field(
        default="https://jp.mercari.com/item/",
        description="Prefix joined with the listing id to build the item URL.",
    )
    timeout_seconds: float = Field(
        default=30.0,
        ge=1.0,
        le=120.0,
        description="Total timeout for every outbound HTTP request.",
    )
    max_retries: int = Field(
        default=3,
        ge=0,
        le=10,
        description="Retries after the first failed search attempt.",
    )


class HuggingFaceSettings(BaseSettings):
    """HuggingFace Inference API (CLIP zero-shot image classification)."""

    model_config = SettingsConfigDict(extra="ignore")

    enabled: bool = Field(default=False, description="Enable the AI image filter.")
    api_key: Optional[str] = Field(default=None, description="HuggingFace API token.")
    model: str = Field(default="openai/clip-vit-large-patch14")
    api_base: str = Field(default="https://router.huggingface.co/hf-inference/models")
    max_concurrency: int = Field(default=3, ge=1, le=16)
    reject_threshold: float = Field(default=0.3, ge=0.0, le=1.0)
    loading_retry_seconds: float = Field(default=20.0, ge=0.0, le=300.0)


class TelegramNotificationSettings(BaseSettings):
    """Telegram notifications and operator commands (from env TELEGRAM__*)."""

    model_config = SettingsConfigDict(extra="ignore")

    enabled: bool = False
    api_key: Optional[str] = Field(default=None, description="Telegram bot token.")
    chat_id: Optional[str] = Field(default=None, description="Telegram chat ID.")
    send_delay_seconds: float = Field(default=0.2, ge=0.0, le=10.0)
    max_retries: int = Field(default=3, ge=1, le=20)
    backoff_base_seconds: float = Field(default=1.0, ge=0.1, le=60.0)
    queue_size: int = Field(default=200, ge=1, le=5000)
    connect_timeout: float = Field(default=10.0, ge=0.1, le=60.0)
    read_timeout: float = Field(default=30.0, ge=0.1, le=120.0)
    write_timeout: float = Field(default=30.0, ge=0.1, le=120.0)
    pool_timeout: float = Field(default=10.0, ge=0.1, le=60.0)
    commands_enabled: bool = True
    poll_timeout_seconds: int = Field(default=25, ge=0, le=50)
    poll_idle_seconds: float = Field(default=1.0, ge=0.0, le=60.0)
    poll_error_backoff_seconds: float = Field(default=5.0, ge=0.0, le=300.0)


class ConsoleNotificationSettings(BaseSettings):
    """Print alerts to stdout (useful when running without a bot)."""

    model_config = SettingsConfigDict(extra="ignore")

    enabled: bool = True


class ScanSettings(BaseSettings):
    """Scan loop cadence, freshness window and global search filters."""

    model_config = SettingsConfigDict(extra="ignore")

    interval_minutes: int = Field(default=10, ge=1, le=1440)
    max_age_minutes: int = Field(default=180, ge=1)
    max_deals_per_keyword: int = Field(default=5, ge=1, le=100)
    price_min: int = Field(default=3000, ge=0)
    price_max: int = Field(default=15000, ge=0)
    default_categories: list[int] = Field(default_factory=lambda: [1, 2])
    error_cooldown_seconds: float = Field(default=30.0, ge=0.0)
    keyword_delay_min_ms: int = Field(default=500, ge=0)
    keyword_delay_max_ms: int = Field(default=2000, ge=0)
    listener_stop_grace_seconds: float = Field(default=5.0, ge=0.0)

    @field_validator("keyword_delay_max_ms")
    @classmethod
    def _delay_bounds(cls, value: int, info: ValidationInfo) -> int:
        low = info.data.get("keyword_delay_min_ms", 0)
        if value < low:
            raise ValueError("keyword_delay_max_ms must be >= keyword_delay_min_ms")
        return value


class StorageSettings(BaseSettings):
    """Dedup store location and retention."""

    model_config = SettingsConfigDict(extra="ignore")

    db_path: str = "autobot_seen.db"
    retention_days: int = Field(default=7, ge=1, le=365)


class BrandSettings(BaseModel):
    """A watched brand: display name, search keywords and optional price band override."""

    name: str
    keywords: list[str] = Field(default_factory=list)
    price_min: Optional[int] = Field(default=None, ge=0)
    price_max: Optional[int] = Field(default=None, ge=0)


class Settings(BaseSettings):
    """Everything the deal hunter reads at startup: one section per concern plus the brand list.

    Env overrides: SCAN__MAX_AGE_MINUTES, HUGGINGFACE__API_KEY, ...
    """

    model_config = SettingsConfigDict(
        env_nested_delimiter="__",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        frozen=True,
    )

    app: AppSettings = Field(default_factory=AppSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)
    mercari: MercariSettings = Field(default_factory=MercariSettings)
    huggingface: HuggingFaceSettings = Field(default_factory=HuggingFaceSettings)
    telegram: TelegramNotificationSettings = Field(default_factory=TelegramNotificationSettings)
    console: ConsoleNotificationSettings = Field(default_factory=ConsoleNotificationSettings)
    scan: ScanSettings = Field(default_factory=ScanSettings)
    storage: StorageSettings = Field(default_factory=StorageSettings)
    brands: list[BrandSettings] = Field(default_factory=list)

    def price_range(self, brand: BrandSettings) -> tuple[int, int]:
        """Return the effective (min, max) price band for a brand.

        Brand-level overrides win when set to a positive value.
        """
        price_min = self.scan.price_min
        price_max = self.scan.price_max
        if brand.price_min:
            price_min = brand.price_min
        if brand.price_max:
            price_max = brand.price_max
        return price_min, price_max

    @classmethod
    def from_env(cls, **overrides: Any) -> Settings:
        """Settings from env and .env; keyword sections override, e.g. scan={"interval_minutes": 5}."""
        return cls(**overrides)

    @classmethod
    def from_file(cls, path: str | Path, **overrides: Any) -> Settings:
        """Build settings from a JSON file; environment fills the gaps.

        Values from the file take precedence over environment variables
        for the sections the file sets.
        """
        raw = json.loads(Path(path).read_text(encoding="utf-8"))
        if not isinstance(raw, dict):
            raise ValueError(f"config file {path} must contain a JSON object")
        data: dict[str, Any] = {**raw, **overrides}
        return cls(**data)


@lru_cache
def get_settings() -> Settings:
    """Process-wide Settings from the environment (cached)."""
    return Settings()
