# -*- coding: utf-8 -*-
"""Shared pytest fixtures for unit tests."""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime, timedelta, timezone
from typing import Any

import pytest

from mercari_deal_hunter.config import BrandSettings, Settings
from mercari_deal_hunter.models.listing import Listing
from mercari_deal_hunter.persistence.repositories.in_memory import InMemorySeenListingRepository


@pytest.fixture
def now_utc() -> datetime:
    """Stable UTC timestamp for deterministic assertions."""
    return datetime(2026, 2, 13, 12, 0, 0, tzinfo=timezone.utc)


@pytest.fixture
def settings_factory() -> Callable[..., Settings]:
    """Build real Settings with per-section overrides: settings_factory(scan={...})."""

    def _build(**sections: Any) -> Settings:
        sections.setdefault("console", {"enabled": False})
        sections.setdefault("telegram", {"enabled": False})
        sections.setdefault("brands", [{"name": "Prada", "keywords": ["prada bag"]}])
        return Settings(**sections)

    return _build


@pytest.fixture
def settings(settings_factory: Callable[..., Settings]) -> Settings:
    return settings_factory()


@pytest.fixture
def brand() -> BrandSettings:
    return BrandSettings(name="Prada", keywords=["prada bag"])


@pytest.fixture
def listing_factory() -> Callable[..., Listing]:
    """Build a Listing created `age_minutes` ago with sensible defaults."""
    counter = {"n": 0}

    def _build(**overrides: Any) -> Listing:
        counter["n"] += 1
        age = overrides.pop("age_minutes", 5)
        listing_id = overrides.pop("id", f"m{counter['n']:011d}")
        created = overrides.pop(
            "created_at", datetime.now(timezone.utc) - timedelta(minutes=age)
        )
        return Listing(
            id=listing_id,
            title=overrides.pop("title", f"Prada bag {counter['n']}"),
            price=overrides.pop("price", 9800),
            status=overrides.pop("status", "ITEM_STATUS_ON_SALE"),
            image_urls=overrides.pop(
                "image_urls", (f"https://static.mercdn.net/thumb/{listing_id}_1.jpg",)
            ),
            created_at=created,
            updated_at=overrides.pop("updated_at", created),
            brand_name=overrides.pop("brand_name", "PRADA"),
            item_url=overrides.pop("item_url", f"https://jp.mercari.com/item/{listing_id}"),
        )

    return _build


@pytest.fixture
def seen_repo() -> InMemorySeenListingRepository:
    """Fresh in-memory dedup store per test."""
    return InMemorySeenListingRepository()
