# -*- coding: utf-8 -*-
"""Unit tests for EventNotificationStyler."""

from __future__ import annotations

from collections.abc import Callable

from mercari_deal_hunter.models.listing import Listing
from mercari_deal_hunter.notifications.stylers.notification_styler import (
    EventNotificationStyler,
    format_duration,
    format_price,
)
from mercari_deal_hunter.notifications.types import (
    BOT_STATUS,
    SCAN_ERROR,
    SCAN_SUMMARY,
    DealItem,
    NotificationMessage,
)


def test_format_price_uses_thousands_separator() -> None:
    assert format_price(15000) == "15,000"
    assert format_price(999) == "999"
    assert format_price(1234567) == "1,234,567"


def test_format_duration() -> None:
    assert format_duration(12.4) == "12s"
    assert format_duration(250) == "4m10s"
    assert format_duration(3723) == "1h2m3s"


def test_deal_caption_escapes_and_formats(listing_factory: Callable[..., Listing]) -> None:
    listing = listing_factory(title="<PRADA> bag & pouch", price=12800, age_minutes=7)
    deal = DealItem.from_listing(listing, "Prada")

    text = EventNotificationStyler().render(deal.to_message())

    assert "🔥 <b>&lt;PRADA&gt; bag &amp; pouch</b>" in text
    assert "💰 ¥12,800" in text
    assert "🏷 Prada" in text
    assert "Posted 7 min ago" in text
    assert f'<a href="{listing.item_url}">View on Mercari</a>' in text


def test_deal_message_carries_photo_url(listing_factory: Callable[..., Listing]) -> None:
    listing = listing_factory()

    message = DealItem.from_listing(listing).to_message()

    assert message.photo_url == listing.image_urls[0]
    assert message.payload is not None
    assert message.payload["brand_name"] == "PRADA"


def test_error_is_code_block() -> None:
    text = EventNotificationStyler().render(
        NotificationMessage(event_type=SCAN_ERROR, message="x < y")
    )
    assert "<code>x &lt; y</code>" in text


def test_scan_summary_counts() -> None:
    text = EventNotificationStyler().render(
        NotificationMessage(
            event_type=SCAN_SUMMARY,
            message="",
            payload={"found": 12, "unseen": 3, "sent": 2, "duration_seconds": 75.2},
        )
    )
    assert "Found: 12 | New: 3 | Sent: 2" in text
    assert "1m15s" in text


def test_status_with_unknown_count_and_no_scan() -> None:
    text = EventNotificationStyler().render(
        NotificationMessage(
            event_type=BOT_STATUS,
            message="Running",
            payload={"uptime_seconds": 5, "cycles": 0, "tracked_items": None},
        )
    )
    assert "Last scan: Never" in text
    assert "Items tracked: unknown" in text


def test_unknown_event_uses_generic_renderer() -> None:
    text = EventNotificationStyler().render(
        NotificationMessage(event_type="custom_thing", message="hi", payload={"k": 1})
    )
    assert "<b>Custom Thing</b>" in text
    assert "<b>k:</b> 1" in text
