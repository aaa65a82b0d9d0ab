"""Notification message types."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Protocol

from mercari_deal_hunter.models.listing import Listing

DEAL_FOUND = "deal_found"
SYSTEM_STARTED = "system_started"
SYSTEM_STOPPED = "system_stopped"
SCAN_ERROR = "scan_error"
SCAN_SUMMARY = "scan_summary"
BOT_STATUS = "bot_status"
CONNECTION_TEST = "connection_test"


@dataclass(frozen=True)
class NotificationMessage:
    """Message to be sent via one or more notification channels.

    photo_url, when set, asks channels that support it to send the
    rendered text as a caption under that image.
    """

    event_type: str
    message: str
    title: str | None = None
    payload: dict[str, Any] | None = None
    photo_url: str | None = None


@dataclass(frozen=True, slots=True)
class DealItem:
    """A listing that survived every filter, as handed to notification."""

    name: str
    price: int
    brand_name: str
    image_url: str
    item_url: str
    age_minutes: float

    @classmethod
    def from_listing(cls, listing: Listing, brand_name: str = "") -> DealItem:
        """Build from a listing; brand_name falls back to the listing's own brand."""
        return cls(
            name=listing.title,
            price=listing.price,
            brand_name=brand_name or listing.brand_name,
            image_url=listing.first_image_url,
            item_url=listing.item_url,
            age_minutes=listing.age_minutes(),
        )

    def to_message(self) -> NotificationMessage:
        return NotificationMessage(
            event_type=DEAL_FOUND,
            message=self.name,
            payload={
                "name": self.name,
                "price": self.price,
                "brand_name": self.brand_name,
                "item_url": self.item_url,
                "age_minutes": self.age_minutes,
            },
            photo_url=self.image_url or None,
        )


class NotificationStyler(Protocol):
    """Render a message into a formatted string for delivery."""

    def render(self, message: NotificationMessage) -> str:
        """Return an HTML-formatted text for the given message."""
        ...
