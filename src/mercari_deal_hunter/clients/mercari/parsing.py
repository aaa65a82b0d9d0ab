"""Tolerant decoding of Mercari search responses into Listing values.

Mercari returns several numeric fields as JSON strings ("15000", "1700000000")
and occasionally as floats; one odd field must never fail the whole response.
"""

from __future__ import annotations

import math
from datetime import UTC, datetime
from typing import Any, cast

from mercari_deal_hunter.clients.mercari.schema import SearchItemSchema
from mercari_deal_hunter.models.listing import Listing


def to_int(value: Any) -> int:
    """Normalize a number-or-numeric-string to int; 0 when nothing parses.

    Order: integer parse, then float parse (truncated), then the raw string
    with thousands separators and whitespace removed.
    """
    if value is None or isinstance(value, bool):
        return 0
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if math.isfinite(value) else 0
    text = str(value).strip()
    if not text:
        return 0
    try:
        return int(text)
    except ValueError:
        pass
    try:
        number = float(text)
    except ValueError:
        pass
    else:
        return int(number) if math.isfinite(number) else 0
    raw = text.replace(",", "").replace("_", "").replace(" ", "")
    try:
        return int(raw)
    except ValueError:
        return 0


def to_datetime(value: Any) -> datetime:
    """Epoch seconds (number or string) to an aware UTC datetime.

    Out-of-range values (e.g. epoch milliseconds) fall back to the epoch,
    the same as an unparseable field.
    """
    try:
        return datetime.fromtimestamp(to_int(value), UTC)
    except (ValueError, OverflowError, OSError):
        return datetime.fromtimestamp(0, UTC)


def _string_list(value: Any) -> tuple[str, ...]:
    if not isinstance(value, list):
        return ()
    return tuple(str(x) for x in cast(list[Any], value) if isinstance(x, str) and x)


def parse_item(raw: SearchItemSchema, *, item_base_url: str) -> Listing | None:
    """Build a Listing from one items[] element. None if the item has no id."""
    item_id = str(raw.get("id") or "").strip()
    if not item_id:
        return None

    brand = raw.get("itemBrand")
    brand_name = ""
    if isinstance(brand, dict):
        brand_name = str(brand.get("name") or "")

    return Listing(
        id=item_id,
        title=str(raw.get("name") or ""),
        price=to_int(raw.get("price")),
        status=str(raw.get("status") or ""),
        image_urls=_string_list(raw.get("thumbnails")),
        created_at=to_datetime(raw.get("created")),
        updated_at=to_datetime(raw.get("updated")),
        brand_name=brand_name,
        item_url=f"{item_base_url}{item_id}",
    )
