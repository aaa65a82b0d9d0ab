# -*- coding: utf-8 -*-
"""Event-based notification styler producing Telegram HTML."""

from __future__ import annotations

import html
from datetime import datetime, timezone
from typing import Any

from mercari_deal_hunter.notifications.types import (
    BOT_STATUS,
    CONNECTION_TEST,
    DEAL_FOUND,
    SCAN_ERROR,
    SCAN_SUMMARY,
    SYSTEM_STARTED,
    SYSTEM_STOPPED,
    NotificationMessage,
    NotificationStyler,
)


def escape_html(text: str) -> str:
    """Escape &, < and > for Telegram HTML parse mode (quotes left as-is)."""
    return html.escape(text, quote=False)


def format_price(price: int) -> str:
    """15000 -> '15,000'."""
    return f"{price:,}"


def format_duration(seconds: float) -> str:
    """Whole-second duration such as '1h2m3s', '4m10s' or '12s'."""
    total = int(round(max(seconds, 0.0)))
    hours, rest = divmod(total, 3600)
    minutes, secs = divmod(rest, 60)
    if hours:
        return f"{hours}h{minutes}m{secs}s"
    if minutes:
        return f"{minutes}m{secs}s"
    return f"{secs}s"


class EventNotificationStyler(NotificationStyler):
    """Render notifications by event_type with emojis and short HTML blocks."""

    def render(self, message: NotificationMessage) -> str:
        """Dispatch to the appropriate renderer based on event_type."""
        renderers = {
            DEAL_FOUND: self._render_deal,
            SYSTEM_STARTED: self._render_system_started,
            SYSTEM_STOPPED: self._render_system_stopped,
            SCAN_ERROR: self._render_error,
            SCAN_SUMMARY: self._render_scan_summary,
            BOT_STATUS: self._render_status,
            CONNECTION_TEST: self._render_connection_test,
        }
        renderer = renderers.get(message.event_type, self._render_generic)
        return renderer(message)

    def _render_deal(self, message: NotificationMessage) -> str:
        payload: dict[str, Any] = message.payload or {}
        name = str(payload.get("name") or message.message)
        lines = [
            f"🔥 <b>{escape_html(name)}</b>",
            f"💰 ¥{format_price(int(payload.get('price') or 0))}",
        ]
        brand = payload.get("brand_name")
        if brand:
            lines.append(f"🏷 {escape_html(str(brand))}")
        lines.append(f"📦 Posted {float(payload.get('age_minutes') or 0.0):.0f} min ago")
        item_url = payload.get("item_url") or ""
        lines.append(f'🔗 <a href="{html.escape(str(item_url))}">View on Mercari</a>')
        return "\n".join(lines)

    def _render_system_started(self, message: NotificationMessage) -> str:
        payload = message.payload or {}
        started = payload.get("started_at")
        started_text = (
            started.strftime("%Y-%m-%d %H:%M %Z")
            if isinstance(started, datetime)
            else datetime.now(timezone.utc).strftime("%Y-%m-%d %H:%M %Z")
        )
        return (
            "🤖 <b>Deal Hunter Started!</b>\n\n"
            f"🔍 Watching <b>{payload.get('brand_count', 0)} brands</b>\n"
            f"⏰ Scan interval: <b>{payload.get('interval_minutes', 0)} minutes</b>\n"
            f"🕐 Time: {started_text}\n\n"
            "🟢 Ready to hunt deals!"
        )

    def _render_system_stopped(self, message: NotificationMessage) -> str:
        return f"⏹️ <b>Deal Hunter Stopped</b>\n\n{escape_html(message.message)}"

    def _render_error(self, message: NotificationMessage) -> str:
        return f"🔴 <b>Deal Hunter Error</b>\n\n<code>{escape_html(message.message)}</code>"

    def _render_scan_summary(self, message: NotificationMessage) -> str:
        payload = message.payload or {}
        return (
            "📊 <b>Scan Complete</b>\n"
            f"Found: {payload.get('found', 0)} | New: {payload.get('unseen', 0)}"
            f" | Sent: {payload.get('sent', 0)}\n"
            f"⏱ {format_duration(float(payload.get('duration_seconds') or 0.0))}"
        )

    def _render_status(self, message: NotificationMessage) -> str:
        payload = message.payload or {}
        last_scan_ago = payload.get("last_scan_ago_seconds")
        last_scan = "Never" if last_scan_ago is None else f"{format_duration(last_scan_ago)} ago"
        tracked = payload.get("tracked_items")
        lines = [
            "🤖 <b>Deal Hunter Status</b>\n",
            "✅ <b>Running</b>",
            f"⏳ Uptime: {format_duration(float(payload.get('uptime_seconds') or 0.0))}",
            f"🔄 Cycles: {payload.get('cycles', 0)}",
            f"🕒 Last scan: {last_scan}",
        ]
        last = payload.get("last_stats")
        if isinstance(last, dict):
            lines.append(
                "📈 Last cycle: "
                f"{last.get('found', 0)} found → {last.get('fresh', 0)} fresh → "
                f"{last.get('unseen', 0)} new → {last.get('kept', 0)} kept → "
                f"{last.get('sent', 0)} sent"
            )
        lines.append(f"📦 Items tracked: {'unknown' if tracked is None else tracked}")
        return "\n".join(lines)

    def _render_connection_test(self, message: NotificationMessage) -> str:
        return "🧪 <b>Deal Hunter Test</b>\n\nTelegram connection successful! ✅"

    def _render_generic(self, message: NotificationMessage) -> str:
        """Render unknown event types using message and payload."""
        title = message.title or message.event_type.replace("_", " ").title()
        lines = [f"ℹ️ <b>{escape_html(title)}</b>", escape_html(message.message)]
        if message.payload:
            for key in sorted(message.payload.keys()):
                value = message.payload.get(key)
                if value is not None:
                    lines.append(f"<b>{key}:</b> {escape_html(str(value))}")
        return "\n".join(lines).strip()
