# -*- coding: utf-8 -*-
"""Console channel: deal captions and system messages printed as plain text."""

from __future__ import annotations

import html
import re

from mercari_deal_hunter.notifications.strategies.base import BaseNotificationStrategy
from mercari_deal_hunter.notifications.types import NotificationMessage

_TAG_RE = re.compile(r"<[^>]+>")


def strip_html(text: str) -> str:
    """Drop tags and unescape entities from a Telegram HTML string."""
    return html.unescape(_TAG_RE.sub("", text))


class ConsoleNotifier(BaseNotificationStrategy):
    channel = "console"

    async def send_notification(self, message: NotificationMessage) -> bool:
        if not (self.is_running and self.settings.console.enabled):
            return False
        lines = [strip_html(self.render(message))]
        if message.photo_url:
            lines.append(message.photo_url)
        print("\n".join(lines))
        return True
