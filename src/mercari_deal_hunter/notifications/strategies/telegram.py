# -*- coding: utf-8 -*-
"""Telegram channel (python-telegram-bot).

Deals carry a photo and go out through sendPhoto with an HTML caption; system
messages go through sendMessage. Flood control honours retry_after, transport
failures back off exponentially, and rejected requests (bad chat, blocked bot,
malformed caption) fail at once.
"""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING, Any, Callable, Optional

import structlog
from telegram import Bot
from telegram.error import BadRequest, Forbidden, RetryAfter, TelegramError
from telegram.request import HTTPXRequest

from mercari_deal_hunter.exceptions import MissingRequiredConfigError
from mercari_deal_hunter.notifications.strategies.base import BaseNotificationStrategy
from mercari_deal_hunter.notifications.types import NotificationMessage

if TYPE_CHECKING:  # pragma: no cover
    from mercari_deal_hunter.config.config import Settings
    from mercari_deal_hunter.notifications.types import NotificationStyler

MAX_BACKOFF_SECONDS = 60.0


def build_bot(settings: "Settings") -> Bot:
    """Create a Bot with the configured HTTP timeouts."""
    tg = settings.telegram
    return Bot(
        token=str(tg.api_key),
        request=HTTPXRequest(
            connect_timeout=tg.connect_timeout,
            read_timeout=tg.read_timeout,
            write_timeout=tg.write_timeout,
            pool_timeout=tg.pool_timeout,
        ),
    )


def _retry_after_seconds(exc: RetryAfter) -> float:
    value = exc.retry_after
    return value.total_seconds() if hasattr(value, "total_seconds") else float(value)


class TelegramNotifier(BaseNotificationStrategy):
    """Deliver to the configured chat; send_notification never raises on Telegram errors."""

    channel = "telegram"

    def __init__(
        self,
        settings: "Settings",
        styler: "NotificationStyler",
        *,
        bot: Optional[Bot] = None,
        get_logger: Callable[[str], Any] = structlog.get_logger,
        logger_name: Optional[str] = None,
    ) -> None:
        super().__init__(settings, styler)
        tg = settings.telegram
        if not (tg.enabled and tg.api_key and tg.chat_id):
            raise MissingRequiredConfigError("TelegramNotifier requires token and chat_id.")
        self.chat_id = str(tg.chat_id)
        self.max_retries = tg.max_retries
        self.backoff_base_seconds = tg.backoff_base_seconds
        self._bot = bot
        self._logger = get_logger(logger_name or self.__class__.__name__)

    @property
    def bot(self) -> Optional[Bot]:
        return self._bot

    async def initialize(self) -> None:
        if self.is_running:
            self._logger.warning("telegram_already_running")
            return
        if self._bot is None:
            self._bot = build_bot(self.settings)
        await super().initialize()

    async def shutdown(self) -> None:
        self._bot = None
        await super().shutdown()

    async def send_notification(self, message: NotificationMessage) -> bool:
        if not self.is_running or self._bot is None:
            self._logger.warning("telegram_not_running_cannot_send", event_type=message.event_type)
            return False
        text = self.render(message)
        for attempt in range(1, self.max_retries + 1):
            try:
                await self._post(text, message.photo_url)
                return True
            except (BadRequest, Forbidden) as exc:
                self._logger.error(
                    "telegram_request_rejected",
                    error_type=type(exc).__name__,
                    error_message=str(exc),
                    with_photo=bool(message.photo_url),
                )
                return False
            except TelegramError as exc:
                if attempt == self.max_retries:
                    self._logger.warning(
                        "telegram_send_failed", error_type=type(exc).__name__, attempt=attempt
                    )
                    break
                delay = self._retry_delay(exc, attempt)
                self._logger.warning(
                    "telegram_send_retry",
                    error_type=type(exc).__name__,
                    attempt=attempt,
                    max_retries=self.max_retries,
                    delay_seconds=delay,
                )
                await asyncio.sleep(delay)
        self._logger.error(
            "telegram_message_dropped",
            event_type=message.event_type,
            attempts=self.max_retries,
        )
        return False

    async def _post(self, text: str, photo_url: Optional[str]) -> None:
        assert self._bot is not None
        if photo_url:
            await self._bot.send_photo(
                chat_id=self.chat_id, photo=photo_url, caption=text, parse_mode="HTML"
            )
        else:
            await self._bot.send_message(chat_id=self.chat_id, text=text, parse_mode="HTML")

    def _retry_delay(self, exc: TelegramError, attempt: int) -> float:
        """Flood-control wait if Telegram gave one, else capped exponential backoff."""
        if isinstance(exc, RetryAfter):
            return _retry_after_seconds(exc)
        return min(MAX_BACKOFF_SECONDS, self.backoff_base_seconds * 2 ** (attempt - 1))
