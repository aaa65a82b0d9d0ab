# -*- coding: utf-8 -*-
"""Telegram long-polling listener answering operator commands (/check, /status)."""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from typing import TYPE_CHECKING, Any, Optional, Protocol

import structlog
from telegram import Bot, Update
from telegram.error import TelegramError

from mercari_deal_hunter.notifications.types import NotificationMessage

if TYPE_CHECKING:
    from mercari_deal_hunter.config import Settings
    from mercari_deal_hunter.notifications.types import NotificationStyler

STATUS_COMMANDS = frozenset({"/check", "/status"})


class StatusProvider(Protocol):
    async def status_message(self) -> NotificationMessage: ...


def parse_command(text: Optional[str]) -> Optional[str]:
    """'/Check@my_bot now' -> '/check'; None for anything that is not a command."""
    if not text:
        return None
    head = text.strip().split(maxsplit=1)[0] if text.strip() else ""
    if not head.startswith("/"):
        return None
    return head.split("@", 1)[0].lower()


class TelegramCommandListener:
    """Polls getUpdates and replies to status commands from the configured chat only."""

    def __init__(
        self,
        bot: Bot,
        status_provider: StatusProvider,
        styler: "NotificationStyler",
        settings: "Settings",
        *,
        get_logger: Callable[[str], Any] = structlog.get_logger,
        logger_name: Optional[str] = None,
    ) -> None:
        """Initialize the listener.

        Args:
            bot: python-telegram-bot Bot used for getUpdates and replies.
            status_provider: Source of the status snapshot (the ScanRunner).
            styler: Renders the status message to HTML.
            settings: Application settings (uses settings.telegram).
            get_logger: Logger factory (injected) with default of structlog.get_logger.
            logger_name: Optional logger name (defaults to class name).
        """
        cfg = settings.telegram
        self._bot = bot
        self._status = status_provider
        self._styler = styler
        self._chat_id = str(cfg.chat_id or "")
        self._poll_timeout = cfg.poll_timeout_seconds
        self._idle_seconds = cfg.poll_idle_seconds
        self._error_backoff = cfg.poll_error_backoff_seconds
        self._offset: Optional[int] = None
        self._logger = get_logger(logger_name or self.__class__.__name__)

    async def listen(self, stop_event: asyncio.Event) -> None:
        """Poll until stop_event is set. Polling errors back off and retry."""
        self._logger.info("command_listener_started", poll_timeout_seconds=self._poll_timeout)
        while not stop_event.is_set():
            try:
                updates = await self._bot.get_updates(
                    offset=self._offset,
                    timeout=self._poll_timeout,
                    allowed_updates=["message"],
                )
            except TelegramError as exc:
                self._logger.warning(
                    "command_listener_poll_failed",
                    error_type=type(exc).__name__,
                    error_message=str(exc),
                    backoff_seconds=self._error_backoff,
                )
                await self._pause(stop_event, self._error_backoff)
                continue

            for update in updates:
                self._offset = update.update_id + 1
                try:
                    await self.handle_update(update)
                except Exception:
                    self._logger.exception("command_handling_failed", update_id=update.update_id)
            await self._pause(stop_event, self._idle_seconds)
        self._logger.info("command_listener_stopped")

    async def handle_update(self, update: Update) -> bool:
        """Answer a status command. Returns True when a reply was sent."""
        message = update.message
        if message is None:
            return False
        if str(message.chat_id) != self._chat_id:
            self._logger.debug("command_ignored_foreign_chat", chat_id=message.chat_id)
            return False
        command = parse_command(message.text)
        if command not in STATUS_COMMANDS:
            return False

        self._logger.info("command_received", command=command)
        text = self._styler.render(await self._status.status_message())
        try:
            await self._bot.send_message(chat_id=self._chat_id, text=text, parse_mode="HTML")
        except TelegramError as exc:
            self._logger.warning(
                "command_reply_failed",
                command=command,
                error_type=type(exc).__name__,
                error_message=str(exc),
            )
            return False
        return True

    @staticmethod
    async def _pause(stop_event: asyncio.Event, seconds: float) -> None:
        if seconds <= 0:
            return
        try:
            await asyncio.wait_for(stop_event.wait(), timeout=seconds)
        except TimeoutError:
            pass
