# -*- coding: utf-8 -*-
"""Unit tests for TelegramNotifier and ConsoleNotifier."""

from __future__ import annotations

from collections.abc import Callable
from unittest.mock import AsyncMock, Mock

import pytest
from telegram.error import BadRequest, NetworkError, RetryAfter

from mercari_deal_hunter.config import Settings
from mercari_deal_hunter.exceptions import MissingRequiredConfigError
from mercari_deal_hunter.notifications.strategies.console import ConsoleNotifier, strip_html
from mercari_deal_hunter.notifications.strategies.telegram import TelegramNotifier
from mercari_deal_hunter.notifications.stylers.notification_styler import EventNotificationStyler
from mercari_deal_hunter.notifications.types import NotificationMessage


@pytest.fixture
def tg_settings(settings_factory: Callable[..., Settings]) -> Settings:
    return settings_factory(
        telegram={"enabled": True, "api_key": "123:abc", "chat_id": "42", "max_retries": 3}
    )


async def _notifier(settings: Settings, bot: Mock) -> TelegramNotifier:
    notifier = TelegramNotifier(settings, EventNotificationStyler(), bot=bot)
    await notifier.initialize()
    return notifier


def test_requires_token_and_chat(settings_factory: Callable[..., Settings]) -> None:
    settings = settings_factory(telegram={"enabled": True, "api_key": "123:abc"})

    with pytest.raises(MissingRequiredConfigError):
        TelegramNotifier(settings, EventNotificationStyler())


async def test_photo_message_uses_send_photo(tg_settings: Settings) -> None:
    bot = Mock(send_photo=AsyncMock(), send_message=AsyncMock())
    notifier = await _notifier(tg_settings, bot)

    ok = await notifier.send_notification(
        NotificationMessage(event_type="deal_found", message="bag", photo_url="https://img/1.jpg")
    )

    assert ok is True
    kwargs = bot.send_photo.await_args.kwargs
    assert kwargs["photo"] == "https://img/1.jpg"
    assert kwargs["parse_mode"] == "HTML"
    assert kwargs["chat_id"] == "42"
    bot.send_message.assert_not_awaited()


async def test_text_message_uses_send_message(tg_settings: Settings) -> None:
    bot = Mock(send_photo=AsyncMock(), send_message=AsyncMock())
    notifier = await _notifier(tg_settings, bot)

    assert await notifier.send_notification(NotificationMessage("scan_error", "boom")) is True
    bot.send_message.assert_awaited_once()
    bot.send_photo.assert_not_awaited()


async def test_network_errors_retry_then_fail(
    tg_settings: Settings, monkeypatch: pytest.MonkeyPatch
) -> None:
    sleep_mock = AsyncMock()
    monkeypatch.setattr(
        "mercari_deal_hunter.notifications.strategies.telegram.asyncio.sleep", sleep_mock
    )
    bot = Mock(send_message=AsyncMock(side_effect=NetworkError("down")))
    notifier = await _notifier(tg_settings, bot)

    assert await notifier.send_notification(NotificationMessage("scan_error", "x")) is False
    assert bot.send_message.await_count == 3
    assert sleep_mock.await_count == 2


async def test_flood_control_waits_retry_after(
    tg_settings: Settings, monkeypatch: pytest.MonkeyPatch
) -> None:
    sleep_mock = AsyncMock()
    monkeypatch.setattr(
        "mercari_deal_hunter.notifications.strategies.telegram.asyncio.sleep", sleep_mock
    )
    bot = Mock(send_message=AsyncMock(side_effect=[RetryAfter(7), None]))
    notifier = await _notifier(tg_settings, bot)

    assert await notifier.send_notification(NotificationMessage("scan_error", "x")) is True
    sleep_mock.assert_awaited_once_with(7.0)


async def test_single_attempt_config_still_sends(
    settings_factory: Callable[..., Settings],
) -> None:
    settings = settings_factory(
        telegram={"enabled": True, "api_key": "123:abc", "chat_id": "42", "max_retries": 1}
    )
    bot = Mock(send_message=AsyncMock())
    notifier = await _notifier(settings, bot)

    assert await notifier.send_notification(NotificationMessage("scan_error", "x")) is True
    bot.send_message.assert_awaited_once()


async def test_bad_request_is_not_retried(tg_settings: Settings) -> None:
    bot = Mock(send_message=AsyncMock(side_effect=BadRequest("chat not found")))
    notifier = await _notifier(tg_settings, bot)

    assert await notifier.send_notification(NotificationMessage("scan_error", "x")) is False
    assert bot.send_message.await_count == 1


async def test_not_running_returns_false(tg_settings: Settings) -> None:
    notifier = TelegramNotifier(tg_settings, EventNotificationStyler(), bot=Mock())

    assert await notifier.send_notification(NotificationMessage("scan_error", "x")) is False


async def test_console_prints_plain_text(
    settings_factory: Callable[..., Settings], capsys: pytest.CaptureFixture[str]
) -> None:
    notifier = ConsoleNotifier(settings_factory(console={"enabled": True}), EventNotificationStyler())
    await notifier.initialize()

    ok = await notifier.send_notification(NotificationMessage("scan_error", "a & b"))

    assert ok is True
    out = capsys.readouterr().out
    assert "<b>" not in out
    assert "a & b" in out


def test_strip_html() -> None:
    assert strip_html("<b>x &amp; y</b>") == "x & y"
