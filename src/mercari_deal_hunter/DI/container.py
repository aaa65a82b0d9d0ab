# -*- coding: utf-8 -*-
"""Dependency injection container (dependency-injector)."""

from __future__ import annotations

from typing import Optional

from dependency_injector import containers, providers
from telegram import Bot

from mercari_deal_hunter.clients.http import AsyncHttpClient
from mercari_deal_hunter.clients.huggingface import HuggingFaceClipClient
from mercari_deal_hunter.clients.mercari import DPoPSigner, MercariSearchClient
from mercari_deal_hunter.config import Settings, get_settings
from mercari_deal_hunter.notifications.notification_manager import NotificationService
from mercari_deal_hunter.notifications.strategies.base import BaseNotificationStrategy
from mercari_deal_hunter.notifications.strategies.console import ConsoleNotifier
from mercari_deal_hunter.notifications.strategies.telegram import TelegramNotifier, build_bot
from mercari_deal_hunter.notifications.stylers.notification_styler import EventNotificationStyler
from mercari_deal_hunter.persistence.repositories.sqlite import SqliteSeenListingRepository
from mercari_deal_hunter.services.classification import ClassificationGate
from mercari_deal_hunter.services.commands import TelegramCommandListener
from mercari_deal_hunter.services.scanning import ScanCycle, ScanRunner
from mercari_deal_hunter.services.search import SearchRetrier


def _build_seen_repository(settings: Settings) -> SqliteSeenListingRepository:
    storage = settings.storage
    return SqliteSeenListingRepository(storage.db_path, retention_days=storage.retention_days)


def _build_telegram_bot(settings: Settings) -> Optional[Bot]:
    cfg = settings.telegram
    if not cfg.enabled or not cfg.api_key:
        return None
    return build_bot(settings)


def _build_notification_notifiers(
    settings: Settings,
    styler: EventNotificationStyler,
    bot: Optional[Bot],
) -> list[BaseNotificationStrategy]:
    notifiers: list[BaseNotificationStrategy] = []
    if settings.console.enabled:
        notifiers.append(ConsoleNotifier(settings=settings, styler=styler))
    if settings.telegram.enabled:
        notifiers.append(TelegramNotifier(settings=settings, styler=styler, bot=bot))
    return notifiers


class Container(containers.DeclarativeContainer):
    """Application container. Wires settings, HTTP, search, dedup, gate, notifications, scanning."""

    config = providers.Callable(get_settings)

    http_client = providers.Singleton(
        AsyncHttpClient,
        settings=config,
    )

    dpop_signer = providers.Singleton(DPoPSigner)

    search_client = providers.Singleton(
        MercariSearchClient,
        http_client=http_client,
        settings=config,
        signer=dpop_signer,
    )

    search_retrier = providers.Singleton(
        SearchRetrier,
        search_client=search_client,
        settings=config,
    )

    seen_repository = providers.Singleton(_build_seen_repository, config)

    clip_client = providers.Singleton(
        HuggingFaceClipClient,
        http_client=http_client,
        settings=config,
    )

    classification_gate = providers.Singleton(
        ClassificationGate,
        classifier=clip_client,
        settings=config,
    )

    notification_styler = providers.Singleton(EventNotificationStyler)

    telegram_bot = providers.Singleton(_build_telegram_bot, config)

    notification_service = providers.Singleton(
        NotificationService,
        notifiers=providers.Callable(
            _build_notification_notifiers, config, notification_styler, telegram_bot
        ),
        queue_size=config.provided.telegram.queue_size,
    )

    scan_cycle = providers.Singleton(
        ScanCycle,
        retrier=search_retrier,
        seen_repository=seen_repository,
        gate=classification_gate,
        notification_service=notification_service,
        settings=config,
    )

    scan_runner = providers.Singleton(
        ScanRunner,
        scan_cycle=scan_cycle,
        seen_repository=seen_repository,
        notification_service=notification_service,
        settings=config,
    )

    command_listener = providers.Singleton(
        TelegramCommandListener,
        bot=telegram_bot,
        status_provider=scan_runner,
        styler=notification_styler,
        settings=config,
    )
