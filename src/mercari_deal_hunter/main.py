# -*- coding: utf-8 -*-
"""
Entry point for the Mercari deal hunter.

Orchestrates: CLI flags, settings, logging, container, dedup store, notifications,
scan runner and the Telegram command listener; shutdown on SIGINT/SIGTERM.

Run with: mercari-deal-hunter [--config PATH] [--once] [--test-telegram]
      or: python -m mercari_deal_hunter.main
"""
from __future__ import annotations

import argparse
import asyncio
import os
import platform
import signal
import sys
from pathlib import Path
from typing import Any, Optional, Sequence

import structlog
from dependency_injector import providers

from mercari_deal_hunter import __version__
from mercari_deal_hunter.DI import Container
from mercari_deal_hunter.config import Settings
from mercari_deal_hunter.exceptions import DealHunterError, MissingRequiredConfigError
from mercari_deal_hunter.logging.config import configure_logging
from mercari_deal_hunter.notifications.strategies.telegram import TelegramNotifier
from mercari_deal_hunter.notifications.types import (
    CONNECTION_TEST,
    SYSTEM_STARTED,
    SYSTEM_STOPPED,
    NotificationMessage,
)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="mercari-deal-hunter",
        description="Watch Mercari Japan for new brand listings and alert on Telegram.",
    )
    parser.add_argument("--config", metavar="PATH", help="JSON config file (env fills the gaps)")
    parser.add_argument("--once", action="store_true", help="run one scan cycle and exit")
    parser.add_argument(
        "--test-telegram",
        action="store_true",
        help="send a Telegram test message and exit",
    )
    return parser


def load_settings(config_path: Optional[str]) -> Settings:
    """Settings from the JSON file (if given) and environment.

    A relative storage.db_path is resolved next to the config file.
    """
    if not config_path:
        return Settings.from_env()
    path = Path(config_path).expanduser().resolve()
    settings = Settings.from_file(path)
    db_path = Path(settings.storage.db_path)
    if db_path.is_absolute():
        return settings
    storage = settings.storage.model_copy(update={"db_path": str(path.parent / db_path)})
    return settings.model_copy(update={"storage": storage})


def validate_settings(settings: Settings, *, require_brands: bool = True) -> None:
    """Fail fast on configuration the bot cannot run without."""
    tg = settings.telegram
    if tg.enabled and not (tg.api_key or "").strip():
        raise MissingRequiredConfigError("TELEGRAM__API_KEY")
    if tg.enabled and not (tg.chat_id or "").strip():
        raise MissingRequiredConfigError("TELEGRAM__CHAT_ID")
    if require_brands and not settings.brands:
        raise MissingRequiredConfigError("at least one brand is required")


def _setup_signals(shutdown_event: asyncio.Event) -> None:
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, shutdown_event.set)
        except NotImplementedError:
            pass  # Windows has no add_signal_handler


async def _stop_task(task: asyncio.Task[None], grace: float, logger: Any, name: str) -> None:
    """Give task `grace` seconds to finish, then cancel it."""
    if not task.done():
        done, _ = await asyncio.wait({task}, timeout=grace)
        if not done:
            logger.info("main_task_cancelled_after_grace", task=name, grace_seconds=grace)
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                pass
            return
    if not task.cancelled() and task.exception() is not None:
        logger.error(
            "main_task_failed",
            task=name,
            error_type=type(task.exception()).__name__,
            error_message=str(task.exception()),
        )


async def _test_telegram(container: Container, settings: Settings, logger: Any) -> int:
    if not settings.telegram.enabled:
        raise MissingRequiredConfigError("TELEGRAM__ENABLED must be true to test Telegram")
    notifier = TelegramNotifier(
        settings=settings,
        styler=container.notification_styler(),
        bot=container.telegram_bot(),
    )
    await notifier.initialize()
    try:
        ok = await notifier.send_notification(
            NotificationMessage(event_type=CONNECTION_TEST, message="Telegram connection test")
        )
    finally:
        await notifier.shutdown()
    if ok:
        logger.info("main_telegram_test_succeeded")
        return 0
    logger.error("main_telegram_test_failed")
    return 1


async def _run_forever(container: Container, settings: Settings, logger: Any) -> None:
    runner = container.scan_runner()
    notification_service = container.notification_service()
    shutdown_event = asyncio.Event()
    _setup_signals(shutdown_event)
    grace = settings.scan.listener_stop_grace_seconds

    notification_service.notify(
        NotificationMessage(
            event_type=SYSTEM_STARTED,
            message="Deal hunter started",
            payload={
                "brand_count": len(settings.brands),
                "interval_minutes": settings.scan.interval_minutes,
            },
        )
    )

    listener_stop = asyncio.Event()
    listener_task: Optional[asyncio.Task[None]] = None
    tg = settings.telegram
    if tg.enabled and tg.commands_enabled:
        listener = container.command_listener()
        listener_task = asyncio.create_task(listener.listen(listener_stop))

    runner_task = asyncio.create_task(runner.run(shutdown_event))
    try:
        try:
            await shutdown_event.wait()
        except asyncio.CancelledError:
            shutdown_event.set()
            raise
    finally:
        logger.info("main_shutdown_started")
        await _stop_task(runner_task, grace, logger, "scan_runner")
        listener_stop.set()
        if listener_task is not None:
            await _stop_task(listener_task, grace, logger, "command_listener")
        notification_service.notify(
            NotificationMessage(
                event_type=SYSTEM_STOPPED,
                message=f"Stopped after {runner.run_count} scan cycles",
            )
        )


async def run(argv: Optional[Sequence[str]] = None) -> int:
    """Run the bot according to CLI flags; return the process exit code."""
    args = build_parser().parse_args(argv)
    settings = load_settings(args.config)
    configure_logging(settings)
    logger = structlog.get_logger("main")
    logger.info(
        "main_startup_banner",
        app_version=__version__,
        platform=f"{platform.system().lower()}/{platform.machine().lower()}",
        pid=os.getpid(),
    )
    validate_settings(settings, require_brands=not args.test_telegram)

    container = Container()
    container.config.override(providers.Object(settings))
    logger.info(
        "main_config_loaded",
        brands_count=len(settings.brands),
        scan_interval_minutes=settings.scan.interval_minutes,
        price_min=settings.scan.price_min,
        price_max=settings.scan.price_max,
        ai_filter_enabled=container.classification_gate().enabled,
    )

    if args.test_telegram:
        return await _test_telegram(container, settings, logger)

    seen_repository = container.seen_repository()
    logger.info(
        "main_dedup_store_ready",
        db_path=str(seen_repository.db_path),
        tracked_items=await seen_repository.count(),
    )
    http_client = container.http_client()
    notification_service = container.notification_service()
    await notification_service.initialize()
    try:
        if args.once:
            stats = await container.scan_runner().run_once()
            logger.info("main_single_scan_completed", found=stats.found, sent=stats.sent)
        else:
            await _run_forever(container, settings, logger)
    finally:
        await notification_service.shutdown()
        await http_client.aclose()
        await seen_repository.close()
        logger.info("main_shutdown_complete")
    return 0


def main(argv: Optional[Sequence[str]] = None) -> None:
    try:
        code = asyncio.run(run(argv))
    except DealHunterError as exc:
        structlog.get_logger("main").error(
            "main_startup_failed",
            error_type=type(exc).__name__,
            error_message=str(exc),
        )
        code = 1
    except KeyboardInterrupt:
        code = 130
    sys.exit(code)


__all__ = ["run", "main"]

if __name__ == "__main__":
    main()
