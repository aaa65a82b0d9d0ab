# -*- coding: utf-8 -*-
"""Logging configuration: structlog over stdlib handlers, optional Logfire sink.

Console and rotating-file handlers are driven by settings.logging. Every
event gets an ISO UTC timestamp, the bound contextvars (brand, keyword,
request id) and the service context. Credentials never reach a sink: the
redaction processor masks token-like fields before rendering.
"""

from __future__ import annotations

import logging
from logging.handlers import TimedRotatingFileHandler
from pathlib import Path
from typing import Any

import logfire
import structlog
from structlog.types import EventDict, Processor

from mercari_deal_hunter.config import LoggingSettings, Settings, get_settings
from mercari_deal_hunter.utils.text import mask_secret

LOG_LEVEL_TO_LOGFIRE: dict[str, str] = {
    "DEBUG": "debug",
    "INFO": "info",
    "WARNING": "warn",
    "ERROR": "error",
    "CRITICAL": "fatal",
}

# Third-party loggers that are chatty below WARNING.
QUIET_LOGGERS: tuple[str, ...] = ("aiohttp", "httpx", "httpcore", "telegram", "asyncio")

SECRET_FIELDS = frozenset({"api_key", "token", "bot_token", "authorization", "dpop"})


def _level(name: str) -> int:
    return getattr(logging, name.upper(), logging.INFO)


def _build_handlers(cfg: LoggingSettings) -> list[logging.Handler]:
    """Console and/or timed-rotating file handlers, each with its own level."""
    handlers: list[logging.Handler] = []
    if cfg.log_to_console:
        console = logging.StreamHandler()
        console.setLevel(_level(cfg.console_level))
        handlers.append(console)
    if cfg.log_to_file:
        path = Path(cfg.log_file_path)
        path.parent.mkdir(parents=True, exist_ok=True)
        rotating = TimedRotatingFileHandler(
            path,
            when=cfg.log_file_when,
            interval=cfg.log_file_interval,
            backupCount=cfg.log_file_backup_count,
            encoding="utf-8",
            utc=cfg.log_file_utc,
        )
        rotating.setLevel(_level(cfg.file_level))
        handlers.append(rotating)
    for handler in handlers:
        handler.setFormatter(logging.Formatter("%(message)s"))
    return handlers


def _service_context_processor(settings: Settings) -> Processor:
    """Attach logger name, app name, optional service name/version and environment."""
    app = settings.app
    static: dict[str, Any] = {"app_name": app.app_name, "environment": app.environment}
    if app.service_name:
        static["service_name"] = app.service_name
    if app.service_version:
        static["service_version"] = app.service_version

    def _add_service_context(logger: Any, method_name: str, event_dict: EventDict) -> EventDict:
        stdlib_logger = getattr(logger, "_logger", None)
        event_dict.setdefault(
            "logger",
            getattr(stdlib_logger, "name", None) or getattr(logger, "name", "") or "",
        )
        event_dict.update(static)
        return event_dict

    return _add_service_context


def redact_secrets(logger: Any, method_name: str, event_dict: EventDict) -> EventDict:
    """Mask values of credential-like keys (api_key, token, authorization, ...)."""
    for key in list(event_dict):
        if key.lower() in SECRET_FIELDS and isinstance(event_dict[key], str):
            event_dict[key] = mask_secret(event_dict[key])
    return event_dict


def _configure_logfire(settings: Settings) -> None:
    cfg = settings.logging
    app = settings.app
    logfire.configure(
        token=cfg.logfire_token,
        service_name=app.service_name or app.app_name,
        service_version=app.service_version,
        min_level=LOG_LEVEL_TO_LOGFIRE.get(cfg.logfire_level, "info"),  # type: ignore[arg-type]
        environment=app.environment,
    )


def configure_logging(settings: Settings | None = None) -> None:
    """Configure stdlib handlers, structlog processors and the optional Logfire sink."""
    settings = settings or get_settings()
    cfg = settings.logging

    handlers = _build_handlers(cfg)
    if handlers:
        logging.basicConfig(
            level=min(handler.level for handler in handlers),
            handlers=handlers,
            force=True,
        )
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    processors: list[Processor] = [
        structlog.stdlib.filter_by_level,
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.StackInfoRenderer(),
        structlog.dev.set_exc_info,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        _service_context_processor(settings),
        redact_secrets,
    ]

    if cfg.logfire_enabled:
        _configure_logfire(settings)
        processors.append(logfire.StructlogProcessor())  # type: ignore[arg-type]

    if handlers:
        # A file sink forces JSON for both sinks so files stay machine-readable.
        if cfg.log_to_file or cfg.json_format:
            processors.append(structlog.processors.JSONRenderer(ensure_ascii=False))
        else:
            processors.append(structlog.dev.ConsoleRenderer())

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )
