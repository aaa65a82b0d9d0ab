# -*- coding: utf-8 -*-
"""Async HTTP client sharing one aiohttp session with a fixed total timeout."""

from __future__ import annotations

import json as jsonlib
import uuid
import aiohttp
import structlog
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Optional
from structlog.contextvars import bound_contextvars

from mercari_deal_hunter.config import Settings


@dataclass(frozen=True, slots=True)
class HttpResponse:
    """Status, headers and raw body of a completed request."""

    status: int
    text: str
    headers: Dict[str, str] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300

    def json(self) -> Any:
        """Decode the body as JSON (raises ValueError on malformed bodies)."""
        return jsonlib.loads(self.text)


class AsyncHttpClient:
    """One pooled aiohttp session shared by the Mercari and HuggingFace clients.

    Non-2xx responses come back as HttpResponse; aiohttp.ClientError and
    TimeoutError propagate. Retry policy belongs to the callers.
    """

    # Mercari and the inference API are the only hosts; keep the pool small.
    POOL_LIMIT = 5
    POOL_LIMIT_PER_HOST = 2

    def __init__(
        self,
        settings: Settings,
        *,
        session: Optional[aiohttp.ClientSession] = None,
        get_logger: Callable[[str], Any] = structlog.get_logger,
        logger_name: Optional[str] = None,
    ) -> None:
        """
        Args:
            settings: settings.mercari.timeout_seconds bounds each request end to end.
            session: Externally owned session; when omitted one is opened on first use.
            get_logger: Logger factory (injected) with default of structlog.get_logger.
            logger_name: Optional logger name (defaults to class name).
        """
        self._timeout = aiohttp.ClientTimeout(total=settings.mercari.timeout_seconds)
        self._session = session
        self._external_session = session is not None
        self._logger = get_logger(logger_name or self.__class__.__name__)

    def _open_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(
                timeout=self._timeout,
                connector=aiohttp.TCPConnector(
                    limit=self.POOL_LIMIT,
                    limit_per_host=self.POOL_LIMIT_PER_HOST,
                    keepalive_timeout=60,
                ),
            )
            self._external_session = False
        return self._session

    async def aclose(self) -> None:
        """Close the session unless it was handed in by the caller."""
        session, self._session = self._session, None
        if session is not None and not self._external_session and not session.closed:
            await session.close()

    async def post(
        self,
        url: str,
        *,
        json: Optional[Any] = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> HttpResponse:
        """POST a JSON body; the response is returned whatever its status.

        Raises:
            aiohttp.ClientError: Connection or protocol failure.
            TimeoutError: The total timeout elapsed.
        """
        with bound_contextvars(http_url=url, http_request_id=uuid.uuid4().hex[:12]):
            async with self._open_session().post(url, json=json, headers=headers) as response:
                body = await response.text(errors="replace")
            self._logger.debug(
                "http_post_completed",
                http_status_code=response.status,
                http_body_length=len(body),
            )
            return HttpResponse(
                status=response.status, text=body, headers=dict(response.headers)
            )
