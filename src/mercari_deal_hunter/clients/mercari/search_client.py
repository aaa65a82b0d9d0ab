# -*- coding: utf-8 -*-
"""Mercari Japan search client (internal v2 entities:search endpoint with DPoP auth)."""

from __future__ import annotations

import random
import uuid
import aiohttp
import structlog
from typing import TYPE_CHECKING, Any, Callable, List, Optional, Sequence, cast
from structlog.contextvars import bound_contextvars

from mercari_deal_hunter.clients.mercari.dpop import DPoPSigner
from mercari_deal_hunter.clients.mercari.parsing import parse_item, to_int
from mercari_deal_hunter.clients.mercari.schema import (
    SearchItemSchema,
    SearchRequestSchema,
    SearchResponseSchema,
)
from mercari_deal_hunter.config import Settings
from mercari_deal_hunter.exceptions import MercariAPIError
from mercari_deal_hunter.models.listing import Listing
from mercari_deal_hunter.utils.text import clean_excerpt

if TYPE_CHECKING:
    from mercari_deal_hunter.clients.http import AsyncHttpClient

USER_AGENTS: tuple[str, ...] = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36",
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36",
    "Mozilla/5.0 (X11; Linux x86_64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36",
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64; rv:121.0) Gecko/20100101 Firefox/121.0",
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/605.1.15 (KHTML, like Gecko) Version/17.2 Safari/605.1.15",
)

ERROR_BODY_MAX_CHARS = 300


class MercariSearchClient:
    """Searches on-sale Mercari listings, newest first.

    Owns the DPoP signer (one keypair for the client lifetime) and a
    user-agent picked once from USER_AGENTS.
    """

    def __init__(
        self,
        http_client: "AsyncHttpClient",
        settings: Settings,
        *,
        signer: Optional[DPoPSigner] = None,
        user_agent: Optional[str] = None,
        get_logger: Callable[[str], Any] = structlog.get_logger,
        logger_name: Optional[str] = None,
    ) -> None:
        """Initialize the client.

        Args:
            http_client: Async HTTP client (e.g. AsyncHttpClient).
            settings: Application settings (uses settings.mercari).
            signer: DPoP signer; a new one (new keypair) is created when omitted.
            user_agent: Fixed user-agent; random pick from USER_AGENTS when omitted.
            get_logger: Logger factory (injected) with default of structlog.get_logger.
            logger_name: Optional logger name (defaults to class name).
        """
        self._http = http_client
        self._settings = settings
        self._signer = signer if signer is not None else DPoPSigner()
        self._user_agent = user_agent or random.choice(USER_AGENTS)
        self._logger = get_logger(logger_name or self.__class__.__name__)

    @property
    def user_agent(self) -> str:
        return self._user_agent

    def build_request_body(
        self,
        keyword: str,
        price_min: int,
        price_max: int,
        category_ids: Sequence[int],
        page_size: int,
    ) -> SearchRequestSchema:
        """Search body: on-sale only, newest first, price band and categories."""
        return {
            "pageSize": page_size,
            "searchSessionId": str(uuid.uuid4()),
            "searchCondition": {
                "keyword": keyword,
                "excludeKeyword": "",
                "sort": "SORT_CREATED_TIME",
                "order": "ORDER_DESC",
                "status": ["STATUS_ON_SALE"],
                "sizeId": [],
                "categoryId": list(category_ids),
                "brandId": [],
                "sellerId": [],
                "priceMin": price_min,
                "priceMax": price_max,
                "itemConditionId": [],
                "shippingPayerId": [],
                "colorId": [],
                "hasCoupon": False,
                "attributes": [],
                "itemTypes": [],
                "skuIds": [],
            },
            "serviceFrom": "suruga",
            "withItemBrand": True,
            "withItemSize": False,
            "withItemPromotions": True,
            "withItemSizes": True,
            "withShopname": False,
        }

    def build_headers(self, dpop_token: str) -> dict[str, str]:
        """Request headers; DPoP is the auth header, the rest mimic the web app."""
        return {
            "Content-Type": "application/json",
            "Accept": "application/json, text/plain, */*",
            "DPoP": dpop_token,
            "X-Platform": "web",
            "User-Agent": self._user_agent,
            "Accept-Language": "ja-JP,ja;q=0.9,en;q=0.8",
            "Origin": "https://jp.mercari.com",
            "Referer": "https://jp.mercari.com/",
        }

    async def search(
        self,
        keyword: str,
        price_min: int,
        price_max: int,
        category_ids: Sequence[int],
        page_size: int,
    ) -> List[Listing]:
        """Run one search and return normalized listings.

        Args:
            keyword: Search keyword.
            price_min: Minimum price (yen).
            price_max: Maximum price (yen).
            category_ids: Mercari category ids to restrict to.
            page_size: Number of items to request.

        Returns:
            Listings in API order (newest first).

        Raises:
            MercariAPIError: Transport failure, non-200 status or unparseable body.
            SigningError: If the DPoP token cannot be produced.
        """
        url = self._settings.mercari.search_url
        with bound_contextvars(mercari_keyword=keyword):
            token = self._signer.sign(url, "POST")
            body = self.build_request_body(keyword, price_min, price_max, category_ids, page_size)
            try:
                response = await self._http.post(url, json=body, headers=self.build_headers(token))
            except (aiohttp.ClientError, TimeoutError) as exc:
                raise MercariAPIError(
                    f"search request failed: {type(exc).__name__}: {exc}",
                    url=url,
                    cause=exc,
                ) from exc

            if not response.ok:
                excerpt = clean_excerpt(response.text, ERROR_BODY_MAX_CHARS)
                raise MercariAPIError(
                    f"mercari API returned {response.status}: {excerpt}",
                    url=url,
                    status_code=response.status,
                )

            try:
                data = response.json()
            except ValueError as exc:
                raise MercariAPIError(
                    f"parsing response: {exc}",
                    url=url,
                    status_code=response.status,
                    cause=exc,
                ) from exc
            if not isinstance(data, dict):
                raise MercariAPIError(
                    f"unexpected response type: {type(data).__name__}",
                    url=url,
                    status_code=response.status,
                )

            payload = cast(SearchResponseSchema, data)
            listings = self._parse_listings(payload.get("items"))
            meta = payload.get("meta")
            num_found = to_int(meta.get("numFound")) if isinstance(meta, dict) else 0
            self._logger.info(
                "mercari_search_completed",
                mercari_items_returned=len(listings),
                mercari_num_found=num_found,
            )
            return listings

    def _parse_listings(self, raw_items: Any) -> List[Listing]:
        if not isinstance(raw_items, list):
            return []
        base = self._settings.mercari.item_base_url
        listings: List[Listing] = []
        for raw in cast(list[Any], raw_items):
            if not isinstance(raw, dict):
                continue
            listing = parse_item(cast(SearchItemSchema, raw), item_base_url=base)
            if listing is None:
                self._logger.debug("mercari_item_skipped_no_id")
                continue
            listings.append(listing)
        return listings


__all__ = ["MercariSearchClient", "USER_AGENTS"]
