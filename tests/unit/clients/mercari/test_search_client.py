# -*- coding: utf-8 -*-
"""Unit tests for MercariSearchClient."""

from __future__ import annotations

import json
from typing import Any

import aiohttp
import pytest

from mercari_deal_hunter.clients.http import HttpResponse
from mercari_deal_hunter.clients.mercari.search_client import USER_AGENTS, MercariSearchClient
from mercari_deal_hunter.config import Settings
from mercari_deal_hunter.exceptions import MercariAPIError


class _FakeHttp:
    """Records POST calls and returns a canned response (or raises)."""

    def __init__(self, response: HttpResponse | None = None, exc: Exception | None = None) -> None:
        self.response = response
        self.exc = exc
        self.calls: list[dict[str, Any]] = []

    async def post(self, url: str, *, json: Any = None, headers: Any = None) -> HttpResponse:
        self.calls.append({"url": url, "json": json, "headers": headers})
        if self.exc is not None:
            raise self.exc
        assert self.response is not None
        return self.response


def _ok(body: Any) -> HttpResponse:
    return HttpResponse(status=200, text=json.dumps(body))


def _client(http: _FakeHttp, settings: Settings) -> MercariSearchClient:
    return MercariSearchClient(http, settings)  # type: ignore[arg-type]


async def test_search_posts_signed_request_with_filters(settings: Settings) -> None:
    http = _FakeHttp(_ok({"items": [], "meta": {"numFound": "0"}}))
    client = _client(http, settings)

    await client.search("prada bag", 3000, 15000, [1, 2], 10)

    call = http.calls[0]
    assert call["url"] == "https://api.mercari.jp/v2/entities:search"
    body = call["json"]
    assert body["pageSize"] == 10
    cond = body["searchCondition"]
    assert cond["keyword"] == "prada bag"
    assert cond["sort"] == "SORT_CREATED_TIME"
    assert cond["order"] == "ORDER_DESC"
    assert cond["status"] == ["STATUS_ON_SALE"]
    assert cond["categoryId"] == [1, 2]
    assert (cond["priceMin"], cond["priceMax"]) == (3000, 15000)
    headers = call["headers"]
    assert headers["DPoP"].count(".") == 2
    assert headers["X-Platform"] == "web"
    assert headers["User-Agent"] in USER_AGENTS
    assert headers["Origin"] == "https://jp.mercari.com"


async def test_each_request_gets_a_fresh_token(settings: Settings) -> None:
    http = _FakeHttp(_ok({"items": []}))
    client = _client(http, settings)

    await client.search("a", 0, 1, [], 1)
    await client.search("a", 0, 1, [], 1)

    assert http.calls[0]["headers"]["DPoP"] != http.calls[1]["headers"]["DPoP"]
    assert http.calls[0]["headers"]["User-Agent"] == http.calls[1]["headers"]["User-Agent"]


async def test_search_normalizes_items_and_skips_missing_ids(settings: Settings) -> None:
    body = {
        "items": [
            {"id": "m1", "name": "bag", "price": "15000", "created": "1770984000",
             "thumbnails": ["https://img/1.jpg"], "itemBrand": {"name": "PRADA"}},
            {"name": "no id"},
            {"id": "m2", "name": "wallet", "price": 15000.0, "created": 1770984000},
        ],
        "meta": {"numFound": "2"},
    }
    client = _client(_FakeHttp(_ok(body)), settings)

    listings = await client.search("prada", 0, 99999, [], 10)

    assert [item.id for item in listings] == ["m1", "m2"]
    assert [item.price for item in listings] == [15000, 15000]
    assert listings[0].brand_name == "PRADA"
    assert listings[1].image_urls == ()


async def test_non_2xx_raises_with_clean_truncated_excerpt(settings: Settings) -> None:
    raw = "\x00\x07bad\tgateway\n" + "x" * 400
    client = _client(_FakeHttp(HttpResponse(status=502, text=raw)), settings)

    with pytest.raises(MercariAPIError) as exc_info:
        await client.search("prada", 0, 1, [], 1)

    err = exc_info.value
    assert err.status_code == 502
    message = str(err)
    assert "\x00" not in message and "\x07" not in message
    assert "bad\tgateway\n" in message
    assert message.endswith("...")
    assert message.count("x") == 297 - len("bad\tgateway\n")


async def test_invalid_json_raises(settings: Settings) -> None:
    client = _client(_FakeHttp(HttpResponse(status=200, text="<html>")), settings)

    with pytest.raises(MercariAPIError):
        await client.search("prada", 0, 1, [], 1)


async def test_transport_error_is_wrapped(settings: Settings) -> None:
    client = _client(_FakeHttp(exc=aiohttp.ClientConnectionError("reset")), settings)

    with pytest.raises(MercariAPIError) as exc_info:
        await client.search("prada", 0, 1, [], 1)

    assert isinstance(exc_info.value.cause, aiohttp.ClientConnectionError)


async def test_timeout_is_wrapped(settings: Settings) -> None:
    client = _client(_FakeHttp(exc=TimeoutError()), settings)

    with pytest.raises(MercariAPIError):
        await client.search("prada", 0, 1, [], 1)
