# -*- coding: utf-8 -*-
"""Unit tests for HuggingFaceClipClient and response parsing."""

from __future__ import annotations

import json
from typing import Any

import aiohttp
import pytest

from mercari_deal_hunter.clients.http import HttpResponse
from mercari_deal_hunter.clients.huggingface.clip_client import (
    HuggingFaceClipClient,
    parse_zero_shot_response,
)
from mercari_deal_hunter.config import Settings
from mercari_deal_hunter.exceptions import (
    ClassifierParseError,
    ClassifierStatusError,
    ClassifierTransportError,
    ModelLoadingError,
)


class _FakeHttp:
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


def test_parse_parallel_object() -> None:
    result = parse_zero_shot_response({"labels": ["a", "b"], "scores": [0.7, 0.3]})
    assert result.top == ("a", 0.7)


def test_parse_single_element_array() -> None:
    result = parse_zero_shot_response([{"labels": ["a"], "scores": [1.0]}])
    assert result.labels == ("a",)


def test_parse_label_score_list_sorted_descending() -> None:
    result = parse_zero_shot_response(
        [{"label": "low", "score": 0.1}, {"label": "high", "score": 0.8}]
    )
    assert result.labels == ("high", "low")
    assert result.top == ("high", 0.8)


@pytest.mark.parametrize("data", ["text", [], [1, 2], {"labels": "x"}, 42])
def test_parse_rejects_unknown_shapes(data: Any) -> None:
    with pytest.raises(ClassifierParseError):
        parse_zero_shot_response(data)


def _settings(settings_factory: Any) -> Settings:
    return settings_factory(huggingface={"enabled": True, "api_key": "hf_test"})


async def test_classify_posts_image_and_labels(settings_factory: Any) -> None:
    http = _FakeHttp(HttpResponse(status=200, text=json.dumps({"labels": ["a"], "scores": [0.9]})))
    client = HuggingFaceClipClient(http, _settings(settings_factory))  # type: ignore[arg-type]

    result = await client.classify("https://img/1.jpg", ["a", "b"])

    assert result.top == ("a", 0.9)
    call = http.calls[0]
    assert call["url"] == (
        "https://router.huggingface.co/hf-inference/models/openai/clip-vit-large-patch14"
    )
    assert call["json"] == {
        "inputs": {"image": "https://img/1.jpg", "candidate_labels": ["a", "b"]}
    }
    assert call["headers"]["Authorization"] == "Bearer hf_test"


async def test_classify_503_is_model_loading(settings_factory: Any) -> None:
    http = _FakeHttp(HttpResponse(status=503, text='{"error":"loading"}'))
    client = HuggingFaceClipClient(http, _settings(settings_factory))  # type: ignore[arg-type]

    with pytest.raises(ModelLoadingError):
        await client.classify("https://img/1.jpg", ["a"])


async def test_classify_other_status_is_status_error(settings_factory: Any) -> None:
    http = _FakeHttp(HttpResponse(status=429, text="slow down"))
    client = HuggingFaceClipClient(http, _settings(settings_factory))  # type: ignore[arg-type]

    with pytest.raises(ClassifierStatusError) as exc_info:
        await client.classify("https://img/1.jpg", ["a"])

    assert not isinstance(exc_info.value, ModelLoadingError)
    assert exc_info.value.status_code == 429


async def test_classify_transport_error(settings_factory: Any) -> None:
    http = _FakeHttp(exc=aiohttp.ClientConnectionError("refused"))
    client = HuggingFaceClipClient(http, _settings(settings_factory))  # type: ignore[arg-type]

    with pytest.raises(ClassifierTransportError):
        await client.classify("https://img/1.jpg", ["a"])
