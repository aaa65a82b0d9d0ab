# -*- coding: utf-8 -*-
"""HuggingFace Inference API client for CLIP zero-shot image classification."""

from __future__ import annotations

import aiohttp
import structlog
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Callable, Optional, Sequence, cast

from mercari_deal_hunter.config import Settings
from mercari_deal_hunter.exceptions import (
    ClassifierParseError,
    ClassifierStatusError,
    ClassifierTransportError,
    ModelLoadingError,
)
from mercari_deal_hunter.utils.text import clean_excerpt

if TYPE_CHECKING:
    from mercari_deal_hunter.clients.http import AsyncHttpClient

MODEL_LOADING_STATUS = 503


@dataclass(frozen=True, slots=True)
class ClassificationResult:
    """Labels ranked by descending score, with parallel scores."""

    labels: tuple[str, ...]
    scores: tuple[float, ...]

    @property
    def top(self) -> tuple[str, float] | None:
        """Top-ranked (label, score), or None when the result is empty."""
        if not self.labels or not self.scores:
            return None
        return self.labels[0], self.scores[0]


def _from_parallel(obj: dict[str, Any]) -> ClassificationResult:
    labels = obj.get("labels")
    scores = obj.get("scores")
    if not isinstance(labels, list) or not isinstance(scores, list):
        raise ClassifierParseError("response object lacks labels/scores lists")
    try:
        return ClassificationResult(
            labels=tuple(str(x) for x in cast(list[Any], labels)),
            scores=tuple(float(x) for x in cast(list[Any], scores)),
        )
    except (TypeError, ValueError) as exc:
        raise ClassifierParseError(f"non-numeric score: {exc}") from exc


def _from_label_score_list(items: list[Any]) -> ClassificationResult:
    pairs: list[tuple[str, float]] = []
    for entry in items:
        if not isinstance(entry, dict) or "label" not in entry or "score" not in entry:
            raise ClassifierParseError("list entry is not a {label, score} object")
        try:
            pairs.append((str(entry["label"]), float(entry["score"])))
        except (TypeError, ValueError) as exc:
            raise ClassifierParseError(f"non-numeric score: {exc}") from exc
    pairs.sort(key=lambda p: p[1], reverse=True)
    return ClassificationResult(
        labels=tuple(p[0] for p in pairs),
        scores=tuple(p[1] for p in pairs),
    )


def parse_zero_shot_response(data: Any) -> ClassificationResult:
    """Interpret a zero-shot classification response body.

    Accepted shapes:
    - {"labels": [...], "scores": [...]}
    - [{"labels": [...], "scores": [...]}]
    - [{"label": ..., "score": ...}, ...] (sorted here by score)

    Raises:
        ClassifierParseError: Any other shape.
    """
    if isinstance(data, dict):
        return _from_parallel(cast(dict[str, Any], data))
    if isinstance(data, list):
        items = cast(list[Any], data)
        if not items:
            raise ClassifierParseError("empty response array")
        first = items[0]
        if isinstance(first, dict) and "labels" in first:
            return _from_parallel(cast(dict[str, Any], first))
        return _from_label_score_list(items)
    raise ClassifierParseError(f"unexpected response type: {type(data).__name__}")


class HuggingFaceClipClient:
    """ImageClassifier backed by the HuggingFace hf-inference router."""

    def __init__(
        self,
        http_client: "AsyncHttpClient",
        settings: Settings,
        *,
        get_logger: Callable[[str], Any] = structlog.get_logger,
        logger_name: Optional[str] = None,
    ) -> None:
        self._http = http_client
        self._settings = settings
        self._logger = get_logger(logger_name or self.__class__.__name__)

    @property
    def model(self) -> str:
        return self._settings.huggingface.model

    def _endpoint(self) -> str:
        base = self._settings.huggingface.api_base.rstrip("/")
        return f"{base}/{self.model}"

    async def classify(self, image_url: str, labels: Sequence[str]) -> ClassificationResult:
        """Score one image against the candidate labels.

        Raises:
            ModelLoadingError: 503 while the model is being loaded.
            ClassifierStatusError: Any other non-200 status.
            ClassifierTransportError: Connection failure or timeout.
            ClassifierParseError: Body is not a recognizable classification result.
        """
        body = {"inputs": {"image": image_url, "candidate_labels": list(labels)}}
        headers = {
            "Authorization": f"Bearer {self._settings.huggingface.api_key or ''}",
            "Content-Type": "application/json",
        }
        try:
            response = await self._http.post(self._endpoint(), json=body, headers=headers)
        except (aiohttp.ClientError, TimeoutError) as exc:
            raise ClassifierTransportError(
                f"classification request failed: {type(exc).__name__}: {exc}"
            ) from exc

        if response.status != 200:
            excerpt = clean_excerpt(response.text, 200)
            if response.status == MODEL_LOADING_STATUS:
                raise ModelLoadingError(
                    "model is loading",
                    status_code=response.status,
                    body=excerpt,
                )
            raise ClassifierStatusError(
                f"huggingface API returned {response.status}",
                status_code=response.status,
                body=excerpt,
            )

        try:
            data = response.json()
        except ValueError as exc:
            raise ClassifierParseError(
                f"invalid JSON body: {clean_excerpt(response.text, 200)}"
            ) from exc
        return parse_zero_shot_response(data)
