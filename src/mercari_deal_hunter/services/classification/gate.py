# -*- coding: utf-8 -*-
"""ClassificationGate: drops listings whose lead photo is packaging, a receipt or unusable.

The gate is fail-open: any classifier failure keeps the listing. Only a
confident reject-set top label removes it.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import Any, Protocol

import structlog

from mercari_deal_hunter.clients.huggingface.clip_client import ClassificationResult
from mercari_deal_hunter.config import Settings
from mercari_deal_hunter.exceptions import (
    ClassifierError,
    ClassifierParseError,
    ClassifierStatusError,
    ModelLoadingError,
)
from mercari_deal_hunter.models.listing import Listing
from mercari_deal_hunter.services.classification.labels import ALL_LABELS, REJECT_LABEL_SET

PLACEHOLDER_API_KEY = "YOUR_HF_API_KEY"


class ImageClassifier(Protocol):
    """Scores an image URL against candidate labels."""

    async def classify(self, image_url: str, labels: Sequence[str]) -> ClassificationResult:
        """Return labels ranked by descending score; raise ClassifierError on failure."""
        ...


@dataclass(frozen=True, slots=True)
class Decision:
    """Keep/reject verdict for one listing, with the label that drove it."""

    keep: bool
    label: str
    score: float = 0.0


KEEP_NO_IMAGE = Decision(keep=True, label="no_image")


def _fallback_label(exc: BaseException) -> str:
    """Diagnostic label recorded when a classification fails open."""
    if isinstance(exc, ModelLoadingError):
        return "model_loading"
    if isinstance(exc, ClassifierStatusError):
        return "api_error"
    if isinstance(exc, ClassifierParseError):
        return "parse_error"
    return "error"


class ClassificationGate:
    """Bounded-concurrency, fail-open image filter over an ImageClassifier."""

    def __init__(
        self,
        classifier: ImageClassifier | None,
        settings: Settings,
        *,
        labels: Sequence[str] = ALL_LABELS,
        reject_labels: frozenset[str] = REJECT_LABEL_SET,
        get_logger: Callable[[str], Any] = structlog.get_logger,
        logger_name: str | None = None,
    ) -> None:
        """Initialize the gate.

        Args:
            classifier: Classification backend; None disables the gate.
            settings: Application settings (uses settings.huggingface).
            labels: Full candidate vocabulary sent with each request.
            reject_labels: Labels that reject a listing when ranked first.
            get_logger: Logger factory (injected) with default of structlog.get_logger.
            logger_name: Optional logger name (defaults to class name).
        """
        hf = settings.huggingface
        self._classifier = classifier
        self._labels = tuple(labels)
        self._reject_labels = reject_labels
        self._max_concurrency = hf.max_concurrency
        self._threshold = hf.reject_threshold
        self._loading_retry_seconds = hf.loading_retry_seconds
        self._model = hf.model
        api_key = (hf.api_key or "").strip()
        self._enabled = (
            hf.enabled
            and classifier is not None
            and bool(api_key)
            and api_key != PLACEHOLDER_API_KEY
        )
        self._logger = get_logger(logger_name or self.__class__.__name__)

    @property
    def enabled(self) -> bool:
        return self._enabled

    async def filter(self, listings: Sequence[Listing]) -> list[Listing]:
        """Return the listings to keep, in input order.

        Identity when the gate is disabled. Listings without images are kept
        without a classifier call. At most max_concurrency classifications
        run at once; the call returns after every one has completed.
        """
        if not self._enabled:
            self._logger.debug("classification_gate_disabled_passthrough", listings_count=len(listings))
            return list(listings)
        if not listings:
            return []

        self._logger.info(
            "classification_gate_started",
            listings_count=len(listings),
            classifier_model=self._model,
        )
        semaphore = asyncio.Semaphore(self._max_concurrency)

        async def _bounded(listing: Listing) -> Decision:
            if not listing.image_urls:
                return KEEP_NO_IMAGE
            async with semaphore:
                return await self.decide(listing)

        decisions = await asyncio.gather(*(_bounded(listing) for listing in listings))

        kept: list[Listing] = []
        for index, (listing, decision) in enumerate(zip(listings, decisions)):
            self._logger.info(
                "classification_decision",
                listing_index=index,
                listing_id=listing.id,
                listing_title=listing.title,
                classification_keep=decision.keep,
                classification_label=decision.label,
                classification_score=round(decision.score, 4),
            )
            if decision.keep:
                kept.append(listing)

        self._logger.info(
            "classification_gate_completed",
            listings_count=len(listings),
            kept_count=len(kept),
        )
        return kept

    async def decide(self, listing: Listing) -> Decision:
        """Classify the listing's first image; keep on any failure."""
        if not listing.image_urls or self._classifier is None:
            return KEEP_NO_IMAGE
        image_url = listing.image_urls[0]
        try:
            result = await self._classify_with_loading_retry(image_url)
        except ClassifierError as exc:
            self._logger.warning(
                "classification_failed_open",
                listing_id=listing.id,
                error_type=type(exc).__name__,
                error_message=str(exc),
            )
            return Decision(keep=True, label=_fallback_label(exc))
        except Exception as exc:
            self._logger.exception(
                "classification_unexpected_error",
                listing_id=listing.id,
                error_type=type(exc).__name__,
            )
            return Decision(keep=True, label="error")
        return self.judge(result)

    def judge(self, result: ClassificationResult) -> Decision:
        """Reject only when the top label is a reject label scored above the threshold."""
        top = result.top
        if top is None:
            return Decision(keep=True, label="empty_result")
        label, score = top
        if label in self._reject_labels and score > self._threshold:
            return Decision(keep=False, label=label, score=score)
        return Decision(keep=True, label=label, score=score)

    async def _classify_with_loading_retry(self, image_url: str) -> ClassificationResult:
        """Call the classifier; on model-loading wait once and retry exactly once."""
        try:
            return await self._classifier.classify(image_url, self._labels)  # type: ignore[union-attr]
        except ModelLoadingError:
            self._logger.info(
                "classification_model_loading_retry",
                retry_after_seconds=self._loading_retry_seconds,
            )
            await asyncio.sleep(self._loading_retry_seconds)
        return await self._classifier.classify(image_url, self._labels)  # type: ignore[union-attr]
