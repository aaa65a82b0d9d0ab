"""HuggingFace Inference API client."""

from mercari_deal_hunter.clients.huggingface.clip_client import (
    ClassificationResult,
    HuggingFaceClipClient,
    parse_zero_shot_response,
)

__all__ = ["ClassificationResult", "HuggingFaceClipClient", "parse_zero_shot_response"]
