"""HTTP clients: shared transport, Mercari search and HuggingFace classification."""

from mercari_deal_hunter.clients.http import AsyncHttpClient, HttpResponse
from mercari_deal_hunter.clients.huggingface import ClassificationResult, HuggingFaceClipClient
from mercari_deal_hunter.clients.mercari import DPoPSigner, MercariSearchClient

__all__ = [
    "AsyncHttpClient",
    "ClassificationResult",
    "DPoPSigner",
    "HttpResponse",
    "HuggingFaceClipClient",
    "MercariSearchClient",
]
