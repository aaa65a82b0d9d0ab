"""Mercari Japan API client: DPoP signing, search and response parsing."""

from mercari_deal_hunter.clients.mercari.dpop import DPoPSigner
from mercari_deal_hunter.clients.mercari.parsing import parse_item, to_int
from mercari_deal_hunter.clients.mercari.search_client import MercariSearchClient

__all__ = ["DPoPSigner", "MercariSearchClient", "parse_item", "to_int"]
