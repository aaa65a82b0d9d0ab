"""Mercari deal hunter: DPoP-signed search, dedup and CLIP filtering with Telegram alerts."""

__version__ = "1.0.0"
