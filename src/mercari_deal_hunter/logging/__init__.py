"""Logging subpackage."""

from mercari_deal_hunter.logging.config import configure_logging

__all__ = ["configure_logging"]
