"""Dependency injection."""

from mercari_deal_hunter.DI.container import Container

__all__ = ["Container"]
