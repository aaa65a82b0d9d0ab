# -*- coding: utf-8 -*-
"""Utility modules."""

from mercari_deal_hunter.utils.text import clean_excerpt, mask_secret

__all__ = ["clean_excerpt", "mask_secret"]
