"""Exceptions subpackage."""

from mercari_deal_hunter.exceptions.exceptions import (
    ClassifierError,
    ClassifierParseError,
    ClassifierStatusError,
    ClassifierTransportError,
    DealHunterError,
    DedupStoreError,
    MercariAPIError,
    MissingRequiredConfigError,
    ModelLoadingError,
    SearchRetriesExhaustedError,
    SigningError,
)

__all__ = [
    "ClassifierError",
    "ClassifierParseError",
    "ClassifierStatusError",
    "ClassifierTransportError",
    "DealHunterError",
    "DedupStoreError",
    "MercariAPIError",
    "MissingRequiredConfigError",
    "ModelLoadingError",
    "SearchRetriesExhaustedError",
    "SigningError",
]
