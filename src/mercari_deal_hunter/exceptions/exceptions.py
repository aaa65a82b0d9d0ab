"""Custom exceptions for the Mercari search, classification and dedup layers."""

from __future__ import annotations


class DealHunterError(Exception):
    """Base exception for deal hunter errors."""

    pass


class MissingRequiredConfigError(DealHunterError):
    """Raised when a required configuration value is missing."""

    pass


class SigningError(DealHunterError):
    """Raised when the DPoP keypair cannot be generated or a token cannot be signed."""

    pass


class MercariAPIError(DealHunterError):
    """Raised when a Mercari search request fails (transport, status or body)."""

    def __init__(
        self,
        message: str,
        *,
        url: str | None = None,
        status_code: int | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(message)
        self.url = url
        self.status_code = status_code
        self.cause = cause


class SearchRetriesExhaustedError(DealHunterError):
    """Raised when every search attempt for a keyword failed."""

    def __init__(self, keyword: str, attempts: int, last_error: Exception | None) -> None:
        super().__init__(f"all {attempts} attempts failed for '{keyword}': {last_error}")
        self.keyword = keyword
        self.attempts = attempts
        self.last_error = last_error


class ClassifierError(DealHunterError):
    """Base exception for image classifier failures."""

    pass


class ClassifierTransportError(ClassifierError):
    """Raised when the classification request could not be completed."""

    pass


class ClassifierStatusError(ClassifierError):
    """Raised when the classifier API answers with a non-success status."""

    def __init__(self, message: str, *, status_code: int, body: str = "") -> None:
        super().__init__(message)
        self.status_code = status_code
        self.body = body


class ModelLoadingError(ClassifierStatusError):
    """Raised when the classifier answers 503 because the model is still loading."""

    pass


class ClassifierParseError(ClassifierError):
    """Raised when the classifier response body cannot be interpreted."""

    pass


class DedupStoreError(DealHunterError):
    """Raised when the seen-listing store cannot be opened, read or written."""

    pass
