"""Core exception types for polywiki."""

from __future__ import annotations

from typing import Optional

# Stream fragments starting with this marker end the stream as a failure.
ERROR_MARKER = "Error:"


class PolywikiError(Exception):
    """Base error for polywiki runtime failures."""


class ProviderConfigError(PolywikiError):
    """Raised when the selected provider has no usable credential."""

    def __init__(self, message: str, *, provider: Optional[str] = None) -> None:
        super().__init__(message)
        self.provider = provider


class StreamError(PolywikiError):
    """Raised when a provider stream fails for any reason other than config."""

    def __init__(
        self,
        message: str,
        *,
        provider: Optional[str] = None,
        status_code: Optional[int] = None,
    ) -> None:
        super().__init__(message)
        self.provider = provider
        self.status_code = status_code


class FavoriteError(PolywikiError):
    """Raised when the favorites store rejects or fails an operation."""
