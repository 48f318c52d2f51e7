"""Core building blocks shared across polywiki packages."""

from polywiki.core.exceptions import (
    FavoriteError,
    PolywikiError,
    ProviderConfigError,
    StreamError,
)

__all__ = ["FavoriteError", "PolywikiError", "ProviderConfigError", "StreamError"]
