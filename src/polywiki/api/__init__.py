"""Public programmatic API surface for polywiki."""

from polywiki.core.exceptions import (
    FavoriteError,
    PolywikiError,
    ProviderConfigError,
    StreamError,
)
from polywiki.content import (
    Fragment,
    ParsedDocument,
    Section,
    parse_document,
    segment,
    stabilize,
    tokenize,
)
from polywiki.session import (
    EntryKind,
    EntryStatus,
    HistoryEntry,
    HistoryStack,
    SessionController,
)

__all__ = [
    "EntryKind",
    "EntryStatus",
    "FavoriteError",
    "Fragment",
    "HistoryEntry",
    "HistoryStack",
    "ParsedDocument",
    "PolywikiError",
    "ProviderConfigError",
    "Section",
    "SessionController",
    "StreamError",
    "parse_document",
    "segment",
    "stabilize",
    "tokenize",
]
