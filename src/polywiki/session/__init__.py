"""Session state: the branching history stack and its stream controller."""

from polywiki.session.controller import SessionController
from polywiki.session.history import (
    EntryKind,
    EntryStatus,
    HistoryEntry,
    HistoryStack,
    ImageAttachment,
)

__all__ = [
    "EntryKind",
    "EntryStatus",
    "HistoryEntry",
    "HistoryStack",
    "ImageAttachment",
    "SessionController",
]
