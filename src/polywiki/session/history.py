"""History entries and the branching, cursor-addressed history stack."""

from __future__ import annotations

import base64
import mimetypes
import time
from dataclasses import dataclass, field
from enum import Enum
from itertools import count
from pathlib import Path
from typing import Iterator, List, Optional

DEFAULT_IMAGE_MIME = "image/jpeg"
_ID_SEQUENCE = count()


class EntryKind(str, Enum):
    TEXT = "text"
    IMAGE = "image"

    @classmethod
    def parse(cls, value: Optional[str]) -> "EntryKind":
        return cls.IMAGE if str(value or "").lower() == cls.IMAGE.value else cls.TEXT


class EntryStatus(str, Enum):
    PENDING = "pending"
    STREAMING = "streaming"
    COMPLETE = "complete"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (EntryStatus.COMPLETE, EntryStatus.FAILED)


@dataclass
class ImageAttachment:
    """An uploaded image; bytes are read once at upload and dropped on release."""

    path: Path
    mime_type: str = DEFAULT_IMAGE_MIME
    data: Optional[bytes] = field(default=None, repr=False)

    @classmethod
    def from_path(cls, path: Path | str) -> "ImageAttachment":
        resolved = Path(path).expanduser()
        mime_type, _ = mimetypes.guess_type(resolved.name)
        return cls(
            path=resolved,
            mime_type=mime_type or DEFAULT_IMAGE_MIME,
            data=resolved.read_bytes(),
        )

    @property
    def released(self) -> bool:
        return self.data is None

    def read_base64(self) -> str:
        if self.data is None:
            raise ValueError(f"Image {self.path} has been released")
        return base64.b64encode(self.data).decode("ascii")

    def release(self) -> None:
        self.data = None


def new_entry_id() -> str:
    """Millisecond timestamp with a process-local tiebreaker."""
    return f"{int(time.time() * 1000)}-{next(_ID_SEQUENCE)}"


@dataclass
class HistoryEntry:
    """One query/result pair in the navigable history."""

    label: str
    kind: EntryKind = EntryKind.TEXT
    image: Optional[ImageAttachment] = None
    content: Optional[str] = None
    status: EntryStatus = EntryStatus.PENDING
    error: Optional[str] = None
    id: str = field(default_factory=new_entry_id)

    def matches(self, label: str) -> bool:
        return self.label.strip().lower() == label.strip().lower()

    @property
    def has_content(self) -> bool:
        return bool(self.content)


class HistoryStack:
    """Entries plus a cursor; pushing from the middle drops forward history."""

    def __init__(self) -> None:
        self._entries: List[HistoryEntry] = []
        self._cursor = -1

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[HistoryEntry]:
        return iter(list(self._entries))

    def __getitem__(self, index: int) -> HistoryEntry:
        return self._entries[index]

    @property
    def cursor(self) -> int:
        return self._cursor

    @property
    def active(self) -> Optional[HistoryEntry]:
        if self._cursor < 0:
            return None
        return self._entries[self._cursor]

    @property
    def can_go_back(self) -> bool:
        return self._cursor > 0

    @property
    def can_go_forward(self) -> bool:
        return self._cursor < len(self._entries) - 1

    def contains_at(self, entry: HistoryEntry, index: int) -> bool:
        return 0 <= index < len(self._entries) and self._entries[index] is entry

    def push(self, entry: HistoryEntry) -> int:
        """Discard entries after the cursor, append, and move onto the new entry."""
        del self._entries[self._cursor + 1 :]
        self._entries.append(entry)
        self._cursor = len(self._entries) - 1
        return self._cursor

    def move_to(self, index: int) -> bool:
        if not 0 <= index < len(self._entries):
            return False
        self._cursor = index
        return True

    def back(self) -> bool:
        return self.can_go_back and self.move_to(self._cursor - 1)

    def forward(self) -> bool:
        return self.can_go_forward and self.move_to(self._cursor + 1)

    def clear(self) -> List[HistoryEntry]:
        removed = self._entries
        self._entries = []
        self._cursor = -1
        return removed
