"""Session controller: history navigation plus per-entry background streams."""

from __future__ import annotations

import asyncio
import logging
import random
from pathlib import Path
from typing import (
    AsyncIterable,
    AsyncIterator,
    Callable,
    Dict,
    Iterable,
    List,
    Optional,
    Union,
)

from polywiki.config import RANDOM_CONCEPTS
from polywiki.content.sections import ParsedDocument, parse_document
from polywiki.core.exceptions import ERROR_MARKER, ProviderConfigError
from polywiki.core.threads import run_in_daemon_thread
from polywiki.session.history import (
    EntryKind,
    EntryStatus,
    HistoryEntry,
    HistoryStack,
    ImageAttachment,
)

logger = logging.getLogger(__name__)

IMAGE_ENTRY_LABEL = "Visual Analysis"
UNKNOWN_ERROR = "An unknown error occurred"

StreamChunks = Union[Iterable[str], AsyncIterable[str]]
StreamFactory = Callable[[HistoryEntry], StreamChunks]
ChangeListener = Callable[[int, HistoryEntry], None]

_END = object()


async def iterate_chunks(source: StreamChunks) -> AsyncIterator[str]:
    """Yield chunks from an async or blocking source without stalling the loop."""
    if hasattr(source, "__aiter__"):
        async for chunk in source:
            yield chunk
        return
    iterator = iter(source)
    while True:
        chunk = await run_in_daemon_thread(next, iterator, _END)
        if chunk is _END:
            return
        yield chunk


class SessionController:
    """Owns the history stack and streams each entry's content into it.

    Every entry streams in its own asyncio task. Tasks are never cancelled:
    navigating away leaves them running, and their writes land in their own
    entry only. After ``reset()`` (or when branching replaces an entry) a
    task's writes are discarded instead of resurrecting cleared state.

    Mutating methods must be called from inside a running event loop.
    """

    def __init__(
        self,
        stream_factory: StreamFactory,
        *,
        random_picker: Optional[Callable[[], str]] = None,
        listeners: Optional[List[ChangeListener]] = None,
    ) -> None:
        self.stream_factory = stream_factory
        self.history = HistoryStack()
        self.root_image: Optional[ImageAttachment] = None
        self.current_error: Optional[str] = None
        self.config_required = False
        self._random_picker = random_picker or (lambda: random.choice(RANDOM_CONCEPTS))
        self._listeners: List[ChangeListener] = list(listeners or [])
        self._tasks: Dict[str, asyncio.Task] = {}
        self._generation = 0

    # --- Queries ---

    @property
    def active(self) -> Optional[HistoryEntry]:
        return self.history.active

    @property
    def cursor(self) -> int:
        return self.history.cursor

    @property
    def entries(self) -> List[HistoryEntry]:
        return list(self.history)

    def is_loading(self, entry: Optional[HistoryEntry] = None) -> bool:
        entry = entry or self.active
        if entry is None:
            return False
        return entry.status is EntryStatus.STREAMING or self._has_live_task(entry)

    def document(self, entry: Optional[HistoryEntry] = None) -> ParsedDocument:
        """Structured view of an entry (the active one by default)."""
        entry = entry or self.active
        if entry is None:
            return ParsedDocument()
        return parse_document(entry.content or "", self.is_loading(entry))

    def subscribe(self, listener: ChangeListener) -> None:
        self._listeners.append(listener)

    def unsubscribe(self, listener: ChangeListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    # --- New entries ---

    def submit(
        self,
        query: str,
        content: Optional[str] = None,
        kind: EntryKind = EntryKind.TEXT,
    ) -> Optional[HistoryEntry]:
        """Search for ``query``; cached ``content`` skips the provider entirely."""
        label = query.strip()
        if not label:
            return None
        return self._add_entry(HistoryEntry(label=label, kind=kind, content=content))

    def click_word(self, word: str) -> Optional[HistoryEntry]:
        return self.submit(word)

    def pick_random(self) -> Optional[HistoryEntry]:
        return self.submit(self._random_picker())

    def open_favorite(
        self, label: str, content: Optional[str], kind: EntryKind = EntryKind.TEXT
    ) -> Optional[HistoryEntry]:
        return self.submit(label, content=content or None, kind=kind)

    def upload_image(self, path: Union[str, Path]) -> Optional[HistoryEntry]:
        """Analyse an image; it becomes the session's root image."""
        if self._is_active_label(IMAGE_ENTRY_LABEL):
            logger.debug("Ignoring image upload: analysis is already the active entry")
            return None
        image = ImageAttachment.from_path(path)
        entry = self._add_entry(
            HistoryEntry(label=IMAGE_ENTRY_LABEL, kind=EntryKind.IMAGE, image=image)
        )
        self.root_image = image
        return entry

    def _is_active_label(self, label: str) -> bool:
        active = self.active
        return active is not None and active.matches(label)

    def _add_entry(self, entry: HistoryEntry) -> Optional[HistoryEntry]:
        if self._is_active_label(entry.label):
            logger.debug(f"Ignoring lookup of active topic {entry.label!r}")
            return None
        loop = asyncio.get_running_loop()
        index = self.history.push(entry)
        self.current_error = None
        self.config_required = False
        logger.info(f"Added entry index={index} label={entry.label!r} kind={entry.kind.value}")
        self._ensure_stream(loop, index)
        return entry

    # --- Navigation ---

    def back(self) -> bool:
        return self._navigate(self.history.cursor - 1)

    def forward(self) -> bool:
        return self._navigate(self.history.cursor + 1)

    def jump_to(self, index: int) -> bool:
        return self._navigate(index)

    def _navigate(self, index: int) -> bool:
        loop = asyncio.get_running_loop()
        if not self.history.move_to(index):
            return False
        self.current_error = None
        self.config_required = False
        self._ensure_stream(loop, index)
        return True

    def reset(self) -> None:
        """Drop the whole session; running streams become orphans."""
        self._generation += 1
        removed = self.history.clear()
        for entry in removed:
            if entry.image is not None:
                entry.image.release()
        if self.root_image is not None:
            self.root_image.release()
            self.root_image = None
        self.current_error = None
        self.config_required = False
        logger.info(f"Session reset, discarded {len(removed)} entries")

    # --- Streaming ---

    def _has_live_task(self, entry: HistoryEntry) -> bool:
        task = self._tasks.get(entry.id)
        return task is not None and not task.done()

    def _ensure_stream(self, loop: asyncio.AbstractEventLoop, index: int) -> None:
        entry = self.history[index]
        if entry.has_content:
            if not entry.status.is_terminal and not self._has_live_task(entry):
                entry.status = EntryStatus.COMPLETE
            return
        if self._has_live_task(entry):
            return
        task = loop.create_task(
            self._run_stream(entry, index, self._generation),
            name=f"polywiki-stream-{entry.id}",
        )
        self._tasks[entry.id] = task
        task.add_done_callback(lambda _t, key=entry.id: self._tasks.pop(key, None))

    def _is_current(self, entry: HistoryEntry, index: int, generation: int) -> bool:
        return generation == self._generation and self.history.contains_at(entry, index)

    def _write(
        self,
        entry: HistoryEntry,
        index: int,
        generation: int,
        content: str,
        status: EntryStatus,
        error: Optional[str] = None,
    ) -> bool:
        if not self._is_current(entry, index, generation):
            logger.debug(f"Discarding orphaned write for entry {entry.id}")
            return False
        entry.content = content
        entry.status = status
        entry.error = error
        self._notify(index, entry)
        return True

    def _fail(
        self,
        entry: HistoryEntry,
        index: int,
        generation: int,
        message: str,
        config_error: bool = False,
    ) -> None:
        logger.warning(f"Stream failed for entry index={index} label={entry.label!r}: {message}")
        written = self._write(
            entry,
            index,
            generation,
            f"{ERROR_MARKER} {message}",
            EntryStatus.FAILED,
            error=message,
        )
        if written and index == self.history.cursor:
            self.current_error = message
            self.config_required = config_error

    async def _run_stream(self, entry: HistoryEntry, index: int, generation: int) -> None:
        accumulated = ""
        if self._is_current(entry, index, generation):
            entry.status = EntryStatus.STREAMING
            entry.error = None
        logger.info(f"Streaming entry index={index} label={entry.label!r}")
        try:
            async for chunk in iterate_chunks(self.stream_factory(entry)):
                if chunk.startswith(ERROR_MARKER):
                    message = chunk[len(ERROR_MARKER) :].strip() or UNKNOWN_ERROR
                    self._fail(entry, index, generation, message)
                    return
                accumulated += chunk
                logger.debug(f"Entry {entry.id} received {len(chunk)} chars")
                self._write(entry, index, generation, accumulated, EntryStatus.STREAMING)
        except ProviderConfigError as e:
            self._fail(entry, index, generation, str(e), config_error=True)
            return
        except Exception as e:
            # Task boundary: failures become entry state, never loop errors.
            logger.exception(f"Unexpected stream failure for entry {entry.id}")
            self._fail(entry, index, generation, str(e) or UNKNOWN_ERROR)
            return
        self._write(entry, index, generation, accumulated, EntryStatus.COMPLETE)
        logger.info(f"Completed entry index={index} chars={len(accumulated)}")

    def _notify(self, index: int, entry: HistoryEntry) -> None:
        for listener in list(self._listeners):
            try:
                listener(index, entry)
            except Exception:
                logger.debug("Change listener failed for entry %s", entry.id)

    async def wait(self, entry: Optional[HistoryEntry] = None) -> None:
        """Wait until ``entry`` (default: the active one) stops streaming."""
        entry = entry or self.active
        if entry is None:
            return
        task = self._tasks.get(entry.id)
        if task is not None and not task.done():
            await asyncio.wait({task})

    async def wait_all(self) -> None:
        """Wait for every running stream, including orphaned ones."""
        while True:
            pending = {task for task in self._tasks.values() if not task.done()}
            if not pending:
                return
            await asyncio.wait(pending)
