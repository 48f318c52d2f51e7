"""Interactive terminal session: slash commands over a SessionController."""

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, Dict, List, Optional

from rich.console import Console
from rich.live import Live
from rich.prompt import Confirm

from polywiki.cli.display import EntryView, render_history_table
from polywiki.cli.favorites import favorites_table, is_favorite, toggle_favorite
from polywiki.cli.settings_editor import edit_settings_command
from polywiki.core.exceptions import FavoriteError, PolywikiError
from polywiki.core.threads import run_in_daemon_thread
from polywiki.providers.router import ProviderRouter
from polywiki.session.controller import SessionController
from polywiki.session.history import EntryKind, HistoryEntry
from polywiki.storage import Favorite, list_favorites

logger = logging.getLogger(__name__)

PROMPT = "[bold cyan]polywiki>[/bold cyan] "
HELP_TEXT = """\
[bold]Commands[/bold]
  <text>            look up a term
  /word WORD        follow a word from the current explanation
  /related N        follow related topic N
  /tab NAME|N       switch section tab
  /back, /forward   move through history
  /jump N           jump to history entry N
  /history          list this session's entries
  /random [ai]      look up a random concept (ai: ask the model for a word)
  /image PATH       analyse an image
  /fav              save or remove the current entry as a favorite
  /favs             list favorites
  /open N           open favorite N without a new request
  /settings         edit API keys and model
  /reset            wipe the session
  /quit             exit"""

CommandHandler = Callable[[str], Awaitable[None]]
LineReader = Callable[[], Awaitable[str]]


class BrowserSession:
    """Reads commands, mutates the controller, and live-renders the active entry."""

    def __init__(
        self,
        router: ProviderRouter,
        console: Optional[Console] = None,
        controller: Optional[SessionController] = None,
        read_line: Optional[LineReader] = None,
    ):
        self.router = router
        self.console = console or Console()
        self.controller = controller or SessionController(router.open_stream)
        self.view = EntryView(self.controller)
        self._read_line = read_line or self._read_console_line
        self._reader: Optional[asyncio.Task] = None
        self._favorites: List[Favorite] = []
        self._running = True
        self._commands: Dict[str, CommandHandler] = {
            "word": self._cmd_word,
            "related": self._cmd_related,
            "tab": self._cmd_tab,
            "back": self._cmd_back,
            "forward": self._cmd_forward,
            "jump": self._cmd_jump,
            "history": self._cmd_history,
            "random": self._cmd_random,
            "image": self._cmd_image,
            "fav": self._cmd_fav,
            "favs": self._cmd_favs,
            "open": self._cmd_open,
            "settings": self._cmd_settings,
            "reset": self._cmd_reset,
            "help": self._cmd_help,
            "quit": self._cmd_quit,
            "exit": self._cmd_quit,
        }

    # --- Loop ---

    async def run(
        self,
        query: Optional[str] = None,
        image: Optional[str] = None,
        random_pick: bool = False,
    ) -> None:
        if image:
            await self._cmd_image(image)
        elif random_pick:
            await self._cmd_random("")
        elif query:
            await self._show(self.controller.submit(query))
        else:
            self.console.print(self.view)

        while self._running:
            try:
                line = await self.next_line()
            except (EOFError, KeyboardInterrupt):
                break
            await self.handle_line(line)

    async def _read_console_line(self) -> str:
        return await run_in_daemon_thread(self.console.input, PROMPT)

    def _pending_input(self) -> asyncio.Task:
        """The single outstanding read of the next input line."""
        if self._reader is None:
            self._reader = asyncio.get_running_loop().create_task(self._read_line())
        return self._reader

    async def next_line(self) -> str:
        reader = self._pending_input()
        try:
            return await reader
        finally:
            self._reader = None

    async def handle_line(self, line: str) -> None:
        text = line.strip()
        if not text:
            return
        if not text.startswith("/"):
            await self._show(self.controller.submit(text))
            return
        name, _, argument = text[1:].partition(" ")
        handler = self._commands.get(name.lower())
        if handler is None:
            self.console.print(f"[yellow]Unknown command /{name}. Try /help.[/yellow]")
            return
        await handler(argument.strip())

    def _refresh_favorite(self) -> None:
        try:
            self.view.is_favorite = is_favorite(self.controller.active)
        except FavoriteError as e:
            logger.warning(f"Favorite status check failed: {e}")
            self.view.is_favorite = False

    async def _show(self, entry: Optional[HistoryEntry] = None) -> None:
        """Render the active entry, following it live while it streams.

        Typing a new line while the entry streams leaves the live view; the
        stream keeps running in the background and the line is handled next.
        """
        if entry is not None:
            self.view.active_tab = None
        self._refresh_favorite()
        active = self.controller.active
        if active is None or not self.controller.is_loading(active):
            self.console.print(self.view)
            self._hint_settings()
            return

        reader = self._pending_input()
        waiter = asyncio.ensure_future(self.controller.wait(active))
        with Live(
            self.view,
            console=self.console,
            auto_refresh=False,
            vertical_overflow="visible",
        ) as live:

            def _on_change(index: int, _entry: HistoryEntry) -> None:
                if index == self.controller.cursor:
                    live.refresh()

            self.controller.subscribe(_on_change)
            try:
                await asyncio.wait({waiter, reader}, return_when=asyncio.FIRST_COMPLETED)
            finally:
                self.controller.unsubscribe(_on_change)
                if not waiter.done():
                    # Only the wait is cancelled; the entry keeps streaming.
                    waiter.cancel()
            live.refresh()
        if self.controller.is_loading(active):
            self.console.print(f"[dim]{active.label} keeps loading in the background.[/dim]")
            return
        self._hint_settings()

    def _hint_settings(self) -> None:
        if self.controller.config_required:
            self.console.print("[yellow]Run /settings to add the missing API key.[/yellow]")

    # --- Commands ---

    async def _cmd_word(self, argument: str) -> None:
        if not argument:
            self.console.print("Usage: /word WORD")
            return
        await self._show(self.controller.click_word(argument))

    async def _cmd_related(self, argument: str) -> None:
        related = self.controller.document().related
        if not argument.isdigit() or not 1 <= int(argument) <= len(related):
            self.console.print(f"Pick a related topic between 1 and {len(related)}.")
            return
        await self._show(self.controller.click_word(related[int(argument) - 1]))

    async def _cmd_tab(self, argument: str) -> None:
        if self.view.select_tab(argument) is None:
            self.console.print(f"[yellow]No tab named {argument!r}.[/yellow]")
            return
        await self._show()

    async def _cmd_back(self, _argument: str) -> None:
        if self.controller.back():
            await self._show(self.controller.active)

    async def _cmd_forward(self, _argument: str) -> None:
        if self.controller.forward():
            await self._show(self.controller.active)

    async def _cmd_jump(self, argument: str) -> None:
        if not argument.isdigit() or not self.controller.jump_to(int(argument) - 1):
            self.console.print(f"No history entry {argument!r}.")
            return
        await self._show(self.controller.active)

    async def _cmd_history(self, _argument: str) -> None:
        self.console.print(render_history_table(self.controller))

    async def _cmd_random(self, argument: str) -> None:
        if argument.lower() != "ai":
            await self._show(self.controller.pick_random())
            return
        try:
            word = await asyncio.to_thread(self.router.random_word)
        except PolywikiError as e:
            self.console.print(f"[red]Could not pick a random word: {e}[/red]")
            return
        await self._show(self.controller.submit(word))

    async def _cmd_image(self, argument: str) -> None:
        if not argument:
            self.console.print("Usage: /image PATH")
            return
        try:
            entry = self.controller.upload_image(argument)
        except OSError as e:
            self.console.print(f"[red]Could not read image: {e}[/red]")
            return
        await self._show(entry)

    async def _cmd_fav(self, _argument: str) -> None:
        entry = self.controller.active
        if entry is None:
            return
        try:
            saved = toggle_favorite(entry)
        except FavoriteError as e:
            self.console.print(f"[red]Error saving favorite: {e}[/red]")
            return
        self.view.is_favorite = saved
        state = "Saved" if saved else "Removed"
        self.console.print(f"{state} favorite {entry.label!r}.")

    def _load_favorites(self) -> bool:
        try:
            self._favorites = list_favorites()
        except FavoriteError as e:
            self.console.print(f"[red]Error loading favorites: {e}[/red]")
            return False
        return True

    async def _cmd_favs(self, _argument: str) -> None:
        if not self._load_favorites():
            return
        if not self._favorites:
            self.console.print("No favorites saved.")
            return
        self.console.print(favorites_table(self._favorites))

    async def _cmd_open(self, argument: str) -> None:
        if not self._favorites and not self._load_favorites():
            return
        if not argument.isdigit() or not 1 <= int(argument) <= len(self._favorites):
            self.console.print("Run /favs and pick a listed number.")
            return
        favorite = self._favorites[int(argument) - 1]
        entry = self.controller.open_favorite(
            favorite.label, favorite.content, EntryKind.parse(favorite.type)
        )
        await self._show(entry)

    async def _cmd_settings(self, _argument: str) -> None:
        settings = await asyncio.to_thread(edit_settings_command)
        self.router.update_settings(settings)
        self.controller.config_required = False

    async def _cmd_reset(self, _argument: str) -> None:
        confirmed = await asyncio.to_thread(
            Confirm.ask,
            "Reset session? This clears all history and the uploaded image.",
            default=False,
        )
        if confirmed:
            self.controller.reset()
            self.view.active_tab = None
            await self._show()

    async def _cmd_help(self, _argument: str) -> None:
        self.console.print(HELP_TEXT)

    async def _cmd_quit(self, _argument: str) -> None:
        self._running = False
