import asyncio
import io
from unittest.mock import MagicMock, patch

import pytest
from rich.console import Console

from polywiki.cli.browser import BrowserSession
from polywiki.cli.display import EntryView, render_body
from polywiki.cli.favorites import is_favorite, toggle_favorite
from polywiki.cli.main import parse_args
from polywiki.session import SessionController
from polywiki.session.history import HistoryEntry

DOCUMENT = "## General\nEntropy measures disorder.\n## History\nClausius named it.\n## Related\n- Thermodynamics\n- Information"


@pytest.fixture(autouse=True)
def favorites_db(tmp_path):
    from polywiki.storage import _repo

    original = _repo.db_path
    _repo.db_path = tmp_path / "favorites.db"
    yield _repo.db_path
    _repo.db_path = original


def _stream_factory(entry):
    async def chunks():
        await asyncio.sleep(0)
        yield f"## General\nAbout {entry.label} in some detail."

    return chunks()


async def _no_input():
    await asyncio.Event().wait()


def _session(factory=_stream_factory, read_line=_no_input):
    output = io.StringIO()
    console = Console(file=output, width=100, force_terminal=False)
    controller = SessionController(factory, random_picker=lambda: "Void")
    session = BrowserSession(
        MagicMock(), console=console, controller=controller, read_line=read_line
    )
    return session, output


def test_parse_args_defaults():
    args = parse_args([])
    assert args.query == []
    assert args.model is None
    assert not args.random


def test_parse_args_options():
    args = parse_args(["heat", "death", "-m", "grok", "--random", "-v"])
    assert args.query == ["heat", "death"]
    assert args.model == "grok"
    assert args.random
    assert args.verbose


def test_parse_args_rejects_unknown_model():
    with pytest.raises(SystemExit):
        parse_args(["-m", "gpt-5"])


def test_render_body_keeps_whitespace():
    text = render_body("Heat  flows,\nalways.")
    assert text.plain == "Heat  flows,\nalways."


def test_handle_line_submits_and_follows_words():
    async def scenario():
        session, output = _session()
        await session.handle_line("Entropy")
        await session.handle_line("/word Detail")
        await session.handle_line("/back")
        return session, output

    session, output = asyncio.run(scenario())
    controller = session.controller
    assert [entry.label for entry in controller.entries] == ["Entropy", "Detail"]
    assert controller.cursor == 0
    assert "About Entropy in some detail." in output.getvalue()


def test_tabs_and_related_commands():
    async def scenario():
        session, output = _session()
        session.controller.open_favorite("Entropy", DOCUMENT)
        await session.handle_line("/tab history")
        selected = session.view.active_tab
        await session.handle_line("/related 2")
        return session, output, selected

    session, output, selected = asyncio.run(scenario())
    assert selected == "History"
    assert "Clausius named it." in output.getvalue()
    assert session.controller.active.label == "Information"


def test_unknown_command_and_random():
    async def scenario():
        session, output = _session()
        await session.handle_line("/teleport")
        await session.handle_line("/random")
        return session, output

    session, output = asyncio.run(scenario())
    assert "Unknown command /teleport" in output.getvalue()
    assert session.controller.active.label == "Void"


def test_history_and_jump():
    async def scenario():
        session, output = _session()
        for query in ("A", "B", "C"):
            await session.handle_line(query)
        await session.handle_line("/jump 1")
        await session.handle_line("/history")
        await session.handle_line("/jump 9")
        return session, output

    session, output = asyncio.run(scenario())
    assert session.controller.cursor == 0
    assert "Session History (3)" in output.getvalue()
    assert "No history entry '9'" in output.getvalue()


def test_reset_requires_confirmation():
    async def scenario():
        session, _ = _session()
        await session.handle_line("Chaos")
        with patch("polywiki.cli.browser.Confirm.ask", return_value=False):
            await session.handle_line("/reset")
        kept = len(session.controller.entries)
        with patch("polywiki.cli.browser.Confirm.ask", return_value=True):
            await session.handle_line("/reset")
        return kept, session

    kept, session = asyncio.run(scenario())
    assert kept == 1
    assert session.controller.entries == []


def test_fav_toggle_and_open():
    async def scenario():
        session, output = _session()
        await session.handle_line("Recursion")
        await session.handle_line("/fav")
        saved = session.view.is_favorite
        await session.handle_line("Other")
        await session.handle_line("/favs")
        await session.handle_line("/open 1")
        return session, output, saved

    session, output, saved = asyncio.run(scenario())
    assert saved
    assert "Favorites (1)" in output.getvalue()
    active = session.controller.active
    assert active.label == "Recursion"
    assert active.content == "## General\nAbout Recursion in some detail."


def test_toggle_favorite_round_trip():
    entry = HistoryEntry("Paradox", content="## General\nP")
    assert not is_favorite(entry)
    assert toggle_favorite(entry)
    assert is_favorite(entry)
    assert not toggle_favorite(entry)
    assert not is_favorite(entry)


def test_entry_view_shows_error_panel():
    async def scenario():
        controller = SessionController(lambda entry: iter(["Error: quota exceeded"]))
        controller.submit("Chaos")
        await controller.wait_all()
        return controller

    controller = asyncio.run(scenario())
    console = Console(file=io.StringIO(), width=80)
    console.print(EntryView(controller))
    rendered = console.file.getvalue()
    assert "SYSTEM ERROR" in rendered
    assert "quota exceeded" in rendered


def test_entry_view_welcome_when_empty():
    console = Console(file=io.StringIO(), width=80)
    console.print(EntryView(SessionController(_stream_factory)))
    assert "/random" in console.file.getvalue()


def test_random_ai_asks_the_router():
    from polywiki.core.exceptions import StreamError

    async def scenario():
        session, output = _session()
        session.router.random_word.return_value = "Lexicon"
        await session.handle_line("/random ai")
        session.router.random_word.side_effect = StreamError("Gemini Error: quota")
        await session.handle_line("/random ai")
        return session, output

    session, output = asyncio.run(scenario())
    assert [entry.label for entry in session.controller.entries] == ["Lexicon"]
    assert "Could not pick a random word" in output.getvalue()


def test_user_can_navigate_while_an_entry_streams():
    async def scenario():
        gate = asyncio.Queue()
        lines = asyncio.Queue()

        async def gated(entry):
            while True:
                chunk = await gate.get()
                if chunk is None:
                    return
                yield chunk

        def factory(entry):
            if entry.label == "Slow":
                return gated(entry)
            return _stream_factory(entry)

        session, output = _session(factory=factory, read_line=lines.get)
        for line in ("Entropy", "Slow", "/back", "/quit"):
            lines.put_nowait(line)
        await session.run()

        slow = session.controller.entries[1]
        still_loading = session.controller.is_loading(slow)
        gate.put_nowait("## General\nArrived after navigating away.")
        gate.put_nowait(None)
        await session.controller.wait_all()
        return session, output, slow, still_loading

    session, output, slow, still_loading = asyncio.run(scenario())
    assert still_loading
    assert session.controller.cursor == 0
    assert [entry.label for entry in session.controller.entries] == ["Entropy", "Slow"]
    assert slow.content == "## General\nArrived after navigating away."
    assert "Slow keeps loading in the background." in output.getvalue()


def test_end_of_input_stops_the_loop():
    async def closed():
        raise EOFError

    async def scenario():
        session, _ = _session(read_line=closed)
        await session.run()
        return session

    assert asyncio.run(scenario()).controller.entries == []


def test_missing_key_shows_settings_hint():
    from polywiki.core.exceptions import ProviderConfigError

    def factory(entry):
        raise ProviderConfigError("Gemini API Key is missing. Please add it in the Settings.")

    async def scenario():
        session, output = _session(factory=factory)
        await session.handle_line("Entropy")
        return output

    output = asyncio.run(scenario())
    assert "Run /settings" in output.getvalue()


def test_favorites_errors_are_reported(favorites_db, tmp_path):
    from polywiki.storage import _repo

    _repo.db_path = tmp_path

    async def scenario():
        session, output = _session()
        await session.handle_line("/favs")
        await session.handle_line("/open 1")
        return output

    output = asyncio.run(scenario())
    assert "Error loading favorites" in output.getvalue()
