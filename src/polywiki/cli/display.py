"""Rich rendering of the active entry: tabs, clickable words, related topics."""

from typing import List, Optional

from rich.console import Group, RenderableType
from rich.panel import Panel
from rich.spinner import Spinner
from rich.table import Table
from rich.text import Text

from polywiki.config import APP_TITLE, MIN_RENDER_CHARS
from polywiki.content.sections import ParsedDocument, Section
from polywiki.content.tokens import tokenize
from polywiki.session.controller import SessionController
from polywiki.session.history import EntryStatus, HistoryEntry

STREAMING_CURSOR = "▌"
WORD_STYLE = "underline"
ACTIVE_TAB_STYLE = "bold reverse"
TAB_STYLE = "dim"
STATUS_STYLES = {
    EntryStatus.PENDING: "yellow",
    EntryStatus.STREAMING: "yellow",
    EntryStatus.COMPLETE: "green",
    EntryStatus.FAILED: "red",
}


def render_body(body: str, streaming: bool = False) -> Text:
    """Section body with clickable words underlined, whitespace untouched."""
    text = Text()
    for fragment in tokenize(body):
        text.append(fragment.text, style=WORD_STYLE if fragment.clickable else None)
    if streaming:
        text.append(STREAMING_CURSOR, style="blink")
    return text


def render_tabs(document: ParsedDocument, active: Optional[Section]) -> Text:
    tabs = Text()
    for position, section in enumerate(document.sections, start=1):
        if position > 1:
            tabs.append("  ")
        style = ACTIVE_TAB_STYLE if section is active else TAB_STYLE
        tabs.append(f"[{position}] {section.title.upper()}", style=style)
    return tabs


def render_related(related: List[str]) -> Text:
    text = Text("RELATED\n", style="bold")
    for position, topic in enumerate(related, start=1):
        text.append(f"  {position}. ")
        text.append(topic, style=WORD_STYLE)
        text.append("\n")
    return text


def render_error(message: str) -> Panel:
    return Panel(Text(message), title="SYSTEM ERROR", border_style="red")


def render_history_bar(controller: SessionController) -> Text:
    bar = Text()
    for position, entry in enumerate(controller.entries, start=1):
        if position > 1:
            bar.append(" > ", style="dim")
        style = "bold" if position - 1 == controller.cursor else "dim"
        bar.append(entry.label, style=style)
    return bar


def render_history_table(controller: SessionController) -> Table:
    table = Table(title=f"Session History ({len(controller.entries)})")
    table.add_column("#", style="cyan", justify="right")
    table.add_column("Label", style="green")
    table.add_column("Kind", style="blue")
    table.add_column("Status")
    table.add_column("Chars", justify="right", style="dim")
    for position, entry in enumerate(controller.entries, start=1):
        marker = "*" if position - 1 == controller.cursor else ""
        table.add_row(
            f"{marker}{position}",
            entry.label,
            entry.kind.value,
            Text(entry.status.value, style=STATUS_STYLES[entry.status]),
            str(len(entry.content or "")),
        )
    return table


class EntryView:
    """Renders the controller's active entry; usable directly inside rich.Live."""

    def __init__(self, controller: SessionController):
        self.controller = controller
        self.active_tab: Optional[str] = None
        self.is_favorite = False

    def select_tab(self, choice: str) -> Optional[Section]:
        """Select a tab by 1-based position or case-insensitive title."""
        document = self.controller.document()
        section: Optional[Section] = None
        if choice.isdigit():
            position = int(choice)
            if 1 <= position <= len(document.sections):
                section = document.sections[position - 1]
        else:
            section = document.find(choice)
        if section is not None:
            self.active_tab = section.title
        return section

    def current_section(self) -> Optional[Section]:
        return self.controller.document().resolve_tab(self.active_tab)

    def _render_entry(self, entry: HistoryEntry) -> RenderableType:
        controller = self.controller
        loading = controller.is_loading(entry)
        heading = Text(entry.label.upper(), style="bold underline")
        if self.is_favorite:
            heading.append("  ★", style="yellow")
        parts: List[RenderableType] = [render_history_bar(controller), heading]
        if controller.root_image is not None:
            parts.append(Text(f"Image: {controller.root_image.path}", style="dim"))

        content = entry.content or ""
        if controller.current_error:
            parts.append(render_error(controller.current_error))
            return Group(*parts)
        if loading and len(content) < MIN_RENDER_CHARS:
            parts.append(Spinner("dots", text="Thinking..."))
            return Group(*parts)
        if not content:
            return Group(*parts)

        document = controller.document(entry)
        section = document.resolve_tab(self.active_tab)
        parts.append(render_tabs(document, section))
        if section is not None:
            streaming = document.is_streaming_section(section, loading)
            parts.append(render_body(section.body, streaming=streaming))
        if document.related:
            parts.append(render_related(list(document.related)))
        return Group(*parts)

    def __rich__(self) -> RenderableType:
        entry = self.controller.active
        if entry is None:
            return Panel(
                Text(
                    "Search a term, /image PATH to analyse an image, "
                    "or /random to begin. /help lists commands.",
                    justify="center",
                ),
                title=APP_TITLE.upper(),
            )
        return self._render_entry(entry)
