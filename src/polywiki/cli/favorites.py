"""Favorites-related CLI commands for polywiki."""

import datetime
from typing import List, Optional

from rich.console import Console
from rich.table import Table

from polywiki.session.history import HistoryEntry
from polywiki.storage import (
    Favorite,
    check_favorite,
    create_favorite,
    delete_favorite,
    list_favorites,
)

PREVIEW_CHARS = 50


def _preview(content: Optional[str]) -> str:
    text = " ".join((content or "").split())
    if len(text) > PREVIEW_CHARS:
        return text[: PREVIEW_CHARS - 3] + "..."
    return text or "-"


def favorites_table(favorites: List[Favorite]) -> Table:
    table = Table(title=f"Favorites ({len(favorites)})")
    table.add_column("#", style="cyan", justify="right")
    table.add_column("Label", style="green")
    table.add_column("Type", style="blue")
    table.add_column("Preview")
    table.add_column("Saved", style="dim")
    for position, favorite in enumerate(favorites, start=1):
        saved = datetime.datetime.fromtimestamp(favorite.created_at).strftime(
            "%Y-%m-%d %H:%M"
        )
        table.add_row(
            str(position),
            favorite.label,
            favorite.type,
            _preview(favorite.content),
            saved,
        )
    return table


def show_favorites_command(console: Optional[Console] = None) -> List[Favorite]:
    """Print saved favorites, newest first, and return them."""
    console = console or Console()
    favorites = list_favorites()
    if not favorites:
        console.print("No favorites saved.")
        return favorites
    console.print(favorites_table(favorites))
    return favorites


def is_favorite(entry: Optional[HistoryEntry]) -> bool:
    if entry is None:
        return False
    exists, _ = check_favorite(entry.label)
    return exists


def toggle_favorite(entry: HistoryEntry) -> bool:
    """Save or remove the entry as a favorite; returns the new favorite state."""
    exists, record = check_favorite(entry.label)
    if exists and record is not None:
        delete_favorite(record.id)
        return False
    create_favorite(entry.label, entry.content, entry.kind.value)
    return True
