"""Storage package for polywiki favorites."""

from typing import List, Optional, Tuple

from polywiki.storage.interface import Favorite, FavoritesRepository
from polywiki.storage.sqlite import SQLiteFavoritesRepository

# Default repository instance
_repo = SQLiteFavoritesRepository()


def init_db() -> None:
    """Initialize the default database."""
    _repo.init_db()


def list_favorites() -> List[Favorite]:
    return _repo.list_favorites()


def check_favorite(label: str) -> Tuple[bool, Optional[Favorite]]:
    return _repo.check_favorite(label)


def create_favorite(
    label: str, content: Optional[str] = None, type: str = "text"
) -> Favorite:
    return _repo.create_favorite(label, content, type)


def delete_favorite(favorite_id: str) -> bool:
    return _repo.delete_favorite(favorite_id)


__all__ = [
    "Favorite",
    "FavoritesRepository",
    "SQLiteFavoritesRepository",
    "check_favorite",
    "create_favorite",
    "delete_favorite",
    "init_db",
    "list_favorites",
]
