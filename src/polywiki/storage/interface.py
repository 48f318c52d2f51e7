"""Storage interfaces and data models for saved favorites."""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import List, Optional, Tuple


@dataclass
class Favorite:
    """A saved lookup with its cached explanation."""

    id: str
    label: str
    content: Optional[str]
    type: str  # 'text' or 'image'
    created_at: int  # unix seconds

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "label": self.label,
            "content": self.content,
            "type": self.type,
            "createdAt": self.created_at,
        }


class FavoritesRepository(ABC):
    """Abstract favorites store: list, check, create-if-absent, delete."""

    @abstractmethod
    def init_db(self) -> None:
        """Initialize the storage backend."""
        pass

    @abstractmethod
    def list_favorites(self) -> List[Favorite]:
        """Return all favorites, newest first."""
        pass

    @abstractmethod
    def check_favorite(self, label: str) -> Tuple[bool, Optional[Favorite]]:
        """Return whether a favorite with this exact label exists, and the record."""
        pass

    @abstractmethod
    def create_favorite(
        self, label: str, content: Optional[str] = None, type: str = "text"
    ) -> Favorite:
        """Save a favorite; returns the existing record when the label is taken."""
        pass

    @abstractmethod
    def delete_favorite(self, favorite_id: str) -> bool:
        """Delete by id; returns True when a row was removed."""
        pass
