"""SQLite implementation of the favorites store."""

import logging
import os
import sqlite3
import time
import uuid
from pathlib import Path
from typing import List, Optional, Tuple

from polywiki.config import DB_PATH
from polywiki.core.exceptions import FavoriteError
from polywiki.storage.interface import Favorite, FavoritesRepository

logger = logging.getLogger(__name__)

VALID_TYPES = ("text", "image")


def _row_to_favorite(row: sqlite3.Row) -> Favorite:
    return Favorite(
        id=row["id"],
        label=row["label"],
        content=row["content"],
        type=row["type"],
        created_at=row["created_at"],
    )


class SQLiteFavoritesRepository(FavoritesRepository):
    """SQLite-backed favorites table."""

    def __init__(self, db_path: Optional[Path] = None):
        self.db_path = db_path or DB_PATH

    def _get_conn(self):
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = sqlite3.Row
        return conn

    def init_db(self) -> None:
        """Create the favorites table if it doesn't exist."""
        try:
            os.makedirs(Path(self.db_path).parent, exist_ok=True)
            conn = self._get_conn()
        except (OSError, sqlite3.Error) as e:
            logger.error(f"Cannot open favorites database {self.db_path}: {e}")
            raise FavoriteError(f"Cannot open favorites database: {e}") from e
        try:
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS favorites (
                    id TEXT PRIMARY KEY,
                    label TEXT NOT NULL,
                    content TEXT,
                    type TEXT NOT NULL DEFAULT 'text',
                    created_at INTEGER NOT NULL
                )
            """
            )
            conn.commit()
        except sqlite3.Error as e:
            raise FavoriteError(f"Failed to create favorites table: {e}") from e
        finally:
            conn.close()

    def list_favorites(self) -> List[Favorite]:
        self.init_db()
        conn = self._get_conn()
        try:
            rows = conn.execute(
                "SELECT * FROM favorites ORDER BY created_at DESC, rowid DESC"
            ).fetchall()
        except sqlite3.Error as e:
            raise FavoriteError(f"Failed to list favorites: {e}") from e
        finally:
            conn.close()
        return [_row_to_favorite(row) for row in rows]

    def _find_by_label(self, conn: sqlite3.Connection, label: str) -> Optional[Favorite]:
        row = conn.execute(
            "SELECT * FROM favorites WHERE label = ? LIMIT 1", (label,)
        ).fetchone()
        return _row_to_favorite(row) if row else None

    def check_favorite(self, label: str) -> Tuple[bool, Optional[Favorite]]:
        self.init_db()
        conn = self._get_conn()
        try:
            existing = self._find_by_label(conn, label)
        except sqlite3.Error as e:
            raise FavoriteError(f"Failed to check favorite: {e}") from e
        finally:
            conn.close()
        return existing is not None, existing

    def create_favorite(
        self, label: str, content: Optional[str] = None, type: str = "text"
    ) -> Favorite:
        if not label or not label.strip():
            raise FavoriteError("Label is required")
        if type not in VALID_TYPES:
            type = "text"
        self.init_db()
        conn = self._get_conn()
        try:
            existing = self._find_by_label(conn, label)
            if existing is not None:
                return existing
            favorite = Favorite(
                id=uuid.uuid4().hex,
                label=label,
                content=content,
                type=type,
                created_at=int(time.time()),
            )
            conn.execute(
                """INSERT INTO favorites (id, label, content, type, created_at)
                VALUES (?, ?, ?, ?, ?)""",
                (
                    favorite.id,
                    favorite.label,
                    favorite.content,
                    favorite.type,
                    favorite.created_at,
                ),
            )
            conn.commit()
        except sqlite3.Error as e:
            logger.error(f"Failed to add favorite {label!r}: {e}")
            raise FavoriteError(f"Failed to add favorite: {e}") from e
        finally:
            conn.close()
        logger.info(f"Saved favorite id={favorite.id} label={label!r}")
        return favorite

    def delete_favorite(self, favorite_id: str) -> bool:
        self.init_db()
        conn = self._get_conn()
        try:
            cursor = conn.execute("DELETE FROM favorites WHERE id = ?", (favorite_id,))
            conn.commit()
            deleted = cursor.rowcount > 0
        except sqlite3.Error as e:
            logger.error(f"Failed to delete favorite {favorite_id}: {e}")
            raise FavoriteError(f"Failed to delete favorite: {e}") from e
        finally:
            conn.close()
        logger.debug(f"Deleted favorite id={favorite_id} removed={deleted}")
        return deleted
