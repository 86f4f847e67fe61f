"""
SQLite backed store for items.

``ItemStore`` is the only component that talks to the ``items`` table.
All methods are synchronous and blocking; each opens and closes its
own connection so the store can be called concurrently from the
worker threads of the async executor.  Database errors
(``sqlite3.Error``) are not caught here.

All queries use parameterized statements.
"""

from __future__ import annotations

import logging
import sqlite3
from typing import List, Optional

from item_api.app.core.db import get_connection, get_database_path
from item_api.app.schemas.item import ItemBase, ItemRead


logger = logging.getLogger(__name__)


class ItemStore:
    """Item persistence over a single SQLite database file."""

    def __init__(self, db_path: Optional[str] = None) -> None:
        self.db_path = db_path or get_database_path()

    def get(self, item_id: int) -> Optional[ItemRead]:
        """Return the item with ``item_id`` or ``None``."""
        conn = get_connection(self.db_path)
        try:
            row = conn.execute(
                "SELECT id, name, category FROM items WHERE id = ?",
                (item_id,),
            ).fetchone()
            return self._row_to_item(row) if row else None
        finally:
            conn.close()

    def list(self, category: Optional[str] = None) -> List[ItemRead]:
        """Return all items, or those whose category equals ``category``."""
        conn = get_connection(self.db_path)
        try:
            if category is not None:
                rows = conn.execute(
                    "SELECT id, name, category FROM items WHERE category = ? ORDER BY id",
                    (category,),
                ).fetchall()
            else:
                rows = conn.execute("SELECT id, name, category FROM items ORDER BY id").fetchall()
            return [self._row_to_item(row) for row in rows]
        finally:
            conn.close()

    def find_by_name(self, name: str) -> List[ItemRead]:
        """Return items whose name equals ``name`` exactly."""
        conn = get_connection(self.db_path)
        try:
            rows = conn.execute(
                "SELECT id, name, category FROM items WHERE name = ? ORDER BY id",
                (name,),
            ).fetchall()
            return [self._row_to_item(row) for row in rows]
        finally:
            conn.close()

    def save(self, item: ItemBase) -> Optional[ItemRead]:
        """Insert or update an item and return the stored copy.

        Items without an ``id`` are inserted and receive a generated
        one.  Items carrying an ``id`` overwrite the row with that id;
        if the row has been deleted meanwhile nothing is written and
        ``None`` is returned.
        """
        item_id = getattr(item, "id", None)
        conn = get_connection(self.db_path)
        try:
            cursor = conn.cursor()
            if item_id is None:
                cursor.execute(
                    "INSERT INTO items (name, category) VALUES (?, ?)",
                    (item.name, item.category),
                )
                item_id = cursor.lastrowid
                logger.info("Created item %s", item_id)
            else:
                cursor.execute(
                    "UPDATE items SET name = ?, category = ? WHERE id = ?",
                    (item.name, item.category, item_id),
                )
                if cursor.rowcount == 0:
                    logger.info("Item %s vanished before it could be saved", item_id)
                    return None
                logger.info("Saved item %s", item_id)
            conn.commit()
            return ItemRead(id=item_id, name=item.name, category=item.category)
        finally:
            conn.close()

    def delete_by_id(self, item_id: int) -> None:
        """Delete the item with ``item_id``; missing ids are ignored."""
        conn = get_connection(self.db_path)
        try:
            cursor = conn.execute("DELETE FROM items WHERE id = ?", (item_id,))
            conn.commit()
            if cursor.rowcount:
                logger.info("Deleted item %s", item_id)
        finally:
            conn.close()

    def exists_by_id(self, item_id: int) -> bool:
        conn = get_connection(self.db_path)
        try:
            row = conn.execute("SELECT 1 FROM items WHERE id = ?", (item_id,)).fetchone()
            return row is not None
        finally:
            conn.close()

    @staticmethod
    def _row_to_item(row: sqlite3.Row) -> ItemRead:
        """Convert a database row to an ItemRead schema instance."""
        return ItemRead(id=row["id"], name=row["name"], category=row["category"])
