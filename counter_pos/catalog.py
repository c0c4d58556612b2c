"""Menu catalog: SQLite CRUD plus a short-lived read cache."""

from __future__ import annotations

import logging
import threading
import time
from typing import Callable, Protocol

from counter_pos.config import MENU_CACHE_TTL_SECONDS
from counter_pos.errors import StorageError, ValidationError
from counter_pos.models import MenuItem, to_money
from counter_pos.persistence import Database

logger = logging.getLogger(__name__)


class Catalog(Protocol):
    def list(self) -> list[MenuItem]: ...

    def create(self, name: str, price: object, category: str) -> MenuItem: ...

    def update(self, item_id: int, name: str, price: object, category: str) -> MenuItem: ...

    def delete(self, item_id: int) -> None: ...


class MenuCatalog:
    """Menu items stored in the ``items`` table."""

    def __init__(self, database: Database) -> None:
        self.database = database

    def list(self) -> list[MenuItem]:
        with self.database.read() as conn:
            rows = conn.execute("SELECT id, name, price, category FROM items ORDER BY category, name").fetchall()
        return [MenuItem(id=int(row["id"]), name=row["name"], price=row["price"], category=row["category"]) for row in rows]

    def count(self) -> int:
        with self.database.read() as conn:
            (count,) = conn.execute("SELECT COUNT(*) FROM items").fetchone()
        return int(count)

    def create(self, name: str, price: object, category: str) -> MenuItem:
        # Validate through the model before touching the table.
        draft = MenuItem(id=0, name=name, price=to_money(price, "price"), category=category)
        with self.database.transaction() as conn:
            cur = conn.execute(
                "INSERT INTO items (name, price, category) VALUES (?, ?, ?)",
                (draft.name, str(draft.price), draft.category),
            )
            item = MenuItem(id=int(cur.lastrowid), name=draft.name, price=draft.price, category=draft.category)
        logger.info("menu_item_created id=%d name=%r", item.id, item.name)
        return item

    def update(self, item_id: int, name: str, price: object, category: str) -> MenuItem:
        item = MenuItem(id=item_id, name=name, price=to_money(price, "price"), category=category)
        with self.database.transaction() as conn:
            cur = conn.execute(
                "UPDATE items SET name = ?, price = ?, category = ? WHERE id = ?",
                (item.name, str(item.price), item.category, item.id),
            )
            if cur.rowcount == 0:
                raise ValidationError(f"menu item {item_id} does not exist")
        logger.info("menu_item_updated id=%d name=%r", item.id, item.name)
        return item

    def delete(self, item_id: int) -> None:
        with self.database.transaction() as conn:
            conn.execute("DELETE FROM items WHERE id = ?", (item_id,))
        logger.info("menu_item_deleted id=%d", item_id)


class CachedMenuCatalog:
    """Serves ``list()`` from a snapshot for up to ``ttl`` seconds.

    Writes go straight to the wrapped catalog and drop the snapshot before
    returning, so the next ``list()`` always reflects them.
    """

    def __init__(
        self,
        catalog: Catalog,
        ttl: float = MENU_CACHE_TTL_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.catalog = catalog
        self.ttl = ttl
        self.clock = clock
        self._lock = threading.Lock()
        self._items: list[MenuItem] | None = None
        self._loaded_at = 0.0
        # Bumped on every write so a fetch racing a write is never cached.
        self._generation = 0

    def invalidate(self) -> None:
        with self._lock:
            self._items = None
            self._generation += 1

    def list(self) -> list[MenuItem]:
        with self._lock:
            now = self.clock()
            if self._items is not None and now - self._loaded_at < self.ttl:
                return list(self._items)
            stale = self._items
            generation = self._generation

        try:
            items = self.catalog.list()
        except StorageError as exc:
            if stale is None:
                raise
            logger.warning("menu_cache_stale_served reason=%s", exc)
            return list(stale)

        with self._lock:
            if generation == self._generation:
                self._items = list(items)
                self._loaded_at = now
        return list(items)

    def create(self, name: str, price: object, category: str) -> MenuItem:
        try:
            return self.catalog.create(name, price, category)
        finally:
            self.invalidate()

    def update(self, item_id: int, name: str, price: object, category: str) -> MenuItem:
        try:
            return self.catalog.update(item_id, name, price, category)
        finally:
            self.invalidate()

    def delete(self, item_id: int) -> None:
        try:
            self.catalog.delete(item_id)
        finally:
            self.invalidate()

    def count(self) -> int:
        return len(self.list())
