"""SQLite persistence: connections, schema bootstrap and the settings table."""

from __future__ import annotations

import logging
import sqlite3
import threading
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator

from counter_pos.config import DB_PATH, SQLITE_BUSY_TIMEOUT_SECONDS
from counter_pos.constant import SAMPLE_MENU
from counter_pos.errors import StorageError

logger = logging.getLogger(__name__)

SETTING_LAST_BILL_NUMBER = "lastBillNumber"
SETTING_LAST_BILL_DATE = "lastBillDate"


class Database:
    """Handle on one SQLite file.

    Every operation opens its own connection. Writers are serialized by
    ``write_lock`` inside this process and by ``BEGIN IMMEDIATE`` across
    processes sharing the file.
    """

    def __init__(self, path: str | Path = DB_PATH) -> None:
        self.path = Path(path)
        self.write_lock = threading.RLock()

    def _open(self) -> sqlite3.Connection:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            conn = sqlite3.connect(self.path, timeout=SQLITE_BUSY_TIMEOUT_SECONDS, isolation_level=None)
            conn.row_factory = sqlite3.Row
            conn.execute("PRAGMA foreign_keys = ON")
        except (sqlite3.Error, OSError) as exc:
            raise StorageError(f"cannot open database {self.path}: {exc}") from exc
        return conn

    @contextmanager
    def read(self) -> Iterator[sqlite3.Connection]:
        """Yield a connection holding one read snapshot.

        Under WAL readers never wait for writers and never see a
        half-committed write.
        """
        conn = self._open()
        try:
            conn.execute("BEGIN")
            yield conn
        except sqlite3.Error as exc:
            raise StorageError(f"read failed: {exc}") from exc
        finally:
            conn.rollback()
            conn.close()

    @contextmanager
    def transaction(self) -> Iterator[sqlite3.Connection]:
        """Yield a connection inside one write transaction.

        Commits when the block exits normally; any exception rolls back
        everything written in the block.
        """
        with self.write_lock:
            conn = self._open()
            try:
                conn.execute("BEGIN IMMEDIATE")
                yield conn
                conn.execute("COMMIT")
            except sqlite3.Error as exc:
                conn.rollback()
                raise StorageError(f"write failed: {exc}") from exc
            except BaseException:
                conn.rollback()
                raise
            finally:
                conn.close()

    def bootstrap_schema(self, seed_menu: bool = True) -> None:
        """Create the schema if it does not already exist."""
        with self.write_lock:
            conn = self._open()
            try:
                # journal_mode cannot change inside a transaction.
                conn.execute("PRAGMA journal_mode = WAL")
            except sqlite3.Error as exc:
                conn.close()
                raise StorageError(f"cannot enable WAL on {self.path}: {exc}") from exc
            conn.close()

        with self.transaction() as conn:
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS items (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    name TEXT NOT NULL,
                    price TEXT NOT NULL,
                    category TEXT NOT NULL DEFAULT '',
                    created_at TEXT NOT NULL DEFAULT CURRENT_TIMESTAMP
                )
                """
            )
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS bills (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    bill_number TEXT NOT NULL,
                    date TEXT NOT NULL,
                    time TEXT NOT NULL,
                    order_type TEXT NOT NULL DEFAULT '',
                    cashier TEXT NOT NULL DEFAULT '',
                    customer_name TEXT NOT NULL DEFAULT '',
                    subtotal TEXT NOT NULL,
                    cgst TEXT NOT NULL DEFAULT '0.00',
                    sgst TEXT NOT NULL DEFAULT '0.00',
                    round_off TEXT NOT NULL DEFAULT '0.00',
                    grand_total TEXT NOT NULL,
                    created_at TEXT NOT NULL DEFAULT CURRENT_TIMESTAMP
                )
                """
            )
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS bill_items (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    bill_id INTEGER NOT NULL,
                    line_index INTEGER NOT NULL,
                    item_name TEXT NOT NULL,
                    quantity INTEGER NOT NULL,
                    price TEXT NOT NULL,
                    amount TEXT NOT NULL,
                    FOREIGN KEY(bill_id) REFERENCES bills(id) ON DELETE CASCADE
                )
                """
            )
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS settings (
                    key TEXT PRIMARY KEY,
                    value TEXT NOT NULL
                )
                """
            )
            conn.execute("CREATE INDEX IF NOT EXISTS idx_bill_items_bill_id_line ON bill_items(bill_id, line_index)")
            conn.execute("CREATE INDEX IF NOT EXISTS idx_bills_date_number ON bills(date, bill_number)")

            # Files created before the tax columns existed.
            bill_columns = {row[1] for row in conn.execute("PRAGMA table_info(bills)")}
            for column in ("cgst", "sgst", "round_off"):
                if column not in bill_columns:
                    conn.execute(f"ALTER TABLE bills ADD COLUMN {column} TEXT NOT NULL DEFAULT '0.00'")

            if seed_menu:
                (count,) = conn.execute("SELECT COUNT(*) FROM items").fetchone()
                if count == 0:
                    conn.executemany(
                        "INSERT INTO items (name, price, category) VALUES (?, ?, ?)",
                        SAMPLE_MENU,
                    )
                    logger.info("menu_seeded items=%d", len(SAMPLE_MENU))

        logger.info("schema_ready path=%s", self.path)

    def get_setting(self, key: str) -> str | None:
        with self.read() as conn:
            return get_setting(conn, key)

    def set_setting(self, key: str, value: object) -> None:
        with self.transaction() as conn:
            set_setting(conn, key, value)


def get_setting(conn: sqlite3.Connection, key: str) -> str | None:
    row = conn.execute("SELECT value FROM settings WHERE key = ?", (key,)).fetchone()
    return None if row is None else str(row[0])


def set_setting(conn: sqlite3.Connection, key: str, value: object) -> None:
    conn.execute(
        "INSERT INTO settings (key, value) VALUES (?, ?) ON CONFLICT(key) DO UPDATE SET value = excluded.value",
        (key, str(value)),
    )
