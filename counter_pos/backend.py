"""One access interface over the local SQLite file or a remote server."""

from __future__ import annotations

import logging
from datetime import datetime
from pathlib import Path
from typing import Protocol

from counter_pos.catalog import Catalog, MenuCatalog
from counter_pos.config import BILL_NUMBER_WIDTH, DB_PATH, SERVER_URL
from counter_pos.ledger import LedgerStore
from counter_pos.models import BillRecord
from counter_pos.persistence import Database
from counter_pos.sequence import Clock, SequenceGenerator

logger = logging.getLogger(__name__)


class Ledger(Protocol):
    def append(self, bill: BillRecord) -> int: ...

    def list_all(self) -> list[BillRecord]: ...

    def clear_all(self, expected: int | None = None) -> int: ...


class Sequence(Protocol):
    width: int

    def issue_next(self) -> str: ...

    def peek(self) -> str: ...

    def reset(self) -> None: ...


class Backend(Protocol):
    name: str
    catalog: Catalog
    ledger: Ledger
    sequence: Sequence


class LocalBackend:
    """Stores everything in a SQLite file opened by this process."""

    name = "local"

    def __init__(
        self,
        database: Database,
        clock: Clock = datetime.now,
        width: int = BILL_NUMBER_WIDTH,
        seed_menu: bool = True,
    ) -> None:
        self.database = database
        database.bootstrap_schema(seed_menu=seed_menu)
        self.catalog = MenuCatalog(database)
        self.ledger = LedgerStore(database)
        self.sequence = SequenceGenerator(database, clock=clock, width=width)


def open_backend(server_url: str = SERVER_URL, db_path: str | Path = DB_PATH) -> Backend:
    """Pick the remote backend when a server URL is configured, else the local file."""
    if server_url:
        from counter_pos.remote import RemoteBackend

        logger.info("backend_selected kind=remote url=%s", server_url)
        return RemoteBackend(server_url)
    logger.info("backend_selected kind=local path=%s", db_path)
    return LocalBackend(Database(db_path))
