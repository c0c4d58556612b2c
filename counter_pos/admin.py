"""Password-gated admin actions: backup, clear and counter reset."""

from __future__ import annotations

import csv
import hmac
import logging
import math
import time
from pathlib import Path
from typing import Callable, TypeVar

from counter_pos.backend import Ledger, Sequence
from counter_pos.config import ADMIN_LOCKOUT_SECONDS, ADMIN_MAX_ATTEMPTS, ADMIN_PASSWORD
from counter_pos.errors import AdminLockedError
from counter_pos.models import BillRecord
from counter_pos.rendering import format_money

logger = logging.getLogger(__name__)

T = TypeVar("T")

BILL_COLUMNS = [
    "Bill No",
    "Date",
    "Time",
    "Order Type",
    "Cashier",
    "Customer",
    "Items Count",
    "Subtotal",
    "CGST",
    "SGST",
    "Round Off",
    "Grand Total",
]
ITEM_COLUMNS = ["Bill No", "Date", "Item Name", "Quantity", "Price", "Amount"]


class AdminGate:
    """Static shared password with a lockout after repeated failures."""

    def __init__(
        self,
        password: str = ADMIN_PASSWORD,
        max_attempts: int = ADMIN_MAX_ATTEMPTS,
        lockout_seconds: float = ADMIN_LOCKOUT_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._password = password
        self.max_attempts = max_attempts
        self.lockout_seconds = lockout_seconds
        self.clock = clock
        self.failed_attempts = 0
        self.authenticated = False
        self._locked_until: float | None = None

    def seconds_locked(self) -> int:
        if self._locked_until is None:
            return 0
        remaining = self._locked_until - self.clock()
        if remaining <= 0:
            self._locked_until = None
            self.failed_attempts = 0
            return 0
        return math.ceil(remaining)

    @property
    def attempts_remaining(self) -> int:
        return max(0, self.max_attempts - self.failed_attempts)

    def login(self, password: str) -> bool:
        locked = self.seconds_locked()
        if locked:
            raise AdminLockedError(locked)

        if hmac.compare_digest(password.encode("utf-8"), self._password.encode("utf-8")):
            self.authenticated = True
            self.failed_attempts = 0
            logger.info("admin_login ok=true")
            return True

        self.failed_attempts += 1
        logger.warning("admin_login ok=false attempts=%d", self.failed_attempts)
        if self.failed_attempts >= self.max_attempts:
            self._locked_until = self.clock() + self.lockout_seconds
            logger.warning("admin_locked seconds=%s", self.lockout_seconds)
        return False

    def logout(self) -> None:
        self.authenticated = False


def backup(ledger: Ledger, exporter: Callable[[list[BillRecord]], T]) -> T | None:
    """Export every bill. Returns ``None`` when there is nothing to export."""
    bills = ledger.list_all()
    if not bills:
        return None
    return exporter(bills)


def backup_and_clear(ledger: Ledger, sequence: Sequence, exporter: Callable[[list[BillRecord]], T]) -> T | None:
    """Export every bill, then delete them all and zero the bill counter.

    Nothing is deleted unless the exporter returns normally and every
    stored bill was part of the export.
    """
    bills = ledger.list_all()
    if not bills:
        return None
    artifact = exporter(bills)
    removed = ledger.clear_all(expected=len(bills))
    sequence.reset()
    logger.warning("admin_backup_and_clear exported=%d removed=%d", len(bills), removed)
    return artifact


def export_bills_csv(bills: list[BillRecord], directory: str | Path, stamp: str) -> list[Path]:
    """Write a bill summary CSV and an item detail CSV; returns both paths."""
    out_dir = Path(directory)
    out_dir.mkdir(parents=True, exist_ok=True)
    bills_path = out_dir / f"bills_backup_{stamp}.csv"
    items_path = out_dir / f"bill_items_backup_{stamp}.csv"

    with bills_path.open("w", newline="", encoding="utf-8") as fh:
        writer = csv.writer(fh)
        writer.writerow(BILL_COLUMNS)
        for bill in bills:
            writer.writerow(
                [
                    bill.bill_number,
                    bill.date,
                    bill.time,
                    bill.order_type,
                    bill.cashier,
                    bill.customer_name,
                    len(bill.items),
                    format_money(bill.subtotal),
                    format_money(bill.cgst),
                    format_money(bill.sgst),
                    format_money(bill.round_off),
                    format_money(bill.grand_total),
                ]
            )

    with items_path.open("w", newline="", encoding="utf-8") as fh:
        writer = csv.writer(fh)
        writer.writerow(ITEM_COLUMNS)
        for bill in bills:
            for item in bill.items:
                writer.writerow(
                    [
                        bill.bill_number,
                        bill.date,
                        item.name,
                        item.quantity,
                        format_money(item.price),
                        format_money(item.amount),
                    ]
                )

    logger.info("bills_exported count=%d path=%s", len(bills), bills_path)
    return [bills_path, items_path]
