"""Append-only ledger of finalized bills."""

from __future__ import annotations

import logging
import sqlite3
from collections import defaultdict

from counter_pos.errors import DuplicateBillNumberError, StorageError, ValidationError
from counter_pos.models import BillLineItem, BillRecord
from counter_pos.persistence import Database

logger = logging.getLogger(__name__)


def _row_to_line(row: sqlite3.Row) -> BillLineItem:
    return BillLineItem(
        name=row["item_name"],
        quantity=int(row["quantity"]),
        price=row["price"],
        amount=row["amount"],
    )


class LedgerStore:
    """Bill headers plus their line items in SQLite.

    A bill and its items are written in a single transaction and read
    back from a single snapshot, so callers see all of a bill or none of it.
    """

    def __init__(self, database: Database) -> None:
        self.database = database

    def append(self, bill: BillRecord) -> int:
        with self.database.transaction() as conn:
            clash = conn.execute(
                "SELECT id FROM bills WHERE bill_number = ? AND date = ? LIMIT 1",
                (bill.bill_number, bill.date),
            ).fetchone()
            if clash is not None:
                logger.error(
                    "duplicate_bill_number number=%s date=%s existing_id=%s",
                    bill.bill_number,
                    bill.date,
                    clash["id"],
                )
                raise DuplicateBillNumberError(bill.bill_number, bill.date)

            cur = conn.execute(
                """
                INSERT INTO bills (
                    bill_number, date, time, order_type, cashier, customer_name,
                    subtotal, cgst, sgst, round_off, grand_total
                )
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    bill.bill_number,
                    bill.date,
                    bill.time,
                    bill.order_type,
                    bill.cashier,
                    bill.customer_name,
                    str(bill.subtotal),
                    str(bill.cgst),
                    str(bill.sgst),
                    str(bill.round_off),
                    str(bill.grand_total),
                ),
            )
            bill_id = int(cur.lastrowid)

            conn.executemany(
                """
                INSERT INTO bill_items (bill_id, line_index, item_name, quantity, price, amount)
                VALUES (?, ?, ?, ?, ?, ?)
                """,
                [
                    (bill_id, idx, item.name, item.quantity, str(item.price), str(item.amount))
                    for idx, item in enumerate(bill.items)
                ],
            )

        logger.info(
            "bill_saved id=%d number=%s date=%s items=%d grand_total=%s",
            bill_id,
            bill.bill_number,
            bill.date,
            len(bill.items),
            bill.grand_total,
        )
        return bill_id

    def list_all(self) -> list[BillRecord]:
        """Return every bill with its items, oldest first (by id)."""
        with self.database.read() as conn:
            headers = conn.execute("SELECT * FROM bills ORDER BY id").fetchall()
            item_rows = conn.execute("SELECT * FROM bill_items ORDER BY bill_id, line_index").fetchall()

        lines_by_bill: dict[int, list[BillLineItem]] = defaultdict(list)
        for row in item_rows:
            lines_by_bill[int(row["bill_id"])].append(_row_to_line(row))

        bills: list[BillRecord] = []
        for row in headers:
            bill_id = int(row["id"])
            try:
                bills.append(
                    BillRecord(
                        id=bill_id,
                        bill_number=row["bill_number"],
                        date=row["date"],
                        time=row["time"],
                        order_type=row["order_type"],
                        cashier=row["cashier"],
                        customer_name=row["customer_name"],
                        items=tuple(lines_by_bill.get(bill_id, ())),
                        subtotal=row["subtotal"],
                        cgst=row["cgst"],
                        sgst=row["sgst"],
                        round_off=row["round_off"],
                        grand_total=row["grand_total"],
                    )
                )
            except ValidationError as exc:
                logger.warning("bill_skipped id=%d reason=%s", bill_id, exc)
        return bills

    def clear_all(self, expected: int | None = None) -> int:
        """Delete every bill and line item. Returns the number of bills removed.

        With ``expected``, nothing is deleted unless exactly that many bills
        are stored, so a bill the caller never saw cannot be lost.
        """
        with self.database.transaction() as conn:
            if expected is not None:
                (stored,) = conn.execute("SELECT COUNT(*) FROM bills").fetchone()
                if stored != expected:
                    logger.error("bills_clear_refused stored=%d expected=%d", stored, expected)
                    raise StorageError(f"refusing to clear: {stored} bills stored but {expected} were exported")
            conn.execute("DELETE FROM bill_items")
            cur = conn.execute("DELETE FROM bills")
            removed = cur.rowcount
        logger.warning("bills_cleared count=%d", removed)
        return removed

    def count_orphan_items(self) -> int:
        with self.database.read() as conn:
            (count,) = conn.execute(
                "SELECT COUNT(*) FROM bill_items WHERE bill_id NOT IN (SELECT id FROM bills)"
            ).fetchone()
        return int(count)
