"""Turning an order into a numbered, stored bill."""

from __future__ import annotations

import logging
from datetime import datetime

from counter_pos.backend import Backend
from counter_pos.errors import DuplicateBillNumberError, StorageError, ValidationError
from counter_pos.models import BillRecord, Totals
from counter_pos.order import Order
from counter_pos.rendering import bill_lines, kot_lines
from counter_pos.sequence import Clock, format_bill_number
from counter_pos.totals import DEFAULT_TAX_POLICY, TaxPolicy

logger = logging.getLogger(__name__)

TICKET_KINDS = ("bill", "kot")


class Checkout:
    """Finalizes orders against a backend.

    ``finalize`` issues exactly one bill number per order. If saving the
    bill fails, the issued number is held and reused by the next attempt on
    the same date, so a retry neither burns a second number nor reuses one
    across days.
    """

    def __init__(self, backend: Backend, clock: Clock = datetime.now, policy: TaxPolicy = DEFAULT_TAX_POLICY) -> None:
        self.backend = backend
        self.clock = clock
        self.policy = policy
        self._pending_number: str | None = None
        self._pending_date: str | None = None

    @property
    def fallback_number(self) -> str:
        return format_bill_number(1, self.backend.sequence.width)

    def preview(self, order: Order) -> Totals:
        return order.totals(self.policy)

    def display_number(self) -> str:
        """Number to show on screen before finalizing. Never used to save a bill."""
        if self._pending_number is not None:
            return self._pending_number
        try:
            return self.backend.sequence.peek()
        except StorageError as exc:
            logger.warning("display_number_fallback reason=%s", exc)
            return self.fallback_number

    def finalize(self, order: Order) -> BillRecord:
        if order.is_empty:
            raise ValidationError("Add items to order first!")

        now = self.clock()
        today = now.date().isoformat()
        if self._pending_number is None or self._pending_date != today:
            self._pending_number = self.backend.sequence.issue_next()
            self._pending_date = today
        bill_number = self._pending_number

        record = BillRecord.from_order(
            bill_number=bill_number,
            date=today,
            time=now.strftime("%H:%M"),
            order_type=order.order_type,
            cashier=order.cashier,
            customer_name=order.customer_name,
            lines=order.lines,
            totals=order.totals(self.policy),
        )
        try:
            bill_id = self.backend.ledger.append(record)
        except DuplicateBillNumberError:
            # Reusing this number can never succeed.
            self._pending_number = None
            self._pending_date = None
            raise
        self._pending_number = None
        self._pending_date = None
        logger.info("order_finalized number=%s id=%d total=%s", bill_number, bill_id, record.grand_total)
        return record.with_id(bill_id)

    def render(self, bill: BillRecord, kind: str = "bill") -> list[str]:
        """Ticket text for a bill."""
        if kind == "bill":
            return bill_lines(bill)
        if kind == "kot":
            return kot_lines(bill)
        raise ValueError(f"unknown ticket kind {kind!r}; expected one of {TICKET_KINDS}")

    def reprint(self, bill: BillRecord, kind: str = "bill") -> list[str]:
        """Ticket text for an already stored bill. Never issues a number."""
        logger.info("reprint number=%s date=%s kind=%s", bill.bill_number, bill.date, kind)
        return self.render(bill, kind)
