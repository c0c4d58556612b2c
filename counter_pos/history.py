"""Bill history for display: load, order, summarize."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import Decimal

from counter_pos.backend import Ledger
from counter_pos.errors import PosError
from counter_pos.models import ZERO, BillRecord

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class HistoryStats:
    today_bills: int
    today_revenue: Decimal
    all_time_bills: int
    all_time_revenue: Decimal


def load_bills(ledger: Ledger) -> list[BillRecord]:
    """All bills, most recent first. A failed read shows as an empty history."""
    try:
        bills = ledger.list_all()
    except PosError as exc:
        logger.warning("history_load_failed reason=%s", exc)
        return []
    return sorted(bills, key=lambda bill: (bill.date, bill.id or 0), reverse=True)


def compute_stats(bills: list[BillRecord], today: str) -> HistoryStats:
    todays = [bill for bill in bills if bill.date == today]
    return HistoryStats(
        today_bills=len(todays),
        today_revenue=sum((bill.grand_total for bill in todays), ZERO),
        all_time_bills=len(bills),
        all_time_revenue=sum((bill.grand_total for bill in bills), ZERO),
    )
