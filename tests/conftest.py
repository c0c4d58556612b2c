from datetime import datetime
from decimal import Decimal

import pytest

from counter_pos.backend import LocalBackend
from counter_pos.models import BillLineItem, BillRecord
from counter_pos.persistence import Database


class FakeClock:
    """Callable clock whose time the test moves by hand."""

    def __init__(self, now):
        self.now = now

    def __call__(self):
        return self.now


@pytest.fixture
def clock():
    return FakeClock(datetime(2026, 10, 18, 12, 30))


@pytest.fixture
def database(tmp_path):
    db = Database(tmp_path / "pos.db")
    db.bootstrap_schema(seed_menu=False)
    return db


@pytest.fixture
def backend(tmp_path, clock):
    return LocalBackend(Database(tmp_path / "pos.db"), clock=clock)


def _make_bill(number="00001", date="2026-10-18", items=None, **overrides):
    items = items or (
        BillLineItem(name="Masala Dosa", quantity=2, price=Decimal("70.00")),
        BillLineItem(name="Filter Coffee", quantity=1, price=Decimal("25.00")),
    )
    subtotal = sum((item.amount for item in items), Decimal("0"))
    fields = dict(
        bill_number=number,
        date=date,
        time="12:30",
        order_type="Dine-in",
        cashier="Sunil",
        items=tuple(items),
        subtotal=subtotal,
        grand_total=subtotal,
    )
    fields.update(overrides)
    return BillRecord(**fields)


@pytest.fixture
def make_bill():
    return _make_bill
