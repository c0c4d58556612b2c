import sqlite3
from decimal import Decimal

import pytest

from counter_pos.catalog import MenuCatalog
from counter_pos.errors import DuplicateBillNumberError, StorageError
from counter_pos.ledger import LedgerStore
from counter_pos.models import BillLineItem


def test_append_then_list_round_trips(database, make_bill):
    ledger = LedgerStore(database)
    bill = make_bill(customer_name="Ravi")

    bill_id = ledger.append(bill)
    stored = ledger.list_all()

    assert len(stored) == 1
    assert stored[0] == bill
    assert stored[0].id == bill_id
    assert stored[0].items[0].amount == Decimal("140.00")
    assert stored[0].customer_name == "Ravi"


def test_list_all_is_ordered_by_id(database, make_bill):
    ledger = LedgerStore(database)
    ledger.append(make_bill("00001", date="2026-10-19"))
    ledger.append(make_bill("00001", date="2026-10-18"))
    ledger.append(make_bill("00002", date="2026-10-19"))

    assert [(b.bill_number, b.date) for b in ledger.list_all()] == [
        ("00001", "2026-10-19"),
        ("00001", "2026-10-18"),
        ("00002", "2026-10-19"),
    ]


def test_item_order_is_preserved(database, make_bill):
    ledger = LedgerStore(database)
    items = tuple(BillLineItem(name=f"Item {n}", quantity=1, price=Decimal("10")) for n in range(12))
    ledger.append(make_bill(items=items))
    assert [item.name for item in ledger.list_all()[0].items] == [f"Item {n}" for n in range(12)]


def test_menu_edit_does_not_change_stored_bill(database, make_bill):
    catalog = MenuCatalog(database)
    ledger = LedgerStore(database)
    dosa = catalog.create("Masala Dosa", "70", "Tiffins")
    ledger.append(make_bill())

    catalog.update(dosa.id, "Masala Dosa Special", "95", "Tiffins")
    catalog.delete(dosa.id)

    stored = ledger.list_all()[0]
    assert stored.items[0].name == "Masala Dosa"
    assert stored.items[0].price == Decimal("70.00")
    assert stored.grand_total == Decimal("165.00")


def test_grand_total_is_stored_not_recomputed(database, make_bill):
    ledger = LedgerStore(database)
    ledger.append(make_bill(grand_total=Decimal("170.00"), round_off=Decimal("5.00")))
    assert ledger.list_all()[0].grand_total == Decimal("170.00")


def test_clear_all_leaves_nothing_behind(database, make_bill):
    ledger = LedgerStore(database)
    ledger.append(make_bill("00001"))
    ledger.append(make_bill("00002"))

    assert ledger.clear_all() == 2
    assert ledger.list_all() == []
    assert ledger.count_orphan_items() == 0


def test_duplicate_number_same_date_rejected(database, make_bill):
    ledger = LedgerStore(database)
    ledger.append(make_bill("00001"))

    with pytest.raises(DuplicateBillNumberError) as excinfo:
        ledger.append(make_bill("00001"))

    assert excinfo.value.bill_number == "00001"
    assert excinfo.value.date == "2026-10-18"
    assert len(ledger.list_all()) == 1


def test_same_number_on_another_date_is_fine(database, make_bill):
    ledger = LedgerStore(database)
    ledger.append(make_bill("00001", date="2026-10-18"))
    ledger.append(make_bill("00001", date="2026-10-19"))
    assert len(ledger.list_all()) == 2


def test_failed_append_writes_nothing(database, make_bill, monkeypatch):
    ledger = LedgerStore(database)
    bill = make_bill()
    real_transaction = database.transaction

    class FailingItemsConnection:
        def __init__(self, conn):
            self.conn = conn

        def execute(self, *args):
            return self.conn.execute(*args)

        def executemany(self, *args):
            raise sqlite3.OperationalError("database or disk is full")

    def transaction():
        cm = real_transaction()

        class Wrapper:
            def __enter__(self):
                return FailingItemsConnection(cm.__enter__())

            def __exit__(self, *exc):
                return cm.__exit__(*exc)

        return Wrapper()

    monkeypatch.setattr(database, "transaction", transaction)
    with pytest.raises(StorageError):
        ledger.append(bill)
    monkeypatch.undo()

    assert ledger.list_all() == []
    assert ledger.count_orphan_items() == 0


def test_clear_all_refuses_unexpected_count(database, make_bill):
    ledger = LedgerStore(database)
    ledger.append(make_bill("00001"))
    ledger.append(make_bill("00002"))

    with pytest.raises(StorageError):
        ledger.clear_all(expected=1)

    assert len(ledger.list_all()) == 2
    assert ledger.clear_all(expected=2) == 2
