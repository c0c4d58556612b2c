import csv

import pytest

from counter_pos.admin import AdminGate, backup, backup_and_clear, export_bills_csv
from counter_pos.errors import AdminLockedError, StorageError
from counter_pos.history import compute_stats, load_bills


class MonotonicClock:
    def __init__(self):
        self.now = 1000.0

    def __call__(self):
        return self.now


def test_gate_accepts_password():
    gate = AdminGate(password="secret")
    assert gate.login("secret")
    assert gate.authenticated
    gate.logout()
    assert not gate.authenticated


def test_gate_locks_after_max_failures():
    clock = MonotonicClock()
    gate = AdminGate(password="secret", max_attempts=3, lockout_seconds=60, clock=clock)

    assert not gate.login("a")
    assert gate.attempts_remaining == 2
    assert not gate.login("b")
    assert not gate.login("c")

    with pytest.raises(AdminLockedError) as excinfo:
        gate.login("secret")
    assert excinfo.value.seconds_left == 60

    clock.now += 59.5
    assert gate.seconds_locked() == 1

    clock.now += 1
    assert gate.login("secret")
    assert gate.attempts_remaining == 3


def test_backup_and_clear_exports_before_clearing(backend, make_bill):
    backend.sequence.issue_next()
    backend.sequence.issue_next()
    backend.ledger.append(make_bill("00001"))
    backend.ledger.append(make_bill("00002"))
    exported = []

    result = backup_and_clear(backend.ledger, backend.sequence, lambda bills: exported.extend(bills) or "artifact")

    assert result == "artifact"
    assert [bill.bill_number for bill in exported] == ["00001", "00002"]
    assert backend.ledger.list_all() == []
    assert backend.sequence.issue_next() == "00001"


def test_failed_export_keeps_bills(backend, make_bill):
    backend.sequence.issue_next()
    backend.ledger.append(make_bill("00001"))

    def broken_exporter(bills):
        raise OSError("read-only file system")

    with pytest.raises(OSError):
        backup_and_clear(backend.ledger, backend.sequence, broken_exporter)

    assert len(backend.ledger.list_all()) == 1
    assert backend.sequence.peek() == "00002"


def test_nothing_to_backup(backend):
    assert backup(backend.ledger, lambda bills: "unused") is None
    assert backup_and_clear(backend.ledger, backend.sequence, lambda bills: "unused") is None


def test_export_bills_csv(tmp_path, make_bill):
    bills = [make_bill("00001", customer_name="Ravi"), make_bill("00002")]
    bills_path, items_path = export_bills_csv(bills, tmp_path / "exports", "2026-10-18_120000")

    assert bills_path.name == "bills_backup_2026-10-18_120000.csv"
    with bills_path.open(newline="", encoding="utf-8") as fh:
        rows = list(csv.DictReader(fh))
    assert [row["Bill No"] for row in rows] == ["00001", "00002"]
    assert rows[0]["Customer"] == "Ravi"
    assert rows[0]["Grand Total"] == "165.00"
    assert rows[0]["Items Count"] == "2"

    with items_path.open(newline="", encoding="utf-8") as fh:
        items = list(csv.DictReader(fh))
    assert len(items) == 4
    assert items[0]["Item Name"] == "Masala Dosa"
    assert items[0]["Amount"] == "140.00"


class BrokenLedger:
    def list_all(self):
        raise StorageError("server unreachable")


def test_history_degrades_to_empty_list():
    assert load_bills(BrokenLedger()) == []


def test_history_is_newest_first_with_stats(backend, make_bill):
    backend.ledger.append(make_bill("00001", date="2026-10-17"))
    backend.ledger.append(make_bill("00001", date="2026-10-18"))
    backend.ledger.append(make_bill("00002", date="2026-10-18"))

    bills = load_bills(backend.ledger)
    assert [(b.date, b.bill_number) for b in bills] == [
        ("2026-10-18", "00002"),
        ("2026-10-18", "00001"),
        ("2026-10-17", "00001"),
    ]

    stats = compute_stats(bills, "2026-10-18")
    assert stats.today_bills == 2
    assert stats.all_time_bills == 3
    assert str(stats.today_revenue) == "330.00"
    assert str(stats.all_time_revenue) == "495.00"


def test_backup_and_clear_keeps_bills_that_were_not_exported(backend, make_bill):
    backend.sequence.issue_next()
    backend.ledger.append(make_bill("00001"))
    with backend.database.transaction() as conn:
        conn.execute(
            "INSERT INTO bills (bill_number, date, time, subtotal, grand_total) "
            "VALUES ('00002', '2026-10-18', '12:31', '10.00', '10.00')"
        )
    exported = []

    with pytest.raises(StorageError):
        backup_and_clear(backend.ledger, backend.sequence, exported.extend)

    assert [bill.bill_number for bill in exported] == ["00001"]
    with backend.database.read() as conn:
        (stored,) = conn.execute("SELECT COUNT(*) FROM bills").fetchone()
    assert stored == 2
    assert backend.sequence.issue_next() == "00002"
