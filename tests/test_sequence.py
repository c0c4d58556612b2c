import sqlite3
import threading
from datetime import datetime, timedelta

import pytest

from counter_pos.errors import StorageError
from counter_pos.persistence import SETTING_LAST_BILL_DATE, SETTING_LAST_BILL_NUMBER, Database
from counter_pos.sequence import SequenceGenerator, format_bill_number


def test_same_day_numbers_are_sequential(database, clock):
    seq = SequenceGenerator(database, clock=clock)
    assert [seq.issue_next() for _ in range(3)] == ["00001", "00002", "00003"]


def test_number_restarts_on_new_date(database, clock):
    seq = SequenceGenerator(database, clock=clock)
    seq.issue_next()
    seq.issue_next()

    clock.now = clock.now + timedelta(days=1)
    assert seq.issue_next() == "00001"
    assert database.get_setting(SETTING_LAST_BILL_DATE) == "2026-10-19"


def test_rollover_at_midnight(database, clock):
    clock.now = datetime(2026, 10, 18, 23, 59, 59)
    seq = SequenceGenerator(database, clock=clock)
    assert seq.issue_next() == "00001"
    assert seq.issue_next() == "00002"

    clock.now = datetime(2026, 10, 19, 0, 0, 1)
    assert seq.issue_next() == "00001"


def test_reset_then_issue_same_date(database, clock):
    seq = SequenceGenerator(database, clock=clock)
    for _ in range(4):
        seq.issue_next()

    seq.reset()
    assert seq.issue_next() == "00001"


def test_reset_then_issue_new_date(database, clock):
    seq = SequenceGenerator(database, clock=clock)
    seq.issue_next()
    seq.reset()

    clock.now = clock.now + timedelta(days=1)
    assert seq.issue_next() == "00001"


def test_reset_keeps_stored_date(database, clock):
    seq = SequenceGenerator(database, clock=clock)
    seq.issue_next()
    seq.reset()
    assert database.get_setting(SETTING_LAST_BILL_DATE) == "2026-10-18"
    assert database.get_setting(SETTING_LAST_BILL_NUMBER) == "0"


def test_peek_does_not_consume(database, clock):
    seq = SequenceGenerator(database, clock=clock)
    assert seq.peek() == "00001"
    assert seq.peek() == "00001"
    assert seq.issue_next() == "00001"
    assert seq.peek() == "00002"


def test_peek_after_date_change(database, clock):
    seq = SequenceGenerator(database, clock=clock)
    seq.issue_next()
    seq.issue_next()
    clock.now = clock.now + timedelta(days=1)
    assert seq.peek() == "00001"


def test_numbering_resumes_after_restart(tmp_path, clock):
    path = tmp_path / "restart.db"
    first = Database(path)
    first.bootstrap_schema(seed_menu=False)
    seq = SequenceGenerator(first, clock=clock)
    seq.issue_next()
    seq.issue_next()

    reopened = Database(path)
    reopened.bootstrap_schema(seed_menu=False)
    assert SequenceGenerator(reopened, clock=clock).issue_next() == "00003"


def test_parallel_issue_is_distinct_and_gapless(database, clock):
    seq = SequenceGenerator(database, clock=clock)
    issued = []
    errors = []
    lock = threading.Lock()

    def worker():
        try:
            for _ in range(10):
                number = seq.issue_next()
                with lock:
                    issued.append(number)
        except Exception as exc:  # surfaced below
            errors.append(exc)

    threads = [threading.Thread(target=worker) for _ in range(8)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert errors == []
    assert sorted(issued) == [format_bill_number(n) for n in range(1, 81)]


def test_separate_handles_on_one_file_do_not_duplicate(tmp_path, clock):
    path = tmp_path / "shared.db"
    Database(path).bootstrap_schema(seed_menu=False)
    a = SequenceGenerator(Database(path), clock=clock)
    b = SequenceGenerator(Database(path), clock=clock)

    issued = [a.issue_next(), b.issue_next(), a.issue_next(), b.issue_next()]
    assert issued == ["00001", "00002", "00003", "00004"]


def test_width_is_configurable(database, clock):
    seq = SequenceGenerator(database, clock=clock, width=3)
    assert seq.issue_next() == "001"
    assert format_bill_number(123456, 5) == "123456"


def test_invalid_width_rejected(database):
    with pytest.raises(ValueError):
        SequenceGenerator(database, width=0)


def test_corrupt_counter_raises_storage_error(database, clock):
    database.set_setting(SETTING_LAST_BILL_DATE, "2026-10-18")
    database.set_setting(SETTING_LAST_BILL_NUMBER, "abc")
    with pytest.raises(StorageError):
        SequenceGenerator(database, clock=clock).issue_next()


def test_failed_write_leaves_counter_unchanged(database, clock, monkeypatch):
    seq = SequenceGenerator(database, clock=clock)
    seq.issue_next()

    def broken_set_setting(conn, key, value):
        raise sqlite3.OperationalError("disk I/O error")

    monkeypatch.setattr("counter_pos.sequence.set_setting", broken_set_setting)
    with pytest.raises(StorageError):
        seq.issue_next()
    monkeypatch.undo()

    assert seq.issue_next() == "00002"


def test_negative_counter_raises_storage_error(database, clock):
    database.set_setting(SETTING_LAST_BILL_DATE, "2026-10-18")
    database.set_setting(SETTING_LAST_BILL_NUMBER, "-3")
    seq = SequenceGenerator(database, clock=clock)
    with pytest.raises(StorageError):
        seq.issue_next()
    with pytest.raises(StorageError):
        seq.peek()
