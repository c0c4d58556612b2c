import asyncio

import pytest

from counter_pos.admin import AdminGate
from counter_pos.admin_modal import AdminModal
from counter_pos.backend import LocalBackend
from counter_pos.billing import Checkout
from counter_pos.persistence import Database
from counter_pos.pos_app import CounterPosApp, _validate_price
from counter_pos.totals import TaxPolicy


@pytest.fixture
def small_backend(tmp_path, clock):
    backend = LocalBackend(Database(tmp_path / "app.db"), clock=clock, seed_menu=False)
    backend.catalog.create("Masala Dosa", "70", "Tiffins")
    backend.catalog.create("Filter Coffee", "25", "Tea & Coffee")
    return backend


def make_app(backend, clock, printer, gate=None):
    return CounterPosApp(
        backend,
        checkout=Checkout(backend, clock=clock, policy=TaxPolicy(enabled=False)),
        gate=gate or AdminGate(password="pw"),
        printer=printer,
        check_printer=False,
    )


def test_search_add_and_print_bill(small_backend, clock):
    printed = []
    app = make_app(small_backend, clock, printed.append)

    async def scenario():
        async with app.run_test() as pilot:
            await pilot.press("s", "d", "o", "s", "a", "enter", "enter", "escape")
            await pilot.press("ctrl+b")
            await pilot.pause()

    asyncio.run(scenario())

    bills = small_backend.ledger.list_all()
    assert len(bills) == 1
    assert bills[0].items[0].name == "Masala Dosa"
    assert bills[0].items[0].quantity == 2
    assert any("Bill No.: 00001" in line for line in printed[0])
    assert app.order.is_empty
    assert app.next_number == "00002"


def test_print_failure_keeps_saved_bill(small_backend, clock):
    def offline_printer(lines):
        raise OSError("USB device not found")

    app = make_app(small_backend, clock, offline_printer)

    async def scenario():
        async with app.run_test() as pilot:
            await pilot.press("s", "c", "o", "f", "enter", "escape", "ctrl+k")
            await pilot.pause()

    asyncio.run(scenario())

    assert len(small_backend.ledger.list_all()) == 1
    assert "print failed" in app.system_status


def test_empty_order_is_not_finalized(small_backend, clock):
    printed = []
    app = make_app(small_backend, clock, printed.append)

    async def scenario():
        async with app.run_test() as pilot:
            await pilot.press("ctrl+b")
            await pilot.pause()

    asyncio.run(scenario())

    assert printed == []
    assert small_backend.ledger.list_all() == []
    assert app.system_status == "Add items to order first!"


def test_admin_login_opens_admin_screen(small_backend, clock):
    app = make_app(small_backend, clock, lambda lines: None)
    screens = []

    async def scenario():
        async with app.run_test() as pilot:
            await pilot.press("ctrl+a")
            await pilot.pause()
            await pilot.press("p", "w", "enter")
            await pilot.pause()
            screens.append(type(app.screen))

    asyncio.run(scenario())

    assert screens == [AdminModal]
    assert app.gate.authenticated


def test_wrong_admin_password_reports_attempts(small_backend, clock):
    app = make_app(small_backend, clock, lambda lines: None)

    async def scenario():
        async with app.run_test() as pilot:
            await pilot.press("ctrl+a")
            await pilot.pause()
            await pilot.press("x", "enter")
            await pilot.pause()

    asyncio.run(scenario())

    assert not app.gate.authenticated
    assert app.system_status == "Invalid password. 4 attempts remaining."


def test_price_validator_handles_huge_values():
    assert _validate_price("1e30") == "Price must be a number."
    assert _validate_price("-5") == "Price must not be negative."
    assert _validate_price("45.50") is None
