"""Main Textual app class."""

from __future__ import annotations

import logging
from functools import partial
from typing import Callable

from rich.text import Text
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal, Vertical
from textual.css.query import NoMatches
from textual.events import Key
from textual.reactive import reactive
from textual.screen import ModalScreen
from textual.widgets import Header, Static

from counter_pos.admin import AdminGate
from counter_pos.admin_modal import AdminModal
from counter_pos.backend import Backend
from counter_pos.billing import Checkout
from counter_pos.config import EXPORT_DIR
from counter_pos.constant import CATEGORIES, ORDER_TYPES
from counter_pos.errors import AdminLockedError, PosError, ValidationError
from counter_pos.history import compute_stats, load_bills
from counter_pos.history_modal import HistoryModal
from counter_pos.models import BillRecord, MenuItem, to_money
from counter_pos.order import Order
from counter_pos.printer import check_printer_dependencies, print_lines
from counter_pos.prompt_modal import PromptModal
from counter_pos.rendering import category_style, format_money, format_order_line, format_totals

logger = logging.getLogger(__name__)


def _validate_price(value: str) -> str | None:
    try:
        price = to_money(value, "price")
    except ValidationError:
        return "Price must be a number."
    if price < 0:
        return "Price must not be negative."
    return None


def _validate_required(label: str) -> Callable[[str], str | None]:
    return lambda value: None if value else f"{label} is required."


class CounterPosApp(App):
    """Counter app: build an order from the menu, print bill or KOT, browse history."""

    TITLE = "Counter POS"
    SUB_TITLE = "Billing"

    CSS = """
    Screen {
        layout: vertical;
    }

    #main-layout {
        height: 1fr;
    }

    #order-pane {
        width: 3fr;
        border: round $primary;
        padding: 1;
    }

    #search-pane {
        width: 2fr;
        border: round $secondary;
        padding: 1;
    }

    #order-info {
        height: 3;
        margin-bottom: 1;
    }

    #order-list {
        height: 1fr;
        border: tall $surface;
        padding: 0 1;
    }

    #order-totals {
        height: 3;
        padding: 0 1;
    }

    #search-bar {
        border: heavy $secondary;
        padding: 0 1;
        margin-bottom: 1;
        height: 4;
    }

    #results {
        height: 1fr;
        border: tall $surface;
        padding: 0 1;
    }

    .pane-title {
        text-style: bold;
        margin-bottom: 1;
    }
    """

    input_state = reactive("normal")
    search_query = reactive("")
    selected_index = reactive(0)
    order_selected_index = reactive(None)

    BINDINGS = [
        ("tab", "cycle_results(1)", "Next result"),
        ("up", "move(-1)", "Up"),
        ("down", "move(1)", "Down"),
        ("enter", "register_selected", "Add item"),
        ("backspace", "backspace_query", "Delete query char"),
        Binding("ctrl+b", "finalize('bill')", "Print bill", priority=True),
        Binding("ctrl+k", "finalize('kot')", "Print KOT", priority=True),
        Binding("ctrl+x", "clear_order", "Clear order"),
        Binding("ctrl+a", "admin", "Admin"),
        ("escape", "cancel_active_mode", "Exit search"),
        ("ctrl+c", "cancel_active_mode", "Exit search"),
        ("ctrl+q", "quit", "Quit"),
    ]

    def __init__(
        self,
        backend: Backend,
        checkout: Checkout | None = None,
        gate: AdminGate | None = None,
        printer: Callable[[list[str]], None] = print_lines,
        export_dir: str = EXPORT_DIR,
        check_printer: bool = True,
    ) -> None:
        super().__init__()
        self.backend = backend
        self.checkout = checkout or Checkout(backend)
        self.gate = gate or AdminGate()
        self.printer = printer
        self.export_dir = export_dir
        self.check_printer = check_printer
        self.order = Order()
        self.menu: list[MenuItem] = []
        self.next_number = ""
        self.system_status = ""
        self.last_bill: BillRecord | None = None

    def compose(self) -> ComposeResult:
        yield Header()
        with Horizontal(id="main-layout"):
            with Vertical(id="order-pane"):
                yield Static("Current Order", classes="pane-title")
                yield Static(id="order-info")
                yield Static("(no items yet)", id="order-list")
                yield Static(id="order-totals")
            with Vertical(id="search-pane"):
                yield Static(id="search-bar")
                yield Static(id="results")

    def on_mount(self) -> None:
        if self.check_printer:
            _, msg = check_printer_dependencies()
            self.system_status = msg
            logger.info("printer_status %s", msg)
        self._load_menu()
        self._refresh_next_number()
        self._refresh_all()

    # -----------------------------
    # Keys
    # -----------------------------
    def on_key(self, event: Key) -> None:
        if isinstance(self.screen, ModalScreen):
            return
        if not event.is_printable or not event.character:
            return

        char = event.character
        if self.input_state == "active":
            self.search_query += char
            self.selected_index = 0
            self._refresh_search()
            event.stop()
            return

        handlers: dict[str, Callable[[], None]] = {
            "/": self._start_search,
            "s": self._start_search,
            "j": partial(self._move_order_selection, 1),
            "k": partial(self._move_order_selection, -1),
            "+": partial(self._change_selected_quantity, 1),
            "=": partial(self._change_selected_quantity, 1),
            "-": partial(self._change_selected_quantity, -1),
            "d": self._delete_selected_line,
            "o": self._toggle_order_type,
            "c": self._edit_cashier,
            "n": self._edit_customer,
            "a": self._start_add_menu_item,
            "h": self._open_history,
        }
        handler = handlers.get(char.lower() if char.isalpha() else char)
        if handler is None:
            return
        handler()
        event.stop()

    def action_cancel_active_mode(self) -> None:
        if isinstance(self.screen, ModalScreen):
            return
        if self.input_state == "normal":
            return
        self.input_state = "normal"
        self.search_query = ""
        self.selected_index = 0
        self._refresh_search()

    def action_move(self, delta: int) -> None:
        if isinstance(self.screen, ModalScreen):
            return
        if self.input_state == "active":
            self.action_cycle_results(delta)
        else:
            self._move_order_selection(delta)

    def action_cycle_results(self, delta: int) -> None:
        if isinstance(self.screen, ModalScreen):
            return
        if self.input_state != "active":
            return
        results = self._filtered_results()
        if not results:
            self.selected_index = 0
            self._refresh_results(results)
            return
        self.selected_index = (self.selected_index + delta) % len(results)
        self._refresh_results(results)

    def action_register_selected(self) -> None:
        if isinstance(self.screen, ModalScreen):
            return
        if self.input_state != "active":
            return
        results = self._filtered_results()
        if not results:
            return
        item = results[self.selected_index % len(results)]
        self.order.add(item)
        self.order_selected_index = next(
            idx for idx, line in enumerate(self.order.lines) if line.item_id == item.id
        )
        self._refresh_order()

    def action_backspace_query(self) -> None:
        if isinstance(self.screen, ModalScreen):
            return
        if self.input_state != "active" or not self.search_query:
            return
        self.search_query = self.search_query[:-1]
        self.selected_index = 0
        self._refresh_search()

    def action_clear_order(self) -> None:
        if isinstance(self.screen, ModalScreen):
            return
        self.order.clear()
        self.order_selected_index = None
        self.system_status = "Order cleared"
        self._refresh_all()

    def action_finalize(self, kind: str) -> None:
        if isinstance(self.screen, ModalScreen):
            return
        if self.input_state != "normal":
            self._set_status("Print only in NORMAL mode (Ctrl+C to exit search)")
            return
        if self.order.is_empty:
            self._set_status("Add items to order first!")
            return

        try:
            bill = self.checkout.finalize(self.order)
        except PosError as exc:
            # The order stays on screen so the sale can be retried.
            logger.error("finalize_failed kind=%s error=%s", kind, exc)
            self._set_status(f"Not saved, order kept: {exc}")
            return

        self.last_bill = bill
        self.order.clear()
        self.order_selected_index = None
        self._print_ticket(bill, kind)
        self._refresh_next_number()
        self._refresh_all()

    def action_admin(self) -> None:
        if isinstance(self.screen, ModalScreen):
            return
        if self.gate.authenticated:
            self._open_admin()
            return
        self.push_screen(
            PromptModal("Admin Login", "Enter admin password", secret=True),
            self._on_admin_password,
        )

    # -----------------------------
    # Order editing
    # -----------------------------
    def _start_search(self) -> None:
        self._load_menu()
        self.input_state = "active"
        self.search_query = ""
        self.selected_index = 0
        self._refresh_search()

    def _move_order_selection(self, delta: int) -> None:
        if self.order.is_empty:
            return
        count = len(self.order.lines)
        if self.order_selected_index is None:
            self.order_selected_index = 0 if delta > 0 else count - 1
        else:
            self.order_selected_index = (self.order_selected_index + delta) % count
        self._refresh_order()

    def _change_selected_quantity(self, delta: int) -> None:
        idx = self._selected_index()
        if idx is None:
            return
        if self.order.change_quantity(idx, delta) is None:
            self._clamp_selection(idx)
        self._refresh_order()

    def _delete_selected_line(self) -> None:
        idx = self._selected_index()
        if idx is None:
            return
        self.order.remove(idx)
        self._clamp_selection(idx)
        self._refresh_order()

    def _toggle_order_type(self) -> None:
        try:
            current = ORDER_TYPES.index(self.order.order_type)
        except ValueError:
            current = -1
        self.order.order_type = ORDER_TYPES[(current + 1) % len(ORDER_TYPES)]
        self._refresh_order()

    def _edit_cashier(self) -> None:
        self.push_screen(
            PromptModal("Cashier", initial=self.order.cashier, validate=_validate_required("Cashier")),
            partial(self._apply_order_field, "cashier"),
        )

    def _edit_customer(self) -> None:
        self.push_screen(
            PromptModal("Customer Name", "Optional", initial=self.order.customer_name),
            partial(self._apply_order_field, "customer_name"),
        )

    def _apply_order_field(self, field_name: str, value: str | None) -> None:
        if value is None:
            return
        setattr(self.order, field_name, value)
        self._refresh_order()

    def _start_add_menu_item(self) -> None:
        self.push_screen(
            PromptModal("New Menu Item", "Item name", validate=_validate_required("Item name")),
            self._on_new_item_name,
        )

    def _on_new_item_name(self, name: str | None) -> None:
        if not name:
            return
        self.push_screen(
            PromptModal("New Menu Item", f"Price for {name}", validate=_validate_price),
            partial(self._on_new_item_price, name),
        )

    def _on_new_item_price(self, name: str, price: str | None) -> None:
        if price is None:
            return
        self.push_screen(
            PromptModal("New Menu Item", f"Category ({', '.join(CATEGORIES)})", initial=CATEGORIES[0]),
            partial(self._on_new_item_category, name, price),
        )

    def _on_new_item_category(self, name: str, price: str, category: str | None) -> None:
        if category is None:
            return
        try:
            item = self.backend.catalog.create(name, price, category or CATEGORIES[0])
        except PosError as exc:
            logger.error("menu_item_create_failed name=%r error=%s", name, exc)
            self._set_status(f"Could not add {name}: {exc}")
            return
        self.order.add(item)
        self.order_selected_index = len(self.order.lines) - 1
        self._load_menu()
        self.system_status = f"Added {item.name} to menu and order"
        self._refresh_all()

    def _selected_index(self) -> int | None:
        idx = self.order_selected_index
        if idx is None or not (0 <= idx < len(self.order.lines)):
            return None
        return idx

    def _clamp_selection(self, idx: int) -> None:
        if self.order.is_empty:
            self.order_selected_index = None
        else:
            self.order_selected_index = min(idx, len(self.order.lines) - 1)

    # -----------------------------
    # History, admin, printing
    # -----------------------------
    def _open_history(self) -> None:
        bills = load_bills(self.backend.ledger)
        stats = compute_stats(bills, self.checkout.clock().date().isoformat())
        self.push_screen(HistoryModal(bills, stats, on_reprint=self._reprint))

    def _reprint(self, bill: BillRecord, kind: str) -> None:
        label = "KOT" if kind == "kot" else "Bill"
        try:
            self.printer(self.checkout.reprint(bill, kind))
        except Exception as exc:
            logger.warning("reprint_failed number=%s kind=%s error=%r", bill.bill_number, kind, exc)
            self.system_status = f"Reprint of {label} {bill.bill_number} failed: {exc}"
        else:
            self.system_status = f"Reprinted {label} {bill.bill_number}"
        self.notify(self.system_status)

    def _print_ticket(self, bill: BillRecord, kind: str) -> None:
        label = "KOT" if kind == "kot" else "Bill"
        try:
            self.printer(self.checkout.render(bill, kind))
        except Exception as exc:
            logger.warning("print_failed number=%s kind=%s error=%r", bill.bill_number, kind, exc)
            self.system_status = f"Saved {label} {bill.bill_number} but print failed: {exc}"
            return
        self.system_status = f"Saved + printed {label} {bill.bill_number}"

    def _on_admin_password(self, password: str | None) -> None:
        if password is None:
            return
        try:
            ok = self.gate.login(password)
        except AdminLockedError as exc:
            self._set_status(str(exc))
            return
        if ok:
            self._open_admin()
        elif self.gate.seconds_locked():
            self._set_status(
                f"Account locked for {self.gate.lockout_seconds:g} seconds due to too many failed attempts."
            )
        else:
            self._set_status(f"Invalid password. {self.gate.attempts_remaining} attempts remaining.")

    def _open_admin(self) -> None:
        self.push_screen(AdminModal(self.backend, self.gate, self.export_dir), self._after_admin)

    def _after_admin(self, _: None) -> None:
        self._refresh_next_number()
        self._refresh_all()

    # -----------------------------
    # Data loading
    # -----------------------------
    def _load_menu(self) -> None:
        try:
            self.menu = self.backend.catalog.list()
        except PosError as exc:
            logger.warning("menu_load_failed error=%s", exc)
            self.system_status = f"Menu unavailable: {exc}"

    def _refresh_next_number(self) -> None:
        self.next_number = self.checkout.display_number()

    def _filtered_results(self) -> list[MenuItem]:
        if not self.search_query:
            return self.menu
        q = self.search_query.lower()
        return [item for item in self.menu if q in item.name.lower() or q in item.category.lower()]

    # -----------------------------
    # Rendering
    # -----------------------------
    def _set_status(self, message: str) -> None:
        self.system_status = message
        self._refresh_search()

    def _refresh_all(self) -> None:
        self._refresh_order()
        self._refresh_search()

    def _visible_rows(self, widget: Static) -> int:
        height = widget.size.height
        if height <= 0:
            return 8
        return max(1, height)

    def _window_bounds(self, total: int, rows: int, selected: int | None) -> tuple[int, int]:
        if total <= 0:
            return (0, 0)
        rows = max(1, rows)
        if total <= rows:
            return (0, total)
        start = 0 if selected is None else max(0, min(selected - rows // 2, total - rows))
        return (start, start + rows)

    def _refresh_order(self) -> None:
        try:
            info = self.query_one("#order-info", Static)
            listing = self.query_one("#order-list", Static)
            totals_widget = self.query_one("#order-totals", Static)
        except NoMatches:
            return

        customer = self.order.customer_name or "-"
        info.update(
            f"Bill No.: {self.next_number}   Order Type: {self.order.order_type}\n"
            f"Cashier: {self.order.cashier}   Customer: {customer}"
        )
        totals_widget.update(format_totals(self.checkout.preview(self.order), self.order.total_quantity()))

        if self.order.is_empty:
            self.order_selected_index = None
            listing.update("(no items yet)")
            return

        if self.order_selected_index is not None and self.order_selected_index >= len(self.order.lines):
            self.order_selected_index = len(self.order.lines) - 1

        start, end = self._window_bounds(
            len(self.order.lines), self._visible_rows(listing), self.order_selected_index
        )
        lines = Text()
        if start > 0:
            lines.append("⋮\n", style="dim")
        for idx in range(start, end):
            if idx > start:
                lines.append("\n")
            pointer = "➤ " if idx == self.order_selected_index else "  "
            lines.append(pointer)
            lines.append(f"{idx + 1}. ")
            lines.append_text(format_order_line(self.order.lines[idx]))
        if end < len(self.order.lines):
            lines.append("\n⋮", style="dim")
        listing.update(lines)

    def _refresh_search(self) -> None:
        self._refresh_search_bar()
        if self.input_state == "normal":
            self._refresh_results([])
            return
        self._refresh_results(self._filtered_results())

    def _refresh_search_bar(self) -> None:
        try:
            bar = self.query_one("#search-bar", Static)
        except NoMatches:
            return
        if self.input_state == "normal":
            status = self.system_status or "Ready"
            bar.update(
                "/ search  J/K select  +/- qty  D delete  O type  C cashier  N customer\n"
                "A new item  H history  Ctrl+B bill  Ctrl+K KOT  Ctrl+X clear  Ctrl+A admin\n"
                f"{status}"
            )
            return
        text = Text()
        text.append("Search", style="bold")
        text.append(f": {self.search_query}")
        bar.update(text)

    def _refresh_results(self, results: list[MenuItem]) -> None:
        try:
            results_widget = self.query_one("#results", Static)
        except NoMatches:
            return
        if self.input_state == "normal":
            results_widget.update("")
            return
        if not results:
            results_widget.update("No results")
            return
        if self.selected_index >= len(results):
            self.selected_index = 0

        start, end = self._window_bounds(len(results), self._visible_rows(results_widget), self.selected_index)
        lines = Text()
        if start > 0:
            lines.append("⋮\n", style="dim")
        for idx in range(start, end):
            if idx > start:
                lines.append("\n")
            item = results[idx]
            pointer = "➤ " if idx == self.selected_index else "  "
            lines.append(pointer)
            lines.append(f" {item.category[:1] or '?'} ", style=category_style(item.category))
            lines.append(f" {item.name}  {format_money(item.price)}")
        if end < len(results):
            lines.append("\n⋮", style="dim")
        results_widget.update(lines)
