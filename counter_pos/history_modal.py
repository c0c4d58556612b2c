"""Bill history modal screen."""

from __future__ import annotations

from typing import Callable

from rich.text import Text
from textual.app import ComposeResult
from textual.containers import Container, Horizontal
from textual.reactive import reactive
from textual.screen import ModalScreen
from textual.widgets import Static

from counter_pos.config import CURRENCY_SYMBOL
from counter_pos.history import HistoryStats
from counter_pos.models import BillRecord
from counter_pos.rendering import bill_lines, format_money, format_ticket_date


class HistoryModal(ModalScreen[None]):
    """Browse stored bills, newest first, and reprint one."""

    BINDINGS = [
        ("escape", "close", "Close"),
        ("q", "close", "Close"),
        ("ctrl+c", "close", "Close"),
        ("j", "move_cursor(1)", "Next"),
        ("k", "move_cursor(-1)", "Previous"),
        ("up", "move_cursor(-1)", "Previous"),
        ("down", "move_cursor(1)", "Next"),
        ("p", "reprint('bill')", "Reprint bill"),
        ("t", "reprint('kot')", "Reprint KOT"),
    ]

    CSS = """
    HistoryModal {
        align: center middle;
        background: $background 60%;
    }

    #history-dialog {
        width: 110;
        height: 90%;
        border: round $secondary;
        background: $panel;
        padding: 1 2;
    }

    #history-stats {
        text-style: bold;
        margin-bottom: 1;
        color: white;
    }

    #history-list {
        width: 1fr;
        color: white;
    }

    #history-detail {
        width: 48;
        padding: 0 1;
        border-left: solid $secondary;
        color: white;
    }

    #history-help {
        margin-top: 1;
        color: #dddddd;
    }
    """

    cursor_index = reactive(0)

    def __init__(
        self,
        bills: list[BillRecord],
        stats: HistoryStats,
        on_reprint: Callable[[BillRecord, str], None],
    ) -> None:
        super().__init__()
        self.bills = bills
        self.stats = stats
        self.on_reprint = on_reprint

    def compose(self) -> ComposeResult:
        with Container(id="history-dialog"):
            yield Static(id="history-stats")
            with Horizontal():
                yield Static(id="history-list")
                yield Static(id="history-detail")
            yield Static("J/K/↑/↓ move, P reprint bill, T reprint KOT, Esc/q close", id="history-help")

    def on_mount(self) -> None:
        self._refresh_content()

    def action_close(self) -> None:
        self.dismiss()

    def action_move_cursor(self, delta: int) -> None:
        if not self.bills:
            return
        self.cursor_index = (self.cursor_index + delta) % len(self.bills)
        self._refresh_content()

    def action_reprint(self, kind: str) -> None:
        if not self.bills:
            return
        self.on_reprint(self.bills[self.cursor_index], kind)

    def _refresh_content(self) -> None:
        stats = self.query_one("#history-stats", Static)
        listing = self.query_one("#history-list", Static)
        detail = self.query_one("#history-detail", Static)

        stats.update(
            f"Today: {self.stats.today_bills} bills, {CURRENCY_SYMBOL} {format_money(self.stats.today_revenue)}"
            f"    All time: {self.stats.all_time_bills} bills, "
            f"{CURRENCY_SYMBOL} {format_money(self.stats.all_time_revenue)}"
        )

        if not self.bills:
            listing.update("(no bills yet)")
            detail.update("")
            return

        content = Text()
        for idx, bill in enumerate(self.bills):
            if idx > 0:
                content.append("\n")
            pointer = "➤ " if idx == self.cursor_index else "  "
            style = "bold white" if idx == self.cursor_index else "white"
            content.append(
                f"{pointer}#{bill.bill_number}  {format_ticket_date(bill.date)} {bill.time:<5}  "
                f"{bill.order_type:<8} {format_money(bill.grand_total):>9}",
                style=style,
            )
        listing.update(content)
        detail.update("\n".join(bill_lines(self.bills[self.cursor_index], width=44)))
