"""Ticket text layout and Rich helpers for the order screen."""

from __future__ import annotations

from datetime import date as date_cls
from decimal import Decimal

from rich.text import Text

from counter_pos.config import (
    CURRENCY_SYMBOL,
    RECEIPT_WIDTH_CHARS,
    RESTAURANT_GSTIN,
    RESTAURANT_NAME,
    RESTAURANT_TAGLINE,
)
from counter_pos.models import BillRecord, OrderLine, Totals

_QTY_COL = 5
_PRICE_COL = 9
_AMOUNT_COL = 9
_KOT_QTY_COL = 6


def format_money(value: Decimal) -> str:
    return f"{value:.2f}"


def format_ticket_date(iso_date: str) -> str:
    """``2026-10-18`` -> ``18/10/26``; anything unparseable is returned unchanged."""
    try:
        return date_cls.fromisoformat(iso_date).strftime("%d/%m/%y")
    except ValueError:
        return iso_date


def _two_col(left: str, right: str, width: int) -> str:
    gap = max(1, width - len(left) - len(right))
    return f"{left}{' ' * gap}{right}"


def _divider(width: int, char: str = "-") -> str:
    return char * width


def _item_row(name: str, qty: str, price: str, amount: str, width: int) -> str:
    name_width = max(4, width - _QTY_COL - _PRICE_COL - _AMOUNT_COL)
    clipped = name if len(name) <= name_width else name[: name_width - 1] + "~"
    return f"{clipped:<{name_width}}{qty:>{_QTY_COL}}{price:>{_PRICE_COL}}{amount:>{_AMOUNT_COL}}"


def bill_lines(bill: BillRecord, width: int = RECEIPT_WIDTH_CHARS) -> list[str]:
    """Customer bill, one string per printed line."""
    lines = [
        RESTAURANT_NAME.center(width).rstrip(),
        _divider(width),
        RESTAURANT_TAGLINE.center(width).rstrip(),
        f"GSTIN - {RESTAURANT_GSTIN}".center(width).rstrip(),
        f"Name: {bill.customer_name}".rstrip(),
        _two_col(f"Date: {format_ticket_date(bill.date)}", f"Order Type: {bill.order_type}", width),
        bill.time,
        _two_col(f"Cashier: {bill.cashier}", f"Bill No.: {bill.bill_number}", width),
        _divider(width),
        _item_row("Item", "Qty.", "Price", "Amount", width),
        _divider(width),
    ]
    for item in bill.items:
        lines.append(_item_row(item.name, str(item.quantity), format_money(item.price), format_money(item.amount), width))
    lines.append(_divider(width))
    lines.append(_two_col(f"Total Qty: {bill.total_quantity}", f"Sub {format_money(bill.subtotal)}", width))

    # Tax rows only appear on bills that were charged tax.
    if bill.cgst or bill.sgst:
        lines.append(f"CGST {format_money(bill.cgst)}".rjust(width))
        lines.append(f"SGST {format_money(bill.sgst)}".rjust(width))
    if bill.round_off:
        sign = "+" if bill.round_off > 0 else ""
        lines.append(f"Round off {sign}{format_money(bill.round_off)}".rjust(width))

    lines.extend(
        [
            _divider(width, "="),
            _two_col("Grand Total", f"{CURRENCY_SYMBOL} {format_money(bill.grand_total)}", width),
            _divider(width, "="),
            "THANK YOU !".center(width).rstrip(),
        ]
    )
    return lines


def kot_lines(bill: BillRecord, width: int = RECEIPT_WIDTH_CHARS) -> list[str]:
    """Kitchen order ticket: quantities and names, no prices."""
    lines = [
        f"{format_ticket_date(bill.date)} {bill.time}".rstrip(),
        f"KOT - {bill.bill_number}",
        f"Order Type: {bill.order_type}",
        _divider(width),
        f"{'Qty.':<{_KOT_QTY_COL}}Item",
        _divider(width),
    ]
    for item in bill.items:
        lines.append(f"{item.quantity:<{_KOT_QTY_COL}}{item.name}")
    lines.append(_divider(width))
    lines.append(f"Total Items: {bill.total_quantity}")
    return lines


def category_style(category: str) -> str:
    """Badge colour per menu category; unknown categories share one style."""
    styles = {
        "Tiffins": "bold #ffffff on #b23a48",
        "Combos": "bold #ffffff on #8a4fb5",
        "Fresh Juices": "bold #0b1f0f on #5fbf72",
        "Milkshakes": "bold #0b1f0f on #f0c05a",
        "Tea & Coffee": "bold #ffffff on #6b4a2f",
    }
    return styles.get(category, "bold #ffffff on #2f6db5")


def format_order_line(line: OrderLine) -> Text:
    text = Text()
    text.append(f"{line.quantity} x ", style="bold")
    text.append(line.name)
    text.append(f"  {format_money(line.amount)}", style="dim")
    return text


def format_totals(totals: Totals, quantity: int) -> Text:
    text = Text()
    text.append(f"Items: {quantity}   Sub {format_money(totals.subtotal)}")
    if totals.cgst or totals.sgst:
        text.append(f"   CGST {format_money(totals.cgst)}   SGST {format_money(totals.sgst)}")
    if totals.round_off:
        text.append(f"   Round off {format_money(totals.round_off)}")
    text.append("\n")
    text.append(f"Grand Total {CURRENCY_SYMBOL} {format_money(totals.grand_total)}", style="bold")
    return text
