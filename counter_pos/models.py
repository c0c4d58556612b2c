"""Domain models for counter-pos."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from decimal import Decimal, InvalidOperation
from typing import Any, Iterable

from counter_pos.errors import ValidationError

CENT = Decimal("0.01")
ZERO = Decimal("0.00")


def to_money(value: object, field_name: str = "amount") -> Decimal:
    """Coerce a price-like value to a two-place Decimal."""
    if isinstance(value, bool):
        raise ValidationError(f"{field_name} must be a number, got {value!r}")
    try:
        amount = value if isinstance(value, Decimal) else Decimal(str(value).strip())
    except (InvalidOperation, ValueError, TypeError) as exc:
        raise ValidationError(f"{field_name} must be a number, got {value!r}") from exc
    if not amount.is_finite():
        raise ValidationError(f"{field_name} must be finite, got {value!r}")
    try:
        return amount.quantize(CENT)
    except InvalidOperation as exc:
        raise ValidationError(f"{field_name} is out of range, got {value!r}") from exc


def _non_negative_money(value: object, field_name: str) -> Decimal:
    amount = to_money(value, field_name)
    if amount < 0:
        raise ValidationError(f"{field_name} must not be negative, got {amount}")
    return amount


def _positive_quantity(value: object) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationError(f"quantity must be an integer, got {value!r}")
    if value <= 0:
        raise ValidationError(f"quantity must be positive, got {value}")
    return value


def _required_text(value: object, field_name: str) -> str:
    text = str(value).strip() if value is not None else ""
    if not text:
        raise ValidationError(f"{field_name} is required")
    return text


@dataclass(frozen=True)
class MenuItem:
    """A catalog entry. Bills copy its name and price, never the item itself."""

    id: int
    name: str
    price: Decimal
    category: str = ""

    def __post_init__(self) -> None:
        object.__setattr__(self, "name", _required_text(self.name, "name"))
        object.__setattr__(self, "price", _non_negative_money(self.price, "price"))
        object.__setattr__(self, "category", (self.category or "").strip())

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "name": self.name, "price": float(self.price), "category": self.category}

    @classmethod
    def from_dict(cls, payload: dict[str, Any]) -> MenuItem:
        try:
            return cls(
                id=int(payload["id"]),
                name=payload["name"],
                price=payload["price"],
                category=payload.get("category", ""),
            )
        except (KeyError, TypeError, ValueError) as exc:
            if isinstance(exc, ValidationError):
                raise
            raise ValidationError(f"malformed menu item: {payload!r}") from exc


@dataclass
class OrderLine:
    """An in-progress order row with a mutable quantity."""

    item_id: int | None
    name: str
    price: Decimal
    category: str = ""
    quantity: int = 1

    def __post_init__(self) -> None:
        self.name = _required_text(self.name, "name")
        self.price = _non_negative_money(self.price, "price")
        self.quantity = _positive_quantity(self.quantity)

    @classmethod
    def from_menu_item(cls, item: MenuItem, quantity: int = 1) -> OrderLine:
        return cls(item_id=item.id, name=item.name, price=item.price, category=item.category, quantity=quantity)

    @property
    def amount(self) -> Decimal:
        return (self.price * self.quantity).quantize(CENT)


@dataclass(frozen=True)
class BillLineItem:
    """A priced row copied into a finalized bill."""

    name: str
    quantity: int
    price: Decimal
    amount: Decimal | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "name", _required_text(self.name, "name"))
        object.__setattr__(self, "quantity", _positive_quantity(self.quantity))
        object.__setattr__(self, "price", _non_negative_money(self.price, "price"))
        if self.amount is None:
            object.__setattr__(self, "amount", (self.price * self.quantity).quantize(CENT))
        else:
            object.__setattr__(self, "amount", _non_negative_money(self.amount, "amount"))

    @classmethod
    def from_order_line(cls, line: OrderLine) -> BillLineItem:
        return cls(name=line.name, quantity=line.quantity, price=line.price)

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "quantity": self.quantity,
            "price": float(self.price),
            "amount": float(self.amount),
        }


@dataclass(frozen=True)
class Totals:
    """Derived money fields of an order."""

    subtotal: Decimal
    cgst: Decimal = ZERO
    sgst: Decimal = ZERO
    round_off: Decimal = ZERO
    grand_total: Decimal = ZERO


@dataclass(frozen=True)
class BillRecord:
    """A finalized bill as stored in the ledger.

    ``grand_total`` is kept exactly as charged; it is never recomputed from
    ``items`` when the bill is read back.
    """

    bill_number: str
    date: str
    time: str
    order_type: str
    cashier: str
    items: tuple[BillLineItem, ...]
    subtotal: Decimal
    grand_total: Decimal
    customer_name: str = ""
    cgst: Decimal = ZERO
    sgst: Decimal = ZERO
    round_off: Decimal = ZERO
    id: int | None = field(default=None, compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "bill_number", _required_text(self.bill_number, "bill_number"))
        object.__setattr__(self, "date", _required_text(self.date, "date"))
        object.__setattr__(self, "time", (self.time or "").strip())
        object.__setattr__(self, "order_type", (self.order_type or "").strip())
        object.__setattr__(self, "cashier", (self.cashier or "").strip())
        object.__setattr__(self, "customer_name", (self.customer_name or "").strip())

        items = tuple(self.items)
        if not items:
            raise ValidationError("a bill needs at least one item")
        for item in items:
            if not isinstance(item, BillLineItem):
                raise ValidationError(f"bill items must be BillLineItem, got {type(item).__name__}")
        object.__setattr__(self, "items", items)

        for name in ("subtotal", "grand_total", "cgst", "sgst"):
            object.__setattr__(self, name, _non_negative_money(getattr(self, name), name))
        object.__setattr__(self, "round_off", to_money(self.round_off, "round_off"))

    @classmethod
    def from_order(
        cls,
        *,
        bill_number: str,
        date: str,
        time: str,
        order_type: str,
        cashier: str,
        customer_name: str,
        lines: Iterable[OrderLine],
        totals: Totals,
    ) -> BillRecord:
        return cls(
            bill_number=bill_number,
            date=date,
            time=time,
            order_type=order_type,
            cashier=cashier,
            customer_name=customer_name,
            items=tuple(BillLineItem.from_order_line(line) for line in lines),
            subtotal=totals.subtotal,
            cgst=totals.cgst,
            sgst=totals.sgst,
            round_off=totals.round_off,
            grand_total=totals.grand_total,
        )

    @property
    def total_quantity(self) -> int:
        return sum(item.quantity for item in self.items)

    def with_id(self, bill_id: int) -> BillRecord:
        return replace(self, id=bill_id)

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "billNumber": self.bill_number,
            "date": self.date,
            "time": self.time,
            "orderType": self.order_type,
            "cashier": self.cashier,
            "customerName": self.customer_name,
            "items": [item.to_dict() for item in self.items],
            "subtotal": float(self.subtotal),
            "cgst": float(self.cgst),
            "sgst": float(self.sgst),
            "roundOff": float(self.round_off),
            "grandTotal": float(self.grand_total),
        }
        if self.id is not None:
            payload["id"] = self.id
        return payload

    @classmethod
    def from_dict(cls, payload: dict[str, Any]) -> BillRecord:
        try:
            items = tuple(
                BillLineItem(
                    name=item["name"],
                    quantity=item["quantity"],
                    price=item["price"],
                    amount=item.get("amount"),
                )
                for item in payload["items"]
            )
            raw_id = payload.get("id")
            return cls(
                bill_number=payload["billNumber"],
                date=payload["date"],
                time=payload.get("time", ""),
                order_type=payload.get("orderType", ""),
                cashier=payload.get("cashier", ""),
                customer_name=payload.get("customerName") or "",
                items=items,
                subtotal=payload["subtotal"],
                cgst=payload.get("cgst") or 0,
                sgst=payload.get("sgst") or 0,
                round_off=payload.get("roundOff") or 0,
                grand_total=payload["grandTotal"],
                id=int(raw_id) if raw_id is not None else None,
            )
        except (KeyError, TypeError, AttributeError) as exc:
            raise ValidationError(f"malformed bill payload: {exc}") from exc
