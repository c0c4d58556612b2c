"""The order being built at the counter, before it becomes a bill."""

from __future__ import annotations

from dataclasses import dataclass, field

from counter_pos.config import DEFAULT_CASHIER
from counter_pos.constant import ORDER_TYPES
from counter_pos.errors import ValidationError
from counter_pos.models import MenuItem, OrderLine, Totals
from counter_pos.totals import DEFAULT_TAX_POLICY, TaxPolicy, compute_totals, total_quantity


@dataclass
class Order:
    """Accumulates order lines; adding the same menu item again bumps its quantity."""

    cashier: str = DEFAULT_CASHIER
    order_type: str = ORDER_TYPES[0]
    customer_name: str = ""
    lines: list[OrderLine] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.lines

    def add(self, item: MenuItem, quantity: int = 1) -> OrderLine:
        if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity <= 0:
            raise ValidationError(f"quantity must be a positive integer, got {quantity!r}")
        for line in self.lines:
            if line.item_id == item.id:
                line.quantity += quantity
                return line
        line = OrderLine.from_menu_item(item, quantity)
        self.lines.append(line)
        return line

    def change_quantity(self, index: int, delta: int) -> OrderLine | None:
        """Adjust a line's quantity; the line is dropped when it reaches zero."""
        line = self._line_at(index)
        new_quantity = line.quantity + delta
        if new_quantity <= 0:
            del self.lines[index]
            return None
        line.quantity = new_quantity
        return line

    def remove(self, index: int) -> OrderLine:
        line = self._line_at(index)
        del self.lines[index]
        return line

    def clear(self) -> None:
        self.lines.clear()
        self.customer_name = ""

    def totals(self, policy: TaxPolicy = DEFAULT_TAX_POLICY) -> Totals:
        return compute_totals(self.lines, policy)

    def total_quantity(self) -> int:
        return total_quantity(self.lines)

    def _line_at(self, index: int) -> OrderLine:
        if not (0 <= index < len(self.lines)):
            raise IndexError(f"no order line at position {index}")
        return self.lines[index]
