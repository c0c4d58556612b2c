"""Bill totals: subtotal, taxes, round-off and grand total.

Inputs are assumed to be validated already (see ``counter_pos.order``);
nothing here rejects negative prices or quantities.

Grand totals are rounded to whole currency units with ROUND_HALF_UP, so
33.50 becomes 34 and 33.49 becomes 33.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable, Protocol

from counter_pos.config import CGST_RATE, SGST_RATE, TAX_ENABLED
from counter_pos.models import CENT, ZERO, Totals

WHOLE_UNIT = Decimal("1")


class PricedLine(Protocol):
    price: Decimal
    quantity: int


@dataclass(frozen=True)
class TaxPolicy:
    """Whether CGST/SGST and round-off are applied.

    Disabled, the grand total is just the rounded subtotal and the tax and
    round-off fields are zero.
    """

    enabled: bool = False
    cgst_rate: Decimal = Decimal(CGST_RATE)
    sgst_rate: Decimal = Decimal(SGST_RATE)


DEFAULT_TAX_POLICY = TaxPolicy(enabled=TAX_ENABLED)


def round_to_unit(value: Decimal) -> Decimal:
    return value.quantize(WHOLE_UNIT, rounding=ROUND_HALF_UP).quantize(CENT)


def compute_subtotal(lines: Iterable[PricedLine]) -> Decimal:
    total = sum((Decimal(line.price) * line.quantity for line in lines), ZERO)
    return total.quantize(CENT, rounding=ROUND_HALF_UP)


def compute_totals(lines: Iterable[PricedLine], policy: TaxPolicy = DEFAULT_TAX_POLICY) -> Totals:
    subtotal = compute_subtotal(lines)
    if not policy.enabled:
        return Totals(subtotal=subtotal, grand_total=round_to_unit(subtotal))

    cgst = (subtotal * policy.cgst_rate).quantize(CENT, rounding=ROUND_HALF_UP)
    sgst = (subtotal * policy.sgst_rate).quantize(CENT, rounding=ROUND_HALF_UP)
    before_round = subtotal + cgst + sgst
    grand_total = round_to_unit(before_round)
    return Totals(
        subtotal=subtotal,
        cgst=cgst,
        sgst=sgst,
        round_off=(grand_total - before_round).quantize(CENT),
        grand_total=grand_total,
    )


def total_quantity(lines: Iterable[PricedLine]) -> int:
    return sum(line.quantity for line in lines)
