# sales/services/pricing.py

"""
PRICING CALCULATOR (PURE)

line subtotal = unit_price * quantity + sum(addon.unit_price * addon.quantity)
sale total    = sum(line subtotals)

All amounts are Decimal quantized to 2dp (ROUND_HALF_UP). No side effects:
the same functions price a new request, an edited sale and the stored
snapshots checked by validate_sale_totals (prefetch add-ons for those).
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable

TWOPLACES = Decimal("0.01")


def money(v) -> Decimal:
    if v is None or v == "":
        return Decimal("0.00")
    return Decimal(str(v)).quantize(TWOPLACES, rounding=ROUND_HALF_UP)


def addon_amount(addon) -> Decimal:
    return money(money(addon.unit_price) * int(addon.quantity))


def line_subtotal(line) -> Decimal:
    """
    line: anything with unit_price, quantity and an iterable `additionals`
    whose items have unit_price and quantity.
    """
    additionals = line.additionals
    if hasattr(additionals, "all"):
        # related manager on a SaleItem
        additionals = additionals.all()

    base = money(line.unit_price) * int(line.quantity)
    extras = sum((addon_amount(a) for a in additionals), Decimal("0.00"))
    return money(base + extras)


def sale_total(lines: Iterable) -> Decimal:
    return money(sum((line_subtotal(line) for line in lines), Decimal("0.00")))
