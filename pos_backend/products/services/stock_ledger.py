# products/services/stock_ledger.py

"""
STOCK LEDGER ADJUSTER

The only writer of Product.stock outside catalog management.

Deltas are signed per product (negative consumes, positive restores):
- post:  stock -= quantity
- edit:  stock -= (new_quantity - old_quantity)
- void:  stock += quantity

Untracked products (stock IS NULL) never appear in a write.

Concurrency:
- Callers hold select_for_update() locks from the snapshot loader.
- Every consuming write is also a conditional UPDATE (stock >= n); a zero
  row count means someone else got there first and the whole sale aborts.
"""

from __future__ import annotations

from collections import defaultdict
from typing import Iterable

from django.db import transaction
from django.db.models import F

from products.models import Product
from sales.services.exceptions import InsufficientStockError

from .catalog_snapshot import CatalogSnapshot


def post_deltas(lines: Iterable[tuple[int, int]]) -> dict[int, int]:
    """lines: (product_id, quantity)"""
    deltas: dict[int, int] = defaultdict(int)
    for product_id, quantity in lines:
        deltas[product_id] -= int(quantity)
    return dict(deltas)


def edit_deltas(changes: Iterable[tuple[int, int, int]]) -> dict[int, int]:
    """changes: (product_id, old_quantity, new_quantity)"""
    deltas: dict[int, int] = defaultdict(int)
    for product_id, old_quantity, new_quantity in changes:
        deltas[product_id] -= int(new_quantity) - int(old_quantity)
    return dict(deltas)


def void_deltas(lines: Iterable[tuple[int, int]]) -> dict[int, int]:
    """lines: (product_id, quantity)"""
    deltas: dict[int, int] = defaultdict(int)
    for product_id, quantity in lines:
        deltas[product_id] += int(quantity)
    return dict(deltas)


def _insufficient(name: str, available, requested: int) -> InsufficientStockError:
    available = int(available or 0)
    return InsufficientStockError(
        f"Insufficient stock for {name}. Available: {available}, Requested: {requested}",
        product_name=name,
        available=available,
        requested=requested,
    )


def check_availability(deltas: dict[int, int], snapshot: CatalogSnapshot) -> None:
    """
    Validate net consumption per product against the locked pre-operation stock.
    Two lines of the same product share one budget.
    """
    for product_id in sorted(deltas):
        delta = deltas[product_id]
        if delta >= 0:
            continue

        product = snapshot.product(product_id)
        if not product.tracks_stock:
            continue

        if -delta > product.stock:
            raise _insufficient(product.name, product.stock, -delta)


@transaction.atomic
def apply_stock_deltas(deltas: dict[int, int], snapshot: CatalogSnapshot) -> None:
    for product_id in sorted(deltas):
        delta = deltas[product_id]
        if delta == 0:
            continue

        product = snapshot.product(product_id)
        if not product.tracks_stock:
            continue

        if delta < 0:
            updated = Product.objects.filter(
                pk=product_id,
                stock__isnull=False,
                stock__gte=-delta,
            ).update(stock=F("stock") + delta)

            if updated != 1:
                current = (
                    Product.objects.filter(pk=product_id).values_list("stock", flat=True).first()
                )
                raise _insufficient(product.name, current, -delta)
        else:
            Product.objects.filter(pk=product_id, stock__isnull=False).update(
                stock=F("stock") + delta
            )
