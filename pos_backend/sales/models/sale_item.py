# sales/models/sale_item.py

"""
SALE LINES

SaleItem and SaleItemAdditional rows belong to their Sale: they are written,
changed and deleted only by the sale engine, inside the same transaction as
their parent.
"""

from __future__ import annotations

from decimal import Decimal

from django.db import models

from products.models import Additional, Product

from .sale import Sale


class SaleItem(models.Model):
    sale = models.ForeignKey(
        Sale,
        on_delete=models.CASCADE,
        related_name="items",
    )

    product = models.ForeignKey(
        Product,
        on_delete=models.PROTECT,
        related_name="sale_items",
    )

    quantity = models.PositiveIntegerField()

    # price snapshot at posting time
    unit_price = models.DecimalField(max_digits=10, decimal_places=2)

    is_delivery = models.BooleanField(default=False)

    # product tracked stock at posting time; edits and voids move stock only then
    stock_tracked = models.BooleanField(default=True)

    class Meta:
        ordering = ["id"]

    def __str__(self):
        return f"{self.product} x {self.quantity}"

    @property
    def base_amount(self) -> Decimal:
        return Decimal(self.unit_price) * self.quantity


class SaleItemAdditional(models.Model):
    sale_item = models.ForeignKey(
        SaleItem,
        on_delete=models.CASCADE,
        related_name="additionals",
    )

    additional = models.ForeignKey(
        Additional,
        on_delete=models.PROTECT,
        related_name="sale_item_additionals",
    )

    quantity = models.PositiveIntegerField(default=1)
    unit_price = models.DecimalField(max_digits=10, decimal_places=2)

    class Meta:
        ordering = ["id"]

    def __str__(self):
        return f"{self.additional} x {self.quantity}"
