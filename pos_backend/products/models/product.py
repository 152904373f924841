# products/models/product.py

from decimal import Decimal

from django.core.exceptions import ValidationError
from django.db import models


class Product(models.Model):
    """
    Represents a sellable product.

    STOCK MODEL (IMPORTANT):
    - stock IS NULL  -> untracked (unlimited); sales never touch it
    - stock >= 0     -> tracked count; only the sale engine writes it,
                        and only inside a sale transaction

    PRICING:
    - variable_price=False -> price is the catalog price, snapshotted into
      each sale line at posting time
    - variable_price=True  -> the cashier supplies the unit price per line;
      price is kept at 0.00 unless an admin sets a reference value
    """

    name = models.CharField(max_length=255, db_index=True)

    price = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal("0.00"))

    # label only: mirrors Category.name
    category = models.CharField(max_length=255, null=True, blank=True, db_index=True)

    stock = models.IntegerField(null=True, blank=True)

    variable_price = models.BooleanField(default=False)
    suspended = models.BooleanField(default=False)

    additional_categories = models.ManyToManyField(
        "products.AdditionalCategory",
        through="products.ProductAdditionalCategory",
        related_name="products",
        blank=True,
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["name"]

    def __str__(self):
        return self.name

    @property
    def tracks_stock(self) -> bool:
        return self.stock is not None

    def clean(self):
        if self.price is None or Decimal(self.price) < 0:
            raise ValidationError("Price cannot be negative")

        if not self.variable_price and Decimal(self.price or 0) <= 0:
            raise ValidationError("Fixed-price products need a price greater than zero")

        if self.stock is not None and self.stock < 0:
            raise ValidationError("Stock cannot be negative")
