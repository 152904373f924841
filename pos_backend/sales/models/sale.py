# sales/models/sale.py

from decimal import Decimal

from django.conf import settings
from django.db import models

User = settings.AUTH_USER_MODEL


class Sale(models.Model):
    """
    Represents a POS transaction.

    GUARANTEES:
    - total is derived by the pricing calculator, never supplied by a client
    - created by post_sale(), changed only by edit_sale(), removed only by
      void_sale() (which also gives the stock back)
    - line prices are snapshots; catalog price changes never rewrite history
    """

    user = models.ForeignKey(
        User,
        on_delete=models.PROTECT,
        related_name="sales",
        help_text="Cashier / admin who processed the sale",
    )

    payment_method = models.ForeignKey(
        "sales.PaymentMethod",
        on_delete=models.PROTECT,
        related_name="sales",
    )

    total = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))

    created_at = models.DateTimeField(auto_now_add=True, db_index=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at", "-id"]

    def __str__(self):
        return f"Sale #{self.pk} - {self.total}"
