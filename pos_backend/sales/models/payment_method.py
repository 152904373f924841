# sales/models/payment_method.py

from django.db import models


class PaymentMethod(models.Model):
    """
    How a sale was paid (cash, PIX, card...). Managed by administrators.
    """

    name = models.CharField(max_length=100, unique=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["name"]

    def __str__(self):
        return self.name
