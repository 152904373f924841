# products/models/additional.py

"""
ADD-ONS (ADDITIONALS)

- AdditionalCategory groups add-ons ("Sauces", "Extras").
- Additional is one selectable add-on with its own price.
- ProductAdditionalCategory is the eligibility link: an add-on may only be
  attached to a sale line when its category is linked to the line's product.
"""

from decimal import Decimal

from django.core.exceptions import ValidationError
from django.db import models


class AdditionalCategory(models.Model):
    name = models.CharField(max_length=255, unique=True)
    description = models.TextField(null=True, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["name"]
        verbose_name_plural = "additional categories"

    def __str__(self):
        return self.name


class Additional(models.Model):
    name = models.CharField(max_length=255)
    price = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal("0.00"))

    category = models.ForeignKey(
        AdditionalCategory,
        on_delete=models.PROTECT,
        related_name="additionals",
    )

    suspended = models.BooleanField(default=False)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["name"]

    def __str__(self):
        return f"{self.name} ({self.category.name})"

    def clean(self):
        if self.price is None or Decimal(self.price) < 0:
            raise ValidationError("Price cannot be negative")


class ProductAdditionalCategory(models.Model):
    product = models.ForeignKey(
        "products.Product",
        on_delete=models.CASCADE,
        related_name="additional_category_links",
    )
    additional_category = models.ForeignKey(
        AdditionalCategory,
        on_delete=models.PROTECT,
        related_name="product_links",
    )

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        constraints = [
            models.UniqueConstraint(
                fields=["product", "additional_category"],
                name="uniq_product_additional_category",
            )
        ]

    def __str__(self):
        return f"{self.product_id} -> {self.additional_category_id}"
