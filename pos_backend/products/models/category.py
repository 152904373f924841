# products/models/category.py

from django.db import models


class Category(models.Model):
    """
    Display grouping for products (e.g. "Drinks", "Burgers").

    Products carry the category NAME as a plain label, so renaming or deleting
    a category never touches sale history.
    """

    name = models.CharField(max_length=255, unique=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["name"]
        verbose_name_plural = "categories"

    def __str__(self):
        return self.name
