# sales/models/settings.py

from django.db import models


class SalesSettings(models.Model):
    """
    Single-row application preferences for the POS screens.
    """

    recent_sales_limit = models.PositiveIntegerField(default=10)
    recent_sales_enabled = models.BooleanField(default=True)
    dark_mode = models.BooleanField(default=False)

    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = "sales settings"
        verbose_name_plural = "sales settings"

    def __str__(self):
        return "POS settings"

    @classmethod
    def load(cls) -> "SalesSettings":
        obj = cls.objects.order_by("pk").first()
        if obj is None:
            obj = cls.objects.create()
        return obj
