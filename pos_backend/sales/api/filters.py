# sales/api/filters.py

"""
SALES LIST FILTERS

?start=YYYY-MM-DD|ISO datetime
?end=YYYY-MM-DD|ISO datetime   (date-only end includes the whole day)
?payment_method=<id>
?product=<id>                  sales with at least one line of that product
"""

from __future__ import annotations

import django_filters
from rest_framework.exceptions import ValidationError

from sales.models import Sale
from sales.services.reports import ReportPeriodError, resolve_period


class SaleFilter(django_filters.FilterSet):
    start = django_filters.CharFilter(method="filter_start")
    end = django_filters.CharFilter(method="filter_end")
    payment_method = django_filters.NumberFilter(field_name="payment_method_id")
    product = django_filters.NumberFilter(method="filter_product")

    class Meta:
        model = Sale
        fields = ["start", "end", "payment_method", "product"]

    def _period(self, **kwargs):
        try:
            return resolve_period(**kwargs)
        except ReportPeriodError as exc:
            raise ValidationError({"detail": str(exc)}) from exc

    def filter_start(self, queryset, name, value):
        return self._period(start=value).apply(queryset)

    def filter_end(self, queryset, name, value):
        return self._period(end=value).apply(queryset)

    def filter_product(self, queryset, name, value):
        return queryset.filter(items__product_id=value).distinct()
