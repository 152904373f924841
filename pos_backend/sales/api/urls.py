# sales/api/urls.py

"""
SALES API URLS

Rules:
- Explicit non-PK routes (reports, settings) MUST come BEFORE router URLs.
- payment-methods is registered before the root sale routes so it is never
  read as a sale <pk> (sale pks are also digits-only).

Provides (under /api/sales/):
- /                       sales list / post
- /<id>/                  retrieve / edit / void
- /payment-methods/       payment method CRUD
- /settings/              POS settings (admin)
- /reports/...            admin reports + xlsx export
"""

from django.urls import include, path
from rest_framework.routers import SimpleRouter

from sales.api.reports import (
    ExportXlsxView,
    RevenueByDayView,
    SalesSummaryView,
    TopProductsView,
    TrafficView,
)
from sales.api.settings import SalesSettingsView
from sales.api.viewsets.payment_method import PaymentMethodViewSet
from sales.api.viewsets.sale import SaleViewSet

router = SimpleRouter()
router.register(r"payment-methods", PaymentMethodViewSet, basename="payment-methods")
router.register(r"", SaleViewSet, basename="sales")

urlpatterns = [
    path("settings/", SalesSettingsView.as_view(), name="sales-settings"),
    path("reports/summary/", SalesSummaryView.as_view(), name="sales-reports-summary"),
    path("reports/revenue-by-day/", RevenueByDayView.as_view(), name="sales-reports-revenue-by-day"),
    path("reports/top-products/", TopProductsView.as_view(), name="sales-reports-top-products"),
    path("reports/traffic/", TrafficView.as_view(), name="sales-reports-traffic"),
    path("reports/export-xlsx/", ExportXlsxView.as_view(), name="sales-reports-export-xlsx"),
    path("", include(router.urls)),
]
