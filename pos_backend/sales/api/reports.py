# sales/api/reports.py

"""
SALES REPORTS (ADMIN)

PATH: sales/api/reports.py

- GET /api/sales/reports/summary/          today / week / month totals and counts
- GET /api/sales/reports/revenue-by-day/   ?start&end
- GET /api/sales/reports/top-products/     ?start&end&limit
- GET /api/sales/reports/traffic/          ?start&end (by hour, by weekday 0=Sunday)
- GET /api/sales/reports/export-xlsx/      ?start&end&payment_method&product

Security:
- reports.view capability (admin)
"""

from __future__ import annotations

import logging

from django.http import HttpResponse
from django.utils import timezone
from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework.exceptions import ValidationError
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from permissions.roles import CAP_REPORTS_VIEW, HasCapability
from sales.models import Sale
from sales.services.reports import (
    ReportPeriodError,
    resolve_period,
    revenue_by_day,
    sales_summary,
    top_products,
    traffic,
)
from sales.services.xlsx_export import build_sales_workbook

logger = logging.getLogger(__name__)

XLSX_CONTENT_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"

PERIOD_PARAMS = [
    OpenApiParameter("start", str, description="YYYY-MM-DD or ISO datetime"),
    OpenApiParameter("end", str, description="YYYY-MM-DD (whole day) or ISO datetime"),
]


def _positive_int_param(request, name: str):
    raw = (request.query_params.get(name) or "").strip()
    if not raw:
        return None
    if not raw.isdigit() or int(raw) <= 0:
        raise ValidationError({"detail": f"{name} must be a positive integer"})
    return int(raw)


class _ReportView(APIView):
    permission_classes = [IsAuthenticated, HasCapability]
    required_capability = CAP_REPORTS_VIEW

    def period(self, request):
        try:
            return resolve_period(
                request.query_params.get("start"),
                request.query_params.get("end"),
            )
        except ReportPeriodError as exc:
            raise ValidationError({"detail": str(exc)}) from exc

    def sales(self, request):
        return self.period(request).apply(Sale.objects.all())


class SalesSummaryView(_ReportView):
    def get(self, request):
        return Response(sales_summary())


class RevenueByDayView(_ReportView):
    @extend_schema(parameters=PERIOD_PARAMS)
    def get(self, request):
        return Response(revenue_by_day(self.sales(request)))


class TopProductsView(_ReportView):
    @extend_schema(parameters=[*PERIOD_PARAMS, OpenApiParameter("limit", int)])
    def get(self, request):
        limit = _positive_int_param(request, "limit")
        return Response(top_products(self.sales(request), limit=limit))


class TrafficView(_ReportView):
    @extend_schema(parameters=PERIOD_PARAMS)
    def get(self, request):
        return Response(traffic(self.sales(request)))


class ExportXlsxView(_ReportView):
    @extend_schema(
        parameters=[
            *PERIOD_PARAMS,
            OpenApiParameter("payment_method", int),
            OpenApiParameter("product", int),
        ],
        responses={(200, XLSX_CONTENT_TYPE): bytes},
    )
    def get(self, request):
        period = self.period(request)
        qs = period.apply(Sale.objects.all())

        payment_method = _positive_int_param(request, "payment_method")
        if payment_method:
            qs = qs.filter(payment_method_id=payment_method)

        product = _positive_int_param(request, "product")
        if product:
            qs = qs.filter(pk__in=Sale.objects.filter(items__product_id=product).values("pk"))

        content = build_sales_workbook(qs, period=period)
        logger.info("Sales workbook exported by %s (%d bytes)", request.user.username, len(content))

        response = HttpResponse(content, content_type=XLSX_CONTENT_TYPE)
        stamp = timezone.localtime().strftime("%Y%m%d_%H%M%S")
        response["Content-Disposition"] = f'attachment; filename="sales_{stamp}.xlsx"'
        return response
