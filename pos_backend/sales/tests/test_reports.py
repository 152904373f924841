from decimal import Decimal
from io import BytesIO, StringIO

from django.core.management import call_command
from django.test import SimpleTestCase, TestCase
from django.utils import timezone
from openpyxl import load_workbook
from rest_framework.test import APIClient

from sales.models import Sale
from sales.services.reports import (
    ReportPeriodError,
    resolve_period,
    revenue_by_day,
    sales_summary,
    top_products,
    traffic,
)
from sales.services.sale_orchestrator import post_sale

from .fixtures import CatalogFixtureMixin


class ResolvePeriodTests(SimpleTestCase):
    def test_date_only_end_covers_whole_day(self):
        period = resolve_period("2024-03-01", "2024-03-01")
        self.assertEqual(timezone.localtime(period.start).date().isoformat(), "2024-03-01")
        self.assertEqual(timezone.localtime(period.end).date().isoformat(), "2024-03-02")
        self.assertFalse(period.end_inclusive)

    def test_datetime_end_is_inclusive(self):
        period = resolve_period(None, "2024-03-01T10:30:00")
        self.assertIsNone(period.start)
        self.assertTrue(period.end_inclusive)

    def test_invalid_dates(self):
        for raw in ("yesterday", "2024-02-30", "01/03/2024"):
            with self.subTest(raw=raw):
                with self.assertRaises(ReportPeriodError):
                    resolve_period(raw)


class ReportTests(CatalogFixtureMixin, TestCase):
    """
    Dashboard aggregations.

    GUARANTEES:
    - Figures come from stored totals and line snapshots
    - Top products are ranked by quantity
    """

    def setUp(self):
        self.first = post_sale(user=self.cashier, payload=self.sale_payload(self.burger_line(2)))
        self.second = post_sale(
            user=self.cashier,
            payload=self.sale_payload(
                {"product_id": self.acai.pk, "quantity": 3, "unit_price": "15.50"},
                payment_method=self.pix,
            ),
        )

    def test_summary_counts_today(self):
        summary = sales_summary()
        self.assertEqual(summary["today"], {"total": Decimal("68.50"), "count": 2})
        self.assertEqual(summary["month"]["count"], 2)

    def test_revenue_by_day(self):
        rows = revenue_by_day(Sale.objects.all())
        self.assertEqual(len(rows), 1)
        self.assertEqual(rows[0]["total"], Decimal("68.50"))
        self.assertEqual(rows[0]["count"], 2)

    def test_top_products_excludes_addons(self):
        rows = top_products(Sale.objects.all())
        self.assertEqual([r["name"] for r in rows], ["Acai", "Burger"])
        self.assertEqual(rows[0]["revenue"], Decimal("46.50"))
        self.assertEqual(rows[1]["revenue"], Decimal("20.00"))

        self.assertEqual(len(top_products(Sale.objects.all(), limit=1)), 1)

    def test_traffic_buckets(self):
        data = traffic(Sale.objects.all())
        self.assertEqual(len(data["by_hour"]), 24)
        self.assertEqual(len(data["by_weekday"]), 7)
        self.assertEqual(sum(data["by_hour"]), 2)
        self.assertEqual(sum(data["by_weekday"]), 2)

    def test_report_endpoints_are_admin_only(self):
        client = APIClient()
        client.force_authenticate(self.cashier)
        self.assertEqual(client.get("/api/sales/reports/summary/").status_code, 403)

        client.force_authenticate(self.admin)
        for url in (
            "/api/sales/reports/summary/",
            "/api/sales/reports/revenue-by-day/",
            "/api/sales/reports/top-products/?limit=5",
            "/api/sales/reports/traffic/",
        ):
            with self.subTest(url=url):
                self.assertEqual(client.get(url).status_code, 200)

        self.assertEqual(client.get("/api/sales/reports/top-products/?limit=abc").status_code, 400)
        self.assertEqual(client.get("/api/sales/reports/traffic/?end=nope").status_code, 400)

    def test_export_xlsx(self):
        client = APIClient()
        client.force_authenticate(self.admin)

        res = client.get("/api/sales/reports/export-xlsx/", {"payment_method": self.cash.pk})
        self.assertEqual(res.status_code, 200)
        self.assertIn("attachment;", res["Content-Disposition"])

        wb = load_workbook(BytesIO(res.content))
        self.assertEqual(wb.sheetnames, ["Summary", "RevenueByDay", "TopProducts", "Sales", "SaleLines"])

        sales = wb["Sales"]
        self.assertEqual(sales.max_row, 2)
        self.assertEqual(sales.cell(row=2, column=1).value, self.first.pk)
        self.assertEqual(Decimal(str(sales.cell(row=2, column=7).value)), Decimal("22.00"))

        lines = wb["SaleLines"]
        self.assertEqual(lines.cell(row=2, column=5).value, "Burger")
        self.assertEqual(Decimal(str(lines.cell(row=2, column=10).value)), Decimal("22.00"))


class ValidateSaleTotalsCommandTests(CatalogFixtureMixin, TestCase):
    def setUp(self):
        self.sale = post_sale(user=self.cashier, payload=self.sale_payload(self.burger_line(2)))

    def test_consistent_totals_pass(self):
        call_command("validate_sale_totals", "--strict", stdout=StringIO(), stderr=StringIO())

    def test_drifted_total_fails_in_strict_mode(self):
        Sale.objects.filter(pk=self.sale.pk).update(total=Decimal("1.00"))
        err = StringIO()
        with self.assertRaises(SystemExit):
            call_command("validate_sale_totals", "--strict", stdout=StringIO(), stderr=err)
        self.assertIn(f"sale_id={self.sale.pk}", err.getvalue())

