# sales/services/xlsx_export.py

"""
DASHBOARD EXPORT (XLSX)

Sheets:
- Summary        period bounds, sale count, items sold, revenue, average ticket
- RevenueByDay   one row per day
- TopProducts    ranked by quantity
- Sales          one row per sale
- SaleLines      one row per sale line (add-ons folded into the subtotal)
"""

from __future__ import annotations

from io import BytesIO

from django.utils import timezone
from openpyxl import Workbook
from openpyxl.styles import Font, PatternFill

from .pricing import line_subtotal
from .reports import Period, period_overview, revenue_by_day, top_products

MONEY_FORMAT = "#,##0.00"
DATETIME_FORMAT = "dd/mm/yyyy hh:mm"

HEADER_FONT = Font(bold=True)
HEADER_FILL = PatternFill(start_color="EAF2FF", end_color="EAF2FF", fill_type="solid")


def _sheet(wb: Workbook, title: str, headers: list[tuple[str, int]], *, first: bool = False):
    ws = wb.active if first else wb.create_sheet()
    ws.title = title
    ws.append([h for h, _ in headers])

    for col_num, (_, width) in enumerate(headers, 1):
        cell = ws.cell(row=1, column=col_num)
        cell.font = HEADER_FONT
        cell.fill = HEADER_FILL
        ws.column_dimensions[cell.column_letter].width = width

    ws.freeze_panes = "A2"
    ws.auto_filter.ref = ws.dimensions
    return ws


def _money_columns(ws, *columns: str) -> None:
    for letter in columns:
        for (cell,) in ws.iter_rows(min_row=2, min_col=ws[f"{letter}1"].column, max_col=ws[f"{letter}1"].column):
            cell.number_format = MONEY_FORMAT


def _local(dt):
    # openpyxl cannot store tz-aware datetimes
    return timezone.localtime(dt).replace(tzinfo=None)


def build_sales_workbook(sales_qs, *, period: Period) -> bytes:
    sales = list(
        sales_qs.select_related("user", "payment_method")
        .prefetch_related("items__product", "items__additionals")
        .order_by("created_at", "id")
    )

    overview = period_overview(sales_qs)

    wb = Workbook()

    ws = _sheet(wb, "Summary", [("Indicator", 25), ("Value", 30)], first=True)
    ws.append(["Start", _local(period.start) if period.start else "-"])
    ws.append(["End", _local(period.end) if period.end else "-"])
    ws.append(["Sales", overview["count"]])
    ws.append(["Items sold", overview["items"]])
    ws.append(["Revenue", overview["total"]])
    ws.append(["Average ticket", overview["average_ticket"]])
    ws["B6"].number_format = MONEY_FORMAT
    ws["B7"].number_format = MONEY_FORMAT

    ws = _sheet(wb, "RevenueByDay", [("Date", 15), ("Sales", 10), ("Total", 18)])
    for row in revenue_by_day(sales_qs):
        ws.append([row["date"], row["count"], row["total"]])
    _money_columns(ws, "C")

    ws = _sheet(wb, "TopProducts", [("Product", 35), ("Quantity", 15), ("Revenue", 18)])
    for row in top_products(sales_qs):
        ws.append([row["name"], row["quantity"], row["revenue"]])
    _money_columns(ws, "C")

    ws = _sheet(
        wb,
        "Sales",
        [
            ("Sale ID", 10),
            ("Date/Time", 20),
            ("User", 22),
            ("Payment", 22),
            ("Items", 60),
            ("Quantity", 12),
            ("Total", 18),
        ],
    )
    for sale in sales:
        items = list(sale.items.all())
        ws.append(
            [
                sale.pk,
                _local(sale.created_at),
                sale.user.name or sale.user.username,
                sale.payment_method.name,
                "; ".join(f"{i.product.name} x{i.quantity} ({i.unit_price})" for i in items),
                sum(i.quantity for i in items),
                sale.total,
            ]
        )
        ws.cell(row=ws.max_row, column=2).number_format = DATETIME_FORMAT
    _money_columns(ws, "G")

    ws = _sheet(
        wb,
        "SaleLines",
        [
            ("Sale ID", 10),
            ("Date/Time", 20),
            ("User", 22),
            ("Payment", 22),
            ("Product", 30),
            ("Category", 22),
            ("Quantity", 12),
            ("Unit price", 16),
            ("Delivery", 10),
            ("Subtotal", 18),
        ],
    )
    for sale in sales:
        for item in sale.items.all():
            ws.append(
                [
                    sale.pk,
                    _local(sale.created_at),
                    sale.user.name or sale.user.username,
                    sale.payment_method.name,
                    item.product.name,
                    item.product.category or "-",
                    item.quantity,
                    item.unit_price,
                    "yes" if item.is_delivery else "no",
                    line_subtotal(item),
                ]
            )
            ws.cell(row=ws.max_row, column=2).number_format = DATETIME_FORMAT
    _money_columns(ws, "H", "J")

    buffer = BytesIO()
    wb.save(buffer)
    return buffer.getvalue()
