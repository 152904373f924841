# sales/services/reports.py

"""
SALES REPORTING (READ-ONLY)

Aggregations over persisted sales for the admin dashboard and the xlsx export.
Nothing here writes; figures come from the stored totals and line snapshots.

Period contract:
- start / end accept YYYY-MM-DD or an ISO datetime
- a date-only end includes the whole day
- all day/hour bucketing uses the server timezone (settings.TIME_ZONE)
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, time, timedelta
from decimal import Decimal
from typing import Optional

from django.db.models import Count, DecimalField, ExpressionWrapper, F, Sum
from django.db.models.functions import ExtractHour, ExtractWeekDay, TruncDate
from django.utils import timezone
from django.utils.dateparse import parse_date, parse_datetime

from sales.models import Sale, SaleItem

from .pricing import money


class ReportPeriodError(ValueError):
    """Raised when start/end cannot be parsed."""


@dataclass(frozen=True)
class Period:
    start: Optional[datetime] = None
    end: Optional[datetime] = None
    end_inclusive: bool = True

    def apply(self, qs, field: str = "created_at"):
        if self.start is not None:
            qs = qs.filter(**{f"{field}__gte": self.start})
        if self.end is not None:
            lookup = "lte" if self.end_inclusive else "lt"
            qs = qs.filter(**{f"{field}__{lookup}": self.end})
        return qs


def _aware(dt: datetime) -> datetime:
    if timezone.is_naive(dt):
        return timezone.make_aware(dt, timezone.get_current_timezone())
    return dt


def _parse_bound(raw, *, is_end: bool):
    """Returns (datetime, inclusive)."""
    s = (raw or "").strip()
    if not s:
        return None, True

    # date-only first: parse_datetime also accepts a bare date as midnight
    try:
        d = parse_date(s)
        dt = None if d is not None else parse_datetime(s)
    except ValueError:
        # well formed but impossible, e.g. 2024-02-30
        d = dt = None

    if d is None:
        if dt is None:
            raise ReportPeriodError(f"Invalid date: {s}. Use YYYY-MM-DD or an ISO datetime")
        return _aware(dt), True

    if is_end:
        # whole day: [.., next midnight)
        return _aware(datetime.combine(d + timedelta(days=1), time.min)), False
    return _aware(datetime.combine(d, time.min)), True


def resolve_period(start=None, end=None) -> Period:
    start_dt, _ = _parse_bound(start, is_end=False)
    end_dt, inclusive = _parse_bound(end, is_end=True)
    return Period(start=start_dt, end=end_dt, end_inclusive=inclusive)


# ============================================================
# SUMMARY
# ============================================================

def _totals(qs) -> dict:
    agg = qs.aggregate(total=Sum("total"), count=Count("id"))
    return {"total": money(agg["total"]), "count": int(agg["count"] or 0)}


def sales_summary(now: Optional[datetime] = None) -> dict:
    """Today / current week (Monday first) / current month."""
    now = timezone.localtime(now or timezone.now())
    start_today = now.replace(hour=0, minute=0, second=0, microsecond=0)
    start_week = start_today - timedelta(days=start_today.weekday())
    start_month = start_today.replace(day=1)

    base = Sale.objects.all()
    return {
        "today": _totals(base.filter(created_at__gte=start_today, created_at__lte=now)),
        "week": _totals(base.filter(created_at__gte=start_week, created_at__lte=now)),
        "month": _totals(base.filter(created_at__gte=start_month, created_at__lte=now)),
    }


# ============================================================
# SERIES
# ============================================================

def revenue_by_day(sales_qs) -> list[dict]:
    rows = (
        sales_qs.annotate(day=TruncDate("created_at"))
        .values("day")
        .annotate(total=Sum("total"), count=Count("id"))
        .order_by("day")
    )
    return [
        {"date": r["day"].isoformat(), "total": money(r["total"]), "count": int(r["count"])}
        for r in rows
    ]


def top_products(sales_qs, *, limit: Optional[int] = None) -> list[dict]:
    """Ranked by quantity sold; revenue is the product lines only (add-ons excluded)."""
    line_amount = ExpressionWrapper(
        F("unit_price") * F("quantity"),
        output_field=DecimalField(max_digits=14, decimal_places=2),
    )
    rows = (
        SaleItem.objects.filter(sale__in=sales_qs)
        .values("product_id", "product__name")
        .annotate(quantity=Sum("quantity"), revenue=Sum(line_amount))
        .order_by("-quantity", "product__name")
    )
    if limit:
        rows = rows[:limit]

    return [
        {
            "product_id": r["product_id"],
            "name": r["product__name"],
            "quantity": int(r["quantity"] or 0),
            "revenue": money(r["revenue"]),
        }
        for r in rows
    ]


def traffic(sales_qs) -> dict:
    """
    by_hour: 24 buckets (local hour)
    by_weekday: 7 buckets, 0=Sunday
    """
    by_hour = [0] * 24
    by_weekday = [0] * 7

    for r in sales_qs.order_by().annotate(h=ExtractHour("created_at")).values("h").annotate(n=Count("id")):
        by_hour[int(r["h"])] += int(r["n"])

    # ExtractWeekDay: 1=Sunday .. 7=Saturday
    for r in sales_qs.order_by().annotate(wd=ExtractWeekDay("created_at")).values("wd").annotate(n=Count("id")):
        by_weekday[int(r["wd"]) - 1] += int(r["n"])

    return {"by_hour": by_hour, "by_weekday": by_weekday}


def period_overview(sales_qs) -> dict:
    agg = sales_qs.aggregate(total=Sum("total"), count=Count("id"))
    count = int(agg["count"] or 0)
    total = money(agg["total"])
    items = SaleItem.objects.filter(sale__in=sales_qs).aggregate(q=Sum("quantity"))["q"] or 0
    return {
        "count": count,
        "items": int(items),
        "total": total,
        "average_ticket": money(total / count) if count else Decimal("0.00"),
    }
