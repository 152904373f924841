# sales/management/commands/validate_sale_totals.py

from __future__ import annotations

from datetime import datetime

from django.core.management.base import BaseCommand

from sales.models import Sale
from sales.services.pricing import money, sale_total
from sales.services.reports import ReportPeriodError, resolve_period
from sales.services.validation import ValidatedLine


class Command(BaseCommand):
    help = "Recompute every sale total from its stored lines and report mismatches."

    def add_arguments(self, parser):
        parser.add_argument("--from", dest="date_from", help="Start date YYYY-MM-DD (optional)")
        parser.add_argument("--to", dest="date_to", help="End date YYYY-MM-DD (optional)")
        parser.add_argument(
            "--strict",
            action="store_true",
            help="Fail (non-zero exit) if any mismatch is found.",
        )

    def handle(self, *args, **options):
        strict = bool(options.get("strict"))

        try:
            period = resolve_period(options.get("date_from"), options.get("date_to"))
        except ReportPeriodError as exc:
            self.stderr.write(self.style.ERROR(str(exc)))
            return self._exit(strict)

        sales_qs = (
            period.apply(Sale.objects.all())
            .prefetch_related("items__product", "items__additionals")
            .order_by("id")
        )

        self.stdout.write(self.style.MIGRATE_HEADING("Sale total validation"))
        self.stdout.write(f"Checked at: {datetime.now().isoformat(timespec='seconds')}")

        checked = 0
        mismatches = []

        for sale in sales_qs.iterator(chunk_size=500):
            checked += 1
            expected = sale_total(ValidatedLine.from_record(item) for item in sale.items.all())
            stored = money(sale.total)
            if expected != stored:
                mismatches.append((sale.pk, stored, expected))

        self.stdout.write(f"Sales checked: {checked}")

        if mismatches:
            self.stderr.write(self.style.ERROR(f"[FAIL] Totals out of sync: {len(mismatches)}"))
            for sale_id, stored, expected in mismatches[:20]:
                self.stderr.write(f"  sale_id={sale_id} stored={stored} expected={expected}")
        else:
            self.stdout.write(self.style.SUCCESS("[OK] Every stored total matches its lines"))

        return self._exit(strict and bool(mismatches))

    def _exit(self, fail: bool):
        if fail:
            raise SystemExit(1)
        return None
