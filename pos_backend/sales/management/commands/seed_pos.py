# sales/management/commands/seed_pos.py

from __future__ import annotations

from dataclasses import dataclass

from django.contrib.auth import get_user_model
from django.core.management.base import BaseCommand, CommandError
from django.db import transaction

from permissions.roles import ROLE_ADMIN, ROLE_CASHIER
from sales.models import PaymentMethod, SalesSettings

DEFAULT_PAYMENT_METHODS = (
    "Dinheiro",
    "PIX",
    "Cartão de Crédito",
    "Cartão de Débito",
)


@dataclass(frozen=True)
class SeedUserSpec:
    label: str
    role: str
    username: str
    name: str


def _user_specs(with_cashier: bool) -> list[SeedUserSpec]:
    specs = [SeedUserSpec("Admin", ROLE_ADMIN, "admin", "Administrator")]
    if with_cashier:
        specs.append(SeedUserSpec("Cashier", ROLE_CASHIER, "cashier", "Front Desk"))
    return specs


class Command(BaseCommand):
    help = "Seed payment methods, POS settings and staff users (idempotent)."

    def add_arguments(self, parser):
        parser.add_argument(
            "--password",
            type=str,
            default="Pass1234!",
            help="Password for seeded users (default: Pass1234!)",
        )
        parser.add_argument(
            "--with-cashier",
            action="store_true",
            help="Also create a demo cashier account.",
        )
        parser.add_argument(
            "--force-password",
            action="store_true",
            help="Reset password for existing seeded users too.",
        )

    @transaction.atomic
    def handle(self, *args, **options):
        password = options.get("password") or ""
        force_password = bool(options.get("force_password"))

        if len(password) < 6:
            raise CommandError("--password must be at least 6 characters.")

        # -----------------------------
        # Payment methods
        # -----------------------------
        for name in DEFAULT_PAYMENT_METHODS:
            _, created = PaymentMethod.objects.get_or_create(name=name)
            marker = "✅ created" if created else "↩︎ exists "
            self.stdout.write(f"{marker}: payment method {name}")

        SalesSettings.load()

        # -----------------------------
        # Users
        # -----------------------------
        User = get_user_model()
        created_count = 0
        updated_count = 0

        for spec in _user_specs(bool(options.get("with_cashier"))):
            is_admin = spec.role == ROLE_ADMIN
            user = User.objects.filter(username=spec.username).first()

            if user is None:
                User.objects.create_user(
                    username=spec.username,
                    password=password,
                    name=spec.name,
                    role=spec.role,
                    is_staff=is_admin,
                    is_superuser=is_admin,
                )
                created_count += 1
                self.stdout.write(f"✅ created: {spec.label} ({spec.role}) -> {spec.username}")
                continue

            dirty = False
            if user.role != spec.role:
                user.role = spec.role
                dirty = True
            if not user.is_active:
                user.is_active = True
                dirty = True
            if force_password:
                user.set_password(password)
                dirty = True

            if dirty:
                user.save()
                updated_count += 1
            self.stdout.write(f"↩︎ exists:  {spec.label} ({spec.role}) -> {spec.username}")

        self.stdout.write("\n--- Summary ---")
        self.stdout.write(f"Users created: {created_count}")
        self.stdout.write(f"Users updated: {updated_count}")

        self.stdout.write("\nRun example:")
        self.stdout.write("  python manage.py seed_pos --with-cashier --password Pass1234!")
