# sales/tests/fixtures.py

"""
Shared catalog fixtures for sales tests.

Catalog:
- Burger: fixed 10.00, stock 5, eligible for "Extras"
- Acai: variable price, untracked stock
- Extra cheese: add-on 2.00 in "Extras"
- Bacon: add-on 3.00 in "Sauces" (not eligible for Burger)
"""

from decimal import Decimal

from django.contrib.auth import get_user_model

from products.models import Additional, AdditionalCategory, Product, ProductAdditionalCategory
from sales.models import PaymentMethod

User = get_user_model()


class CatalogFixtureMixin:
    @classmethod
    def build_catalog(cls):
        cls.admin = User.objects.create_user(username="admin", password="pass1234", role="admin")
        cls.cashier = User.objects.create_user(username="cashier", password="pass1234", role="cashier")
        cls.other_cashier = User.objects.create_user(
            username="cashier2", password="pass1234", role="cashier"
        )

        cls.cash = PaymentMethod.objects.create(name="Dinheiro")
        cls.pix = PaymentMethod.objects.create(name="PIX")

        cls.extras = AdditionalCategory.objects.create(name="Extras")
        cls.sauces = AdditionalCategory.objects.create(name="Sauces")

        cls.burger = Product.objects.create(name="Burger", price=Decimal("10.00"), stock=5)
        cls.acai = Product.objects.create(name="Acai", variable_price=True, stock=None)
        ProductAdditionalCategory.objects.create(product=cls.burger, additional_category=cls.extras)

        cls.cheese = Additional.objects.create(name="Extra cheese", price=Decimal("2.00"), category=cls.extras)
        cls.bacon = Additional.objects.create(name="Bacon", price=Decimal("3.00"), category=cls.sauces)

    @classmethod
    def setUpTestData(cls):
        cls.build_catalog()

    def burger_line(self, quantity=2, **extra):
        line = {
            "product_id": self.burger.pk,
            "quantity": quantity,
            "additionals": [{"additional_id": self.cheese.pk, "quantity": 1, "unit_price": "2.00"}],
        }
        line.update(extra)
        return line

    def sale_payload(self, *lines, payment_method=None):
        return {
            "payment_method_id": (payment_method or self.cash).pk,
            "items": list(lines),
        }
