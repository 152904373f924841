# products/tests/test_products.py

from decimal import Decimal

from django.contrib.auth import get_user_model
from django.core.exceptions import ValidationError
from django.test import TestCase
from rest_framework.test import APIClient

from products.models import Additional, AdditionalCategory, Category, Product, ProductAdditionalCategory
from sales.models import PaymentMethod
from sales.services.sale_orchestrator import post_sale

User = get_user_model()


class ProductModelTests(TestCase):
    """
    Model-level rules.
    """

    def test_fixed_price_requires_positive_price(self):
        with self.assertRaises(ValidationError):
            Product(name="Free", price=Decimal("0.00")).full_clean()

    def test_variable_price_allows_zero(self):
        Product(name="Acai", price=Decimal("0.00"), variable_price=True).full_clean()

    def test_negative_stock_rejected(self):
        with self.assertRaises(ValidationError):
            Product(name="Burger", price=Decimal("10.00"), stock=-1).full_clean()

    def test_tracks_stock(self):
        self.assertTrue(Product(name="A", price=1, stock=0).tracks_stock)
        self.assertFalse(Product(name="B", price=1, stock=None).tracks_stock)


class ProductApiTests(TestCase):
    """
    Catalog API.

    GUARANTEES:
    - Any authenticated user can read the catalog
    - Only catalog managers can write
    - Products referenced by sales cannot be deleted
    """

    @classmethod
    def setUpTestData(cls):
        cls.admin = User.objects.create_user(username="admin", password="pass1234", role="admin")
        cls.cashier = User.objects.create_user(username="cashier", password="pass1234", role="cashier")
        cls.burger = Product.objects.create(name="Burger", price=Decimal("10.00"), stock=5)
        cls.hidden = Product.objects.create(name="Old item", price=Decimal("3.00"), suspended=True)

    def setUp(self):
        self.client = APIClient()

    def test_anonymous_cannot_list(self):
        res = self.client.get("/api/products/")
        self.assertEqual(res.status_code, 401)

    def test_cashier_can_list_but_not_create(self):
        self.client.force_authenticate(self.cashier)

        res = self.client.get("/api/products/")
        self.assertEqual(res.status_code, 200)
        self.assertEqual([p["name"] for p in res.data], ["Burger"])

        res = self.client.post("/api/products/", {"name": "Soda", "price": "5.00"}, format="json")
        self.assertEqual(res.status_code, 403)

    def test_include_suspended(self):
        self.client.force_authenticate(self.cashier)
        res = self.client.get("/api/products/", {"include_suspended": "true"})
        self.assertEqual({p["name"] for p in res.data}, {"Burger", "Old item"})

    def test_create_normalizes_stock_and_category(self):
        self.client.force_authenticate(self.admin)
        res = self.client.post(
            "/api/products/",
            {"name": "Soda", "price": "5.00", "stock": -3, "category": ""},
            format="json",
        )
        self.assertEqual(res.status_code, 201, res.data)
        self.assertIsNone(res.data["stock"])
        self.assertIsNone(res.data["category"])
        self.assertFalse(res.data["tracks_stock"])

    def test_fixed_price_product_needs_price(self):
        self.client.force_authenticate(self.admin)
        res = self.client.post("/api/products/", {"name": "Soda", "price": "0"}, format="json")
        self.assertEqual(res.status_code, 400)
        self.assertIn("price", res.data)

    def test_variable_price_product_defaults_to_zero(self):
        self.client.force_authenticate(self.admin)
        res = self.client.post("/api/products/", {"name": "Acai", "variable_price": True}, format="json")
        self.assertEqual(res.status_code, 201, res.data)
        self.assertEqual(Decimal(res.data["price"]), Decimal("0.00"))

    def test_restock(self):
        self.client.force_authenticate(self.admin)
        res = self.client.patch(f"/api/products/{self.burger.pk}/", {"stock": 20}, format="json")
        self.assertEqual(res.status_code, 200, res.data)
        self.burger.refresh_from_db()
        self.assertEqual(self.burger.stock, 20)

    def test_suspend_requires_boolean(self):
        self.client.force_authenticate(self.admin)
        url = f"/api/products/{self.burger.pk}/suspended/"

        res = self.client.patch(url, {"suspended": "yes"}, format="json")
        self.assertEqual(res.status_code, 400)

        res = self.client.patch(url, {"suspended": True}, format="json")
        self.assertEqual(res.status_code, 200)
        self.assertTrue(res.data["suspended"])

    def test_additional_categories_replace(self):
        extras = AdditionalCategory.objects.create(name="Extras")
        sauces = AdditionalCategory.objects.create(name="Sauces")
        ProductAdditionalCategory.objects.create(product=self.burger, additional_category=extras)

        self.client.force_authenticate(self.admin)
        url = f"/api/products/{self.burger.pk}/additional-categories/"

        res = self.client.put(url, {"category_ids": [sauces.pk]}, format="json")
        self.assertEqual(res.status_code, 200, res.data)
        self.assertEqual([c["name"] for c in res.data], ["Sauces"])

        res = self.client.put(url, {"category_ids": [999999]}, format="json")
        self.assertEqual(res.status_code, 400)
        self.assertEqual(
            list(self.burger.additional_category_links.values_list("additional_category_id", flat=True)),
            [sauces.pk],
        )

    def test_delete_refused_when_sold(self):
        method = PaymentMethod.objects.create(name="PIX")
        post_sale(
            user=self.cashier,
            payload={"payment_method_id": method.pk, "items": [{"product_id": self.burger.pk, "quantity": 1}]},
        )

        self.client.force_authenticate(self.admin)
        res = self.client.delete(f"/api/products/{self.burger.pk}/")
        self.assertEqual(res.status_code, 400)
        self.assertTrue(Product.objects.filter(pk=self.burger.pk).exists())

        res = self.client.delete(f"/api/products/{self.hidden.pk}/")
        self.assertEqual(res.status_code, 204)


class CategoryApiTests(TestCase):
    @classmethod
    def setUpTestData(cls):
        cls.admin = User.objects.create_user(username="admin", password="pass1234", role="admin")
        cls.category = Category.objects.create(name="Drinks")
        cls.soda = Product.objects.create(name="Soda", price=Decimal("5.00"))

    def setUp(self):
        self.client = APIClient()
        self.client.force_authenticate(self.admin)

    def test_duplicate_name_rejected(self):
        res = self.client.post("/api/products/categories/", {"name": "drinks"}, format="json")
        self.assertEqual(res.status_code, 400)

    def test_assign_and_unassign_product(self):
        url = f"/api/products/categories/{self.category.pk}/products/"

        res = self.client.post(url, {"product_id": self.soda.pk}, format="json")
        self.assertEqual(res.status_code, 200, res.data)
        self.assertEqual(res.data["category"], "Drinks")

        res = self.client.get(url)
        self.assertEqual([p["name"] for p in res.data], ["Soda"])

        res = self.client.delete(f"{url}{self.soda.pk}/")
        self.assertEqual(res.status_code, 204)
        self.soda.refresh_from_db()
        self.assertIsNone(self.soda.category)

        res = self.client.delete(f"{url}{self.soda.pk}/")
        self.assertEqual(res.status_code, 400)


class AdditionalApiTests(TestCase):
    @classmethod
    def setUpTestData(cls):
        cls.admin = User.objects.create_user(username="admin", password="pass1234", role="admin")
        cls.extras = AdditionalCategory.objects.create(name="Extras")

    def setUp(self):
        self.client = APIClient()
        self.client.force_authenticate(self.admin)

    def test_create_additional(self):
        res = self.client.post(
            "/api/products/additionals/",
            {"name": "Cheese", "price": "2.00", "category": self.extras.pk},
            format="json",
        )
        self.assertEqual(res.status_code, 201, res.data)
        self.assertEqual(res.data["category_name"], "Extras")

    def test_negative_price_rejected(self):
        res = self.client.post(
            "/api/products/additionals/",
            {"name": "Cheese", "price": "-1.00", "category": self.extras.pk},
            format="json",
        )
        self.assertEqual(res.status_code, 400)

    def test_category_in_use_cannot_be_deleted(self):
        Additional.objects.create(name="Cheese", price=Decimal("2.00"), category=self.extras)
        res = self.client.delete(f"/api/products/additional-categories/{self.extras.pk}/")
        self.assertEqual(res.status_code, 400)
