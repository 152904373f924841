from decimal import Decimal
from unittest import mock

from django.db import DatabaseError
from django.test import TestCase

from products.models import Product
from sales.models import Sale, SaleItem, SaleItemAdditional
from sales.services.exceptions import (
    InsufficientStockError,
    InvalidAddOnError,
    InvalidSaleInputError,
    PersistenceFailureError,
    SaleForbiddenError,
    SaleNotFoundError,
)
from sales.services.sale_orchestrator import edit_sale, post_sale, void_sale

from .fixtures import CatalogFixtureMixin


class PostSaleTests(CatalogFixtureMixin, TestCase):
    """
    Posting a sale.

    GUARANTEES:
    - Total is computed server-side from catalog price and add-ons
    - Tracked stock is decremented in the same transaction
    - Untracked stock is never touched
    """

    def test_fixed_price_sale_with_addon(self):
        sale = post_sale(user=self.cashier, payload=self.sale_payload(self.burger_line(2)))

        self.assertEqual(sale.total, Decimal("22.00"))
        self.assertEqual(sale.user, self.cashier)
        self.assertEqual(sale.payment_method, self.cash)

        item = sale.items.get()
        self.assertEqual(item.quantity, 2)
        self.assertEqual(item.unit_price, Decimal("10.00"))
        self.assertEqual(item.additionals.get().unit_price, Decimal("2.00"))

        self.burger.refresh_from_db()
        self.assertEqual(self.burger.stock, 3)

    def test_client_price_is_ignored_for_fixed_price_products(self):
        sale = post_sale(
            user=self.cashier,
            payload=self.sale_payload({"product_id": self.burger.pk, "quantity": 1, "unit_price": "0.01"}),
        )
        self.assertEqual(sale.total, Decimal("10.00"))

    def test_variable_price_untracked_product(self):
        sale = post_sale(
            user=self.cashier,
            payload=self.sale_payload({"product_id": self.acai.pk, "quantity": 3, "unit_price": "15.50"}),
        )

        self.assertEqual(sale.total, Decimal("46.50"))
        self.acai.refresh_from_db()
        self.assertIsNone(self.acai.stock)

    def test_variable_price_requires_positive_price(self):
        for bad in (None, "0", "-1", "abc"):
            with self.subTest(unit_price=bad):
                with self.assertRaises(InvalidSaleInputError):
                    post_sale(
                        user=self.cashier,
                        payload=self.sale_payload(
                            {"product_id": self.acai.pk, "quantity": 1, "unit_price": bad}
                        ),
                    )
        self.assertFalse(Sale.objects.exists())

    def test_same_product_on_two_lines_shares_stock(self):
        with self.assertRaises(InsufficientStockError) as ctx:
            post_sale(
                user=self.cashier,
                payload=self.sale_payload(
                    {"product_id": self.burger.pk, "quantity": 3},
                    {"product_id": self.burger.pk, "quantity": 3},
                ),
            )

        self.assertEqual(ctx.exception.available, 5)
        self.assertEqual(ctx.exception.requested, 6)
        self.assertIn("Insufficient stock for Burger", str(ctx.exception))

        self.burger.refresh_from_db()
        self.assertEqual(self.burger.stock, 5)
        self.assertFalse(Sale.objects.exists())

    def test_exact_stock_is_allowed(self):
        post_sale(user=self.cashier, payload=self.sale_payload({"product_id": self.burger.pk, "quantity": 5}))
        self.burger.refresh_from_db()
        self.assertEqual(self.burger.stock, 0)

    def test_ineligible_addon_has_no_side_effects(self):
        line = {
            "product_id": self.burger.pk,
            "quantity": 1,
            "additionals": [{"additional_id": self.bacon.pk, "unit_price": "3.00"}],
        }
        with self.assertRaises(InvalidAddOnError) as ctx:
            post_sale(user=self.cashier, payload=self.sale_payload(line))

        self.assertEqual(ctx.exception.product_name, "Burger")
        self.burger.refresh_from_db()
        self.assertEqual(self.burger.stock, 5)
        self.assertFalse(Sale.objects.exists())
        self.assertFalse(SaleItem.objects.exists())

    def test_unknown_addon_is_rejected(self):
        line = {
            "product_id": self.burger.pk,
            "quantity": 1,
            "additionals": [{"additional_id": 999999, "unit_price": "1.00"}],
        }
        with self.assertRaises(InvalidAddOnError):
            post_sale(user=self.cashier, payload=self.sale_payload(line))

    def test_unknown_product_is_not_found(self):
        with self.assertRaises(SaleNotFoundError):
            post_sale(user=self.cashier, payload=self.sale_payload({"product_id": 999999, "quantity": 1}))

    def test_unknown_payment_method_is_invalid(self):
        payload = self.sale_payload(self.burger_line(1))
        payload["payment_method_id"] = 999999
        with self.assertRaises(InvalidSaleInputError):
            post_sale(user=self.cashier, payload=payload)

    def test_empty_items_is_invalid(self):
        with self.assertRaises(InvalidSaleInputError):
            post_sale(user=self.cashier, payload={"payment_method_id": self.cash.pk, "items": []})

    def test_database_failure_is_reported_and_rolled_back(self):
        with mock.patch.object(SaleItem.objects, "create", side_effect=DatabaseError("disk full")):
            with self.assertRaises(PersistenceFailureError):
                post_sale(user=self.cashier, payload=self.sale_payload(self.burger_line(2)))

        self.burger.refresh_from_db()
        self.assertEqual(self.burger.stock, 5)
        self.assertFalse(Sale.objects.exists())

    def test_lines_record_whether_stock_was_taken(self):
        sale = post_sale(
            user=self.cashier,
            payload=self.sale_payload(
                self.burger_line(1),
                {"product_id": self.acai.pk, "quantity": 1, "unit_price": "8.00"},
            ),
        )
        tracked = dict(sale.items.values_list("product_id", "stock_tracked"))
        self.assertEqual(tracked, {self.burger.pk: True, self.acai.pk: False})


class SaleBoundsTests(CatalogFixtureMixin, TestCase):
    """
    Values the sale columns cannot store.

    GUARANTEES:
    - quantity <= 2147483647, unit prices <= 99999999.99, total <= 9999999999.99
    - Out-of-range input is rejected before any write, with a typed error
    - A sale at the limits stores and reads back intact
    """

    def _acai(self, quantity=1, unit_price="1.00"):
        return {"product_id": self.acai.pk, "quantity": quantity, "unit_price": unit_price}

    def _assert_nothing_written(self):
        self.assertFalse(Sale.objects.exists())
        self.burger.refresh_from_db()
        self.assertEqual(self.burger.stock, 5)

    def test_quantity_above_limit_is_invalid(self):
        for quantity in (2147483648, 10**19):
            with self.subTest(quantity=quantity):
                with self.assertRaises(InvalidSaleInputError):
                    post_sale(user=self.cashier, payload=self.sale_payload(self._acai(quantity)))
        self._assert_nothing_written()

    def test_unit_price_above_limit_is_invalid(self):
        for price in ("100000000.00", "123456789012345.00", "1E+40"):
            with self.subTest(price=price):
                with self.assertRaises(InvalidSaleInputError):
                    post_sale(user=self.cashier, payload=self.sale_payload(self._acai(1, price)))
        self._assert_nothing_written()

    def test_addon_out_of_range_is_invalid(self):
        bad_addons = [
            {"additional_id": self.cheese.pk, "quantity": 1, "unit_price": "100000000.00"},
            {"additional_id": self.cheese.pk, "quantity": 2147483648, "unit_price": "2.00"},
            {"additional_id": 10**19, "quantity": 1, "unit_price": "2.00"},
        ]
        for addon in bad_addons:
            with self.subTest(addon=addon):
                with self.assertRaises(InvalidAddOnError):
                    post_sale(
                        user=self.cashier,
                        payload=self.sale_payload(self.burger_line(1, additionals=[addon])),
                    )
        self._assert_nothing_written()

    def test_ids_above_limit_are_invalid(self):
        with self.assertRaises(InvalidSaleInputError):
            post_sale(user=self.cashier, payload=self.sale_payload({"product_id": 10**19, "quantity": 1}))

        payload = self.sale_payload(self.burger_line(1))
        payload["payment_method_id"] = 10**19
        with self.assertRaises(InvalidSaleInputError):
            post_sale(user=self.cashier, payload=payload)
        self._assert_nothing_written()

    def test_total_above_limit_is_invalid(self):
        with self.assertRaises(InvalidSaleInputError):
            post_sale(user=self.cashier, payload=self.sale_payload(self._acai(101, "99999999.99")))
        self._assert_nothing_written()

    def test_sale_at_the_limits_reads_back(self):
        sale = post_sale(user=self.cashier, payload=self.sale_payload(self._acai(100, "99999999.99")))

        sale.refresh_from_db()
        self.assertEqual(sale.total, Decimal("9999999999.00"))
        self.assertEqual(sale.items.get().unit_price, Decimal("99999999.99"))

    def test_edit_cannot_push_total_over_limit(self):
        sale = post_sale(user=self.cashier, payload=self.sale_payload(self._acai(1, "5.00")))
        line = sale.items.get()

        with self.assertRaises(InvalidSaleInputError):
            edit_sale(
                user=self.cashier,
                sale_id=sale.pk,
                payload={"items": [{"id": line.pk, "quantity": 101, "unit_price": "99999999.99"}]},
            )
        with self.assertRaises(InvalidSaleInputError):
            edit_sale(
                user=self.cashier,
                sale_id=sale.pk,
                payload={"items": [{"id": line.pk, "quantity": 10**19}]},
            )

        sale.refresh_from_db()
        line.refresh_from_db()
        self.assertEqual(sale.total, Decimal("5.00"))
        self.assertEqual((line.quantity, line.unit_price), (1, Decimal("5.00")))

    def test_oversized_sale_id_is_not_found(self):
        with self.assertRaises(SaleNotFoundError):
            void_sale(user=self.admin, sale_id=10**19)
        with self.assertRaises(SaleNotFoundError):
            edit_sale(user=self.admin, sale_id=str(10**19), payload={"items": [{"id": 1}]})


class EditSaleTests(CatalogFixtureMixin, TestCase):
    """
    Editing existing lines.

    GUARANTEES:
    - Stock moves by the quantity difference only
    - Totals are recomputed from the stored lines
    - Lines cannot be added, removed or switched to another product
    """

    def setUp(self):
        self.sale = post_sale(user=self.cashier, payload=self.sale_payload(self.burger_line(2)))
        self.line = self.sale.items.get()

    def test_lower_quantity_restores_stock(self):
        sale = edit_sale(
            user=self.cashier,
            sale_id=self.sale.pk,
            payload={"items": [{"id": self.line.pk, "quantity": 1}]},
        )

        self.assertEqual(sale.total, Decimal("12.00"))
        self.burger.refresh_from_db()
        self.assertEqual(self.burger.stock, 4)
        self.assertEqual(SaleItemAdditional.objects.filter(sale_item=self.line).count(), 1)

    def test_same_quantity_is_a_no_op_for_stock(self):
        sale = edit_sale(
            user=self.cashier,
            sale_id=self.sale.pk,
            payload={"items": [{"id": self.line.pk, "quantity": 2, "is_delivery": True}]},
        )

        self.assertEqual(sale.total, Decimal("22.00"))
        self.burger.refresh_from_db()
        self.assertEqual(self.burger.stock, 3)
        self.line.refresh_from_db()
        self.assertTrue(self.line.is_delivery)

    def test_higher_quantity_beyond_stock_is_rejected(self):
        # 3 left on hand + 2 already sold on the line = 5 max
        with self.assertRaises(InsufficientStockError):
            edit_sale(
                user=self.cashier,
                sale_id=self.sale.pk,
                payload={"items": [{"id": self.line.pk, "quantity": 6}]},
            )

        edit_sale(
            user=self.cashier,
            sale_id=self.sale.pk,
            payload={"items": [{"id": self.line.pk, "quantity": 5}]},
        )
        self.burger.refresh_from_db()
        self.assertEqual(self.burger.stock, 0)

    def test_addons_replaced_when_sent(self):
        sale = edit_sale(
            user=self.cashier,
            sale_id=self.sale.pk,
            payload={"items": [{"id": self.line.pk, "additionals": []}]},
        )
        self.assertEqual(sale.total, Decimal("20.00"))
        self.assertFalse(SaleItemAdditional.objects.filter(sale_item=self.line).exists())

    def test_payment_method_can_change(self):
        sale = edit_sale(
            user=self.cashier,
            sale_id=self.sale.pk,
            payload={"payment_method_id": self.pix.pk, "items": [{"id": self.line.pk}]},
        )
        self.assertEqual(sale.payment_method, self.pix)

    def test_unknown_line_is_rejected(self):
        with self.assertRaises(InvalidSaleInputError):
            edit_sale(
                user=self.cashier,
                sale_id=self.sale.pk,
                payload={"items": [{"id": 999999, "quantity": 1}]},
            )

    def test_product_cannot_change(self):
        with self.assertRaises(InvalidSaleInputError):
            edit_sale(
                user=self.cashier,
                sale_id=self.sale.pk,
                payload={"items": [{"id": self.line.pk, "product_id": self.acai.pk}]},
            )

    def test_other_cashier_cannot_edit(self):
        with self.assertRaises(SaleForbiddenError):
            edit_sale(
                user=self.other_cashier,
                sale_id=self.sale.pk,
                payload={"items": [{"id": self.line.pk, "quantity": 1}]},
            )
        self.burger.refresh_from_db()
        self.assertEqual(self.burger.stock, 3)

    def test_admin_can_edit_any_sale(self):
        sale = edit_sale(
            user=self.admin,
            sale_id=self.sale.pk,
            payload={"items": [{"id": self.line.pk, "quantity": 1}]},
        )
        self.assertEqual(sale.total, Decimal("12.00"))

    def test_missing_sale_is_not_found(self):
        with self.assertRaises(SaleNotFoundError):
            edit_sale(user=self.admin, sale_id=999999, payload={"items": [{"id": 1}]})

    def test_catalog_price_change_does_not_reprice_the_line(self):
        Product.objects.filter(pk=self.burger.pk).update(price=Decimal("50.00"))

        sale = edit_sale(
            user=self.cashier,
            sale_id=self.sale.pk,
            payload={"items": [{"id": self.line.pk, "quantity": 1}]},
        )

        self.assertEqual(sale.total, Decimal("12.00"))
        self.line.refresh_from_db()
        self.assertEqual(self.line.unit_price, Decimal("10.00"))

    def test_database_failure_is_reported_and_rolled_back(self):
        with mock.patch.object(SaleItem, "save", side_effect=DatabaseError("disk full")):
            with self.assertRaises(PersistenceFailureError):
                edit_sale(
                    user=self.cashier,
                    sale_id=self.sale.pk,
                    payload={"items": [{"id": self.line.pk, "quantity": 1, "additionals": []}]},
                )

        self.burger.refresh_from_db()
        self.assertEqual(self.burger.stock, 3)
        self.line.refresh_from_db()
        self.assertEqual(self.line.quantity, 2)
        self.assertEqual(SaleItemAdditional.objects.filter(sale_item=self.line).count(), 1)
        self.sale.refresh_from_db()
        self.assertEqual(self.sale.total, Decimal("22.00"))

    def test_line_sold_untracked_never_moves_stock(self):
        sale = post_sale(
            user=self.cashier,
            payload=self.sale_payload({"product_id": self.acai.pk, "quantity": 3, "unit_price": "5.00"}),
        )
        line = sale.items.get()
        # stock tracking switched on after the sale
        Product.objects.filter(pk=self.acai.pk).update(stock=10)

        edit_sale(
            user=self.cashier,
            sale_id=sale.pk,
            payload={"items": [{"id": line.pk, "quantity": 1}]},
        )

        self.assertEqual(Product.objects.get(pk=self.acai.pk).stock, 10)


class VoidSaleTests(CatalogFixtureMixin, TestCase):
    """
    Voiding a sale.

    GUARANTEES:
    - Tracked stock returns to its pre-sale value
    - Sale, lines and add-ons are removed together
    - Only administrators can void
    """

    def setUp(self):
        self.sale = post_sale(
            user=self.cashier,
            payload=self.sale_payload(
                self.burger_line(2),
                {"product_id": self.acai.pk, "quantity": 1, "unit_price": "8.00"},
            ),
        )

    def test_void_restores_stock_and_removes_records(self):
        result = void_sale(user=self.admin, sale_id=self.sale.pk)

        self.assertEqual(result.sale_id, self.sale.pk)
        self.assertEqual(result.total, Decimal("30.00"))
        self.assertEqual(result.restored_stock, {self.burger.pk: 2})

        self.burger.refresh_from_db()
        self.assertEqual(self.burger.stock, 5)
        self.assertFalse(Sale.objects.filter(pk=self.sale.pk).exists())
        self.assertFalse(SaleItem.objects.exists())
        self.assertFalse(SaleItemAdditional.objects.exists())

    def test_cashier_cannot_void(self):
        with self.assertRaises(SaleForbiddenError):
            void_sale(user=self.cashier, sale_id=self.sale.pk)

        self.assertTrue(Sale.objects.filter(pk=self.sale.pk).exists())
        self.burger.refresh_from_db()
        self.assertEqual(self.burger.stock, 3)

    def test_void_twice_is_not_found(self):
        void_sale(user=self.admin, sale_id=self.sale.pk)
        with self.assertRaises(SaleNotFoundError):
            void_sale(user=self.admin, sale_id=self.sale.pk)

    def test_void_keeps_untracked_product_untracked(self):
        void_sale(user=self.admin, sale_id=self.sale.pk)
        self.assertIsNone(Product.objects.get(pk=self.acai.pk).stock)

    def test_void_gives_back_only_stock_that_was_taken(self):
        # stock tracking switched on after the sale
        Product.objects.filter(pk=self.acai.pk).update(stock=10)

        result = void_sale(user=self.admin, sale_id=self.sale.pk)

        self.assertEqual(result.restored_stock, {self.burger.pk: 2})
        self.assertEqual(Product.objects.get(pk=self.acai.pk).stock, 10)
        self.burger.refresh_from_db()
        self.assertEqual(self.burger.stock, 5)

    def test_database_failure_is_reported_and_rolled_back(self):
        with mock.patch.object(Sale, "delete", side_effect=DatabaseError("disk full")):
            with self.assertRaises(PersistenceFailureError):
                void_sale(user=self.admin, sale_id=self.sale.pk)

        self.burger.refresh_from_db()
        self.assertEqual(self.burger.stock, 3)
        self.assertTrue(Sale.objects.filter(pk=self.sale.pk).exists())
        self.assertEqual(SaleItem.objects.filter(sale=self.sale).count(), 2)
        self.assertEqual(SaleItemAdditional.objects.filter(sale_item__sale=self.sale).count(), 1)
