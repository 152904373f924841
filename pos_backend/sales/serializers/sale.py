# sales/serializers/sale.py

"""
SALE SERIALIZERS

Read side:
- SaleSerializer renders a sale with its lines and add-ons (snapshotted prices).

Write side:
- The *InputSerializer classes describe the request body in the OpenAPI
  schema. Requests are validated by sales.services.validation so the API
  and direct service calls share one set of rules; the field bounds here
  are taken from the same constants.
"""

from decimal import Decimal

from rest_framework import serializers

from sales.models import Sale, SaleItem, SaleItemAdditional
from sales.services.pricing import addon_amount, line_subtotal
from sales.services.validation import MAX_QUANTITY, MAX_ROW_ID, MAX_UNIT_PRICE


class SaleItemAdditionalSerializer(serializers.ModelSerializer):
    additional_name = serializers.CharField(source="additional.name", read_only=True)
    category_name = serializers.CharField(source="additional.category.name", read_only=True)
    total_price = serializers.SerializerMethodField()

    class Meta:
        model = SaleItemAdditional
        fields = [
            "id",
            "additional",
            "additional_name",
            "category_name",
            "quantity",
            "unit_price",
            "total_price",
        ]
        read_only_fields = fields

    def get_total_price(self, obj) -> str:
        return str(addon_amount(obj))


class SaleItemSerializer(serializers.ModelSerializer):
    """
    Sale line item serializer (read-only).
    """

    product_name = serializers.CharField(source="product.name", read_only=True)
    additionals = SaleItemAdditionalSerializer(many=True, read_only=True)
    total_price = serializers.SerializerMethodField()

    class Meta:
        model = SaleItem
        fields = [
            "id",
            "product",
            "product_name",
            "quantity",
            "unit_price",
            "is_delivery",
            "additionals",
            "total_price",
        ]
        read_only_fields = fields

    def get_total_price(self, obj) -> str:
        return str(line_subtotal(obj))


class SaleSerializer(serializers.ModelSerializer):
    user_name = serializers.SerializerMethodField()
    payment_method_name = serializers.CharField(source="payment_method.name", read_only=True)
    items = SaleItemSerializer(many=True, read_only=True)

    class Meta:
        model = Sale
        fields = [
            "id",
            "user",
            "user_name",
            "payment_method",
            "payment_method_name",
            "total",
            "items",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields

    def get_user_name(self, obj) -> str:
        u = obj.user
        return (getattr(u, "name", "") or getattr(u, "username", "") or "").strip()


# ==========================================================
# REQUEST BODIES (SCHEMA)
# ==========================================================

class StrictBooleanField(serializers.BooleanField):
    """JSON true/false only; "true" and 1 are rejected."""

    default_error_messages = {"invalid": "Must be a boolean."}

    def to_internal_value(self, data):
        if not isinstance(data, bool):
            self.fail("invalid")
        return data


def _quantity_field(**kwargs):
    return serializers.IntegerField(min_value=1, max_value=MAX_QUANTITY, **kwargs)


def _id_field(**kwargs):
    return serializers.IntegerField(min_value=1, max_value=MAX_ROW_ID, **kwargs)


class SaleAdditionalInputSerializer(serializers.Serializer):
    additional_id = _id_field()
    quantity = _quantity_field(required=False, default=1)
    unit_price = serializers.DecimalField(
        max_digits=None,
        decimal_places=None,
        min_value=Decimal("0"),
        max_value=MAX_UNIT_PRICE,
        help_text="Rounded half-up to 2 decimal places.",
    )


class SaleLineInputSerializer(serializers.Serializer):
    product_id = _id_field()
    quantity = _quantity_field()
    unit_price = serializers.DecimalField(
        max_digits=None,
        decimal_places=None,
        min_value=Decimal("0.01"),
        max_value=MAX_UNIT_PRICE,
        required=False,
        help_text="Required for variable-price products; ignored otherwise. Rounded half-up to 2 decimal places.",
    )
    is_delivery = StrictBooleanField(required=False, default=False)
    additionals = SaleAdditionalInputSerializer(many=True, required=False)


class SaleInputSerializer(serializers.Serializer):
    payment_method_id = _id_field()
    items = SaleLineInputSerializer(many=True, allow_empty=False)


class SaleEditLineInputSerializer(serializers.Serializer):
    id = _id_field(help_text="Existing sale line id.")
    product_id = _id_field(required=False)
    quantity = _quantity_field(required=False)
    unit_price = serializers.DecimalField(
        max_digits=None,
        decimal_places=None,
        min_value=Decimal("0.01"),
        max_value=MAX_UNIT_PRICE,
        required=False,
        help_text="Variable-price lines only. Rounded half-up to 2 decimal places.",
    )
    is_delivery = StrictBooleanField(required=False)
    additionals = SaleAdditionalInputSerializer(
        many=True,
        required=False,
        help_text="Replaces the line's add-ons when present.",
    )


class SaleEditInputSerializer(serializers.Serializer):
    payment_method_id = _id_field(required=False)
    items = SaleEditLineInputSerializer(many=True, allow_empty=False)
