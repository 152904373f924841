# products/serializers/product.py

"""
PRODUCT SERIALIZER

Stock contract (API side):
- stock omitted on create, null, or negative -> untracked (stored as NULL)
- stock >= 0 -> tracked count

Price contract:
- fixed-price products need price > 0
- variable-price products may omit price (stored as 0.00); the cashier
  types the price on each sale
"""

from decimal import Decimal

from rest_framework import serializers

from products.models import Product


class ProductSerializer(serializers.ModelSerializer):
    price = serializers.DecimalField(max_digits=10, decimal_places=2, required=False, allow_null=True)
    category = serializers.CharField(required=False, allow_blank=True, allow_null=True, max_length=255)
    stock = serializers.IntegerField(required=False, allow_null=True)
    tracks_stock = serializers.BooleanField(read_only=True)

    class Meta:
        model = Product
        fields = [
            "id",
            "name",
            "price",
            "category",
            "stock",
            "tracks_stock",
            "variable_price",
            "suspended",
            "created_at",
            "updated_at",
        ]
        read_only_fields = ["id", "tracks_stock", "created_at", "updated_at"]

    def validate_name(self, value):
        v = (value or "").strip()
        if not v:
            raise serializers.ValidationError("name is required")
        return v

    def validate_category(self, value):
        return (value or "").strip() or None

    def validate_stock(self, value):
        if value is None or value < 0:
            return None
        return value

    def validate(self, attrs):
        inst = self.instance

        variable_price = attrs.get(
            "variable_price",
            inst.variable_price if inst is not None else False,
        )

        if "price" in attrs:
            price = attrs["price"]
        else:
            price = inst.price if inst is not None else None

        if price is not None and price < Decimal("0.00"):
            raise serializers.ValidationError({"price": "Price must be non-negative"})

        if variable_price:
            if price is None:
                attrs["price"] = Decimal("0.00")
        elif price is None or price <= Decimal("0.00"):
            raise serializers.ValidationError({"price": "Invalid price"})

        return attrs
