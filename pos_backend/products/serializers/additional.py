# products/serializers/additional.py

from decimal import Decimal

from rest_framework import serializers

from products.models import Additional, AdditionalCategory


class AdditionalCategorySerializer(serializers.ModelSerializer):
    name = serializers.CharField(required=True, allow_blank=False, max_length=255)
    description = serializers.CharField(required=False, allow_blank=True, allow_null=True)

    class Meta:
        model = AdditionalCategory
        fields = ["id", "name", "description", "created_at", "updated_at"]
        read_only_fields = ["id", "created_at", "updated_at"]

    def validate_name(self, value: str):
        v = (value or "").strip()
        if not v:
            raise serializers.ValidationError("name cannot be blank")

        qs = AdditionalCategory.objects.filter(name__iexact=v)
        if self.instance is not None:
            qs = qs.exclude(pk=self.instance.pk)
        if qs.exists():
            raise serializers.ValidationError("A category with this name already exists")
        return v

    def validate_description(self, value):
        return (value or "").strip() or None


class AdditionalSerializer(serializers.ModelSerializer):
    category = serializers.PrimaryKeyRelatedField(queryset=AdditionalCategory.objects.all())
    category_name = serializers.CharField(source="category.name", read_only=True)
    price = serializers.DecimalField(max_digits=10, decimal_places=2)

    class Meta:
        model = Additional
        fields = [
            "id",
            "name",
            "price",
            "category",
            "category_name",
            "suspended",
            "created_at",
            "updated_at",
        ]
        read_only_fields = ["id", "category_name", "created_at", "updated_at"]

    def validate_name(self, value: str):
        v = (value or "").strip()
        if not v:
            raise serializers.ValidationError("name cannot be blank")
        return v

    def validate_price(self, value):
        if value is None or value < Decimal("0.00"):
            raise serializers.ValidationError("Price must be non-negative")
        return value
