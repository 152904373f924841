# sales/serializers/payment_method.py

from rest_framework import serializers

from sales.models import PaymentMethod


class PaymentMethodSerializer(serializers.ModelSerializer):
    name = serializers.CharField(required=True, allow_blank=False, max_length=100)

    class Meta:
        model = PaymentMethod
        fields = ["id", "name", "created_at"]
        read_only_fields = ["id", "created_at"]

    def validate_name(self, value: str):
        v = (value or "").strip()
        if not v:
            raise serializers.ValidationError("name cannot be blank")

        qs = PaymentMethod.objects.filter(name__iexact=v)
        if self.instance is not None:
            qs = qs.exclude(pk=self.instance.pk)
        if qs.exists():
            raise serializers.ValidationError("A payment method with this name already exists")
        return v
