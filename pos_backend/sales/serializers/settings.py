# sales/serializers/settings.py

from rest_framework import serializers

from sales.models import SalesSettings


class SalesSettingsSerializer(serializers.ModelSerializer):
    recent_sales_limit = serializers.IntegerField(
        min_value=1,
        max_value=500,
        error_messages={
            "min_value": "Recent sales limit must be between 1 and 500",
            "max_value": "Recent sales limit must be between 1 and 500",
        },
    )

    class Meta:
        model = SalesSettings
        fields = ["recent_sales_limit", "recent_sales_enabled", "dark_mode", "updated_at"]
        read_only_fields = ["updated_at"]
