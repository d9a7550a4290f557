from decimal import Decimal

from rest_framework import serializers

from .models import ShippingMethod


class ShippingMethodSerializer(serializers.ModelSerializer):
    name = serializers.CharField(
        min_length=2,
        max_length=100,
        error_messages={
            "min_length": "Name must be at least 2 characters",
            "max_length": "Name must be at most 100 characters",
        },
    )
    price = serializers.DecimalField(
        max_digits=12,
        decimal_places=2,
        min_value=Decimal("0"),
        error_messages={"min_value": "Price must be greater than or equal to 0"},
    )
    duration = serializers.CharField(
        min_length=1,
        max_length=50,
        error_messages={
            "blank": "Duration is required",
            "max_length": "Duration must be at most 50 characters",
        },
    )

    class Meta:
        model = ShippingMethod
        fields = [
            "id",
            "name",
            "description",
            "price",
            "duration",
            "is_active",
            "created_at",
            "updated_at",
        ]
        read_only_fields = ["id", "created_at", "updated_at"]


class AvailableShippingRequestSerializer(serializers.Serializer):
    product_ids = serializers.ListField(child=serializers.UUIDField(), allow_empty=True)
