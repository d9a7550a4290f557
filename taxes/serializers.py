from decimal import Decimal

from rest_framework import serializers

from .models import TaxRate


class TaxRateSerializer(serializers.ModelSerializer):
    rate = serializers.DecimalField(
        max_digits=5,
        decimal_places=2,
        min_value=Decimal("0"),
        max_value=Decimal("100"),
    )
    product_count = serializers.SerializerMethodField()

    class Meta:
        model = TaxRate
        fields = [
            "id",
            "name",
            "rate",
            "country",
            "state",
            "zip",
            "priority",
            "is_active",
            "is_compound",
            "product_count",
            "created_at",
            "updated_at",
        ]
        read_only_fields = ["id", "product_count", "created_at", "updated_at"]

    def get_product_count(self, obj):
        annotated = getattr(obj, "product_count", None)
        if annotated is not None:
            return annotated
        return obj.products.count()

    def validate_country(self, value):
        return value.upper()


class AdminTaxRateSerializer(TaxRateSerializer):
    shop_id = serializers.UUIDField(source="shop.id", read_only=True)
    shop_name = serializers.CharField(source="shop.name", read_only=True)
    vendor_id = serializers.UUIDField(source="shop.vendor_id", read_only=True)

    class Meta(TaxRateSerializer.Meta):
        fields = TaxRateSerializer.Meta.fields + ["shop_id", "shop_name", "vendor_id"]
        read_only_fields = fields


class TaxRateToggleSerializer(serializers.Serializer):
    is_active = serializers.BooleanField(required=False)
