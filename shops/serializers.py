from decimal import Decimal

from django.contrib.auth.password_validation import validate_password
from rest_framework import serializers

from .models import Shop, Vendor


class VendorSerializer(serializers.ModelSerializer):
    owner_email = serializers.EmailField(source="user.email", read_only=True)
    owner_name = serializers.CharField(source="user.get_full_name", read_only=True)

    class Meta:
        model = Vendor
        fields = [
            "id",
            "business_name",
            "contact_email",
            "contact_phone",
            "status",
            "commission_rate",
            "stripe_connected_account_id",
            "stripe_onboarding_complete",
            "stripe_charges_enabled",
            "stripe_payouts_enabled",
            "owner_email",
            "owner_name",
            "created_at",
        ]
        read_only_fields = fields


class ShopSerializer(serializers.ModelSerializer):
    class Meta:
        model = Shop
        fields = [
            "id",
            "name",
            "slug",
            "description",
            "logo",
            "banner",
            "category",
            "address",
            "phone",
            "email",
            "status",
            "rating",
            "total_products",
            "total_orders",
            "created_at",
        ]
        read_only_fields = fields


class AdminShopSerializer(serializers.ModelSerializer):
    vendor = VendorSerializer(read_only=True)
    product_count = serializers.IntegerField(read_only=True, required=False)

    class Meta:
        model = Shop
        fields = [
            "id",
            "name",
            "slug",
            "description",
            "logo",
            "banner",
            "category",
            "address",
            "phone",
            "email",
            "status",
            "enable_notifications",
            "rating",
            "total_products",
            "total_orders",
            "product_count",
            "vendor",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class ShopStatusSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=Shop.Status.choices)


class VendorCommissionSerializer(serializers.Serializer):
    commission_rate = serializers.DecimalField(
        max_digits=5,
        decimal_places=2,
        min_value=Decimal("0"),
        max_value=Decimal("100"),
    )


class VendorRegistrationSerializer(serializers.Serializer):
    name = serializers.CharField(min_length=2, max_length=200)
    email = serializers.EmailField()
    password = serializers.CharField(write_only=True, style={"input_type": "password"})
    store_name = serializers.CharField(min_length=2, max_length=200)
    store_description = serializers.CharField(required=False, allow_blank=True, default="")
    contact_phone = serializers.CharField(required=False, allow_blank=True, max_length=30, default="")
    address = serializers.CharField(required=False, allow_blank=True, max_length=255, default="")

    def validate_password(self, value):
        validate_password(value)
        return value
