from rest_framework import serializers

from ..models import CustomerAddress, WishlistItem
from .catalog import ProductListSerializer


class WishlistItemSerializer(serializers.ModelSerializer):
    product = ProductListSerializer(read_only=True)

    class Meta:
        model = WishlistItem
        fields = ["id", "product", "created_at"]
        read_only_fields = fields


class WishlistProductSerializer(serializers.Serializer):
    product_id = serializers.UUIDField()


class CustomerAddressSerializer(serializers.ModelSerializer):
    class Meta:
        model = CustomerAddress
        fields = [
            "id",
            "type",
            "title",
            "first_name",
            "last_name",
            "phone",
            "street",
            "city",
            "state",
            "zip",
            "country",
            "is_default",
            "created_at",
            "updated_at",
        ]
        read_only_fields = ["id", "created_at", "updated_at"]
