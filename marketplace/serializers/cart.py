from rest_framework import serializers

from ..models import CartItem


class CartItemSerializer(serializers.ModelSerializer):
    product_id = serializers.UUIDField(source="product.id", read_only=True)
    product_name = serializers.CharField(source="product.name", read_only=True)
    product_image = serializers.URLField(source="product.image_url", read_only=True)
    unit_price = serializers.DecimalField(
        source="product.selling_price", max_digits=12, decimal_places=2, read_only=True
    )
    shop_id = serializers.UUIDField(source="product.shop_id", read_only=True)
    shop_name = serializers.CharField(source="product.shop.name", read_only=True)
    stock = serializers.IntegerField(source="product.stock", read_only=True, allow_null=True)
    total_price = serializers.SerializerMethodField()

    class Meta:
        model = CartItem
        fields = [
            "id",
            "product_id",
            "product_name",
            "product_image",
            "unit_price",
            "quantity",
            "total_price",
            "variant_options",
            "shop_id",
            "shop_name",
            "stock",
        ]
        read_only_fields = fields

    def get_total_price(self, obj):
        return str(obj.product.selling_price * obj.quantity)


class CartSerializer(serializers.Serializer):
    """Serializes the summary built by ``CartService.summarize``."""
    items = CartItemSerializer(many=True)
    total_items = serializers.IntegerField()
    subtotal = serializers.DecimalField(max_digits=12, decimal_places=2)
    session_id = serializers.CharField(allow_null=True)


class CartSessionMixin(serializers.Serializer):
    session_id = serializers.CharField(required=False, allow_blank=True, max_length=100)


class AddToCartSerializer(CartSessionMixin):
    product_id = serializers.UUIDField()
    quantity = serializers.IntegerField(min_value=1, max_value=100, default=1)
    variant_options = serializers.DictField(required=False)


class UpdateCartItemSerializer(CartSessionMixin):
    quantity = serializers.IntegerField(min_value=1, max_value=100)


class MergeCartSerializer(serializers.Serializer):
    guest_session_id = serializers.CharField(max_length=100)
