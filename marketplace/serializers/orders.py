from decimal import Decimal

from rest_framework import serializers

from ..models import Order, OrderItem


class OrderItemSerializer(serializers.ModelSerializer):
    class Meta:
        model = OrderItem
        fields = [
            "id",
            "product",
            "product_name",
            "product_sku",
            "product_image",
            "variant_options",
            "unit_price",
            "quantity",
            "total_price",
            "discount_amount",
        ]
        read_only_fields = fields


class OrderSerializer(serializers.ModelSerializer):
    """Order as seen by its customer."""

    items = OrderItemSerializer(many=True, read_only=True)
    shop_name = serializers.CharField(source="shop.name", read_only=True)
    shop_slug = serializers.CharField(source="shop.slug", read_only=True)

    class Meta:
        model = Order
        fields = [
            "id",
            "order_number",
            "status",
            "payment_status",
            "fulfillment_status",
            "currency",
            "subtotal",
            "tax_amount",
            "shipping_amount",
            "discount_amount",
            "total_amount",
            "shipping_method",
            "shipping_address",
            "billing_address",
            "customer_notes",
            "coupon_code",
            "shop",
            "shop_name",
            "shop_slug",
            "items",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class ManagedOrderSerializer(OrderSerializer):
    """Order as seen by the shop's vendor or an admin."""

    customer_name = serializers.CharField(read_only=True)
    customer_email = serializers.CharField(read_only=True)

    class Meta(OrderSerializer.Meta):
        fields = OrderSerializer.Meta.fields + [
            "customer_name",
            "customer_email",
            "guest_email",
            "user",
            "internal_notes",
        ]
        read_only_fields = fields


class AddressSerializer(serializers.Serializer):
    first_name = serializers.CharField(max_length=100)
    last_name = serializers.CharField(max_length=100)
    email = serializers.EmailField()
    phone = serializers.CharField(max_length=30)
    street = serializers.CharField(max_length=255)
    city = serializers.CharField(max_length=100)
    state = serializers.CharField(max_length=100)
    zip = serializers.CharField(max_length=20)
    country = serializers.CharField(max_length=100)


class CheckoutCouponSerializer(serializers.Serializer):
    shop_id = serializers.UUIDField()
    code = serializers.CharField(max_length=50)


class CheckoutSerializer(serializers.Serializer):
    session_id = serializers.CharField(required=False, allow_blank=True, max_length=100)
    shipping_address = AddressSerializer()
    billing_address = AddressSerializer(required=False, allow_null=True)
    use_same_billing_address = serializers.BooleanField(default=True)
    shipping_method = serializers.UUIDField()
    customer_notes = serializers.CharField(required=False, allow_blank=True, max_length=1000, default="")
    coupon_codes = CheckoutCouponSerializer(many=True, required=False, default=list)

    def validate(self, attrs):
        if not attrs["use_same_billing_address"] and not attrs.get("billing_address"):
            raise serializers.ValidationError({"billing_address": "A billing address is required."})
        return attrs


class CheckoutResultSerializer(serializers.Serializer):
    order_ids = serializers.ListField(child=serializers.UUIDField())
    payment_intent_id = serializers.CharField()
    client_secret = serializers.CharField()
    total_amount = serializers.DecimalField(max_digits=12, decimal_places=2)


class ConfirmPaymentSerializer(serializers.Serializer):
    payment_intent_id = serializers.CharField(max_length=255)
    order_ids = serializers.ListField(child=serializers.UUIDField(), min_length=1)


class OrderLookupSerializer(serializers.Serializer):
    payment_intent_id = serializers.CharField(required=False, allow_blank=True, max_length=255)


class OrdersByIdsSerializer(OrderLookupSerializer):
    order_ids = serializers.ListField(child=serializers.UUIDField(), min_length=1, max_length=50)


class CancelOrderSerializer(serializers.Serializer):
    reason = serializers.CharField(required=False, allow_blank=True, max_length=500, default="")


class OrderStatusUpdateSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=Order.OrderStatus.choices)
    internal_notes = serializers.CharField(required=False, allow_blank=True, max_length=1000, default="")


class OrderStatsSerializer(serializers.Serializer):
    total_orders = serializers.IntegerField()
    pending_orders = serializers.IntegerField()
    processing_orders = serializers.IntegerField()
    shipped_orders = serializers.IntegerField()
    delivered_orders = serializers.IntegerField()
    cancelled_orders = serializers.IntegerField()
    total_revenue = serializers.DecimalField(max_digits=14, decimal_places=2, min_value=Decimal("0"))
