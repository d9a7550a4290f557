from rest_framework import serializers

from .models import Payment


class TransactionSerializer(serializers.ModelSerializer):
    vendor_amount = serializers.DecimalField(max_digits=12, decimal_places=2, read_only=True)
    order_id = serializers.UUIDField(source="order.id", read_only=True)
    order_number = serializers.CharField(source="order.order_number", read_only=True)
    customer_name = serializers.CharField(source="order.customer_name", read_only=True)
    customer_email = serializers.CharField(source="order.customer_email", read_only=True)
    shop_id = serializers.UUIDField(source="order.shop.id", read_only=True)
    shop_name = serializers.CharField(source="order.shop.name", read_only=True)

    class Meta:
        model = Payment
        fields = [
            "id",
            "order_id",
            "order_number",
            "amount",
            "application_fee_amount",
            "vendor_amount",
            "currency",
            "status",
            "payment_method",
            "provider",
            "stripe_payment_intent_id",
            "customer_name",
            "customer_email",
            "shop_id",
            "shop_name",
            "created_at",
        ]
        read_only_fields = fields


class AdminTransactionSerializer(TransactionSerializer):
    vendor_id = serializers.UUIDField(source="order.shop.vendor.id", read_only=True)
    vendor_name = serializers.CharField(source="order.shop.vendor.business_name", read_only=True)

    class Meta(TransactionSerializer.Meta):
        fields = TransactionSerializer.Meta.fields + [
            "vendor_id",
            "vendor_name",
            "connected_account_id",
            "transaction_id",
        ]
        read_only_fields = fields


class InvoiceRequestSerializer(serializers.Serializer):
    payment_intent_id = serializers.CharField(required=False, allow_blank=True, max_length=255)


class ConnectOnboardingSerializer(serializers.Serializer):
    return_path = serializers.CharField(required=False, allow_blank=True, max_length=255)
