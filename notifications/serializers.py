from rest_framework import serializers

from .models import EmailDelivery, VendorNotification


class VendorNotificationSerializer(serializers.ModelSerializer):
    class Meta:
        model = VendorNotification
        fields = [
            "id",
            "type",
            "title",
            "message",
            "data",
            "is_read",
            "read_at",
            "created_at",
        ]
        read_only_fields = fields


class EmailDeliverySerializer(serializers.ModelSerializer):
    class Meta:
        model = EmailDelivery
        fields = [
            "id",
            "dedupe_key",
            "type",
            "to_email",
            "order",
            "status",
            "attempts",
            "last_error",
            "last_attempt_at",
            "sent_at",
            "created_at",
        ]
        read_only_fields = fields
