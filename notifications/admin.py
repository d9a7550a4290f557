from django.contrib import admin

from .models import EmailDelivery, VendorNotification


@admin.register(EmailDelivery)
class EmailDeliveryAdmin(admin.ModelAdmin):
    list_display = ("dedupe_key", "type", "to_email", "status", "attempts", "sent_at")
    list_filter = ("type", "status")
    search_fields = ("dedupe_key", "to_email")
    raw_id_fields = ("order",)
    readonly_fields = ("attempts", "last_error", "last_attempt_at", "sent_at")


@admin.register(VendorNotification)
class VendorNotificationAdmin(admin.ModelAdmin):
    list_display = ("title", "shop", "type", "is_read", "created_at")
    list_filter = ("type", "is_read")
    search_fields = ("title", "message", "shop__name")
    raw_id_fields = ("shop",)
