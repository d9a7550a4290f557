from django.contrib import admin

from .models import Payment, WebhookEvent


@admin.register(Payment)
class PaymentAdmin(admin.ModelAdmin):
    list_display = ('id', 'order', 'amount', 'application_fee_amount', 'status', 'provider', 'created_at')
    list_filter = ('status', 'provider', 'payment_method')
    search_fields = ('stripe_payment_intent_id', 'transaction_id', 'order__order_number')
    raw_id_fields = ('order',)
    readonly_fields = ('stripe_client_secret', 'raw_response', 'created_at', 'updated_at')


@admin.register(WebhookEvent)
class WebhookEventAdmin(admin.ModelAdmin):
    list_display = ('stripe_event_id', 'event_type', 'status', 'created_at')
    list_filter = ('status', 'event_type')
    search_fields = ('stripe_event_id', 'event_type')
    readonly_fields = ('payload', 'error_message', 'created_at', 'updated_at')
