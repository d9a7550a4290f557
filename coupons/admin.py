from django.contrib import admin
from simple_history.admin import SimpleHistoryAdmin

from .models import Coupon, CouponUsage


@admin.register(Coupon)
class CouponAdmin(SimpleHistoryAdmin):
    list_display = ['code', 'shop', 'type', 'discount_amount', 'usage_count', 'usage_limit', 'is_active', 'active_to']
    list_filter = ['type', 'is_active', 'applicable_to']
    search_fields = ['code', 'description', 'shop__name']
    readonly_fields = ['usage_count', 'created_at', 'updated_at']


@admin.register(CouponUsage)
class CouponUsageAdmin(admin.ModelAdmin):
    list_display = ['coupon', 'order', 'user', 'discount_amount', 'created_at']
    search_fields = ['coupon__code', 'order__order_number', 'user__email']
    readonly_fields = ['coupon', 'order', 'user', 'discount_amount', 'created_at']
