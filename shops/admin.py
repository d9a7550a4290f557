from django.contrib import admin
from simple_history.admin import SimpleHistoryAdmin

from .models import Shop, Vendor


class ShopInline(admin.TabularInline):
    model = Shop
    extra = 0
    fields = ['name', 'slug', 'status']
    show_change_link = True


@admin.register(Vendor)
class VendorAdmin(admin.ModelAdmin):
    list_display = ['business_name', 'user', 'status', 'commission_rate', 'stripe_charges_enabled', 'created_at']
    list_filter = ['status', 'stripe_charges_enabled', 'stripe_payouts_enabled']
    search_fields = ['business_name', 'contact_email', 'user__email']
    readonly_fields = ['stripe_connected_account_id', 'created_at', 'updated_at']
    inlines = [ShopInline]


@admin.register(Shop)
class ShopAdmin(SimpleHistoryAdmin):
    list_display = ['name', 'slug', 'vendor', 'status', 'total_products', 'total_orders', 'created_at']
    list_filter = ['status', 'enable_notifications']
    search_fields = ['name', 'slug', 'email']
    prepopulated_fields = {'slug': ('name',)}
    readonly_fields = ['created_at', 'updated_at']
