from django.contrib import admin

from .models import ProductShippingMethod, ShippingMethod


@admin.register(ShippingMethod)
class ShippingMethodAdmin(admin.ModelAdmin):
    list_display = ['name', 'shop', 'price', 'duration', 'is_active', 'created_at']
    list_filter = ['is_active']
    search_fields = ['name', 'description', 'shop__name']


@admin.register(ProductShippingMethod)
class ProductShippingMethodAdmin(admin.ModelAdmin):
    list_display = ['product', 'shipping_method', 'created_at']
    search_fields = ['product__name', 'shipping_method__name']
