from django.contrib import admin
from simple_history.admin import SimpleHistoryAdmin

from .models import (
    Cart,
    CartItem,
    Category,
    CustomerAddress,
    Order,
    OrderItem,
    Product,
    ProductReview,
)


@admin.register(Category)
class CategoryAdmin(admin.ModelAdmin):
    list_display = ('name', 'slug', 'shop', 'parent', 'is_active')
    list_filter = ('is_active',)
    search_fields = ('name', 'slug')
    raw_id_fields = ('shop', 'parent')


@admin.register(Product)
class ProductAdmin(admin.ModelAdmin):
    list_display = ('name', 'shop', 'category', 'selling_price', 'stock', 'average_rating', 'is_active')
    list_filter = ('is_active', 'shop')
    search_fields = ('name', 'sku', 'description')
    raw_id_fields = ('shop', 'category', 'tax_rate')
    readonly_fields = ('average_rating', 'review_count', 'created_at', 'updated_at')


class CartItemInline(admin.TabularInline):
    model = CartItem
    extra = 0
    raw_id_fields = ('product',)


@admin.register(Cart)
class CartAdmin(admin.ModelAdmin):
    list_display = ('id', 'user', 'session_id', 'created_at')
    search_fields = ('user__email', 'session_id')
    raw_id_fields = ('user',)
    inlines = [CartItemInline]


class OrderItemInline(admin.TabularInline):
    model = OrderItem
    extra = 0
    readonly_fields = ('product', 'product_name', 'product_sku', 'unit_price', 'quantity', 'total_price')
    can_delete = False


@admin.register(Order)
class OrderAdmin(SimpleHistoryAdmin):
    list_display = ('order_number', 'shop', 'user', 'status', 'payment_status', 'total_amount', 'created_at')
    list_filter = ('status', 'payment_status', 'fulfillment_status')
    search_fields = ('order_number', 'guest_email', 'user__email')
    raw_id_fields = ('user', 'shop')
    readonly_fields = ('order_number', 'created_at', 'updated_at')
    inlines = [OrderItemInline]


@admin.register(ProductReview)
class ProductReviewAdmin(admin.ModelAdmin):
    list_display = ('product', 'user', 'rating', 'status', 'helpful_count', 'is_verified_purchase', 'created_at')
    list_filter = ('status', 'rating', 'is_verified_purchase')
    search_fields = ('title', 'comment', 'product__name', 'user__email')
    raw_id_fields = ('user', 'product', 'shop', 'order', 'order_item')


@admin.register(CustomerAddress)
class CustomerAddressAdmin(admin.ModelAdmin):
    list_display = ('title', 'user', 'type', 'city', 'country', 'is_default')
    list_filter = ('type', 'is_default')
    search_fields = ('title', 'user__email', 'street', 'city')
    raw_id_fields = ('user',)
