from django.contrib import admin
from django.urls import include, path

from .health import health_check_view

store_patterns = [
    path('', include('shops.urls')),
    path('', include('shipping.urls')),
    path('', include('coupons.urls')),
    path('', include('payments.urls')),
    path('', include('marketplace.urls')),
]

vendor_shop_patterns = [
    path('', include('shipping.urls_vendor')),
    path('', include('taxes.urls_vendor')),
    path('', include('coupons.urls_vendor')),
    path('', include('notifications.urls_vendor')),
    path('', include('payments.urls_vendor')),
    path('', include('marketplace.urls_vendor')),
]

vendor_patterns = [
    path('shops/', include('shops.urls_vendor')),
    path('shops/<slug:shop_slug>/', include(vendor_shop_patterns)),
    path('', include('payments.urls_vendor_root')),
]

admin_patterns = [
    path('', include('shops.urls_admin')),
    path('', include('taxes.urls_admin')),
    path('', include('coupons.urls_admin')),
    path('', include('payments.urls_admin')),
    path('', include('marketplace.urls_admin')),
]

urlpatterns = [
    path('admin/', admin.site.urls),
    path('health/', health_check_view, name='health'),
    path('', include('django_prometheus.urls')),
    path('api/v1/auth/', include('users.urls')),
    path('api/v1/store/', include(store_patterns)),
    path('api/v1/vendor/', include(vendor_patterns)),
    path('api/v1/admin/', include(admin_patterns)),
    path('api/v1/payments/webhooks/', include('payments.urls_webhooks')),
]
