from django.urls import path, include
from rest_framework.routers import SimpleRouter

from .views import AdminShopViewSet, AdminVendorViewSet

router = SimpleRouter()
router.register(r'shops', AdminShopViewSet, basename='admin-shop')
router.register(r'vendors', AdminVendorViewSet, basename='admin-vendor')

urlpatterns = [
    path('', include(router.urls)),
]
