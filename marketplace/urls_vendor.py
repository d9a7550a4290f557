from django.urls import path, include
from rest_framework.routers import SimpleRouter

from .views import VendorDashboardView, VendorOrderViewSet, VendorReviewViewSet

router = SimpleRouter()
router.register(r'orders', VendorOrderViewSet, basename='vendor-order')
router.register(r'reviews', VendorReviewViewSet, basename='vendor-review')

urlpatterns = [
    path('dashboard/', VendorDashboardView.as_view(), name='vendor-shop-dashboard'),
    path('', include(router.urls)),
]
