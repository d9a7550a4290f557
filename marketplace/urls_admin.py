from django.urls import path, include
from rest_framework.routers import SimpleRouter

from .views import (
    AdminCategoryViewSet,
    AdminDashboardViewSet,
    AdminOrderViewSet,
    AdminProductViewSet,
    AdminReviewViewSet,
)

router = SimpleRouter()
router.register(r'orders', AdminOrderViewSet, basename='admin-order')
router.register(r'reviews', AdminReviewViewSet, basename='admin-review')
router.register(r'products', AdminProductViewSet, basename='admin-product')
router.register(r'categories', AdminCategoryViewSet, basename='admin-category')
router.register(r'dashboard', AdminDashboardViewSet, basename='admin-dashboard')

urlpatterns = [
    path('', include(router.urls)),
]
