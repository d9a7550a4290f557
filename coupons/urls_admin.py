from django.urls import path, include
from rest_framework.routers import SimpleRouter

from .views import AdminCouponViewSet

router = SimpleRouter()
router.register(r'coupons', AdminCouponViewSet, basename='admin-coupon')

urlpatterns = [
    path('', include(router.urls)),
]
