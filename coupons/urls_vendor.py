from django.urls import path, include
from rest_framework.routers import SimpleRouter

from .views import VendorCouponViewSet

router = SimpleRouter()
router.register(r'coupons', VendorCouponViewSet, basename='vendor-coupon')

urlpatterns = [
    path('', include(router.urls)),
]
