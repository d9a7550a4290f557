from django.urls import path

from .views import StoreCouponListView, ValidateCouponView

urlpatterns = [
    path('coupons/', StoreCouponListView.as_view(), name='store-coupon-list'),
    path('coupons/validate/', ValidateCouponView.as_view(), name='coupon-validate'),
]
