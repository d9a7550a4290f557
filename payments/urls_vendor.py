from django.urls import path, include
from rest_framework.routers import SimpleRouter

from .views import StripeConnectViewSet, VendorTransactionViewSet

router = SimpleRouter()
router.register(r'transactions', VendorTransactionViewSet, basename='vendor-shop-transaction')
router.register(r'stripe-connect', StripeConnectViewSet, basename='vendor-stripe-connect')

urlpatterns = [
    path('', include(router.urls)),
]
