from django.urls import path, include
from rest_framework.routers import SimpleRouter

from .views import VendorTaxRateViewSet

router = SimpleRouter()
router.register(r'tax-rates', VendorTaxRateViewSet, basename='vendor-tax-rate')

urlpatterns = [
    path('', include(router.urls)),
]
