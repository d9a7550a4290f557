from django.urls import path, include
from rest_framework.routers import SimpleRouter

from .views import AdminTaxRateViewSet

router = SimpleRouter()
router.register(r'tax-rates', AdminTaxRateViewSet, basename='admin-tax-rate')

urlpatterns = [
    path('', include(router.urls)),
]
