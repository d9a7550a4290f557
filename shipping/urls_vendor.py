from django.urls import path, include
from rest_framework.routers import SimpleRouter

from .views import VendorShippingMethodViewSet

router = SimpleRouter()
router.register(r'shipping-methods', VendorShippingMethodViewSet, basename='vendor-shipping-method')

urlpatterns = [
    path('', include(router.urls)),
]
