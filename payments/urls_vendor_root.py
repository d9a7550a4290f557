from django.urls import path, include
from rest_framework.routers import SimpleRouter

from .views import VendorTransactionViewSet

router = SimpleRouter()
router.register(r'transactions', VendorTransactionViewSet, basename='vendor-transaction')

urlpatterns = [
    path('', include(router.urls)),
]
