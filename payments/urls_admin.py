from django.urls import path, include
from rest_framework.routers import SimpleRouter

from .views import AdminTransactionViewSet

router = SimpleRouter()
router.register(r'transactions', AdminTransactionViewSet, basename='admin-transaction')

urlpatterns = [
    path('', include(router.urls)),
]
