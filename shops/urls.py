from django.urls import path, include
from rest_framework.routers import SimpleRouter

from .views import StoreShopViewSet

router = SimpleRouter()
router.register(r'shops', StoreShopViewSet, basename='store-shop')

urlpatterns = [
    path('', include(router.urls)),
]
