from django.urls import path, include
from rest_framework.routers import SimpleRouter

from .views import VendorNotificationViewSet

router = SimpleRouter()
router.register(r'notifications', VendorNotificationViewSet, basename='vendor-notification')

urlpatterns = [
    path('', include(router.urls)),
]
