from django.urls import path

from .views import AvailableShippingMethodsView

urlpatterns = [
    path('shipping/available/', AvailableShippingMethodsView.as_view(), name='shipping-available'),
]
