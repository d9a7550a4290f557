from django.urls import path

from .views import VendorShopListView

urlpatterns = [
    path('', VendorShopListView.as_view(), name='vendor-shop-list'),
]
