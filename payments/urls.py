from django.urls import path

from .views import OrderInvoiceView

urlpatterns = [
    path('orders/<uuid:order_id>/invoice/', OrderInvoiceView.as_view(), name='store-order-invoice'),
]
