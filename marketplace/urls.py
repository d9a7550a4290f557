from django.urls import path, include
from rest_framework.routers import SimpleRouter

from .views import (
    AddressViewSet,
    CartViewSet,
    CategoryViewSet,
    CheckoutView,
    ConfirmPaymentView,
    OrderViewSet,
    ProductReviewViewSet,
    ProductViewSet,
    WishlistViewSet,
)

router = SimpleRouter()
router.register(r'products', ProductViewSet, basename='store-product')
router.register(r'categories', CategoryViewSet, basename='store-category')
router.register(r'cart', CartViewSet, basename='store-cart')
router.register(r'wishlist', WishlistViewSet, basename='store-wishlist')
router.register(r'addresses', AddressViewSet, basename='store-address')
router.register(r'orders', OrderViewSet, basename='store-order')
router.register(r'reviews', ProductReviewViewSet, basename='store-review')

urlpatterns = [
    path('checkout/', CheckoutView.as_view(), name='store-checkout'),
    path('checkout/confirm-payment/', ConfirmPaymentView.as_view(), name='store-confirm-payment'),
    path('', include(router.urls)),
]
