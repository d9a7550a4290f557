from .admin import (
    AdminCategoryViewSet,
    AdminDashboardViewSet,
    AdminOrderViewSet,
    AdminProductViewSet,
    AdminReviewViewSet,
)
from .cart import CartViewSet
from .catalog import CategoryViewSet, ProductViewSet
from .customers import AddressViewSet, WishlistViewSet
from .orders import CheckoutView, ConfirmPaymentView, OrderViewSet
from .reviews import ProductReviewViewSet
from .vendor import VendorDashboardView, VendorOrderViewSet, VendorReviewViewSet

__all__ = [
    "CategoryViewSet",
    "ProductViewSet",
    "CartViewSet",
    "WishlistViewSet",
    "AddressViewSet",
    "CheckoutView",
    "ConfirmPaymentView",
    "OrderViewSet",
    "ProductReviewViewSet",
    "VendorDashboardView",
    "VendorOrderViewSet",
    "VendorReviewViewSet",
    "AdminCategoryViewSet",
    "AdminDashboardViewSet",
    "AdminOrderViewSet",
    "AdminProductViewSet",
    "AdminReviewViewSet",
]
