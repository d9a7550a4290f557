"""
Marketplace services.
"""
from .cart_service import CartService
from .catalog_service import CatalogAdminService
from .checkout_service import CheckoutService
from .customer_service import AddressService, WishlistService
from .dashboard_service import DashboardService
from .order_service import OrderService
from .review_service import ReviewService

__all__ = [
    'AddressService',
    'CartService',
    'CatalogAdminService',
    'CheckoutService',
    'DashboardService',
    'OrderService',
    'ReviewService',
    'WishlistService',
]
