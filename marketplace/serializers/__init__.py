"""
Marketplace serializers, re-exported so callers can import from
``marketplace.serializers``.
"""
from .cart import (
    AddToCartSerializer,
    CartItemSerializer,
    CartSerializer,
    MergeCartSerializer,
    UpdateCartItemSerializer,
)
from .catalog import (
    AdminCategorySerializer,
    AdminProductSerializer,
    CategorySerializer,
    CategoryToggleSerializer,
    ProductDetailSerializer,
    ProductListSerializer,
    ProductStatusSerializer,
)
from .customers import CustomerAddressSerializer, WishlistItemSerializer, WishlistProductSerializer
from .orders import (
    CancelOrderSerializer,
    CheckoutResultSerializer,
    CheckoutSerializer,
    ConfirmPaymentSerializer,
    ManagedOrderSerializer,
    OrderItemSerializer,
    OrderLookupSerializer,
    OrdersByIdsSerializer,
    OrderSerializer,
    OrderStatsSerializer,
    OrderStatusUpdateSerializer,
)
from .reviews import (
    AdminProductReviewSerializer,
    AdminReviewDeleteSerializer,
    ProductReviewSerializer,
    ReviewCreateSerializer,
    ReviewStatusSerializer,
    ReviewUpdateSerializer,
    VendorResponseSerializer,
)
