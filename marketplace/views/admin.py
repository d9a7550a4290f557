from django.conf import settings
from django.core.cache import cache
from django.http import Http404
from rest_framework import filters, mixins, viewsets
from rest_framework.decorators import action
from rest_framework.exceptions import NotFound
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from core.api import IsAdmin
from ..serializers import (
    AdminCategorySerializer,
    AdminProductReviewSerializer,
    AdminProductSerializer,
    AdminReviewDeleteSerializer,
    CancelOrderSerializer,
    CategoryToggleSerializer,
    ManagedOrderSerializer,
    OrderStatusUpdateSerializer,
    ProductStatusSerializer,
    ReviewStatusSerializer,
)
from ..services import CatalogAdminService, DashboardService, OrderService, ReviewService


def _query_bool(value):
    if value in ("true", "1"):
        return True
    if value in ("false", "0"):
        return False
    return None


class AdminOrderViewSet(mixins.ListModelMixin, mixins.RetrieveModelMixin, viewsets.GenericViewSet):
    """Every order of the marketplace (``?status=&shop=&search=``)."""

    permission_classes = [IsAuthenticated, IsAdmin]
    serializer_class = ManagedOrderSerializer
    filter_backends = [filters.OrderingFilter]
    ordering_fields = ["created_at", "total_amount", "status"]
    ordering = ["-created_at"]

    def get_queryset(self):
        params = self.request.query_params
        return OrderService.admin_orders(
            status=params.get("status"),
            shop_id=params.get("shop"),
            search=params.get("search"),
        )

    def get_object(self):
        try:
            return super().get_object()
        except Http404:
            raise NotFound("Order not found")

    @action(detail=True, methods=["post"], url_path="status")
    def set_status(self, request, pk=None):
        order = self.get_object()
        serializer = OrderStatusUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        return Response(
            OrderService.update_status(
                order,
                serializer.validated_data["status"],
                note=serializer.validated_data["internal_notes"],
                admin=True,
            )
        )

    @action(detail=True, methods=["post"])
    def cancel(self, request, pk=None):
        order = self.get_object()
        serializer = CancelOrderSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        return Response(OrderService.admin_cancel(order, serializer.validated_data["reason"]))

    @action(detail=False, methods=["get"])
    def stats(self, request):
        return Response(OrderService.admin_stats())


class AdminReviewViewSet(
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    mixins.DestroyModelMixin,
    viewsets.GenericViewSet,
):
    permission_classes = [IsAuthenticated, IsAdmin]
    serializer_class = AdminProductReviewSerializer
    filter_backends = [filters.OrderingFilter]
    ordering_fields = ["created_at", "rating", "helpful_count"]
    ordering = ["-created_at"]

    def get_queryset(self):
        params = self.request.query_params
        return ReviewService.admin_reviews(
            status=params.get("status"),
            shop_id=params.get("shop"),
            rating=params.get("rating"),
            search=params.get("search"),
        )

    def get_object(self):
        try:
            return super().get_object()
        except Http404:
            raise NotFound("Review not found")

    def destroy(self, request, *args, **kwargs):
        review = self.get_object()
        serializer = AdminReviewDeleteSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        return Response(ReviewService.admin_delete(review, serializer.validated_data["reason"]))

    @action(detail=True, methods=["post"], url_path="status")
    def set_status(self, request, pk=None):
        review = self.get_object()
        serializer = ReviewStatusSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        return Response(ReviewService.set_status(review, serializer.validated_data["status"]))

    @action(detail=False, methods=["get"])
    def stats(self, request):
        return Response(ReviewService.admin_stats())


class AdminProductViewSet(
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    mixins.DestroyModelMixin,
    viewsets.GenericViewSet,
):
    """Every product of every shop (``?shop=&vendor=&is_active=&search=``)."""

    permission_classes = [IsAuthenticated, IsAdmin]
    serializer_class = AdminProductSerializer
    filter_backends = [filters.OrderingFilter]
    ordering_fields = ["created_at", "name", "selling_price", "stock"]
    ordering = ["-created_at"]

    def get_queryset(self):
        params = self.request.query_params
        return CatalogAdminService.admin_products(
            shop_id=params.get("shop"),
            vendor_id=params.get("vendor"),
            search=params.get("search"),
            is_active=_query_bool(params.get("is_active")),
        )

    def get_object(self):
        try:
            return super().get_object()
        except Http404:
            raise NotFound("Product not found.")

    def destroy(self, request, *args, **kwargs):
        return Response(CatalogAdminService.delete_product(self.get_object()))

    @action(detail=True, methods=["post"], url_path="status")
    def set_status(self, request, pk=None):
        product = self.get_object()
        serializer = ProductStatusSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        result = CatalogAdminService.set_product_status(product, serializer.validated_data["status"])
        result["product"] = self.get_serializer(product).data
        return Response(result)


class AdminCategoryViewSet(
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    mixins.DestroyModelMixin,
    viewsets.GenericViewSet,
):
    permission_classes = [IsAuthenticated, IsAdmin]
    serializer_class = AdminCategorySerializer
    filter_backends = [filters.OrderingFilter]
    ordering_fields = ["name", "created_at", "product_count"]
    ordering = ["name"]

    def get_queryset(self):
        params = self.request.query_params
        return CatalogAdminService.admin_categories(
            shop_id=params.get("shop"),
            vendor_id=params.get("vendor"),
            search=params.get("search"),
            is_active=_query_bool(params.get("is_active")),
            parent_id=params.get("parent"),
        )

    def get_object(self):
        try:
            return super().get_object()
        except Http404:
            raise NotFound("Category not found.")

    def destroy(self, request, *args, **kwargs):
        return Response(CatalogAdminService.delete_category(self.get_object()))

    @action(detail=True, methods=["post"])
    def toggle(self, request, pk=None):
        serializer = CategoryToggleSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        return Response(
            CatalogAdminService.set_category_active(self.get_object(), serializer.validated_data.get("is_active"))
        )


class AdminDashboardViewSet(viewsets.ViewSet):
    """
    Admin dashboard lists. Each one is cached for ``DASHBOARD_CACHE_TTL``
    seconds; ``?force_refresh=true`` bypasses the cache.
    """

    permission_classes = [IsAuthenticated, IsAdmin]

    def _cached(self, request, key, compute):
        cache_key = f"marketplace:dashboard:admin:{key}"
        if request.query_params.get("force_refresh") != "true":
            cached = cache.get(cache_key)
            if cached is not None:
                return Response(cached)
        data = compute()
        cache.set(cache_key, data, getattr(settings, "DASHBOARD_CACHE_TTL", 300))
        return Response(data)

    @action(detail=False, methods=["get"], url_path="low-stock")
    def low_stock(self, request):
        return self._cached(request, "low_stock", DashboardService.low_stock_products)

    @action(detail=False, methods=["get"], url_path="top-products")
    def top_products(self, request):
        return self._cached(request, "top_products", DashboardService.top_products)

    @action(detail=False, methods=["get"], url_path="recent-orders")
    def recent_orders(self, request):
        return self._cached(request, "recent_orders", DashboardService.recent_orders)
