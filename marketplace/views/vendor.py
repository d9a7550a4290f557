from django.http import Http404
from rest_framework import filters, generics, mixins, viewsets
from rest_framework.decorators import action
from rest_framework.exceptions import NotFound
from rest_framework.response import Response

from shops.mixins import ShopScopedViewMixin
from ..models import ProductReview
from ..serializers import (
    AdminProductReviewSerializer,
    ManagedOrderSerializer,
    OrderStatusUpdateSerializer,
    VendorResponseSerializer,
)
from ..services import DashboardService, OrderService, ReviewService


class VendorOrderViewSet(
    ShopScopedViewMixin,
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    viewsets.GenericViewSet,
):
    serializer_class = ManagedOrderSerializer
    filter_backends = [filters.SearchFilter, filters.OrderingFilter]
    search_fields = ["order_number", "guest_email", "user__email"]
    ordering_fields = ["created_at", "total_amount", "status"]
    ordering = ["-created_at"]

    def get_queryset(self):
        return OrderService.shop_orders([self.shop.id], self.request.query_params.get("status"))

    def get_object(self):
        try:
            return super().get_object()
        except Http404:
            raise NotFound("Order not found")

    @action(detail=True, methods=["post"], url_path="status")
    def set_status(self, request, shop_slug=None, pk=None):
        order = self.get_object()
        serializer = OrderStatusUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        return Response(
            OrderService.update_status(
                order,
                serializer.validated_data["status"],
                note=serializer.validated_data["internal_notes"],
            )
        )

    @action(detail=False, methods=["get"])
    def stats(self, request, shop_slug=None):
        return Response(OrderService.vendor_stats([self.shop.id]))


class VendorReviewViewSet(ShopScopedViewMixin, mixins.ListModelMixin, viewsets.GenericViewSet):
    """Reviews of the shop's products, with the vendor's public reply."""

    serializer_class = AdminProductReviewSerializer
    filter_backends = [filters.OrderingFilter]
    ordering_fields = ["created_at", "rating"]
    ordering = ["-created_at"]

    def get_queryset(self):
        queryset = ProductReview.objects.filter(shop=self.shop).select_related("user", "product", "shop")
        rating = self.request.query_params.get("rating")
        if rating:
            queryset = queryset.filter(rating=rating)
        return queryset

    def get_object(self):
        try:
            return super().get_object()
        except Http404:
            raise NotFound("Review not found")

    @action(detail=True, methods=["post"])
    def respond(self, request, shop_slug=None, pk=None):
        review = self.get_object()
        serializer = VendorResponseSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        review = ReviewService.respond(review, serializer.validated_data["response"])
        return Response(self.get_serializer(review).data)


class VendorDashboardView(ShopScopedViewMixin, generics.GenericAPIView):
    """Stats, recent orders, best sellers, low stock and six months of sales for one shop."""

    def get(self, request, shop_slug=None):
        return Response(DashboardService.vendor_dashboard(self.shop))
