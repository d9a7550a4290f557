import logging

from django.db.models import Q
from django.http import Http404
from django.utils import timezone
from django_filters.rest_framework import DjangoFilterBackend
from rest_framework import filters, status, viewsets
from rest_framework.decorators import action
from rest_framework.exceptions import NotFound, PermissionDenied
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from core.api import IsAdmin
from shops.mixins import ShopScopedViewMixin
from shops.services import ShopAccessService
from .models import Coupon
from .serializers import (
    AdminCouponSerializer,
    CouponSerializer,
    CouponToggleSerializer,
    CouponValidateRequestSerializer,
    PublicCouponSerializer,
)
from .services import CartLine, CouponService

logger = logging.getLogger(__name__)


class CouponNotFoundMixin:
    def get_object(self):
        try:
            return super().get_object()
        except Http404:
            raise NotFound("Coupon not found.")


class VendorCouponViewSet(ShopScopedViewMixin, CouponNotFoundMixin, viewsets.ModelViewSet):
    """
    Coupons of one shop.

    Vendors may list, create and edit; deleting and toggling are admin-only.
    """
    serializer_class = CouponSerializer
    filter_backends = [DjangoFilterBackend, filters.SearchFilter, filters.OrderingFilter]
    filterset_fields = ["is_active", "type"]
    search_fields = ["code", "description"]
    ordering_fields = ["code", "created_at", "usage_count", "active_to"]
    ordering = ["-created_at"]

    def get_queryset(self):
        return Coupon.objects.filter(shop=self.shop).prefetch_related("products", "categories")

    def perform_create(self, serializer):
        coupon = serializer.save(shop=self.shop)
        logger.info("Coupon %s created for shop %s by %s", coupon.code, self.shop.id, self.request.user.id)

    def _require_admin(self, message):
        if not ShopAccessService.is_admin(self.request.user):
            raise PermissionDenied(message)

    def destroy(self, request, *args, **kwargs):
        self._require_admin("Vendors cannot delete coupons.")
        coupon = self.get_object()
        coupon.delete()
        return Response({"success": True, "message": "Coupon deleted successfully"})

    @action(detail=True, methods=["post"])
    def toggle(self, request, *args, **kwargs):
        self._require_admin("Vendors cannot change a coupon's status.")
        serializer = CouponToggleSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        return Response(CouponService.set_active(self.get_object(), serializer.validated_data.get("is_active")))


class AdminCouponViewSet(CouponNotFoundMixin, viewsets.ModelViewSet):
    permission_classes = [IsAuthenticated, IsAdmin]
    serializer_class = AdminCouponSerializer
    queryset = Coupon.objects.select_related("shop").prefetch_related("products", "categories")
    filter_backends = [DjangoFilterBackend, filters.SearchFilter, filters.OrderingFilter]
    filterset_fields = ["shop", "is_active", "type"]
    search_fields = ["code", "description", "shop__name"]
    ordering_fields = ["code", "created_at", "usage_count", "active_to"]
    ordering = ["-created_at"]

    def destroy(self, request, *args, **kwargs):
        coupon = self.get_object()
        coupon.delete()
        return Response({"success": True, "message": "Coupon deleted successfully"})

    @action(detail=True, methods=["post"])
    def toggle(self, request, pk=None):
        serializer = CouponToggleSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        return Response(CouponService.set_active(self.get_object(), serializer.validated_data.get("is_active")))


class StoreCouponListView(APIView):
    """Currently redeemable coupons of a shop (``?shop=<id>`` or ``?shop_slug=<slug>``)."""
    permission_classes = [AllowAny]

    def get(self, request, *args, **kwargs):
        shop_id = request.query_params.get("shop")
        shop_slug = request.query_params.get("shop_slug")
        if not shop_id and shop_slug:
            shop_id = ShopAccessService.get_shop_by_slug(shop_slug).id
        if not shop_id:
            return Response([])

        now = timezone.now()
        coupons = Coupon.objects.filter(
            Q(active_to__isnull=True) | Q(active_to__gte=now),
            shop_id=shop_id,
            is_active=True,
            active_from__lte=now,
        )
        return Response(PublicCouponSerializer(coupons, many=True).data)


class ValidateCouponView(APIView):
    """POST /api/v1/store/coupons/validate/"""
    permission_classes = [AllowAny]

    def post(self, request, *args, **kwargs):
        serializer = CouponValidateRequestSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        cart_items = None
        if "cart_items" in data:
            cart_items = [
                CartLine(
                    product_id=str(item["product_id"]),
                    price=item["price"],
                    quantity=item["quantity"],
                    category_id=str(item["category_id"]) if item.get("category_id") else None,
                )
                for item in data["cart_items"]
            ]

        result = CouponService.validate(
            data["code"],
            data["shop_id"],
            data["cart_amount"],
            user=request.user,
            cart_items=cart_items,
        )
        body = result.as_dict()
        if result.coupon is not None:
            body["coupon"] = PublicCouponSerializer(result.coupon).data
        return Response(body, status=status.HTTP_200_OK)
