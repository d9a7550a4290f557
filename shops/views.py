import logging

from django.db.models import Count
from django_filters.rest_framework import DjangoFilterBackend
from rest_framework import filters, generics, mixins, status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from rest_framework_simplejwt.tokens import RefreshToken

from core.api import IsAdmin, IsVendorOrAdmin
from core.exceptions import ServiceUnavailableError
from payments.services import ConnectService
from users.serializers import SimpleUserSerializer
from .models import Shop, Vendor
from .serializers import (
    AdminShopSerializer,
    ShopSerializer,
    ShopStatusSerializer,
    VendorCommissionSerializer,
    VendorRegistrationSerializer,
    VendorSerializer,
)
from .services import AdminShopService, ShopAccessService, VendorRegistrationService

logger = logging.getLogger(__name__)


class VendorRegistrationView(generics.GenericAPIView):
    """Creates a vendor account together with its first (pending) shop."""

    permission_classes = [AllowAny]
    serializer_class = VendorRegistrationSerializer

    def post(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        user, vendor, shop = VendorRegistrationService.register(**serializer.validated_data)
        refresh = RefreshToken.for_user(user)
        return Response(
            {
                "success": True,
                "user": SimpleUserSerializer(user).data,
                "vendor": {"id": str(vendor.id), "status": vendor.status},
                "shop": {"id": str(shop.id), "slug": shop.slug, "name": shop.name, "status": shop.status},
                "refresh": str(refresh),
                "access": str(refresh.access_token),
            },
            status=status.HTTP_201_CREATED,
        )


class StoreShopViewSet(viewsets.ReadOnlyModelViewSet):
    """Public storefront listing of active shops."""

    permission_classes = [AllowAny]
    serializer_class = ShopSerializer
    lookup_field = "slug"
    queryset = Shop.objects.filter(status=Shop.Status.ACTIVE)
    filter_backends = [filters.SearchFilter, filters.OrderingFilter]
    search_fields = ["name", "description", "category"]
    ordering_fields = ["name", "rating", "created_at"]
    ordering = ["name"]


class VendorShopListView(generics.ListAPIView):
    """Shops owned by the calling vendor."""

    permission_classes = [IsAuthenticated, IsVendorOrAdmin]
    serializer_class = ShopSerializer

    def get_queryset(self):
        vendor = ShopAccessService.get_vendor_for_user(self.request.user)
        if vendor is None:
            return Shop.objects.none()
        return Shop.objects.filter(vendor=vendor).order_by("name")


class AdminShopViewSet(
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    mixins.DestroyModelMixin,
    viewsets.GenericViewSet,
):
    permission_classes = [IsAuthenticated, IsAdmin]
    serializer_class = AdminShopSerializer
    queryset = (
        Shop.objects.select_related("vendor", "vendor__user")
        .annotate(product_count=Count("products", distinct=True))
    )
    filter_backends = [DjangoFilterBackend, filters.SearchFilter, filters.OrderingFilter]
    filterset_fields = ["vendor", "status"]
    search_fields = ["name", "slug", "email"]
    ordering_fields = ["name", "created_at", "total_products", "total_orders"]
    ordering = ["-created_at"]

    def retrieve(self, request, *args, **kwargs):
        shop = self.get_object()
        vendor = shop.vendor
        if vendor.stripe_connected_account_id:
            try:
                ConnectService.sync_account_status(vendor)
            except ServiceUnavailableError:
                logger.warning("Could not refresh Stripe status for vendor %s", vendor.id)

        data = self.get_serializer(shop).data
        data.update(AdminShopService.get_shop_stats(shop))
        return Response({"shop": data})

    def destroy(self, request, *args, **kwargs):
        shop = self.get_object()
        return Response(AdminShopService.delete_shop(shop))

    @action(detail=True, methods=["post"], url_path="status")
    def set_status(self, request, pk=None):
        shop = self.get_object()
        serializer = ShopStatusSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        return Response(AdminShopService.update_status(shop, serializer.validated_data["status"]))


class AdminVendorViewSet(mixins.ListModelMixin, mixins.RetrieveModelMixin, viewsets.GenericViewSet):
    permission_classes = [IsAuthenticated, IsAdmin]
    serializer_class = VendorSerializer
    queryset = Vendor.objects.select_related("user")
    filter_backends = [DjangoFilterBackend, filters.SearchFilter]
    filterset_fields = ["status"]
    search_fields = ["business_name", "contact_email", "user__email"]

    @action(detail=True, methods=["post"])
    def commission(self, request, pk=None):
        vendor = self.get_object()
        serializer = VendorCommissionSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        return Response(
            AdminShopService.update_commission(vendor, serializer.validated_data["commission_rate"])
        )
