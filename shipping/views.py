from django_filters.rest_framework import DjangoFilterBackend
from rest_framework import filters, status, viewsets
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework.views import APIView

from shops.mixins import ShopScopedViewMixin
from .models import ShippingMethod
from .serializers import AvailableShippingRequestSerializer, ShippingMethodSerializer
from .services import ShippingEligibilityService


class VendorShippingMethodViewSet(ShopScopedViewMixin, viewsets.ModelViewSet):
    """
    Shipping methods of one shop, managed by its vendor or an admin.
    """
    serializer_class = ShippingMethodSerializer
    filter_backends = [DjangoFilterBackend, filters.SearchFilter, filters.OrderingFilter]
    filterset_fields = ["is_active"]
    search_fields = ["name", "description"]
    ordering_fields = ["name", "price", "created_at"]
    ordering = ["-created_at"]

    def get_queryset(self):
        return ShippingMethod.objects.filter(shop=self.shop)

    def perform_create(self, serializer):
        serializer.save(shop=self.shop)

    def destroy(self, request, *args, **kwargs):
        method = self.get_object()
        method.delete()
        return Response(
            {"success": True, "message": "Shipping method deleted successfully"},
            status=status.HTTP_200_OK,
        )


class AvailableShippingMethodsView(APIView):
    """
    POST /api/v1/store/shipping/available/

    Body: {"product_ids": [...]}. Returns the methods that can ship every product.
    """
    permission_classes = [AllowAny]

    def post(self, request, *args, **kwargs):
        serializer = AvailableShippingRequestSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        methods = ShippingEligibilityService.get_available_methods(
            serializer.validated_data["product_ids"]
        )
        return Response(ShippingMethodSerializer(methods, many=True).data)
