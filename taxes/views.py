from django.db.models import Count
from django.http import Http404
from django_filters import rest_framework as django_filters
from django_filters.rest_framework import DjangoFilterBackend
from rest_framework import filters, mixins, viewsets
from rest_framework.decorators import action
from rest_framework.exceptions import NotFound
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from core.api import IsAdmin
from shops.mixins import ShopScopedViewMixin
from .models import TaxRate
from .serializers import AdminTaxRateSerializer, TaxRateSerializer, TaxRateToggleSerializer
from .services import TaxRateService


class TaxRateFilter(django_filters.FilterSet):
    shop = django_filters.UUIDFilter(field_name="shop__id")
    vendor = django_filters.UUIDFilter(field_name="shop__vendor__id")
    country = django_filters.CharFilter(field_name="country", lookup_expr="iexact")
    is_active = django_filters.BooleanFilter(field_name="is_active")

    class Meta:
        model = TaxRate
        fields = ["shop", "vendor", "country", "is_active"]


class TaxRateNotFoundMixin:
    def get_object(self):
        try:
            return super().get_object()
        except Http404:
            raise NotFound("Tax rate not found.")


class VendorTaxRateViewSet(ShopScopedViewMixin, TaxRateNotFoundMixin, viewsets.ModelViewSet):
    serializer_class = TaxRateSerializer
    filter_backends = [DjangoFilterBackend, filters.SearchFilter, filters.OrderingFilter]
    filterset_fields = ["is_active", "country"]
    search_fields = ["name", "country", "state"]
    ordering_fields = ["name", "rate", "priority", "created_at"]
    ordering = ["-created_at"]

    def get_queryset(self):
        return TaxRate.objects.filter(shop=self.shop).annotate(product_count=Count("products"))

    def perform_create(self, serializer):
        serializer.save(shop=self.shop)

    def destroy(self, request, *args, **kwargs):
        return Response(TaxRateService.delete(self.get_object(), deleted_by=request.user))


class AdminTaxRateViewSet(
    TaxRateNotFoundMixin,
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    mixins.DestroyModelMixin,
    viewsets.GenericViewSet,
):
    """Tax rates of every shop. Admins can toggle and delete but not edit them."""
    permission_classes = [IsAuthenticated, IsAdmin]
    serializer_class = AdminTaxRateSerializer
    queryset = TaxRate.objects.select_related("shop").annotate(product_count=Count("products"))
    filter_backends = [DjangoFilterBackend, filters.SearchFilter, filters.OrderingFilter]
    filterset_class = TaxRateFilter
    search_fields = ["name", "country", "state", "shop__name"]
    ordering_fields = ["name", "rate", "priority", "created_at"]
    ordering = ["-created_at"]

    def destroy(self, request, *args, **kwargs):
        return Response(TaxRateService.delete(self.get_object(), deleted_by=request.user))

    @action(detail=True, methods=["post"])
    def toggle(self, request, pk=None):
        tax_rate = self.get_object()
        serializer = TaxRateToggleSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        return Response(
            TaxRateService.set_active(tax_rate, serializer.validated_data.get("is_active"))
        )
