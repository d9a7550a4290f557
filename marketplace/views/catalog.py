from rest_framework import filters, viewsets
from django_filters.rest_framework import DjangoFilterBackend
from rest_framework.permissions import AllowAny

from shops.models import Shop
from ..models import Category, Product
from ..serializers import CategorySerializer, ProductDetailSerializer, ProductListSerializer


class CategoryViewSet(viewsets.ReadOnlyModelViewSet):
    permission_classes = [AllowAny]
    serializer_class = CategorySerializer
    queryset = Category.objects.filter(is_active=True)
    filter_backends = [DjangoFilterBackend, filters.SearchFilter]
    filterset_fields = ["shop", "parent"]
    search_fields = ["name"]
    pagination_class = None


class ProductViewSet(viewsets.ReadOnlyModelViewSet):
    """Active products of active shops."""

    permission_classes = [AllowAny]
    queryset = Product.objects.filter(is_active=True, shop__status=Shop.Status.ACTIVE).select_related(
        "shop", "category"
    )
    filter_backends = [DjangoFilterBackend, filters.SearchFilter, filters.OrderingFilter]
    filterset_fields = ["shop", "category"]
    search_fields = ["name", "description", "sku"]
    ordering_fields = ["name", "selling_price", "average_rating", "created_at"]
    ordering = ["-created_at"]

    def get_serializer_class(self):
        if self.action == "retrieve":
            return ProductDetailSerializer
        return ProductListSerializer
