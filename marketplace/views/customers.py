from rest_framework import mixins, status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response

from ..serializers import CustomerAddressSerializer, WishlistItemSerializer, WishlistProductSerializer
from ..services import AddressService, WishlistService


class WishlistViewSet(mixins.ListModelMixin, viewsets.GenericViewSet):
    """The caller's saved products, newest first."""

    permission_classes = [IsAuthenticated]
    serializer_class = WishlistItemSerializer
    filter_backends = []

    def get_queryset(self):
        return WishlistService.items(self.request.user)

    @action(detail=False, methods=["post"])
    def toggle(self, request):
        serializer = WishlistProductSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        return Response(WishlistService.toggle(request.user, serializer.validated_data["product_id"]))

    @action(detail=False, methods=["get"], url_path="status", permission_classes=[AllowAny])
    def check_status(self, request):
        """``?product_id=``; anonymous callers always get ``false``."""
        serializer = WishlistProductSerializer(data=request.query_params)
        serializer.is_valid(raise_exception=True)
        in_wishlist = WishlistService.is_in_wishlist(request.user, serializer.validated_data["product_id"])
        return Response({"is_in_wishlist": in_wishlist})


class AddressViewSet(viewsets.ModelViewSet):
    permission_classes = [IsAuthenticated]
    serializer_class = CustomerAddressSerializer
    filter_backends = []
    pagination_class = None
    http_method_names = ["get", "post", "patch", "delete", "head", "options"]

    def get_queryset(self):
        return AddressService.addresses(self.request.user)

    def get_object(self):
        return AddressService.get_address(self.request.user, self.kwargs["pk"])

    def create(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        address = AddressService.create(request.user, **serializer.validated_data)
        return Response(self.get_serializer(address).data, status=status.HTTP_201_CREATED)

    def partial_update(self, request, *args, **kwargs):
        address = self.get_object()
        serializer = self.get_serializer(address, data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        address = AddressService.update(address, **serializer.validated_data)
        return Response(self.get_serializer(address).data)

    def destroy(self, request, *args, **kwargs):
        return Response(AddressService.delete(self.get_object()))

    @action(detail=True, methods=["post"], url_path="set-default")
    def set_default(self, request, pk=None):
        address = AddressService.set_default(self.get_object())
        return Response(self.get_serializer(address).data)
