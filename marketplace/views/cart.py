import logging

from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response

from ..models import Cart
from ..serializers import (
    AddToCartSerializer,
    CartSerializer,
    MergeCartSerializer,
    UpdateCartItemSerializer,
)
from ..services import CartService

logger = logging.getLogger(__name__)

CART_SESSION_HEADER = "HTTP_X_CART_SESSION"


class CartViewSet(viewsets.GenericViewSet):
    """
    The caller's cart. Authenticated users have a single cart; guests pass
    the session id returned by the first add (``X-Cart-Session`` header or
    ``session_id`` field).
    """
    permission_classes = [AllowAny]
    serializer_class = CartSerializer

    def get_queryset(self):
        return Cart.objects.none()

    def get_permissions(self):
        if self.action == "merge":
            return [IsAuthenticated()]
        return super().get_permissions()

    def _session_id(self, validated=None):
        if validated and validated.get("session_id"):
            return validated["session_id"]
        return (
            self.request.META.get(CART_SESSION_HEADER)
            or self.request.query_params.get("session_id")
            or None
        )

    def _cart_response(self, cart, status_code=status.HTTP_200_OK):
        return Response(CartSerializer(CartService.summarize(cart)).data, status=status_code)

    def list(self, request):
        cart = CartService.get_cart(request.user, self._session_id())
        return self._cart_response(cart)

    @action(detail=False, methods=["post"], url_path="items")
    def add_item(self, request):
        serializer = AddToCartSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        cart = CartService.add_item(
            data["product_id"],
            quantity=data["quantity"],
            variant_options=data.get("variant_options"),
            user=request.user,
            session_id=self._session_id(data),
        )
        return self._cart_response(cart, status.HTTP_201_CREATED)

    @action(detail=False, methods=["patch", "delete"], url_path=r"items/(?P<item_id>[^/.]+)")
    def item(self, request, item_id=None):
        if request.method == "DELETE":
            cart = CartService.remove_item(item_id, user=request.user, session_id=self._session_id())
            return self._cart_response(cart)

        serializer = UpdateCartItemSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        cart = CartService.update_item(
            item_id,
            serializer.validated_data["quantity"],
            user=request.user,
            session_id=self._session_id(serializer.validated_data),
        )
        return self._cart_response(cart)

    @action(detail=False, methods=["post"])
    def clear(self, request):
        cart = CartService.clear(user=request.user, session_id=self._session_id())
        return self._cart_response(cart)

    @action(detail=False, methods=["post"])
    def merge(self, request):
        serializer = MergeCartSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        cart = CartService.merge(request.user, serializer.validated_data["guest_session_id"])
        return self._cart_response(cart)
