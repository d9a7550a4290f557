import logging

from rest_framework import generics, status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response

from core.api.pagination import CustomerOrderLimitOffsetPagination
from ..models import Order
from ..serializers import (
    CancelOrderSerializer,
    CheckoutResultSerializer,
    CheckoutSerializer,
    ConfirmPaymentSerializer,
    OrderLookupSerializer,
    OrdersByIdsSerializer,
    OrderSerializer,
)
from ..services import CheckoutService, OrderService
from .cart import CART_SESSION_HEADER

logger = logging.getLogger(__name__)


class CheckoutView(generics.GenericAPIView):
    """Creates the orders of the caller's cart and the intent paying for them."""

    permission_classes = [AllowAny]
    serializer_class = CheckoutSerializer
    throttle_scope = "checkout"

    def post(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        session_id = data.get("session_id") or request.META.get(CART_SESSION_HEADER)
        result = CheckoutService(user=request.user, session_id=session_id).create_checkout_session(data)
        return Response(CheckoutResultSerializer(result).data, status=status.HTTP_201_CREATED)


class ConfirmPaymentView(generics.GenericAPIView):
    permission_classes = [AllowAny]
    serializer_class = ConfirmPaymentSerializer
    throttle_scope = "payments"

    def post(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        return Response(
            OrderService.confirm_payment(
                serializer.validated_data["payment_intent_id"],
                serializer.validated_data["order_ids"],
            )
        )


class OrderViewSet(viewsets.GenericViewSet):
    """
    Customer orders. The history requires a login; guests reach their own
    orders with the payment intent id returned at checkout.
    """
    serializer_class = OrderSerializer
    pagination_class = CustomerOrderLimitOffsetPagination
    lookup_value_regex = r"[^/]+"

    def get_permissions(self):
        if self.action in ("list", "cancel"):
            return [IsAuthenticated()]
        return [AllowAny()]

    def get_queryset(self):
        return OrderService.customer_orders(
            self.request.user,
            self.request.query_params.get("status"),
        ).order_by("-created_at")

    def _payment_intent_id(self):
        serializer = OrderLookupSerializer(data=self.request.query_params)
        serializer.is_valid(raise_exception=True)
        return serializer.validated_data.get("payment_intent_id") or None

    def list(self, request):
        page = self.paginate_queryset(self.get_queryset())
        return self.get_paginated_response(self.get_serializer(page, many=True).data)

    def retrieve(self, request, pk=None):
        order = OrderService.get_order(pk, user=request.user, payment_intent_id=self._payment_intent_id())
        return Response(self.get_serializer(order).data)

    @action(detail=False, methods=["post"], url_path="by-ids")
    def by_ids(self, request):
        serializer = OrdersByIdsSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        orders = OrderService.get_orders_by_ids(
            serializer.validated_data["order_ids"],
            user=request.user,
            payment_intent_id=serializer.validated_data.get("payment_intent_id") or None,
        )
        return Response({"orders": self.get_serializer(orders, many=True).data})

    @action(detail=True, methods=["post"])
    def cancel(self, request, pk=None):
        serializer = CancelOrderSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        return Response(OrderService.cancel_order(pk, request.user, serializer.validated_data["reason"]))

    @action(detail=True, methods=["get"], url_path="payment-session")
    def payment_session(self, request, pk=None):
        return Response(OrderService.get_order_payment_session(pk, request.user))
