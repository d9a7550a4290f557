import logging

import stripe
from rest_framework import generics, mixins, status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response

from core.api import IsAdmin, IsVendorOrAdmin, TransactionLimitOffsetPagination
from shops.mixins import ShopScopedViewMixin
from shops.services import ShopAccessService
from .gateway import get_gateway
from .serializers import (
    AdminTransactionSerializer,
    ConnectOnboardingSerializer,
    InvoiceRequestSerializer,
    TransactionSerializer,
)
from .services import ConnectService, InvoiceService, TransactionService
from .webhooks import StripeWebhookService

logger = logging.getLogger(__name__)


class StripeWebhookView(generics.GenericAPIView):
    """
    Receives Stripe events. The payload is verified against the
    ``Stripe-Signature`` header before anything else happens.
    """
    permission_classes = [AllowAny]
    authentication_classes = []
    throttle_scope = "webhooks"

    def post(self, request, *args, **kwargs):
        gateway = get_gateway()
        if not gateway.webhook_secret:
            logger.error("Stripe webhook received but STRIPE_WEBHOOK_SECRET is not set")
            return Response(
                {"error": "Webhook secret not configured"},
                status=status.HTTP_500_INTERNAL_SERVER_ERROR,
            )

        signature = request.META.get("HTTP_STRIPE_SIGNATURE")
        if not signature:
            return Response({"error": "No signature provided"}, status=status.HTTP_400_BAD_REQUEST)

        try:
            event = gateway.construct_webhook_event(request.body, signature)
        except (stripe.SignatureVerificationError, ValueError) as exc:
            logger.warning("Stripe webhook signature verification failed: %s", exc)
            return Response({"error": "Invalid signature"}, status=status.HTTP_400_BAD_REQUEST)

        service = StripeWebhookService(event, gateway=gateway)
        try:
            service.process()
        except Exception:
            logger.exception("Stripe webhook handler failed for %s", service.event_type)
            return Response(
                {"error": "Webhook handler error"},
                status=status.HTTP_500_INTERNAL_SERVER_ERROR,
            )
        return Response({"received": True})


class OrderInvoiceView(generics.GenericAPIView):
    """
    Receipt or invoice link of an order. Guests authenticate with the
    payment intent id they received at checkout.
    """
    permission_classes = [AllowAny]
    serializer_class = InvoiceRequestSerializer
    throttle_scope = "payments"

    def post(self, request, order_id=None, *args, **kwargs):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        return Response(
            InvoiceService.get_invoice_url(
                order_id,
                user=request.user,
                payment_intent_id=serializer.validated_data.get("payment_intent_id") or None,
            )
        )


class AdminTransactionViewSet(mixins.ListModelMixin, mixins.RetrieveModelMixin, viewsets.GenericViewSet):
    """Every payment (``?status=&shop=&vendor=``)."""

    permission_classes = [IsAuthenticated, IsAdmin]
    serializer_class = AdminTransactionSerializer
    pagination_class = TransactionLimitOffsetPagination
    filter_backends = []

    def get_queryset(self):
        params = self.request.query_params
        return TransactionService.admin_queryset(
            status=params.get("status"),
            shop_id=params.get("shop"),
            vendor_id=params.get("vendor"),
        ).order_by("-created_at")

    @action(detail=False, methods=["get"])
    def stats(self, request):
        return Response(TransactionService.admin_stats())


class VendorTransactionViewSet(mixins.ListModelMixin, viewsets.GenericViewSet):
    """
    Payments of the shops the caller may access. Mounted under a shop slug
    or at the vendor root with an optional ``?shop=<slug>`` filter.
    """
    permission_classes = [IsAuthenticated, IsVendorOrAdmin]
    serializer_class = TransactionSerializer
    pagination_class = TransactionLimitOffsetPagination
    filter_backends = []

    def _shop_ids(self):
        if "shop_slug" in self.kwargs:
            return [ShopAccessService.require_shop_access(self.request.user, self.kwargs["shop_slug"]).id]
        return ShopAccessService.shop_ids_for_user(self.request.user, self.request.query_params.get("shop"))

    def get_queryset(self):
        return TransactionService.vendor_queryset(
            self._shop_ids(),
            status=self.request.query_params.get("status"),
        ).order_by("-created_at")

    @action(detail=False, methods=["get"])
    def stats(self, request, *args, **kwargs):
        return Response(TransactionService.vendor_stats(self._shop_ids()))


class StripeConnectViewSet(ShopScopedViewMixin, viewsets.GenericViewSet):
    """Stripe Connect (Express) account of the shop's vendor."""

    serializer_class = ConnectOnboardingSerializer

    @action(detail=False, methods=["post"])
    def onboard(self, request, shop_slug=None):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        return Response(
            ConnectService.start_onboarding(
                self.shop,
                request.user,
                return_path=serializer.validated_data.get("return_path") or None,
            )
        )

    @action(detail=False, methods=["get"], url_path="status")
    def account_status(self, request, shop_slug=None):
        return Response(ConnectService.get_status(self.shop.vendor))

    @action(detail=False, methods=["post"])
    def dashboard(self, request, shop_slug=None):
        return Response(ConnectService.dashboard_link(self.shop.vendor))

    @action(detail=False, methods=["post"])
    def disconnect(self, request, shop_slug=None):
        return Response(ConnectService.disconnect(self.shop.vendor))
