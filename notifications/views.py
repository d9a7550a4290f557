from django.http import Http404
from rest_framework import mixins, viewsets
from rest_framework.decorators import action
from rest_framework.exceptions import NotFound
from rest_framework.response import Response

from shops.mixins import ShopScopedViewMixin
from .serializers import VendorNotificationSerializer
from .services import VendorNotificationService


class VendorNotificationViewSet(ShopScopedViewMixin, mixins.ListModelMixin, viewsets.GenericViewSet):
    """
    Notification feed of one shop.

    ``?unread_only=true`` restricts the list to unread notifications; every
    page carries the shop's ``unread_count``.
    """
    serializer_class = VendorNotificationSerializer

    def _unread_only(self):
        return self.request.query_params.get("unread_only", "").lower() in ("1", "true", "yes")

    def get_queryset(self):
        return VendorNotificationService.list_for_shop(self.shop, unread_only=self._unread_only())

    def get_object(self):
        try:
            return super().get_object()
        except Http404:
            raise NotFound("Notification not found.")

    def list(self, request, *args, **kwargs):
        response = super().list(request, *args, **kwargs)
        response.data["unread_count"] = VendorNotificationService.unread_count(self.shop)
        return response

    @action(detail=True, methods=["post"], url_path="read")
    def mark_read(self, request, *args, **kwargs):
        notification = VendorNotificationService.mark_read(self.get_object())
        return Response(self.get_serializer(notification).data)

    @action(detail=False, methods=["post"], url_path="read-all")
    def mark_all_read(self, request, *args, **kwargs):
        updated = VendorNotificationService.mark_all_read(self.shop)
        return Response({"success": True, "updated": updated})
