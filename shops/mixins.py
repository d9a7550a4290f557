from rest_framework.permissions import IsAuthenticated

from core.api import IsVendorOrAdmin
from .services import ShopAccessService


class ShopScopedViewMixin:
    """
    Resolves ``self.shop`` from the ``shop_slug`` URL kwarg for vendor routes.

    Runs after authentication and permission checks; raises 404 for an
    unknown shop and 403 when the caller neither owns it nor is an admin.
    """

    permission_classes = [IsAuthenticated, IsVendorOrAdmin]
    shop_url_kwarg = "shop_slug"

    def initial(self, request, *args, **kwargs):
        super().initial(request, *args, **kwargs)
        self.shop = ShopAccessService.require_shop_access(
            request.user, kwargs[self.shop_url_kwarg]
        )

    def get_serializer_context(self):
        context = super().get_serializer_context()
        context["shop"] = getattr(self, "shop", None)
        return context
