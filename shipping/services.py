"""
Shipping-method eligibility for a set of products.
"""
import logging
from collections import defaultdict

from marketplace.models import Product
from .models import ProductShippingMethod, ShippingMethod

logger = logging.getLogger(__name__)


class ShippingEligibilityService:

    @staticmethod
    def get_available_methods(product_ids):
        """
        Active shipping methods that can ship every one of ``product_ids``.

        Products must all belong to the same shop, otherwise nothing is
        eligible. A product with no restriction rows accepts any method of
        its shop; a restricted product accepts only the methods listed for it.
        Results are ordered by price, then name.
        """
        product_ids = [str(pid) for pid in (product_ids or [])]
        if not product_ids:
            return []

        shop_ids = set(
            Product.objects.filter(id__in=product_ids).values_list("shop_id", flat=True)
        )
        if len(shop_ids) != 1:
            if len(shop_ids) > 1:
                logger.info("Shipping lookup spans %d shops; no method is eligible", len(shop_ids))
            return []
        shop_id = shop_ids.pop()

        shop_methods = list(
            ShippingMethod.objects.filter(shop_id=shop_id, is_active=True).order_by("price", "name")
        )

        allowed_by_product = defaultdict(set)
        for product_id, method_id in ProductShippingMethod.objects.filter(
            product_id__in=product_ids
        ).values_list("product_id", "shipping_method_id"):
            allowed_by_product[str(product_id)].add(method_id)

        if not allowed_by_product:
            return shop_methods

        return [
            method
            for method in shop_methods
            if all(
                pid not in allowed_by_product or method.id in allowed_by_product[pid]
                for pid in product_ids
            )
        ]

    @classmethod
    def is_method_available(cls, method, product_ids):
        return any(m.id == method.id for m in cls.get_available_methods(product_ids))
