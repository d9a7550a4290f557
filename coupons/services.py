"""
Coupon validation and discount computation.
"""
import logging
from dataclasses import dataclass, field
from decimal import Decimal

from django.db import transaction
from django.db.models import F
from django.utils import timezone

from core.utils import ZERO, money
from .models import Coupon, CouponUsage

logger = logging.getLogger(__name__)


@dataclass
class CouponValidation:
    valid: bool
    message: str
    coupon: Coupon | None = None
    discount_amount: Decimal = ZERO
    applicable_amount: Decimal = ZERO
    invalid_reason: str | None = None

    def as_dict(self):
        data = {
            "valid": self.valid,
            "message": self.message,
            "discount_amount": self.discount_amount,
            "applicable_amount": self.applicable_amount,
        }
        if self.invalid_reason:
            data["invalid_reason"] = self.invalid_reason
        return data


@dataclass
class CartLine:
    """A cart line as seen by coupon rules."""
    product_id: str
    price: Decimal
    quantity: int
    category_id: str | None = None
    extra: dict = field(default_factory=dict)

    @property
    def total(self):
        return money(self.price) * self.quantity


class CouponService:

    @staticmethod
    def find(code, shop_id):
        if not code:
            return None
        return (
            Coupon.objects.filter(shop_id=shop_id, code__iexact=code.strip())
            .prefetch_related("products", "categories")
            .first()
        )

    @classmethod
    def validate(cls, code, shop_id, cart_amount, user=None, cart_items=None, now=None):
        """
        Checks, in order: existence, active flag, activation window, global
        and per-user usage limits, minimum cart amount and product/category
        restrictions. ``cart_items`` is an iterable of :class:`CartLine`;
        without it the whole cart amount is considered applicable.
        """
        now = now or timezone.now()
        cart_amount = money(cart_amount)
        coupon = cls.find(code, shop_id)

        if coupon is None:
            return CouponValidation(False, "Invalid coupon code.", invalid_reason="not_found")

        def invalid(message, reason):
            return CouponValidation(False, message, coupon=coupon, invalid_reason=reason)

        if not coupon.is_active:
            return invalid("This coupon is currently inactive.", "inactive")
        if coupon.active_from and now < coupon.active_from:
            return invalid("This coupon is not yet active.", "not_started")
        if coupon.active_to and now > coupon.active_to:
            return invalid("This coupon has expired.", "expired")
        if coupon.usage_limit is not None and coupon.usage_count >= coupon.usage_limit:
            return invalid("This coupon has reached its usage limit.", "usage_limit_reached")

        if coupon.usage_limit_per_user and user is not None and getattr(user, "is_authenticated", False):
            used = CouponUsage.objects.filter(coupon=coupon, user=user).count()
            if used >= coupon.usage_limit_per_user:
                return invalid(
                    "You have already used this coupon the maximum number of times.",
                    "user_limit_reached",
                )

        if cart_amount < coupon.minimum_cart_amount:
            return invalid(
                f"Minimum cart amount of ${money(coupon.minimum_cart_amount)} required.",
                "minimum_not_met",
            )

        applicable_amount = cart_amount
        if cart_items is not None and coupon.applicable_to != Coupon.ApplicableTo.ALL:
            applicable_lines = cls._applicable_lines(coupon, cart_items)
            if not applicable_lines:
                return invalid(
                    "This coupon doesn't apply to any items in your cart.",
                    "no_applicable_products",
                )
            applicable_amount = money(sum((line.total for line in applicable_lines), ZERO))

        return CouponValidation(
            True,
            "Coupon applied successfully!",
            coupon=coupon,
            discount_amount=cls.compute_discount(coupon, applicable_amount),
            applicable_amount=applicable_amount,
        )

    @staticmethod
    def _applicable_lines(coupon, cart_items):
        if coupon.applicable_to == Coupon.ApplicableTo.SPECIFIC_PRODUCTS:
            allowed = {str(pk) for pk in coupon.products.values_list("id", flat=True)}
            return [line for line in cart_items if str(line.product_id) in allowed]
        allowed = {str(pk) for pk in coupon.categories.values_list("id", flat=True)}
        return [
            line for line in cart_items
            if line.category_id and str(line.category_id) in allowed
        ]

    @staticmethod
    def compute_discount(coupon, applicable_amount):
        applicable_amount = money(applicable_amount)
        value = money(coupon.discount_amount)
        if coupon.type == Coupon.Type.PERCENTAGE:
            discount = applicable_amount * value / Decimal("100")
        elif coupon.type == Coupon.Type.FIXED:
            discount = min(value, applicable_amount)
        else:
            # Free shipping is applied to the shipping line, not the items.
            discount = ZERO
        if coupon.maximum_discount_amount is not None:
            discount = min(discount, coupon.maximum_discount_amount)
        return money(discount)

    @staticmethod
    @transaction.atomic
    def record_usage(coupon, order, user=None, discount_amount=ZERO):
        usage = CouponUsage.objects.create(
            coupon=coupon,
            order=order,
            user=user if user is not None and getattr(user, "is_authenticated", False) else None,
            discount_amount=money(discount_amount),
        )
        Coupon.objects.filter(pk=coupon.pk).update(usage_count=F("usage_count") + 1)
        logger.info("Coupon %s used on order %s", coupon.code, order.order_number)
        return usage

    @staticmethod
    @transaction.atomic
    def release_usage(order):
        """Gives back the coupon uses recorded against a cancelled order."""
        released = 0
        for usage in CouponUsage.objects.filter(order=order).select_related("coupon"):
            Coupon.objects.filter(pk=usage.coupon_id, usage_count__gt=0).update(
                usage_count=F("usage_count") - 1
            )
            logger.info("Coupon %s released from order %s", usage.coupon.code, order.order_number)
            usage.delete()
            released += 1
        return released

    @staticmethod
    def set_active(coupon, is_active=None):
        if is_active is None:
            is_active = not coupon.is_active
        coupon.is_active = bool(is_active)
        coupon.save(update_fields=["is_active", "updated_at"])
        return {
            "success": True,
            "message": "Coupon activated" if coupon.is_active else "Coupon deactivated",
        }
