from datetime import timedelta
from decimal import Decimal

import pytest
from django.utils import timezone
from model_bakery import baker

from coupons.models import Coupon, CouponUsage
from coupons.services import CartLine, CouponService


pytestmark = pytest.mark.django_db


def _coupon(shop, **kwargs):
    defaults = {
        "code": "SAVE10",
        "type": Coupon.Type.PERCENTAGE,
        "discount_amount": Decimal("10"),
        "minimum_cart_amount": Decimal("0"),
        "maximum_discount_amount": None,
        "usage_limit": None,
        "usage_limit_per_user": None,
        "active_from": timezone.now() - timedelta(days=1),
        "active_to": None,
        "is_active": True,
        "applicable_to": Coupon.ApplicableTo.ALL,
    }
    defaults.update(kwargs)
    return baker.make(Coupon, shop=shop, **defaults)


def test_unknown_code(shop):
    result = CouponService.validate("NOPE", shop.id, Decimal("50"))
    assert not result.valid
    assert result.invalid_reason == "not_found"


def test_lookup_is_case_insensitive(shop):
    _coupon(shop)
    assert CouponService.validate(" save10 ", shop.id, Decimal("50")).valid


def test_coupon_of_another_shop_is_not_found(shop, other_shop):
    _coupon(other_shop)
    assert CouponService.validate("SAVE10", shop.id, Decimal("50")).invalid_reason == "not_found"


@pytest.mark.parametrize(
    "overrides, reason",
    [
        ({"is_active": False}, "inactive"),
        ({"active_from": timezone.now() + timedelta(days=2)}, "not_started"),
        ({"active_to": timezone.now() - timedelta(hours=1)}, "expired"),
        ({"usage_limit": 3, "usage_count": 3}, "usage_limit_reached"),
        ({"minimum_cart_amount": Decimal("100")}, "minimum_not_met"),
    ],
)
def test_invalid_reasons(shop, overrides, reason):
    _coupon(shop, **overrides)
    result = CouponService.validate("SAVE10", shop.id, Decimal("50"))
    assert not result.valid
    assert result.invalid_reason == reason
    assert result.discount_amount == Decimal("0")


def test_inactive_is_reported_before_expiry(shop):
    _coupon(shop, is_active=False, active_to=timezone.now() - timedelta(days=1))
    assert CouponService.validate("SAVE10", shop.id, Decimal("50")).invalid_reason == "inactive"


def test_per_user_limit(shop, customer_user):
    coupon = _coupon(shop, usage_limit_per_user=1)
    order = baker.make("marketplace.Order", shop=shop, user=customer_user)
    baker.make(CouponUsage, coupon=coupon, user=customer_user, order=order)

    result = CouponService.validate("SAVE10", shop.id, Decimal("50"), user=customer_user)

    assert result.invalid_reason == "user_limit_reached"


def test_percentage_discount_is_capped(shop):
    _coupon(shop, discount_amount=Decimal("50"), maximum_discount_amount=Decimal("15"))
    result = CouponService.validate("SAVE10", shop.id, Decimal("100"))
    assert result.valid
    assert result.discount_amount == Decimal("15.00")


def test_fixed_discount_never_exceeds_the_applicable_amount(shop):
    _coupon(shop, type=Coupon.Type.FIXED, discount_amount=Decimal("30"))
    result = CouponService.validate("SAVE10", shop.id, Decimal("20"))
    assert result.discount_amount == Decimal("20.00")


def test_free_shipping_has_no_item_discount(shop):
    _coupon(shop, type=Coupon.Type.FREE_SHIPPING, discount_amount=Decimal("0"))
    result = CouponService.validate("SAVE10", shop.id, Decimal("20"))
    assert result.valid
    assert result.discount_amount == Decimal("0.00")


def test_product_restriction_limits_the_applicable_amount(shop, product):
    coupon = _coupon(shop, applicable_to=Coupon.ApplicableTo.SPECIFIC_PRODUCTS)
    coupon.products.add(product)
    other = baker.make("marketplace.Product", shop=shop, selling_price=Decimal("30.00"))
    lines = [
        CartLine(product_id=str(product.id), price=Decimal("20.00"), quantity=2),
        CartLine(product_id=str(other.id), price=Decimal("30.00"), quantity=1),
    ]

    result = CouponService.validate("SAVE10", shop.id, Decimal("70"), cart_items=lines)

    assert result.applicable_amount == Decimal("40.00")
    assert result.discount_amount == Decimal("4.00")


def test_category_restriction_without_matching_items(shop):
    coupon = _coupon(shop, applicable_to=Coupon.ApplicableTo.SPECIFIC_CATEGORIES)
    coupon.categories.add(baker.make("marketplace.Category", shop=shop))
    lines = [CartLine(product_id="x", price=Decimal("10.00"), quantity=1, category_id=None)]

    result = CouponService.validate("SAVE10", shop.id, Decimal("10"), cart_items=lines)

    assert result.invalid_reason == "no_applicable_products"


def test_record_usage_increments_the_counter(shop, customer_user):
    coupon = _coupon(shop)
    order = baker.make("marketplace.Order", shop=shop, user=customer_user)

    CouponService.record_usage(coupon, order, user=customer_user, discount_amount=Decimal("5"))

    coupon.refresh_from_db()
    assert coupon.usage_count == 1
    assert CouponUsage.objects.get(coupon=coupon).discount_amount == Decimal("5.00")


def test_release_usage_gives_the_use_back(shop, customer_user):
    coupon = _coupon(shop, usage_limit=1)
    order = baker.make("marketplace.Order", shop=shop, user=customer_user)
    CouponService.record_usage(coupon, order, user=customer_user, discount_amount=Decimal("5"))

    assert CouponService.release_usage(order) == 1

    coupon.refresh_from_db()
    assert coupon.usage_count == 0
    assert not CouponUsage.objects.filter(order=order).exists()


def test_release_usage_never_goes_below_zero(shop, customer_user):
    coupon = _coupon(shop)
    order = baker.make("marketplace.Order", shop=shop, user=customer_user)
    baker.make(CouponUsage, coupon=coupon, order=order, user=customer_user, discount_amount=Decimal("5"))

    CouponService.release_usage(order)

    coupon.refresh_from_db()
    assert coupon.usage_count == 0
