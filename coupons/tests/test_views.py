from decimal import Decimal

import pytest
from model_bakery import baker

from coupons.models import Coupon


pytestmark = pytest.mark.django_db


@pytest.fixture
def coupon(shop):
    return baker.make(
        Coupon,
        shop=shop,
        code="WELCOME",
        type=Coupon.Type.FIXED,
        discount_amount=Decimal("5"),
        minimum_cart_amount=Decimal("0"),
        maximum_discount_amount=None,
        usage_limit=None,
        usage_limit_per_user=None,
        active_to=None,
        is_active=True,
    )


def test_validate_endpoint(api_client, shop, coupon):
    response = api_client.post(
        "/api/v1/store/coupons/validate/",
        {"code": "WELCOME", "shop_id": str(shop.id), "cart_amount": "40.00"},
        format="json",
    )
    assert response.status_code == 200
    body = response.json()
    assert body["valid"] is True
    assert Decimal(body["discount_amount"]) == Decimal("5.00")


def test_vendor_cannot_delete(api_client, vendor_user, shop, coupon):
    api_client.force_authenticate(vendor_user)
    response = api_client.delete(f"/api/v1/vendor/shops/{shop.slug}/coupons/{coupon.id}/")
    assert response.status_code == 403
    assert Coupon.objects.filter(pk=coupon.pk).exists()


def test_vendor_cannot_toggle(api_client, vendor_user, shop, coupon):
    api_client.force_authenticate(vendor_user)
    response = api_client.post(f"/api/v1/vendor/shops/{shop.slug}/coupons/{coupon.id}/toggle/", {})
    assert response.status_code == 403


def test_admin_toggles(api_client, admin_user, coupon):
    api_client.force_authenticate(admin_user)
    response = api_client.post(f"/api/v1/admin/coupons/{coupon.id}/toggle/", {}, format="json")
    assert response.status_code == 200
    coupon.refresh_from_db()
    assert coupon.is_active is False


def test_vendor_lists_only_own_coupons(api_client, vendor_user, shop, other_shop, coupon):
    baker.make(Coupon, shop=other_shop, code="ELSEWHERE")
    api_client.force_authenticate(vendor_user)
    response = api_client.get(f"/api/v1/vendor/shops/{shop.slug}/coupons/")
    assert response.status_code == 200
    assert [row["code"] for row in response.json()["results"]] == ["WELCOME"]
