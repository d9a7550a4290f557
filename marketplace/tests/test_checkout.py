from decimal import Decimal
from unittest.mock import patch

import pytest
from model_bakery import baker

from core.exceptions import BusinessLogicError
from coupons.models import Coupon
from marketplace.models import Cart, CartItem, Order, Product
from marketplace.services import CheckoutService
from payments.gateway import PaymentGatewayError
from payments.models import Payment
from shipping.models import ProductShippingMethod, ShippingMethod


pytestmark = pytest.mark.django_db


def _data(shipping_method, address, **extra):
    data = {
        "shipping_address": address,
        "use_same_billing_address": True,
        "shipping_method": shipping_method.id,
        "customer_notes": "",
        "coupon_codes": [],
    }
    data.update(extra)
    return data


def test_single_shop_checkout(customer_user, customer_cart, shipping_method, address, fake_gateway, product):
    result = CheckoutService(user=customer_user, gateway=fake_gateway).create_checkout_session(
        _data(shipping_method, address)
    )

    order = Order.objects.get()
    # 40.00 items + 2.00 tax + 5.00 shipping
    assert order.subtotal == Decimal("40.00")
    assert order.tax_amount == Decimal("2.00")
    assert order.shipping_amount == Decimal("5.00")
    assert order.total_amount == Decimal("47.00")
    assert order.user == customer_user
    assert order.billing_address == order.shipping_address
    assert order.items.get().product_name == "Ceramic Mug"

    assert result["order_ids"] == [str(order.id)]
    assert result["payment_intent_id"] == "pi_123"
    assert result["client_secret"] == "pi_123_secret_abc"
    assert result["total_amount"] == Decimal("47.00")

    payment = order.payments.get()
    assert payment.status == Payment.PaymentStatus.PENDING
    assert payment.stripe_payment_intent_id == "pi_123"
    assert payment.application_fee_amount == Decimal("0.00")

    product.refresh_from_db()
    assert product.stock == 8
    assert not customer_cart.items.exists()
    fake_gateway.create_destination_charge.assert_not_called()


def test_destination_charge_for_connected_vendor(customer_user, customer_cart, shipping_method, address, fake_gateway, vendor):
    vendor.stripe_connected_account_id = "acct_1"
    vendor.stripe_charges_enabled = True
    vendor.save()

    result = CheckoutService(user=customer_user, gateway=fake_gateway).create_checkout_session(
        _data(shipping_method, address)
    )

    assert result["payment_intent_id"] == "pi_456"
    args = fake_gateway.create_destination_charge.call_args.args
    assert args[:4] == (Decimal("47.00"), "usd", "acct_1", Decimal("4.70"))
    payment = Payment.objects.get()
    assert payment.connected_account_id == "acct_1"
    assert payment.application_fee_amount == Decimal("4.70")
    fake_gateway.create_payment_intent.assert_not_called()


def test_falls_back_to_platform_charge(customer_user, customer_cart, shipping_method, address, fake_gateway, vendor):
    vendor.stripe_connected_account_id = "acct_1"
    vendor.stripe_charges_enabled = True
    vendor.save()
    fake_gateway.create_destination_charge.side_effect = PaymentGatewayError(
        "no transfers", stripe_code="insufficient_capabilities_for_transfer"
    )

    result = CheckoutService(user=customer_user, gateway=fake_gateway).create_checkout_session(
        _data(shipping_method, address)
    )

    assert result["payment_intent_id"] == "pi_123"
    assert Payment.objects.get().connected_account_id == ""


def test_multi_shop_checkout_shares_one_intent(customer_user, customer_cart, shipping_method, address, fake_gateway, other_shop):
    other_product = baker.make(Product, shop=other_shop, selling_price=Decimal("10.00"), stock=None, is_active=True)
    baker.make(CartItem, cart=customer_cart, product=other_product, quantity=1)

    result = CheckoutService(user=customer_user, gateway=fake_gateway).create_checkout_session(
        _data(shipping_method, address)
    )

    assert len(result["order_ids"]) == 2
    assert set(Payment.objects.values_list("stripe_payment_intent_id", flat=True)) == {"pi_123"}
    other_order = Order.objects.get(shop=other_shop)
    assert other_order.total_amount == Decimal("15.50")
    assert result["total_amount"] == Decimal("62.50")
    metadata = fake_gateway.create_payment_intent.call_args.kwargs["metadata"]
    assert set(metadata["orderIds"].split(",")) == set(result["order_ids"])
    assert metadata["userId"] == str(customer_user.id)


def test_percentage_coupon(customer_user, customer_cart, shipping_method, address, fake_gateway, shop):
    baker.make(
        Coupon,
        shop=shop,
        code="SAVE10",
        type=Coupon.Type.PERCENTAGE,
        discount_amount=Decimal("10"),
        minimum_cart_amount=Decimal("0"),
        maximum_discount_amount=None,
        usage_limit=None,
        usage_limit_per_user=None,
        active_to=None,
        is_active=True,
        applicable_to=Coupon.ApplicableTo.ALL,
    )

    CheckoutService(user=customer_user, gateway=fake_gateway).create_checkout_session(
        _data(shipping_method, address, coupon_codes=[{"shop_id": shop.id, "code": "save10"}])
    )

    order = Order.objects.get()
    assert order.discount_amount == Decimal("4.00")
    assert order.tax_amount == Decimal("1.80")
    assert order.total_amount == Decimal("42.80")
    assert order.coupon_code == "SAVE10"
    coupon = Coupon.objects.get()
    assert coupon.usage_count == 1
    assert coupon.usages.get().order == order


def test_free_shipping_coupon(customer_user, customer_cart, shipping_method, address, fake_gateway, shop):
    baker.make(
        Coupon,
        shop=shop,
        code="SHIPFREE",
        type=Coupon.Type.FREE_SHIPPING,
        discount_amount=Decimal("0"),
        minimum_cart_amount=Decimal("0"),
        maximum_discount_amount=None,
        usage_limit=None,
        usage_limit_per_user=None,
        active_to=None,
        is_active=True,
        applicable_to=Coupon.ApplicableTo.ALL,
    )

    CheckoutService(user=customer_user, gateway=fake_gateway).create_checkout_session(
        _data(shipping_method, address, coupon_codes=[{"shop_id": shop.id, "code": "SHIPFREE"}])
    )

    order = Order.objects.get()
    assert order.shipping_amount == Decimal("0.00")
    assert order.total_amount == Decimal("42.00")


def test_invalid_coupon_aborts_checkout(customer_user, customer_cart, shipping_method, address, fake_gateway, shop):
    with pytest.raises(BusinessLogicError) as excinfo:
        CheckoutService(user=customer_user, gateway=fake_gateway).create_checkout_session(
            _data(shipping_method, address, coupon_codes=[{"shop_id": shop.id, "code": "NOPE"}])
        )

    assert excinfo.value.detail["code"] == "COUPON_INVALID"
    fake_gateway.create_payment_intent.assert_not_called()


def test_empty_cart(customer_user, shipping_method, address, fake_gateway):
    baker.make(Cart, user=customer_user, session_id="")
    with pytest.raises(BusinessLogicError) as excinfo:
        CheckoutService(user=customer_user, gateway=fake_gateway).create_checkout_session(
            _data(shipping_method, address)
        )
    assert excinfo.value.detail["detail"] == "Cart is empty"


def test_missing_cart(customer_user, shipping_method, address, fake_gateway):
    with pytest.raises(BusinessLogicError) as excinfo:
        CheckoutService(user=customer_user, gateway=fake_gateway).create_checkout_session(
            _data(shipping_method, address)
        )
    assert excinfo.value.detail["detail"] == "Cart not found"


def test_shipping_method_of_another_shop(customer_user, customer_cart, address, fake_gateway, other_shop):
    foreign = baker.make(ShippingMethod, shop=other_shop, price=Decimal("3.00"), is_active=True)
    with pytest.raises(BusinessLogicError) as excinfo:
        CheckoutService(user=customer_user, gateway=fake_gateway).create_checkout_session(
            _data(foreign, address)
        )
    assert excinfo.value.detail["detail"] == "Shipping method does not match cart items"


def test_restricted_shipping_method(customer_user, customer_cart, shipping_method, address, fake_gateway, product, shop):
    express = baker.make(ShippingMethod, shop=shop, price=Decimal("15.00"), is_active=True)
    baker.make(ProductShippingMethod, product=product, shipping_method=express)

    with pytest.raises(BusinessLogicError) as excinfo:
        CheckoutService(user=customer_user, gateway=fake_gateway).create_checkout_session(
            _data(shipping_method, address)
        )
    assert excinfo.value.detail["detail"] == "Shipping method is not available for the items in your cart"


def test_out_of_stock_rolls_back(customer_user, customer_cart, shipping_method, address, fake_gateway, product):
    Product.objects.filter(pk=product.pk).update(stock=1)

    with pytest.raises(BusinessLogicError) as excinfo:
        CheckoutService(user=customer_user, gateway=fake_gateway).create_checkout_session(
            _data(shipping_method, address)
        )

    assert excinfo.value.detail["code"] == "OUT_OF_STOCK"
    assert not Order.objects.exists()


def test_gateway_failure_leaves_cart_and_stock(customer_user, customer_cart, shipping_method, address, fake_gateway, product):
    fake_gateway.create_payment_intent.side_effect = PaymentGatewayError("card network down")

    with pytest.raises(PaymentGatewayError):
        CheckoutService(user=customer_user, gateway=fake_gateway).create_checkout_session(
            _data(shipping_method, address)
        )

    product.refresh_from_db()
    assert product.stock == 10
    assert customer_cart.items.count() == 1
    assert not Order.objects.exists()


def test_guest_checkout_endpoint(api_client, guest_cart, shipping_method, address, fake_gateway):
    payload = {
        "session_id": "guest-session-1",
        "shipping_address": address,
        "shipping_method": str(shipping_method.id),
    }
    with patch("marketplace.services.checkout_service.get_gateway", return_value=fake_gateway):
        response = api_client.post("/api/v1/store/checkout/", payload, format="json")

    assert response.status_code == 201
    body = response.json()
    assert body["total_amount"] == "47.00"
    order = Order.objects.get()
    assert order.user is None
    assert order.guest_email == "gina@example.com"
    assert fake_gateway.create_payment_intent.call_args.kwargs["metadata"]["userId"] == "guest"


def test_checkout_requires_billing_address_when_different(api_client, guest_cart, shipping_method, address):
    payload = {
        "session_id": "guest-session-1",
        "shipping_address": address,
        "shipping_method": str(shipping_method.id),
        "use_same_billing_address": False,
    }
    response = api_client.post("/api/v1/store/checkout/", payload, format="json")
    assert response.status_code == 400
    assert "billing_address" in response.json()["errors"]
