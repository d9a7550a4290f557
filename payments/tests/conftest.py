from decimal import Decimal

import pytest
from model_bakery import baker

from payments.models import Payment


@pytest.fixture
def order_with_payment(shop, customer_user):
    order = baker.make(
        "marketplace.Order",
        shop=shop,
        user=customer_user,
        total_amount=Decimal("26.00"),
    )
    payment = baker.make(
        Payment,
        order=order,
        amount=Decimal("26.00"),
        application_fee_amount=Decimal("2.60"),
        status=Payment.PaymentStatus.SUCCEEDED,
        stripe_payment_intent_id="pi_123",
    )
    return order, payment


@pytest.fixture
def guest_order_with_payment(shop):
    order = baker.make("marketplace.Order", shop=shop, guest_email="guest@example.com")
    payment = baker.make(
        Payment,
        order=order,
        amount=Decimal("10.00"),
        stripe_payment_intent_id="pi_guest",
    )
    return order, payment
