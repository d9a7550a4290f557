from decimal import Decimal

import pytest
from model_bakery import baker

from marketplace.models import Cart, CartItem, Order, OrderItem
from payments.models import Payment


ADDRESS = {
    "first_name": "Gina",
    "last_name": "Guest",
    "email": "gina@example.com",
    "phone": "555-0100",
    "street": "1 Main St",
    "city": "Springfield",
    "state": "IL",
    "zip": "62701",
    "country": "US",
}


@pytest.fixture
def address():
    return dict(ADDRESS)


@pytest.fixture
def guest_cart(product):
    cart = baker.make(Cart, user=None, session_id="guest-session-1")
    baker.make(CartItem, cart=cart, product=product, quantity=2)
    return cart


@pytest.fixture
def customer_cart(customer_user, product):
    cart = baker.make(Cart, user=customer_user, session_id="")
    baker.make(CartItem, cart=cart, product=product, quantity=2)
    return cart


@pytest.fixture
def make_order(shop):
    """Builds an order with one line and a payment on ``intent_id``."""

    def _make(user=None, intent_id="pi_123", status=Order.OrderStatus.PENDING,
              payment_status=Order.PaymentStatus.PENDING, product=None, quantity=1,
              payment_state=Payment.PaymentStatus.PENDING, total=Decimal("26.00")):
        order = baker.make(
            Order,
            shop=shop,
            user=user,
            guest_email="" if user else "gina@example.com",
            status=status,
            payment_status=payment_status,
            total_amount=total,
        )
        baker.make(
            OrderItem,
            order=order,
            product=product,
            product_name=product.name if product else "Mug",
            unit_price=Decimal("20.00"),
            quantity=quantity,
            total_price=Decimal("20.00") * quantity,
        )
        baker.make(
            Payment,
            order=order,
            amount=total,
            status=payment_state,
            stripe_payment_intent_id=intent_id,
            stripe_client_secret=f"{intent_id}_secret",
        )
        return order

    return _make
