from decimal import Decimal
from unittest.mock import MagicMock

import pytest
from django.core.cache import cache
from model_bakery import baker
from rest_framework.test import APIClient


@pytest.fixture(autouse=True)
def _clear_cache():
    """The Stripe circuit breaker keeps its state in the cache."""
    cache.clear()
    yield
    cache.clear()


@pytest.fixture
def api_client():
    return APIClient()


@pytest.fixture
def admin_user(django_user_model):
    return django_user_model.objects.create_user(
        email="admin@example.com",
        password="pass1234",
        first_name="Admin",
        last_name="User",
        role="ADMIN",
    )


@pytest.fixture
def vendor_user(django_user_model):
    return django_user_model.objects.create_user(
        email="vendor@example.com",
        password="pass1234",
        first_name="Vera",
        last_name="Vendor",
        role="VENDOR",
    )


@pytest.fixture
def customer_user(django_user_model):
    return django_user_model.objects.create_user(
        email="customer@example.com",
        password="pass1234",
        first_name="Carl",
        last_name="Customer",
        role="CUSTOMER",
    )


@pytest.fixture
def vendor(vendor_user):
    return baker.make(
        "shops.Vendor",
        user=vendor_user,
        business_name="Vera Goods",
        contact_email="vendor@example.com",
        status="active",
        commission_rate=Decimal("10.00"),
    )


@pytest.fixture
def shop(vendor):
    return baker.make(
        "shops.Shop",
        vendor=vendor,
        name="Vera Goods",
        slug="vera-goods",
        email="orders@vera.example.com",
        status="active",
        enable_notifications=True,
    )


@pytest.fixture
def other_shop(django_user_model):
    owner = django_user_model.objects.create_user(
        email="other@example.com",
        password="pass1234",
        role="VENDOR",
    )
    other_vendor = baker.make("shops.Vendor", user=owner, business_name="Other", status="active")
    return baker.make("shops.Shop", vendor=other_vendor, name="Other", slug="other-shop", status="active")


@pytest.fixture
def product(shop):
    return baker.make(
        "marketplace.Product",
        shop=shop,
        name="Ceramic Mug",
        slug="ceramic-mug",
        sku="MUG-1",
        selling_price=Decimal("20.00"),
        stock=10,
        is_active=True,
    )


@pytest.fixture
def shipping_method(shop):
    return baker.make(
        "shipping.ShippingMethod",
        shop=shop,
        name="Standard",
        price=Decimal("5.00"),
        duration="3-5 business days",
        is_active=True,
    )


@pytest.fixture
def fake_gateway():
    """A stand-in for ``StripeGateway`` with canned intent responses."""
    gateway = MagicMock()
    gateway.is_configured.return_value = True
    gateway.webhook_secret = "whsec_test_dummy"
    gateway.create_payment_intent.return_value = {
        "client_secret": "pi_123_secret_abc",
        "payment_intent_id": "pi_123",
    }
    gateway.create_destination_charge.return_value = {
        "client_secret": "pi_456_secret_def",
        "payment_intent_id": "pi_456",
    }
    return gateway
