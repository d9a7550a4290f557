from decimal import Decimal
import uuid

import pytest
from model_bakery import baker

from shipping.models import ProductShippingMethod, ShippingMethod
from shipping.services import ShippingEligibilityService


pytestmark = pytest.mark.django_db


def _method(shop, name, price, is_active=True):
    return baker.make(
        ShippingMethod,
        shop=shop,
        name=name,
        price=Decimal(price),
        duration="2 days",
        is_active=is_active,
    )


def _restrict(product, *methods):
    for method in methods:
        baker.make(ProductShippingMethod, product=product, shipping_method=method)


def test_empty_input_returns_nothing(shop):
    _method(shop, "Standard", "5.00")
    assert ShippingEligibilityService.get_available_methods([]) == []


def test_unknown_products_return_nothing(shop):
    _method(shop, "Standard", "5.00")
    assert ShippingEligibilityService.get_available_methods([uuid.uuid4()]) == []


def test_products_of_two_shops_return_nothing(shop, other_shop, product):
    _method(shop, "Standard", "5.00")
    foreign = baker.make("marketplace.Product", shop=other_shop, selling_price=Decimal("3.00"))
    assert ShippingEligibilityService.get_available_methods([product.id, foreign.id]) == []


def test_unrestricted_products_get_every_active_method_by_price(shop, product):
    express = _method(shop, "Express", "15.00")
    standard = _method(shop, "Standard", "5.00")
    _method(shop, "Retired", "1.00", is_active=False)

    methods = ShippingEligibilityService.get_available_methods([product.id])

    assert methods == [standard, express]


def test_restricted_products_get_the_intersection(shop, product):
    standard = _method(shop, "Standard", "5.00")
    express = _method(shop, "Express", "15.00")
    pickup = _method(shop, "Pickup", "0.00")
    second = baker.make("marketplace.Product", shop=shop, selling_price=Decimal("8.00"))
    free_product = baker.make("marketplace.Product", shop=shop, selling_price=Decimal("2.00"))
    _restrict(product, standard, express)
    _restrict(second, express, pickup)

    methods = ShippingEligibilityService.get_available_methods(
        [product.id, second.id, free_product.id]
    )

    assert methods == [express]


def test_inactive_methods_are_never_returned_even_when_listed(shop, product):
    retired = _method(shop, "Retired", "1.00", is_active=False)
    _restrict(product, retired)
    assert ShippingEligibilityService.get_available_methods([product.id]) == []


def test_is_method_available(shop, product):
    standard = _method(shop, "Standard", "5.00")
    express = _method(shop, "Express", "15.00")
    _restrict(product, standard)

    assert ShippingEligibilityService.is_method_available(standard, [product.id])
    assert not ShippingEligibilityService.is_method_available(express, [product.id])
