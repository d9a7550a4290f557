import pytest
from model_bakery import baker
from rest_framework.exceptions import PermissionDenied

from core.exceptions import BusinessLogicError
from marketplace.models import Cart, CartItem
from marketplace.services import CartService


pytestmark = pytest.mark.django_db

CART_URL = "/api/v1/store/cart/"


def test_guest_add_creates_session_cart(product):
    cart = CartService.add_item(product.id, quantity=2)

    assert cart.user is None
    assert cart.session_id
    assert cart.items.get().quantity == 2


def test_adding_same_product_sums_quantity(product, customer_user):
    CartService.add_item(product.id, quantity=2, user=customer_user)
    cart = CartService.add_item(product.id, quantity=3, user=customer_user)

    assert cart.items.count() == 1
    assert cart.items.get().quantity == 5


def test_add_beyond_stock(product, customer_user):
    CartService.add_item(product.id, quantity=8, user=customer_user)

    with pytest.raises(BusinessLogicError) as excinfo:
        CartService.add_item(product.id, quantity=3, user=customer_user)

    assert excinfo.value.detail["detail"] == "Not enough stock available for the requested quantity"


def test_untracked_stock_is_unlimited(shop, customer_user):
    product = baker.make("marketplace.Product", shop=shop, stock=None, is_active=True)
    cart = CartService.add_item(product.id, quantity=500, user=customer_user)
    assert cart.items.get().quantity == 500


def test_inactive_product(product):
    product.is_active = False
    product.save()
    with pytest.raises(BusinessLogicError) as excinfo:
        CartService.add_item(product.id)
    assert excinfo.value.detail["detail"] == "Product not found or is not available"


def test_guest_cannot_touch_another_cart(guest_cart):
    item = guest_cart.items.get()
    with pytest.raises(PermissionDenied):
        CartService.update_item(item.id, 1, session_id="someone-else")


def test_merge_moves_and_sums_items(guest_cart, customer_user, product, shop):
    CartService.add_item(product.id, quantity=1, user=customer_user)
    other = baker.make("marketplace.Product", shop=shop, stock=None, is_active=True)
    baker.make(CartItem, cart=guest_cart, product=other, quantity=4)

    cart = CartService.merge(customer_user, "guest-session-1")

    quantities = {item.product_id: item.quantity for item in cart.items.all()}
    assert quantities == {product.id: 3, other.id: 4}
    assert not Cart.objects.filter(session_id="guest-session-1").exists()


def test_summary(customer_cart):
    summary = CartService.summarize(customer_cart)
    assert summary["total_items"] == 2
    assert str(summary["subtotal"]) == "40.00"


def test_empty_summary():
    assert CartService.summarize(None)["items"] == []


class TestCartEndpoints:

    def test_guest_flow(self, api_client, product):
        response = api_client.post(f"{CART_URL}items/", {"product_id": str(product.id), "quantity": 2}, format="json")
        assert response.status_code == 201
        session_id = response.json()["session_id"]
        assert response.json()["subtotal"] == "40.00"

        response = api_client.get(CART_URL, HTTP_X_CART_SESSION=session_id)
        assert response.json()["total_items"] == 2

        item_id = response.json()["items"][0]["id"]
        response = api_client.patch(
            f"{CART_URL}items/{item_id}/",
            {"quantity": 1, "session_id": session_id},
            format="json",
        )
        assert response.status_code == 200
        assert response.json()["total_items"] == 1

        response = api_client.delete(f"{CART_URL}items/{item_id}/", HTTP_X_CART_SESSION=session_id)
        assert response.status_code == 200
        assert response.json()["items"] == []

    def test_quantity_is_validated(self, api_client, product):
        response = api_client.post(f"{CART_URL}items/", {"product_id": str(product.id), "quantity": 0}, format="json")
        assert response.status_code == 400
        assert "quantity" in response.json()["errors"]

    def test_merge_requires_login(self, api_client, guest_cart):
        response = api_client.post(f"{CART_URL}merge/", {"guest_session_id": "guest-session-1"}, format="json")
        assert response.status_code == 401

    def test_clear(self, api_client, customer_user, customer_cart):
        api_client.force_authenticate(customer_user)
        response = api_client.post(f"{CART_URL}clear/")
        assert response.status_code == 200
        assert response.json()["total_items"] == 0
