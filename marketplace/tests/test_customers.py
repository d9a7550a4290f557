import pytest
from model_bakery import baker
from rest_framework.exceptions import NotFound

from marketplace.models import CustomerAddress, WishlistItem
from marketplace.services import AddressService, WishlistService


pytestmark = pytest.mark.django_db

WISHLIST_URL = "/api/v1/store/wishlist/"
ADDRESSES_URL = "/api/v1/store/addresses/"

HOME = {
    "title": "Home",
    "first_name": "Carl",
    "last_name": "Customer",
    "street": "1 Main St",
    "city": "Springfield",
    "state": "IL",
    "zip": "62701",
    "country": "US",
}


class TestWishlist:

    def test_toggle_adds_then_removes(self, customer_user, product):
        assert WishlistService.toggle(customer_user, product.id) == {"added": True}
        assert WishlistService.is_in_wishlist(customer_user, product.id) is True

        assert WishlistService.toggle(customer_user, product.id) == {"added": False}
        assert not WishlistItem.objects.filter(user=customer_user).exists()

    def test_toggle_unknown_product(self, customer_user):
        with pytest.raises(NotFound):
            WishlistService.toggle(customer_user, "1f0c8a4e-3f0e-4b8e-9a55-2d9b1c1e0b11")

    def test_list_is_the_callers_own(self, api_client, customer_user, vendor_user, product, shop):
        teapot = baker.make("marketplace.Product", shop=shop, name="Teapot", is_active=True)
        WishlistService.toggle(customer_user, product.id)
        WishlistService.toggle(vendor_user, teapot.id)
        api_client.force_authenticate(customer_user)

        response = api_client.get(WISHLIST_URL)

        assert response.status_code == 200
        assert [row["product"]["name"] for row in response.json()["results"]] == ["Ceramic Mug"]

    def test_toggle_endpoint(self, api_client, customer_user, product):
        api_client.force_authenticate(customer_user)

        response = api_client.post(f"{WISHLIST_URL}toggle/", {"product_id": str(product.id)}, format="json")

        assert response.status_code == 200
        assert response.json() == {"added": True}

    def test_toggle_requires_login(self, api_client, product):
        response = api_client.post(f"{WISHLIST_URL}toggle/", {"product_id": str(product.id)}, format="json")
        assert response.status_code == 401

    def test_status_for_guest_is_false(self, api_client, product):
        response = api_client.get(f"{WISHLIST_URL}status/", {"product_id": str(product.id)})

        assert response.status_code == 200
        assert response.json() == {"is_in_wishlist": False}

    def test_status_for_user(self, api_client, customer_user, product):
        WishlistService.toggle(customer_user, product.id)
        api_client.force_authenticate(customer_user)

        response = api_client.get(f"{WISHLIST_URL}status/", {"product_id": str(product.id)})

        assert response.json() == {"is_in_wishlist": True}


class TestAddresses:

    def test_first_address_of_a_type_is_default(self, customer_user):
        first = AddressService.create(customer_user, **HOME)
        second = AddressService.create(customer_user, **dict(HOME, title="Office"))
        billing = AddressService.create(customer_user, **dict(HOME, title="Billing", type="billing"))

        assert first.is_default is True
        assert second.is_default is False
        assert billing.is_default is True

    def test_new_default_replaces_the_old_one(self, customer_user):
        first = AddressService.create(customer_user, **HOME)
        second = AddressService.create(customer_user, **dict(HOME, title="Office", is_default=True))

        first.refresh_from_db()
        assert first.is_default is False
        assert second.is_default is True

    def test_set_default(self, customer_user):
        first = AddressService.create(customer_user, **HOME)
        second = AddressService.create(customer_user, **dict(HOME, title="Office"))

        AddressService.set_default(second)

        first.refresh_from_db()
        assert first.is_default is False
        assert CustomerAddress.objects.get(pk=second.pk).is_default is True

    def test_deleting_the_default_promotes_the_next(self, customer_user):
        first = AddressService.create(customer_user, **HOME)
        second = AddressService.create(customer_user, **dict(HOME, title="Office"))

        AddressService.delete(first)

        second.refresh_from_db()
        assert second.is_default is True

    def test_other_users_address_is_not_found(self, customer_user, vendor_user):
        address = AddressService.create(vendor_user, **HOME)
        with pytest.raises(NotFound):
            AddressService.get_address(customer_user, address.id)

    def test_crud_endpoints(self, api_client, customer_user):
        api_client.force_authenticate(customer_user)

        created = api_client.post(ADDRESSES_URL, HOME, format="json")
        assert created.status_code == 201
        address_id = created.json()["id"]
        assert created.json()["is_default"] is True

        updated = api_client.patch(f"{ADDRESSES_URL}{address_id}/", {"city": "Shelbyville"}, format="json")
        assert updated.status_code == 200
        assert updated.json()["city"] == "Shelbyville"

        listed = api_client.get(ADDRESSES_URL)
        assert [row["title"] for row in listed.json()] == ["Home"]

        deleted = api_client.delete(f"{ADDRESSES_URL}{address_id}/")
        assert deleted.json() == {"success": True}
        assert not CustomerAddress.objects.exists()

    def test_set_default_endpoint(self, api_client, customer_user):
        AddressService.create(customer_user, **HOME)
        office = AddressService.create(customer_user, **dict(HOME, title="Office"))
        api_client.force_authenticate(customer_user)

        response = api_client.post(f"{ADDRESSES_URL}{office.id}/set-default/")

        assert response.status_code == 200
        assert response.json()["is_default"] is True

    def test_cannot_touch_another_users_address(self, api_client, customer_user, vendor_user):
        address = AddressService.create(vendor_user, **HOME)
        api_client.force_authenticate(customer_user)

        response = api_client.delete(f"{ADDRESSES_URL}{address.id}/")

        assert response.status_code == 404
        assert CustomerAddress.objects.filter(pk=address.pk).exists()
