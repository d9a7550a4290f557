from decimal import Decimal

import pytest
from model_bakery import baker

from core.exceptions import BusinessLogicError
from marketplace.models import Category, Order, OrderItem, Product
from marketplace.services import CatalogAdminService


pytestmark = pytest.mark.django_db

PRODUCTS_URL = "/api/v1/admin/products/"
CATEGORIES_URL = "/api/v1/admin/categories/"


class TestAdminProducts:

    def test_lists_products_of_every_shop(self, api_client, admin_user, product, other_shop):
        baker.make(Product, shop=other_shop, name="Teapot", is_active=False)
        api_client.force_authenticate(admin_user)

        response = api_client.get(PRODUCTS_URL)

        assert response.status_code == 200
        assert {row["name"] for row in response.json()["results"]} == {"Ceramic Mug", "Teapot"}

    def test_filters_by_activity_and_search(self, api_client, admin_user, product, other_shop):
        baker.make(Product, shop=other_shop, name="Teapot", is_active=False)
        api_client.force_authenticate(admin_user)

        inactive = api_client.get(PRODUCTS_URL, {"is_active": "false"})
        searched = api_client.get(PRODUCTS_URL, {"search": "mug"})

        assert [row["name"] for row in inactive.json()["results"]] == ["Teapot"]
        assert [row["name"] for row in searched.json()["results"]] == ["Ceramic Mug"]

    def test_set_status(self, api_client, admin_user, product):
        api_client.force_authenticate(admin_user)

        response = api_client.post(f"{PRODUCTS_URL}{product.id}/status/", {"status": "inactive"}, format="json")

        assert response.status_code == 200
        assert response.json()["message"] == 'Product status updated to "inactive"'
        assert response.json()["product"]["is_active"] is False
        product.refresh_from_db()
        assert product.is_active is False

    def test_rejects_unknown_status(self, api_client, admin_user, product):
        api_client.force_authenticate(admin_user)

        response = api_client.post(f"{PRODUCTS_URL}{product.id}/status/", {"status": "archived"}, format="json")

        assert response.status_code == 400

    def test_delete_keeps_order_history(self, api_client, admin_user, product, shop):
        order = baker.make(Order, shop=shop, total_amount=Decimal("20.00"))
        line = baker.make(
            OrderItem,
            order=order,
            product=product,
            product_name="Ceramic Mug",
            unit_price=Decimal("20.00"),
            quantity=1,
            total_price=Decimal("20.00"),
        )
        api_client.force_authenticate(admin_user)

        response = api_client.delete(f"{PRODUCTS_URL}{product.id}/")

        assert response.json() == {"success": True, "message": "Product deleted successfully"}
        assert not Product.objects.filter(pk=product.pk).exists()
        line.refresh_from_db()
        assert line.product is None
        assert line.product_name == "Ceramic Mug"

    def test_unknown_product(self, api_client, admin_user):
        api_client.force_authenticate(admin_user)

        response = api_client.get(f"{PRODUCTS_URL}1f0c8a4e-3f0e-4b8e-9a55-2d9b1c1e0b11/")

        assert response.status_code == 404

    def test_admin_only(self, api_client, vendor_user):
        api_client.force_authenticate(vendor_user)
        assert api_client.get(PRODUCTS_URL).status_code == 403


class TestAdminCategories:

    def test_list_counts_products(self, api_client, admin_user, shop, product):
        mugs = baker.make(Category, shop=shop, name="Mugs", slug="mugs")
        product.category = mugs
        product.save()
        api_client.force_authenticate(admin_user)

        response = api_client.get(CATEGORIES_URL)

        rows = response.json()["results"]
        assert [(row["name"], row["product_count"]) for row in rows] == [("Mugs", 1)]

    def test_toggle_flips_the_flag(self, shop):
        category = baker.make(Category, shop=shop, name="Mugs", slug="mugs", is_active=True)

        result = CatalogAdminService.set_category_active(category)

        assert result == {"success": True, "message": "Category deactivated"}
        assert Category.objects.get(pk=category.pk).is_active is False

    def test_toggle_endpoint_with_explicit_value(self, api_client, admin_user, shop):
        category = baker.make(Category, shop=shop, name="Mugs", slug="mugs", is_active=True)
        api_client.force_authenticate(admin_user)

        response = api_client.post(f"{CATEGORIES_URL}{category.id}/toggle/", {"is_active": True}, format="json")

        assert response.json()["message"] == "Category activated"
        assert Category.objects.get(pk=category.pk).is_active is True

    def test_cannot_delete_with_subcategories(self, shop):
        parent = baker.make(Category, shop=shop, name="Kitchen", slug="kitchen")
        baker.make(Category, shop=shop, name="Mugs", slug="mugs", parent=parent)

        with pytest.raises(BusinessLogicError) as excinfo:
            CatalogAdminService.delete_category(parent)

        assert excinfo.value.detail["code"] == "CATEGORY_HAS_CHILDREN"

    def test_cannot_delete_with_products(self, api_client, admin_user, shop, product):
        mugs = baker.make(Category, shop=shop, name="Mugs", slug="mugs")
        product.category = mugs
        product.save()
        api_client.force_authenticate(admin_user)

        response = api_client.delete(f"{CATEGORIES_URL}{mugs.id}/")

        assert response.status_code == 422
        assert Category.objects.filter(pk=mugs.pk).exists()

    def test_delete_empty_category(self, api_client, admin_user, shop):
        mugs = baker.make(Category, shop=shop, name="Mugs", slug="mugs")
        api_client.force_authenticate(admin_user)

        response = api_client.delete(f"{CATEGORIES_URL}{mugs.id}/")

        assert response.json() == {"success": True, "message": "Category deleted successfully"}
        assert not Category.objects.filter(pk=mugs.pk).exists()
