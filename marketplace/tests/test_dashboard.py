from datetime import datetime
from decimal import Decimal

import pytest
from django.utils import timezone
from model_bakery import baker

from marketplace.models import Order, OrderItem, Product
from marketplace.services import DashboardService


pytestmark = pytest.mark.django_db

DASHBOARD_URL = "/api/v1/admin/dashboard/"


def _sell(shop, product, quantity, payment_status=Order.PaymentStatus.PAID, **order_fields):
    order = baker.make(
        Order,
        shop=shop,
        payment_status=payment_status,
        total_amount=product.selling_price * quantity,
        **order_fields,
    )
    baker.make(
        OrderItem,
        order=order,
        product=product,
        product_name=product.name,
        unit_price=product.selling_price,
        quantity=quantity,
        total_price=product.selling_price * quantity,
    )
    return order


class TestDashboardService:

    def test_low_stock_ignores_untracked_and_inactive(self, shop, product):
        baker.make(Product, shop=shop, name="Teapot", sku="TEA-1", stock=2, is_active=True)
        baker.make(Product, shop=shop, name="Bowl", stock=None, is_active=True)
        baker.make(Product, shop=shop, name="Plate", stock=0, is_active=False)

        rows = DashboardService.low_stock_products()

        assert [(row["name"], row["stock"], row["threshold"]) for row in rows] == [("Teapot", 2, 5)]

    def test_low_stock_threshold_from_settings(self, settings, shop, product):
        settings.LOW_STOCK_THRESHOLD = 10

        rows = DashboardService.low_stock_products()

        assert [row["name"] for row in rows] == ["Ceramic Mug"]

    def test_top_products_counts_paid_orders_only(self, shop, product):
        teapot = baker.make(Product, shop=shop, name="Teapot", selling_price=Decimal("30.00"), stock=5)
        _sell(shop, product, 3)
        _sell(shop, teapot, 1)
        _sell(shop, teapot, 4, payment_status=Order.PaymentStatus.PENDING)

        rows = DashboardService.top_products()

        assert [(row["name"], row["total_sold"]) for row in rows] == [("Ceramic Mug", 3), ("Teapot", 1)]
        assert rows[0]["revenue"] == Decimal("60.00")

    def test_recent_orders_names_guests(self, shop, product, customer_user):
        _sell(shop, product, 1, guest_email="gina@example.com")
        _sell(shop, product, 1, user=customer_user)

        rows = DashboardService.recent_orders()

        assert {(row["customer_name"], row["customer_email"]) for row in rows} == {
            ("Guest", "gina@example.com"),
            ("Carl Customer", "customer@example.com"),
        }

    def test_vendor_dashboard_stats(self, shop, other_shop, product):
        now = timezone.make_aware(datetime(2026, 3, 15, 12, 0))
        delivered = _sell(shop, product, 2, status=Order.OrderStatus.DELIVERED)
        _sell(shop, product, 1, status=Order.OrderStatus.PROCESSING)
        last_month = _sell(shop, product, 1, status=Order.OrderStatus.DELIVERED)
        foreign = baker.make(Product, shop=other_shop, name="Teapot", selling_price=Decimal("30.00"))
        _sell(other_shop, foreign, 5, status=Order.OrderStatus.DELIVERED)
        Order.objects.filter(shop=shop).update(created_at=timezone.make_aware(datetime(2026, 3, 10)))
        Order.objects.filter(pk=last_month.pk).update(created_at=timezone.make_aware(datetime(2026, 2, 10)))
        Order.objects.filter(shop=other_shop).update(created_at=timezone.make_aware(datetime(2026, 3, 10)))

        dashboard = DashboardService.vendor_dashboard(shop, now=now)

        stats = dashboard["stats"]
        assert stats["monthly_revenue"] == delivered.total_amount
        assert stats["previous_month_revenue"] == Decimal("20.00")
        assert stats["total_orders"] == 2
        assert stats["previous_month_orders"] == 1
        assert stats["total_products"] == 1
        assert stats["conversion_rate"] == 200.0
        assert [row["name"] for row in dashboard["top_products"]] == ["Ceramic Mug"]
        assert [month["month"] for month in dashboard["monthly_sales"]] == [
            "Oct 2025", "Nov 2025", "Dec 2025", "Jan 2026", "Feb 2026", "Mar 2026",
        ]
        assert dashboard["monthly_sales"][-1]["orders"] == 2
        assert dashboard["monthly_sales"][0]["revenue"] == Decimal("0.00")


class TestAdminDashboardView:

    def test_low_stock(self, api_client, admin_user, shop):
        baker.make(Product, shop=shop, name="Teapot", stock=1, is_active=True)
        api_client.force_authenticate(admin_user)

        response = api_client.get(f"{DASHBOARD_URL}low-stock/")

        assert response.status_code == 200
        assert [row["name"] for row in response.json()] == ["Teapot"]

    def test_lists_are_cached_until_refresh(self, api_client, admin_user, shop, product):
        _sell(shop, product, 1)
        api_client.force_authenticate(admin_user)
        url = f"{DASHBOARD_URL}recent-orders/"

        assert len(api_client.get(url).json()) == 1
        _sell(shop, product, 1)

        assert len(api_client.get(url).json()) == 1
        assert len(api_client.get(url, {"force_refresh": "true"}).json()) == 2

    def test_top_products(self, api_client, admin_user, shop, product):
        _sell(shop, product, 2)
        api_client.force_authenticate(admin_user)

        response = api_client.get(f"{DASHBOARD_URL}top-products/")

        assert response.json()[0]["total_sold"] == 2

    def test_admin_only(self, api_client, customer_user):
        api_client.force_authenticate(customer_user)
        assert api_client.get(f"{DASHBOARD_URL}low-stock/").status_code == 403


class TestVendorDashboardView:

    def test_owner_sees_the_dashboard(self, api_client, vendor_user, shop, product):
        api_client.force_authenticate(vendor_user)

        response = api_client.get("/api/v1/vendor/shops/vera-goods/dashboard/")

        assert response.status_code == 200
        assert response.json()["stats"]["total_products"] == 1
        assert len(response.json()["monthly_sales"]) == 6

    def test_other_vendor_is_refused(self, api_client, vendor_user, other_shop):
        api_client.force_authenticate(vendor_user)

        response = api_client.get("/api/v1/vendor/shops/other-shop/dashboard/")

        assert response.status_code == 403
