from decimal import Decimal
from unittest.mock import patch

import pytest
from model_bakery import baker
from rest_framework.exceptions import NotFound, PermissionDenied

from core.exceptions import BusinessLogicError
from coupons.models import Coupon, CouponUsage
from coupons.services import CouponService
from marketplace.models import Order
from marketplace.services import OrderService
from notifications.models import VendorNotification
from payments.gateway import PaymentGatewayError
from payments.models import Payment


pytestmark = pytest.mark.django_db


class TestPaymentConfirmation:

    def test_confirm_marks_orders_paid(self, make_order, fake_gateway):
        order = make_order()
        fake_gateway.retrieve_payment_intent.return_value = {"id": "pi_123", "status": "succeeded"}

        result = OrderService.confirm_payment("pi_123", [order.id], gateway=fake_gateway)

        assert result == {"success": True, "message": "Payment confirmed successfully"}
        order.refresh_from_db()
        assert order.status == Order.OrderStatus.CONFIRMED
        assert order.payment_status == Order.PaymentStatus.PAID
        assert order.payments.get().status == Payment.PaymentStatus.SUCCEEDED
        assert VendorNotification.objects.filter(data__orderId=str(order.id)).count() == 1

    def test_unfinished_intent(self, make_order, fake_gateway):
        order = make_order()
        fake_gateway.retrieve_payment_intent.return_value = {"id": "pi_123", "status": "requires_payment_method"}

        with pytest.raises(BusinessLogicError) as excinfo:
            OrderService.confirm_payment("pi_123", [order.id], gateway=fake_gateway)

        assert excinfo.value.detail["detail"] == "Payment not completed"
        assert excinfo.value.detail["code"] == "PAYMENT_NOT_COMPLETED"
        order.refresh_from_db()
        assert order.payment_status == Order.PaymentStatus.PENDING

    def test_orders_of_another_intent_are_left_alone(self, make_order, fake_gateway):
        order = make_order(intent_id="pi_other")
        fake_gateway.retrieve_payment_intent.return_value = {"id": "pi_123", "status": "succeeded"}

        OrderService.confirm_payment("pi_123", [order.id], gateway=fake_gateway)

        order.refresh_from_db()
        assert order.payment_status == Order.PaymentStatus.PENDING

    def test_unknown_intent(self, fake_gateway):
        fake_gateway.retrieve_payment_intent.side_effect = PaymentGatewayError("missing", stripe_code="resource_missing")
        with pytest.raises(NotFound):
            OrderService.confirm_payment("pi_missing", ["1f0c8a4e-3f0e-4b8e-9a55-2d9b1c1e0b11"], gateway=fake_gateway)

    def test_mark_orders_paid_is_idempotent(self, make_order):
        order = make_order()

        assert len(OrderService.mark_orders_paid([order.id], "pi_123")) == 1
        assert OrderService.mark_orders_paid([order.id], "pi_123") == []
        assert VendorNotification.objects.filter(data__orderId=str(order.id)).count() == 1


class TestCustomerAccess:

    def test_owner_reads_by_order_number(self, make_order, customer_user):
        order = make_order(user=customer_user)
        assert OrderService.get_order(order.order_number.lower(), user=customer_user) == order

    def test_other_user_is_rejected(self, make_order, customer_user, vendor_user):
        order = make_order(user=customer_user)
        with pytest.raises(PermissionDenied):
            OrderService.get_order(order.id, user=vendor_user)

    def test_admin_reads_any_order(self, make_order, customer_user, admin_user):
        order = make_order(user=customer_user)
        assert OrderService.get_order(order.id, user=admin_user) == order

    def test_guest_needs_the_intent(self, make_order):
        order = make_order()
        assert OrderService.get_order(order.id, payment_intent_id="pi_123") == order
        with pytest.raises(PermissionDenied):
            OrderService.get_order(order.id, payment_intent_id="pi_wrong")

    def test_unknown_order(self):
        with pytest.raises(NotFound):
            OrderService.get_order("ORD-NOPE")

    def test_orders_by_ids_for_guest(self, make_order):
        first = make_order()
        second = make_order()
        orders = OrderService.get_orders_by_ids([first.id, second.id], payment_intent_id="pi_123")
        assert {order.id for order in orders} == {first.id, second.id}

    def test_orders_by_ids_with_mixed_intents(self, make_order):
        first = make_order()
        second = make_order(intent_id="pi_other")
        with pytest.raises(PermissionDenied) as excinfo:
            OrderService.get_orders_by_ids([first.id, second.id], payment_intent_id="pi_123")
        assert excinfo.value.detail == "Unauthorized access to orders"

    def test_payment_session_covers_shared_intent(self, make_order, customer_user):
        first = make_order(user=customer_user, total=Decimal("26.00"))
        second = make_order(user=customer_user, total=Decimal("14.00"))

        session = OrderService.get_order_payment_session(first.id, customer_user)

        assert set(session["order_ids"]) == {str(first.id), str(second.id)}
        assert session["client_secret"] == "pi_123_secret"
        assert session["total_amount"] == Decimal("40.00")

    def test_payment_session_of_paid_order(self, make_order, customer_user):
        order = make_order(user=customer_user, payment_status=Order.PaymentStatus.PAID)
        with pytest.raises(BusinessLogicError) as excinfo:
            OrderService.get_order_payment_session(order.id, customer_user)
        assert excinfo.value.detail["detail"] == "Payment already completed"


class TestCancellation:

    def test_cancel_restores_stock_and_releases_intent(self, make_order, customer_user, product, fake_gateway):
        order = make_order(user=customer_user, product=product, quantity=3)

        result = OrderService.cancel_order(order.id, customer_user, "changed my mind", gateway=fake_gateway)

        assert result["success"] is True
        order.refresh_from_db()
        assert order.status == Order.OrderStatus.CANCELLED
        assert "Customer cancelled: changed my mind" in order.internal_notes
        product.refresh_from_db()
        assert product.stock == 13
        assert order.payments.get().status == Payment.PaymentStatus.CANCELLED
        fake_gateway.cancel_payment_intent.assert_called_once_with("pi_123")

    def test_shared_intent_stays_open(self, make_order, customer_user, fake_gateway):
        order = make_order(user=customer_user)
        make_order(user=customer_user)

        OrderService.cancel_order(order.id, customer_user, gateway=fake_gateway)

        fake_gateway.cancel_payment_intent.assert_not_called()

    def test_cancelled_order_stays_cancelled_when_shared_intent_succeeds(
        self, make_order, customer_user, product, fake_gateway
    ):
        cancelled = make_order(user=customer_user, product=product, quantity=2, total=Decimal("26.00"))
        kept = make_order(user=customer_user, total=Decimal("14.00"))
        OrderService.cancel_order(cancelled.id, customer_user, gateway=fake_gateway)
        fake_gateway.retrieve_payment_intent.return_value = {"id": "pi_123", "status": "succeeded"}

        OrderService.confirm_payment("pi_123", [cancelled.id, kept.id], gateway=fake_gateway)

        cancelled.refresh_from_db()
        assert cancelled.status == Order.OrderStatus.CANCELLED
        assert cancelled.payment_status == Order.PaymentStatus.REFUNDED
        assert cancelled.payments.get().status == Payment.PaymentStatus.REFUNDED
        fake_gateway.create_refund.assert_called_once_with("pi_123", amount=Decimal("26.00"))
        product.refresh_from_db()
        assert product.stock == 12
        kept.refresh_from_db()
        assert kept.payment_status == Order.PaymentStatus.PAID
        assert kept.payments.get().status == Payment.PaymentStatus.SUCCEEDED
        assert not VendorNotification.objects.filter(data__orderId=str(cancelled.id)).exists()

    def test_cancelled_share_is_refunded_once(self, make_order, customer_user, fake_gateway):
        cancelled = make_order(user=customer_user)
        kept = make_order(user=customer_user)
        OrderService.cancel_order(cancelled.id, customer_user, gateway=fake_gateway)

        OrderService.mark_orders_paid([cancelled.id, kept.id], "pi_123", gateway=fake_gateway)
        OrderService.mark_orders_paid([cancelled.id, kept.id], "pi_123", gateway=fake_gateway)

        assert fake_gateway.create_refund.call_count == 1

    def test_failed_share_refund_is_retried(self, make_order, customer_user, fake_gateway):
        cancelled = make_order(user=customer_user)
        make_order(user=customer_user)
        OrderService.cancel_order(cancelled.id, customer_user, gateway=fake_gateway)
        fake_gateway.create_refund.side_effect = PaymentGatewayError("timeout")

        OrderService.mark_orders_paid([cancelled.id], "pi_123", gateway=fake_gateway)

        assert cancelled.payments.get().status == Payment.PaymentStatus.CANCELLED
        fake_gateway.create_refund.side_effect = None
        OrderService.mark_orders_paid([cancelled.id], "pi_123", gateway=fake_gateway)
        assert cancelled.payments.get().status == Payment.PaymentStatus.REFUNDED

    def test_cancel_releases_coupon_usage(self, make_order, customer_user, shop, fake_gateway):
        coupon = baker.make(Coupon, shop=shop, code="ONCE", usage_limit=1)
        order = make_order(user=customer_user)
        CouponService.record_usage(coupon, order, user=customer_user, discount_amount=Decimal("5"))

        OrderService.cancel_order(order.id, customer_user, gateway=fake_gateway)

        coupon.refresh_from_db()
        assert coupon.usage_count == 0
        assert not CouponUsage.objects.filter(order=order).exists()

    def test_admin_cancel_releases_coupon_usage(self, make_order, customer_user, shop, fake_gateway):
        coupon = baker.make(Coupon, shop=shop, code="ONCE", usage_limit=1)
        order = make_order(
            user=customer_user,
            payment_status=Order.PaymentStatus.PAID,
            payment_state=Payment.PaymentStatus.SUCCEEDED,
        )
        CouponService.record_usage(coupon, order, user=customer_user, discount_amount=Decimal("5"))

        OrderService.admin_cancel(order, "fraud", gateway=fake_gateway)

        coupon.refresh_from_db()
        assert coupon.usage_count == 0

    def test_shipped_order_cannot_be_cancelled(self, make_order, customer_user, fake_gateway):
        order = make_order(user=customer_user, status=Order.OrderStatus.SHIPPED)
        with pytest.raises(BusinessLogicError) as excinfo:
            OrderService.cancel_order(order.id, customer_user, gateway=fake_gateway)
        assert excinfo.value.detail["code"] == "ORDER_NOT_CANCELLABLE"

    def test_cannot_cancel_someone_elses_order(self, make_order, customer_user, vendor_user, fake_gateway):
        order = make_order(user=customer_user)
        with pytest.raises(NotFound):
            OrderService.cancel_order(order.id, vendor_user, gateway=fake_gateway)

    def test_admin_cancel_refunds_paid_order(self, make_order, customer_user, product, fake_gateway):
        order = make_order(
            user=customer_user,
            product=product,
            status=Order.OrderStatus.CONFIRMED,
            payment_status=Order.PaymentStatus.PAID,
            payment_state=Payment.PaymentStatus.SUCCEEDED,
        )

        result = OrderService.admin_cancel(order, "fraud", gateway=fake_gateway)

        assert result["message"] == "Order refunded and cancelled successfully"
        fake_gateway.create_refund.assert_called_once_with("pi_123", amount=Decimal("26.00"))
        order.refresh_from_db()
        assert order.status == Order.OrderStatus.REFUNDED
        assert order.payment_status == Order.PaymentStatus.REFUNDED
        assert "[ADMIN]" in order.internal_notes
        assert order.payments.get().status == Payment.PaymentStatus.REFUNDED

    def test_admin_cancel_refund_failure(self, make_order, customer_user, fake_gateway):
        order = make_order(
            user=customer_user,
            payment_status=Order.PaymentStatus.PAID,
            payment_state=Payment.PaymentStatus.SUCCEEDED,
        )
        fake_gateway.create_refund.side_effect = PaymentGatewayError("declined")

        with pytest.raises(BusinessLogicError) as excinfo:
            OrderService.admin_cancel(order, gateway=fake_gateway)

        assert excinfo.value.detail["code"] == "REFUND_FAILED"


def test_status_update_sets_fulfillment(make_order):
    order = make_order()
    OrderService.update_status(order, Order.OrderStatus.DELIVERED, note="left at door")
    order.refresh_from_db()
    assert order.fulfillment_status == Order.FulfillmentStatus.FULFILLED
    assert "left at door" in order.internal_notes


def test_vendor_stats(make_order, shop):
    make_order(status=Order.OrderStatus.DELIVERED, total=Decimal("30.00"))
    make_order(status=Order.OrderStatus.CONFIRMED)
    make_order(status=Order.OrderStatus.REFUNDED)

    stats = OrderService.vendor_stats([shop.id])

    assert stats["total_orders"] == 3
    assert stats["pending_orders"] == 1
    assert stats["cancelled_orders"] == 1
    assert stats["total_revenue"] == Decimal("30.00")


class TestOrderEndpoints:

    def test_history_requires_login(self, api_client):
        assert api_client.get("/api/v1/store/orders/").status_code == 401

    def test_history_lists_own_orders(self, api_client, make_order, customer_user):
        make_order(user=customer_user)
        make_order()
        api_client.force_authenticate(customer_user)

        response = api_client.get("/api/v1/store/orders/")

        assert response.status_code == 200
        assert response.json()["count"] == 1

    def test_guest_lookup(self, api_client, make_order):
        order = make_order()
        response = api_client.get(f"/api/v1/store/orders/{order.order_number}/", {"payment_intent_id": "pi_123"})
        assert response.status_code == 200
        assert response.json()["id"] == str(order.id)

        response = api_client.get(f"/api/v1/store/orders/{order.order_number}/")
        assert response.status_code == 403

    def test_by_ids(self, api_client, make_order):
        order = make_order()
        response = api_client.post(
            "/api/v1/store/orders/by-ids/",
            {"order_ids": [str(order.id)], "payment_intent_id": "pi_123"},
            format="json",
        )
        assert response.status_code == 200
        assert [row["id"] for row in response.json()["orders"]] == [str(order.id)]

    def test_cancel_endpoint(self, api_client, make_order, customer_user, fake_gateway):
        order = make_order(user=customer_user)
        api_client.force_authenticate(customer_user)
        with patch("marketplace.services.order_service.get_gateway", return_value=fake_gateway):
            response = api_client.post(f"/api/v1/store/orders/{order.id}/cancel/", {"reason": "late"}, format="json")
        assert response.status_code == 200
        assert response.json()["message"] == "Order cancelled successfully"

    def test_confirm_payment_endpoint(self, api_client, make_order, fake_gateway):
        order = make_order()
        fake_gateway.retrieve_payment_intent.return_value = {"id": "pi_123", "status": "succeeded"}
        with patch("marketplace.services.order_service.get_gateway", return_value=fake_gateway):
            response = api_client.post(
                "/api/v1/store/checkout/confirm-payment/",
                {"payment_intent_id": "pi_123", "order_ids": [str(order.id)]},
                format="json",
            )
        assert response.status_code == 200
        order.refresh_from_db()
        assert order.is_paid


class TestVendorAndAdminOrders:

    def test_vendor_lists_shop_orders(self, api_client, make_order, vendor_user, other_shop):
        make_order()
        api_client.force_authenticate(vendor_user)

        response = api_client.get("/api/v1/vendor/shops/vera-goods/orders/")

        assert response.status_code == 200
        assert response.json()["count"] == 1
        assert api_client.get("/api/v1/vendor/shops/other-shop/orders/").status_code == 403

    def test_vendor_updates_status(self, api_client, make_order, vendor_user):
        order = make_order(status=Order.OrderStatus.CONFIRMED)
        api_client.force_authenticate(vendor_user)

        response = api_client.post(
            f"/api/v1/vendor/shops/vera-goods/orders/{order.id}/status/",
            {"status": "shipped"},
            format="json",
        )

        assert response.status_code == 200
        order.refresh_from_db()
        assert order.status == Order.OrderStatus.SHIPPED
        assert order.fulfillment_status == Order.FulfillmentStatus.PARTIAL

    def test_vendor_unknown_order(self, api_client, shop, vendor_user):
        api_client.force_authenticate(vendor_user)
        response = api_client.get("/api/v1/vendor/shops/vera-goods/orders/1f0c8a4e-3f0e-4b8e-9a55-2d9b1c1e0b11/")
        assert response.status_code == 404
        assert response.json()["detail"] == "Order not found"

    def test_admin_stats(self, api_client, make_order, admin_user):
        make_order(payment_status=Order.PaymentStatus.PAID)
        api_client.force_authenticate(admin_user)

        response = api_client.get("/api/v1/admin/orders/stats/")

        assert response.status_code == 200
        assert response.json()["total_orders"] == 1
        assert response.json()["paid_revenue"] == 26.0

    def test_customer_cannot_use_admin_orders(self, api_client, customer_user):
        api_client.force_authenticate(customer_user)
        assert api_client.get("/api/v1/admin/orders/").status_code == 403
