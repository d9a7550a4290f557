"""
Order lifecycle: payment confirmation, customer access and cancellation,
vendor/admin status management and statistics.
"""
import logging
import uuid
from decimal import Decimal

from django.db import transaction
from django.db.models import Count, F, Q, Sum
from django.utils import timezone
from rest_framework.exceptions import NotFound, PermissionDenied

from core.exceptions import BusinessLogicError
from core.metrics import payment_confirmed_counter
from core.utils import ZERO, money
from coupons.services import CouponService
from notifications.services import VendorNotificationService
from notifications.tasks import send_order_confirmation_email, send_vendor_new_order_email
from payments.gateway import PaymentGatewayError, get_gateway
from payments.models import Payment
from shops.services import ShopAccessService
from ..models import Order, Product

logger = logging.getLogger(__name__)


def _is_authenticated(user):
    return user is not None and getattr(user, "is_authenticated", False)


def _parse_uuid(value):
    try:
        return uuid.UUID(str(value))
    except (TypeError, ValueError, AttributeError):
        return None


def _value(obj, name):
    if obj is None:
        return None
    if isinstance(obj, dict):
        return obj.get(name)
    return getattr(obj, name, None)


class OrderService:
    CANCELLABLE_STATUSES = {Order.OrderStatus.PENDING, Order.OrderStatus.CONFIRMED}

    FULFILLMENT_BY_STATUS = {
        Order.OrderStatus.SHIPPED: Order.FulfillmentStatus.PARTIAL,
        Order.OrderStatus.DELIVERED: Order.FulfillmentStatus.FULFILLED,
    }

    # ------------------------------------------------------------------
    # Payment confirmation
    # ------------------------------------------------------------------
    @classmethod
    def mark_orders_paid(cls, order_ids, payment_intent_id, source="api", gateway=None):
        """
        Marks the orders confirmed/paid and their payments succeeded, then
        notifies the vendors and queues the confirmation e-mails.

        Orders already paid, cancelled or refunded are left as they are, so
        replays are harmless and a cancellation made while a shared intent
        was still open stands. That order's share of the captured amount is
        refunded instead. Returns the orders that were confirmed by this call.
        """
        with transaction.atomic():
            orders = list(
                Order.objects.select_for_update()
                .filter(id__in=order_ids)
                .exclude(payment_status=Order.PaymentStatus.PAID)
                .exclude(status__in=[Order.OrderStatus.CANCELLED, Order.OrderStatus.REFUNDED])
            )
            ids = [order.id for order in orders]
            if ids:
                Order.objects.filter(id__in=ids).update(
                    status=Order.OrderStatus.CONFIRMED,
                    payment_status=Order.PaymentStatus.PAID,
                    updated_at=timezone.now(),
                )
                Payment.objects.filter(order_id__in=ids, status__in=Payment.OPEN_STATUSES).update(
                    status=Payment.PaymentStatus.SUCCEEDED,
                    transaction_id=payment_intent_id,
                    updated_at=timezone.now(),
                )

        cls._refund_cancelled_shares(payment_intent_id, gateway)
        if not ids:
            return []

        confirmed = list(
            Order.objects.select_related("user", "shop").prefetch_related("items").filter(id__in=ids)
        )
        for order in confirmed:
            payment_confirmed_counter.labels(source=source).inc()
            cls._notify_order_paid(order)
        logger.info("Confirmed %d order(s) for intent %s via %s", len(confirmed), payment_intent_id, source)
        return confirmed

    @staticmethod
    def _refund_cancelled_shares(payment_intent_id, gateway=None):
        """Refunds orders that were cancelled while their shared intent stayed open."""
        payments = list(
            Payment.objects.select_related("order").filter(
                stripe_payment_intent_id=payment_intent_id,
                status=Payment.PaymentStatus.CANCELLED,
                order__status=Order.OrderStatus.CANCELLED,
            )
        )
        if not payments:
            return
        gateway = gateway or get_gateway()
        for payment in payments:
            try:
                gateway.create_refund(payment_intent_id, amount=payment.amount)
            except PaymentGatewayError:
                # Left CANCELLED so the next confirmation of the intent retries it
                logger.exception(
                    "Refund of cancelled order %s on intent %s failed",
                    payment.order.order_number,
                    payment_intent_id,
                )
                continue
            payment.status = Payment.PaymentStatus.REFUNDED
            payment.save(update_fields=["status", "updated_at"])
            Order.objects.filter(id=payment.order_id).update(
                payment_status=Order.PaymentStatus.REFUNDED,
                updated_at=timezone.now(),
            )
            logger.info(
                "Refunded %s of intent %s for cancelled order %s",
                payment.amount,
                payment_intent_id,
                payment.order.order_number,
            )

    @staticmethod
    def _notify_order_paid(order):
        try:
            VendorNotificationService.create_order_notification(order)
        except Exception:
            logger.exception("Failed to create notification for order %s", order.order_number)
        try:
            send_order_confirmation_email.delay(str(order.id))
            send_vendor_new_order_email.delay(str(order.id))
        except Exception:
            logger.exception("Failed to queue emails for order %s", order.order_number)

    @classmethod
    def confirm_payment(cls, payment_intent_id, order_ids, gateway=None):
        gateway = gateway or get_gateway()
        try:
            intent = gateway.retrieve_payment_intent(payment_intent_id)
        except PaymentGatewayError as exc:
            if exc.stripe_code == "resource_missing":
                raise NotFound("Payment intent not found")
            raise
        if not intent:
            raise NotFound("Payment intent not found")

        intent_status = _value(intent, "status")
        if intent_status != "succeeded":
            raise BusinessLogicError(
                "Payment not completed",
                internal_code="PAYMENT_NOT_COMPLETED",
                extra={"payment_status": intent_status},
            )

        linked_ids = list(
            Payment.objects.filter(
                order_id__in=order_ids,
                stripe_payment_intent_id=payment_intent_id,
            ).values_list("order_id", flat=True)
        )
        cls.mark_orders_paid(linked_ids, payment_intent_id, source="api", gateway=gateway)
        return {"success": True, "message": "Payment confirmed successfully"}

    # ------------------------------------------------------------------
    # Customer access
    # ------------------------------------------------------------------
    @staticmethod
    def customer_orders(user, status=None):
        queryset = Order.objects.filter(user=user).select_related("shop").prefetch_related("items")
        if status:
            queryset = queryset.filter(status=status)
        return queryset

    @staticmethod
    def _intent_matches(order, payment_intent_id):
        if not payment_intent_id:
            return False
        return Payment.objects.filter(order=order, stripe_payment_intent_id=payment_intent_id).exists()

    @classmethod
    def get_order(cls, identifier, user=None, payment_intent_id=None):
        """Looks an order up by id or order number and checks the caller may see it."""
        queryset = Order.objects.select_related("shop", "user").prefetch_related("items")
        order_uuid = _parse_uuid(identifier)
        if order_uuid is not None:
            order = queryset.filter(id=order_uuid).first()
        else:
            order = queryset.filter(order_number=str(identifier).upper()).first()
        if order is None:
            raise NotFound("Order not found")

        if ShopAccessService.is_admin(user):
            return order
        if order.user_id:
            if not _is_authenticated(user) or order.user_id != user.id:
                raise PermissionDenied("Unauthorized")
            return order
        if not cls._intent_matches(order, payment_intent_id):
            raise PermissionDenied("Unauthorized")
        return order

    @staticmethod
    def get_orders_by_ids(order_ids, user=None, payment_intent_id=None):
        orders = list(
            Order.objects.filter(id__in=order_ids)
            .select_related("shop")
            .prefetch_related("items")
        )
        if not orders:
            raise NotFound("Orders not found")

        if _is_authenticated(user):
            if not all(order.user_id == user.id for order in orders):
                raise PermissionDenied("Unauthorized")
            return orders

        if not payment_intent_id:
            raise PermissionDenied("Unauthorized")
        intents = list(
            Payment.objects.filter(order_id__in=[order.id for order in orders]).values_list(
                "order_id", "stripe_payment_intent_id"
            )
        )
        matching = {order_id for order_id, intent_id in intents if intent_id == payment_intent_id}
        if len(intents) != len(orders) or len(matching) != len(orders):
            raise PermissionDenied("Unauthorized access to orders")
        return orders

    # ------------------------------------------------------------------
    # Cancellation
    # ------------------------------------------------------------------
    @staticmethod
    def _restore_stock(order):
        for item in order.items.all():
            if item.product_id is None:
                continue
            Product.objects.filter(pk=item.product_id, stock__isnull=False).update(
                stock=F("stock") + item.quantity
            )

    @staticmethod
    def _append_note(order, note, admin=False):
        prefix = "[ADMIN] " if admin else ""
        stamp = timezone.now().isoformat()
        return f"{order.internal_notes or ''}\n{prefix}{stamp}: {note}"

    @classmethod
    def _release_pending_intent(cls, order, gateway):
        payment = order.payments.filter(status__in=Payment.OPEN_STATUSES).exclude(
            stripe_payment_intent_id=""
        ).first()
        if payment is None:
            return
        payment.status = Payment.PaymentStatus.CANCELLED
        payment.save(update_fields=["status", "updated_at"])

        intent_id = payment.stripe_payment_intent_id
        still_open = (
            Payment.objects.filter(stripe_payment_intent_id=intent_id, status__in=Payment.OPEN_STATUSES)
            .exclude(order=order)
            .exists()
        )
        if still_open:
            return
        try:
            gateway.cancel_payment_intent(intent_id)
        except PaymentGatewayError as exc:
            logger.warning("Could not cancel payment intent %s: %s", intent_id, exc)

    @classmethod
    @transaction.atomic
    def cancel_order(cls, order_id, user, reason="", gateway=None):
        order_uuid = _parse_uuid(order_id)
        order = None
        if order_uuid is not None:
            order = Order.objects.select_for_update().filter(id=order_uuid, user=user).first()
        if order is None:
            raise NotFound("Order not found")
        if order.status not in cls.CANCELLABLE_STATUSES:
            raise BusinessLogicError(
                "Order cannot be cancelled",
                internal_code="ORDER_NOT_CANCELLABLE",
                extra={"status": order.status},
            )

        if not order.is_paid:
            cls._release_pending_intent(order, gateway or get_gateway())

        note = f"Customer cancelled: {reason}" if reason else "Customer cancelled"
        order.status = Order.OrderStatus.CANCELLED
        order.internal_notes = cls._append_note(order, note)
        order.save(update_fields=["status", "internal_notes", "updated_at"])
        cls._restore_stock(order)
        CouponService.release_usage(order)
        logger.info("Order %s cancelled by customer %s", order.order_number, user.id)
        return {"success": True, "message": "Order cancelled successfully"}

    @staticmethod
    def get_order_payment_session(order_id, user=None):
        order_uuid = _parse_uuid(order_id)
        order = Order.objects.filter(id=order_uuid).first() if order_uuid else None
        if order is None:
            raise NotFound("Order not found")
        if order.user_id and (not _is_authenticated(user) or order.user_id != user.id):
            raise PermissionDenied("Unauthorized")
        if order.is_paid:
            raise BusinessLogicError("Payment already completed")

        payment = (
            order.payments.filter(status__in=Payment.OPEN_STATUSES)
            .exclude(stripe_client_secret="")
            .exclude(stripe_payment_intent_id="")
            .first()
        )
        if payment is None:
            raise BusinessLogicError("No pending payment found for this order")

        related = Payment.objects.filter(stripe_payment_intent_id=payment.stripe_payment_intent_id)
        return {
            "order_ids": [str(order_id) for order_id in related.values_list("order_id", flat=True)],
            "payment_intent_id": payment.stripe_payment_intent_id,
            "client_secret": payment.stripe_client_secret,
            "total_amount": money(related.aggregate(total=Sum("amount"))["total"] or ZERO),
        }

    # ------------------------------------------------------------------
    # Vendor / admin management
    # ------------------------------------------------------------------
    @staticmethod
    def shop_orders(shop_ids, status=None):
        queryset = (
            Order.objects.filter(shop_id__in=shop_ids)
            .select_related("shop", "user")
            .prefetch_related("items")
        )
        if status:
            queryset = queryset.filter(status=status)
        return queryset

    @classmethod
    def update_status(cls, order, status, note="", admin=False):
        order.status = status
        order.fulfillment_status = cls.FULFILLMENT_BY_STATUS.get(status, order.fulfillment_status)
        fields = ["status", "fulfillment_status", "updated_at"]
        if note:
            order.internal_notes = cls._append_note(order, note, admin=admin)
            fields.append("internal_notes")
        order.save(update_fields=fields)
        logger.info("Order %s status set to %s (admin=%s)", order.order_number, status, admin)
        return {"success": True, "message": f"Order status updated to {status}"}

    @classmethod
    @transaction.atomic
    def admin_cancel(cls, order, reason="", gateway=None):
        was_paid = order.is_paid
        if was_paid:
            payment = (
                order.payments.filter(status=Payment.PaymentStatus.SUCCEEDED)
                .exclude(stripe_payment_intent_id="")
                .first()
            )
            if payment is not None:
                gateway = gateway or get_gateway()
                try:
                    gateway.create_refund(payment.stripe_payment_intent_id, amount=payment.amount)
                except PaymentGatewayError:
                    logger.exception("Refund failed for order %s", order.order_number)
                    raise BusinessLogicError("Failed to process refund", internal_code="REFUND_FAILED")
                payment.status = Payment.PaymentStatus.REFUNDED
                payment.save(update_fields=["status", "updated_at"])
            order.status = Order.OrderStatus.REFUNDED
            order.payment_status = Order.PaymentStatus.REFUNDED
        else:
            cls._release_pending_intent(order, gateway or get_gateway())
            order.status = Order.OrderStatus.CANCELLED

        order.internal_notes = cls._append_note(
            order, f"Cancelled: {reason or 'No reason provided'}", admin=True
        )
        order.save(update_fields=["status", "payment_status", "internal_notes", "updated_at"])
        cls._restore_stock(order)
        CouponService.release_usage(order)
        return {
            "success": True,
            "message": (
                "Order refunded and cancelled successfully" if was_paid else "Order cancelled successfully"
            ),
        }

    @staticmethod
    def _status_breakdown(queryset):
        stats = {
            "total_orders": 0,
            "pending_orders": 0,
            "processing_orders": 0,
            "shipped_orders": 0,
            "delivered_orders": 0,
            "cancelled_orders": 0,
            "total_revenue": ZERO,
        }
        rows = queryset.order_by().values("status").annotate(count=Count("id"), revenue=Sum("total_amount"))
        for row in rows:
            count = row["count"]
            stats["total_orders"] += count
            status = row["status"]
            if status in (Order.OrderStatus.PENDING, Order.OrderStatus.CONFIRMED):
                stats["pending_orders"] += count
            elif status == Order.OrderStatus.PROCESSING:
                stats["processing_orders"] += count
            elif status == Order.OrderStatus.SHIPPED:
                stats["shipped_orders"] += count
            elif status == Order.OrderStatus.DELIVERED:
                stats["delivered_orders"] += count
                stats["total_revenue"] += row["revenue"] or Decimal("0")
            elif status in (Order.OrderStatus.CANCELLED, Order.OrderStatus.REFUNDED):
                stats["cancelled_orders"] += count
        stats["total_revenue"] = money(stats["total_revenue"])
        return stats

    @classmethod
    def vendor_stats(cls, shop_ids):
        return cls._status_breakdown(Order.objects.filter(shop_id__in=shop_ids))

    @classmethod
    def admin_stats(cls):
        stats = cls._status_breakdown(Order.objects.all())
        paid = Order.objects.filter(payment_status=Order.PaymentStatus.PAID)
        stats["paid_revenue"] = money(paid.aggregate(total=Sum("total_amount"))["total"])
        start_of_day = timezone.localtime().replace(hour=0, minute=0, second=0, microsecond=0)
        today = Order.objects.filter(created_at__gte=start_of_day).aggregate(
            count=Count("id"),
            revenue=Sum("total_amount"),
        )
        stats["today_orders"] = today["count"] or 0
        stats["today_revenue"] = money(today["revenue"])
        return stats

    @staticmethod
    def admin_orders(status=None, shop_id=None, search=None):
        queryset = Order.objects.select_related("shop", "user").prefetch_related("items")
        if status:
            queryset = queryset.filter(status=status)
        if shop_id:
            queryset = queryset.filter(shop_id=shop_id)
        if search:
            queryset = queryset.filter(
                Q(order_number__icontains=search)
                | Q(guest_email__icontains=search)
                | Q(user__email__icontains=search)
            )
        return queryset
