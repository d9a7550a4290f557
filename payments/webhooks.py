"""
Processing of verified Stripe webhook events.

Each event is recorded as a ``WebhookEvent`` row; handlers for
``account.updated``, ``payment_intent.succeeded`` and
``payment_intent.payment_failed`` keep vendors and orders in sync with
Stripe. Other event types are acknowledged and ignored, as are redeliveries
of an event id that was already processed.
"""
import logging
import uuid

from django.db import transaction
from django.utils import timezone

from core.metrics import webhook_event_counter
from marketplace.models import Order
from marketplace.services import OrderService
from payments.models import Payment, WebhookEvent
from payments.services import ConnectService

logger = logging.getLogger(__name__)

DUPLICATE_EVENT = "Duplicate event."


def _value(obj, name):
    if obj is None:
        return None
    if isinstance(obj, dict):
        return obj.get(name)
    return getattr(obj, name, None)


def _parse_uuid(value):
    try:
        return uuid.UUID(value.strip())
    except (AttributeError, ValueError):
        return None


class StripeWebhookService:

    def __init__(self, event, gateway=None):
        self.event = event
        self.gateway = gateway
        self.event_id = _value(event, "id") or ""
        self.event_type = _value(event, "type") or ""
        self.data_object = _value(_value(event, "data"), "object") or {}
        self.is_duplicate = bool(self.event_id) and WebhookEvent.objects.filter(
            stripe_event_id=self.event_id,
            status=WebhookEvent.Status.PROCESSED,
        ).exists()
        self.event_record = WebhookEvent.objects.create(
            stripe_event_id=self.event_id,
            event_type=self.event_type,
            payload=event if isinstance(event, dict) else {},
            status=WebhookEvent.Status.PROCESSED,
        )

    def _update_event_status(self, status, error_message=""):
        self.event_record.status = status
        self.event_record.error_message = error_message
        self.event_record.save(update_fields=["status", "error_message", "updated_at"])
        webhook_event_counter.labels(event_type=self.event_type or "unknown", outcome=status).inc()

    def process(self):
        if self.is_duplicate:
            logger.info("Stripe event %s already processed, skipping", self.event_id)
            self._update_event_status(WebhookEvent.Status.IGNORED, DUPLICATE_EVENT)
            return {"handled": False, "duplicate": True}

        handler = {
            "account.updated": self._handle_account_updated,
            "payment_intent.succeeded": self._handle_payment_intent_succeeded,
            "payment_intent.payment_failed": self._handle_payment_intent_failed,
        }.get(self.event_type)

        if handler is None:
            logger.info("Unhandled Stripe event type %s", self.event_type)
            self._update_event_status(WebhookEvent.Status.IGNORED, "Unhandled event type.")
            return {"handled": False}

        try:
            result = handler()
        except Exception as exc:
            self._update_event_status(WebhookEvent.Status.FAILED, str(exc))
            raise
        self._update_event_status(WebhookEvent.Status.PROCESSED)
        return result

    def _handle_account_updated(self):
        updated = ConnectService.sync_from_account_event(self.data_object)
        return {"handled": True, "vendors_updated": updated}

    def _order_ids_for_intent(self, intent_id):
        metadata = _value(self.data_object, "metadata") or {}
        raw_ids = _value(metadata, "orderIds") or ""
        order_ids = [order_id for order_id in map(_parse_uuid, str(raw_ids).split(",")) if order_id]
        if order_ids:
            return order_ids
        return [
            str(order_id)
            for order_id in Payment.objects.filter(stripe_payment_intent_id=intent_id).values_list(
                "order_id", flat=True
            )
        ]

    def _handle_payment_intent_succeeded(self):
        intent_id = _value(self.data_object, "id")
        order_ids = self._order_ids_for_intent(intent_id)
        if not order_ids:
            logger.warning("No orders linked to payment intent %s", intent_id)
            return {"handled": True, "orders_confirmed": 0}

        confirmed = OrderService.mark_orders_paid(order_ids, intent_id, source="webhook", gateway=self.gateway)
        return {"handled": True, "orders_confirmed": len(confirmed)}

    @transaction.atomic
    def _handle_payment_intent_failed(self):
        """
        Marks the intent's open payments failed. The orders stay pending so
        the customer can retry with the same client secret.
        """
        intent_id = _value(self.data_object, "id")
        last_error = _value(self.data_object, "last_payment_error") or {}
        failure_message = _value(last_error, "message") or ""

        payments = Payment.objects.filter(
            stripe_payment_intent_id=intent_id,
            status=Payment.PaymentStatus.PENDING,
        )
        order_ids = list(payments.values_list("order_id", flat=True))
        failed = payments.update(status=Payment.PaymentStatus.FAILED, updated_at=timezone.now())
        Order.objects.filter(id__in=order_ids, payment_status=Order.PaymentStatus.PENDING).update(
            payment_status=Order.PaymentStatus.FAILED,
            updated_at=timezone.now(),
        )
        logger.warning(
            "Payment intent %s failed for %d payment(s): %s",
            intent_id,
            failed,
            failure_message or "no reason given",
        )
        return {"handled": True, "payments_failed": failed}
