import logging

from django.conf import settings
from django.core.mail import send_mail
from django.db import IntegrityError, transaction
from django.template.loader import render_to_string
from django.utils import timezone

from notifications.models import EmailDelivery, VendorNotification

logger = logging.getLogger(__name__)


class VendorNotificationService:

    @staticmethod
    def create_order_notification(order):
        """
        Creates the "new order" notification for the order's shop.

        Idempotent per (shop, order): a second call returns the existing row.
        """
        existing = VendorNotification.objects.filter(
            shop_id=order.shop_id,
            type=VendorNotification.Type.NEW_ORDER,
            data__orderId=str(order.id),
        ).first()
        if existing:
            return existing

        item_count = order.items.count()
        return VendorNotification.objects.create(
            shop_id=order.shop_id,
            type=VendorNotification.Type.NEW_ORDER,
            title="New Order Received!",
            message=(
                f"{order.customer_name} placed an order for {item_count} item(s) - "
                f"${order.total_amount:.2f}"
            ),
            data={
                "orderId": str(order.id),
                "orderNumber": order.order_number,
                "amount": str(order.total_amount),
                "link": f"/shop/orders/{order.id}",
            },
        )

    @staticmethod
    def list_for_shop(shop, unread_only=False):
        queryset = VendorNotification.objects.filter(shop=shop)
        if unread_only:
            queryset = queryset.filter(is_read=False)
        return queryset

    @staticmethod
    def unread_count(shop):
        return VendorNotification.objects.filter(shop=shop, is_read=False).count()

    @staticmethod
    def mark_read(notification):
        if not notification.is_read:
            notification.is_read = True
            notification.read_at = timezone.now()
            notification.save(update_fields=["is_read", "read_at", "updated_at"])
        return notification

    @staticmethod
    def mark_all_read(shop):
        return VendorNotification.objects.filter(shop=shop, is_read=False).update(
            is_read=True,
            read_at=timezone.now(),
            updated_at=timezone.now(),
        )


class EmailDeliveryService:
    """
    Deduplicated transactional e-mail.

    A delivery already ``sent`` (or ``skipped``) is never sent again; a
    ``failed`` delivery is retried until ``MAX_ATTEMPTS``.
    """
    MAX_ATTEMPTS = 3

    @classmethod
    def claim(cls, *, dedupe_key, type, to_email, order=None, metadata=None):
        """
        Returns the delivery row to work on, or ``None`` when nothing should
        be sent for this key.
        """
        try:
            with transaction.atomic():
                delivery, _ = EmailDelivery.objects.get_or_create(
                    dedupe_key=dedupe_key,
                    defaults={
                        "type": type,
                        "to_email": to_email,
                        "order": order,
                        "metadata": metadata or {},
                    },
                )
        except IntegrityError:
            delivery = EmailDelivery.objects.get(dedupe_key=dedupe_key)

        if delivery.status in (EmailDelivery.Status.SENT, EmailDelivery.Status.SKIPPED):
            logger.info("Email %s already %s", dedupe_key, delivery.status)
            return None
        if delivery.status == EmailDelivery.Status.FAILED and delivery.attempts >= cls.MAX_ATTEMPTS:
            logger.warning("Email %s reached max delivery attempts", dedupe_key)
            return None
        return delivery

    @classmethod
    def deliver(cls, delivery, subject, template_name, context):
        """
        Renders ``<template_name>.txt`` / ``.html`` and sends them. Failures
        are logged and recorded on the delivery row, never raised.
        """
        delivery.attempts += 1
        delivery.last_attempt_at = timezone.now()
        try:
            text_body = render_to_string(f"{template_name}.txt", context)
            html_body = render_to_string(f"{template_name}.html", context)
            send_mail(
                subject,
                text_body,
                settings.DEFAULT_FROM_EMAIL,
                [delivery.to_email],
                html_message=html_body,
                fail_silently=False,
            )
        except Exception as exc:
            logger.exception("Failed to send %s email to %s", delivery.type, delivery.to_email)
            delivery.status = EmailDelivery.Status.FAILED
            delivery.last_error = str(exc)
            delivery.save(update_fields=["attempts", "last_attempt_at", "status", "last_error", "updated_at"])
            return False

        delivery.status = EmailDelivery.Status.SENT
        delivery.sent_at = timezone.now()
        delivery.last_error = ""
        delivery.save(
            update_fields=["attempts", "last_attempt_at", "status", "sent_at", "last_error", "updated_at"]
        )
        logger.info("Sent %s email for dedupe key %s", delivery.type, delivery.dedupe_key)
        return True

    @staticmethod
    def skip(delivery, reason):
        delivery.status = EmailDelivery.Status.SKIPPED
        delivery.last_error = reason
        delivery.save(update_fields=["status", "last_error", "updated_at"])
        return delivery
