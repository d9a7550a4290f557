import logging

from celery import shared_task
from django.conf import settings

from notifications.models import EmailDelivery
from notifications.services import EmailDeliveryService

logger = logging.getLogger(__name__)


def _load_order(order_id):
    from marketplace.models import Order

    return (
        Order.objects.select_related("user", "shop", "shop__vendor", "shop__vendor__user")
        .prefetch_related("items")
        .filter(id=order_id)
        .first()
    )


def _order_context(order):
    return {
        "order": order,
        "items": list(order.items.all()),
        "customer_name": order.customer_name,
        "customer_email": order.customer_email or "N/A",
        "shipping_address": order.shipping_address or {},
        "shop_name": order.shop.name if order.shop_id else "Your Shop",
        "site_url": settings.SITE_URL,
    }


@shared_task(bind=True, autoretry_for=(Exception,), retry_backoff=True, retry_kwargs={"max_retries": 3})
def send_order_confirmation_email(self, order_id):
    order = _load_order(order_id)
    if order is None:
        return "order_not_found"

    to_email = order.customer_email
    if not to_email:
        logger.warning("Order %s has no customer email, confirmation not sent", order.order_number)
        return "no_email"

    delivery = EmailDeliveryService.claim(
        dedupe_key=f"order_confirmation:{order.id}",
        type=EmailDelivery.Type.ORDER_CONFIRMATION,
        to_email=to_email,
        order=order,
        metadata={"shopId": str(order.shop_id)},
    )
    if delivery is None:
        return "already_sent"

    context = _order_context(order)
    context["order_link"] = f"{settings.SITE_URL}/account/orders/{order.id}"
    sent = EmailDeliveryService.deliver(
        delivery,
        f"Order Confirmation - {order.order_number}",
        "notifications/emails/order_confirmation",
        context,
    )
    return "sent" if sent else "failed"


@shared_task(bind=True, autoretry_for=(Exception,), retry_backoff=True, retry_kwargs={"max_retries": 3})
def send_vendor_new_order_email(self, order_id):
    order = _load_order(order_id)
    if order is None:
        return "order_not_found"

    shop = order.shop
    if not shop.enable_notifications:
        return "disabled"
    to_email = shop.notification_email
    if not to_email:
        return "no_email"

    delivery = EmailDeliveryService.claim(
        dedupe_key=f"vendor_new_order:{order.id}",
        type=EmailDelivery.Type.VENDOR_NEW_ORDER,
        to_email=to_email,
        order=order,
        metadata={"shopId": str(shop.id)},
    )
    if delivery is None:
        return "already_sent"

    context = _order_context(order)
    context["dashboard_link"] = f"{settings.SITE_URL}/shop/{shop.slug}/orders/{order.id}"
    sent = EmailDeliveryService.deliver(
        delivery,
        f"New Order {order.order_number} - ${order.total_amount:.2f}",
        "notifications/emails/vendor_new_order",
        context,
    )
    return "sent" if sent else "failed"
