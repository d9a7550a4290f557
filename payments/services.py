"""
Payment services: invoice/receipt resolution, transaction listings and
statistics, and Stripe Connect onboarding for vendors.
"""
import logging
import uuid
from datetime import timedelta
from decimal import Decimal

from django.conf import settings
from django.db.models import Count, Sum
from django.utils import timezone
from rest_framework.exceptions import NotFound, PermissionDenied

from core.exceptions import BusinessLogicError
from core.utils import ZERO, money
from marketplace.models import Order
from shops.models import Vendor
from shops.services import ShopAccessService
from .gateway import PaymentGatewayError, StripeNotConfigured, get_gateway
from .models import Payment

logger = logging.getLogger(__name__)


def _value(obj, name):
    """Reads ``name`` from a Stripe object, a dict or a plain object."""
    if obj is None or isinstance(obj, str):
        return None
    if isinstance(obj, dict):
        return obj.get(name)
    return getattr(obj, name, None)


def _parse_uuid(value):
    try:
        return uuid.UUID(str(value))
    except (TypeError, ValueError, AttributeError):
        return None


class InvoiceService:
    """
    Resolves the receipt or hosted invoice URL of an order's payment.

    Every permission check runs before the first gateway call.
    """

    @staticmethod
    def _check_access(order, payment, user, payment_intent_id):
        if user is not None and getattr(user, "is_authenticated", False):
            is_owner = order.user_id is not None and order.user_id == user.id
            is_guest_owner = bool(
                order.guest_email and user.email and order.guest_email.lower() == user.email.lower()
            )
            if not (is_owner or is_guest_owner or ShopAccessService.is_admin(user)):
                raise PermissionDenied("You do not have permission to view this invoice")
            return

        if (
            not payment_intent_id
            or order.user_id is not None
            or payment_intent_id != payment.stripe_payment_intent_id
        ):
            raise PermissionDenied("Unauthorized")

    @classmethod
    def get_invoice_url(cls, order_id, user=None, payment_intent_id=None, gateway=None):
        order_uuid = _parse_uuid(order_id)
        payment = None
        if order_uuid is not None:
            payment = Payment.objects.filter(order_id=order_uuid).order_by("-created_at").first()
        if payment is None or not payment.stripe_payment_intent_id:
            raise NotFound("No payment found for this order")

        order = Order.objects.filter(id=order_uuid).first()
        if order is None:
            raise NotFound("Order not found")

        cls._check_access(order, payment, user, payment_intent_id)

        gateway = gateway or get_gateway()
        if not gateway.is_configured():
            raise StripeNotConfigured()

        try:
            intent = gateway.retrieve_payment_intent(
                payment.stripe_payment_intent_id,
                expand=["latest_charge"],
            )
        except PaymentGatewayError as exc:
            if exc.stripe_code == "resource_missing":
                raise NotFound("Payment intent not found in Stripe")
            raise
        if not intent:
            raise NotFound("Payment intent not found in Stripe")

        receipt_url = _value(_value(intent, "latest_charge"), "receipt_url")
        if receipt_url:
            return {"url": receipt_url}

        invoice = _value(intent, "invoice")
        if invoice:
            if isinstance(invoice, str):
                invoice = gateway.retrieve_invoice(invoice)
            hosted_url = _value(invoice, "hosted_invoice_url")
            if hosted_url:
                return {"url": hosted_url}

        raise BusinessLogicError(
            "No invoice or receipt available for this order",
            internal_code="INVOICE_UNAVAILABLE",
        )


class TransactionService:
    STATS_WINDOW_DAYS = 30

    @staticmethod
    def base_queryset():
        return Payment.objects.select_related(
            "order",
            "order__user",
            "order__shop",
            "order__shop__vendor",
        )

    @classmethod
    def admin_queryset(cls, status=None, shop_id=None, vendor_id=None):
        queryset = cls.base_queryset()
        if status:
            queryset = queryset.filter(status=status)
        if shop_id:
            queryset = queryset.filter(order__shop_id=shop_id)
        if vendor_id:
            queryset = queryset.filter(order__shop__vendor_id=vendor_id)
        return queryset

    @classmethod
    def vendor_queryset(cls, shop_ids, status=None):
        queryset = cls.base_queryset().filter(order__shop_id__in=shop_ids)
        if status:
            queryset = queryset.filter(status=status)
        return queryset

    @staticmethod
    def _sums(queryset):
        totals = queryset.aggregate(amount=Sum("amount"), fees=Sum("application_fee_amount"))
        return money(totals["amount"] or ZERO), money(totals["fees"] or ZERO)

    @staticmethod
    def _status_counts(queryset):
        return {
            row["status"]: row["count"]
            for row in queryset.order_by().values("status").annotate(count=Count("id"))
        }

    @classmethod
    def _window_start(cls):
        return timezone.now() - timedelta(days=cls.STATS_WINDOW_DAYS)

    @classmethod
    def admin_stats(cls):
        recent = Payment.objects.filter(created_at__gte=cls._window_start())
        revenue, fees = cls._sums(recent.filter(status=Payment.PaymentStatus.SUCCEEDED))
        pending, _ = cls._sums(Payment.objects.filter(status=Payment.PaymentStatus.PENDING))
        counts = cls._status_counts(recent)
        return {
            "total_revenue": revenue,
            "platform_fees": fees,
            "vendor_payouts": money(revenue - fees),
            "pending_payments": pending,
            "total_transactions": sum(counts.values()),
            "successful_transactions": counts.get(Payment.PaymentStatus.SUCCEEDED, 0),
            "failed_transactions": counts.get(Payment.PaymentStatus.FAILED, 0),
            "refunded_transactions": counts.get(Payment.PaymentStatus.REFUNDED, 0),
        }

    @classmethod
    def vendor_stats(cls, shop_ids):
        if not shop_ids:
            return {
                "total_earnings": ZERO,
                "pending_earnings": ZERO,
                "platform_fees_paid": ZERO,
                "total_transactions": 0,
                "successful_transactions": 0,
                "pending_transactions": 0,
                "refunded_transactions": 0,
            }

        scoped = Payment.objects.filter(order__shop_id__in=shop_ids)
        recent = scoped.filter(created_at__gte=cls._window_start())
        revenue, fees = cls._sums(recent.filter(status=Payment.PaymentStatus.SUCCEEDED))
        pending_revenue, pending_fees = cls._sums(scoped.filter(status=Payment.PaymentStatus.PENDING))
        counts = cls._status_counts(recent)
        return {
            "total_earnings": money(revenue - fees),
            "pending_earnings": money(pending_revenue - pending_fees),
            "platform_fees_paid": fees,
            "total_transactions": sum(counts.values()),
            "successful_transactions": counts.get(Payment.PaymentStatus.SUCCEEDED, 0),
            "pending_transactions": counts.get(Payment.PaymentStatus.PENDING, 0),
            "refunded_transactions": counts.get(Payment.PaymentStatus.REFUNDED, 0),
        }


class ConnectService:
    """Stripe Connect (Express) onboarding for vendors."""

    @staticmethod
    def _onboarding_urls(shop_slug, return_path=None):
        path = (return_path or "settings").lstrip("/")
        separator = "&" if "?" in path else "?"
        base = f"{settings.SITE_URL.rstrip('/')}/shop/{shop_slug}/{path}{separator}stripe_onboarding="
        return base + "success", base + "refresh"

    @classmethod
    def start_onboarding(cls, shop, user, return_path=None, gateway=None):
        gateway = gateway or get_gateway()
        vendor = shop.vendor
        account_id = vendor.stripe_connected_account_id

        if not account_id:
            account = gateway.create_connected_account(
                vendor.contact_email or vendor.user.email or user.email,
                vendor.business_name or shop.name,
                {"vendorId": str(vendor.id), "shopSlug": shop.slug},
            )
            account_id = _value(account, "id")
            if not account_id:
                raise BusinessLogicError("Failed to create Stripe account")
            vendor.stripe_connected_account_id = account_id
            vendor.save(update_fields=["stripe_connected_account_id", "updated_at"])
            logger.info("Created Stripe connected account %s for vendor %s", account_id, vendor.id)

        return_url, refresh_url = cls._onboarding_urls(shop.slug, return_path)
        url = gateway.create_account_link(account_id, refresh_url, return_url)
        return {"url": url}

    @staticmethod
    def apply_account_flags(vendor, details_submitted, charges_enabled, payouts_enabled):
        vendor.stripe_onboarding_complete = bool(details_submitted)
        vendor.stripe_charges_enabled = bool(charges_enabled)
        vendor.stripe_payouts_enabled = bool(payouts_enabled)
        vendor.save(
            update_fields=[
                "stripe_onboarding_complete",
                "stripe_charges_enabled",
                "stripe_payouts_enabled",
                "updated_at",
            ]
        )
        return vendor

    @classmethod
    def sync_account_status(cls, vendor, gateway=None):
        """Refreshes the vendor's Connect flags from Stripe and returns the live status."""
        gateway = gateway or get_gateway()
        status = gateway.get_account_status(vendor.stripe_connected_account_id)
        cls.apply_account_flags(
            vendor,
            status["details_submitted"],
            status["charges_enabled"],
            status["payouts_enabled"],
        )
        return status

    @classmethod
    def sync_from_account_event(cls, account):
        """Applies an ``account.updated`` payload to every vendor using that account."""
        account_id = _value(account, "id")
        if not account_id:
            return 0
        updated = Vendor.objects.filter(stripe_connected_account_id=account_id).update(
            stripe_onboarding_complete=bool(_value(account, "details_submitted")),
            stripe_charges_enabled=bool(_value(account, "charges_enabled")),
            stripe_payouts_enabled=bool(_value(account, "payouts_enabled")),
            updated_at=timezone.now(),
        )
        logger.info("Updated vendor status for Stripe account %s (%d rows)", account_id, updated)
        return updated

    @classmethod
    def get_status(cls, vendor, gateway=None):
        if not vendor.stripe_connected_account_id:
            return {
                "is_connected": False,
                "onboarding_complete": False,
                "charges_enabled": False,
                "payouts_enabled": False,
                "account_id": None,
                "requires_action": False,
            }

        try:
            status = cls.sync_account_status(vendor, gateway=gateway)
        except PaymentGatewayError:
            logger.warning("Falling back to stored Stripe flags for vendor %s", vendor.id)
            return {
                "is_connected": True,
                "onboarding_complete": vendor.stripe_onboarding_complete,
                "charges_enabled": vendor.stripe_charges_enabled,
                "payouts_enabled": vendor.stripe_payouts_enabled,
                "account_id": vendor.stripe_connected_account_id,
                "requires_action": False,
            }

        return {
            "is_connected": True,
            "onboarding_complete": status["details_submitted"],
            "charges_enabled": status["charges_enabled"],
            "payouts_enabled": status["payouts_enabled"],
            "account_id": vendor.stripe_connected_account_id,
            "requires_action": not status["details_submitted"] or bool(status["currently_due"]),
        }

    @staticmethod
    def dashboard_link(vendor, gateway=None):
        if not vendor.stripe_connected_account_id:
            raise BusinessLogicError("No Stripe account connected")
        if not vendor.stripe_onboarding_complete:
            raise BusinessLogicError("Please complete Stripe onboarding first")
        gateway = gateway or get_gateway()
        return {"url": gateway.create_login_link(vendor.stripe_connected_account_id)}

    @staticmethod
    def disconnect(vendor, gateway=None):
        if not vendor.stripe_connected_account_id:
            raise BusinessLogicError("No Stripe account connected")
        gateway = gateway or get_gateway()
        account_id = vendor.stripe_connected_account_id
        gateway.delete_connected_account(account_id)
        vendor.stripe_connected_account_id = ""
        vendor.stripe_onboarding_complete = False
        vendor.stripe_charges_enabled = False
        vendor.stripe_payouts_enabled = False
        vendor.save(
            update_fields=[
                "stripe_connected_account_id",
                "stripe_onboarding_complete",
                "stripe_charges_enabled",
                "stripe_payouts_enabled",
                "updated_at",
            ]
        )
        logger.info("Disconnected Stripe account %s from vendor %s", account_id, vendor.id)
        return {"success": True}


def application_fee_for(total_amount, commission_rate):
    """Platform fee for a destination charge: ``total * commission / 100``, in cents precision."""
    return money(Decimal(total_amount) * Decimal(commission_rate) / Decimal("100"))
