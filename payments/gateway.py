"""
Stripe client wrapper.

Wraps the Stripe SDK calls the marketplace needs (payment intents,
destination charges, refunds, invoices, Connect accounts and webhook
verification) behind a cache-backed circuit breaker. SDK errors are logged
and re-raised as :class:`PaymentGatewayError`.
"""
import json
import logging
from datetime import timedelta

import stripe
from django.conf import settings
from django.core.cache import cache
from django.utils import timezone

from core.exceptions import ServiceUnavailableError
from core.utils import to_cents

logger = logging.getLogger(__name__)

STRIPE_NOT_CONFIGURED = "Stripe is not configured"


class PaymentGatewayError(ServiceUnavailableError):
    """A Stripe call failed. ``stripe_code`` carries Stripe's error code when present."""

    default_detail = "The payment provider could not process the request."
    default_code = "PAYMENT_GATEWAY_ERROR"

    def __init__(self, detail=None, *, stripe_code=None, http_status=None):
        super().__init__(detail)
        self.stripe_code = stripe_code
        self.http_status = http_status


class StripeNotConfigured(ServiceUnavailableError):
    default_detail = STRIPE_NOT_CONFIGURED
    default_code = "STRIPE_NOT_CONFIGURED"


class StripeGateway:
    """
    Thin Stripe client. The API key is passed per request so the module-level
    ``stripe.api_key`` is never mutated.
    """

    _CIRCUIT_CACHE_KEY = "stripe:circuit"
    MAX_FAILURES = 5
    COOLDOWN_SECONDS = 60

    def __init__(self, api_key=None, webhook_secret=None):
        self.api_key = api_key if api_key is not None else getattr(settings, "STRIPE_SECRET_KEY", "")
        self.webhook_secret = (
            webhook_secret if webhook_secret is not None else getattr(settings, "STRIPE_WEBHOOK_SECRET", "")
        )
        self.api_version = getattr(settings, "STRIPE_API_VERSION", None) or None

    # ------------------------------------------------------------------
    # Circuit breaker
    # ------------------------------------------------------------------
    @classmethod
    def _circuit_allows(cls):
        state = cache.get(cls._CIRCUIT_CACHE_KEY, {"failures": 0, "open_until": None})
        open_until = state.get("open_until")
        if open_until and open_until > timezone.now():
            return False
        return True

    @classmethod
    def _record_failure(cls):
        state = cache.get(cls._CIRCUIT_CACHE_KEY, {"failures": 0, "open_until": None})
        failures = state.get("failures", 0) + 1
        open_until = state.get("open_until")
        if failures >= cls.MAX_FAILURES:
            open_until = timezone.now() + timedelta(seconds=cls.COOLDOWN_SECONDS)
            failures = 0
            logger.error("Stripe circuit opened for %s seconds", cls.COOLDOWN_SECONDS)
        cache.set(
            cls._CIRCUIT_CACHE_KEY,
            {"failures": failures, "open_until": open_until},
            timeout=cls.COOLDOWN_SECONDS,
        )

    @classmethod
    def _record_success(cls):
        cache.set(cls._CIRCUIT_CACHE_KEY, {"failures": 0, "open_until": None}, timeout=cls.COOLDOWN_SECONDS)

    # ------------------------------------------------------------------
    # Plumbing
    # ------------------------------------------------------------------
    def is_configured(self):
        return bool(self.api_key)

    def _ensure_configured(self):
        if not self.is_configured():
            raise StripeNotConfigured()

    def _request_options(self):
        options = {"api_key": self.api_key}
        if self.api_version:
            options["stripe_version"] = self.api_version
        return options

    def _call(self, operation, func, *args, **params):
        self._ensure_configured()
        if not self._circuit_allows():
            raise PaymentGatewayError("The payment provider is temporarily unavailable.")
        try:
            result = func(*args, **params, **self._request_options())
        except (stripe.InvalidRequestError, stripe.CardError) as exc:
            # Request-level rejections do not indicate an outage.
            logger.warning(
                "Stripe rejected %s: code=%s message=%s",
                operation,
                getattr(exc, "code", None),
                getattr(exc, "user_message", None) or str(exc),
            )
            raise PaymentGatewayError(
                getattr(exc, "user_message", None) or str(exc),
                stripe_code=getattr(exc, "code", None),
                http_status=getattr(exc, "http_status", None),
            ) from exc
        except stripe.StripeError as exc:
            self._record_failure()
            logger.error("Stripe %s failed: %s", operation, exc)
            raise PaymentGatewayError(
                stripe_code=getattr(exc, "code", None),
                http_status=getattr(exc, "http_status", None),
            ) from exc
        self._record_success()
        return result

    # ------------------------------------------------------------------
    # Payment intents
    # ------------------------------------------------------------------
    def create_payment_intent(self, amount, currency="usd", metadata=None):
        """``amount`` is a Decimal in currency units; Stripe receives cents."""
        intent = self._call(
            "create_payment_intent",
            stripe.PaymentIntent.create,
            amount=to_cents(amount),
            currency=currency.lower(),
            automatic_payment_methods={"enabled": True},
            metadata=metadata or {},
        )
        return {"client_secret": intent.client_secret, "payment_intent_id": intent.id}

    def create_destination_charge(self, amount, currency, connected_account_id, application_fee_amount, metadata=None):
        intent = self._call(
            "create_destination_charge",
            stripe.PaymentIntent.create,
            amount=to_cents(amount),
            currency=currency.lower(),
            automatic_payment_methods={"enabled": True},
            transfer_data={"destination": connected_account_id},
            application_fee_amount=to_cents(application_fee_amount),
            metadata=metadata or {},
        )
        return {"client_secret": intent.client_secret, "payment_intent_id": intent.id}

    def retrieve_payment_intent(self, payment_intent_id, expand=None):
        params = {"expand": expand} if expand else {}
        return self._call("retrieve_payment_intent", stripe.PaymentIntent.retrieve, payment_intent_id, **params)

    def cancel_payment_intent(self, payment_intent_id):
        return self._call("cancel_payment_intent", stripe.PaymentIntent.cancel, payment_intent_id)

    def create_refund(self, payment_intent_id, amount=None):
        params = {"payment_intent": payment_intent_id}
        if amount is not None:
            params["amount"] = to_cents(amount)
        return self._call("create_refund", stripe.Refund.create, **params)

    def retrieve_invoice(self, invoice_id):
        return self._call("retrieve_invoice", stripe.Invoice.retrieve, invoice_id)

    # ------------------------------------------------------------------
    # Connect
    # ------------------------------------------------------------------
    def create_connected_account(self, email, business_name=None, metadata=None):
        params = {
            "type": "express",
            "email": email,
            "metadata": metadata or {},
            "capabilities": {
                "card_payments": {"requested": True},
                "transfers": {"requested": True},
            },
        }
        if business_name:
            params["business_profile"] = {"name": business_name}
        return self._call("create_connected_account", stripe.Account.create, **params)

    def create_account_link(self, account_id, refresh_url, return_url):
        link = self._call(
            "create_account_link",
            stripe.AccountLink.create,
            account=account_id,
            refresh_url=refresh_url,
            return_url=return_url,
            type="account_onboarding",
        )
        return link.url

    def get_account_status(self, account_id):
        account = self._call("retrieve_account", stripe.Account.retrieve, account_id)
        requirements = getattr(account, "requirements", None)
        currently_due = getattr(requirements, "currently_due", None) or []
        return {
            "details_submitted": bool(getattr(account, "details_submitted", False)),
            "charges_enabled": bool(getattr(account, "charges_enabled", False)),
            "payouts_enabled": bool(getattr(account, "payouts_enabled", False)),
            "currently_due": list(currently_due),
        }

    def create_login_link(self, account_id):
        link = self._call("create_login_link", stripe.Account.create_login_link, account_id)
        return link.url

    def delete_connected_account(self, account_id):
        return self._call("delete_connected_account", stripe.Account.delete, account_id)

    # ------------------------------------------------------------------
    # Webhooks
    # ------------------------------------------------------------------
    def construct_webhook_event(self, payload, signature):
        """
        Verifies the Stripe-Signature header and returns the event as a dict.

        Raises ``stripe.SignatureVerificationError`` on a bad signature
        and ``ValueError`` on a malformed payload.
        """
        if isinstance(payload, bytes):
            payload = payload.decode("utf-8")
        stripe.WebhookSignature.verify_header(
            payload,
            signature,
            self.webhook_secret,
            stripe.Webhook.DEFAULT_TOLERANCE,
        )
        return json.loads(payload)


def get_gateway():
    return StripeGateway()
