from django.db import models

from core.models import BaseModel


class Payment(BaseModel):
    """One payment attempt for one order. Orders of a multi-shop checkout share an intent."""

    class PaymentStatus(models.TextChoices):
        PENDING = "pending", "Pending"
        PROCESSING = "processing", "Processing"
        SUCCEEDED = "succeeded", "Succeeded"
        FAILED = "failed", "Failed"
        CANCELLED = "cancelled", "Cancelled"
        REFUNDED = "refunded", "Refunded"

    # A failed attempt leaves the intent open for another try
    OPEN_STATUSES = (PaymentStatus.PENDING, PaymentStatus.FAILED)

    class PaymentMethod(models.TextChoices):
        CARD = "card", "Card"
        BANK_TRANSFER = "bank_transfer", "Bank transfer"
        CASH_ON_DELIVERY = "cash_on_delivery", "Cash on delivery"

    class Provider(models.TextChoices):
        STRIPE = "stripe", "Stripe"
        MANUAL = "manual", "Manual"

    order = models.ForeignKey(
        "marketplace.Order",
        on_delete=models.CASCADE,
        related_name="payments",
    )
    payment_method = models.CharField(
        max_length=20,
        choices=PaymentMethod.choices,
        default=PaymentMethod.CARD,
    )
    provider = models.CharField(max_length=20, choices=Provider.choices, default=Provider.STRIPE)
    amount = models.DecimalField(max_digits=12, decimal_places=2)
    currency = models.CharField(max_length=3, default="USD")
    status = models.CharField(
        max_length=20,
        choices=PaymentStatus.choices,
        default=PaymentStatus.PENDING,
    )
    stripe_payment_intent_id = models.CharField(max_length=255, blank=True)
    stripe_client_secret = models.CharField(max_length=255, blank=True)
    transaction_id = models.CharField(max_length=255, blank=True)
    stripe_transfer_id = models.CharField(max_length=255, blank=True)
    application_fee_amount = models.DecimalField(max_digits=12, decimal_places=2, default=0)
    connected_account_id = models.CharField(max_length=255, blank=True)
    raw_response = models.JSONField(default=dict, blank=True)
    metadata = models.JSONField(default=dict, blank=True)

    class Meta:
        verbose_name = "Payment"
        verbose_name_plural = "Payments"
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["stripe_payment_intent_id"], name="payments_intent_idx"),
            models.Index(fields=["status"], name="payments_status_idx"),
        ]

    def __str__(self):
        return f"Payment {self.id} - {self.amount} {self.currency} ({self.status})"

    @property
    def vendor_amount(self):
        return self.amount - (self.application_fee_amount or 0)


class WebhookEvent(BaseModel):
    """Stripe webhook events received, for auditing."""

    class Status(models.TextChoices):
        PROCESSED = "processed", "Processed"
        FAILED = "failed", "Failed"
        IGNORED = "ignored", "Ignored"

    stripe_event_id = models.CharField(max_length=255, blank=True, db_index=True)
    event_type = models.CharField(max_length=100, blank=True)
    payload = models.JSONField(default=dict)
    status = models.CharField(max_length=20, choices=Status.choices, default=Status.PROCESSED)
    error_message = models.TextField(blank=True, default="")

    class Meta:
        verbose_name = "Webhook event"
        verbose_name_plural = "Webhook events"
        ordering = ["-created_at"]

    def __str__(self):
        return f"WebhookEvent {self.stripe_event_id} - {self.event_type} - {self.status}"
