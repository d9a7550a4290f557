from django.db import models

from core.models import BaseModel


class EmailDelivery(BaseModel):
    """
    One transactional e-mail, keyed by ``dedupe_key`` so a retried webhook or
    task never sends the same message twice.
    """

    class Type(models.TextChoices):
        ORDER_CONFIRMATION = "order_confirmation", "Order confirmation"
        VENDOR_NEW_ORDER = "vendor_new_order", "Vendor new order"

    class Status(models.TextChoices):
        PROCESSING = "processing", "Processing"
        SENT = "sent", "Sent"
        FAILED = "failed", "Failed"
        SKIPPED = "skipped", "Skipped"

    dedupe_key = models.CharField(max_length=255, unique=True)
    type = models.CharField(max_length=40, choices=Type.choices)
    to_email = models.EmailField(blank=True)
    order = models.ForeignKey(
        "marketplace.Order",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="email_deliveries",
    )
    status = models.CharField(max_length=20, choices=Status.choices, default=Status.PROCESSING)
    attempts = models.PositiveIntegerField(default=0)
    last_error = models.TextField(blank=True)
    last_attempt_at = models.DateTimeField(null=True, blank=True)
    sent_at = models.DateTimeField(null=True, blank=True)
    metadata = models.JSONField(default=dict, blank=True)

    class Meta:
        verbose_name = "Email delivery"
        verbose_name_plural = "Email deliveries"
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["type", "status"], name="notif_email_type_status_idx"),
        ]

    def __str__(self):
        return f"{self.type} -> {self.to_email} ({self.status})"


class VendorNotification(BaseModel):
    """In-platform notification shown on a shop's dashboard."""

    class Type(models.TextChoices):
        NEW_ORDER = "new_order", "New order"
        REVIEW = "review", "Review"
        SYSTEM = "system", "System"

    shop = models.ForeignKey(
        "shops.Shop",
        on_delete=models.CASCADE,
        related_name="notifications",
    )
    type = models.CharField(max_length=20, choices=Type.choices, default=Type.SYSTEM)
    title = models.CharField(max_length=255)
    message = models.TextField()
    data = models.JSONField(default=dict, blank=True)
    is_read = models.BooleanField(default=False)
    read_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        verbose_name = "Vendor notification"
        verbose_name_plural = "Vendor notifications"
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["shop", "is_read"], name="notif_vendor_shop_read_idx"),
        ]

    def __str__(self):
        return f"{self.shop_id} - {self.title}"
