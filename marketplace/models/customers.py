from django.conf import settings
from django.db import models

from core.models import BaseModel

from .catalog import Product


class WishlistItem(BaseModel):
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="wishlist_items",
    )
    product = models.ForeignKey(Product, on_delete=models.CASCADE, related_name="wishlist_items")

    class Meta:
        verbose_name = "Wishlist item"
        verbose_name_plural = "Wishlist items"
        ordering = ["-created_at"]
        constraints = [
            models.UniqueConstraint(fields=["user", "product"], name="unique_wishlist_product_per_user"),
        ]

    def __str__(self):
        return f"{self.product} in wishlist of {self.user}"


class CustomerAddress(BaseModel):
    """
    An address book entry. Each user has at most one default address per
    ``type``; the first address of a type becomes the default.
    """

    class AddressType(models.TextChoices):
        SHIPPING = "shipping", "Shipping"
        BILLING = "billing", "Billing"

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="addresses",
    )
    type = models.CharField(max_length=20, choices=AddressType.choices, default=AddressType.SHIPPING)
    title = models.CharField(max_length=100)
    first_name = models.CharField(max_length=100, blank=True)
    last_name = models.CharField(max_length=100, blank=True)
    phone = models.CharField(max_length=30, blank=True)
    street = models.CharField(max_length=255)
    city = models.CharField(max_length=100)
    state = models.CharField(max_length=100)
    zip = models.CharField(max_length=20)
    country = models.CharField(max_length=100)
    is_default = models.BooleanField(default=False)

    class Meta:
        verbose_name = "Customer address"
        verbose_name_plural = "Customer addresses"
        ordering = ["created_at"]
        indexes = [
            models.Index(fields=["user", "type"], name="mkt_address_user_type_idx"),
        ]

    def __str__(self):
        return f"{self.title} ({self.type}) of {self.user}"
