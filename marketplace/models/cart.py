from django.conf import settings
from django.core.validators import MinValueValidator
from django.db import models

from core.models import BaseModel

from .catalog import Product


class Cart(BaseModel):
    """A user's cart, or a guest cart identified by ``session_id``."""
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        null=True,
        blank=True,
        related_name="carts",
    )
    session_id = models.CharField(max_length=100, blank=True, db_index=True)

    class Meta:
        verbose_name = "Cart"
        verbose_name_plural = "Carts"
        constraints = [
            models.UniqueConstraint(
                fields=["user"],
                condition=models.Q(user__isnull=False),
                name="unique_cart_per_user",
            ),
        ]

    def __str__(self):
        if self.user_id:
            return f"Cart of {self.user.email}"
        return f"Guest cart {self.session_id}"


class CartItem(BaseModel):
    cart = models.ForeignKey(Cart, on_delete=models.CASCADE, related_name="items")
    product = models.ForeignKey(Product, on_delete=models.CASCADE, related_name="cart_items")
    quantity = models.PositiveIntegerField(default=1, validators=[MinValueValidator(1)])
    variant_options = models.JSONField(default=dict, blank=True)

    class Meta:
        verbose_name = "Cart item"
        verbose_name_plural = "Cart items"
        ordering = ["created_at"]
        constraints = [
            models.UniqueConstraint(fields=["cart", "product"], name="unique_product_in_cart"),
        ]

    def __str__(self):
        return f"{self.quantity}x {self.product}"
