from django.core.validators import MinLengthValidator
from django.db import models

from core.models import BaseModel
from core.utils import validate_non_negative_amount


class ShippingMethod(BaseModel):
    shop = models.ForeignKey("shops.Shop", on_delete=models.CASCADE, related_name="shipping_methods")
    name = models.CharField(max_length=100, validators=[MinLengthValidator(2)])
    description = models.TextField(blank=True)
    price = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        default=0,
        validators=[validate_non_negative_amount],
    )
    duration = models.CharField(max_length=50, help_text='e.g. "3-5 business days"')
    is_active = models.BooleanField(default=True)

    class Meta:
        verbose_name = "Shipping method"
        verbose_name_plural = "Shipping methods"
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["shop", "is_active"], name="shipping_shop_active_idx"),
        ]

    def __str__(self):
        return f"{self.name} ({self.shop})"


class ProductShippingMethod(BaseModel):
    """
    Restricts a product to specific shipping methods.

    A product without rows here can ship with any of its shop's methods.
    """
    product = models.ForeignKey(
        "marketplace.Product",
        on_delete=models.CASCADE,
        related_name="shipping_restrictions",
    )
    shipping_method = models.ForeignKey(
        ShippingMethod,
        on_delete=models.CASCADE,
        related_name="product_restrictions",
    )

    class Meta:
        verbose_name = "Product shipping method"
        verbose_name_plural = "Product shipping methods"
        constraints = [
            models.UniqueConstraint(
                fields=["product", "shipping_method"],
                name="unique_product_shipping_method",
            ),
        ]
