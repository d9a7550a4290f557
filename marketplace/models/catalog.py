from decimal import Decimal

from django.db import models

from core.models import BaseModel
from core.utils import validate_non_negative_amount


class Category(BaseModel):
    """Product category. ``shop`` is empty for platform-wide categories."""
    shop = models.ForeignKey(
        "shops.Shop",
        on_delete=models.CASCADE,
        null=True,
        blank=True,
        related_name="categories",
    )
    name = models.CharField(max_length=100, verbose_name="Name")
    slug = models.SlugField(max_length=120)
    description = models.TextField(blank=True)
    parent = models.ForeignKey(
        "self",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="children",
    )
    is_active = models.BooleanField(default=True)

    class Meta:
        verbose_name = "Category"
        verbose_name_plural = "Categories"
        ordering = ["name"]
        constraints = [
            models.UniqueConstraint(fields=["shop", "slug"], name="unique_category_slug_per_shop"),
        ]

    def __str__(self):
        return self.name


class Product(BaseModel):
    shop = models.ForeignKey("shops.Shop", on_delete=models.CASCADE, related_name="products")
    category = models.ForeignKey(
        Category,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="products",
    )
    tax_rate = models.ForeignKey(
        "taxes.TaxRate",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="products",
    )
    name = models.CharField(max_length=255, verbose_name="Name")
    slug = models.SlugField(max_length=255)
    sku = models.CharField(max_length=100, blank=True)
    description = models.TextField(blank=True)
    image_url = models.URLField(blank=True, max_length=500)
    selling_price = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        validators=[validate_non_negative_amount],
    )
    stock = models.PositiveIntegerField(
        null=True,
        blank=True,
        help_text="Empty means stock is not tracked.",
    )
    is_active = models.BooleanField(default=True)
    average_rating = models.DecimalField(max_digits=3, decimal_places=1, default=Decimal("0.0"))
    review_count = models.PositiveIntegerField(default=0)

    class Meta:
        verbose_name = "Product"
        verbose_name_plural = "Products"
        ordering = ["-created_at"]
        constraints = [
            models.UniqueConstraint(fields=["shop", "slug"], name="unique_product_slug_per_shop"),
        ]
        indexes = [
            models.Index(fields=["shop", "is_active"], name="mkt_product_shop_active_idx"),
        ]

    def __str__(self):
        return self.name

    @property
    def tracks_stock(self):
        return self.stock is not None
