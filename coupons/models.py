from django.conf import settings
from django.db import models
from django.utils import timezone
from simple_history.models import HistoricalRecords

from core.models import BaseModel
from core.utils import validate_non_negative_amount


class Coupon(BaseModel):
    class Type(models.TextChoices):
        PERCENTAGE = "percentage", "Percentage"
        FIXED = "fixed", "Fixed amount"
        FREE_SHIPPING = "free_shipping", "Free shipping"

    class ApplicableTo(models.TextChoices):
        ALL = "all", "All products"
        SPECIFIC_PRODUCTS = "specific_products", "Specific products"
        SPECIFIC_CATEGORIES = "specific_categories", "Specific categories"

    shop = models.ForeignKey("shops.Shop", on_delete=models.CASCADE, related_name="coupons")
    code = models.CharField(max_length=50)
    description = models.CharField(max_length=255, blank=True)
    type = models.CharField(max_length=20, choices=Type.choices, default=Type.PERCENTAGE)
    discount_amount = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        validators=[validate_non_negative_amount],
        help_text="Percent for percentage coupons, currency amount for fixed ones.",
    )
    minimum_cart_amount = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        default=0,
        validators=[validate_non_negative_amount],
    )
    maximum_discount_amount = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        null=True,
        blank=True,
        validators=[validate_non_negative_amount],
    )
    usage_limit = models.PositiveIntegerField(null=True, blank=True)
    usage_limit_per_user = models.PositiveIntegerField(null=True, blank=True)
    usage_count = models.PositiveIntegerField(default=0)
    active_from = models.DateTimeField(default=timezone.now)
    active_to = models.DateTimeField(null=True, blank=True)
    is_active = models.BooleanField(default=True)
    applicable_to = models.CharField(
        max_length=30,
        choices=ApplicableTo.choices,
        default=ApplicableTo.ALL,
    )
    products = models.ManyToManyField(
        "marketplace.Product",
        through="CouponProduct",
        blank=True,
        related_name="coupons",
    )
    categories = models.ManyToManyField(
        "marketplace.Category",
        through="CouponCategory",
        blank=True,
        related_name="coupons",
    )

    history = HistoricalRecords()

    class Meta:
        verbose_name = "Coupon"
        verbose_name_plural = "Coupons"
        ordering = ["-created_at"]
        constraints = [
            models.UniqueConstraint(fields=["shop", "code"], name="unique_coupon_code_per_shop"),
        ]

    def save(self, *args, **kwargs):
        self.code = (self.code or "").strip().upper()
        super().save(*args, **kwargs)

    def __str__(self):
        return self.code


class CouponProduct(models.Model):
    coupon = models.ForeignKey(Coupon, on_delete=models.CASCADE)
    product = models.ForeignKey("marketplace.Product", on_delete=models.CASCADE)

    class Meta:
        constraints = [
            models.UniqueConstraint(fields=["coupon", "product"], name="unique_coupon_product"),
        ]


class CouponCategory(models.Model):
    coupon = models.ForeignKey(Coupon, on_delete=models.CASCADE)
    category = models.ForeignKey("marketplace.Category", on_delete=models.CASCADE)

    class Meta:
        constraints = [
            models.UniqueConstraint(fields=["coupon", "category"], name="unique_coupon_category"),
        ]


class CouponUsage(BaseModel):
    coupon = models.ForeignKey(Coupon, on_delete=models.CASCADE, related_name="usages")
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="coupon_usages",
    )
    order = models.ForeignKey(
        "marketplace.Order",
        on_delete=models.CASCADE,
        related_name="coupon_usages",
    )
    discount_amount = models.DecimalField(max_digits=12, decimal_places=2, default=0)

    class Meta:
        verbose_name = "Coupon usage"
        verbose_name_plural = "Coupon usages"
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["coupon", "user"], name="coupons_usage_coupon_user_idx"),
        ]
