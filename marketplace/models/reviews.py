from django.conf import settings
from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models

from core.models import BaseModel

from .catalog import Product
from .orders import Order, OrderItem


class ProductReview(BaseModel):
    """
    A customer's review of a purchased product.

    Each order item can be reviewed once; only approved reviews count toward
    the product's rating.
    """

    class Status(models.TextChoices):
        PENDING = "pending", "Pending"
        APPROVED = "approved", "Approved"
        REJECTED = "rejected", "Rejected"

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="product_reviews",
    )
    product = models.ForeignKey(Product, on_delete=models.CASCADE, related_name="reviews")
    shop = models.ForeignKey("shops.Shop", on_delete=models.CASCADE, related_name="reviews")
    order = models.ForeignKey(
        Order,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="reviews",
    )
    order_item = models.OneToOneField(
        OrderItem,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="review",
    )
    rating = models.PositiveSmallIntegerField(
        validators=[MinValueValidator(1), MaxValueValidator(5)],
    )
    title = models.CharField(max_length=100)
    comment = models.TextField(max_length=1000)
    status = models.CharField(max_length=20, choices=Status.choices, default=Status.APPROVED)
    helpful_count = models.PositiveIntegerField(default=0)
    is_verified_purchase = models.BooleanField(default=False)
    vendor_response = models.TextField(blank=True)
    vendor_responded_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        verbose_name = "Product review"
        verbose_name_plural = "Product reviews"
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["product", "status"], name="mkt_review_product_status_idx"),
            models.Index(fields=["shop", "status"], name="mkt_review_shop_status_idx"),
            models.Index(fields=["rating"], name="mkt_review_rating_idx"),
        ]

    def __str__(self):
        return f"{self.rating}/5 for {self.product} by {self.user}"


class ReviewHelpfulVote(BaseModel):
    review = models.ForeignKey(ProductReview, on_delete=models.CASCADE, related_name="helpful_votes")
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="review_votes",
    )

    class Meta:
        verbose_name = "Helpful vote"
        verbose_name_plural = "Helpful votes"
        constraints = [
            models.UniqueConstraint(fields=["review", "user"], name="unique_helpful_vote"),
        ]
