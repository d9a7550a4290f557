"""
Product reviews: purchase eligibility, customer CRUD, helpful votes,
vendor responses and admin moderation.
"""
import logging
from datetime import timedelta
from decimal import ROUND_HALF_UP, Decimal

from django.db import transaction
from django.db.models import Avg, Count, F, Q
from django.db.models.functions import TruncDate
from django.utils import timezone
from rest_framework.exceptions import NotFound, PermissionDenied

from core.exceptions import BusinessLogicError, ResourceConflictError
from ..models import Order, OrderItem, Product, ProductReview, ReviewHelpfulVote

logger = logging.getLogger(__name__)

_ONE_DECIMAL = Decimal("0.1")


def _round_rating(value):
    if value is None:
        return Decimal("0.0")
    return Decimal(str(value)).quantize(_ONE_DECIMAL, rounding=ROUND_HALF_UP)


class ReviewService:
    SORTS = {
        "newest": ["-created_at"],
        "oldest": ["created_at"],
        "highest": ["-rating", "-created_at"],
        "lowest": ["rating", "-created_at"],
        "helpful": ["-helpful_count", "-created_at"],
    }

    # ------------------------------------------------------------------
    # Rating statistics
    # ------------------------------------------------------------------
    @staticmethod
    def rating_stats(queryset):
        """Average (1 decimal), total and a 5..1 breakdown of ``queryset``."""
        breakdown = {rating: 0 for rating in range(5, 0, -1)}
        total = 0
        weighted = 0
        for row in queryset.order_by().values("rating").annotate(count=Count("id")):
            breakdown[row["rating"]] = row["count"]
            total += row["count"]
            weighted += row["rating"] * row["count"]
        average = _round_rating(Decimal(weighted) / Decimal(total)) if total else Decimal("0.0")
        return {"average": average, "total": total, "breakdown": breakdown}

    @classmethod
    def product_rating_stats(cls, product_id):
        return cls.rating_stats(
            ProductReview.objects.filter(product_id=product_id, status=ProductReview.Status.APPROVED)
        )

    @classmethod
    def recalculate_product_rating(cls, product_id):
        stats = cls.product_rating_stats(product_id)
        Product.objects.filter(pk=product_id).update(
            average_rating=stats["average"],
            review_count=stats["total"],
        )
        return stats

    # ------------------------------------------------------------------
    # Customer operations
    # ------------------------------------------------------------------
    @staticmethod
    def check_eligibility(user, product_id):
        items = list(
            OrderItem.objects.filter(
                product_id=product_id,
                order__user=user,
                order__payment_status=Order.PaymentStatus.PAID,
            )
            .select_related("order")
            .order_by("-order__created_at")
        )
        if not items:
            return {"can_review": False, "eligible_order_items": [], "existing_reviews": []}

        existing = list(ProductReview.objects.filter(product_id=product_id, user=user))
        reviewed_item_ids = {review.order_item_id for review in existing}
        eligible = [
            {
                "order_item_id": item.id,
                "order_id": item.order_id,
                "order_number": item.order.order_number,
                "product_name": item.product_name,
                "purchase_date": item.order.created_at,
                "already_reviewed": item.id in reviewed_item_ids,
            }
            for item in items
        ]
        return {
            "can_review": any(not entry["already_reviewed"] for entry in eligible),
            "eligible_order_items": eligible,
            "existing_reviews": [
                {
                    "review_id": review.id,
                    "rating": review.rating,
                    "title": review.title,
                    "created_at": review.created_at,
                }
                for review in existing
            ],
        }

    @classmethod
    @transaction.atomic
    def create_review(cls, user, order_item_id, product_id, rating, title, comment):
        item = OrderItem.objects.select_related("order").filter(pk=order_item_id).first()
        if item is None:
            raise NotFound("Order item not found")
        order = item.order
        if order.user_id != user.id:
            raise PermissionDenied("You can only review products from your own orders")
        if order.payment_status != Order.PaymentStatus.PAID:
            raise BusinessLogicError("You can only review products from paid orders")
        if str(item.product_id) != str(product_id):
            raise BusinessLogicError("Product ID does not match the order item")
        if ProductReview.objects.filter(order_item=item).exists():
            raise ResourceConflictError("You have already reviewed this purchase")

        review = ProductReview.objects.create(
            user=user,
            product_id=item.product_id,
            shop_id=order.shop_id,
            order=order,
            order_item=item,
            rating=rating,
            title=title,
            comment=comment,
            is_verified_purchase=True,
        )
        cls.recalculate_product_rating(item.product_id)
        logger.info("Review %s created for product %s by %s", review.id, item.product_id, user.id)
        return review

    @staticmethod
    def _owned_review(review_id, user):
        review = ProductReview.objects.filter(pk=review_id).first()
        if review is None:
            raise NotFound("Review not found")
        if review.user_id != user.id:
            raise PermissionDenied("You can only modify your own reviews")
        return review

    @classmethod
    @transaction.atomic
    def update_review(cls, review_id, user, **changes):
        review = cls._owned_review(review_id, user)
        fields = []
        for name in ("rating", "title", "comment"):
            if changes.get(name) is not None:
                setattr(review, name, changes[name])
                fields.append(name)
        if fields:
            review.save(update_fields=fields + ["updated_at"])
            cls.recalculate_product_rating(review.product_id)
        return review

    @classmethod
    @transaction.atomic
    def delete_review(cls, review_id, user):
        review = cls._owned_review(review_id, user)
        product_id = review.product_id
        review.delete()
        cls.recalculate_product_rating(product_id)
        return {"success": True, "message": "Review deleted successfully"}

    @classmethod
    def product_reviews(cls, product_id, sort="newest"):
        ordering = cls.SORTS.get(sort or "newest", cls.SORTS["newest"])
        return (
            ProductReview.objects.filter(product_id=product_id, status=ProductReview.Status.APPROVED)
            .select_related("user")
            .order_by(*ordering)
        )

    @staticmethod
    @transaction.atomic
    def toggle_helpful(review_id, user):
        review = ProductReview.objects.select_for_update().filter(pk=review_id).first()
        if review is None:
            raise NotFound("Review not found")
        if review.user_id == user.id:
            raise BusinessLogicError("You can't vote on your own review")

        vote = ReviewHelpfulVote.objects.filter(review=review, user=user).first()
        if vote is not None:
            vote.delete()
            ProductReview.objects.filter(pk=review.pk, helpful_count__gt=0).update(
                helpful_count=F("helpful_count") - 1
            )
            return {"success": True, "voted": False, "message": "Vote removed"}

        ReviewHelpfulVote.objects.create(review=review, user=user)
        ProductReview.objects.filter(pk=review.pk).update(helpful_count=F("helpful_count") + 1)
        return {"success": True, "voted": True, "message": "Marked as helpful"}

    # ------------------------------------------------------------------
    # Vendor
    # ------------------------------------------------------------------
    @staticmethod
    def respond(review, response):
        review.vendor_response = response
        review.vendor_responded_at = timezone.now()
        review.save(update_fields=["vendor_response", "vendor_responded_at", "updated_at"])
        return review

    # ------------------------------------------------------------------
    # Admin
    # ------------------------------------------------------------------
    @staticmethod
    def admin_reviews(status=None, shop_id=None, rating=None, search=None):
        queryset = ProductReview.objects.select_related("user", "product", "shop")
        if status:
            queryset = queryset.filter(status=status)
        if shop_id:
            queryset = queryset.filter(shop_id=shop_id)
        if rating:
            queryset = queryset.filter(rating=rating)
        if search:
            queryset = queryset.filter(
                Q(title__icontains=search)
                | Q(comment__icontains=search)
                | Q(product__name__icontains=search)
                | Q(user__email__icontains=search)
            )
        return queryset

    @staticmethod
    def admin_stats():
        overall = ProductReview.objects.aggregate(total=Count("id"), average=Avg("rating"))
        by_status = dict(
            ProductReview.objects.order_by().values_list("status").annotate(count=Count("id"))
        )
        now = timezone.now()
        start_of_month = timezone.localtime(now).replace(day=1, hour=0, minute=0, second=0, microsecond=0)

        top_shops = (
            ProductReview.objects.filter(status=ProductReview.Status.APPROVED)
            .order_by()
            .values("shop_id", "shop__name")
            .annotate(average=Avg("rating"), review_count=Count("id"))
            .filter(review_count__gte=5)
            .order_by("-average")[:5]
        )
        recent = (
            ProductReview.objects.filter(created_at__gte=now - timedelta(days=7))
            .annotate(day=TruncDate("created_at"))
            .order_by()
            .values("day")
            .annotate(review_count=Count("id"))
            .order_by("day")
        )
        return {
            "total_reviews": overall["total"] or 0,
            "average_rating": _round_rating(overall["average"]),
            "pending_moderation": by_status.get(ProductReview.Status.PENDING, 0),
            "approved_reviews": by_status.get(ProductReview.Status.APPROVED, 0),
            "rejected_reviews": by_status.get(ProductReview.Status.REJECTED, 0),
            "reviews_this_month": ProductReview.objects.filter(created_at__gte=start_of_month).count(),
            "top_rated_shops": [
                {
                    "shop_id": row["shop_id"],
                    "shop_name": row["shop__name"],
                    "average_rating": _round_rating(row["average"]),
                    "review_count": row["review_count"],
                }
                for row in top_shops
            ],
            "recent_activity": [
                {"date": row["day"], "review_count": row["review_count"]} for row in recent
            ],
        }

    @classmethod
    @transaction.atomic
    def set_status(cls, review, status):
        review.status = status
        review.save(update_fields=["status", "updated_at"])
        cls.recalculate_product_rating(review.product_id)
        verb = {
            ProductReview.Status.APPROVED: "approved",
            ProductReview.Status.REJECTED: "rejected",
        }.get(status, "updated")
        return {"success": True, "message": f"Review {verb} successfully"}

    @classmethod
    @transaction.atomic
    def admin_delete(cls, review, reason):
        product_id = review.product_id
        logger.info("Admin deleted review %s. Reason: %s", review.id, reason)
        review.delete()
        cls.recalculate_product_rating(product_id)
        return {"success": True, "message": "Review deleted successfully"}
