from rest_framework import serializers

from ..models import ProductReview


class ProductReviewSerializer(serializers.ModelSerializer):
    user_name = serializers.SerializerMethodField()
    has_voted_helpful = serializers.SerializerMethodField()

    class Meta:
        model = ProductReview
        fields = [
            "id",
            "product",
            "shop",
            "rating",
            "title",
            "comment",
            "status",
            "helpful_count",
            "is_verified_purchase",
            "vendor_response",
            "vendor_responded_at",
            "user_name",
            "has_voted_helpful",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields

    def get_user_name(self, obj):
        return obj.user.get_full_name() if obj.user_id else "Anonymous"

    def get_has_voted_helpful(self, obj):
        voted = self.context.get("voted_review_ids")
        return bool(voted and obj.id in voted)


class AdminProductReviewSerializer(ProductReviewSerializer):
    product_name = serializers.CharField(source="product.name", read_only=True)
    shop_name = serializers.CharField(source="shop.name", read_only=True)
    user_email = serializers.EmailField(source="user.email", read_only=True)

    class Meta(ProductReviewSerializer.Meta):
        fields = ProductReviewSerializer.Meta.fields + ["product_name", "shop_name", "user_email", "order"]
        read_only_fields = fields


class ReviewCreateSerializer(serializers.Serializer):
    order_item_id = serializers.UUIDField()
    product_id = serializers.UUIDField()
    rating = serializers.IntegerField(min_value=1, max_value=5)
    title = serializers.CharField(min_length=5, max_length=100)
    comment = serializers.CharField(min_length=10, max_length=1000)


class ReviewUpdateSerializer(serializers.Serializer):
    rating = serializers.IntegerField(min_value=1, max_value=5, required=False)
    title = serializers.CharField(min_length=5, max_length=100, required=False)
    comment = serializers.CharField(min_length=10, max_length=1000, required=False)


class VendorResponseSerializer(serializers.Serializer):
    response = serializers.CharField(min_length=1, max_length=1000)


class ReviewStatusSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=ProductReview.Status.choices)


class AdminReviewDeleteSerializer(serializers.Serializer):
    reason = serializers.CharField(min_length=5, max_length=500)
