from rest_framework import serializers

from ..models import Category, Product


class CategorySerializer(serializers.ModelSerializer):
    class Meta:
        model = Category
        fields = ["id", "name", "slug", "description", "parent", "shop", "is_active"]
        read_only_fields = fields


class ProductListSerializer(serializers.ModelSerializer):
    shop_name = serializers.CharField(source="shop.name", read_only=True)
    shop_slug = serializers.CharField(source="shop.slug", read_only=True)
    category_name = serializers.CharField(source="category.name", read_only=True, default=None)
    in_stock = serializers.SerializerMethodField()

    class Meta:
        model = Product
        fields = [
            "id",
            "name",
            "slug",
            "sku",
            "image_url",
            "selling_price",
            "average_rating",
            "review_count",
            "shop",
            "shop_name",
            "shop_slug",
            "category",
            "category_name",
            "in_stock",
        ]
        read_only_fields = fields

    def get_in_stock(self, obj):
        return not obj.tracks_stock or obj.stock > 0


class ProductDetailSerializer(ProductListSerializer):
    class Meta(ProductListSerializer.Meta):
        fields = ProductListSerializer.Meta.fields + ["description", "stock", "tax_rate", "created_at"]
        read_only_fields = fields


class AdminProductSerializer(ProductDetailSerializer):
    vendor_name = serializers.CharField(source="shop.vendor.business_name", read_only=True)

    class Meta(ProductDetailSerializer.Meta):
        fields = ProductDetailSerializer.Meta.fields + ["is_active", "vendor_name", "updated_at"]
        read_only_fields = fields


class AdminCategorySerializer(CategorySerializer):
    shop_name = serializers.CharField(source="shop.name", read_only=True, default=None)
    product_count = serializers.IntegerField(read_only=True, default=0)

    class Meta(CategorySerializer.Meta):
        fields = CategorySerializer.Meta.fields + ["shop_name", "product_count", "created_at"]
        read_only_fields = fields


class ProductStatusSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=["active", "inactive"])


class CategoryToggleSerializer(serializers.Serializer):
    is_active = serializers.BooleanField(required=False)
