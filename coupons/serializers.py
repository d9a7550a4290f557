from decimal import Decimal

from rest_framework import serializers

from marketplace.models import Category, Product
from shops.models import Shop
from .models import Coupon


class CouponSerializer(serializers.ModelSerializer):
    product_ids = serializers.PrimaryKeyRelatedField(
        source="products",
        many=True,
        queryset=Product.objects.all(),
        required=False,
    )
    category_ids = serializers.PrimaryKeyRelatedField(
        source="categories",
        many=True,
        queryset=Category.objects.all(),
        required=False,
    )
    discount_amount = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=Decimal("0"))

    class Meta:
        model = Coupon
        fields = [
            "id",
            "code",
            "description",
            "type",
            "discount_amount",
            "minimum_cart_amount",
            "maximum_discount_amount",
            "usage_limit",
            "usage_limit_per_user",
            "usage_count",
            "active_from",
            "active_to",
            "is_active",
            "applicable_to",
            "product_ids",
            "category_ids",
            "created_at",
            "updated_at",
        ]
        read_only_fields = ["id", "usage_count", "created_at", "updated_at"]

    def _target_shop(self, attrs):
        if self.instance is not None:
            return self.instance.shop
        return attrs.get("shop") or self.context.get("shop")

    def validate_code(self, value):
        value = value.strip().upper()
        if not value:
            raise serializers.ValidationError("Coupon code is required.")
        return value

    def validate(self, attrs):
        instance = self.instance
        shop = self._target_shop(attrs)

        def current(name, default=None):
            if name in attrs:
                return attrs[name]
            return getattr(instance, name, default) if instance is not None else default

        coupon_type = current("type", Coupon.Type.PERCENTAGE)
        if coupon_type == Coupon.Type.PERCENTAGE and current("discount_amount", Decimal("0")) > 100:
            raise serializers.ValidationError({"discount_amount": "Percentage discounts cannot exceed 100."})

        active_from, active_to = current("active_from"), current("active_to")
        if active_from and active_to and active_to <= active_from:
            raise serializers.ValidationError({"active_to": "End date must be after the start date."})

        code = current("code")
        if shop is not None and code:
            duplicates = Coupon.objects.filter(shop=shop, code__iexact=code)
            if instance is not None:
                duplicates = duplicates.exclude(pk=instance.pk)
            if duplicates.exists():
                raise serializers.ValidationError({"code": "A coupon with this code already exists in this shop."})

        if shop is not None:
            for product in attrs.get("products", []):
                if product.shop_id != shop.id:
                    raise serializers.ValidationError({"product_ids": "Products must belong to the coupon's shop."})
            for category in attrs.get("categories", []):
                if category.shop_id not in (None, shop.id):
                    raise serializers.ValidationError({"category_ids": "Categories must belong to the coupon's shop."})
        return attrs


class AdminCouponSerializer(CouponSerializer):
    shop = serializers.PrimaryKeyRelatedField(queryset=Shop.objects.all())
    shop_name = serializers.CharField(source="shop.name", read_only=True)

    class Meta(CouponSerializer.Meta):
        fields = CouponSerializer.Meta.fields + ["shop", "shop_name"]

    def validate_shop(self, value):
        if self.instance is not None and value != self.instance.shop:
            raise serializers.ValidationError("A coupon cannot be moved to another shop.")
        return value


class CouponToggleSerializer(serializers.Serializer):
    is_active = serializers.BooleanField(required=False)


class CouponValidateItemSerializer(serializers.Serializer):
    product_id = serializers.UUIDField()
    price = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=Decimal("0"))
    quantity = serializers.IntegerField(min_value=1)
    category_id = serializers.UUIDField(required=False, allow_null=True)


class CouponValidateRequestSerializer(serializers.Serializer):
    code = serializers.CharField(max_length=50)
    shop_id = serializers.UUIDField()
    cart_amount = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=Decimal("0"))
    cart_items = CouponValidateItemSerializer(many=True, required=False)


class PublicCouponSerializer(serializers.ModelSerializer):
    class Meta:
        model = Coupon
        fields = [
            "id",
            "code",
            "description",
            "type",
            "discount_amount",
            "minimum_cart_amount",
            "maximum_discount_amount",
            "active_from",
            "active_to",
            "applicable_to",
        ]
        read_only_fields = fields
