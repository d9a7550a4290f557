"""
Admin moderation of the catalog across every shop.
"""
import logging

from django.db.models import Count, Q

from core.exceptions import BusinessLogicError
from ..models import Category, Product

logger = logging.getLogger(__name__)


class CatalogAdminService:
    PRODUCT_STATUSES = {"active": True, "inactive": False}

    @staticmethod
    def admin_products(shop_id=None, vendor_id=None, search=None, is_active=None):
        queryset = Product.objects.select_related("shop", "shop__vendor", "category")
        if shop_id:
            queryset = queryset.filter(shop_id=shop_id)
        if vendor_id:
            queryset = queryset.filter(shop__vendor_id=vendor_id)
        if is_active is not None:
            queryset = queryset.filter(is_active=is_active)
        if search:
            queryset = queryset.filter(
                Q(name__icontains=search) | Q(sku__icontains=search) | Q(description__icontains=search)
            )
        return queryset

    @classmethod
    def set_product_status(cls, product, status):
        product.is_active = cls.PRODUCT_STATUSES[status]
        product.save(update_fields=["is_active", "updated_at"])
        logger.info("Product %s set to %s by admin", product.id, status)
        return {"success": True, "message": f'Product status updated to "{status}"'}

    @staticmethod
    def delete_product(product):
        # Order lines keep their name/price snapshot; the FK is nulled
        product_id = product.id
        product.delete()
        logger.info("Product %s deleted by admin", product_id)
        return {"success": True, "message": "Product deleted successfully"}

    @staticmethod
    def admin_categories(shop_id=None, vendor_id=None, search=None, is_active=None, parent_id=None):
        queryset = Category.objects.select_related("shop", "parent").annotate(
            product_count=Count("products", distinct=True),
        )
        if shop_id:
            queryset = queryset.filter(shop_id=shop_id)
        if vendor_id:
            queryset = queryset.filter(shop__vendor_id=vendor_id)
        if is_active is not None:
            queryset = queryset.filter(is_active=is_active)
        if parent_id:
            queryset = queryset.filter(parent_id=parent_id)
        if search:
            queryset = queryset.filter(Q(name__icontains=search) | Q(slug__icontains=search))
        return queryset

    @staticmethod
    def set_category_active(category, is_active=None):
        if is_active is None:
            is_active = not category.is_active
        category.is_active = bool(is_active)
        category.save(update_fields=["is_active", "updated_at"])
        return {
            "success": True,
            "message": "Category activated" if category.is_active else "Category deactivated",
        }

    @staticmethod
    def delete_category(category):
        if category.children.exists():
            raise BusinessLogicError(
                "Cannot delete a category that has subcategories. "
                "Please delete or reassign subcategories first.",
                internal_code="CATEGORY_HAS_CHILDREN",
            )
        if category.products.exists():
            raise BusinessLogicError(
                "Cannot delete a category that has products. Please reassign products first.",
                internal_code="CATEGORY_HAS_PRODUCTS",
            )
        category_id = category.id
        category.delete()
        logger.info("Category %s deleted by admin", category_id)
        return {"success": True, "message": "Category deleted successfully"}
