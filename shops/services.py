"""
Tenant services: shop access checks, vendor registration and admin
management of shops and commissions.
"""
import logging
from decimal import Decimal

from django.contrib.auth import get_user_model
from django.db import transaction
from django.db.models import Sum
from django.utils.text import slugify
from rest_framework.exceptions import NotFound, PermissionDenied

from core.exceptions import ResourceConflictError
from core.utils import money
from .models import Shop, Vendor

logger = logging.getLogger(__name__)

CustomUser = get_user_model()


class ShopAccessService:
    """
    Resolves which shops a user may act on.

    Admins may act on any shop; vendors only on the shops they own.
    """

    @staticmethod
    def is_admin(user):
        return bool(
            user is not None
            and getattr(user, "is_authenticated", False)
            and getattr(user, "role", None) == CustomUser.Role.ADMIN
        )

    @staticmethod
    def get_vendor_for_user(user):
        if user is None or not getattr(user, "is_authenticated", False):
            return None
        return Vendor.objects.filter(user=user).first()

    @staticmethod
    def get_shop_by_slug(slug):
        shop = Shop.objects.select_related("vendor", "vendor__user").filter(slug=slug).first()
        if shop is None:
            raise NotFound("Shop not found.")
        return shop

    @classmethod
    def verify_shop_access(cls, user, shop):
        if cls.is_admin(user):
            return True
        vendor = cls.get_vendor_for_user(user)
        if vendor is None:
            return False
        shop_id = getattr(shop, "pk", shop)
        return Shop.objects.filter(pk=shop_id, vendor=vendor).exists()

    @classmethod
    def require_shop_access(cls, user, slug):
        shop = cls.get_shop_by_slug(slug)
        if not cls.verify_shop_access(user, shop):
            logger.warning("Shop access denied: user=%s shop=%s", getattr(user, "id", None), shop.id)
            raise PermissionDenied("You do not have access to this shop.")
        return shop

    @classmethod
    def shop_ids_for_user(cls, user, shop_slug=None):
        """
        Shop ids for vendor-scoped queries.

        With a slug: admins get that shop, vendors get it only if they own it.
        Without a slug: admins get nothing (they use the admin endpoints),
        vendors get all of their shops.
        """
        is_admin = cls.is_admin(user)

        if shop_slug:
            shop = Shop.objects.filter(slug=shop_slug).only("id", "vendor_id").first()
            if shop is None:
                return []
            if is_admin:
                return [shop.id]
            vendor = cls.get_vendor_for_user(user)
            if vendor and shop.vendor_id == vendor.id:
                return [shop.id]
            return []

        if is_admin:
            return []

        vendor = cls.get_vendor_for_user(user)
        if vendor is None:
            return []
        return list(Shop.objects.filter(vendor=vendor).values_list("id", flat=True))


class VendorRegistrationService:

    @staticmethod
    def _generate_slug(store_name):
        return slugify(store_name)[:120]

    @classmethod
    @transaction.atomic
    def register(
        cls,
        *,
        name,
        email,
        password,
        store_name,
        store_description="",
        contact_phone="",
        address="",
    ):
        email = email.strip().lower()
        if CustomUser.objects.filter(email__iexact=email).exists():
            raise ResourceConflictError("A user with this email already exists")

        slug = cls._generate_slug(store_name)
        if not slug or Shop.objects.filter(slug=slug).exists():
            raise ResourceConflictError(
                "A shop with this name already exists. Please try a different shop name."
            )

        first_name, _, last_name = name.strip().partition(" ")
        user = CustomUser.objects.create_user(
            email=email,
            password=password,
            first_name=first_name,
            last_name=last_name,
            phone=contact_phone or "",
            role=CustomUser.Role.VENDOR,
        )
        vendor = Vendor.objects.create(
            user=user,
            business_name=store_name,
            contact_email=email,
            contact_phone=contact_phone or "",
            status=Vendor.Status.PENDING,
        )
        shop = Shop.objects.create(
            vendor=vendor,
            name=store_name,
            slug=slug,
            description=store_description or "",
            email=email,
            phone=contact_phone or "",
            address=address or "",
            status=Shop.Status.PENDING,
        )
        logger.info("Vendor registered: user=%s vendor=%s shop=%s", user.id, vendor.id, shop.id)
        return user, vendor, shop


class AdminShopService:

    @staticmethod
    def get_shop_stats(shop):
        from marketplace.models import Order

        orders = Order.objects.filter(shop=shop)
        paid = orders.filter(payment_status=Order.PaymentStatus.PAID)
        revenue = paid.aggregate(total=Sum("total_amount"))["total"] or Decimal("0")
        customers = {
            str(user_id) if user_id else (guest_email or "").lower()
            for user_id, guest_email in paid.values_list("user_id", "guest_email")
        }
        customers.discard("")
        return {
            "total_orders": orders.count(),
            "total_products": shop.products.count(),
            "customer_count": len(customers),
            "paid_revenue": money(revenue),
        }

    @staticmethod
    def update_status(shop, status):
        previous = shop.status
        shop.status = status
        shop.save(update_fields=["status", "updated_at"])
        logger.info("Shop %s status changed from %s to %s", shop.id, previous, status)
        return {"success": True, "message": f"Shop status updated to {status}"}

    @staticmethod
    def delete_shop(shop):
        shop_id = shop.id
        shop.delete()
        logger.info("Shop %s deleted by admin", shop_id)
        return {"success": True, "message": "Shop deleted successfully"}

    @staticmethod
    def update_commission(vendor, commission_rate):
        vendor.commission_rate = money(commission_rate)
        vendor.save(update_fields=["commission_rate", "updated_at"])
        logger.info("Vendor %s commission set to %s%%", vendor.id, vendor.commission_rate)
        return {
            "success": True,
            "message": f"Commission rate updated to {vendor.commission_rate}%",
            "commission_rate": vendor.commission_rate,
        }
