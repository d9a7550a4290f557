"""
Shopping cart for users and guests.

A guest cart is identified by an opaque ``session_id`` the client keeps
(``X-Cart-Session`` header); a user has at most one cart.
"""
import logging
import uuid

from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import transaction
from rest_framework.exceptions import NotFound, PermissionDenied

from core.exceptions import BusinessLogicError
from core.utils import ZERO, money
from ..models import Cart, CartItem, Product

logger = logging.getLogger(__name__)


def _is_authenticated(user):
    return user is not None and getattr(user, "is_authenticated", False)


class CartService:

    @staticmethod
    def get_cart(user=None, session_id=None):
        if _is_authenticated(user):
            return Cart.objects.filter(user=user).first()
        if session_id:
            return Cart.objects.filter(user__isnull=True, session_id=session_id).first()
        return None

    @classmethod
    def get_or_create_cart(cls, user=None, session_id=None):
        if _is_authenticated(user):
            cart, _ = Cart.objects.get_or_create(user=user)
            return cart
        if session_id:
            cart, _ = Cart.objects.get_or_create(user=None, session_id=session_id)
            return cart
        return Cart.objects.create(session_id=uuid.uuid4().hex)

    @staticmethod
    def _available_product(product_id):
        try:
            return Product.objects.select_related("shop").get(pk=product_id, is_active=True)
        except (Product.DoesNotExist, DjangoValidationError):
            raise BusinessLogicError("Product not found or is not available")

    @classmethod
    @transaction.atomic
    def add_item(cls, product_id, quantity=1, variant_options=None, user=None, session_id=None):
        product = cls._available_product(product_id)
        if product.tracks_stock and product.stock < quantity:
            raise BusinessLogicError("Not enough stock available")

        cart = cls.get_or_create_cart(user, session_id)
        item = CartItem.objects.select_for_update().filter(cart=cart, product=product).first()
        if item is None:
            CartItem.objects.create(
                cart=cart,
                product=product,
                quantity=quantity,
                variant_options=variant_options or {},
            )
        else:
            new_quantity = item.quantity + quantity
            if product.tracks_stock and product.stock < new_quantity:
                raise BusinessLogicError("Not enough stock available for the requested quantity")
            item.quantity = new_quantity
            if variant_options:
                item.variant_options = variant_options
            item.save(update_fields=["quantity", "variant_options", "updated_at"])
        return cart

    @classmethod
    def _owned_item(cls, item_id, user=None, session_id=None):
        item = CartItem.objects.select_related("cart", "product").filter(pk=item_id).first()
        if item is None:
            raise NotFound("Cart item not found")
        cart = item.cart
        if cart.user_id:
            if not _is_authenticated(user) or cart.user_id != user.id:
                raise PermissionDenied("Unauthorized")
        elif not session_id or cart.session_id != session_id:
            raise PermissionDenied("Unauthorized")
        return item

    @classmethod
    def update_item(cls, item_id, quantity, user=None, session_id=None):
        item = cls._owned_item(item_id, user, session_id)
        if item.product.tracks_stock and item.product.stock < quantity:
            raise BusinessLogicError("Not enough stock available")
        item.quantity = quantity
        item.save(update_fields=["quantity", "updated_at"])
        return item.cart

    @classmethod
    def remove_item(cls, item_id, user=None, session_id=None):
        item = cls._owned_item(item_id, user, session_id)
        cart = item.cart
        item.delete()
        return cart

    @classmethod
    def clear(cls, user=None, session_id=None):
        cart = cls.get_cart(user, session_id)
        if cart is None:
            return None
        cart.items.all().delete()
        return cart

    @classmethod
    @transaction.atomic
    def merge(cls, user, guest_session_id):
        """Moves a guest cart's items into the user's cart, summing quantities."""
        user_cart = cls.get_or_create_cart(user)
        guest_cart = Cart.objects.filter(user__isnull=True, session_id=guest_session_id).first()
        if guest_cart is None:
            return user_cart

        for guest_item in guest_cart.items.select_related("product"):
            existing = CartItem.objects.filter(cart=user_cart, product=guest_item.product).first()
            if existing:
                existing.quantity += guest_item.quantity
                existing.save(update_fields=["quantity", "updated_at"])
            else:
                guest_item.cart = user_cart
                guest_item.save(update_fields=["cart", "updated_at"])

        guest_cart.delete()
        logger.info("Merged guest cart %s into cart of user %s", guest_session_id, user.id)
        return user_cart

    @staticmethod
    def summarize(cart):
        if cart is None:
            return {"items": [], "total_items": 0, "subtotal": ZERO, "session_id": None}
        items = list(cart.items.select_related("product", "product__shop"))
        return {
            "items": items,
            "total_items": sum(item.quantity for item in items),
            "subtotal": money(sum((item.product.selling_price * item.quantity for item in items), ZERO)),
            "session_id": cart.session_id or None,
        }
