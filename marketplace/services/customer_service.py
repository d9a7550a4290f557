"""
Customer-owned data: the wishlist and the address book.
"""
from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import transaction
from rest_framework.exceptions import NotFound

from ..models import CustomerAddress, Product, WishlistItem


def _is_authenticated(user):
    return user is not None and getattr(user, "is_authenticated", False)


class WishlistService:

    @staticmethod
    def items(user):
        return WishlistItem.objects.filter(user=user).select_related("product", "product__shop")

    @staticmethod
    @transaction.atomic
    def toggle(user, product_id):
        """Adds the product when absent, removes it otherwise. Returns ``{"added": bool}``."""
        try:
            product = Product.objects.get(pk=product_id)
        except (Product.DoesNotExist, DjangoValidationError):
            raise NotFound("Product not found")

        deleted, _ = WishlistItem.objects.filter(user=user, product=product).delete()
        if deleted:
            return {"added": False}
        WishlistItem.objects.create(user=user, product=product)
        return {"added": True}

    @staticmethod
    def is_in_wishlist(user, product_id):
        if not _is_authenticated(user):
            return False
        try:
            return WishlistItem.objects.filter(user=user, product_id=product_id).exists()
        except DjangoValidationError:
            return False


class AddressService:

    @staticmethod
    def addresses(user):
        return CustomerAddress.objects.filter(user=user)

    @staticmethod
    def get_address(user, address_id):
        try:
            address = CustomerAddress.objects.filter(pk=address_id, user=user).first()
        except DjangoValidationError:
            address = None
        if address is None:
            raise NotFound("Address not found")
        return address

    @staticmethod
    def _clear_default(user, address_type, exclude=None):
        queryset = CustomerAddress.objects.filter(user=user, type=address_type, is_default=True)
        if exclude is not None:
            queryset = queryset.exclude(pk=exclude.pk)
        queryset.update(is_default=False)

    @classmethod
    @transaction.atomic
    def create(cls, user, **data):
        address_type = data.get("type", CustomerAddress.AddressType.SHIPPING)
        is_first = not CustomerAddress.objects.filter(user=user, type=address_type).exists()
        if data.get("is_default"):
            cls._clear_default(user, address_type)
        data["is_default"] = bool(data.get("is_default")) or is_first
        return CustomerAddress.objects.create(user=user, **data)

    @classmethod
    @transaction.atomic
    def update(cls, address, **data):
        for field, value in data.items():
            setattr(address, field, value)
        if data.get("is_default"):
            cls._clear_default(address.user, address.type, exclude=address)
        address.save()
        return address

    @staticmethod
    @transaction.atomic
    def delete(address):
        """Deletes the address; a deleted default hands the flag to the oldest one of its type."""
        user, address_type, was_default = address.user, address.type, address.is_default
        address.delete()
        if was_default:
            successor = CustomerAddress.objects.filter(user=user, type=address_type).order_by("created_at").first()
            if successor is not None:
                successor.is_default = True
                successor.save(update_fields=["is_default", "updated_at"])
        return {"success": True}

    @classmethod
    @transaction.atomic
    def set_default(cls, address):
        cls._clear_default(address.user, address.type, exclude=address)
        address.is_default = True
        address.save(update_fields=["is_default", "updated_at"])
        return address
