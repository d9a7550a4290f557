"""
Core API - Permissions.
"""
from rest_framework.permissions import BasePermission

ROLE_ADMIN = "ADMIN"
ROLE_VENDOR = "VENDOR"


class IsAdmin(BasePermission):
    message = "Admin access required."

    def has_permission(self, request, view):
        return bool(request.user and request.user.is_authenticated and getattr(request.user, "role", "") == ROLE_ADMIN)


class IsVendorOrAdmin(BasePermission):
    message = "Vendor or admin access required."

    def has_permission(self, request, view):
        role = getattr(request.user, "role", "")
        return bool(request.user and request.user.is_authenticated and role in {ROLE_VENDOR, ROLE_ADMIN})
