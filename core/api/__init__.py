"""
DRF infrastructure shared by the apps: permissions and pagination.
"""
from core.api.pagination import (
    CustomerOrderLimitOffsetPagination,
    DefaultLimitOffsetPagination,
    TransactionLimitOffsetPagination,
)
from core.api.permissions import IsAdmin, IsVendorOrAdmin

__all__ = [
    # Permissions
    "IsAdmin",
    "IsVendorOrAdmin",
    # Pagination
    "DefaultLimitOffsetPagination",
    "TransactionLimitOffsetPagination",
    "CustomerOrderLimitOffsetPagination",
]
