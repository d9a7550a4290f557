"""
Core API - Pagination.
"""
from rest_framework.pagination import LimitOffsetPagination


class DefaultLimitOffsetPagination(LimitOffsetPagination):
    """
    Limit/offset pagination used by every list endpoint.

    - default_limit: 10 items (``?limit=N``)
    - max_limit: 100 items
    - ``?offset=N`` skips the first N items

    Response shape:
        {
            "count": <total items>,
            "next": <url or null>,
            "previous": <url or null>,
            "results": [<items>]
        }
    """
    default_limit = 10
    max_limit = 100


class TransactionLimitOffsetPagination(DefaultLimitOffsetPagination):
    """Payment listings show 50 rows by default."""
    default_limit = 50


class CustomerOrderLimitOffsetPagination(DefaultLimitOffsetPagination):
    max_limit = 50
