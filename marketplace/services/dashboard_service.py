"""
Dashboard aggregates: the per-shop vendor dashboard and the admin
dashboard lists (low stock, top sellers, recent orders).
"""
from django.conf import settings
from django.db.models import Count, Sum
from django.db.models.functions import TruncMonth
from django.utils import timezone

from core.utils import money
from ..models import Order, OrderItem, Product


def _month_start(moment, months_back=0):
    month_index = moment.year * 12 + (moment.month - 1) - months_back
    year, month = divmod(month_index, 12)
    return moment.replace(year=year, month=month + 1, day=1, hour=0, minute=0, second=0, microsecond=0)


def _percentage(part, whole):
    if not whole:
        return 0.0
    return round(part / whole * 100, 1)


class DashboardService:
    VENDOR_LIST_LIMIT = 5
    ADMIN_LIST_LIMIT = 10
    SALES_MONTHS = 6

    @staticmethod
    def low_stock_threshold():
        return getattr(settings, "LOW_STOCK_THRESHOLD", 5)

    @classmethod
    def low_stock_products(cls, shop_ids=None, limit=ADMIN_LIST_LIMIT):
        """Active products with tracked stock at or below the threshold, lowest first."""
        threshold = cls.low_stock_threshold()
        queryset = Product.objects.filter(
            is_active=True,
            stock__isnull=False,
            stock__lte=threshold,
        ).select_related("shop")
        if shop_ids is not None:
            queryset = queryset.filter(shop_id__in=shop_ids)
        return [
            {
                "id": str(product.id),
                "name": product.name,
                "sku": product.sku,
                "stock": product.stock,
                "threshold": threshold,
                "shop_name": product.shop.name,
                "shop_slug": product.shop.slug,
            }
            for product in queryset.order_by("stock", "name")[:limit]
        ]

    @staticmethod
    def top_products(shop_ids=None, paid_only=True, limit=ADMIN_LIST_LIMIT):
        """Best sellers by quantity, read from the order lines."""
        queryset = OrderItem.objects.exclude(product__isnull=True)
        if paid_only:
            queryset = queryset.filter(order__payment_status=Order.PaymentStatus.PAID)
        if shop_ids is not None:
            queryset = queryset.filter(order__shop_id__in=shop_ids)
        rows = (
            queryset.order_by()
            .values("product_id", "product__name", "order__shop__name")
            .annotate(total_sold=Sum("quantity"), revenue=Sum("total_price"))
            .order_by("-total_sold", "product__name")[:limit]
        )
        return [
            {
                "id": str(row["product_id"]),
                "name": row["product__name"],
                "shop_name": row["order__shop__name"],
                "total_sold": row["total_sold"] or 0,
                "revenue": money(row["revenue"]),
            }
            for row in rows
        ]

    @staticmethod
    def recent_orders(shop_ids=None, limit=ADMIN_LIST_LIMIT):
        queryset = Order.objects.select_related("shop", "user").order_by("-created_at")
        if shop_ids is not None:
            queryset = queryset.filter(shop_id__in=shop_ids)
        orders = []
        for order in queryset[:limit]:
            user = order.user
            orders.append(
                {
                    "id": str(order.id),
                    "order_number": order.order_number,
                    "customer_name": (user.get_full_name() if user else "") or "Guest",
                    "customer_email": order.guest_email or (user.email if user else "") or "N/A",
                    "shop_name": order.shop.name,
                    "status": order.status,
                    "payment_status": order.payment_status,
                    "total_amount": money(order.total_amount),
                    "created_at": order.created_at.isoformat(),
                }
            )
        return orders

    @classmethod
    def monthly_sales(cls, shop_ids, now=None):
        """Revenue and order count per month for the last ``SALES_MONTHS`` months, gaps filled with zeros."""
        now = timezone.localtime(now or timezone.now())
        first_month = _month_start(now, cls.SALES_MONTHS - 1)
        rows = (
            Order.objects.filter(shop_id__in=shop_ids, created_at__gte=first_month)
            .annotate(month=TruncMonth("created_at"))
            .order_by()
            .values("month")
            .annotate(revenue=Sum("total_amount"), orders=Count("id"))
        )
        by_month = {row["month"].strftime("%Y-%m"): row for row in rows}

        sales = []
        for months_back in range(cls.SALES_MONTHS - 1, -1, -1):
            month = _month_start(now, months_back)
            row = by_month.get(month.strftime("%Y-%m"), {})
            sales.append(
                {
                    "month": month.strftime("%b %Y"),
                    "revenue": money(row.get("revenue")),
                    "orders": row.get("orders", 0),
                }
            )
        return sales

    @classmethod
    def vendor_dashboard(cls, shop, now=None):
        """
        Everything the shop dashboard shows, in one call.

        Revenue counts delivered orders only. The conversion rate is
        orders per listed product, as no visit data is collected.
        """
        now = timezone.localtime(now or timezone.now())
        start_of_month = _month_start(now)
        start_of_previous_month = _month_start(now, 1)
        shop_ids = [shop.id]

        orders = Order.objects.filter(shop_id__in=shop_ids)
        delivered = orders.filter(status=Order.OrderStatus.DELIVERED)
        monthly_revenue = delivered.filter(created_at__gte=start_of_month).aggregate(
            total=Sum("total_amount")
        )["total"]
        previous_month_revenue = delivered.filter(
            created_at__gte=start_of_previous_month,
            created_at__lt=start_of_month,
        ).aggregate(total=Sum("total_amount"))["total"]

        products = Product.objects.filter(shop=shop)
        total_products = products.count()
        total_orders = orders.filter(created_at__gte=start_of_month).count()
        previous_month_orders = orders.filter(
            created_at__gte=start_of_previous_month,
            created_at__lt=start_of_month,
        ).count()

        return {
            "stats": {
                "monthly_revenue": money(monthly_revenue),
                "previous_month_revenue": money(previous_month_revenue),
                "total_products": total_products,
                "new_products_this_month": products.filter(created_at__gte=start_of_month).count(),
                "total_orders": total_orders,
                "previous_month_orders": previous_month_orders,
                "conversion_rate": _percentage(total_orders, total_products),
                "previous_conversion_rate": _percentage(previous_month_orders, total_products),
            },
            "recent_orders": cls.recent_orders(shop_ids, limit=cls.VENDOR_LIST_LIMIT),
            "top_products": cls.top_products(shop_ids, paid_only=False, limit=cls.VENDOR_LIST_LIMIT),
            "low_stock_products": cls.low_stock_products(shop_ids, limit=cls.VENDOR_LIST_LIMIT),
            "monthly_sales": cls.monthly_sales(shop_ids, now=now),
        }
