"""
Turns a cart into one order per shop plus a single Stripe PaymentIntent.
"""
import logging
from collections import OrderedDict
from decimal import Decimal

from django.conf import settings
from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import transaction
from django.db.models import F

from core.exceptions import BusinessLogicError
from core.metrics import checkout_counter
from core.utils import ZERO, money
from coupons.models import Coupon
from coupons.services import CartLine, CouponService
from payments.gateway import PaymentGatewayError, get_gateway
from payments.models import Payment
from payments.services import application_fee_for
from shipping.models import ShippingMethod
from shipping.services import ShippingEligibilityService
from ..models import Order, OrderItem, Product
from .cart_service import CartService

logger = logging.getLogger(__name__)

INSUFFICIENT_TRANSFER_CAPABILITY = "insufficient_capabilities_for_transfer"


class CheckoutService:
    """
    Creates the orders of a checkout and the intent that pays for them.

    Everything runs in one transaction: a gateway failure leaves no order,
    no stock change and the cart untouched.
    """

    def __init__(self, user=None, session_id=None, gateway=None):
        self.user = user if user is not None and getattr(user, "is_authenticated", False) else None
        self.session_id = session_id
        self.gateway = gateway or get_gateway()

    @staticmethod
    def tax_rate():
        return Decimal(str(getattr(settings, "CHECKOUT_TAX_RATE", "0.05")))

    def _load_cart_items(self):
        cart = CartService.get_cart(self.user, self.session_id)
        if cart is None:
            raise BusinessLogicError("Cart not found")
        items = list(cart.items.select_related("product", "product__shop", "product__shop__vendor"))
        if not items:
            raise BusinessLogicError("Cart is empty")
        return cart, items

    @staticmethod
    def _group_by_shop(items):
        grouped = OrderedDict()
        for item in items:
            grouped.setdefault(item.product.shop_id, []).append(item)
        return grouped

    @staticmethod
    def _resolve_shipping_method(method_id, items_by_shop):
        try:
            method = ShippingMethod.objects.filter(pk=method_id).first()
        except DjangoValidationError:
            method = None
        if method is None:
            raise BusinessLogicError("Shipping method not found")
        if method.shop_id not in items_by_shop:
            raise BusinessLogicError("Shipping method does not match cart items")

        product_ids = [item.product_id for item in items_by_shop[method.shop_id]]
        if not method.is_active or not ShippingEligibilityService.is_method_available(method, product_ids):
            raise BusinessLogicError("Shipping method is not available for the items in your cart")
        return method

    def _coupon_for_shop(self, shop_id, coupon_codes, subtotal, items):
        code = None
        for entry in coupon_codes or []:
            if str(entry.get("shop_id")) == str(shop_id):
                code = entry.get("code")
                break
        if not code:
            return None, ZERO

        lines = [
            CartLine(
                product_id=str(item.product_id),
                price=item.product.selling_price,
                quantity=item.quantity,
                category_id=str(item.product.category_id) if item.product.category_id else None,
            )
            for item in items
        ]
        result = CouponService.validate(code, shop_id, subtotal, user=self.user, cart_items=lines)
        if not result.valid:
            raise BusinessLogicError(
                result.message,
                internal_code="COUPON_INVALID",
                extra={"code": code, "reason": result.invalid_reason},
            )
        return result.coupon, result.discount_amount

    @staticmethod
    def _reserve_stock(item):
        product = item.product
        if not product.tracks_stock:
            return
        updated = Product.objects.filter(
            pk=product.pk,
            stock__gte=item.quantity,
        ).update(stock=F("stock") - item.quantity)
        if not updated:
            raise BusinessLogicError(
                "Not enough stock available",
                internal_code="OUT_OF_STOCK",
                extra={"product_id": str(product.pk)},
            )

    def _create_shop_order(self, shop_id, items, method, data):
        subtotal = money(sum((item.product.selling_price * item.quantity for item in items), ZERO))
        coupon, discount = self._coupon_for_shop(shop_id, data.get("coupon_codes"), subtotal, items)
        shipping_amount = money(method.price)
        if coupon is not None and coupon.type == Coupon.Type.FREE_SHIPPING:
            shipping_amount = ZERO
        tax_amount = money((subtotal - discount) * self.tax_rate())
        total = money(subtotal - discount + tax_amount + shipping_amount)

        shipping_address = data["shipping_address"]
        billing_address = (
            shipping_address
            if data.get("use_same_billing_address", True) or not data.get("billing_address")
            else data["billing_address"]
        )
        order = Order.objects.create(
            user=self.user,
            guest_email=shipping_address.get("email", ""),
            shop_id=shop_id,
            subtotal=subtotal,
            tax_amount=tax_amount,
            shipping_amount=shipping_amount,
            discount_amount=discount,
            total_amount=total,
            shipping_method=str(method.id),
            shipping_address=shipping_address,
            billing_address=billing_address,
            customer_notes=data.get("customer_notes", ""),
            coupon_code=coupon.code if coupon else "",
        )

        for item in items:
            self._reserve_stock(item)
            product = item.product
            OrderItem.objects.create(
                order=order,
                product=product,
                product_name=product.name,
                product_sku=product.sku,
                product_image=product.image_url,
                variant_options=item.variant_options or {},
                unit_price=product.selling_price,
                quantity=item.quantity,
                total_price=money(product.selling_price * item.quantity),
            )

        if coupon is not None:
            CouponService.record_usage(coupon, order, user=self.user, discount_amount=discount)
        return order

    def _create_intent(self, orders, grand_total, email):
        metadata = {
            "orderIds": ",".join(str(order.id) for order in orders),
            "userId": str(self.user.id) if self.user else "guest",
            "email": email,
        }

        shop_ids = {order.shop_id for order in orders}
        if len(shop_ids) == 1:
            vendor = orders[0].shop.vendor
            if vendor.can_receive_destination_charges:
                fee = application_fee_for(grand_total, vendor.commission_rate)
                try:
                    intent = self.gateway.create_destination_charge(
                        grand_total,
                        "usd",
                        vendor.stripe_connected_account_id,
                        fee,
                        metadata={**metadata, "vendorId": str(vendor.id)},
                    )
                    return intent, vendor.stripe_connected_account_id, vendor.commission_rate
                except PaymentGatewayError as exc:
                    if exc.stripe_code != INSUFFICIENT_TRANSFER_CAPABILITY:
                        raise
                    logger.warning(
                        "Connected account %s cannot receive transfers, using a platform charge",
                        vendor.stripe_connected_account_id,
                    )

        return self.gateway.create_payment_intent(grand_total, "usd", metadata=metadata), None, None

    @transaction.atomic
    def create_checkout_session(self, data):
        """
        ``data`` holds ``shipping_address``, optional ``billing_address``,
        ``use_same_billing_address``, ``shipping_method``, ``customer_notes``
        and ``coupon_codes`` (``[{"shop_id", "code"}]``).
        """
        cart, items = self._load_cart_items()
        items_by_shop = self._group_by_shop(items)
        method = self._resolve_shipping_method(data["shipping_method"], items_by_shop)

        orders = [
            self._create_shop_order(shop_id, shop_items, method, data)
            for shop_id, shop_items in items_by_shop.items()
        ]
        grand_total = money(sum((order.total_amount for order in orders), ZERO))

        intent, connected_account_id, commission_rate = self._create_intent(
            orders,
            grand_total,
            data["shipping_address"].get("email", ""),
        )

        for order in orders:
            Payment.objects.create(
                order=order,
                payment_method=Payment.PaymentMethod.CARD,
                provider=Payment.Provider.STRIPE,
                amount=order.total_amount,
                currency="USD",
                status=Payment.PaymentStatus.PENDING,
                stripe_payment_intent_id=intent["payment_intent_id"],
                stripe_client_secret=intent["client_secret"],
                connected_account_id=connected_account_id or "",
                application_fee_amount=(
                    application_fee_for(order.total_amount, commission_rate)
                    if commission_rate is not None
                    else ZERO
                ),
            )

        cart.items.all().delete()
        checkout_counter.labels(mode="destination" if connected_account_id else "platform").inc()
        logger.info(
            "Checkout created %d order(s) for intent %s, total=%s",
            len(orders),
            intent["payment_intent_id"],
            grand_total,
        )
        return {
            "order_ids": [str(order.id) for order in orders],
            "payment_intent_id": intent["payment_intent_id"],
            "client_secret": intent["client_secret"],
            "total_amount": grand_total,
        }
