from .catalog import Category, Product
from .cart import Cart, CartItem
from .customers import CustomerAddress, WishlistItem
from .orders import Order, OrderItem, generate_order_number
from .reviews import ProductReview, ReviewHelpfulVote

__all__ = [
    "Category",
    "Product",
    "Cart",
    "CartItem",
    "CustomerAddress",
    "WishlistItem",
    "Order",
    "OrderItem",
    "generate_order_number",
    "ProductReview",
    "ReviewHelpfulVote",
]
