# Models
from .product import Product
from .order import Order, OrderStatus
from .order_item import OrderItem
from .stock_logs import StockLog, ChangeType
from .review import Review
from .wishlist import WishlistItem

__all__ = [
    "Product",
    "Order",
    "OrderStatus",
    "OrderItem",
    "StockLog",
    "ChangeType",
    "Review",
    "WishlistItem",
]
