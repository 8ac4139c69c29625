from .base import TimestampMixin
from .customer import Customer
from .product import Product, UNITS
from .location import Location
from .order import OrderHeader, OrderItem

__all__ = [
    # Base
    "TimestampMixin",
    # Customer
    "Customer",
    # Product
    "Product", "UNITS",
    # Location
    "Location",
    # Order
    "OrderHeader", "OrderItem",
]
