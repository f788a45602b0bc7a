# Central models file so every table is registered on Base.metadata
# before create_all runs.

from .core import Base

from ..users.models import User
from ..products.models import Product, ProductCategory
from ..cart.models import CartLine
from ..orders.models import Order, OrderLine
from ..reviews.models import Review

__all__ = [
    "Base",
    "User",
    "Product",
    "ProductCategory",
    "CartLine",
    "Order",
    "OrderLine",
    "Review",
]
