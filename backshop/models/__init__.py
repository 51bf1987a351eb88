"""Models package initialization"""

from .base import Base
from .product import Product, ProductImage
from .cart import Cart, CartItem
from .order import Order, OrderItem, OrderStatus, PaymentMethod, DeliveryMethod
from .menu import Menu
from .integration import Integration, IntegrationType, IntegrationStatus

# Export all models
__all__ = [
    "Base",
    "Product",
    "ProductImage",
    "Cart",
    "CartItem",
    "Order",
    "OrderItem",
    "OrderStatus",
    "PaymentMethod",
    "DeliveryMethod",
    "Menu",
    "Integration",
    "IntegrationType",
    "IntegrationStatus",
]
