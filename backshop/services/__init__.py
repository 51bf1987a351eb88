"""Services package"""

from .product_service import ProductService
from .cart_service import CartService
from .menu_service import MenuService
from .integration_service import IntegrationService
from .telegram_service import TelegramService
from .notification_dispatcher import NotificationDispatcher
from .order_service import OrderService

__all__ = [
    "ProductService",
    "CartService",
    "MenuService",
    "IntegrationService",
    "TelegramService",
    "NotificationDispatcher",
    "OrderService"
]
