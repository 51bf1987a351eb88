"""Order notification dispatcher"""

from typing import Any, Optional
from decimal import Decimal
from html import escape
import logging
from sqlalchemy.ext.asyncio import AsyncSession

from backshop.core.config import settings
from backshop.core.database import get_db_context
from backshop.core.exceptions import BackshopException, IntegrationConfigurationException
from backshop.models.base import utcnow
from backshop.models.integration import Integration, IntegrationType
from backshop.models.order import Order, OrderStatus, PaymentMethod, DeliveryMethod
from backshop.services.integration_service import IntegrationService
from backshop.services.telegram_service import TelegramService

logger = logging.getLogger(__name__)

PAYMENT_METHOD_LABELS = {
    PaymentMethod.CASH: "Cash",
    PaymentMethod.CARD: "Card",
    PaymentMethod.ONLINE: "Online",
    PaymentMethod.BANK_TRANSFER: "Bank transfer",
}

DELIVERY_METHOD_LABELS = {
    DeliveryMethod.PICKUP: "Pickup",
    DeliveryMethod.COURIER: "Courier",
    DeliveryMethod.POST: "Post",
    DeliveryMethod.EXPRESS: "Express delivery",
}

STATUS_LABELS = {
    OrderStatus.PENDING: "Awaiting processing",
    OrderStatus.CONFIRMED: "Confirmed",
    OrderStatus.PROCESSING: "Processing",
    OrderStatus.SHIPPED: "Shipped",
    OrderStatus.DELIVERED: "Delivered",
    OrderStatus.CANCELLED: "Cancelled",
    OrderStatus.REFUNDED: "Refunded",
}

def _money(value: Any, currency: str) -> str:
    return f"{Decimal(value or 0):.2f} {escape(currency)}"

def _label(labels: dict, value: Any) -> str:
    return labels.get(value, str(getattr(value, "value", value)))

def format_order_message(order: Order) -> str:
    """
    Render an order as an HTML Telegram message

    All customer supplied text is escaped.
    """
    currency = order.currency
    lines = [f"🛒 <b>New order #{escape(order.order_number)}</b>", "", "<b>Items:</b>"]

    for index, item in enumerate(order.items, start=1):
        name = escape(item.product_name)
        if item.variant:
            name += f" ({escape(item.variant)})"
        lines.append(
            f"{index}. <b>{name}</b>\n"
            f"   Quantity: {item.quantity}\n"
            f"   Price: {_money(item.price, currency)}\n"
            f"   Total: {_money(item.total, currency)}"
        )

    customer = order.customer or {}
    lines += [
        "",
        "<b>Customer:</b>",
        f"Name: {escape(customer.get('first_name', ''))} {escape(customer.get('last_name', ''))}",
        f"Email: {escape(customer.get('email', ''))}",
        f"Phone: {escape(customer.get('phone', ''))}",
    ]
    if customer.get("company"):
        lines.append(f"Company: {escape(customer['company'])}")

    address = order.delivery_address
    if address:
        street = escape(address.get("street", ""))
        if address.get("building"):
            street += f", {escape(address['building'])}"
        if address.get("apartment"):
            street += f", apt. {escape(address['apartment'])}"
        lines += [
            "",
            "<b>Delivery address:</b>",
            f"{escape(address.get('country', ''))}, {escape(address.get('city', ''))}",
            street,
        ]
        if address.get("postal_code"):
            lines.append(f"Postal code: {escape(address['postal_code'])}")
        if address.get("notes"):
            lines.append(f"Note: {escape(address['notes'])}")

    lines += [
        "",
        f"<b>Payment:</b> {_label(PAYMENT_METHOD_LABELS, order.payment_method)}",
        f"<b>Delivery:</b> {_label(DELIVERY_METHOD_LABELS, order.delivery_method)}",
        "",
        "<b>Amount:</b>",
        f"Items: {_money(order.subtotal, currency)}",
    ]
    if Decimal(order.discount or 0) > 0:
        lines.append(f"Discount: -{_money(order.discount, currency)}")
    lines += [
        f"Delivery: {_money(order.delivery_cost, currency)}",
        f"<b>Total: {_money(order.total, currency)}</b>",
    ]

    if order.notes:
        lines += ["", f"<b>Comment:</b> {escape(order.notes)}"]
    if order.promo_code:
        lines += ["", f"<b>Promo code:</b> {escape(order.promo_code)}"]

    lines += ["", f"Status: {_label(STATUS_LABELS, order.status)}"]
    return "\n".join(lines)

class NotificationDispatcher:
    """Sends order events to the configured messaging integration"""

    def __init__(self, db: AsyncSession, telegram_service: Optional[TelegramService] = None):
        self.db = db
        self.integration_service = IntegrationService(db)
        self.telegram_service = telegram_service or TelegramService()

    async def notify_order_created(self, order: Order) -> bool:
        """
        Announce a new order

        Never raises for missing or failing integrations: the outcome is
        logged and recorded on the integration instead.

        Args:
            order: Persisted order

        Returns:
            True if the message was delivered
        """
        try:
            integration_type = IntegrationType(settings.ORDER_NOTIFICATION_INTEGRATION)
        except ValueError:
            logger.error(
                f"Unknown notification integration type: {settings.ORDER_NOTIFICATION_INTEGRATION}"
            )
            return False

        try:
            integration = await self.integration_service.resolve_active(integration_type)
        except IntegrationConfigurationException as e:
            logger.error(f"Order {order.order_number} not announced: {e.detail}")
            return False

        if not integration:
            logger.warning(f"No active {integration_type.value} integration found")
            return False

        target = (integration.settings or {}).get("group_id") or integration.chat_id
        if not target:
            logger.warning(f"No chat ID or group ID configured for integration '{integration.name}'")
            return False

        try:
            await self._send(integration, target, format_order_message(order))
        except BackshopException as e:
            logger.error(f"Failed to send order {order.order_number} to '{integration.name}': {e.detail}")
            await self.integration_service.record_error(integration, e.detail)
            return False

        order.is_sent_to_notification = True
        order.sent_to_notification_at = utcnow()
        # Commits the order flag together with the usage counters
        await self.integration_service.record_usage(integration)

        logger.info(f"Order {order.order_number} sent to '{integration.name}'")
        return True

    async def _send(self, integration: Integration, target: str, message: str) -> None:
        if integration.type == IntegrationType.TELEGRAM:
            await self.telegram_service.send_message(integration, message, chat_id=target)
            return

        raise BackshopException(
            status_code=501,
            detail=f"Sending messages via {integration.type.value} is not supported",
            error_code="UNSUPPORTED_INTEGRATION"
        )

async def dispatch_order_created(order_id: Any) -> None:
    """Announce an order from a background task with its own session"""
    async with get_db_context() as db:
        order = await db.get(Order, order_id)
        if not order:
            logger.warning(f"Order {order_id} vanished before notification")
            return
        await NotificationDispatcher(db).notify_order_created(order)
