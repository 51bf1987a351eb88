"""
Order service layer
Turns carts or explicit item lists into persisted orders
"""

from typing import List, Dict, Any, Optional
from decimal import Decimal
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func, inspect
from sqlalchemy.exc import IntegrityError
import logging
import random
import time

from backshop.core.config import settings
from backshop.core.exceptions import (
    NotFoundException,
    BadRequestException,
    ConflictException,
    PartialProductMismatchException,
    parse_uuid,
)
from backshop.models.cart import Cart
from backshop.models.order import Order, OrderItem, OrderStatus
from backshop.schemas.order import OrderCreate, OrderItemCreate, OrderUpdate, CheckoutRequest
from backshop.services.cart_service import CartService
from backshop.services.notification_dispatcher import NotificationDispatcher
from backshop.services.product_service import ProductService

logger = logging.getLogger(__name__)

class OrderService:
    """Order creation and management"""

    def __init__(self, db: AsyncSession, dispatcher: Optional[NotificationDispatcher] = None):
        self.db = db
        self.product_service = ProductService(db)
        self.dispatcher = dispatcher or NotificationDispatcher(db)

    def generate_order_number(self) -> str:
        """Generate human readable order number: ORD-<epoch millis>-<0..999>"""
        timestamp = int(time.time() * 1000)
        return f"{settings.ORDER_NUMBER_PREFIX}-{timestamp}-{random.randint(0, 999)}"

    async def create_order(
        self,
        order_data: OrderCreate,
        session_id: Optional[str] = None,
        ip_address: Optional[str] = None,
        user_agent: Optional[str] = None,
        dispatch_notification: bool = True
    ) -> Order:
        """
        Create order from explicit items

        Args:
            order_data: Items, customer and pricing adjustments
            session_id: Session whose cart is deleted after the order is stored
            ip_address: Client IP
            user_agent: Client user agent
            dispatch_notification: Send the order notification before returning;
                callers scheduling it in the background pass False

        Returns:
            Persisted order in pending state

        Raises:
            PartialProductMismatchException: If any requested product does not exist
            ConflictException: If no free order number could be allocated
        """
        requested_ids = {item.product_id for item in order_data.items}
        products = await self.product_service.get_by_ids(requested_ids)

        if len(products) != len(requested_ids):
            missing = sorted((pid for pid in requested_ids if pid not in products), key=str)
            logger.warning(f"Order rejected, unknown products: {missing}")
            raise PartialProductMismatchException(missing)

        items = []
        subtotal = Decimal("0")
        for position, requested in enumerate(order_data.items):
            product = products[requested.product_id]
            price = Decimal(product.price_current)
            total = price * requested.quantity
            subtotal += total

            items.append(
                OrderItem(
                    position=position,
                    product_id=product.id,
                    product_name=product.name,
                    product_slug=product.slug,
                    product_image=product.primary_image,
                    quantity=requested.quantity,
                    price=price,
                    discount=Decimal("0"),
                    total=total,
                    variant=requested.variant,
                    attributes=requested.attributes or {},
                )
            )

        discount = order_data.discount or Decimal("0")
        delivery_cost = order_data.delivery_cost or Decimal("0")

        order = Order(
            items=items,
            customer=order_data.customer.model_dump(),
            delivery_address=(
                order_data.delivery_address.model_dump() if order_data.delivery_address else None
            ),
            status=OrderStatus.PENDING,
            payment_method=order_data.payment_method,
            delivery_method=order_data.delivery_method,
            subtotal=subtotal,
            discount=discount,
            delivery_cost=delivery_cost,
            total=subtotal - discount + delivery_cost,
            currency=order_data.currency or settings.DEFAULT_CURRENCY,
            notes=order_data.notes,
            promo_code=order_data.promo_code,
            ip_address=ip_address,
            user_agent=user_agent,
            is_paid=False,
            is_sent_to_notification=False,
        )

        await self._insert_with_unique_number(order)
        logger.info(f"Order {order.order_number} created, total {order.total} {order.currency}")

        order_id = order.id
        if dispatch_notification:
            await self.notify(order)

        if session_id:
            await self._delete_session_cart(session_id)

        if inspect(order).expired_attributes:
            # A rollback in the side effects above expired the stored order
            order = await self._reload(order_id)

        return order

    async def checkout_cart(
        self,
        cart: Cart,
        checkout_data: CheckoutRequest,
        ip_address: Optional[str] = None,
        user_agent: Optional[str] = None,
        dispatch_notification: bool = True
    ) -> Order:
        """
        Create order from the lines of a cart

        The cart promo code is used when the request carries none. A session
        cart is deleted once the order is stored.

        Raises:
            BadRequestException: If the cart is empty
        """
        if not cart.items:
            raise BadRequestException("Cart is empty", error_code="EMPTY_CART")

        fields = checkout_data.model_dump()
        if not fields.get("promo_code"):
            fields["promo_code"] = cart.promo_code

        order_data = OrderCreate(
            **fields,
            items=[
                OrderItemCreate(
                    product_id=item.product_id,
                    quantity=item.quantity,
                    variant=item.variant,
                    attributes=item.attributes,
                )
                for item in cart.items
            ],
        )

        return await self.create_order(
            order_data,
            session_id=cart.session_id,
            ip_address=ip_address,
            user_agent=user_agent,
            dispatch_notification=dispatch_notification,
        )

    async def notify(self, order: Order) -> bool:
        """Send order notification; failures are logged, never raised"""
        try:
            return await self.dispatcher.notify_order_created(order)
        except Exception as e:
            logger.error(f"Notification for order {order.order_number} failed: {str(e)}")
            await self.db.rollback()
            return False

    async def find_all(self, include_cancelled: bool = False) -> List[Order]:
        """Get orders, newest first"""
        stmt = select(Order)
        if not include_cancelled:
            stmt = stmt.where(Order.status != OrderStatus.CANCELLED)
        stmt = stmt.order_by(Order.created_at.desc())

        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def find_one(self, order_id: Any) -> Order:
        """Get order by ID"""
        order = await self.db.get(Order, parse_uuid(order_id, "order id"))
        if not order:
            raise NotFoundException(f"Order with ID {order_id} not found")
        return order

    async def find_by_order_number(self, order_number: str) -> Order:
        """Get order by its human readable number"""
        result = await self.db.execute(
            select(Order).where(Order.order_number == order_number)
        )
        order = result.scalar_one_or_none()
        if not order:
            raise NotFoundException(f"Order {order_number} not found")
        return order

    async def update(self, order_id: Any, update_data: OrderUpdate) -> Order:
        """
        Partially update order

        Any status may be set from any other status.
        """
        order = await self.find_one(order_id)

        for key, value in update_data.model_dump(exclude_unset=True).items():
            if value is None and key not in ("delivery_address", "notes"):
                continue
            setattr(order, key, value)

        await self.db.commit()
        logger.info(f"Order {order.order_number} updated")
        return order

    async def remove(self, order_id: Any) -> Order:
        """Delete order"""
        order = await self.find_one(order_id)
        await self.db.delete(order)
        await self.db.commit()

        logger.info(f"Order {order.order_number} deleted")
        return order

    async def get_statistics(self) -> Dict[str, Any]:
        """
        Order statistics

        Revenue counts paid orders only; the average spreads it over all orders.
        """
        result = await self.db.execute(
            select(Order.status, func.count()).group_by(Order.status)
        )
        by_status = {row[0].value: row[1] for row in result.all()}
        total = sum(by_status.values())

        result = await self.db.execute(
            select(Order.total).where(Order.is_paid.is_(True))
        )
        total_revenue = sum((Decimal(value) for value in result.scalars().all()), Decimal("0"))

        average = (total_revenue / total).quantize(Decimal("0.01")) if total else Decimal("0")

        return {
            "total": total,
            "by_status": by_status,
            "total_revenue": total_revenue,
            "average_order_value": average,
        }

    async def _insert_with_unique_number(self, order: Order) -> None:
        """Persist order, retrying with a fresh number on collision"""
        for attempt in range(1, settings.ORDER_NUMBER_MAX_ATTEMPTS + 1):
            candidate = self.generate_order_number()
            if await self._order_number_exists(candidate):
                logger.warning(f"Order number {candidate} taken, attempt {attempt}")
                continue

            order.order_number = candidate
            self.db.add(order)
            try:
                await self.db.commit()
                return
            except IntegrityError:
                # Lost a race for the same number
                await self.db.rollback()
                logger.warning(f"Order number {candidate} collided on insert, attempt {attempt}")

        raise ConflictException(
            "Could not allocate a unique order number, please retry",
            error_code="ORDER_NUMBER_EXHAUSTED"
        )

    async def _reload(self, order_id) -> Order:
        result = await self.db.execute(
            select(Order)
            .where(Order.id == order_id)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one()

    async def _order_number_exists(self, order_number: str) -> bool:
        result = await self.db.execute(
            select(func.count()).select_from(Order).where(Order.order_number == order_number)
        )
        return (result.scalar() or 0) > 0

    async def _delete_session_cart(self, session_id: str) -> None:
        try:
            await CartService(self.db).delete_session_cart(session_id)
        except Exception as e:
            # The order stands even if the cart survives
            logger.warning(f"Could not delete cart for session {session_id}: {str(e)}")
            await self.db.rollback()
