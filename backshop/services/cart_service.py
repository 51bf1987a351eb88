"""
Cart service layer
Handles shopping cart business logic
"""

from dataclasses import dataclass, field
from typing import List, Optional, Dict, Any
from decimal import Decimal
from datetime import datetime, timedelta, timezone
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm.exc import StaleDataError
import logging
import uuid

from backshop.core.config import settings
from backshop.core.exceptions import (
    NotFoundException,
    ConflictException,
    InvalidKeyException,
)
from backshop.models.base import utcnow
from backshop.models.cart import Cart, CartItem
from backshop.models.product import Product
from backshop.services.product_service import ProductService

logger = logging.getLogger(__name__)

def _as_utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes; everything is stored in UTC
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value

@dataclass
class CartLineView:
    """Cart line joined with the live product (None when it no longer exists)"""
    item: CartItem
    product: Optional[Product]

    @property
    def line_total(self) -> Optional[Decimal]:
        if self.product is None:
            return None
        return Decimal(self.product.price_current) * self.item.quantity

@dataclass
class CartView:
    """Read view of a cart priced against current products"""
    cart: Cart
    lines: List[CartLineView] = field(default_factory=list)
    subtotal: Decimal = Decimal("0")

    @property
    def item_count(self) -> int:
        return sum(line.item.quantity for line in self.lines)

class CartService:
    """Shopping cart service"""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.product_service = ProductService(db)

    async def get_or_create_cart(
        self,
        session_id: Optional[str] = None,
        user_id: Optional[Any] = None
    ) -> Cart:
        """
        Get cart for user or session, creating an empty one when missing

        Args:
            session_id: Session ID for anonymous users
            user_id: User ID for authenticated users

        Returns:
            Cart with its lines loaded

        Raises:
            InvalidKeyException: If not exactly one key is given or user_id is malformed
        """
        if bool(session_id) == bool(user_id):
            raise InvalidKeyException()

        if user_id:
            try:
                user_id = user_id if isinstance(user_id, uuid.UUID) else uuid.UUID(str(user_id))
            except ValueError:
                raise InvalidKeyException(f"Invalid user_id: {user_id}")
            condition = Cart.user_id == user_id
        else:
            condition = Cart.session_id == session_id

        cart = await self._find_cart(condition)
        if cart and _as_utc(cart.expires_at) <= utcnow():
            logger.info(f"Discarding expired cart {cart.id}")
            await self.db.delete(cart)
            await self.db.commit()
            cart = None

        if cart:
            return cart

        now = utcnow()
        cart = Cart(
            session_id=session_id if not user_id else None,
            user_id=user_id or None,
            expires_at=now + timedelta(days=settings.CART_TTL_DAYS),
            items=[],
        )
        self.db.add(cart)
        try:
            await self.db.commit()
        except IntegrityError:
            # Another request created the cart first
            await self.db.rollback()
            cart = await self._find_cart(condition)
            if not cart:
                raise
        return cart

    async def add_item(
        self,
        cart: Cart,
        product_id: Any,
        quantity: int,
        variant: Optional[str] = None,
        attributes: Optional[Dict[str, Any]] = None
    ) -> Cart:
        """
        Add product to cart, merging with an existing line of the same variant

        Args:
            cart: Cart to modify
            product_id: Product to add
            quantity: Quantity to add (validated by the caller to be >= 1)
            variant: Optional variant; lines match on (product, variant)
            attributes: Free-form attributes stored on a new line

        Returns:
            Updated cart

        Raises:
            NotFoundException: If the product does not exist
        """
        product = await self.product_service.get_product(product_id)

        existing = next(
            (
                item for item in cart.items
                if item.product_id == product.id and item.variant == variant
            ),
            None
        )

        if existing:
            existing.quantity += quantity
        else:
            cart.items.append(
                CartItem(
                    product_id=product.id,
                    quantity=quantity,
                    variant=variant,
                    attributes=attributes or {},
                )
            )

        await self._save(cart)
        return cart

    async def update_item(self, cart: Cart, item_id: Any, quantity: int) -> Cart:
        """
        Set line quantity; zero or less removes the line

        Raises:
            NotFoundException: If the line is not in the cart
        """
        item = self._find_item(cart, item_id)
        if not item:
            raise NotFoundException("Item not found in cart")

        if quantity <= 0:
            cart.items.remove(item)
        else:
            item.quantity = quantity

        await self._save(cart)
        return cart

    async def remove_item(self, cart: Cart, item_id: Any) -> Cart:
        """Remove line from cart; absent lines are ignored"""
        item = self._find_item(cart, item_id)
        if not item:
            return cart

        cart.items.remove(item)
        await self._save(cart)
        return cart

    async def clear_cart(self, cart: Cart) -> Cart:
        """Remove all lines, keeping the cart itself"""
        cart.items.clear()
        await self._save(cart)
        return cart

    async def apply_promo_code(self, cart: Cart, promo_code: Optional[str]) -> Cart:
        """Store promo code on the cart (None clears it)"""
        cart.promo_code = promo_code or None
        await self._save(cart)
        return cart

    async def get_cart_with_products(self, cart: Cart) -> CartView:
        """
        Join cart lines with current products

        Lines whose product no longer exists are kept with ``product=None``
        and do not count towards the subtotal.
        """
        products = await self.product_service.get_by_ids(item.product_id for item in cart.items)

        view = CartView(cart=cart)
        for item in cart.items:
            line = CartLineView(item=item, product=products.get(item.product_id))
            if line.line_total is not None:
                view.subtotal += line.line_total
            view.lines.append(line)

        return view

    async def delete_session_cart(self, session_id: str) -> bool:
        """
        Delete the cart of a session

        Returns:
            True if a cart was deleted
        """
        cart = await self._find_cart(Cart.session_id == session_id)
        if not cart:
            return False

        await self.db.delete(cart)
        try:
            await self.db.commit()
        except StaleDataError:
            # Deleted or modified by a concurrent request
            await self.db.rollback()
            return False

        logger.info(f"Deleted cart for session {session_id}")
        return True

    async def purge_expired_carts(self, now: Optional[datetime] = None) -> int:
        """
        Delete carts past their expiry

        Returns:
            Number of carts deleted
        """
        now = now or utcnow()
        result = await self.db.execute(select(Cart).where(Cart.expires_at <= now))
        carts = result.scalars().all()

        for cart in carts:
            await self.db.delete(cart)
        await self.db.commit()

        return len(carts)

    async def _find_cart(self, condition) -> Optional[Cart]:
        result = await self.db.execute(select(Cart).where(condition))
        return result.scalar_one_or_none()

    def _find_item(self, cart: Cart, item_id: Any) -> Optional[CartItem]:
        try:
            item_id = item_id if isinstance(item_id, uuid.UUID) else uuid.UUID(str(item_id))
        except ValueError:
            return None
        return next((item for item in cart.items if item.id == item_id), None)

    async def _save(self, cart: Cart) -> None:
        """Persist cart changes, failing on a concurrent modification"""
        cart_id = cart.id
        cart.touch()
        try:
            await self.db.commit()
        except StaleDataError:
            # Rollback expires the cart, so only the id read above is safe to use
            await self.db.rollback()
            logger.warning(f"Concurrent modification of cart {cart_id}")
            raise ConflictException(
                "Cart was modified by another request, reload and retry",
                error_code="CART_CONFLICT"
            )
