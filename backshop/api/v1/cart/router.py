"""Cart router keyed by session or user header"""

from fastapi import APIRouter, Depends, Header
from sqlalchemy.ext.asyncio import AsyncSession
from typing import Optional

from backshop.core.database import get_db
from backshop.models.cart import Cart
from backshop.schemas.cart import (
    CartItemCreate,
    CartItemUpdate,
    CartItemResponse,
    CartResponse,
    PromoCodeRequest,
)
from backshop.schemas.product import ProductResponse
from backshop.services.cart_service import CartService, CartView

router = APIRouter()


async def get_current_cart(
    x_session_id: Optional[str] = Header(None),
    x_user_id: Optional[str] = Header(None),
    db: AsyncSession = Depends(get_db)
) -> Cart:
    """Resolve the cart from X-Session-Id or X-User-Id"""
    return await CartService(db).get_or_create_cart(session_id=x_session_id, user_id=x_user_id)


def cart_to_response(view: CartView) -> CartResponse:
    """Convert priced cart view to response"""
    cart = view.cart
    return CartResponse(
        id=cart.id,
        session_id=cart.session_id,
        user_id=cart.user_id,
        promo_code=cart.promo_code,
        items=[
            CartItemResponse(
                id=line.item.id,
                product_id=line.item.product_id,
                quantity=line.item.quantity,
                variant=line.item.variant,
                attributes=line.item.attributes,
                product=ProductResponse.model_validate(line.product) if line.product else None,
                line_total=line.line_total,
            )
            for line in view.lines
        ],
        item_count=view.item_count,
        subtotal=view.subtotal,
        expires_at=cart.expires_at,
    )


@router.get("/", response_model=CartResponse)
async def get_cart(
    cart: Cart = Depends(get_current_cart),
    db: AsyncSession = Depends(get_db)
):
    """Get cart priced with current products"""
    service = CartService(db)
    return cart_to_response(await service.get_cart_with_products(cart))


@router.post("/items", response_model=CartResponse)
async def add_to_cart(
    item_data: CartItemCreate,
    cart: Cart = Depends(get_current_cart),
    db: AsyncSession = Depends(get_db)
):
    """Add item to cart"""
    service = CartService(db)
    cart = await service.add_item(
        cart,
        product_id=item_data.product_id,
        quantity=item_data.quantity,
        variant=item_data.variant,
        attributes=item_data.attributes
    )
    return cart_to_response(await service.get_cart_with_products(cart))


@router.patch("/items/{item_id}", response_model=CartResponse)
async def update_cart_item(
    item_id: str,
    update_data: CartItemUpdate,
    cart: Cart = Depends(get_current_cart),
    db: AsyncSession = Depends(get_db)
):
    """Update cart item quantity; zero or less removes the item"""
    service = CartService(db)
    cart = await service.update_item(cart, item_id, update_data.quantity)
    return cart_to_response(await service.get_cart_with_products(cart))


@router.delete("/items/{item_id}", response_model=CartResponse)
async def remove_from_cart(
    item_id: str,
    cart: Cart = Depends(get_current_cart),
    db: AsyncSession = Depends(get_db)
):
    """Remove item from cart"""
    service = CartService(db)
    cart = await service.remove_item(cart, item_id)
    return cart_to_response(await service.get_cart_with_products(cart))


@router.delete("/", response_model=CartResponse)
async def clear_cart(
    cart: Cart = Depends(get_current_cart),
    db: AsyncSession = Depends(get_db)
):
    """Remove all items from cart"""
    service = CartService(db)
    cart = await service.clear_cart(cart)
    return cart_to_response(await service.get_cart_with_products(cart))


@router.put("/promo-code", response_model=CartResponse)
async def apply_promo_code(
    promo_data: PromoCodeRequest,
    cart: Cart = Depends(get_current_cart),
    db: AsyncSession = Depends(get_db)
):
    """Set or clear the cart promo code"""
    service = CartService(db)
    cart = await service.apply_promo_code(cart, promo_data.promo_code)
    return cart_to_response(await service.get_cart_with_products(cart))
