"""
Order API routes
"""

from fastapi import APIRouter, BackgroundTasks, Depends, Header, Query, Request, status
from sqlalchemy.ext.asyncio import AsyncSession
from typing import Optional, List
import logging

from backshop.core.database import get_db
from backshop.schemas.order import (
    CheckoutRequest,
    OrderCreate,
    OrderUpdate,
    OrderResponse,
    OrderStatistics,
)
from backshop.services.cart_service import CartService
from backshop.services.notification_dispatcher import dispatch_order_created
from backshop.services.order_service import OrderService

logger = logging.getLogger(__name__)

router = APIRouter()


def _client_info(request: Request) -> dict:
    return {
        "ip_address": request.client.host if request.client else None,
        "user_agent": request.headers.get("user-agent"),
    }


@router.post(
    "/",
    response_model=OrderResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create order",
    description="Create a new order from direct items"
)
async def create_order(
    order_data: OrderCreate,
    request: Request,
    background_tasks: BackgroundTasks,
    x_session_id: Optional[str] = Header(None),
    db: AsyncSession = Depends(get_db)
):
    """Create order; the session cart is removed and the shop notified in the background"""
    order = await OrderService(db).create_order(
        order_data,
        session_id=x_session_id,
        dispatch_notification=False,
        **_client_info(request)
    )
    background_tasks.add_task(dispatch_order_created, order.id)
    return order


@router.post(
    "/checkout",
    response_model=OrderResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Checkout cart",
    description="Create a new order from the current cart"
)
async def checkout(
    checkout_data: CheckoutRequest,
    request: Request,
    background_tasks: BackgroundTasks,
    x_session_id: Optional[str] = Header(None),
    x_user_id: Optional[str] = Header(None),
    db: AsyncSession = Depends(get_db)
):
    """Turn cart lines into an order"""
    cart = await CartService(db).get_or_create_cart(session_id=x_session_id, user_id=x_user_id)
    order = await OrderService(db).checkout_cart(
        cart,
        checkout_data,
        dispatch_notification=False,
        **_client_info(request)
    )
    background_tasks.add_task(dispatch_order_created, order.id)
    return order


@router.get("/", response_model=List[OrderResponse], summary="List orders")
async def list_orders(
    include_cancelled: bool = Query(False),
    db: AsyncSession = Depends(get_db)
):
    """List orders, newest first"""
    return await OrderService(db).find_all(include_cancelled=include_cancelled)


@router.get("/statistics", response_model=OrderStatistics, summary="Order statistics")
async def get_order_statistics(db: AsyncSession = Depends(get_db)):
    return await OrderService(db).get_statistics()


@router.get("/number/{order_number}", response_model=OrderResponse, summary="Get order by number")
async def get_order_by_number(order_number: str, db: AsyncSession = Depends(get_db)):
    return await OrderService(db).find_by_order_number(order_number)


@router.get("/{order_id}", response_model=OrderResponse, summary="Get order")
async def get_order(order_id: str, db: AsyncSession = Depends(get_db)):
    return await OrderService(db).find_one(order_id)


@router.patch("/{order_id}", response_model=OrderResponse, summary="Update order")
async def update_order(
    order_id: str,
    update_data: OrderUpdate,
    db: AsyncSession = Depends(get_db)
):
    """Partially update order, status included"""
    return await OrderService(db).update(order_id, update_data)


@router.delete("/{order_id}", response_model=OrderResponse, summary="Delete order")
async def delete_order(order_id: str, db: AsyncSession = Depends(get_db)):
    return await OrderService(db).remove(order_id)
