"""
Order schemas for request/response validation
"""

from pydantic import BaseModel, EmailStr, Field
from typing import Optional, List, Dict, Any
from datetime import datetime
from decimal import Decimal
import uuid

from backshop.models.order import OrderStatus, PaymentMethod, DeliveryMethod


class CustomerInfo(BaseModel):
    """Customer contact block"""
    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)
    email: EmailStr
    phone: str = Field(..., min_length=3, max_length=50)
    company: Optional[str] = Field(None, max_length=200)


class DeliveryAddress(BaseModel):
    """Delivery address block"""
    country: str = Field(..., max_length=100)
    city: str = Field(..., max_length=100)
    street: str = Field(..., max_length=255)
    building: str = Field(..., max_length=50)
    apartment: Optional[str] = Field(None, max_length=50)
    postal_code: Optional[str] = Field(None, max_length=20)
    notes: Optional[str] = Field(None, max_length=1000)


class OrderItemCreate(BaseModel):
    """Requested order line"""
    product_id: uuid.UUID
    quantity: int = Field(..., ge=1)
    variant: Optional[str] = Field(None, max_length=255)
    attributes: Optional[Dict[str, Any]] = None


class CheckoutRequest(BaseModel):
    """Order details shared by direct orders and cart checkout"""
    customer: CustomerInfo
    delivery_address: Optional[DeliveryAddress] = None
    payment_method: PaymentMethod
    delivery_method: DeliveryMethod
    discount: Decimal = Field(default=Decimal("0"), ge=0)
    delivery_cost: Decimal = Field(default=Decimal("0"), ge=0)
    promo_code: Optional[str] = Field(None, max_length=50)
    notes: Optional[str] = Field(None, max_length=2000)
    currency: Optional[str] = Field(None, max_length=10)


class OrderCreate(CheckoutRequest):
    """Schema for creating an order from explicit items"""
    items: List[OrderItemCreate] = Field(..., min_length=1)


class OrderUpdate(BaseModel):
    """Schema for partial order updates"""
    status: Optional[OrderStatus] = None
    is_paid: Optional[bool] = None
    customer: Optional[CustomerInfo] = None
    delivery_address: Optional[DeliveryAddress] = None
    payment_method: Optional[PaymentMethod] = None
    delivery_method: Optional[DeliveryMethod] = None
    notes: Optional[str] = Field(None, max_length=2000)


class OrderItemResponse(BaseModel):
    """Order line snapshot"""
    product_id: uuid.UUID
    product_name: str
    product_slug: str
    product_image: Optional[str] = None
    quantity: int
    price: Decimal
    discount: Decimal
    total: Decimal
    variant: Optional[str] = None
    attributes: Optional[Dict[str, Any]] = None

    class Config:
        from_attributes = True


class OrderResponse(BaseModel):
    """Schema for order response"""
    id: uuid.UUID
    order_number: str
    items: List[OrderItemResponse]
    customer: Dict[str, Any]
    delivery_address: Optional[Dict[str, Any]] = None
    status: OrderStatus
    payment_method: PaymentMethod
    delivery_method: DeliveryMethod
    subtotal: Decimal
    discount: Decimal
    delivery_cost: Decimal
    total: Decimal
    currency: str
    notes: Optional[str] = None
    promo_code: Optional[str] = None
    is_paid: bool
    is_sent_to_notification: bool
    sent_to_notification_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class OrderStatistics(BaseModel):
    """Aggregate order statistics"""
    total: int
    by_status: Dict[str, int]
    total_revenue: Decimal
    average_order_value: Decimal
