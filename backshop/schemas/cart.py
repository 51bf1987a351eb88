"""
Cart schemas for request/response validation
"""

from pydantic import BaseModel, Field
from typing import Optional, List, Dict, Any
from datetime import datetime
from decimal import Decimal
import uuid

from .product import ProductResponse


class CartItemCreate(BaseModel):
    """Schema for adding an item to the cart"""
    product_id: uuid.UUID = Field(..., description="Product ID")
    quantity: int = Field(default=1, ge=1, description="Quantity to add")
    variant: Optional[str] = Field(None, max_length=255, description="Product variant")
    attributes: Optional[Dict[str, Any]] = Field(None, description="Free-form line attributes")


class CartItemUpdate(BaseModel):
    """Schema for updating cart item; zero or less removes the line"""
    quantity: int = Field(..., description="New quantity")


class PromoCodeRequest(BaseModel):
    """Schema for applying a promo code"""
    promo_code: Optional[str] = Field(None, max_length=50)


class CartItemResponse(BaseModel):
    """Cart line joined with the live product"""
    id: uuid.UUID
    product_id: uuid.UUID
    quantity: int
    variant: Optional[str] = None
    attributes: Optional[Dict[str, Any]] = None
    product: Optional[ProductResponse] = None
    line_total: Optional[Decimal] = None


class CartResponse(BaseModel):
    """Schema for cart response"""
    id: uuid.UUID
    session_id: Optional[str] = None
    user_id: Optional[uuid.UUID] = None
    promo_code: Optional[str] = None
    items: List[CartItemResponse]
    item_count: int
    subtotal: Decimal
    expires_at: datetime
