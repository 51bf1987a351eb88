"""
Product schemas for request/response validation
"""

from pydantic import BaseModel, Field
from typing import Optional, List
from datetime import datetime
from decimal import Decimal
import uuid


class ProductImageSchema(BaseModel):
    """Product image"""
    url: str = Field(..., max_length=500)
    alt: Optional[str] = Field(None, max_length=255)
    order: int = 0

    class Config:
        from_attributes = True


class ProductCreate(BaseModel):
    """Schema for creating product; slug is generated from name"""
    name: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    price_current: Decimal = Field(..., ge=0)
    price_old: Optional[Decimal] = Field(None, ge=0)
    currency: Optional[str] = Field(None, max_length=10)
    stock: int = Field(default=0, ge=0)
    is_active: bool = True
    images: List[ProductImageSchema] = Field(default=[])


class ProductResponse(BaseModel):
    """Schema for product response"""
    id: uuid.UUID
    name: str
    slug: str
    description: Optional[str] = None
    price_current: Decimal
    price_old: Optional[Decimal] = None
    currency: str
    stock: int
    views: int
    is_active: bool
    images: List[ProductImageSchema] = Field(default=[])
    primary_image: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True
