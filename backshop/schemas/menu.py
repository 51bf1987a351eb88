"""
Menu schemas for request/response validation
"""

from pydantic import BaseModel, Field
from typing import Optional, List
from datetime import datetime
import uuid


class MenuBase(BaseModel):
    """Base schema for menu items"""
    name: str = Field(..., min_length=1, max_length=100, description="Menu item name")
    parent_id: Optional[uuid.UUID] = Field(None, description="Parent menu item ID")
    order: int = Field(default=0, description="Sibling order for sorting")
    is_active: bool = Field(default=True, description="Whether the item is shown")
    url: Optional[str] = Field(None, max_length=500)
    icon: Optional[str] = Field(None, max_length=255)
    description: Optional[str] = Field(None, max_length=1000)
    type: str = Field(default="link", max_length=50)
    is_new_tab: bool = Field(default=False)


class MenuCreate(MenuBase):
    """Schema for creating menu item; slug is generated from name when omitted"""
    slug: Optional[str] = Field(None, max_length=100)


class MenuUpdate(BaseModel):
    """Schema for updating menu item"""
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    slug: Optional[str] = Field(None, max_length=100)
    parent_id: Optional[uuid.UUID] = None
    order: Optional[int] = None
    is_active: Optional[bool] = None
    url: Optional[str] = Field(None, max_length=500)
    icon: Optional[str] = Field(None, max_length=255)
    description: Optional[str] = Field(None, max_length=1000)
    type: Optional[str] = Field(None, max_length=50)
    is_new_tab: Optional[bool] = None


class MenuResponse(MenuBase):
    """Schema for menu item response"""
    id: uuid.UUID
    slug: str
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class MenuTreeResponse(MenuResponse):
    """Schema for menu item with nested children"""
    children: List['MenuTreeResponse'] = Field(default=[])


MenuTreeResponse.model_rebuild()
