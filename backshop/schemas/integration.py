"""
Integration schemas for request/response validation
"""

from pydantic import BaseModel, Field
from typing import Optional, Dict, Any
from datetime import datetime
import uuid

from backshop.models.integration import IntegrationType, IntegrationStatus


class IntegrationCreate(BaseModel):
    """Schema for creating integration"""
    type: IntegrationType
    name: str = Field(..., min_length=1, max_length=100)
    description: Optional[str] = None
    status: IntegrationStatus = IntegrationStatus.INACTIVE
    token: Optional[str] = Field(None, max_length=500)
    bot_token: Optional[str] = Field(None, max_length=500)
    chat_id: Optional[str] = Field(None, max_length=100)
    api_key: Optional[str] = Field(None, max_length=500)
    api_secret: Optional[str] = Field(None, max_length=500)
    tracking_url: Optional[str] = Field(None, max_length=500)
    postback_url: Optional[str] = Field(None, max_length=500)
    settings: Optional[Dict[str, Any]] = None
    credentials: Optional[Dict[str, Any]] = None
    is_active: bool = True
    priority: int = 0


class IntegrationUpdate(BaseModel):
    """Schema for updating integration"""
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    description: Optional[str] = None
    status: Optional[IntegrationStatus] = None
    token: Optional[str] = Field(None, max_length=500)
    bot_token: Optional[str] = Field(None, max_length=500)
    chat_id: Optional[str] = Field(None, max_length=100)
    api_key: Optional[str] = Field(None, max_length=500)
    api_secret: Optional[str] = Field(None, max_length=500)
    tracking_url: Optional[str] = Field(None, max_length=500)
    postback_url: Optional[str] = Field(None, max_length=500)
    settings: Optional[Dict[str, Any]] = None
    credentials: Optional[Dict[str, Any]] = None
    is_active: Optional[bool] = None
    priority: Optional[int] = None


class IntegrationResponse(BaseModel):
    """Schema for integration response; secrets are not echoed"""
    id: uuid.UUID
    type: IntegrationType
    name: str
    description: Optional[str] = None
    status: IntegrationStatus
    chat_id: Optional[str] = None
    tracking_url: Optional[str] = None
    postback_url: Optional[str] = None
    settings: Optional[Dict[str, Any]] = None
    is_active: bool
    priority: int
    usage_count: int
    last_used_at: Optional[datetime] = None
    last_error: Optional[str] = None
    last_error_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class IntegrationStatistics(BaseModel):
    """Aggregate integration statistics"""
    total: int
    active: int
    by_type: Dict[str, int]
    inactive: int
