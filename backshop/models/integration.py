"""Third-party messaging integration model"""

from sqlalchemy import Column, String, Integer, Boolean, Text, Enum, DateTime, JSON, Index
import enum

from .base import Base, TimestampedModel, UUIDModel

class IntegrationType(str, enum.Enum):
    FACEBOOK = "facebook"
    TELEGRAM = "telegram"
    INSTAGRAM = "instagram"
    WHATSAPP = "whatsapp"
    VIBER = "viber"
    EMAIL = "email"
    SMS = "sms"
    CUSTOM = "custom"

class IntegrationStatus(str, enum.Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"
    ERROR = "error"

class Integration(Base, TimestampedModel, UUIDModel):
    """Configured messaging integration with usage statistics"""

    __tablename__ = "integrations"

    type = Column(Enum(IntegrationType), nullable=False, index=True)
    name = Column(String(100), nullable=False)
    description = Column(Text, nullable=True)
    status = Column(Enum(IntegrationStatus), nullable=False, default=IntegrationStatus.INACTIVE)

    # Credentials
    token = Column(String(500), nullable=True)
    bot_token = Column(String(500), nullable=True)
    chat_id = Column(String(100), nullable=True)
    api_key = Column(String(500), nullable=True)
    api_secret = Column(String(500), nullable=True)
    tracking_url = Column(String(500), nullable=True)
    postback_url = Column(String(500), nullable=True)
    settings = Column(JSON, nullable=True)
    credentials = Column(JSON, nullable=True)

    is_active = Column(Boolean, nullable=False, default=True)
    # Higher priority wins when several integrations of one type are active
    priority = Column(Integer, nullable=False, default=0)

    # Usage statistics
    usage_count = Column(Integer, nullable=False, default=0)
    last_used_at = Column(DateTime(timezone=True), nullable=True)
    last_error = Column(Text, nullable=True)
    last_error_at = Column(DateTime(timezone=True), nullable=True)

    __table_args__ = (
        Index("idx_integrations_type_active", "type", "is_active"),
    )
