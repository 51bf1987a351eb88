"""Order model with immutable item snapshots"""

from sqlalchemy import Column, String, Numeric, Integer, Enum, ForeignKey, Index, Text, DateTime, Boolean, JSON, Uuid
from sqlalchemy.orm import relationship
import enum

from .base import Base, TimestampedModel, UUIDModel

class OrderStatus(str, enum.Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    PROCESSING = "processing"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"
    REFUNDED = "refunded"

class PaymentMethod(str, enum.Enum):
    CASH = "cash"
    CARD = "card"
    ONLINE = "online"
    BANK_TRANSFER = "bank_transfer"

class DeliveryMethod(str, enum.Enum):
    PICKUP = "pickup"
    COURIER = "courier"
    POST = "post"
    EXPRESS = "express"

class Order(Base, TimestampedModel, UUIDModel):
    """Customer order"""

    __tablename__ = "orders"

    # Order identification
    order_number = Column(String(50), unique=True, nullable=False, index=True)

    # Customer and address snapshots
    customer = Column(JSON, nullable=False)
    delivery_address = Column(JSON, nullable=True)

    # Status
    status = Column(Enum(OrderStatus), default=OrderStatus.PENDING, nullable=False, index=True)
    payment_method = Column(Enum(PaymentMethod), nullable=False)
    delivery_method = Column(Enum(DeliveryMethod), nullable=False)
    is_paid = Column(Boolean, nullable=False, default=False)

    # Amounts
    subtotal = Column(Numeric(10, 2), nullable=False)
    discount = Column(Numeric(10, 2), nullable=False, default=0)
    delivery_cost = Column(Numeric(10, 2), nullable=False, default=0)
    total = Column(Numeric(10, 2), nullable=False)
    currency = Column(String(10), nullable=False, default="zł")

    # Extra info
    notes = Column(Text, nullable=True)
    promo_code = Column(String(50), nullable=True)
    ip_address = Column(String(45), nullable=True)
    user_agent = Column(String(500), nullable=True)

    # Notification tracking
    is_sent_to_notification = Column(Boolean, nullable=False, default=False)
    sent_to_notification_at = Column(DateTime(timezone=True), nullable=True)

    items = relationship(
        "OrderItem",
        back_populates="order",
        cascade="all, delete-orphan",
        order_by="OrderItem.position",
        lazy="selectin",
    )

    __table_args__ = (
        Index("idx_orders_status_created", "status", "created_at"),
    )

class OrderItem(Base, UUIDModel):
    """Snapshot of a product at the time of ordering"""

    __tablename__ = "order_items"

    order_id = Column(Uuid, ForeignKey("orders.id", ondelete="CASCADE"), nullable=False)
    position = Column(Integer, nullable=False, default=0)

    product_id = Column(Uuid, nullable=False)
    product_name = Column(String(255), nullable=False)
    product_slug = Column(String(255), nullable=False)
    product_image = Column(String(500), nullable=True)

    quantity = Column(Integer, nullable=False)
    price = Column(Numeric(10, 2), nullable=False)
    discount = Column(Numeric(10, 2), nullable=False, default=0)
    total = Column(Numeric(10, 2), nullable=False)

    variant = Column(String(255), nullable=True)
    attributes = Column(JSON, nullable=True)

    order = relationship("Order", back_populates="items")
