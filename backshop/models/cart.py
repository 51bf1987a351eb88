"""
Shopping cart model
Handles both authenticated and session-based carts
"""

from sqlalchemy import Column, String, Integer, ForeignKey, Index, CheckConstraint, DateTime, JSON, Uuid
from sqlalchemy.orm import relationship

from .base import Base, TimestampedModel, UUIDModel

class Cart(Base, TimestampedModel, UUIDModel):
    """Shopping cart keyed by session or user"""

    __tablename__ = "carts"

    # User or session
    session_id = Column(String(255), unique=True, nullable=True)
    user_id = Column(Uuid, unique=True, nullable=True)

    promo_code = Column(String(50), nullable=True)
    expires_at = Column(DateTime(timezone=True), nullable=False, index=True)

    # Optimistic concurrency token, bumped on every flush of the cart row
    version = Column(Integer, nullable=False)

    items = relationship(
        "CartItem",
        back_populates="cart",
        cascade="all, delete-orphan",
        order_by="CartItem.created_at",
        lazy="selectin",
    )

    __mapper_args__ = {"version_id_col": version}

    __table_args__ = (
        CheckConstraint("(user_id IS NOT NULL) OR (session_id IS NOT NULL)", name="check_user_or_session"),
    )

class CartItem(Base, TimestampedModel, UUIDModel):
    """Shopping cart line"""

    __tablename__ = "cart_items"

    cart_id = Column(Uuid, ForeignKey("carts.id", ondelete="CASCADE"), nullable=False)

    # Plain reference so the line survives product deletion
    product_id = Column(Uuid, nullable=False)
    quantity = Column(Integer, nullable=False, default=1)
    variant = Column(String(255), nullable=True)
    attributes = Column(JSON, nullable=True)

    cart = relationship("Cart", back_populates="items")

    __table_args__ = (
        CheckConstraint("quantity > 0", name="check_positive_cart_quantity"),
        Index("idx_cart_items_cart", "cart_id"),
    )
