"""
Menu model for site navigation
Supports hierarchical menus
"""

from sqlalchemy import Column, String, Integer, Boolean, ForeignKey, Text, Index, Uuid

from .base import Base, TimestampedModel, UUIDModel

class Menu(Base, TimestampedModel, UUIDModel):
    """Navigation menu item with parent-child hierarchy"""

    __tablename__ = "menus"

    name = Column(String(100), nullable=False)
    slug = Column(String(100), unique=True, nullable=False, index=True)
    parent_id = Column(Uuid, ForeignKey("menus.id"), nullable=True)

    # Display
    order = Column(Integer, nullable=False, default=0)
    url = Column(String(500), nullable=True)
    icon = Column(String(255), nullable=True)
    description = Column(Text, nullable=True)
    type = Column(String(50), nullable=False, default="link")
    is_new_tab = Column(Boolean, nullable=False, default=False)

    # Status
    is_active = Column(Boolean, nullable=False, default=True)

    __table_args__ = (
        Index("idx_menus_parent_active", "parent_id", "is_active"),
        Index("idx_menus_order", "order"),
    )
